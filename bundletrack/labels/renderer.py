"""Bundle label rendering.

Labels are 609x812 px PNGs: a QR code of the bundle uid and a header box
with the serial on top, and a five row grid of bundle details below.
Layout 0 adds the company logo above a compact serial box; layout 1 uses a
single tall serial box.
"""

import io
import logging
import math
from functools import lru_cache
from pathlib import Path
from typing import Protocol, runtime_checkable

import qrcode
from PIL import Image, ImageDraw, ImageFont
from qrcode.constants import ERROR_CORRECT_H

from bundletrack.config import Settings
from bundletrack.db.models import Bundle, Variant
from bundletrack.labels.formatting import format_fixed, format_number, format_significant

logger = logging.getLogger(__name__)

LABEL_WIDTH = 609
LABEL_HEIGHT = 812
LAYOUTS = (0, 1)

VALUE_FONT_PATHS = (
    "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/Library/Fonts/Arial Rounded Bold.ttf",
    "C:/Windows/Fonts/ARLRDBD.TTF",
)
CAPTION_FONT_PATHS = (
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "C:/Windows/Fonts/consola.ttf",
)


class LabelRenderingUnavailable(RuntimeError):
    """No label rendering backend is available in this deployment."""

    pass


@runtime_checkable
class LabelRenderer(Protocol):
    """Protocol for label rendering backends."""

    def render(self, bundle: Bundle, variant: Variant, layout: int) -> bytes:
        """Render a label.

        Args:
            bundle: Bundle to label.
            variant: The bundle's variant.
            layout: 0 for the logo layout, 1 for the tall serial layout.

        Returns:
            bytes: PNG image data.

        Raises:
            ValueError: If the layout is unknown.
            LabelRenderingUnavailable: If the backend cannot render.
        """
        ...


@lru_cache(maxsize=32)
def load_font(paths: tuple[str, ...], size: int) -> ImageFont.FreeTypeFont:
    """Load the first available TrueType font, falling back to Pillow's bundled font.

    Args:
        paths: Candidate font files.
        size: Font size in pixels.

    Returns:
        ImageFont.FreeTypeFont: Loaded font.
    """
    for path in paths:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def make_qr_image(data: str) -> Image.Image:
    """Render a QR code at error correction H, 5 px modules and a 1 module border.

    Version 4 is the smallest symbol used; longer data grows the symbol.
    """
    qr = qrcode.QRCode(
        version=4,
        error_correction=ERROR_CORRECT_H,
        box_size=5,
        border=1,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").convert("RGB")


def _fill_rect(draw: ImageDraw.ImageDraw, x: float, y: float, w: float, h: float, fill: str):
    draw.rectangle(
        [round(x), round(y), round(x + w) - 1, round(y + h) - 1],
        fill=fill,
    )


class PillowLabelRenderer:
    """Draws labels with Pillow.

    Attributes:
        logo_path: Logo image for layout 0.
        fallback_title: Text drawn in place of a missing logo.
    """

    width = LABEL_WIDTH
    height = LABEL_HEIGHT

    def __init__(self, logo_path: str | Path | None = None, fallback_title: str = ""):
        """Initialize the renderer.

        Args:
            logo_path: Logo image for layout 0.
            fallback_title: Text drawn in place of a missing logo.
        """
        self.logo_path = Path(logo_path) if logo_path else None
        self.fallback_title = fallback_title

    def _load_logo(self, size: tuple[int, int]) -> Image.Image | None:
        if not self.logo_path or not self.logo_path.is_file():
            logger.warning(f"Label logo not found at {self.logo_path}, drawing title instead")
            return None
        with Image.open(self.logo_path) as logo:
            return logo.convert("RGBA").resize(size, Image.Resampling.LANCZOS)

    def _draw_text(
        self,
        canvas: Image.Image,
        draw: ImageDraw.ImageDraw,
        xy: tuple[float, float],
        text: str,
        font: ImageFont.FreeTypeFont,
        max_width: float | None = None,
    ) -> None:
        """Draw text with its baseline at ``xy``, squeezed to ``max_width`` if wider."""
        x, y = xy
        text_width = draw.textlength(text, font=font)
        if max_width is None or text_width <= max_width:
            draw.text((x, y), text, fill="black", font=font, anchor="ls")
            return

        ascent, descent = font.getmetrics()
        strip = Image.new("L", (math.ceil(text_width), ascent + descent), 0)
        ImageDraw.Draw(strip).text((0, ascent), text, fill=255, font=font, anchor="ls")
        strip = strip.resize((max(1, int(max_width)), strip.height), Image.Resampling.LANCZOS)
        canvas.paste("black", (round(x), round(y) - ascent), strip)

    def render(self, bundle: Bundle, variant: Variant, layout: int) -> bytes:
        if layout not in LAYOUTS:
            raise ValueError(f"Unknown label layout: {layout}")

        w, h = self.width, self.height
        canvas = Image.new("RGB", (w, h), "black")
        draw = ImageDraw.Draw(canvas)
        _fill_rect(draw, 3, 3, w - 6, h - 6, "white")

        qr = make_qr_image(bundle.uid)
        qw, qh = qr.size
        _fill_rect(draw, 6, 6, qw + 6, qh + 6, "black")
        canvas.paste(qr, (9, 9))

        stamp = bundle.modified_at or bundle.created_at
        serial = f"#{stamp.year - 2000}-{bundle.sr_no}" if stamp else f"#{bundle.sr_no}"

        # Header box ends 6 px before the right edge whatever the QR size
        box_x = 21 + qw
        box_w = w - 6 - box_x
        text_max = box_w - 62

        if layout == 0:
            logo_size = (box_w - 32, 80)
            logo = self._load_logo(logo_size)
            if logo is not None:
                canvas.paste(logo, (box_x, 12), logo)
            elif self.fallback_title:
                self._draw_text(
                    canvas, draw, (box_x, 72), self.fallback_title,
                    load_font(VALUE_FONT_PATHS, 50), logo_size[0],
                )

            _fill_rect(draw, box_x, 107, box_w, 80, "black")
            _fill_rect(draw, qw + 24, 110, box_w - 6, 74, "white")
            header_font = load_font(VALUE_FONT_PATHS, 50)
            self._draw_text(canvas, draw, (qw + 37, 175), serial, header_font, text_max)
        else:
            _fill_rect(draw, box_x, 9, box_w, 178, "black")
            _fill_rect(draw, qw + 24, 12, box_w - 6, 172, "white")
            header_font = load_font(VALUE_FONT_PATHS, 65)
            self._draw_text(canvas, draw, (qw + 37, 145), serial, header_font, text_max)

        # Detail grid
        _fill_rect(draw, 6, qh + 18, w - 12, h - qh - 42, "black")
        row_h = (h - qh - 33) / 5 - 6
        pitch = row_h + 3
        col_w = (w - 18) / 2 - 1.5
        right_col_x = 9 + (w - 18) / 2 + 1.5
        top = qh + 21

        _fill_rect(draw, 9, top, w - 18, row_h, "white")
        for row in range(1, 5):
            _fill_rect(draw, 9, top + pitch * row, col_w, row_h, "white")
            _fill_rect(draw, right_col_x, top + pitch * row, col_w, row_h, "white")

        weight_each = bundle.weight / bundle.quantity
        weight_12ft = weight_each / bundle.length * 12

        caption_font = load_font(CAPTION_FONT_PATHS, 18)
        left_caption_x = 15
        right_caption_x = col_w + 18
        captions = [
            ("ITEM NAME", None),
            ("SECTION NUMBER", "SERIES"),
            ("QUANTITY", "WEIGHT PER 12ft"),
            ("CUT LENGTH", f"WEIGHT PER {format_number(bundle.length)}ft"),
            ("TOTAL WEIGHT", None),
        ]
        for row, (left, right) in enumerate(captions):
            y = qh + 40 + pitch * row
            self._draw_text(canvas, draw, (left_caption_x, y), left, caption_font)
            if right:
                self._draw_text(canvas, draw, (right_caption_x, y), right, caption_font)

        value_font = load_font(VALUE_FONT_PATHS, 50)
        left_x = w / 4 - 137.5
        right_x = w * 0.75 + 3 - 147.5
        base = qh + 40

        # (x, baseline, text, max width)
        values = [
            (w / 2 - 14 - 275, base + 65, variant.name, 550),
            (left_x, base + 65 + pitch, variant.s_no, 275),
            (right_x, base + 65 + pitch, variant.print_series, 290),
            (left_x, base + 70 + pitch * 2, f"{bundle.quantity} pcs", 275),
            (right_x, base + 70 + pitch * 2, f"{format_significant(weight_12ft)} kg", 285),
            (left_x, base + 70 + pitch * 3, f"{format_fixed(bundle.length)} ft", 275),
            (right_x, base + 70 + pitch * 3, f"{format_significant(weight_each)} kg", 285),
            (left_x, base + 73 + pitch * 4, f"{format_fixed(bundle.weight)} kg", 275),
        ]
        for x, y, text, max_width in values:
            self._draw_text(canvas, draw, (x, y), text, value_font, max_width)

        buffer = io.BytesIO()
        canvas.save(buffer, format="PNG")
        return buffer.getvalue()


class DisabledLabelRenderer:
    """Renderer for deployments without label rendering."""

    def render(self, bundle: Bundle, variant: Variant, layout: int) -> bytes:
        raise LabelRenderingUnavailable("Label rendering is disabled")


def get_label_renderer(settings: Settings) -> LabelRenderer:
    """Factory function that returns the configured label renderer.

    Args:
        settings: Application settings.

    Returns:
        LabelRenderer: Renderer instance.
    """
    if settings.label_renderer == "disabled":
        logger.info("Label rendering disabled")
        return DisabledLabelRenderer()
    return PillowLabelRenderer(settings.label_logo_path, fallback_title=settings.app_name.upper())

