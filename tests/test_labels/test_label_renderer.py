"""Tests for label rendering and the label cache."""

import io
from uuid import uuid4

import pytest
from PIL import Image
from sqlalchemy.orm import Session

from bundletrack.config import Settings
from bundletrack.db.models import Bundle, Variant
from bundletrack.labels.renderer import (
    LABEL_HEIGHT,
    LABEL_WIDTH,
    DisabledLabelRenderer,
    LabelRenderer,
    LabelRenderingUnavailable,
    PillowLabelRenderer,
    get_label_renderer,
    make_qr_image,
)
from bundletrack.labels.service import LabelService


@pytest.fixture
def renderer(tmp_path) -> PillowLabelRenderer:
    """Create a renderer without a logo file."""
    return PillowLabelRenderer(tmp_path / "missing-logo.png", fallback_title="BUNDLETRACK")


class TestQrImage:
    """Tests for QR code generation."""

    def test_minimum_version(self):
        """Test short data uses a version 4 symbol: (33 + 2) modules of 5 px."""
        assert make_qr_image("25A1").size == (175, 175)

    def test_grows_to_fit_uid(self):
        """Test a full uuid grows the symbol in whole modules."""
        width, height = make_qr_image(str(uuid4())).size

        assert width == height
        assert width > 175
        assert width % 5 == 0


class TestPillowLabelRenderer:
    """Tests for the Pillow renderer."""

    def test_is_label_renderer(self, renderer: PillowLabelRenderer):
        """Test the renderer satisfies the renderer protocol."""
        assert isinstance(renderer, LabelRenderer)

    @pytest.mark.parametrize("layout", [0, 1])
    def test_render_size(self, renderer, test_bundle: Bundle, test_variant: Variant, layout):
        """Test labels are 609x812 PNGs."""
        png = renderer.render(test_bundle, test_variant, layout)

        image = Image.open(io.BytesIO(png))
        assert image.format == "PNG"
        assert image.size == (LABEL_WIDTH, LABEL_HEIGHT)

    def test_render_is_deterministic(self, renderer, test_bundle: Bundle, test_variant: Variant):
        """Test the same bundle renders to identical bytes."""
        first = renderer.render(test_bundle, test_variant, 1)
        second = renderer.render(test_bundle, test_variant, 1)

        assert first == second

    def test_layouts_differ(self, renderer, test_bundle: Bundle, test_variant: Variant):
        """Test the two layouts are distinct images."""
        assert renderer.render(test_bundle, test_variant, 0) != renderer.render(
            test_bundle, test_variant, 1
        )

    def test_unknown_layout(self, renderer, test_bundle: Bundle, test_variant: Variant):
        """Test an unknown layout is rejected."""
        with pytest.raises(ValueError):
            renderer.render(test_bundle, test_variant, 2)

    def test_long_name_stays_in_column(
        self, renderer, test_bundle: Bundle, test_variant: Variant
    ):
        """Test an overlong item name is squeezed inside its row."""
        test_variant.name = "EXTRA WIDE STRUCTURAL CHANNEL SECTION " * 4

        image = Image.open(io.BytesIO(renderer.render(test_bundle, test_variant, 1))).convert("RGB")

        qr_height = make_qr_image(test_bundle.uid).size[1]
        row_middle = qr_height + 21 + 60
        assert image.getpixel((LABEL_WIDTH - 12, row_middle)) == (255, 255, 255)

    def test_border_and_grid(self, renderer, test_bundle: Bundle, test_variant: Variant):
        """Test the outer border is black and the inset is white."""
        image = Image.open(io.BytesIO(renderer.render(test_bundle, test_variant, 0))).convert("RGB")

        assert image.getpixel((0, 0)) == (0, 0, 0)
        assert image.getpixel((LABEL_WIDTH - 1, LABEL_HEIGHT - 1)) == (0, 0, 0)
        assert image.getpixel((4, LABEL_HEIGHT // 2)) == (255, 255, 255)


class TestRendererSelection:
    """Tests for choosing a renderer from settings."""

    def test_pillow_by_default(self):
        """Test the Pillow renderer is the default."""
        assert isinstance(get_label_renderer(Settings()), PillowLabelRenderer)

    def test_disabled(self, test_bundle: Bundle, test_variant: Variant):
        """Test the disabled renderer refuses to render."""
        renderer = get_label_renderer(Settings(label_renderer="disabled"))

        assert isinstance(renderer, DisabledLabelRenderer)
        with pytest.raises(LabelRenderingUnavailable):
            renderer.render(test_bundle, test_variant, 0)


class TestLabelService:
    """Tests for writing labels to the cache."""

    def test_file_names(self, db: Session, renderer, test_bundle: Bundle, tmp_path):
        """Test layout 0 writes <uid>.png and layout 1 writes <uid>_alt.png."""
        service = LabelService(db, renderer, tmp_path / "cache")

        compact = service.render_label(test_bundle.uid, 0)
        tall = service.render_label(test_bundle.uid, 1)

        assert compact == tmp_path / "cache" / f"{test_bundle.uid}.png"
        assert tall == tmp_path / "cache" / f"{test_bundle.uid}_alt.png"
        assert compact.read_bytes() != tall.read_bytes()

    def test_missing_bundle(self, db: Session, renderer, tmp_path):
        """Test an unknown bundle renders nothing."""
        service = LabelService(db, renderer, tmp_path / "cache")

        assert service.render_label("00000000-0000-0000-0000-000000000000", 0) is None
        assert not (tmp_path / "cache").exists()
