"""Label service layer."""

import logging
from pathlib import Path

from sqlalchemy.orm import Session, joinedload

from bundletrack.db.models import Bundle, Variant
from bundletrack.labels.renderer import LabelRenderer

logger = logging.getLogger(__name__)


class LabelService:
    """Service class for rendering bundle labels to the label cache."""

    def __init__(self, db: Session, renderer: LabelRenderer, cache_dir: str | Path):
        """Initialize label service.

        Args:
            db: Database session.
            renderer: Label rendering backend.
            cache_dir: Directory label images are written to.
        """
        self.db = db
        self.renderer = renderer
        self.cache_dir = Path(cache_dir)

    def get_bundle_with_variant(self, uid: str) -> tuple[Bundle, Variant] | None:
        """Get a bundle and its variant.

        Args:
            uid: Bundle UUID.

        Returns:
            tuple[Bundle, Variant] | None: Bundle and variant, None if either is missing.
        """
        bundle = (
            self.db.query(Bundle)
            .options(joinedload(Bundle.variant))
            .filter(Bundle.uid == uid)
            .first()
        )
        if not bundle or not bundle.variant:
            return None
        return bundle, bundle.variant

    def label_path(self, uid: str, layout: int) -> Path:
        """Cache path for a label: ``<uid>.png`` for layout 0, ``<uid>_alt.png`` for layout 1."""
        suffix = "" if layout == 0 else "_alt"
        return self.cache_dir / f"{uid}{suffix}.png"

    def render_label(self, uid: str, layout: int) -> Path | None:
        """Render a bundle label and write it to the label cache.

        Args:
            uid: Bundle UUID.
            layout: Label layout (0 or 1).

        Returns:
            Path | None: Written file, None if the bundle or variant is missing.

        Raises:
            ValueError: If the layout is unknown.
            LabelRenderingUnavailable: If rendering is disabled.
        """
        resolved = self.get_bundle_with_variant(uid)
        if not resolved:
            logger.info(f"No bundle or variant for label {uid}")
            return None
        bundle, variant = resolved

        png = self.renderer.render(bundle, variant, layout)
        path = self.label_path(uid, layout)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(png)
        logger.debug(f"Rendered label {path.name} for bundle {bundle.sr_no}")
        return path


def get_label_service(db: Session, renderer: LabelRenderer, cache_dir: str | Path) -> LabelService:
    """Factory function for LabelService.

    Args:
        db: Database session.
        renderer: Label rendering backend.
        cache_dir: Directory label images are written to.

    Returns:
        LabelService: Label service instance.
    """
    return LabelService(db, renderer, cache_dir)
