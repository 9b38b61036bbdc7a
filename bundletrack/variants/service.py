"""Variant service layer."""

import json
import logging

from sqlalchemy.orm import Session

from bundletrack.db.models import DEFAULT_RANGE, Variant
from bundletrack.variants.schemas import VariantResponse, VariantSummary

logger = logging.getLogger(__name__)


def normalize_range(value: str | None, variant_id: str = "") -> str:
    """Return a range string that is always safe to parse.

    Clients parse ``range`` as JSON and read ``start``/``end``. Stored values
    that are empty, malformed, or missing either key are replaced by
    DEFAULT_RANGE; valid values are returned untouched.

    Args:
        value: Stored range string.
        variant_id: Variant section number, for logging.

    Returns:
        str: The stored value or DEFAULT_RANGE.
    """
    if not value or not value.strip():
        logger.info(f"Normalizing empty range for variant {variant_id} - using default range")
        return DEFAULT_RANGE

    try:
        parsed = json.loads(value)
    except (ValueError, RecursionError):
        logger.info(
            f"Normalizing invalid range for variant {variant_id} - using default range. "
            f'Original value: "{value}"'
        )
        return DEFAULT_RANGE

    if not isinstance(parsed, dict) or "start" not in parsed or "end" not in parsed:
        logger.info(
            f"Normalizing incomplete range for variant {variant_id} - using default range. "
            f'Original value: "{value}"'
        )
        return DEFAULT_RANGE

    return value


def variant_to_response(variant: Variant) -> VariantResponse:
    """Convert a variant to its response schema with a normalized range."""
    return VariantResponse(
        s_no=variant.s_no,
        name=variant.name,
        series=variant.series,
        print_series=variant.print_series,
        breadth=variant.breadth,
        length=variant.length,
        thickness=variant.thickness,
        leg=variant.leg,
        range=normalize_range(variant.range, variant.s_no),
    )


class VariantService:
    """Service class for variant lookups."""

    def __init__(self, db: Session):
        """Initialize variant service.

        Args:
            db: Database session.
        """
        self.db = db

    def get_variant(self, s_no: str) -> Variant | None:
        """Get a variant by section number.

        Args:
            s_no: Section number.

        Returns:
            Variant | None: Variant if found.
        """
        return self.db.get(Variant, s_no)

    def list_variants(self) -> list[VariantSummary]:
        """List all variants with normalized ranges.

        Returns:
            list[VariantSummary]: Section number, series and range of each variant.
        """
        variants = self.db.query(Variant).order_by(Variant.s_no).all()
        return [
            VariantSummary(
                s_no=v.s_no,
                series=v.series,
                range=normalize_range(v.range, v.s_no),
            )
            for v in variants
        ]


def get_variant_service(db: Session) -> VariantService:
    """Factory function for VariantService.

    Args:
        db: Database session.

    Returns:
        VariantService: Variant service instance.
    """
    return VariantService(db)
