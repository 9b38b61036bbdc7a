"""Bundle service layer."""

import logging
from collections.abc import Callable
from datetime import date

from sqlalchemy.orm import Session, joinedload

from bundletrack.bundles.schemas import (
    BundleCreate,
    BundleDetailResponse,
    BundleResponse,
    BundleUpdate,
)
from bundletrack.bundles.sequence import SequenceCounter, make_serial, parse_counter_value
from bundletrack.db.models import Bundle, BundleStatus, SoldBundle, Variant
from bundletrack.variants.service import variant_to_response

logger = logging.getLogger(__name__)


class DuplicateSerialError(ValueError):
    """A freshly formatted serial already exists in the active or sold store."""

    pass


class BundleService:
    """Service class for bundle creation, modification and lookup."""

    def __init__(
        self,
        db: Session,
        counter: SequenceCounter | None = None,
        clock: Callable[[], date] = date.today,
    ):
        """Initialize bundle service.

        Args:
            db: Database session.
            counter: Bundle number counter (defaults to the shared counter row).
            clock: Returns today's date; used to format serials.
        """
        self.db = db
        self.counter = counter or SequenceCounter(db)
        self.clock = clock

    def _serial_in_use(self, sr_no: str) -> bool:
        if self.db.query(Bundle.uid).filter(Bundle.sr_no == sr_no).first():
            return True
        return self.db.query(SoldBundle.uid).filter(SoldBundle.sr_no == sr_no).first() is not None

    def _require_variant(self, vs_no: str) -> Variant:
        variant = self.db.get(Variant, vs_no)
        if not variant:
            raise ValueError(f"Variant '{vs_no}' not found")
        return variant

    def get_bundle(self, uid: str) -> Bundle | None:
        """Get a bundle by uid.

        Args:
            uid: Bundle UUID.

        Returns:
            Bundle | None: Bundle if found.
        """
        return (
            self.db.query(Bundle)
            .options(joinedload(Bundle.variant))
            .filter(Bundle.uid == uid)
            .first()
        )

    def list_recent_bundles(self, limit: int | None = None) -> list[Bundle]:
        """List bundles, newest first.

        Args:
            limit: Optional maximum number of bundles.

        Returns:
            list[Bundle]: Bundles ordered by creation time descending.
        """
        query = self.db.query(Bundle).order_by(Bundle.created_at.desc(), Bundle.sr_no.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def create_bundle(self, data: BundleCreate) -> Bundle:
        """Create a bundle with the next serial number.

        The counter increment and the new bundle are committed together.

        Args:
            data: Bundle creation data.

        Returns:
            Bundle: Created bundle.

        Raises:
            ValueError: If the variant does not exist.
            DuplicateSerialError: If the formatted serial is already in use.
            SequenceCounterError: If the stored counter is not a number.
        """
        self._require_variant(data.vs_no)

        with self.counter.reserve() as number:
            sr_no = make_serial(number, self.clock())
            logger.info(f"Current state: {number}, new bundle: {sr_no}")
            if self._serial_in_use(sr_no):
                raise DuplicateSerialError(f"Serial '{sr_no}' is already in use")

            bundle = Bundle(
                sr_no=sr_no,
                status=BundleStatus.ACTIVE,
                length=data.cutlength,
                quantity=data.quantity,
                weight=data.weight,
                vs_no=data.vs_no,
                cast_id=data.cast_id,
                po_no=data.po_no,
                location=data.location,
            )
            self.db.add(bundle)
            self.db.commit()

        self.db.refresh(bundle)
        return bundle

    def modify_bundle(self, uid: str, data: BundleUpdate) -> Bundle | None:
        """Overwrite a bundle's measured fields.

        Args:
            uid: Bundle UUID.
            data: New field values.

        Returns:
            Bundle | None: Updated bundle if found.

        Raises:
            ValueError: If the variant does not exist.
        """
        bundle = self.get_bundle(uid)
        if not bundle:
            return None

        self._require_variant(data.vs_no)

        bundle.length = data.cutlength
        bundle.quantity = data.quantity
        bundle.weight = data.weight
        bundle.vs_no = data.vs_no
        bundle.cast_id = data.cast_id
        bundle.po_no = data.po_no
        bundle.location = data.location

        self.db.commit()
        self.db.refresh(bundle)
        return bundle

    def get_current_number(self) -> str:
        """Get the stored counter value.

        Returns:
            str: Counter value, "" if unavailable.
        """
        return self.counter.read()

    def set_current_number(self, number: str | int | None) -> str:
        """Override the stored counter value.

        Args:
            number: New value, digits only.

        Returns:
            str: Stored value.

        Raises:
            ValueError: If the value is missing or not a non-negative whole number.
        """
        text = "" if number is None else str(number).strip()
        try:
            parse_counter_value(text)
        except ValueError:
            raise ValueError("Invalid bundle number") from None

        self.counter.write(text)
        return text

    def to_response(self, bundle: Bundle) -> BundleResponse:
        """Convert a bundle to its response schema."""
        return BundleResponse.model_validate(bundle)

    def to_detail_response(self, bundle: Bundle) -> BundleDetailResponse:
        """Convert a bundle to its response schema including the variant."""
        data = BundleResponse.model_validate(bundle).model_dump()
        section = variant_to_response(bundle.variant) if bundle.variant else None
        return BundleDetailResponse(**data, section=section)


def get_bundle_service(db: Session) -> BundleService:
    """Factory function for BundleService.

    Args:
        db: Database session.

    Returns:
        BundleService: Bundle service instance.
    """
    return BundleService(db)
