"""Move service: transfers bundles from the active store to the sold store."""

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bundletrack.db.models import Bundle, BundleStatus, SoldBundle
from bundletrack.moves.schemas import MoveOutcome

logger = logging.getLogger(__name__)


def parse_move_data(move_data: str) -> list[str]:
    """Split a comma separated serial list.

    Entries are stripped, empty entries dropped and repeated serials
    collapsed to their first occurrence.

    Args:
        move_data: Raw list such as "25A5, 25A6,,25A5".

    Returns:
        list[str]: Serials in input order.
    """
    serials: list[str] = []
    seen: set[str] = set()
    for part in (move_data or "").split(","):
        sr_no = part.strip()
        if sr_no and sr_no not in seen:
            seen.add(sr_no)
            serials.append(sr_no)
    return serials


@dataclass
class MoveReport:
    """Per-serial outcomes of a move.

    Attributes:
        outcomes: Outcome for each requested serial, in request order.
    """

    outcomes: dict[str, MoveOutcome] = field(default_factory=dict)

    @property
    def errored(self) -> list[str]:
        """Serials whose move failed."""
        return [sr_no for sr_no, outcome in self.outcomes.items() if outcome == MoveOutcome.ERROR]

    def count(self, outcome: MoveOutcome) -> int:
        """Number of serials with the given outcome."""
        return sum(1 for o in self.outcomes.values() if o == outcome)


class MoveService:
    """Service class for moving bundles to the sold store."""

    def __init__(self, db: Session):
        """Initialize move service.

        Args:
            db: Database session.
        """
        self.db = db

    def move(self, serials: list[str], reference: str | None = None) -> MoveReport:
        """Move each serial to the sold store.

        Every serial is its own transaction; a failure rolls back that serial
        only and is recorded as ``error``.

        Args:
            serials: Serial numbers to move.
            reference: Sale reference stored on each sold record.

        Returns:
            MoveReport: Outcome per serial.

        Raises:
            ValueError: If no serials were given.
        """
        if not serials:
            raise ValueError("moveData must contain at least one serial number")

        report = MoveReport()
        for sr_no in serials:
            try:
                report.outcomes[sr_no] = self.move_one(sr_no, reference)
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Failed to move bundle {sr_no}: {e}")
                report.outcomes[sr_no] = MoveOutcome.ERROR

        logger.info(
            f"Move finished: {report.count(MoveOutcome.MOVED)} moved, "
            f"{report.count(MoveOutcome.ALREADY_SOLD)} already sold, "
            f"{report.count(MoveOutcome.GHOST_REMOVED)} ghosts removed, "
            f"{report.count(MoveOutcome.NOT_FOUND)} not found"
        )
        logger.info(f"Total errored bundles: {len(report.errored)}")
        if report.errored:
            logger.warning(f"Errored bundles: {report.errored}")
        return report

    def move_one(self, sr_no: str, reference: str | None = None) -> MoveOutcome:
        """Move a single serial and commit.

        Args:
            sr_no: Serial number.
            reference: Sale reference.

        Returns:
            MoveOutcome: What happened to the serial.
        """
        resident = self.db.query(Bundle).filter(Bundle.sr_no == sr_no).first()
        sold = self.db.query(SoldBundle).filter(SoldBundle.sr_no == sr_no).first()

        if sold:
            if not resident:
                logger.info(f"Bundle already moved to sold: {sr_no}")
                return MoveOutcome.ALREADY_SOLD
            self.db.delete(resident)
            self.db.commit()
            logger.warning(f"Bundle already moved to sold, deleted ghost: {sr_no}")
            return MoveOutcome.GHOST_REMOVED

        if not resident:
            logger.info(f"Bundle not found for move: {sr_no}")
            return MoveOutcome.NOT_FOUND

        self.db.add(
            SoldBundle(
                uid=resident.uid,
                sr_no=resident.sr_no,
                status=BundleStatus.SOLD,
                length=resident.length,
                quantity=resident.quantity,
                weight=resident.weight,
                vs_no=resident.vs_no,
                cast_id=resident.cast_id,
                po_no=resident.po_no,
                location=resident.location,
                reference=reference,
                created_at=resident.created_at,
                modified_at=resident.modified_at,
            )
        )
        self.db.delete(resident)
        self.db.commit()
        logger.info(f"Moved to sold: {sr_no}")
        return MoveOutcome.MOVED


def get_move_service(db: Session) -> MoveService:
    """Factory function for MoveService.

    Args:
        db: Database session.

    Returns:
        MoveService: Move service instance.
    """
    return MoveService(db)
