"""Die mutation service: takes bundles out of active inventory."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from bundletrack.bundles.schemas import BundleResponse
from bundletrack.db.models import Bundle, BundleStatus
from bundletrack.die_mutation.schemas import (
    DeletedBundle,
    DieMutationError,
    DieMutationRequest,
    DieMutationResponse,
    DieMutationResult,
    ReturnedBundleResponse,
    SectionSummary,
)

logger = logging.getLogger(__name__)

VALID_REASONS = ("defective", "lost", "damaged", "other")


class BundleStateError(ValueError):
    """Operation not allowed for the bundle's current status."""

    def __init__(self, message: str, current_status: BundleStatus):
        super().__init__(message)
        self.current_status = current_status


class DieMutationService:
    """Service class for die mutation tasks."""

    def __init__(self, db: Session):
        """Initialize die mutation service.

        Args:
            db: Database session.
        """
        self.db = db

    def mutate(self, data: DieMutationRequest) -> DieMutationResponse:
        """Mark each listed bundle as RETURNED.

        Each serial is committed on its own, so one failure does not undo
        the others.

        Args:
            data: Serials, optional reason and notes.

        Returns:
            DieMutationResponse: Per-serial results and totals.

        Raises:
            ValueError: If no serials were given or the reason is unknown.
        """
        if not data.bundles:
            raise ValueError("Invalid request: 'bundles' must be a non-empty array")
        if data.reason and data.reason not in VALID_REASONS:
            raise ValueError(f"Invalid reason. Must be one of: {', '.join(VALID_REASONS)}")

        results: list[DieMutationResult] = []
        errors: list[DieMutationError] = []
        processed = 0
        failed = 0

        for item in data.bundles:
            sr_no = str(item)
            try:
                bundle = self.db.query(Bundle).filter(Bundle.sr_no == sr_no).first()
                if not bundle:
                    errors.append(DieMutationError(sr_no=sr_no, error="Bundle not found"))
                    results.append(DieMutationResult(sr_no=sr_no, status="not_found"))
                    failed += 1
                    continue

                bundle.status = BundleStatus.RETURNED
                self.db.commit()
                results.append(DieMutationResult(sr_no=sr_no, status="mutated", uid=bundle.uid))
                processed += 1
                logger.info(
                    f"Bundle {sr_no} mutated. Reason: {data.reason or 'not specified'}, "
                    f"Notes: {data.notes or 'none'}"
                )
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error processing bundle {sr_no}: {e}")
                errors.append(DieMutationError(sr_no=sr_no, error=str(e)))
                results.append(DieMutationResult(sr_no=sr_no, status="error", error=str(e)))
                failed += 1

        return DieMutationResponse(
            success=failed == 0,
            processed=processed,
            failed=failed,
            results=results,
            errors=errors or None,
        )

    def list_returned(self, limit: int = 100, offset: int = 0) -> tuple[list[Bundle], int]:
        """List RETURNED bundles, most recently modified first.

        Args:
            limit: Maximum number of bundles.
            offset: Number of bundles to skip.

        Returns:
            tuple[list[Bundle], int]: Page of bundles and total count.
        """
        query = self.db.query(Bundle).filter(Bundle.status == BundleStatus.RETURNED)
        total = query.count()
        bundles = (
            query.options(joinedload(Bundle.variant))
            .order_by(Bundle.modified_at.desc(), Bundle.sr_no.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return bundles, total

    def to_response(self, bundle: Bundle) -> ReturnedBundleResponse:
        """Convert a returned bundle to its response schema."""
        data = BundleResponse.model_validate(bundle).model_dump()
        section = SectionSummary.model_validate(bundle.variant) if bundle.variant else None
        return ReturnedBundleResponse(**data, section=section)

    def delete_returned(self, uid: str) -> DeletedBundle | None:
        """Permanently delete a RETURNED bundle.

        Args:
            uid: Bundle UUID.

        Returns:
            DeletedBundle | None: Identifiers of the deleted bundle, None if not found.

        Raises:
            BundleStateError: If the bundle is not RETURNED.
        """
        bundle = self.db.get(Bundle, uid)
        if not bundle:
            return None
        if bundle.status != BundleStatus.RETURNED:
            raise BundleStateError(
                "Can only delete bundles with RETURNED status",
                current_status=bundle.status,
            )

        deleted = DeletedBundle(uid=bundle.uid, sr_no=bundle.sr_no)
        self.db.delete(bundle)
        self.db.commit()
        logger.info(f"Permanently deleted bundle {deleted.sr_no} ({deleted.uid})")
        return deleted


def get_die_mutation_service(db: Session) -> DieMutationService:
    """Factory function for DieMutationService.

    Args:
        db: Database session.

    Returns:
        DieMutationService: Die mutation service instance.
    """
    return DieMutationService(db)
