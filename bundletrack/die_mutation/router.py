"""Die mutation API routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from bundletrack.dependencies import DbSession
from bundletrack.die_mutation.schemas import (
    DeleteResponse,
    DieMutationRequest,
    DieMutationResponse,
    ReturnedBundleListResponse,
)
from bundletrack.die_mutation.service import (
    BundleStateError,
    DieMutationService,
    get_die_mutation_service,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_service(db: DbSession) -> DieMutationService:
    """Get die mutation service dependency."""
    return get_die_mutation_service(db)


@router.post("/tasks", response_model=DieMutationResponse, response_model_exclude_none=True)
async def create_tasks(
    data: DieMutationRequest,
    service: Annotated[DieMutationService, Depends(get_service)],
):
    """Take the listed bundles out of active inventory.

    Args:
        data: Serials, optional reason and notes.
        service: Die mutation service.

    Returns:
        DieMutationResponse: Per-serial results.

    Raises:
        HTTPException: If the request is invalid.
    """
    try:
        return service.mutate(data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.get("/tasks", response_model=ReturnedBundleListResponse)
async def list_tasks(
    service: Annotated[DieMutationService, Depends(get_service)],
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """List bundles that have been mutated.

    Args:
        service: Die mutation service.
        limit: Maximum number of bundles.
        offset: Number of bundles to skip.

    Returns:
        ReturnedBundleListResponse: Page of RETURNED bundles.
    """
    try:
        bundles, total = service.list_returned(limit=limit, offset=offset)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching mutated bundles: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch mutated bundles",
        )
    return ReturnedBundleListResponse(
        bundles=[service.to_response(b) for b in bundles],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.delete("/tasks/{uid}", response_model=DeleteResponse)
async def delete_task(
    uid: str,
    service: Annotated[DieMutationService, Depends(get_service)],
):
    """Permanently remove a mutated bundle.

    Args:
        uid: Bundle UUID.
        service: Die mutation service.

    Returns:
        DeleteResponse: Identifiers of the deleted bundle.

    Raises:
        HTTPException: If the bundle is missing or not RETURNED.
    """
    try:
        deleted = service.delete_returned(uid)
    except BundleStateError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": str(e), "currentStatus": e.current_status.value},
        )
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bundle not found",
        )
    return DeleteResponse(deleted=deleted)
