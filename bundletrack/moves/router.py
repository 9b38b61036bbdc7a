"""Move API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from bundletrack.dependencies import DbSession
from bundletrack.moves.schemas import MoveRequest, MoveResponse
from bundletrack.moves.service import MoveService, get_move_service, parse_move_data

router = APIRouter()


def get_service(db: DbSession) -> MoveService:
    """Get move service dependency."""
    return get_move_service(db)


@router.post("/move", response_model=MoveResponse, response_model_exclude_none=True)
async def move_bundles(
    data: MoveRequest,
    service: Annotated[MoveService, Depends(get_service)],
):
    """Move bundles to the sold store.

    Unknown and already sold serials are not errors. Serials that failed
    to move are named in ``message``.

    Args:
        data: Serial list and sale reference.
        service: Move service.

    Returns:
        MoveResponse: Completion flag.

    Raises:
        HTTPException: If no serials were supplied.
    """
    try:
        report = service.move(parse_move_data(data.moveData), data.ref)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    if report.errored:
        return MoveResponse(message=f"Failed to move: {', '.join(report.errored)}")
    return MoveResponse()
