"""Bundle API routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from bundletrack.bundles.schemas import (
    BundleCreate,
    BundleDetailResponse,
    BundleResponse,
    BundleUpdate,
    CurrentNumberResponse,
    RecentBundlesResponse,
    SetNumberRequest,
    SetNumberResponse,
)
from bundletrack.bundles.sequence import SequenceCounterError
from bundletrack.bundles.service import BundleService, DuplicateSerialError, get_bundle_service
from bundletrack.dependencies import DbSession

logger = logging.getLogger(__name__)

router = APIRouter()


def get_service(db: DbSession) -> BundleService:
    """Get bundle service dependency."""
    return get_bundle_service(db)


@router.get("/current-number", response_model=CurrentNumberResponse)
async def get_current_number(
    service: Annotated[BundleService, Depends(get_service)],
):
    """Get the stored bundle counter.

    Args:
        service: Bundle service.

    Returns:
        CurrentNumberResponse: Counter value, empty when unavailable.
    """
    return CurrentNumberResponse(currentNumber=service.get_current_number())


@router.post("/set-number", response_model=SetNumberResponse)
async def set_current_number(
    data: SetNumberRequest,
    service: Annotated[BundleService, Depends(get_service)],
):
    """Override the bundle counter.

    Args:
        data: New counter value.
        service: Bundle service.

    Returns:
        SetNumberResponse: Stored value.

    Raises:
        HTTPException: If the value is not a whole number.
    """
    try:
        new_number = service.set_current_number(data.number)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to update bundle number: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update bundle number",
        )
    return SetNumberResponse(newNumber=new_number)


@router.post("/create", response_model=BundleResponse, status_code=status.HTTP_201_CREATED)
async def create_bundle(
    data: BundleCreate,
    service: Annotated[BundleService, Depends(get_service)],
):
    """Create a bundle with the next serial number.

    Args:
        data: Bundle data.
        service: Bundle service.

    Returns:
        BundleResponse: Created bundle.

    Raises:
        HTTPException: If validation fails or a serial cannot be allocated.
    """
    try:
        bundle = service.create_bundle(data)
    except DuplicateSerialError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except SequenceCounterError as e:
        logger.error(f"Error creating bundle: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    except SQLAlchemyError as e:
        logger.error(f"Error creating bundle: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error creating bundle",
        )
    return service.to_response(bundle)


@router.get("/recents", response_model=RecentBundlesResponse)
async def list_recent_bundles(
    service: Annotated[BundleService, Depends(get_service)],
):
    """List bundles newest first.

    Args:
        service: Bundle service.

    Returns:
        RecentBundlesResponse: Bundles.
    """
    bundles = service.list_recent_bundles()
    return RecentBundlesResponse(recentBundles=[service.to_response(b) for b in bundles])


@router.put("/modify/{uid}", response_model=BundleResponse)
async def modify_bundle(
    uid: str,
    data: BundleUpdate,
    service: Annotated[BundleService, Depends(get_service)],
):
    """Modify a bundle's measured fields.

    Args:
        uid: Bundle UUID.
        data: New field values.
        service: Bundle service.

    Returns:
        BundleResponse: Updated bundle.

    Raises:
        HTTPException: If bundle not found or validation fails.
    """
    try:
        bundle = service.modify_bundle(uid, data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    if not bundle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bundle not found",
        )
    return service.to_response(bundle)


@router.get("/{uid}", response_model=BundleDetailResponse)
async def get_bundle(
    uid: str,
    service: Annotated[BundleService, Depends(get_service)],
):
    """Get a bundle with its variant.

    Args:
        uid: Bundle UUID.
        service: Bundle service.

    Returns:
        BundleDetailResponse: Bundle details.

    Raises:
        HTTPException: If bundle not found.
    """
    bundle = service.get_bundle(uid)
    if not bundle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bundle not found",
        )
    return service.to_detail_response(bundle)
