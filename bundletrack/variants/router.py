"""Variant API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from bundletrack.dependencies import DbSession
from bundletrack.variants.schemas import VariantListResponse, VariantResponse
from bundletrack.variants.service import VariantService, get_variant_service, variant_to_response

router = APIRouter()


def get_service(db: DbSession) -> VariantService:
    """Get variant service dependency."""
    return get_variant_service(db)


@router.get("/all", response_model=VariantListResponse)
async def list_variants(
    service: Annotated[VariantService, Depends(get_service)],
):
    """List all variants.

    Ranges are normalized so every entry parses as ``{"start", "end"}`` JSON.

    Args:
        service: Variant service.

    Returns:
        VariantListResponse: Variants.
    """
    return VariantListResponse(variants=service.list_variants())


@router.get("/{s_no}", response_model=VariantResponse)
async def get_variant(
    s_no: str,
    service: Annotated[VariantService, Depends(get_service)],
):
    """Get a variant by section number.

    Args:
        s_no: Section number.
        service: Variant service.

    Returns:
        VariantResponse: Variant details.

    Raises:
        HTTPException: If variant not found.
    """
    variant = service.get_variant(s_no)
    if not variant:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Variant not found",
        )
    return variant_to_response(variant)
