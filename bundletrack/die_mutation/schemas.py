"""Pydantic schemas for die mutation tasks."""

from pydantic import BaseModel, ConfigDict, Field

from bundletrack.bundles.schemas import BundleResponse


class DieMutationRequest(BaseModel):
    """Schema for a die mutation request."""

    bundles: list[str | int] = Field(default_factory=list, description="Serial numbers")
    reason: str | None = Field(None, description="defective, lost, damaged or other")
    notes: str | None = None


class DieMutationResult(BaseModel):
    """Outcome for one serial."""

    sr_no: str
    status: str
    uid: str | None = None
    error: str | None = None


class DieMutationError(BaseModel):
    """Error entry for one serial."""

    sr_no: str
    error: str


class DieMutationResponse(BaseModel):
    """Schema for a die mutation response."""

    success: bool
    processed: int
    failed: int
    results: list[DieMutationResult]
    errors: list[DieMutationError] | None = None


class SectionSummary(BaseModel):
    """Variant fields shown with a returned bundle."""

    s_no: str
    name: str
    series: str

    model_config = ConfigDict(from_attributes=True)


class ReturnedBundleResponse(BundleResponse):
    """Schema for a returned bundle with its variant summary."""

    section: SectionSummary | None = None


class ReturnedBundleListResponse(BaseModel):
    """Schema for a page of returned bundles."""

    bundles: list[ReturnedBundleResponse]
    total: int
    limit: int
    offset: int


class DeletedBundle(BaseModel):
    """Identifiers of a deleted bundle."""

    uid: str
    sr_no: str


class DeleteResponse(BaseModel):
    """Schema for a permanent delete response."""

    success: bool = True
    deleted: DeletedBundle
