"""Pydantic schemas for bundles."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bundletrack.db.models import BundleStatus
from bundletrack.variants.schemas import VariantResponse


class BundleBase(BaseModel):
    """Fields supplied when creating or modifying a bundle.

    Numeric fields accept numeric strings, as sent by the floor UI forms.
    """

    cutlength: float = Field(..., gt=0, description="Cut length in feet")
    quantity: int = Field(..., gt=0, description="Number of pieces")
    weight: float = Field(..., ge=0, description="Total weight in kg")
    vs_no: str = Field(..., min_length=1, max_length=100, description="Variant section number")
    cast_id: str | None = Field(None, max_length=100)
    po_no: str = Field("", max_length=100, description="Purchase order")
    location: int = Field(..., description="Location code")

    @field_validator("po_no")
    @classmethod
    def uppercase_po(cls, v: str) -> str:
        """Purchase orders are stored uppercase."""
        return v.strip().upper()


class BundleCreate(BundleBase):
    """Schema for creating a bundle."""

    pass


class BundleUpdate(BundleBase):
    """Schema for modifying a bundle. The serial number cannot be changed."""

    pass


class BundleResponse(BaseModel):
    """Schema for bundle response."""

    uid: str
    sr_no: str
    status: BundleStatus
    length: float
    quantity: int
    weight: float
    vs_no: str
    cast_id: str | None
    po_no: str
    location: int
    created_at: datetime | None
    modified_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class BundleDetailResponse(BundleResponse):
    """Schema for a single bundle with its variant."""

    section: VariantResponse | None = None


class RecentBundlesResponse(BaseModel):
    """Schema for the recent bundles listing."""

    recentBundles: list[BundleResponse]


class CurrentNumberResponse(BaseModel):
    """Schema for the stored bundle counter."""

    currentNumber: str


class SetNumberRequest(BaseModel):
    """Schema for overriding the bundle counter."""

    number: str | int | None = None


class SetNumberResponse(BaseModel):
    """Schema for counter override response."""

    success: bool = True
    newNumber: str
