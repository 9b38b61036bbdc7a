"""Pydantic schemas for variants."""

from pydantic import BaseModel, ConfigDict


class VariantSummary(BaseModel):
    """Schema for a variant in the variant listing."""

    s_no: str
    series: str
    range: str


class VariantResponse(BaseModel):
    """Schema for a full variant."""

    s_no: str
    name: str
    series: str
    print_series: str
    breadth: float | None = None
    length: float | None = None
    thickness: float | None = None
    leg: float | None = None
    range: str

    model_config = ConfigDict(from_attributes=True)


class VariantListResponse(BaseModel):
    """Schema for the variant listing."""

    variants: list[VariantSummary]
