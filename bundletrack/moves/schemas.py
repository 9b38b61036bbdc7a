"""Pydantic schemas for moving bundles."""

from enum import Enum

from pydantic import BaseModel, Field


class MoveOutcome(str, Enum):
    """Result of moving a single serial."""

    MOVED = "moved"
    ALREADY_SOLD = "already_sold"
    GHOST_REMOVED = "ghost_removed"
    NOT_FOUND = "not_found"
    ERROR = "error"


class MoveRequest(BaseModel):
    """Schema for a move request.

    ``moveData`` is a comma separated list of serials, e.g. "25A5,25A6".
    """

    moveData: str = Field("", description="Comma separated serial numbers")
    ref: str | None = Field(None, max_length=255, description="Sale reference")


class MoveResponse(BaseModel):
    """Schema for a move response."""

    done: bool = True
    message: str | None = None
