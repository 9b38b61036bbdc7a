"""Pydantic schemas for labels and print jobs."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from bundletrack.db.models import PrintJobStatus


class PrintResponse(BaseModel):
    """Schema for a print request response.

    ``print`` is 1 when a print job was queued and 0 when the bundle or its
    variant does not exist.
    """

    print: int
    job_id: str | None = None


class PrintJobResponse(BaseModel):
    """Schema for print job status."""

    id: str
    bundle_uid: str
    layout: int
    payload: dict
    status: PrintJobStatus
    attempts: int
    error_message: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
