"""Pydantic schemas for job status responses."""

from datetime import datetime

from pydantic import BaseModel


class JobStatusResponse(BaseModel):
    job_id: str
    status: str
    ready: bool
    error: str | None
    created_at: datetime
    updated_at: datetime
    artifact_available: bool
