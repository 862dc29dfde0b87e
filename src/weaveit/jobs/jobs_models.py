"""Data structures for generation jobs."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class JobStatus(StrEnum):
    """Lifecycle statuses for generation_job records."""

    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobKind(StrEnum):
    VIDEO = "video"
    AUDIO = "audio"


ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.GENERATING: frozenset({JobStatus.PENDING}),
    JobStatus.COMPLETED: frozenset({JobStatus.GENERATING}),
    JobStatus.FAILED: frozenset({JobStatus.PENDING, JobStatus.GENERATING}),
}
"""Target status -> statuses a job may be in before moving there."""


@dataclass(slots=True)
class JobRecord:
    """Snapshot of a generation job."""

    job_id: str
    account_id: str
    kind: JobKind
    status: JobStatus
    title: str | None
    script_text: str | None
    error_message: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class JobStatusView:
    """Status query response assembled from the job and its artifact."""

    job_id: str
    status: JobStatus
    error_message: str | None
    created_at: datetime
    updated_at: datetime
    artifact_available: bool

    @property
    def ready(self) -> bool:
        return self.status is JobStatus.COMPLETED and self.artifact_available
