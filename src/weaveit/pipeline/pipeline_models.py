"""Data structures for pipeline submissions."""

from dataclasses import dataclass

from ..jobs.jobs_models import JobKind, JobStatus


@dataclass(slots=True)
class SubmissionRequest:
    account_id: str
    script: str
    kind: JobKind | str = JobKind.VIDEO
    title: str | None = None


@dataclass(slots=True)
class SubmissionResult:
    job_id: str
    artifact_id: str
    status: JobStatus
    credits_deducted: int
    remaining_credits: int


class PipelineStage:
    """Stage names recorded when a job fails."""

    CREATE_JOB = "create_job"
    START = "start"
    ENHANCE = "enhance"
    SYNTHESIZE = "synthesize"
    RENDER = "render"
    STORE = "store"
    COMPLETE = "complete"
