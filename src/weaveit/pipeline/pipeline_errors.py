"""Domain-specific exceptions for the generation pipeline."""

from ..exceptions import AppError


class PipelineError(AppError):
    """Base class for submission failures."""


class InvalidInputError(PipelineError):
    """Raised when a submission is rejected before any state is touched."""


class InsufficientCreditError(PipelineError):
    """Raised when the account cannot cover the job cost; no job is created."""

    def __init__(self, account_id: str, required: int) -> None:
        super().__init__(f"Account '{account_id}' needs {required} credit(s)")
        self.account_id = account_id
        self.required = required


class PipelineStageError(PipelineError):
    """Raised after a job was marked failed because a stage broke."""

    def __init__(self, job_id: str, stage: str, message: str) -> None:
        super().__init__(f"Job '{job_id}' failed during {stage}: {message}")
        self.job_id = job_id
        self.stage = stage
        self.message = message


class ProviderExecutionError(PipelineError):
    """Raised when an external collaborator fails to produce a result."""
