"""Domain-specific exceptions for the job registry."""

from ..exceptions import AppError


class JobRegistryError(AppError):
    """Base class for job registry failures."""


class InvalidTransitionError(JobRegistryError):
    """Raised when a job is moved out of a terminal or unexpected state."""

    def __init__(
        self, job_id: str, current: str, target: str, *, terminal: bool = False
    ) -> None:
        super().__init__(f"Job '{job_id}' cannot move from '{current}' to '{target}'")
        self.job_id = job_id
        self.current = current
        self.target = target
        self.terminal = terminal
