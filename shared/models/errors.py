"""Exception types raised across clients, poller and services."""


class RecordNotFoundError(LookupError):
    """Raised when a session or record that must exist is missing from the store."""

    def __init__(self, session_id: str, what: str = "record") -> None:
        super().__init__(f"No {what} found for session '{session_id}'.")
        self.session_id = session_id
        self.what = what


class PollError(Exception):
    """Base class for terminal, non-successful poll outcomes."""

    def __init__(self, job_id: str, message: str) -> None:
        super().__init__(message)
        self.job_id = job_id


class JobFailedError(PollError):
    """The backend reported the job as failed. Never retried."""

    def __init__(self, job_id: str, reason: str | None) -> None:
        super().__init__(job_id, f"processing failed: {reason or 'Unknown error'}")
        self.reason = reason


class JobTimeoutError(PollError):
    """The poller gave up after reaching its attempt limit."""

    def __init__(self, job_id: str, attempts: int) -> None:
        super().__init__(job_id, f"timed out after {attempts} attempts")
        self.attempts = attempts


class JobCancelledError(PollError):
    def __init__(self, job_id: str) -> None:
        super().__init__(job_id, "polling cancelled")
