"""Pydantic models describing the lifecycle and outcome of a poll run."""

from enum import Enum

from pydantic import BaseModel, Field

from shared.models.errors import JobCancelledError, JobFailedError, JobTimeoutError, PollError


class PollState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self not in (PollState.IDLE, PollState.POLLING)


class PollResult(BaseModel):
    """
    The single terminal outcome of a poll run.

    Attributes:
        job_id:    The polled session or task id.
        state:     One of the terminal poll states.
        record:    The fetched final payload, only set when state is completed.
        error:     Backend-supplied failure reason, only set when state is failed.
        attempts:  Attempt counter value at termination.
        delays_ms: Backoff delays that were actually waited, in order.
    """

    job_id: str
    state: PollState
    record: dict | None = None
    error: str | None = None
    attempts: int = 0
    delays_ms: list[float] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state == PollState.COMPLETED

    def to_error(self) -> PollError | None:
        """Return the exception matching a non-successful outcome, None on completion."""
        if self.state == PollState.FAILED:
            return JobFailedError(self.job_id, self.error)
        if self.state == PollState.TIMED_OUT:
            return JobTimeoutError(self.job_id, self.attempts)
        if self.state == PollState.CANCELLED:
            return JobCancelledError(self.job_id)
        return None

    @property
    def message(self) -> str:
        """Human-readable, user-facing description of the outcome."""
        error = self.to_error()
        return str(error) if error else "processing complete"

    def unwrap(self) -> dict:
        """Return the final record or raise the PollError for the outcome.

        Raises:
            JobFailedError: If the backend reported failure.
            JobTimeoutError: If the attempt limit was reached.
            JobCancelledError: If polling was cancelled.
        """
        error = self.to_error()
        if error is not None:
            raise error
        return self.record or {}
