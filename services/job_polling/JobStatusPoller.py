"""Job status poller.

Polls a JobStatusSource until the job completes, fails, runs out of attempts or is
cancelled. Transport and parse failures are retried with exponential backoff, a job that is
still processing is re-polled with a gentler linear backoff. Every run ends in exactly one
PollResult.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable

from shared.clients.JobStatusSource import JobStatusSource
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import PollingConfig
from shared.models.polling import PollResult, PollState
from shared.models.session import JobState, JobStatus

SleepFunc = Callable[[float], Awaitable[Any]]
StatusCallback = Callable[[JobStatus], Any]
FinishedCallback = Callable[[PollResult], Any]

RETRY_MESSAGE = "Connection problem, retrying..."
PROCESSING_MESSAGE = "Processing..."


class _PollCancelled(Exception):
    pass


class JobStatusPoller:
    """Runs a single poll loop against one status source. Create one poller per job."""

    def __init__(
        self,
        helper_config: HelperConfig,
        source: JobStatusSource,
        polling_config: PollingConfig | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._source = source
        self._config = polling_config or PollingConfig.from_helper_config(helper_config)
        self._sleep = sleep or asyncio.sleep
        self._cancel_event = asyncio.Event()
        self._state = PollState.IDLE
        self._status_message: str | None = None
        self._task: asyncio.Task | None = None

    ##########################################
    ################ GETTER ##################
    ##########################################

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def status_message(self) -> str | None:
        """Single human-readable line describing what the poller is doing right now."""
        return self._status_message

    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def get_error_delay_ms(self, attempt: int) -> float:
        """Exponential backoff after a transient failure."""
        return min(self._config.error_base_delay_ms * self._config.error_backoff_factor ** attempt, self._config.error_max_delay_ms)

    def get_processing_delay_ms(self, attempt: int) -> float:
        """Linear, capped backoff while the job is still processing."""
        return min(self._config.processing_base_delay_ms + attempt * self._config.processing_step_ms, self._config.processing_max_delay_ms)

    ##########################################
    ############### CONTROL ##################
    ##########################################

    def start(
        self,
        job_id: str,
        on_status: StatusCallback | None = None,
        on_finished: FinishedCallback | None = None,
    ) -> asyncio.Task:
        """Schedule poll() on the running event loop and return its task."""
        self._task = asyncio.create_task(self.poll(job_id, on_status=on_status, on_finished=on_finished))
        return self._task

    def cancel(self) -> None:
        """
        Stops polling. A pending backoff or in-flight request is abandoned immediately and no
        callback fires afterwards.
        """
        if not self._cancel_event.is_set():
            self.logging.debug("Cancellation requested (state: %s)", self._state.value)
        self._cancel_event.set()

    ##########################################
    ################# POLL ###################
    ##########################################

    async def poll(
        self,
        job_id: str,
        on_status: StatusCallback | None = None,
        on_finished: FinishedCallback | None = None,
    ) -> PollResult:
        """
        Polls the job until it reaches a terminal state.

        Args:
            job_id (str): The session or task id to poll.
            on_status (StatusCallback | None): Called with every successfully fetched status.
            on_finished (FinishedCallback | None): Called once with the result, unless cancelled.

        Returns:
            PollResult: The single terminal outcome. Errors are never raised; use
                PollResult.unwrap() to turn a non-successful outcome into an exception.

        Raises:
            RuntimeError: If this poller has already run.
        """
        if self._state != PollState.IDLE:
            raise RuntimeError(f"Poller already used (state: {self._state.value}). Create a new poller per job.")

        self._state = PollState.POLLING
        attempt = 0
        delays_ms: list[float] = []
        self.logging.info("Start polling job %s (max %d attempts)", job_id, self._config.max_attempts)

        while True:
            if self.is_cancelled():
                return await self._finish(job_id, PollState.CANCELLED, attempt, delays_ms, on_finished)
            if attempt >= self._config.max_attempts:
                return await self._finish(job_id, PollState.TIMED_OUT, attempt, delays_ms, on_finished)

            self.logging.debug("Polling job %s, attempt %d", job_id, attempt + 1)
            try:
                status = await self._race(self._source.do_fetch_job_status(job_id))
            except _PollCancelled:
                continue
            except Exception as e:
                self.logging.warning("Status query for job %s failed (attempt %d): %s", job_id, attempt + 1, e)
                self._status_message = RETRY_MESSAGE
                delay_ms = self.get_error_delay_ms(attempt)
            else:
                await self._notify(on_status, status)

                if status.state == JobState.FAILED:
                    return await self._finish(job_id, PollState.FAILED, attempt + 1, delays_ms, on_finished, error=status.error)

                if status.state == JobState.COMPLETED:
                    try:
                        record = await self._race(self._source.do_fetch_job_result(job_id, status))
                    except _PollCancelled:
                        continue
                    except Exception as e:
                        self.logging.warning("Result fetch for completed job %s failed (attempt %d): %s", job_id, attempt + 1, e)
                        self._status_message = RETRY_MESSAGE
                        delay_ms = self.get_error_delay_ms(attempt)
                    else:
                        return await self._finish(job_id, PollState.COMPLETED, attempt + 1, delays_ms, on_finished, record=record)
                else:
                    self._status_message = status.current_step or PROCESSING_MESSAGE
                    delay_ms = self.get_processing_delay_ms(attempt)

            attempt += 1
            if attempt >= self._config.max_attempts or self.is_cancelled():
                continue

            delays_ms.append(delay_ms)
            self.logging.debug("Waiting %.0f ms before next poll of job %s", delay_ms, job_id)
            try:
                await self._race(self._sleep(delay_ms / 1000))
            except _PollCancelled:
                continue

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _race(self, awaitable: Awaitable) -> Any:
        """Await a call, abandoning it as soon as cancel() is requested."""
        call = asyncio.ensure_future(awaitable)
        cancelled = asyncio.ensure_future(self._cancel_event.wait())
        try:
            done, _ = await asyncio.wait({call, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for pending in (call, cancelled):
                if not pending.done():
                    pending.cancel()
        if call in done:
            return call.result()
        await asyncio.gather(call, return_exceptions=True)
        raise _PollCancelled()

    async def _notify(self, callback: Callable | None, payload: Any) -> None:
        if callback is None or self.is_cancelled():
            return
        try:
            outcome = callback(payload)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            self.logging.error("Poll callback %r raised: %s", getattr(callback, "__name__", callback), e, exc_info=True)

    async def _finish(
        self,
        job_id: str,
        state: PollState,
        attempts: int,
        delays_ms: list[float],
        on_finished: FinishedCallback | None,
        record: dict | None = None,
        error: str | None = None,
    ) -> PollResult:
        self._state = state
        result = PollResult(job_id=job_id, state=state, record=record, error=error, attempts=attempts, delays_ms=delays_ms)
        self._status_message = result.message

        if state == PollState.COMPLETED:
            self.logging.info("Job %s completed after %d attempts", job_id, attempts)
        elif state == PollState.CANCELLED:
            self.logging.info("Polling of job %s cancelled after %d attempts", job_id, attempts)
            return result
        else:
            self.logging.error("Job %s ended with state '%s': %s", job_id, state.value, result.message)

        await self._notify(on_finished, result)
        return result
