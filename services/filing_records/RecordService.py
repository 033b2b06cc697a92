"""Record service.

Glue for the session lifecycle: create a session, follow its progress, wait for the
extracted record, hand it out as Domain Model, persist edits back as Wire Format and
send the stored filing to the backend validator.
"""

from datetime import datetime

from services.filing_transform.transform import (
    TransformOptions,
    count_filled_fields,
    extract_references,
    to_domain,
    to_tagged,
    to_wire,
    unwrap_wire_payload,
)
from services.job_polling.JobStatusPoller import JobStatusPoller, StatusCallback
from services.job_polling.progress import resolve_progress
from shared.clients.backend.BackendClientInterface import BackendClientInterface
from shared.clients.store.StoreClientInterface import StoreClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import PollingConfig, ProgressConfig
from shared.models.errors import RecordNotFoundError
from shared.models.polling import PollResult
from shared.models.session import FilingRecord, SessionProgress, SessionStage, UpsertResult
from shared.models.validation import ValidationReport


class RecordService:
    """Orchestrates the record store, the poller, the transform layer and the validator."""

    def __init__(
        self,
        helper_config: HelperConfig,
        store_client: StoreClientInterface,
        backend_client: BackendClientInterface,
        polling_config: PollingConfig | None = None,
        progress_config: ProgressConfig | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self._store = store_client
        self._backend = backend_client
        self._polling_config = polling_config or PollingConfig.from_helper_config(helper_config)
        self._progress_config = progress_config or ProgressConfig.from_helper_config(helper_config)
        self._transform_options = TransformOptions(logger=self.logging)

    ##########################################
    ############### SESSIONS #################
    ##########################################

    async def do_create_session(self, session_id: str | None = None) -> str:
        return await self._store.do_create_session(session_id)

    async def do_update_stage(self, session_id: str, stage: SessionStage | str, current_step: str | None = None) -> str | None:
        return await self._store.do_update_session_stage(session_id, stage, current_step)

    async def do_get_progress(self, session_id: str, now: datetime | None = None) -> SessionProgress:
        """Status of a session with the progress to display.

        Raises:
            RecordNotFoundError: If the session does not exist.
        """
        status = await self._store.do_fetch_status(session_id)
        estimate = resolve_progress(status, now=now, config=self._progress_config)
        return SessionProgress(
            session_id=status.session_id,
            status=status.status,
            progress=estimate.percent,
            current_step=estimate.step_label,
            stage=status.stage,
            created_at=status.created_at,
            elapsed_seconds=status.elapsed_seconds(now),
            estimated=estimate.estimated,
        )

    async def do_wait_for_record(
        self,
        session_id: str,
        on_status: StatusCallback | None = None,
        max_attempts: int | None = None,
    ) -> PollResult:
        """
        Polls the store until the session's record exists.

        Args:
            session_id (str): The session to wait for.
            on_status (StatusCallback | None): Called with every fetched status.
            max_attempts (int | None): Override for the configured attempt limit.

        Returns:
            PollResult: The terminal poll outcome; its record is in Wire Format.
        """
        polling_config = self._polling_config
        if max_attempts is not None:
            polling_config = polling_config.with_max_attempts(max_attempts)
        poller = JobStatusPoller(helper_config=self._helper_config, source=self._store, polling_config=polling_config)
        return await poller.poll(session_id, on_status=on_status)

    ##########################################
    ################ RECORDS #################
    ##########################################

    async def _get_record(self, session_id: str) -> FilingRecord:
        record = await self._store.do_fetch_record(session_id)
        if record is None:
            raise RecordNotFoundError(session_id)
        return record

    def get_domain(self, session_id: str, wire: dict | None) -> dict:
        """Converts a Wire Format record of the session, e.g. the one a poll returned, into the Domain Model."""
        domain = to_domain(wire, options=self._transform_options)
        self.logging.debug("Record of session %s has %d filled fields", session_id, count_filled_fields(domain))
        return domain

    async def do_get_domain(self, session_id: str) -> dict:
        """The session's filing as Domain Model.

        Raises:
            RecordNotFoundError: If no record exists yet.
        """
        record = await self._get_record(session_id)
        return self.get_domain(session_id, record.data)

    async def do_save_domain(self, session_id: str, domain: dict) -> UpsertResult:
        """
        Persists an edited Domain Model as Wire Format.

        Cross references of an existing record (id, document, mapped_filing) are kept.
        """
        existing = await self._store.do_fetch_record(session_id)
        references = extract_references(existing.data) if existing else None
        wire = to_wire(domain, references=references, options=self._transform_options)
        result = await self._store.do_upsert_record(session_id, wire)
        self.logging.info("Saved %d filled fields for session %s", count_filled_fields(domain), session_id)
        return result

    async def do_get_tagged(self, session_id: str) -> dict:
        record = await self._get_record(session_id)
        return to_tagged(record.data, options=self._transform_options)

    async def do_validate(self, session_id: str, document_id: str | None = None) -> ValidationReport:
        """
        Sends the stored filing to the backend validator.

        Raises:
            RecordNotFoundError: If no record exists yet.
            httpx.HTTPError: If the backend request fails.
            ValueError: If the backend response cannot be parsed.
        """
        record = await self._get_record(session_id)
        wire = unwrap_wire_payload(record.data)
        if document_id is None and wire.get("document") is not None:
            document_id = str(wire["document"])
        self.logging.info("Validating record of session %s", session_id)
        return await self._backend.do_validate(wire, document_id=document_id)
