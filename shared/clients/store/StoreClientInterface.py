from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.JobStatusSource import JobStatusSource
from shared.helper.HelperConfig import HelperConfig
from shared.helper.session_ids import new_session_id, validate_session_id
from shared.models.errors import RecordNotFoundError
from shared.models.session import (
    FilingRecord,
    JobState,
    JobStatus,
    SessionStage,
    SessionState,
    SessionStatus,
    UpsertResult,
    VALID_STEPS,
    derive_current_step,
)

COMPLETE_STEP_LABEL = "Extraction complete"


class StoreClientInterface(ClientInterface, JobStatusSource):
    """
    Record store holding one session row and at most one filing record per session id.

    A session's status is never stored: it is complete exactly when a record exists.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "store"
        """
        return "store"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_sessions(self) -> str:
        """
        Returns the endpoint path for the session collection (e.g. "/rest/v1/session_thread").
        """
        pass

    @abstractmethod
    def _get_endpoint_records(self) -> str:
        """
        Returns the endpoint path for the record collection (e.g. "/rest/v1/extracted_data").
        """
        pass

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    @abstractmethod
    def get_session_query_params(self, session_id: str) -> dict:
        """Query parameters selecting the newest session row for a session id."""
        pass

    @abstractmethod
    def get_record_query_params(self, session_id: str) -> dict:
        """Query parameters selecting the record row for a session id."""
        pass

    @abstractmethod
    def get_create_session_payload(self, session_id: str) -> dict | list:
        """Request body creating a new session row in its initial stage."""
        pass

    @abstractmethod
    def get_update_stage_payload(self, stage: SessionStage, current_step: str | None) -> dict:
        """Request body updating the stage of a session row."""
        pass

    @abstractmethod
    def get_upsert_payload(self, session_id: str, data: dict) -> dict | list:
        """Request body for the insert-or-update of a record."""
        pass

    @abstractmethod
    def get_upsert_params(self) -> dict:
        """Query parameters turning the record write into an atomic upsert keyed by session id."""
        pass

    @abstractmethod
    def get_write_headers(self, upsert: bool = False) -> dict:
        """Extra headers for write requests."""
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def _parse_session_rows(self, response: dict | list) -> dict | None:
        """
        Extracts the first session row from a response.

        Returns:
            dict | None: Normalised row with at least "session_id", "created_at", "stage", "current_step"; None if empty.
        """
        pass

    @abstractmethod
    def _parse_record_rows(self, response: dict | list) -> FilingRecord | None:
        """
        Extracts the first record from a response, or None if the response holds no rows.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    ################ SESSIONS ##################
    async def do_create_session(self, session_id: str | None = None) -> str:
        """
        Creates a session row in the "uploading" stage.

        Args:
            session_id (str | None): Use this id instead of generating a new UUID.

        Returns:
            str: The session id.
        """
        session_id = validate_session_id(session_id) if session_id else new_session_id()
        await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_sessions(),
            json=self.get_create_session_payload(session_id),
            additional_headers=self.get_write_headers(),
            raise_on_error=True,
        )
        self.logging.info("Created session %s in %s", session_id, self._get_engine_name())
        return session_id

    async def do_update_session_stage(self, session_id: str, stage: SessionStage | str, current_step: str | None = None) -> str | None:
        """
        Moves a session to a new pipeline stage.

        Args:
            session_id (str): The session to update.
            stage (SessionStage | str): The new stage; must be part of the stage vocabulary.
            current_step (str | None): Explicit step; derived from the stage when missing or unknown.

        Returns:
            str | None: The step that was stored.

        Raises:
            ValueError: If the session id or stage is invalid.
        """
        session_id = validate_session_id(session_id)
        stage = SessionStage(stage)
        step = current_step if current_step in VALID_STEPS else None
        if step is None:
            step = derive_current_step(stage)
            self.logging.debug("Derived current_step '%s' from stage '%s'", step, stage.value)

        await self.do_request(
            method="PATCH",
            endpoint=self._get_endpoint_sessions(),
            params=self.get_session_query_params(session_id),
            json=self.get_update_stage_payload(stage, step),
            additional_headers=self.get_write_headers(),
            raise_on_error=True,
        )
        self.logging.info("Updated session %s to stage '%s' (step '%s')", session_id, stage.value, step)
        return step

    async def do_fetch_session(self, session_id: str) -> dict | None:
        """
        Fetches the newest session row for a session id.

        Returns:
            dict | None: The normalised session row, or None if the session does not exist.
        """
        session_id = validate_session_id(session_id)
        rows = await self.do_request_json(
            method="GET",
            endpoint=self._get_endpoint_sessions(),
            params=self.get_session_query_params(session_id),
        )
        return self._parse_session_rows(rows)

    async def do_fetch_status(self, session_id: str) -> SessionStatus:
        """
        Derives the session status from record existence.

        Args:
            session_id (str): The session to check.

        Returns:
            SessionStatus: complete (progress 100) when a record exists, processing otherwise.

        Raises:
            RecordNotFoundError: If neither a record nor a session row exists.
        """
        session_id = validate_session_id(session_id)
        record = await self.do_fetch_record(session_id)
        session = await self.do_fetch_session(session_id)

        if record is not None:
            self.logging.debug("Session %s is complete", session_id)
            return SessionStatus(
                session_id=session_id,
                status=SessionState.COMPLETE,
                created_at=session.get("created_at") if session else None,
                progress=100,
                current_step=COMPLETE_STEP_LABEL,
                stage=session.get("stage") if session else None,
                extraction_time=record.created_at,
            )

        if session is None:
            raise RecordNotFoundError(session_id, what="session")

        return SessionStatus(
            session_id=session_id,
            status=SessionState.PROCESSING,
            created_at=session.get("created_at"),
            current_step=session.get("current_step"),
            stage=session.get("stage"),
        )

    ################ RECORDS ##################
    async def do_fetch_record(self, session_id: str) -> FilingRecord | None:
        """
        Fetches the record of a session.

        Returns:
            FilingRecord | None: The record, or None if extraction has not produced one yet.
        """
        session_id = validate_session_id(session_id)
        rows = await self.do_request_json(
            method="GET",
            endpoint=self._get_endpoint_records(),
            params=self.get_record_query_params(session_id),
        )
        return self._parse_record_rows(rows)

    async def do_upsert_record(self, session_id: str, data: dict) -> UpsertResult:
        """
        Inserts or updates the record of a session in one atomic write keyed by session id.

        The preceding existence lookup only feeds the informational "created" flag; the
        write itself never depends on it, so concurrent submissions cannot create duplicates.

        Args:
            session_id (str): The owning session.
            data (dict): The Wire Format payload.

        Returns:
            UpsertResult: The stored record and whether it was (most likely) newly created.
        """
        session_id = validate_session_id(session_id)
        if not isinstance(data, dict) or not data:
            raise ValueError("Data payload is required.")

        existing = await self.do_fetch_record(session_id)
        rows = await self.do_request_json(
            method="POST",
            endpoint=self._get_endpoint_records(),
            params=self.get_upsert_params(),
            json=self.get_upsert_payload(session_id, data),
            additional_headers=self.get_write_headers(upsert=True),
        )
        stored = self._parse_record_rows(rows) if rows else None
        created = existing is None
        self.logging.info("%s record for session %s", "Inserted" if created else "Updated", session_id)
        return UpsertResult(session_id=session_id, created=created, record=stored)

    ################ POLLING ##################
    async def do_fetch_job_status(self, job_id: str) -> JobStatus:
        """
        Status query for the poller. A missing session, or a session parked in a failed
        stage without a record, is reported as a failed job.
        """
        try:
            status = await self.do_fetch_status(job_id)
        except RecordNotFoundError as e:
            return JobStatus(job_id=job_id, state=JobState.FAILED, error=str(e))

        if status.status == SessionState.COMPLETE:
            return JobStatus(job_id=job_id, state=JobState.COMPLETED, progress=100, current_step=status.current_step, result_ref=job_id)

        if status.stage is not None and status.stage.value.endswith("_failed"):
            return JobStatus(job_id=job_id, state=JobState.FAILED, current_step=status.current_step, error=f"session stage is '{status.stage.value}'")

        return JobStatus(
            job_id=job_id,
            state=JobState.PROCESSING,
            progress=status.progress,
            current_step=status.current_step,
        )

    async def do_fetch_job_result(self, job_id: str, status: JobStatus) -> dict:
        record = await self.do_fetch_record(status.result_ref or job_id)
        if record is None:
            raise RecordNotFoundError(job_id)
        return record.data


