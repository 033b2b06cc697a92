"""Pydantic models for sessions, records and job status.

Hierarchy:
  SessionStage:   pipeline stage vocabulary stored on a session row.
  SessionStatus:  processing/complete view of a session, derived from record existence.
  FilingRecord:   the persisted extraction outcome for a session (Wire Format payload).
  UpsertResult:   confirmation of an insert-or-update by session id.
  JobStatus:      status of a backend task, as consumed by the poller.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class SessionStage(str, Enum):
    # Upload stage
    UPLOADING = "uploading"
    UPLOAD_COMPLETE = "upload_complete"
    UPLOAD_FAILED = "upload_failed"

    # Extraction stage
    EXTRACTING = "extracting"
    EXTRACTING_COMPLETE = "extracting_complete"
    EXTRACTING_FAILED = "extracting_failed"

    # Mapping stage
    MAPPING = "mapping"
    MAPPING_COMPLETE = "mapping_complete"
    MAPPING_FAILED = "mapping_failed"

    # Validation stage
    VALIDATING = "validating"
    VALIDATION_COMPLETE = "validation_complete"
    VALIDATION_FAILED = "validation_failed"

    # Tagging stage
    TAGGING = "tagging"
    TAGGING_COMPLETE = "tagging_complete"
    TAGGING_FAILED = "tagging_failed"

    # Generation stage
    GENERATING = "generating"
    GENERATION_COMPLETE = "generation_complete"
    GENERATION_FAILED = "generation_failed"


VALID_STEPS = ("uploading", "extracting", "mapping", "validating", "tagging", "generating")

_STEP_BY_PREFIX = {
    "upload": "uploading",
    "extracting": "extracting",
    "mapping": "mapping",
    "validation": "validating",
    "tagging": "tagging",
    "generation": "generating",
}


def derive_current_step(stage: SessionStage | str) -> str | None:
    """Derive the pipeline step from a (possibly compound) stage value.

    Args:
        stage (SessionStage | str): A stage such as "validation_failed".

    Returns:
        str | None: The step name (e.g. "validating"), or None for an unknown prefix.
    """
    value = stage.value if isinstance(stage, SessionStage) else str(stage)
    if value in VALID_STEPS:
        return value
    return _STEP_BY_PREFIX.get(value.split("_")[0])


class SessionState(str, Enum):
    PROCESSING = "processing"
    COMPLETE = "complete"


class SessionStatus(BaseModel):
    """
    Status of a session as reported by the record store.

    A session is complete exactly when a record exists for it. The progress field
    only carries an authoritative value reported by the backend; synthetic estimates
    are computed separately and never written here.
    """

    session_id: str
    status: SessionState
    created_at: datetime | None = None
    progress: int | None = None
    current_step: str | None = None
    stage: SessionStage | None = None
    extraction_time: datetime | None = None

    def elapsed_seconds(self, now: datetime | None = None) -> int:
        """Whole seconds since the session was created, 0 if the creation time is unknown."""
        if self.created_at is None:
            return 0
        now = now or datetime.now(timezone.utc)
        created = self.created_at if self.created_at.tzinfo else self.created_at.replace(tzinfo=timezone.utc)
        return max(0, int((now - created).total_seconds()))


class FilingRecord(BaseModel):
    """
    Represents the persisted outcome of extraction for a session.

    Attributes:
        session_id: The owning session. At most one record exists per session.
        data:       The filing payload in Wire Format.
    """

    session_id: str
    data: dict = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UpsertResult(BaseModel):
    session_id: str
    created: bool | None = None
    record: FilingRecord | None = None


class JobState(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobStatus(BaseModel):
    """
    Status of a backend job as consumed by the poller.

    Attributes:
        job_id:       Session id or backend task id, depending on the source.
        state:        processing / completed / failed.
        progress:     Authoritative progress in percent, if the backend reports one.
        current_step: Backend-supplied step label.
        result_ref:   Reference needed to fetch the final result (e.g. a filing id).
        error:        Backend-supplied failure reason when state is failed.
    """

    job_id: str
    state: JobState
    progress: int | None = None
    current_step: str | None = None
    result_ref: str | None = None
    error: str | None = None


class SessionProgress(BaseModel):
    """
    Session status enriched with the progress to display.

    Attributes:
        progress:  Authoritative progress when reported, 100 when complete, else the estimate.
        estimated: True when progress comes from the synthetic curve.
    """

    session_id: str
    status: SessionState
    progress: int
    current_step: str
    stage: SessionStage | None = None
    created_at: datetime | None = None
    elapsed_seconds: int = 0
    estimated: bool = True
