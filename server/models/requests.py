from pydantic import BaseModel, Field

from shared.models.session import SessionStage


class CreateSessionRequest(BaseModel):
    session_id: str | None = None


class UpdateStageRequest(BaseModel):
    stage: SessionStage
    current_step: str | None = None


class SaveRecordRequest(BaseModel):
    """Edited filing in Domain Model shape."""

    data: dict = Field(default_factory=dict)


class ValidateRecordRequest(BaseModel):
    document_id: str | None = None
