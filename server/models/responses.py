from datetime import datetime

from pydantic import BaseModel

from shared.models.session import SessionStage
from shared.models.validation import CategorySummary, ValidationReport, ValidationSummary


class SessionCreatedResponse(BaseModel):
    session_id: str


class StageUpdatedResponse(BaseModel):
    session_id: str
    stage: SessionStage
    current_step: str | None


class RecordResponse(BaseModel):
    session_id: str
    data: dict
    attempts: int | None = None


class SaveRecordResponse(BaseModel):
    session_id: str
    created: bool | None
    updated_at: datetime | None = None


class ValidationResponse(BaseModel):
    session_id: str
    report: ValidationReport
    summary: ValidationSummary
    categories: list[CategorySummary]
    expanded_categories: list[str]
    title: str
    message: str | None
    first_error: str | None
