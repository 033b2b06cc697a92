"""Record router: read and edit a session's filing, its tagged view and its validation."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from server.api.errors import HANDLED_ERRORS, to_http_exception
from server.models.requests import SaveRecordRequest, ValidateRecordRequest
from server.models.responses import RecordResponse, SaveRecordResponse, ValidationResponse
from services.validation_report.report import (
    category_summaries,
    default_expanded_categories,
    first_error_message,
    summarize,
    summary_message,
    validation_title,
)
from shared.helper.session_ids import validate_session_id

record_router = APIRouter()


@record_router.get("/records/{session_id}", tags=["Records"])
async def get_record(request: Request, session_id: str) -> JSONResponse:
    """Return the session's filing as Domain Model. 404 until extraction produced a record."""
    record_service = request.app.state.record_service
    try:
        session_id = validate_session_id(session_id)
        domain = await record_service.do_get_domain(session_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return JSONResponse(content=RecordResponse(session_id=session_id, data=domain).model_dump(mode="json"))


@record_router.put("/records/{session_id}", tags=["Records"])
async def save_record(request: Request, session_id: str, body: SaveRecordRequest) -> JSONResponse:
    """Persist an edited Domain Model. Inserts or updates the one record of the session."""
    record_service = request.app.state.record_service
    try:
        session_id = validate_session_id(session_id)
        result = await record_service.do_save_domain(session_id, body.data)
    except HANDLED_ERRORS as e:
        request.app.state.logging.error("Saving record for session %s failed: %s", session_id, e)
        raise to_http_exception(e)

    response = SaveRecordResponse(
        session_id=result.session_id,
        created=result.created,
        updated_at=result.record.updated_at if result.record else None,
    )
    return JSONResponse(status_code=201 if result.created else 200, content=response.model_dump(mode="json"))


@record_router.get("/records/{session_id}/tagged", tags=["Records"])
async def get_tagged_record(request: Request, session_id: str) -> JSONResponse:
    record_service = request.app.state.record_service
    try:
        session_id = validate_session_id(session_id)
        tagged = await record_service.do_get_tagged(session_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return JSONResponse(content=RecordResponse(session_id=session_id, data=tagged).model_dump(mode="json"))


@record_router.post("/records/{session_id}/validate", tags=["Records"])
async def validate_record(request: Request, session_id: str, body: ValidateRecordRequest | None = None) -> JSONResponse:
    """Validate the stored filing and return the report with its summary and display order."""
    record_service = request.app.state.record_service
    try:
        session_id = validate_session_id(session_id)
        report = await record_service.do_validate(session_id, document_id=body.document_id if body else None)
    except HANDLED_ERRORS as e:
        request.app.state.logging.error("Validation for session %s failed: %s", session_id, e)
        raise to_http_exception(e)

    response = ValidationResponse(
        session_id=session_id,
        report=report,
        summary=summarize(report),
        categories=category_summaries(report),
        expanded_categories=default_expanded_categories(report),
        title=validation_title(report),
        message=summary_message(report),
        first_error=first_error_message(report),
    )
    return JSONResponse(content=response.model_dump(mode="json"))
