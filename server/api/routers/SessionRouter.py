"""Session router: create sessions, move them through pipeline stages and report progress."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from server.api.errors import HANDLED_ERRORS, to_http_exception
from server.models.requests import CreateSessionRequest, UpdateStageRequest
from server.models.responses import RecordResponse, SessionCreatedResponse, StageUpdatedResponse
from shared.helper.session_ids import validate_session_id

session_router = APIRouter()


@session_router.post("/sessions", tags=["Sessions"])
async def create_session(request: Request, body: CreateSessionRequest | None = None) -> JSONResponse:
    """Create a session in the "uploading" stage, with a new UUID unless one is supplied."""
    record_service = request.app.state.record_service
    try:
        session_id = await record_service.do_create_session(body.session_id if body else None)
    except HANDLED_ERRORS as e:
        request.app.state.logging.error("Creating session failed: %s", e)
        raise to_http_exception(e)
    return JSONResponse(status_code=201, content=SessionCreatedResponse(session_id=session_id).model_dump())


@session_router.get("/sessions/{session_id}/status", tags=["Sessions"])
async def get_session_status(request: Request, session_id: str) -> JSONResponse:
    """Report whether the session is complete, with the progress to display.

    Progress is authoritative when the backend reports it, 100 once the record exists,
    and otherwise estimated from the session's age.
    """
    record_service = request.app.state.record_service
    try:
        session_id = validate_session_id(session_id)
        progress = await record_service.do_get_progress(session_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return JSONResponse(content=progress.model_dump(mode="json"))


@session_router.patch("/sessions/{session_id}/stage", tags=["Sessions"])
async def update_session_stage(request: Request, session_id: str, body: UpdateStageRequest) -> JSONResponse:
    record_service = request.app.state.record_service
    try:
        session_id = validate_session_id(session_id)
        step = await record_service.do_update_stage(session_id, body.stage, body.current_step)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    response = StageUpdatedResponse(session_id=session_id, stage=body.stage, current_step=step)
    return JSONResponse(content=response.model_dump(mode="json"))


@session_router.get("/sessions/{session_id}/result", tags=["Sessions"])
async def wait_for_result(request: Request, session_id: str, max_attempts: int | None = None) -> JSONResponse:
    """Poll until the session's record exists and return it as Domain Model.

    Returns 502 if the session failed and 504 when polling gives up.
    """
    record_service = request.app.state.record_service
    try:
        session_id = validate_session_id(session_id)
        result = await record_service.do_wait_for_record(session_id, max_attempts=max_attempts)
        domain = record_service.get_domain(session_id, result.unwrap())
    except HANDLED_ERRORS as e:
        request.app.state.logging.warning("Waiting for session %s failed: %s", session_id, e)
        raise to_http_exception(e)
    response = RecordResponse(session_id=session_id, data=domain, attempts=result.attempts)
    return JSONResponse(content=response.model_dump(mode="json"))
