import logging

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from server.api.api_app import app
from services.filing_records.RecordService import RecordService
from services.filing_transform.transform import to_domain
from shared.logging.logging_setup import ColorLogger
from shared.models.errors import RecordNotFoundError
from shared.models.polling import PollResult, PollState
from shared.models.session import FilingRecord, SessionProgress, SessionState, UpsertResult
from shared.models.validation import ValidationReport


class FakeRecordService:
    """Records calls and returns canned results; raise_with makes every call fail."""

    def __init__(self, wire_record: dict):
        self.wire_record = wire_record
        self.raise_with: Exception | None = None
        self.poll_state = PollState.COMPLETED
        self.saved: list[tuple[str, dict]] = []
        self.created = True
        self.record_fetches = 0

    def _check(self):
        if self.raise_with is not None:
            raise self.raise_with

    async def do_create_session(self, session_id=None):
        self._check()
        return session_id or "11111111-2222-4333-8444-555555555555"

    async def do_get_progress(self, session_id, now=None):
        self._check()
        return SessionProgress(session_id=session_id, status=SessionState.PROCESSING, progress=63, current_step="Extracting data", elapsed_seconds=180)

    async def do_update_stage(self, session_id, stage, current_step=None):
        self._check()
        return current_step or "mapping"

    async def do_wait_for_record(self, session_id, on_status=None, max_attempts=None):
        self._check()
        return PollResult(job_id=session_id, state=self.poll_state, record=self.wire_record, error="mapping crashed", attempts=max_attempts or 2)

    def get_domain(self, session_id, wire):
        return to_domain(wire)

    async def do_get_domain(self, session_id):
        self._check()
        self.record_fetches += 1
        return to_domain(self.wire_record)

    async def do_save_domain(self, session_id, domain):
        self._check()
        self.saved.append((session_id, domain))
        return UpsertResult(session_id=session_id, created=self.created, record=FilingRecord(session_id=session_id, data={}))

    async def do_get_tagged(self, session_id):
        self._check()
        return {"income_statement": {"revenue": {"value": 500000, "tags": []}}}

    async def do_validate(self, session_id, document_id=None):
        self._check()
        return ValidationReport(validation_errors={
            "notes": [{"message": "Revenue note missing", "severity": "WARNING"}],
            "audit_report": [{"message": "Missing opinion", "severity": "ERROR", "recommendation": "Add the opinion"}],
        })


@pytest.fixture
def service(wire_record) -> FakeRecordService:
    return FakeRecordService(wire_record)


@pytest.fixture
def client(service) -> TestClient:
    # no lifespan: the service is injected directly
    app.state.record_service = service
    app.state.logging = ColorLogger(logging.getLogger("tests.api"))
    return TestClient(app)


##########################################
############### SESSIONS #################
##########################################

def test_create_session(client, session_id):
    response = client.post("/sessions", json={"session_id": session_id})

    assert response.status_code == 201
    assert response.json() == {"session_id": session_id}


def test_create_session_without_body(client):
    response = client.post("/sessions")

    assert response.status_code == 201
    assert response.json()["session_id"] == "11111111-2222-4333-8444-555555555555"


def test_create_session_with_invalid_id(client, service):
    service.raise_with = ValueError("Invalid session ID format 'x'. Must be a valid UUID.")

    response = client.post("/sessions", json={"session_id": "x"})

    assert response.status_code == 400
    assert "Invalid session ID" in response.json()["detail"]


def test_session_status(client, session_id):
    response = client.get(f"/sessions/{session_id}/status")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "processing"
    assert body["progress"] == 63
    assert body["current_step"] == "Extracting data"
    assert body["estimated"] is True


def test_status_with_malformed_id_is_bad_request(client):
    response = client.get("/sessions/not-a-uuid/status")

    assert response.status_code == 400


def test_status_of_unknown_session_is_not_found(client, service, session_id):
    service.raise_with = RecordNotFoundError(session_id, what="session")

    response = client.get(f"/sessions/{session_id}/status")

    assert response.status_code == 404


def test_update_stage(client, session_id):
    response = client.patch(f"/sessions/{session_id}/stage", json={"stage": "mapping_complete"})

    assert response.status_code == 200
    assert response.json() == {"session_id": session_id, "stage": "mapping_complete", "current_step": "mapping"}


def test_update_stage_rejects_unknown_stage(client, session_id):
    response = client.patch(f"/sessions/{session_id}/stage", json={"stage": "exploding"})

    assert response.status_code == 422


def test_wait_for_result_returns_domain(client, service, session_id, wire_record):
    response = client.get(f"/sessions/{session_id}/result", params={"max_attempts": 5})

    assert response.status_code == 200
    body = response.json()
    assert body["attempts"] == 5
    assert body["data"] == to_domain(wire_record)
    assert service.record_fetches == 0


@pytest.mark.parametrize(
    "state, status_code",
    [(PollState.FAILED, 502), (PollState.TIMED_OUT, 504), (PollState.CANCELLED, 409)],
)
def test_wait_for_result_maps_poll_outcomes(client, service, session_id, state, status_code):
    service.poll_state = state

    response = client.get(f"/sessions/{session_id}/result")

    assert response.status_code == status_code


##########################################
################ RECORDS #################
##########################################

def test_get_record(client, session_id):
    response = client.get(f"/records/{session_id}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["filingInformation"]["NameOfCompany"] == "Acme Pte. Ltd."
    assert data["filingInformation"]["NameOfParentEntity"] is None


def test_get_missing_record_is_not_found(client, service, session_id):
    service.raise_with = RecordNotFoundError(session_id)

    response = client.get(f"/records/{session_id}")

    assert response.status_code == 404
    assert session_id in response.json()["detail"]


@pytest.mark.parametrize("created, status_code", [(True, 201), (False, 200)])
def test_save_record(client, service, session_id, created, status_code):
    service.created = created

    response = client.put(f"/records/{session_id}", json={"data": {"incomeStatement": {"Revenue": 1}}})

    assert response.status_code == status_code
    assert response.json()["created"] is created
    assert service.saved == [(session_id, {"incomeStatement": {"Revenue": 1}})]


def test_store_failure_is_bad_gateway(client, service, session_id):
    request = httpx.Request("POST", "http://store.test/rest/v1/extracted_data")
    service.raise_with = httpx.HTTPStatusError("boom", request=request, response=httpx.Response(500, request=request))

    response = client.put(f"/records/{session_id}", json={"data": {}})

    assert response.status_code == 502


def test_get_tagged_record(client, session_id):
    response = client.get(f"/records/{session_id}/tagged")

    assert response.status_code == 200
    assert response.json()["data"]["income_statement"]["revenue"]["value"] == 500000


def test_validate_record_returns_report_with_summary(client, session_id):
    response = client.post(f"/records/{session_id}/validate", json={"document_id": "doc-7"})

    assert response.status_code == 200
    body = response.json()
    assert body["summary"]["total_count"] == 2
    assert body["summary"]["counts_by_severity"] == {"ERROR": 1, "WARNING": 1, "INFO": 0}
    assert [category["category"] for category in body["categories"]] == ["audit_report", "notes"]
    assert body["expanded_categories"] == ["audit_report"]
    assert body["title"] == "Data Issues Found - Action Required"
    assert body["first_error"] == "notes: Revenue note missing"
    assert body["report"]["validation_errors"]["audit_report"][0]["severity"] == "ERROR"


def test_validation_backend_down_is_bad_gateway(client, service, session_id):
    service.raise_with = httpx.ConnectError("connection refused")

    response = client.post(f"/records/{session_id}/validate")

    assert response.status_code == 502


##########################################
############### LIFESPAN #################
##########################################

def test_lifespan_boots_clients_and_tolerates_backend_outage(env, monkeypatch, session_id):
    monkeypatch.setenv("LOG_TO_FILE", "false")
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        with respx.mock(assert_all_called=False) as router:
            router.get("http://store.test/rest/v1/").mock(return_value=httpx.Response(200, json={}))
            router.get("http://backend.test/api/v1/").mock(return_value=httpx.Response(503))
            router.get("http://store.test/rest/v1/extracted_data").mock(return_value=httpx.Response(200, json=[]))

            with TestClient(app) as lifespan_client:
                assert isinstance(app.state.record_service, RecordService)
                response = lifespan_client.get(f"/records/{session_id}")
    finally:
        root.handlers = handlers
        root.setLevel(level)

    assert response.status_code == 404
