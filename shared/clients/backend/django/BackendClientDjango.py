import uuid

from pydantic import ValidationError

from shared.clients.backend.BackendClientInterface import BackendClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.session import JobState, JobStatus
from shared.models.validation import ValidationReport


class BackendClientDjango(BackendClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="http://localhost:8000", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Django"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="http://localhost:8000"),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        headers = {"X-Request-ID": str(uuid.uuid4())}
        if self._api_key:
            headers["Authorization"] = f"Token {self._api_key}"
        return headers

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/api/v1/"

    def _get_endpoint_task_status(self, task_id: str) -> str:
        return f"/api/v1/mapping/status/{task_id}/"

    def _get_endpoint_task_result(self, result_ref: str) -> str:
        return f"/api/v1/mapping/partial-xbrl/{result_ref}/"

    def _get_endpoint_validation(self) -> str:
        return "/api/v1/validation/process/"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_validation_payload(self, mapped_data: dict, document_id: str | None = None) -> dict:
        return {
            "mapped_data": mapped_data,
            "documentId": document_id,
        }

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def _parse_task_status(self, task_id: str, response: dict) -> JobStatus:
        if not isinstance(response, dict) or not response.get("success"):
            raise ValueError(f"Error response from status API: {response!r}")

        data = response.get("data")
        if not isinstance(data, dict) or not isinstance(data.get("status"), str):
            raise ValueError(f"Invalid status response structure: {response!r}")

        try:
            state = JobState(data["status"])
        except ValueError:
            raise ValueError(f"Unknown task status '{data['status']}' for task '{task_id}'.")

        filing_id = data.get("filing_id")
        progress = data.get("progress")
        return JobStatus(
            job_id=task_id,
            state=state,
            progress=int(progress) if isinstance(progress, (int, float)) and not isinstance(progress, bool) else None,
            current_step=data.get("current_step") or data.get("message"),
            result_ref=str(filing_id) if filing_id not in (None, "") else None,
            error=data.get("error"),
        )

    def _parse_task_result(self, response: dict) -> dict:
        if not isinstance(response, dict) or not response:
            raise ValueError("Empty task result response.")
        return response

    def _parse_validation_response(self, response: dict) -> ValidationReport:
        if not isinstance(response, dict):
            raise ValueError(f"Invalid validation response: {response!r}")
        body = response.get("data") if isinstance(response.get("data"), dict) else response
        if body.get("validation_status") == "success" and not body.get("validation_errors"):
            body = {**body, "is_valid": True}
        try:
            return ValidationReport.model_validate(body)
        except ValidationError as e:
            raise ValueError(f"Invalid validation response: {e}")
