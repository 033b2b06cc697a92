from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.JobStatusSource import JobStatusSource
from shared.helper.HelperConfig import HelperConfig
from shared.models.session import JobStatus
from shared.models.validation import ValidationReport


class BackendClientInterface(ClientInterface, JobStatusSource):
    """
    External processing backend that owns mapping, validation and tagging.

    Only its task status, task result and validation query are consumed here; the
    business rules behind them stay on the backend.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "backend"
        """
        return "backend"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_task_status(self, task_id: str) -> str:
        """
        Returns the endpoint path for task status requests.

        Args:
            task_id (str): The backend task id.

        Returns:
            str: The endpoint path (e.g. "/api/v1/mapping/status/{task_id}/")
        """
        pass

    @abstractmethod
    def _get_endpoint_task_result(self, result_ref: str) -> str:
        """
        Returns the endpoint path for fetching the result of a completed task.

        Args:
            result_ref (str): The result reference reported by the completed status (e.g. a filing id).

        Returns:
            str: The endpoint path (e.g. "/api/v1/mapping/partial-xbrl/{filing_id}/")
        """
        pass

    @abstractmethod
    def _get_endpoint_validation(self) -> str:
        """
        Returns the endpoint path for validation requests (e.g. "/api/v1/validation/process/").
        """
        pass

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    @abstractmethod
    def get_validation_payload(self, mapped_data: dict, document_id: str | None = None) -> dict:
        """
        Build the backend-specific request body for a validation request.

        Args:
            mapped_data (dict): The mapped filing in Wire Format.
            document_id (str | None): The backend document id, if known.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def _parse_task_status(self, task_id: str, response: dict) -> JobStatus:
        """
        Parses a raw task status response.

        Raises:
            ValueError: If the response reports an error or lacks a usable status.
        """
        pass

    @abstractmethod
    def _parse_task_result(self, response: dict) -> dict:
        """
        Extracts the final payload from a raw task result response.

        Raises:
            ValueError: If the response carries no payload.
        """
        pass

    @abstractmethod
    def _parse_validation_response(self, response: dict) -> ValidationReport:
        """
        Parses a raw validation response into a report. A successful validation yields
        a report with is_valid set and no findings.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_fetch_job_status(self, job_id: str) -> JobStatus:
        response = await self.do_request_json(method="GET", endpoint=self._get_endpoint_task_status(job_id))
        return self._parse_task_status(job_id, response)

    async def do_fetch_job_result(self, job_id: str, status: JobStatus) -> dict:
        if not status.result_ref:
            raise ValueError(f"Missing result reference in completed status of task '{job_id}'.")
        response = await self.do_request_json(method="GET", endpoint=self._get_endpoint_task_result(status.result_ref))
        return self._parse_task_result(response)

    async def do_validate(self, mapped_data: dict, document_id: str | None = None) -> ValidationReport:
        """
        Sends a mapped filing to the backend validator.

        Args:
            mapped_data (dict): The mapped filing in Wire Format.
            document_id (str | None): The backend document id, if known.

        Returns:
            ValidationReport: The structured report.

        Raises:
            httpx.HTTPError: If the request fails.
            ValueError: If the response cannot be parsed.
        """
        response = await self.do_request_json(
            method="POST",
            endpoint=self._get_endpoint_validation(),
            json=self.get_validation_payload(mapped_data, document_id=document_id),
        )
        report = self._parse_validation_response(response)
        self.logging.info(
            "Validation finished: valid=%s, %d categories with findings",
            report.is_valid,
            len(report.validation_errors),
        )
        return report
