from abc import ABC, abstractmethod

from shared.models.session import JobStatus


class JobStatusSource(ABC):
    """
    Anything the job status poller can poll: a status query plus a separate final result fetch.
    """

    @abstractmethod
    async def do_fetch_job_status(self, job_id: str) -> JobStatus:
        """
        Queries the current status of a job.

        Args:
            job_id (str): The session or task id.

        Returns:
            JobStatus: The parsed status.

        Raises:
            Exception: On transport failures or unparsable responses. The poller treats these as transient.
        """
        pass

    @abstractmethod
    async def do_fetch_job_result(self, job_id: str, status: JobStatus) -> dict:
        """
        Fetches the final payload of a completed job.

        Args:
            job_id (str): The session or task id.
            status (JobStatus): The completed status that triggered the fetch (may carry a result reference).

        Returns:
            dict: The final payload.

        Raises:
            Exception: If the result cannot be fetched. The poller treats this as transient and retries.
        """
        pass
