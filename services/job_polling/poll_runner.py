"""Poll runner entry point.

Polls a session in the record store (or a task on the processing backend) until it
reaches a terminal state and prints the resulting filing as Domain Model JSON.

Usage:
    python -m services.job_polling.poll_runner <session_id>
    python -m services.job_polling.poll_runner <task_id> --source backend

Exit code 0 when the job completed, 1 otherwise.
"""

import argparse
import asyncio
import json
import signal
import sys

from services.filing_transform.transform import TransformOptions, to_domain
from services.job_polling.JobStatusPoller import JobStatusPoller
from shared.clients.ClientInterface import ClientInterface
from shared.clients.backend.BackendClientManager import BackendClientManager
from shared.clients.store.StoreClientManager import StoreClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.helper.session_ids import validate_session_id
from shared.logging.logging_setup import setup_logging
from shared.models.config import PollingConfig


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Poll a filing job until it completes and print the filing.")
    parser.add_argument("job_id", help="Session id (store) or task id (backend) to poll.")
    parser.add_argument("--source", choices=("store", "backend"), default="store", help="What to poll (default: store).")
    parser.add_argument("--max-attempts", type=int, default=None, help="Override POLL_MAX_ATTEMPTS.")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """Run one poll and print its outcome."""
    args = _parse_args(argv)
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    job_id = args.job_id
    if args.source == "store":
        try:
            job_id = validate_session_id(job_id)
        except ValueError as e:
            logger.error("Invalid session id: %s", e)
            return 1
        client: ClientInterface = StoreClientManager(helper_config=config).get_client()
    else:
        client = BackendClientManager(helper_config=config).get_client()

    try:
        polling_config = PollingConfig.from_helper_config(config)
        if args.max_attempts is not None:
            polling_config = polling_config.with_max_attempts(args.max_attempts)
    except ValueError as e:
        logger.error("Invalid polling settings: %s", e)
        return 1

    poller = JobStatusPoller(helper_config=config, source=client, polling_config=polling_config)
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, poller.cancel)
        loop.add_signal_handler(signal.SIGTERM, poller.cancel)
    except NotImplementedError:
        # no signal handlers on this platform's event loop
        pass

    async with client:
        result = await poller.poll(
            job_id,
            on_status=lambda status: logger.info("Job %s: %s", job_id, status.current_step or status.state.value),
        )

    if not result.ok:
        logger.error("Polling finished without a filing: %s", result.message)
        return 1

    domain = to_domain(result.record, options=TransformOptions(logger=logger))
    print(json.dumps(domain, indent=2, ensure_ascii=False, default=str))
    logger.info("Filing for %s fetched after %d attempts", job_id, result.attempts, color="green")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
