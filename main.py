"""Main entrypoint for the Trello board maintainer job.

Meant to run as a one-shot cron/Kubernetes job. Exit status:

- 0: run completed (individual mutation failures are logged only);
- 1: configuration error, nothing was sent to Trello;
- 2: a list, card or action history could not be fetched;
- 3: mutation failures while ``MUTATION_ERRORS_FATAL`` is on.
"""

import asyncio
import sys
from typing import Optional

from dotenv import load_dotenv

from board_maintainer.config.settings import ConfigError, Settings, load_settings
from board_maintainer.controllers.maintenance import MaintenanceReport, MutationFailedError, run_maintenance
from board_maintainer.presenters.run_summary_presenter import present_run_summary
from board_maintainer.services.trello import TrelloClient, TrelloFetchError
from board_maintainer.utils.logger import generate_run_id, log_error, log_info, set_log_level


EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_FETCH_ERROR = 2
EXIT_MUTATION_ERROR = 3


async def run(settings: Settings, run_id: Optional[str] = None) -> MaintenanceReport:
    """Open the shared Trello client and execute one maintenance run."""

    async with TrelloClient(settings.api_key, settings.api_token, timeout=settings.http_timeout) as client:
        return await run_maintenance(settings, client, run_id=run_id)


def main() -> int:
    load_dotenv()

    try:
        settings = load_settings()
    except ConfigError as exc:
        log_error(f"ERROR: {exc}")
        return EXIT_CONFIG_ERROR

    set_log_level(settings.log_level)
    run_id = generate_run_id()
    log_info(
        "Maintenance run started",
        run_id=run_id,
        archive_lists=settings.archive_list_ids,
        delete_lists=settings.delete_list_ids,
        reorder_lists=settings.reorder_list_ids,
        threshold_hours=settings.inactivity_threshold.total_seconds() / 3600,
        dry_run=settings.dry_run,
    )

    try:
        report = asyncio.run(run(settings, run_id))
    except TrelloFetchError as exc:
        log_error(f"Fetch failed, aborting run: {exc}", run_id=run_id)
        return EXIT_FETCH_ERROR
    except MutationFailedError as exc:
        log_error(f"{exc}, aborting run", run_id=run_id, errors=[g.errors for g in exc.report.groups])
        return EXIT_MUTATION_ERROR

    log_info(present_run_summary(report.to_dict()), run_id=run_id)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
