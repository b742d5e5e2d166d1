"""Batch orchestration for a maintenance run.

A run processes up to three list groups, strictly one after another:

1. **archive**: stale cards are archived;
2. **delete**: stale cards are deleted;
3. **reorder**: cards are positioned by their similarity score.

Inside a group every list is processed concurrently, and inside a list
every card is processed concurrently. Each level is joined with
``asyncio.gather`` before the level above completes, so the delete pass
never starts while archive work is still in flight.

Failure semantics
-----------------
- A ``TrelloFetchError`` anywhere aborts the run: every sibling list and
  card task still pending is cancelled and awaited before the error
  propagates out of :func:`run_maintenance`, so no mutation is sent after it.
- A failed archive/delete/reposition is counted in the group stats. When
  ``Settings.mutation_errors_fatal`` is on, :class:`MutationFailedError` is
  raised once the group has been joined.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from board_maintainer.config.settings import Settings
from board_maintainer.core.outcomes import CardOutcome, CardResult, StaleAction
from board_maintainer.core.reorder import reorder_card
from board_maintainer.core.staleness import check_card_for_staleness
from board_maintainer.models.trello import Card
from board_maintainer.services.trello import TrelloClient
from board_maintainer.utils.logger import generate_run_id, log_info, log_warn


logger = logging.getLogger("trello_maintainer.maintenance")

CardHandler = Callable[[Card, str], Awaitable[CardResult]]

GROUP_ARCHIVE = "archive"
GROUP_DELETE = "delete"
GROUP_REORDER = "reorder"


class MutationFailedError(Exception):
    """Raised in strict mode when a group had failed board mutations."""

    def __init__(self, group: str, failed: int, report: "MaintenanceReport") -> None:
        super().__init__(f"{failed} card mutation(s) failed in the {group} group")
        self.group = group
        self.failed = failed
        self.report = report


@dataclass
class GroupStats:
    """Counters for one list group of a run."""

    group: str
    lists: int = 0
    cards: int = 0
    archived: int = 0
    deleted: int = 0
    repositioned: int = 0
    kept: int = 0
    skipped: int = 0
    failed: int = 0
    dry_run: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)

    def record(self, result: CardResult) -> None:
        self.cards += 1
        if result.dry_run:
            self.dry_run += 1
        if result.outcome is CardOutcome.ARCHIVED and not result.dry_run:
            self.archived += 1
        elif result.outcome is CardOutcome.DELETED and not result.dry_run:
            self.deleted += 1
        elif result.outcome is CardOutcome.REPOSITIONED and not result.dry_run:
            self.repositioned += 1
        elif result.outcome is CardOutcome.KEPT:
            self.kept += 1
        elif result.outcome is CardOutcome.SKIPPED:
            self.skipped += 1
        elif result.outcome is CardOutcome.FAILED:
            self.failed += 1
            self.errors.append({"card_id": result.card_id, "error": result.error or "UNKNOWN_ERROR"})


@dataclass
class MaintenanceReport:
    """Summary of a whole run, one :class:`GroupStats` per executed group."""

    run_id: str
    dry_run: bool = False
    groups: List[GroupStats] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return sum(g.failed for g in self.groups)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the report to a JSON-safe dictionary."""
        return asdict(self)


def _bounded(semaphore: Optional[asyncio.Semaphore], handler: CardHandler) -> CardHandler:
    if semaphore is None:
        return handler

    async def _run(card: Card, list_id: str) -> CardResult:
        async with semaphore:
            return await handler(card, list_id)

    return _run


async def _join_all(coros: List[Awaitable[Any]]) -> List[Any]:
    """Await all ``coros`` concurrently; on the first error cancel the rest."""

    tasks = [asyncio.ensure_future(coro) for coro in coros]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def process_list(client: TrelloClient, list_id: str, handler: CardHandler) -> List[CardResult]:
    """Fetch one list and run ``handler`` on all of its cards concurrently."""

    trello_list = await client.get_list(list_id)
    cards = await client.get_list_cards(list_id)
    logger.info("The list %r (%s) contains %d cards", trello_list.name, list_id, len(cards))

    return await _join_all([handler(card, list_id) for card in cards])


async def run_group(
    client: TrelloClient,
    group: str,
    list_ids: List[str],
    handler: CardHandler,
    semaphore: Optional[asyncio.Semaphore] = None,
) -> GroupStats:
    """Process every list of a group concurrently and tally the results."""

    stats = GroupStats(group=group, lists=len(list_ids))
    bounded = _bounded(semaphore, handler)
    per_list = await _join_all([process_list(client, list_id, bounded) for list_id in list_ids])
    for results in per_list:
        for result in results:
            stats.record(result)
    return stats


def _staleness_handler(
    client: TrelloClient,
    action: StaleAction,
    threshold: timedelta,
    now: datetime,
    dry_run: bool,
) -> CardHandler:
    async def _handle(card: Card, list_id: str) -> CardResult:
        return await check_card_for_staleness(
            client,
            card,
            action=action,
            threshold=threshold,
            now=now,
            list_id=list_id,
            dry_run=dry_run,
        )

    return _handle


def _reorder_handler(client: TrelloClient, dry_run: bool) -> CardHandler:
    async def _handle(card: Card, list_id: str) -> CardResult:
        return await reorder_card(client, card, dry_run=dry_run)

    return _handle


async def run_maintenance(
    settings: Settings,
    client: TrelloClient,
    *,
    now: Optional[datetime] = None,
    run_id: Optional[str] = None,
) -> MaintenanceReport:
    """Run the archive, delete and reorder groups in order.

    Args:
        settings: Validated job configuration.
        client: Shared Trello client handle.
        now: Reference time for staleness; captured once when omitted.
        run_id: Correlation id for structured logs.

    Raises:
        TrelloFetchError: a list, card or action history could not be read.
        MutationFailedError: strict mode and a group had failed mutations.
    """

    run_id = run_id or generate_run_id()
    now = now or datetime.now(timezone.utc)
    report = MaintenanceReport(run_id=run_id, dry_run=settings.dry_run)
    semaphore = asyncio.Semaphore(settings.max_concurrency) if settings.max_concurrency > 0 else None

    plan = [
        (
            GROUP_ARCHIVE,
            settings.archive_list_ids,
            _staleness_handler(client, StaleAction.ARCHIVE, settings.inactivity_threshold, now, settings.dry_run),
        ),
        (
            GROUP_DELETE,
            settings.delete_list_ids,
            _staleness_handler(client, StaleAction.DELETE, settings.inactivity_threshold, now, settings.dry_run),
        ),
        (GROUP_REORDER, settings.reorder_list_ids, _reorder_handler(client, settings.dry_run)),
    ]

    for group, list_ids, handler in plan:
        if not list_ids:
            logger.debug("No lists configured for the %s group, skipping", group)
            continue

        log_info(f"Starting {group} group", run_id=run_id, lists=list_ids)
        stats = await run_group(client, group, list_ids, handler, semaphore)
        report.groups.append(stats)
        log_info(f"Finished {group} group", run_id=run_id, cards=stats.cards, failed=stats.failed)

        if stats.failed:
            log_warn(f"{stats.failed} mutation(s) failed in {group} group", run_id=run_id, errors=stats.errors)
            if settings.mutation_errors_fatal:
                raise MutationFailedError(group, stats.failed, report)

    return report
