"""Staleness evaluation: archive or delete cards that went quiet."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from board_maintainer.core.activity import resolve_last_activity
from board_maintainer.core.outcomes import CardOutcome, CardResult, StaleAction
from board_maintainer.models.trello import Card
from board_maintainer.services.trello import TrelloClient


logger = logging.getLogger("trello_maintainer.staleness")

_APPLIED_OUTCOME = {
    StaleAction.ARCHIVE: CardOutcome.ARCHIVED,
    StaleAction.DELETE: CardOutcome.DELETED,
}


def is_stale(last_activity: datetime, now: datetime, threshold: timedelta) -> bool:
    """A card is stale only when strictly older than ``threshold``."""

    return now - last_activity > threshold


async def _apply(client: TrelloClient, card: Card, action: StaleAction) -> Dict[str, Any]:
    if action is StaleAction.ARCHIVE:
        return await client.archive_card(card.id)
    return await client.delete_card(card.id)


async def check_card_for_staleness(
    client: TrelloClient,
    card: Card,
    *,
    action: StaleAction,
    threshold: timedelta,
    now: datetime,
    list_id: Optional[str] = None,
    dry_run: bool = False,
) -> CardResult:
    """Resolve a card's activity and archive/delete it when stale.

    Fetch errors propagate; a failed archive/delete is reported as a
    ``FAILED`` result instead.
    """

    last_activity = await resolve_last_activity(client, card, list_id)
    elapsed = now - last_activity

    if not is_stale(last_activity, now, threshold):
        logger.debug("Card %r is fresh, last activity was %s ago", card.name, elapsed)
        return CardResult(card.id, card.name, CardOutcome.KEPT)

    if dry_run:
        logger.info("[dry-run] Card %r would be %s as last activity was %s ago", card.name, _APPLIED_OUTCOME[action].value, elapsed)
        return CardResult(card.id, card.name, _APPLIED_OUTCOME[action], dry_run=True)

    logger.info("Card %r is due to %s as last activity was %s ago", card.name, action.value, elapsed)
    result = await _apply(client, card, action)
    if not result.get("success"):
        error = str(result.get("error") or "UNKNOWN_ERROR")
        logger.error("Failed to %s card %r (%s): %s", action.value, card.name, card.id, error)
        return CardResult(card.id, card.name, CardOutcome.FAILED, error=error)

    return CardResult(card.id, card.name, _APPLIED_OUTCOME[action])
