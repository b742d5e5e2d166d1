"""Activity resolution for stale card detection.

The staleness clock of a card is the newest *qualifying* action in its
history: creation, membership change, list move or comment. Position and
description edits are deliberately ignored, otherwise the similarity
reorder pass would keep every card it touches alive forever.

Trello sometimes attributes a card's ``createCard`` action to the list
rather than the card, so an empty card history falls back to the list's
creation actions before falling back to the board-reported
``dateLastActivity``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from board_maintainer.models.trello import Action, Card
from board_maintainer.services.trello import TrelloClient


logger = logging.getLogger("trello_maintainer.activity")

CREATION_ACTION_TYPES = frozenset(
    {
        "createCard",
        "copyCard",
        "emailCard",
        "convertToCardFromCheckItem",
        "moveCardToBoard",
    }
)
MEMBERSHIP_ACTION_TYPES = frozenset({"addMemberToCard", "removeMemberFromCard"})
COMMENT_ACTION_TYPES = frozenset({"commentCard"})

# Requested from the card history endpoint; ``updateCard`` is narrowed to
# list moves afterwards.
CARD_ACTION_FILTER = ",".join(
    sorted(CREATION_ACTION_TYPES | MEMBERSHIP_ACTION_TYPES | COMMENT_ACTION_TYPES | {"updateCard"})
)
LIST_CREATION_FILTER = "createCard"


def is_qualifying_action(action: Action) -> bool:
    """Return True if ``action`` counts as meaningful card activity."""

    if action.type in CREATION_ACTION_TYPES:
        return True
    if action.type in MEMBERSHIP_ACTION_TYPES:
        return True
    if action.type in COMMENT_ACTION_TYPES:
        return True
    return action.moved_between_lists


def latest_qualifying_timestamp(card_id: str, actions: Iterable[Action]) -> Optional[datetime]:
    """Newest qualifying action timestamp belonging to ``card_id``, if any."""

    latest: Optional[datetime] = None
    for action in actions:
        if action.card_id != card_id:
            continue
        if not is_qualifying_action(action):
            continue
        if latest is None or action.timestamp > latest:
            latest = action.timestamp
    return latest


async def _fetch_actions(client: TrelloClient, card: Card, list_id: Optional[str]) -> List[Action]:
    actions = await client.get_card_actions(card.id, action_filter=CARD_ACTION_FILTER)
    if actions:
        return actions

    list_id = list_id or card.id_list
    if not list_id:
        return []

    logger.debug("Card %s has no own actions; checking creation actions of list %s", card.id, list_id)
    list_actions = await client.get_list_actions(list_id, LIST_CREATION_FILTER)
    return [action for action in list_actions if action.card_id == card.id]


async def resolve_last_activity(client: TrelloClient, card: Card, list_id: Optional[str] = None) -> datetime:
    """Return the timestamp of the card's most recent meaningful activity.

    Raises:
        TrelloFetchError: if the card or list history cannot be read.
    """

    actions = await _fetch_actions(client, card, list_id)
    latest = latest_qualifying_timestamp(card.id, actions)
    if latest is not None:
        return latest

    logger.debug(
        "Card %s (%s) has no qualifying actions; using board-reported last activity %s",
        card.id,
        card.name,
        card.last_activity.isoformat(),
    )
    return card.last_activity
