"""Similarity-driven card ordering.

Cards in a reorder list carry a similarity score in ``[0, 1]`` as the last
word of their description. Higher similarity sorts earlier: the score maps
inversely onto Trello's position axis, scaled by ``POSITION_SCALE``.

Only the text after the last space character is considered. Trailing
newlines and tabs around that token are tolerated (``"match 0.5\\n"`` scores
0.5), since descriptions edited in the Trello UI often end with a newline.
A trailing space still leaves an empty token and therefore no score.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from board_maintainer.core.outcomes import CardOutcome, CardResult
from board_maintainer.models.trello import Card
from board_maintainer.services.trello import TrelloClient


logger = logging.getLogger("trello_maintainer.reorder")

POSITION_SCALE = 1e7
# In normalized (0..1) position space.
POSITION_TOLERANCE = 1e-2


def extract_similarity(description: Optional[str]) -> Optional[float]:
    """Parse the token after the last space of ``description`` as a float.

    Returns None when there is no space or the token is not a finite number.
    """

    if not description:
        return None
    idx = description.rfind(" ")
    if idx < 0:
        return None
    token = description[idx + 1:].strip()
    if not token:
        return None
    try:
        value = float(token)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def target_position(similarity: float) -> float:
    return (1 - similarity) * POSITION_SCALE


def position_drift(current_position: float, similarity: float) -> float:
    """Signed distance between the current and target position, normalized."""

    return 1 - current_position / POSITION_SCALE - similarity


def needs_reposition(current_position: float, similarity: float) -> bool:
    return abs(position_drift(current_position, similarity)) > POSITION_TOLERANCE


async def reorder_card(client: TrelloClient, card: Card, *, dry_run: bool = False) -> CardResult:
    """Move ``card`` to the position implied by its similarity score."""

    similarity = extract_similarity(card.desc)
    if similarity is None:
        logger.info("Card %r has no similarity score in its description, skipping", card.name)
        return CardResult(card.id, card.name, CardOutcome.SKIPPED)

    if not needs_reposition(card.pos, similarity):
        logger.debug("Card %r already at position %s for similarity %s", card.name, card.pos, similarity)
        return CardResult(card.id, card.name, CardOutcome.KEPT)

    target = target_position(similarity)
    if dry_run:
        logger.info("[dry-run] Card %r would move from %s to %s (similarity %s)", card.name, card.pos, target, similarity)
        return CardResult(card.id, card.name, CardOutcome.REPOSITIONED, dry_run=True)

    logger.info("Repositioning card %r from %s to %s (similarity %s)", card.name, card.pos, target, similarity)
    result = await client.set_card_position(card.id, target)
    if not result.get("success"):
        error = str(result.get("error") or "UNKNOWN_ERROR")
        logger.error("Failed to reposition card %r (%s): %s", card.name, card.id, error)
        return CardResult(card.id, card.name, CardOutcome.FAILED, error=error)

    card.pos = target
    return CardResult(card.id, card.name, CardOutcome.REPOSITIONED)
