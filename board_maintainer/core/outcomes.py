"""Per-card decision records shared by the maintenance passes."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class StaleAction(str, Enum):
    """What happens to a stale card in a list group."""

    ARCHIVE = "archive"
    DELETE = "delete"


class CardOutcome(str, Enum):
    """Decision taken for one card in one pass."""

    ARCHIVED = "archived"
    DELETED = "deleted"
    REPOSITIONED = "repositioned"
    KEPT = "kept"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class CardResult:
    """Outcome of processing a single card.

    ``dry_run`` is set when a mutation was decided but not sent. ``error``
    carries the client's error code for ``FAILED`` results.
    """

    card_id: str
    card_name: str
    outcome: CardOutcome
    dry_run: bool = False
    error: Optional[str] = None
