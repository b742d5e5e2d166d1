"""Trello entity models for the board maintainer.

This module defines the subset of Trello's card, list and action payloads
that the maintenance job reads. Unknown fields in API responses are ignored.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


# Stand-in for a card that reports no last-activity date.
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Card(BaseModel):
    """A Trello card as returned by ``GET /lists/{id}/cards``."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    desc: str = ""
    pos: float = 0.0
    date_last_activity: Optional[datetime] = Field(default=None, alias="dateLastActivity")
    id_list: Optional[str] = Field(default=None, alias="idList")
    closed: bool = False

    @property
    def last_activity(self) -> datetime:
        """Board-reported last activity, or the epoch when absent."""
        if self.date_last_activity is None:
            return EPOCH
        return _as_utc(self.date_last_activity)


class TrelloList(BaseModel):
    """A Trello list as returned by ``GET /lists/{id}``."""

    id: str
    name: str = ""
    closed: bool = False


class Action(BaseModel):
    """An entry of a card, list or board action history."""

    id: str = ""
    type: str
    date: datetime
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def card_id(self) -> Optional[str]:
        card = self.data.get("card")
        if isinstance(card, dict):
            value = card.get("id")
            if isinstance(value, str):
                return value
        return None

    @property
    def moved_between_lists(self) -> bool:
        """True when this ``updateCard`` action changed the card's list."""
        return self.type == "updateCard" and bool(self.data.get("listAfter"))

    @property
    def timestamp(self) -> datetime:
        return _as_utc(self.date)
