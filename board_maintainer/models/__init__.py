"""Trello data models used by the maintainer."""

from board_maintainer.models.trello import EPOCH, Action, Card, TrelloList

__all__ = ["EPOCH", "Action", "Card", "TrelloList"]
