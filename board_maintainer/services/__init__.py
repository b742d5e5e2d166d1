"""External service integrations for the Trello board maintainer."""

from board_maintainer.services.trello import TrelloClient, TrelloFetchError

__all__ = ["TrelloClient", "TrelloFetchError"]
