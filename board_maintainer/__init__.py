"""Trello board maintenance job: stale card cleanup and similarity ordering."""

__version__ = "0.1.0"
