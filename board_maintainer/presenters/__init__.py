"""Presenters package for the Trello board maintainer."""

from board_maintainer.presenters.run_summary_presenter import present_run_summary

__all__ = ["present_run_summary"]
