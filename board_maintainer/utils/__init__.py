"""Utility helpers for the Trello board maintainer."""
