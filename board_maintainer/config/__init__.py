"""Configuration package for the Trello board maintainer."""

from board_maintainer.config.settings import (
    DEFAULT_INACTIVITY_THRESHOLD_HOURS,
    ConfigError,
    Settings,
    load_settings,
    split_list_ids,
)

__all__ = [
    "DEFAULT_INACTIVITY_THRESHOLD_HOURS",
    "ConfigError",
    "Settings",
    "load_settings",
    "split_list_ids",
]
