"""Runtime settings for the Trello board maintainer.

Every option is read from the process environment (``main.py`` loads a
``.env`` file first when one is present). Only the Trello key and token are
mandatory; each list group is skipped when its identifier string is empty.

Configuration mistakes raise :class:`ConfigError` before any network call is
made, so a misconfigured cron job fails fast with exit status 1.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Mapping, Optional


TRELLO_KEY_ENV = "TRELLO_KEY"
TRELLO_TOKEN_ENV = "TRELLO_TOKEN"
TRELLO_ARCHIVE_LIST_ENV = "TRELLO_ARCHIVE_LIST"
TRELLO_LEGACY_LIST_ENV = "TRELLO_LIST"
TRELLO_DELETE_LIST_ENV = "TRELLO_DELETE_LIST"
TRELLO_REORDER_LIST_ENV = "TRELLO_REORDER_LIST"
THRESHOLD_HOURS_ENV = "CARD_INACTIVITY_ARCHIVAL_THRESHOLD_HOURS"
MUTATION_ERRORS_FATAL_ENV = "MUTATION_ERRORS_FATAL"
MAX_CONCURRENCY_ENV = "MAX_CONCURRENCY"
DRY_RUN_ENV = "DRY_RUN"
HTTP_TIMEOUT_ENV = "HTTP_TIMEOUT_SECONDS"
LOG_LEVEL_ENV = "LOG_LEVEL"

# 14 days.
DEFAULT_INACTIVITY_THRESHOLD_HOURS = 336.0
DEFAULT_HTTP_TIMEOUT_SECONDS = 15.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class ConfigError(Exception):
    """Raised when the environment does not describe a runnable job."""


@dataclass(frozen=True)
class Settings:
    """Validated job configuration.

    Attributes:
        api_key: Trello API key.
        api_token: Trello API token.
        archive_list_ids: Lists whose stale cards are archived.
        delete_list_ids: Lists whose stale cards are deleted.
        reorder_list_ids: Lists whose cards are ordered by similarity.
        inactivity_threshold: Age after which a card counts as stale.
        mutation_errors_fatal: Abort after a group if any mutation failed.
        max_concurrency: Cap on in-flight card tasks; 0 means unbounded.
        dry_run: Log decisions without mutating the board.
        http_timeout: Per-request timeout in seconds.
        log_level: Root logging level name.
    """

    api_key: str
    api_token: str
    archive_list_ids: List[str]
    delete_list_ids: List[str]
    reorder_list_ids: List[str]
    inactivity_threshold: timedelta
    mutation_errors_fatal: bool = False
    max_concurrency: int = 0
    dry_run: bool = False
    http_timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    log_level: str = "INFO"

    def has_work(self) -> bool:
        return bool(self.archive_list_ids or self.delete_list_ids or self.reorder_list_ids)


def split_list_ids(raw: Optional[str]) -> List[str]:
    """Split a comma-separated identifier string, dropping blanks."""

    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _require(env: Mapping[str, str], key: str) -> str:
    value = (env.get(key) or "").strip()
    if not value:
        raise ConfigError(f'"{key}" env var is not defined')
    return value


def _parse_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f'can\'t parse "{key}" as a number: {raw!r}') from None
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise ConfigError(f'"{key}" must be a finite non-negative number, got {raw!r}')
    return value


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigError(f'can\'t parse "{key}" as an integer: {raw!r}') from None
    if value < 0:
        raise ConfigError(f'"{key}" must not be negative, got {raw!r}')
    return value


def _parse_bool(env: Mapping[str, str], key: str, default: bool = False) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f'"{key}" must be a boolean (true/false), got {raw!r}')


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``)."""

    env = os.environ if environ is None else environ

    api_key = _require(env, TRELLO_KEY_ENV)
    api_token = _require(env, TRELLO_TOKEN_ENV)

    archive_raw = env.get(TRELLO_ARCHIVE_LIST_ENV)
    if archive_raw is None:
        archive_raw = env.get(TRELLO_LEGACY_LIST_ENV)

    threshold_hours = _parse_float(env, THRESHOLD_HOURS_ENV, DEFAULT_INACTIVITY_THRESHOLD_HOURS)

    log_level = (env.get(LOG_LEVEL_ENV) or "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigError(f'"{LOG_LEVEL_ENV}" must be one of {sorted(_LOG_LEVELS)}, got {log_level!r}')

    http_timeout = _parse_float(env, HTTP_TIMEOUT_ENV, DEFAULT_HTTP_TIMEOUT_SECONDS)
    if http_timeout == 0:
        raise ConfigError(f'"{HTTP_TIMEOUT_ENV}" must be greater than zero')

    settings = Settings(
        api_key=api_key,
        api_token=api_token,
        archive_list_ids=split_list_ids(archive_raw),
        delete_list_ids=split_list_ids(env.get(TRELLO_DELETE_LIST_ENV)),
        reorder_list_ids=split_list_ids(env.get(TRELLO_REORDER_LIST_ENV)),
        inactivity_threshold=timedelta(hours=threshold_hours),
        mutation_errors_fatal=_parse_bool(env, MUTATION_ERRORS_FATAL_ENV),
        max_concurrency=_parse_int(env, MAX_CONCURRENCY_ENV, 0),
        dry_run=_parse_bool(env, DRY_RUN_ENV),
        http_timeout=http_timeout,
        log_level=log_level,
    )

    if not settings.has_work():
        raise ConfigError(
            f'no list configured: set at least one of "{TRELLO_ARCHIVE_LIST_ENV}", '
            f'"{TRELLO_DELETE_LIST_ENV}" or "{TRELLO_REORDER_LIST_ENV}"'
        )

    return settings
