"""Logging utilities for the Trello board maintainer.

This module centralizes logger configuration for the job. Run-level
milestones are emitted as JSON-structured messages so a cron log can be
grepped by ``run_id``.
"""

import json
import logging
import uuid
from typing import Optional


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a configured logger instance."""
    logger_name = name or "trello_maintainer"
    logger = logging.getLogger(logger_name)

    # Configure a console handler once; the job runs as a container/cron
    # process whose stdout is the log sink.
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    return logger


def set_log_level(level: str) -> None:
    """Apply a textual log level (e.g. ``"DEBUG"``) to the root logger."""

    get_logger()
    logging.getLogger().setLevel(level.upper())


def generate_run_id() -> str:
    """Generate a unique run identifier for correlating logs."""

    return str(uuid.uuid4())


def _format_run_message(msg: str) -> str:
    """Prefix a log message with the maintainer tag."""

    return f"[TRELLO-MAINTAINER] {msg}"


def _format_structured_message(
    message: str,
    run_id: Optional[str] = None,
    extra: Optional[dict] = None,
) -> str:
    """Format a log message as a JSON-like structured string."""

    payload: dict = {"message": message}
    if run_id is not None:
        payload["run_id"] = run_id
    if extra:
        payload["extra"] = extra
    return json.dumps(payload, default=str)


def log_info(msg: str, run_id: Optional[str] = None, **extra: object) -> None:
    """Log an informational run milestone."""

    logger = get_logger("trello_maintainer.run")
    logger.info(
        _format_structured_message(_format_run_message(msg), run_id=run_id, extra=extra or None)
    )


def log_warn(msg: str, run_id: Optional[str] = None, **extra: object) -> None:
    """Log a warning run milestone."""

    logger = get_logger("trello_maintainer.run")
    logger.warning(
        _format_structured_message(_format_run_message(msg), run_id=run_id, extra=extra or None)
    )


def log_error(msg: str, run_id: Optional[str] = None, **extra: object) -> None:
    """Log a run-level error."""

    logger = get_logger("trello_maintainer.run")
    logger.error(
        _format_structured_message(_format_run_message(msg), run_id=run_id, extra=extra or None)
    )
