"""
Shared error types and error-logging helpers.
"""

from __future__ import annotations

import logging


class RuleNotFoundError(LookupError):
    """Raised when a dependency rule id does not exist."""

    def __init__(self, rule_id: int) -> None:
        super().__init__(f"Dependency rule {rule_id} not found")
        self.rule_id = rule_id


def _format_extra(extra: dict | None) -> str:
    if not extra:
        return ""
    parts: list[str] = []
    for key, value in extra.items():
        if value is None:
            continue
        parts.append(f"{key}={value}")
    return f" {' '.join(parts)}" if parts else ""


def log_exception(logger: logging.Logger, msg: str, *, extra: dict | None = None, exc: Exception | None = None) -> None:
    """
    Log an exception with context. Uses logger.exception for stack traces.
    """
    suffix = _format_extra(extra)
    if exc is not None:
        logger.error(f"{msg}{suffix}: {exc}", exc_info=exc)
        return
    logger.exception(f"{msg}{suffix}")
