# =============================================================================
# school_core/errors/handlers.py
# Streamlit feedback for School Registry errors
# =============================================================================
"""
Maps data-layer exceptions to what the page shows.

- RemoteUnavailable: expected while offline, shown as a warning that the
  data on screen is the copy saved on this device.
- SerializationFailure: warning, the unreadable snapshot was ignored.
- ReferentialViolation / EntityValidationError / EntityNotFound: error
  naming the offending field or id.
- ConfigurationError: critical, the page is not usable until the secrets
  are fixed; never suppressed.
"""

from __future__ import annotations
from typing import Optional, Tuple

import streamlit as st

from school_core.logging import get_logger
from .exceptions import (
    EntityNotFound,
    EntityValidationError,
    ReferentialViolation,
    RemoteUnavailable,
    SchoolRegistryError,
    SerializationFailure,
)

logger = get_logger(__name__)

WARNING = "warning"
ERROR = "error"
CRITICAL = "critical"

OFFLINE_MESSAGE = "⚠️ Supabase is unreachable. Showing the data saved on this device."
CORRUPT_CACHE_MESSAGE = "⚠️ Part of the local copy could not be read and was ignored."


def user_feedback(error: Exception, fallback: Optional[str] = None) -> Tuple[str, str]:
    """
    Severity and message to show for ``error``.

    Returns:
        (severity, message) with severity one of "warning", "error", "critical"
    """
    if isinstance(error, RemoteUnavailable):
        return WARNING, OFFLINE_MESSAGE
    if isinstance(error, SerializationFailure):
        return WARNING, CORRUPT_CACHE_MESSAGE
    if isinstance(error, (ReferentialViolation, EntityValidationError)):
        field = error.details.get("field")
        return ERROR, f"{error.message} (field: {field})" if field else error.message
    if isinstance(error, EntityNotFound):
        return ERROR, error.message
    if isinstance(error, SchoolRegistryError):
        return (ERROR if error.recoverable else CRITICAL), error.message
    return ERROR, fallback or str(error)


def handle_error(error: Exception, show_user_message: bool = True,
                 user_message: Optional[str] = None) -> str:
    """
    Log ``error`` and optionally show it on the page.

    Offline and cache problems are logged at WARNING without a traceback;
    everything else at ERROR with one.

    Returns:
        The severity that was applied
    """
    severity, message = user_feedback(error, user_message)
    code = error.code if isinstance(error, SchoolRegistryError) else "UNKNOWN"

    if severity == WARNING:
        logger.warning(f"[{code}] {error}")
    else:
        logger.error(f"[{code}] {message}", exc_info=error)

    if show_user_message:
        if severity == WARNING:
            st.warning(message)
        elif severity == CRITICAL:
            st.error(f"{message}. Check .streamlit/secrets.toml and reload the page.")
        else:
            st.error(message)

    return severity


class ErrorContext:
    """
    Wrap a page action so data-layer errors become page feedback.

    Usage:
        with ErrorContext("Reloading school data"):
            service.reload()

    Warnings and errors are suppressed when ``recoverable`` is True; a
    critical error (bad configuration) always propagates.
    """

    def __init__(self, operation: str, recoverable: bool = True):
        self.operation = operation
        self.recoverable = recoverable
        self.severity: Optional[str] = None

    def __enter__(self) -> ErrorContext:
        logger.debug(f"{self.operation}: started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            logger.debug(f"{self.operation}: done")
            return False
        if not isinstance(exc_val, Exception):
            return False

        self.severity = handle_error(exc_val, user_message=f"{self.operation} failed")
        return self.recoverable and self.severity != CRITICAL
