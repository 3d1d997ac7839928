# =============================================================================
# school_core/errors/__init__.py
# Centralized Error Handling for School Registry
# =============================================================================

from .exceptions import (
    SchoolRegistryError,
    ReferentialViolation,
    EntityValidationError,
    EntityNotFound,
    RemoteUnavailable,
    SerializationFailure,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    ErrorContext,
)

__all__ = [
    # Exceptions
    "SchoolRegistryError",
    "ReferentialViolation",
    "EntityValidationError",
    "EntityNotFound",
    "RemoteUnavailable",
    "SerializationFailure",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "ErrorContext",
]
