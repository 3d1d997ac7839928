# =============================================================================
# school_core/errors/exceptions.py
# Exception Hierarchy for the School Registry
# =============================================================================
"""
Every error carries a stable ``code`` (class attribute), a message and a
``details`` dict with the entity, field, table or cache key involved.

Data errors (DATA_*) reject a mutation before anything is applied.
SYNC_001 is absorbed into the ``error`` sync status. CACHE_001 makes the
bootstrap fall back to defaults. CONFIG_001 is the only error the page
cannot continue from.
"""

from typing import Any, Dict, Optional


def _context(base: Optional[Dict[str, Any]] = None, **fields: Any) -> Dict[str, Any]:
    """Merge ``fields`` into ``base``, leaving out the ones that are None."""
    details = dict(base or {})
    details.update({name: value for name, value in fields.items() if value is not None})
    return details


class SchoolRegistryError(Exception):
    """Base class for all school registry errors."""

    code = "SR_000"
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None,
        recoverable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable

    def __str__(self) -> str:
        if not self.details:
            return f"[{self.code}] {self.message}"
        context = ", ".join(f"{name}={value}" for name, value in self.details.items())
        return f"[{self.code}] {self.message} ({context})"

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for logs and the status page."""
        return {
            "error_type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# DATA LAYER
# =============================================================================

class ReferentialViolation(SchoolRegistryError):
    """A mutation references a project or class group that does not exist."""

    code = "DATA_001"

    def __init__(self, message: str, entity: Optional[str] = None,
                 field: Optional[str] = None, value: Optional[str] = None, **kwargs):
        details = _context(kwargs.pop("details", None), entity=entity, field=field, value=value)
        super().__init__(message, details, **kwargs)


class EntityValidationError(SchoolRegistryError):
    """An entity field has the wrong type or an out-of-range value."""

    code = "DATA_002"

    def __init__(self, message: str, entity: Optional[str] = None,
                 field: Optional[str] = None, actual: Optional[Any] = None, **kwargs):
        details = _context(kwargs.pop("details", None), entity=entity, field=field, actual=actual)
        super().__init__(message, details, **kwargs)


class EntityNotFound(SchoolRegistryError):
    """An update or delete targets an id that is not in its store."""

    code = "DATA_003"

    def __init__(self, message: str, entity: Optional[str] = None,
                 entity_id: Optional[str] = None, **kwargs):
        details = _context(kwargs.pop("details", None), entity=entity, entity_id=entity_id)
        super().__init__(message, details, **kwargs)


# =============================================================================
# SYNC / CACHE
# =============================================================================

class RemoteUnavailable(SchoolRegistryError):
    """A Supabase call failed: network, timeout or server error."""

    code = "SYNC_001"

    def __init__(self, message: str, table: Optional[str] = None,
                 operation: Optional[str] = None, **kwargs):
        details = _context(kwargs.pop("details", None), table=table, operation=operation)
        super().__init__(message, details, **kwargs)


class SerializationFailure(SchoolRegistryError):
    """A cached snapshot cannot be read back into entities."""

    code = "CACHE_001"

    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        details = _context(kwargs.pop("details", None), key=key)
        super().__init__(message, details, **kwargs)


# =============================================================================
# CONFIGURATION
# =============================================================================

class ConfigurationError(SchoolRegistryError):
    """The secrets file or environment cannot be turned into Settings."""

    code = "CONFIG_001"
    recoverable = False

    def __init__(self, message: str, config_key: Optional[str] = None,
                 source: Optional[str] = None, **kwargs):
        details = _context(kwargs.pop("details", None), config_key=config_key, source=source)
        super().__init__(message, details, **kwargs)
