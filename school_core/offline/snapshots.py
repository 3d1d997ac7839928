# =============================================================================
# school_core/offline/snapshots.py
# JSON snapshot encoding for the local cache
# =============================================================================
"""
Decoding is strict: a snapshot that parses as JSON but does not describe
valid entities (wrong shape, wrong field types, unknown enum values) is
reported as ``SerializationFailure`` so callers can fall back to defaults.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Type, TypeVar

from school_core.errors.exceptions import EntityValidationError, SerializationFailure
from school_core.models.entities import SchoolProfile

T = TypeVar("T")

# Raised by from_dict/validate on malformed snapshot content
DECODE_ERRORS = (TypeError, ValueError, AttributeError, EntityValidationError)


def encode_profile(profile: Optional[SchoolProfile]) -> Optional[Dict[str, Any]]:
    return profile.to_dict() if profile is not None else None


def encode_collection(items: List[Any]) -> List[Dict[str, Any]]:
    return [item.to_dict() for item in items]


def decode_profile(data: Any, key: str) -> Optional[SchoolProfile]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise SerializationFailure("Profile snapshot is not an object", key=key)
    try:
        profile = SchoolProfile.from_dict(data)
        profile.validate()
    except DECODE_ERRORS as e:
        raise SerializationFailure(f"Invalid profile snapshot: {e}", key=key) from e
    return profile


def _decode_item(entity_type: Type[T], item: Any) -> T:
    if not isinstance(item, dict):
        raise TypeError(f"expected an object, got {type(item).__name__}")
    entity = entity_type.from_dict(item)
    entity.validate()
    if not isinstance(entity.id, str) or not entity.id:
        raise TypeError(f"{entity_type.__name__} without a usable id: {entity.id!r}")
    return entity


def decode_collection(entity_type: Type[T], data: Any, key: str) -> List[T]:
    """Decode a cached collection; every member must be a valid, identified entity."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise SerializationFailure("Collection snapshot is not a list", key=key)
    try:
        return [_decode_item(entity_type, item) for item in data]
    except DECODE_ERRORS as e:
        raise SerializationFailure(
            f"Invalid {entity_type.__name__} snapshot: {e}", key=key
        ) from e
