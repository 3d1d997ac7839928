# =============================================================================
# school_core/stores/__init__.py
# =============================================================================

from .entity_stores import (
    AssignmentStore,
    ClassGroupStore,
    CollectionStore,
    EntityStores,
    ProfileStore,
    ProjectStore,
    Removal,
)

__all__ = [
    "AssignmentStore",
    "ClassGroupStore",
    "CollectionStore",
    "EntityStores",
    "ProfileStore",
    "ProjectStore",
    "Removal",
]
