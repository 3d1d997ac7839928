# =============================================================================
# school_core/models/__init__.py
# =============================================================================

from .entities import (
    Address,
    Assignment,
    AssignmentUpdate,
    ClassGroup,
    ClassGroupUpdate,
    ProfileUpdate,
    Project,
    ProjectCategory,
    ProjectOrigin,
    ProjectUpdate,
    SchoolProfile,
    is_local_id,
    new_local_id,
)

__all__ = [
    "Address",
    "Assignment",
    "AssignmentUpdate",
    "ClassGroup",
    "ClassGroupUpdate",
    "ProfileUpdate",
    "Project",
    "ProjectCategory",
    "ProjectOrigin",
    "ProjectUpdate",
    "SchoolProfile",
    "is_local_id",
    "new_local_id",
]
