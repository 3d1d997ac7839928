# =============================================================================
# school_core/offline/sync_coordinator.py
# Optimistic write protocol and sync status
# =============================================================================
"""
SyncCoordinator - applies every mutation locally, writes it to Supabase and
keeps the local cache in step with memory.

Status machine:

    synced --(remote call issued)--> syncing --(success)--> synced
                                             +--(RemoteUnavailable)--> error

Rules:
- Updates and deletes are applied to memory before the remote call.
  Creates wait for the remote so the server id can be used; on failure the
  entity gets a local id and ``pending_sync=True``.
- A remote failure never rolls memory back. The cache is written either
  way, so it always mirrors what the user last saw.
- Validation errors (ReferentialViolation, EntityValidationError,
  EntityNotFound) propagate before anything is applied.
- There is no retry queue. ``error`` stays until a later mutation succeeds.
- Entities that only exist locally (local ids) are not sent to Supabase on
  update or delete; the status is left as it was.
"""

from __future__ import annotations
import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from school_core.data.supabase_client import RemoteStore
from school_core.errors.exceptions import RemoteUnavailable
from school_core.logging import get_logger, log_sync_transition
from school_core.models.entities import (
    Assignment,
    AssignmentUpdate,
    ClassGroup,
    ClassGroupUpdate,
    ProfileUpdate,
    Project,
    ProjectUpdate,
    SchoolProfile,
    is_local_id,
    new_local_id,
)
from school_core.offline.local_cache import LocalCache
from school_core.offline.snapshots import encode_collection, encode_profile
from school_core.stores.entity_stores import EntityStores, Removal

logger = get_logger(__name__)

T = TypeVar("T")

PROFILE = "profile"
PROJECTS = "projects"
CLASS_GROUPS = "class_groups"
ASSIGNMENTS = "assignments"


class SyncStatus(Enum):
    """Whether memory currently matches Supabase."""
    SYNCED = "synced"
    SYNCING = "syncing"
    ERROR = "error"


@dataclass
class SyncState:
    """Current sync state."""
    status: SyncStatus = SyncStatus.SYNCED
    last_sync: Optional[datetime] = None
    last_success: Optional[datetime] = None
    last_error: Optional[str] = None
    failed_count: int = 0
    total_synced: int = 0


@dataclass
class MutationResult(Generic[T]):
    """Outcome of a mutation: the applied value and the resulting status."""
    value: T
    status: SyncStatus
    error: Optional[RemoteUnavailable] = None

    @property
    def synced(self) -> bool:
        return self.status is SyncStatus.SYNCED


class SyncCoordinator:
    """
    Drives every mutation through memory, Supabase and the local cache.

    Usage:
        coordinator = SyncCoordinator(EntityStores(), remote, cache)
        result = coordinator.create_project(Project(name="Horta escolar"))
        result.value.id    # server id, or a local id if Supabase was down
        result.status      # SyncStatus.SYNCED / SyncStatus.ERROR
    """

    def __init__(self, stores: EntityStores, remote: RemoteStore, cache: LocalCache):
        self.stores = stores
        self.remote = remote
        self.cache = cache
        self._state = SyncState()
        self._settled = SyncStatus.SYNCED
        self._callbacks: List[Callable[[SyncState], None]] = []

    # =========================================================================
    # STATUS
    # =========================================================================

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def status(self) -> SyncStatus:
        return self._state.status

    def set_status(self, status: SyncStatus, error: Optional[Exception] = None) -> None:
        """Transition to ``status`` and notify listeners."""
        if status is SyncStatus.SYNCING:
            self._state.last_sync = datetime.now()
        elif status is SyncStatus.SYNCED:
            self._state.last_success = datetime.now()
            self._state.last_error = None
        elif status is SyncStatus.ERROR and error is not None:
            self._state.last_error = str(error)

        self._state.status = status
        if status is not SyncStatus.SYNCING:
            log_sync_transition(logger, self._settled.value, status.value, self._state.last_error)
            self._settled = status
        self._notify_callbacks()

    def register_callback(self, callback: Callable[[SyncState], None]) -> None:
        """Register a callback for sync state changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[SyncState], None]) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in sync callback: {e}")

    def get_status_display(self) -> Dict[str, Any]:
        """Get sync status for UI display."""
        return {
            "status": self._state.status.value,
            "last_sync": self._state.last_sync.isoformat() if self._state.last_sync else None,
            "last_success": self._state.last_success.isoformat() if self._state.last_success else None,
            "last_error": self._state.last_error,
            "failed_count": self._state.failed_count,
            "total_synced": self._state.total_synced,
        }

    # =========================================================================
    # PROTOCOL
    # =========================================================================

    def persist(self, *collections: str) -> None:
        """Write the current snapshot of each named collection to the cache."""
        keys = self.cache.keys
        for name in collections:
            if name == PROFILE:
                self.cache.save(keys.profile, encode_profile(self.stores.profile.get()))
            elif name == PROJECTS:
                self.cache.save(keys.projects, encode_collection(self.stores.projects.snapshot()))
            elif name == CLASS_GROUPS:
                self.cache.save(keys.class_groups, encode_collection(self.stores.class_groups.snapshot()))
            elif name == ASSIGNMENTS:
                self.cache.save(keys.assignments, encode_collection(self.stores.assignments.snapshot()))
            else:
                raise ValueError(f"Unknown collection: {name}")

    def _call_remote(self, operation: str, call: Callable[[], T]) -> Tuple[Optional[T], Optional[RemoteUnavailable]]:
        """Issue one remote call with the status set to syncing."""
        self.set_status(SyncStatus.SYNCING)
        try:
            return call(), None
        except RemoteUnavailable as e:
            logger.warning(f"{operation} not synced, keeping local change: {e}")
            return None, e

    def _settle(self, error: Optional[RemoteUnavailable]) -> SyncStatus:
        if error is None:
            self._state.total_synced += 1
            self.set_status(SyncStatus.SYNCED)
        else:
            self._state.failed_count += 1
            self.set_status(SyncStatus.ERROR, error)
        return self._state.status

    # =========================================================================
    # PROFILE
    # =========================================================================

    def save_profile(self, profile: SchoolProfile) -> MutationResult[SchoolProfile]:
        """
        Save the school profile: update it remotely if it has an id, insert it
        otherwise. A profile saved again before the insert ever succeeded
        replaces the same single record.
        """
        profile = copy.deepcopy(profile)
        current = self.stores.profile.get()
        if profile.id is None and current is not None:
            profile.id = current.id

        self.stores.profile.set(profile)

        if profile.id is None:
            saved, error = self._call_remote("Insert profile", lambda: self.remote.insert(profile))
            if saved is not None:
                self.stores.profile.assign_id(saved.id)
        else:
            _, error = self._call_remote("Update profile", lambda: self.remote.update(profile))

        self.persist(PROFILE)
        status = self._settle(error)
        return MutationResult(self.stores.profile.current(), status, error)

    def update_profile(self, changes: ProfileUpdate) -> MutationResult[SchoolProfile]:
        """Apply a partial change to the profile and save it."""
        return self.save_profile(self.stores.update_profile(changes))

    # =========================================================================
    # GENERIC CREATE / UPDATE / DELETE
    # =========================================================================

    def _create(
        self,
        entity: Any,
        label: str,
        validate: Callable[[Any], None],
        commit: Callable[[Any], str],
        collection: str,
    ) -> MutationResult:
        entity = copy.deepcopy(entity)
        entity.id = None
        entity.pending_sync = False
        validate(entity)

        stored, error = self._call_remote(f"Create {label}", lambda: self.remote.insert(entity))
        saved = copy.deepcopy(entity)
        if stored is not None:
            saved.id = stored.id
        else:
            saved.id = new_local_id()
            saved.pending_sync = True

        commit(saved)
        self.persist(collection)
        status = self._settle(error)
        return MutationResult(copy.deepcopy(saved), status, error)

    def _update(self, updated: Any, label: str, store, collection: str) -> MutationResult:
        if is_local_id(updated.id):
            self.persist(collection)
            return MutationResult(updated, self.status)

        _, error = self._call_remote(f"Update {label}", lambda: self.remote.update(updated))
        store.set_pending(updated.id, error is not None)
        self.persist(collection)
        status = self._settle(error)
        return MutationResult(store.require(updated.id), status, error)

    def _delete(self, entity_type, entity_id: str, label: str, removal: Removal, *collections: str) -> MutationResult[Removal]:
        if is_local_id(entity_id):
            self.persist(*collections)
            return MutationResult(removal, self.status)

        _, error = self._call_remote(
            f"Delete {label}", lambda: self.remote.delete(entity_type, entity_id)
        )
        self.persist(*collections)
        status = self._settle(error)
        return MutationResult(removal, status, error)

    # =========================================================================
    # PROJECTS
    # =========================================================================

    def create_project(self, project: Project) -> MutationResult[Project]:
        return self._create(
            project, "project",
            self.stores.validate_project, self.stores.create_project, PROJECTS,
        )

    def update_project(self, project_id: str, changes: ProjectUpdate) -> MutationResult[Project]:
        updated = self.stores.update_project(project_id, changes)
        return self._update(updated, "project", self.stores.projects, PROJECTS)

    def delete_project(self, project_id: str) -> MutationResult[Removal]:
        """Delete a project with its class groups and assignments."""
        removal = self.stores.delete_project(project_id)
        return self._delete(
            Project, project_id, "project", removal,
            PROJECTS, CLASS_GROUPS, ASSIGNMENTS,
        )

    # =========================================================================
    # CLASS GROUPS
    # =========================================================================

    def create_class_group(self, class_group: ClassGroup) -> MutationResult[ClassGroup]:
        return self._create(
            class_group, "class group",
            self.stores.validate_class_group, self.stores.create_class_group, CLASS_GROUPS,
        )

    def update_class_group(self, class_group_id: str, changes: ClassGroupUpdate) -> MutationResult[ClassGroup]:
        updated = self.stores.update_class_group(class_group_id, changes)
        return self._update(updated, "class group", self.stores.class_groups, CLASS_GROUPS)

    def delete_class_group(self, class_group_id: str) -> MutationResult[Removal]:
        """Delete a class group with its assignments."""
        removal = self.stores.delete_class_group(class_group_id)
        return self._delete(
            ClassGroup, class_group_id, "class group", removal,
            CLASS_GROUPS, ASSIGNMENTS,
        )

    # =========================================================================
    # ASSIGNMENTS
    # =========================================================================

    def create_assignment(self, assignment: Assignment) -> MutationResult[Assignment]:
        return self._create(
            assignment, "assignment",
            self.stores.validate_assignment, self.stores.create_assignment, ASSIGNMENTS,
        )

    def update_assignment(self, assignment_id: str, changes: AssignmentUpdate) -> MutationResult[Assignment]:
        updated = self.stores.update_assignment(assignment_id, changes)
        return self._update(updated, "assignment", self.stores.assignments, ASSIGNMENTS)

    def delete_assignment(self, assignment_id: str) -> MutationResult[Removal]:
        removal = self.stores.delete_assignment(assignment_id)
        return self._delete(Assignment, assignment_id, "assignment", removal, ASSIGNMENTS)
