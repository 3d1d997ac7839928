# =============================================================================
# school_core/offline/school_data_service.py
# School Data Service - Single API for Online/Offline Operations
# =============================================================================
"""
SchoolDataService - the entry point used by pages and scripts.

Wires together the entity stores, the Supabase remote store, the local
cache, the bootstrap loader and the sync coordinator, and exposes:

- read-only copies of the profile and the three collections
- the current sync status (and a loading flag while bootstrapping)
- every mutation of the sync coordinator
- ``reload()`` to re-run bootstrap
- ``restore(profile)`` to overwrite the profile from a backup, locally only

Usage:
------
from school_core.offline import get_data_service

service = get_data_service()
result = service.create_project(Project(name="Horta escolar"))
print(service.sync_status)  # SyncStatus.SYNCED / SyncStatus.ERROR
"""

from __future__ import annotations
import copy
import threading
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from school_core.config import Settings, load_settings
from school_core.data.supabase_client import RemoteStore
from school_core.logging import get_logger
from school_core.models.entities import (
    Assignment,
    AssignmentUpdate,
    ClassGroup,
    ClassGroupUpdate,
    ProfileUpdate,
    Project,
    ProjectUpdate,
    SchoolProfile,
)
from school_core.offline.bootstrap import BootstrapLoader, BootstrapResult
from school_core.offline.local_cache import LocalCache
from school_core.offline.sync_coordinator import (
    PROFILE,
    MutationResult,
    SyncCoordinator,
    SyncState,
    SyncStatus,
)
from school_core.stores.entity_stores import EntityStores, Removal

logger = get_logger(__name__)


class SchoolDataService:
    """
    Unified data service for the school registry.
    """

    COLLECTIONS = ("projects", "class_groups", "assignments")

    def __init__(
        self,
        remote: RemoteStore,
        cache: LocalCache,
        stores: Optional[EntityStores] = None,
    ):
        self.stores = stores or EntityStores()
        self.remote = remote
        self.cache = cache
        self.coordinator = SyncCoordinator(self.stores, remote, cache)
        self.loader = BootstrapLoader(remote, cache)
        self._loading = False

    @classmethod
    def from_settings(cls, settings: Settings) -> SchoolDataService:
        return cls(
            remote=RemoteStore.from_settings(settings),
            cache=LocalCache(settings.cache_path, namespace=settings.cache_namespace),
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def profile(self) -> SchoolProfile:
        return self.stores.profile.current()

    @property
    def projects(self) -> List[Project]:
        return self.stores.projects.snapshot()

    @property
    def class_groups(self) -> List[ClassGroup]:
        return self.stores.class_groups.snapshot()

    @property
    def assignments(self) -> List[Assignment]:
        return self.stores.assignments.snapshot()

    @property
    def sync_status(self) -> SyncStatus:
        return self.coordinator.status

    @property
    def loading(self) -> bool:
        return self._loading

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def reload(self) -> BootstrapResult:
        """Re-run bootstrap and replace the in-memory state with its result."""
        self._loading = True
        self.coordinator.set_status(SyncStatus.SYNCING)
        try:
            try:
                result = self.loader.load()
            except Exception as e:
                self.coordinator.set_status(SyncStatus.ERROR, e)
                raise
            self.stores.load(
                result.profile,
                result.projects,
                result.class_groups,
                result.assignments,
            )
            self.coordinator.set_status(result.status, result.error)
            return result
        finally:
            self._loading = False

    def restore(self, profile: SchoolProfile) -> SchoolProfile:
        """
        Overwrite the profile from a backup. Only memory and the local cache
        are touched; nothing is sent to Supabase and the status is unchanged.
        """
        self.stores.profile.set(copy.deepcopy(profile))
        self.coordinator.persist(PROFILE)
        logger.info("School profile restored from backup")
        return self.profile

    def close(self) -> None:
        self.cache.close()

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def save_profile(self, profile: SchoolProfile) -> MutationResult[SchoolProfile]:
        return self.coordinator.save_profile(profile)

    def update_profile(self, changes: ProfileUpdate) -> MutationResult[SchoolProfile]:
        return self.coordinator.update_profile(changes)

    def create_project(self, project: Project) -> MutationResult[Project]:
        return self.coordinator.create_project(project)

    def update_project(self, project_id: str, changes: ProjectUpdate) -> MutationResult[Project]:
        return self.coordinator.update_project(project_id, changes)

    def delete_project(self, project_id: str) -> MutationResult[Removal]:
        return self.coordinator.delete_project(project_id)

    def create_class_group(self, class_group: ClassGroup) -> MutationResult[ClassGroup]:
        return self.coordinator.create_class_group(class_group)

    def update_class_group(self, class_group_id: str, changes: ClassGroupUpdate) -> MutationResult[ClassGroup]:
        return self.coordinator.update_class_group(class_group_id, changes)

    def delete_class_group(self, class_group_id: str) -> MutationResult[Removal]:
        return self.coordinator.delete_class_group(class_group_id)

    def create_assignment(self, assignment: Assignment) -> MutationResult[Assignment]:
        return self.coordinator.create_assignment(assignment)

    def update_assignment(self, assignment_id: str, changes: AssignmentUpdate) -> MutationResult[Assignment]:
        return self.coordinator.update_assignment(assignment_id, changes)

    def delete_assignment(self, assignment_id: str) -> MutationResult[Removal]:
        return self.coordinator.delete_assignment(assignment_id)

    # =========================================================================
    # STATUS & DISPLAY
    # =========================================================================

    def register_status_callback(self, callback: Callable[[SyncState], None]) -> None:
        self.coordinator.register_callback(callback)

    def unregister_status_callback(self, callback: Callable[[SyncState], None]) -> None:
        self.coordinator.unregister_callback(callback)

    def to_dataframe(self, collection: str) -> pd.DataFrame:
        """
        Tabular view of one collection for display.

        Args:
            collection: "projects", "class_groups" or "assignments"
        """
        if collection not in self.COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")

        records = [item.to_dict() for item in getattr(self, collection)]
        if not records:
            return pd.DataFrame()
        return pd.DataFrame.from_records(records)

    def get_status(self) -> Dict[str, Any]:
        """Status information for UI display."""
        return {
            "sync": self.coordinator.get_status_display(),
            "loading": self._loading,
            "remote_configured": self.remote.is_configured,
            "pending_sync": sum(
                1 for name in self.COLLECTIONS
                for item in getattr(self, name) if item.pending_sync
            ),
            "counts": {name: len(getattr(self, name)) for name in self.COLLECTIONS},
        }


# Singleton accessor
_data_service: Optional[SchoolDataService] = None
_lock = threading.Lock()


def get_data_service(settings: Optional[Settings] = None) -> SchoolDataService:
    """
    Get the process-wide SchoolDataService, loading data on first use.

    Usage:
        from school_core.offline import get_data_service

        service = get_data_service()
        projects = service.projects
    """
    global _data_service
    if _data_service is None:
        with _lock:
            if _data_service is None:
                service = SchoolDataService.from_settings(settings or load_settings())
                service.reload()
                _data_service = service
    return _data_service
