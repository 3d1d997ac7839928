# =============================================================================
# school_core/offline/__init__.py
# Offline-First Sync Engine for the School Registry
# =============================================================================
"""
Offline-first data layer.

Architecture:
------------
    ┌───────────────────────────────────────────────┐
    │              SchoolDataService                 │
    │     (Single API - pages and scripts use it)    │
    └───────────────────────────────────────────────┘
             │                          │
             ▼                          ▼
    ┌──────────────────┐      ┌──────────────────┐
    │ BootstrapLoader  │      │ SyncCoordinator  │
    │ (startup/reload) │      │ (every mutation) │
    └──────────────────┘      └──────────────────┘
             │       \\           /       │
             │        EntityStores        │
             ▼                            ▼
       ┌──────────┐               ┌──────────────┐
       │ Supabase │               │ LocalCache   │
       │ (remote) │               │ (SQLite)     │
       └──────────┘               └──────────────┘

Usage:
------
from school_core.offline import get_data_service

service = get_data_service()
service.create_project(Project(name="Horta escolar"))
print(service.sync_status)
"""

from school_core.offline.local_cache import (
    CacheKeys,
    LocalCache,
)

from school_core.offline.sync_coordinator import (
    MutationResult,
    SyncCoordinator,
    SyncState,
    SyncStatus,
)

from school_core.offline.bootstrap import (
    BootstrapLoader,
    BootstrapResult,
)

from school_core.offline.school_data_service import (
    SchoolDataService,
    get_data_service,
)

__all__ = [
    # Local cache
    "CacheKeys",
    "LocalCache",
    # Sync
    "MutationResult",
    "SyncCoordinator",
    "SyncState",
    "SyncStatus",
    # Bootstrap
    "BootstrapLoader",
    "BootstrapResult",
    # Unified Service (Main API)
    "SchoolDataService",
    "get_data_service",
]
