# =============================================================================
# school_core/offline/bootstrap.py
# Startup loading: Supabase first, local cache as fallback
# =============================================================================
"""
BootstrapLoader - hydrates the entity stores at startup.

The four collections come either all from Supabase or all from the local
cache, never a mix: cached foreign keys may point at ids the remote never
saw, and the reverse.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from school_core.data.supabase_client import RemoteStore
from school_core.errors.exceptions import RemoteUnavailable, SerializationFailure
from school_core.logging import get_logger, LogContext
from school_core.models.entities import Assignment, ClassGroup, Project, SchoolProfile
from school_core.offline.local_cache import LocalCache
from school_core.offline.snapshots import (
    decode_collection,
    decode_profile,
    encode_collection,
    encode_profile,
)
from school_core.offline.sync_coordinator import SyncStatus

logger = get_logger(__name__)

SOURCE_REMOTE = "remote"
SOURCE_CACHE = "cache"


@dataclass
class BootstrapResult:
    """Collections loaded at startup and where they came from."""
    profile: Optional[SchoolProfile] = None
    projects: List[Project] = field(default_factory=list)
    class_groups: List[ClassGroup] = field(default_factory=list)
    assignments: List[Assignment] = field(default_factory=list)
    source: str = SOURCE_REMOTE
    status: SyncStatus = SyncStatus.SYNCED
    error: Optional[RemoteUnavailable] = None


class BootstrapLoader:
    """
    Usage:
        result = BootstrapLoader(remote, cache).load()
        stores.load(result.profile, result.projects,
                    result.class_groups, result.assignments)
    """

    def __init__(self, remote: RemoteStore, cache: LocalCache):
        self.remote = remote
        self.cache = cache

    def load(self) -> BootstrapResult:
        """
        Load everything from Supabase; on the first failure load everything
        from the cache instead.
        """
        with LogContext(logger, "Loading school data"):
            try:
                result = self.load_from_remote()
            except RemoteUnavailable as e:
                logger.warning(f"Supabase unavailable, loading from local cache: {e}")
                return self.load_from_cache(error=e)

            self._save_snapshots(result)
            return result

    def load_from_remote(self) -> BootstrapResult:
        """Fetch profile, projects, class groups and assignments, in order."""
        profile = self.remote.fetch_profile()
        projects = self.remote.fetch_all(Project)
        class_groups = self.remote.fetch_all(ClassGroup)
        assignments = self.remote.fetch_all(Assignment)

        logger.info(
            f"Loaded from Supabase: {len(projects)} projects, "
            f"{len(class_groups)} class groups, {len(assignments)} assignments"
        )
        return BootstrapResult(
            profile=profile,
            projects=projects,
            class_groups=class_groups,
            assignments=assignments,
            source=SOURCE_REMOTE,
            status=SyncStatus.SYNCED,
        )

    def load_from_cache(self, error: Optional[RemoteUnavailable] = None) -> BootstrapResult:
        """
        Load every collection from the cache. Absent or corrupt snapshots
        fall back to empty defaults.
        """
        keys = self.cache.keys
        result = BootstrapResult(
            profile=self._read(keys.profile, decode_profile, None),
            projects=self._read(keys.projects, lambda d, k: decode_collection(Project, d, k), []),
            class_groups=self._read(keys.class_groups, lambda d, k: decode_collection(ClassGroup, d, k), []),
            assignments=self._read(keys.assignments, lambda d, k: decode_collection(Assignment, d, k), []),
            source=SOURCE_CACHE,
            status=SyncStatus.ERROR,
            error=error,
        )
        result.projects.sort(key=lambda p: p.name.casefold())
        return result

    def _read(self, key: str, decode: Callable[[Any, str], Any], default: Any) -> Any:
        try:
            return decode(self.cache.load(key), key)
        except SerializationFailure as e:
            logger.warning(f"Ignoring unreadable cache snapshot: {e}")
            return default

    def _save_snapshots(self, result: BootstrapResult) -> None:
        keys = self.cache.keys
        self.cache.save(keys.profile, encode_profile(result.profile))
        self.cache.save(keys.projects, encode_collection(result.projects))
        self.cache.save(keys.class_groups, encode_collection(result.class_groups))
        self.cache.save(keys.assignments, encode_collection(result.assignments))
