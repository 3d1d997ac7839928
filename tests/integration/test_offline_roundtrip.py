# =============================================================================
# tests/integration/test_offline_roundtrip.py
# Integration Tests: SchoolDataService across online, offline and restart
# =============================================================================

import pandas as pd
import pytest

from school_core.errors.exceptions import ReferentialViolation
from school_core.models.entities import (
    Assignment,
    ClassGroup,
    Project,
    ProjectUpdate,
    SchoolProfile,
)
from school_core.offline.local_cache import LocalCache
from school_core.offline.school_data_service import SchoolDataService
from school_core.offline.sync_coordinator import SyncStatus


class TestOfflineRoundtrip:
    """Work done while offline survives a restart"""

    def test_online_then_offline_then_restart(self, fake_remote, tmp_path):
        cache_path = tmp_path / "school.db"

        # Session 1: online
        service = SchoolDataService(remote=fake_remote, cache=LocalCache(cache_path))
        service.reload()
        assert service.sync_status is SyncStatus.SYNCED

        fake_remote.next_ids.extend(["P1", "C1"])
        service.create_project(Project(name="Robótica"))
        service.create_class_group(ClassGroup(project_id="P1", name="6A", capacity=20))

        # Connection drops
        fake_remote.online = False
        service.update_project("P1", ProjectUpdate(description="Lego Education"))
        offline = service.create_assignment(
            Assignment(project_id="P1", class_group_id="C1", teacher_name="Ana", lessons=2)
        )
        assert service.sync_status is SyncStatus.ERROR
        assert offline.value.pending_sync
        service.close()

        # Session 2: still offline, starts from the cache
        restarted = SchoolDataService(remote=fake_remote, cache=LocalCache(cache_path))
        result = restarted.reload()

        assert result.source == "cache"
        assert restarted.sync_status is SyncStatus.ERROR
        assert restarted.projects[0].description == "Lego Education"
        assert [a.id for a in restarted.assignments] == [offline.value.id]
        restarted.close()

    def test_reload_from_remote_replaces_local_state(self, service, fake_remote):
        fake_remote.online = False
        service.create_project(Project(name="Só local"))
        fake_remote.online = True
        fake_remote.rows[Project]["P9"] = Project(name="Do servidor", id="P9")

        service.reload()

        assert [p.id for p in service.projects] == ["P9"]
        assert service.sync_status is SyncStatus.SYNCED
        assert not service.loading

    def test_validation_error_leaves_everything_untouched(self, service):
        service.reload()

        with pytest.raises(ReferentialViolation):
            service.create_class_group(ClassGroup(project_id="nonexistent", name="6A"))

        assert service.class_groups == []
        assert service.sync_status is SyncStatus.SYNCED


class TestRestore:

    def test_restore_writes_memory_and_cache_only(self, service, fake_remote, cache, sample_profile):
        service.reload()
        fake_remote.calls.clear()

        restored = service.restore(sample_profile)

        assert restored.name == sample_profile.name
        assert fake_remote.calls == []
        assert cache.load(cache.keys.profile)["name"] == sample_profile.name
        assert service.sync_status is SyncStatus.SYNCED


class TestDisplayHelpers:

    def test_to_dataframe(self, service):
        service.create_project(Project(name="Teatro"))
        service.create_project(Project(name="Coral"))

        df = service.to_dataframe("projects")

        assert isinstance(df, pd.DataFrame)
        assert list(df["name"]) == ["Coral", "Teatro"]
        assert "pending_sync" in df.columns

    def test_empty_collection_gives_empty_frame(self, service):
        assert service.to_dataframe("assignments").empty

    def test_unknown_collection_raises(self, service):
        with pytest.raises(ValueError):
            service.to_dataframe("teachers")

    def test_get_status(self, service, fake_remote):
        fake_remote.online = False
        service.create_project(Project(name="Coral"))

        status = service.get_status()

        assert status["sync"]["status"] == "error"
        assert status["pending_sync"] == 1
        assert status["counts"] == {"projects": 1, "class_groups": 0, "assignments": 0}
        assert status["remote_configured"] is True

    def test_profile_defaults_before_any_save(self, service):
        assert service.profile == SchoolProfile()
