# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import copy
import itertools
from typing import Dict, List, Optional, Set
from unittest.mock import MagicMock

import pytest

from school_core.errors.exceptions import RemoteUnavailable
from school_core.models.entities import (
    Address,
    Assignment,
    ClassGroup,
    Project,
    ProjectCategory,
    ProjectOrigin,
    SchoolProfile,
)
from school_core.offline.local_cache import LocalCache
from school_core.offline.school_data_service import SchoolDataService
from school_core.offline.sync_coordinator import SyncCoordinator
from school_core.stores.entity_stores import EntityStores


# =============================================================================
# FAKE REMOTE STORE
# =============================================================================

class FakeRemoteStore:
    """
    In-memory stand-in for RemoteStore.

    Set ``online = False`` to make every call raise RemoteUnavailable, or add
    operation names ("insert", "update", "delete", "fetch") to ``fail_on``.
    Ids handed out by ``insert`` can be queued in ``next_ids``.
    """

    def __init__(self):
        self.online = True
        self.fail_on: Set[str] = set()
        self.next_ids: List[str] = []
        self.rows: Dict[type, Dict[str, object]] = {
            SchoolProfile: {},
            Project: {},
            ClassGroup: {},
            Assignment: {},
        }
        self.calls: List[tuple] = []
        self._counter = itertools.count(1)

    @property
    def is_configured(self) -> bool:
        return True

    def _check(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        if not self.online or operation in self.fail_on:
            raise RemoteUnavailable(
                f"{operation} failed: connection refused",
                table=table,
                operation=operation,
            )

    def fetch_profile(self) -> Optional[SchoolProfile]:
        self._check("fetch", "escola")
        profiles = list(self.rows[SchoolProfile].values())
        return copy.deepcopy(profiles[0]) if profiles else None

    def fetch_all(self, entity_type):
        self._check("fetch", entity_type.__name__)
        items = copy.deepcopy(list(self.rows[entity_type].values()))
        if entity_type is Project:
            items.sort(key=lambda p: p.name)
        return items

    def insert(self, entity):
        self._check("insert", type(entity).__name__)
        stored = copy.deepcopy(entity)
        stored.id = self.next_ids.pop(0) if self.next_ids else f"srv-{next(self._counter)}"
        self.rows[type(entity)][stored.id] = stored
        return copy.deepcopy(stored)

    def update(self, entity) -> None:
        self._check("update", type(entity).__name__)
        self.rows[type(entity)][entity.id] = copy.deepcopy(entity)

    def delete(self, entity_type, record_id: str) -> None:
        self._check("delete", entity_type.__name__)
        self.rows[entity_type].pop(record_id, None)


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def sample_profile():
    return SchoolProfile(
        name="EMEF Paulo Freire",
        cnpj="12.345.678/0001-90",
        inep_code="35123456",
        email="secretaria@paulofreire.edu.br",
        phone="(11) 3333-4444",
        address=Address(street="Rua das Flores", number="100", city="Campinas", state="SP"),
        teaching_types=["fundamental_1", "fundamental_2"],
        shifts=[{"tipo": "manha", "horaInicio": "07:00", "horaFim": "12:00", "ativo": True}],
        principal="Maria Souza",
    )


@pytest.fixture
def sample_project():
    return Project(
        name="Horta Escolar",
        description="Cultivo de hortaliças com as turmas do 6º ano",
        category=ProjectCategory.ENVIRONMENTAL,
        origin=ProjectOrigin.OWN,
        active=True,
    )


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def fake_remote():
    return FakeRemoteStore()


@pytest.fixture
def cache(tmp_path):
    local_cache = LocalCache(tmp_path / "school.db")
    yield local_cache
    local_cache.close()


@pytest.fixture
def stores():
    return EntityStores()


@pytest.fixture
def coordinator(stores, fake_remote, cache):
    return SyncCoordinator(stores, fake_remote, cache)


@pytest.fixture
def service(fake_remote, cache):
    return SchoolDataService(remote=fake_remote, cache=cache)


@pytest.fixture
def seeded_stores():
    """Two projects, three class groups, four assignments."""
    stores = EntityStores()
    stores.create_project(Project(name="Robótica", id="P1"))
    stores.create_project(Project(name="Teatro", id="P2"))
    stores.create_class_group(ClassGroup(project_id="P1", name="6A", capacity=20, id="C1"))
    stores.create_class_group(ClassGroup(project_id="P1", name="6B", capacity=25, id="C2"))
    stores.create_class_group(ClassGroup(project_id="P2", name="7A", capacity=30, id="C3"))
    stores.create_assignment(Assignment(project_id="P1", class_group_id="C1", teacher_name="Ana", lessons=2, id="A1"))
    stores.create_assignment(Assignment(project_id="P1", class_group_id="C2", teacher_name="Bruno", lessons=3, id="A2"))
    stores.create_assignment(Assignment(project_id="P2", class_group_id="C3", teacher_name="Carla", lessons=4, id="A3"))
    # Cross-project assignment: belongs to P2 but teaches P1's class group
    stores.create_assignment(Assignment(project_id="P2", class_group_id="C1", teacher_name="Davi", lessons=1, id="A4"))
    return stores


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_supabase():
    """Mock Supabase client"""
    mock_client = MagicMock()
    mock_client.table.return_value.select.return_value.execute.return_value.data = []
    mock_client.table.return_value.insert.return_value.execute.return_value = MagicMock()
    return mock_client
