# =============================================================================
# school_core/data/supabase_client.py
# Supabase Client for the School Registry
# Remote CRUD for the school profile, projects, class groups and assignments
# =============================================================================
"""
Remote store client.

Every call either returns its payload or raises ``RemoteUnavailable``;
network errors, timeouts and PostgREST errors are not told apart. Retry
policy lives with the caller, not here.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Type

from school_core.config import Settings
from school_core.errors.exceptions import RemoteUnavailable
from school_core.logging import get_logger
from school_core.models.entities import Assignment, ClassGroup, Project, SchoolProfile
from school_core.data import mappers

logger = get_logger(__name__)

# Supabase caps a single select at 1000 rows
PAGE_SIZE = 1000


def get_supabase_client(settings: Settings):
    """
    Create a Supabase client from settings.

    Returns:
        Supabase client instance or None if credentials are missing or the
        client cannot be created
    """
    if not settings.has_remote:
        return None

    try:
        from supabase import create_client, Client

        client: Client = create_client(settings.supabase_url, settings.supabase_key)
        return client
    except Exception as e:
        logger.warning(f"Failed to initialize Supabase client: {e}")
        return None


class SupabaseTable:
    """
    CRUD access to a single Supabase table.
    """

    def __init__(self, client, table_name: str):
        """
        Args:
            client: Supabase client (None means the remote is unavailable)
            table_name: Name of the Supabase table
        """
        self.client = client
        self.table_name = table_name

    def is_connected(self) -> bool:
        """Check if a Supabase client is available."""
        return self.client is not None

    def _fail(self, operation: str, error: Optional[Exception] = None) -> RemoteUnavailable:
        reason = str(error) if error else "Supabase client not configured"
        return RemoteUnavailable(
            f"{operation} on {self.table_name} failed: {reason}",
            table=self.table_name,
            operation=operation,
        )

    def _table(self, operation: str):
        if not self.is_connected():
            raise self._fail(operation)
        return self.client.table(self.table_name)

    def fetch_all(self, order_by: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Fetch ALL rows of the table, paging past the 1000 row limit.

        Args:
            order_by: Column to order by (optional)

        Returns:
            List of row dicts
        """
        table = self._table("fetch_all")
        try:
            rows: List[Dict[str, Any]] = []
            offset = 0

            while True:
                query = table.select("*")
                if order_by:
                    query = query.order(order_by)
                response = query.range(offset, offset + PAGE_SIZE - 1).execute()

                batch = response.data or []
                rows.extend(batch)
                if len(batch) < PAGE_SIZE:
                    break
                offset += PAGE_SIZE

            return rows
        except Exception as e:
            raise self._fail("fetch_all", e) from e

    def fetch_one(self) -> Optional[Dict[str, Any]]:
        """Fetch the first row of the table, or None if it is empty."""
        table = self._table("fetch_one")
        try:
            response = table.select("*").limit(1).execute()
        except Exception as e:
            raise self._fail("fetch_one", e) from e
        return response.data[0] if response.data else None

    def insert(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a single row.

        Returns:
            The inserted row as stored by Supabase (includes the assigned id)
        """
        table = self._table("insert")
        try:
            response = table.insert(row).execute()
        except Exception as e:
            raise self._fail("insert", e) from e
        if not response.data:
            raise self._fail("insert", ValueError("no row returned"))
        return response.data[0]

    def update(self, record_id: str, row: Dict[str, Any]) -> None:
        """Update the row with the given id."""
        table = self._table("update")
        try:
            table.update(row).eq("id", record_id).execute()
        except Exception as e:
            raise self._fail("update", e) from e

    def delete(self, record_id: str) -> None:
        """Delete the row with the given id."""
        table = self._table("delete")
        try:
            table.delete().eq("id", record_id).execute()
        except Exception as e:
            raise self._fail("delete", e) from e


class RemoteStore:
    """
    Entity-level remote operations for the four school tables.

    Usage:
        remote = RemoteStore.from_settings(load_settings())
        projects = remote.fetch_all(Project)
        saved = remote.insert(Project(name="Horta escolar"))
    """

    TABLES: Dict[Type, str] = {
        SchoolProfile: "escola",
        Project: "projetos",
        ClassGroup: "projeto_turmas",
        Assignment: "projeto_atribuicoes",
    }

    ORDER_BY: Dict[Type, Optional[str]] = {
        SchoolProfile: None,
        Project: "nome",
        ClassGroup: None,
        Assignment: None,
    }

    def __init__(self, client):
        self.client = client
        self._tables = {
            entity_type: SupabaseTable(client, name)
            for entity_type, name in self.TABLES.items()
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> RemoteStore:
        return cls(get_supabase_client(settings))

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def table(self, entity_type: Type) -> SupabaseTable:
        return self._tables[entity_type]

    def fetch_profile(self) -> Optional[SchoolProfile]:
        row = self.table(SchoolProfile).fetch_one()
        return mappers.profile_from_row(row) if row else None

    def fetch_all(self, entity_type: Type) -> List[Any]:
        rows = self.table(entity_type).fetch_all(order_by=self.ORDER_BY[entity_type])
        return [mappers.from_row(entity_type, row) for row in rows]

    def insert(self, entity: Any) -> Any:
        """Insert an entity and return it as read back from Supabase."""
        entity_type = type(entity)
        stored = self.table(entity_type).insert(mappers.to_row(entity))
        return mappers.from_row(entity_type, stored)

    def update(self, entity: Any) -> None:
        self.table(type(entity)).update(entity.id, mappers.to_row(entity))

    def delete(self, entity_type: Type, record_id: str) -> None:
        self.table(entity_type).delete(record_id)
