# =============================================================================
# tests/unit/test_supabase_client.py
# Unit Tests for the Supabase table client and RemoteStore
# =============================================================================

from unittest.mock import MagicMock

import pytest

from school_core.config import Settings
from school_core.data.supabase_client import (
    PAGE_SIZE,
    RemoteStore,
    SupabaseTable,
    get_supabase_client,
)
from school_core.errors.exceptions import RemoteUnavailable
from school_core.models.entities import Project, ProjectCategory


def response(data):
    result = MagicMock()
    result.data = data
    return result


class TestGetSupabaseClient:

    def test_no_credentials_returns_none(self):
        assert get_supabase_client(Settings()) is None

    def test_partial_credentials_returns_none(self):
        assert get_supabase_client(Settings(supabase_url="https://x.supabase.co")) is None


class TestSupabaseTable:

    def test_unconfigured_client_raises_remote_unavailable(self):
        table = SupabaseTable(None, "projetos")

        assert not table.is_connected()
        with pytest.raises(RemoteUnavailable) as exc_info:
            table.fetch_all()

        assert exc_info.value.details == {"table": "projetos", "operation": "fetch_all"}

    def test_fetch_all_pages_past_limit(self, mock_supabase):
        query = mock_supabase.table.return_value.select.return_value
        first = [{"id": i} for i in range(PAGE_SIZE)]
        query.range.return_value.execute.side_effect = [response(first), response([{"id": "last"}])]

        rows = SupabaseTable(mock_supabase, "projeto_turmas").fetch_all()

        assert len(rows) == PAGE_SIZE + 1
        query.range.assert_any_call(0, PAGE_SIZE - 1)
        query.range.assert_any_call(PAGE_SIZE, 2 * PAGE_SIZE - 1)

    def test_fetch_all_orders_when_asked(self, mock_supabase):
        ordered = mock_supabase.table.return_value.select.return_value.order.return_value
        ordered.range.return_value.execute.return_value = response([{"id": "p1", "nome": "A"}])

        rows = SupabaseTable(mock_supabase, "projetos").fetch_all(order_by="nome")

        mock_supabase.table.return_value.select.return_value.order.assert_called_once_with("nome")
        assert rows == [{"id": "p1", "nome": "A"}]

    def test_network_error_becomes_remote_unavailable(self, mock_supabase):
        mock_supabase.table.return_value.insert.return_value.execute.side_effect = ConnectionError("timeout")

        with pytest.raises(RemoteUnavailable) as exc_info:
            SupabaseTable(mock_supabase, "projetos").insert({"nome": "X"})

        assert "timeout" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_insert_without_returned_row_fails(self, mock_supabase):
        mock_supabase.table.return_value.insert.return_value.execute.return_value = response([])

        with pytest.raises(RemoteUnavailable):
            SupabaseTable(mock_supabase, "projetos").insert({"nome": "X"})

    def test_update_filters_by_id(self, mock_supabase):
        SupabaseTable(mock_supabase, "projetos").update("p1", {"nome": "Y"})

        mock_supabase.table.return_value.update.assert_called_once_with({"nome": "Y"})
        mock_supabase.table.return_value.update.return_value.eq.assert_called_once_with("id", "p1")

    def test_delete_filters_by_id(self, mock_supabase):
        SupabaseTable(mock_supabase, "projetos").delete("p1")

        mock_supabase.table.return_value.delete.return_value.eq.assert_called_once_with("id", "p1")

    def test_fetch_one_empty_table(self, mock_supabase):
        mock_supabase.table.return_value.select.return_value.limit.return_value.execute.return_value = response([])

        assert SupabaseTable(mock_supabase, "escola").fetch_one() is None


class TestRemoteStore:

    def test_insert_returns_entity_with_server_id(self, mock_supabase):
        mock_supabase.table.return_value.insert.return_value.execute.return_value = response(
            [{"id": 12, "nome": "Coral", "categoria": "cultural", "origem": "proprio", "ativo": True}]
        )
        remote = RemoteStore(mock_supabase)

        saved = remote.insert(Project(name="Coral", category=ProjectCategory.CULTURAL))

        mock_supabase.table.assert_called_with("projetos")
        assert saved.id == "12"
        assert saved.category is ProjectCategory.CULTURAL

    def test_fetch_profile_none_when_table_empty(self, mock_supabase):
        mock_supabase.table.return_value.select.return_value.limit.return_value.execute.return_value = response([])

        assert RemoteStore(mock_supabase).fetch_profile() is None

    def test_unconfigured_store(self):
        remote = RemoteStore(None)

        assert not remote.is_configured
        with pytest.raises(RemoteUnavailable):
            remote.delete(Project, "p1")
