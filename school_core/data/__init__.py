# =============================================================================
# school_core/data/__init__.py
# Remote store access (Supabase) and row mapping
# =============================================================================

from school_core.data import mappers
from school_core.data.supabase_client import (
    RemoteStore,
    SupabaseTable,
    get_supabase_client,
)

__all__ = [
    "mappers",
    "RemoteStore",
    "SupabaseTable",
    "get_supabase_client",
]
