"""Persistence backends and the process-wide store accessor."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..db.supabase import get_supabase_client
from .base import DistributionQuery, LeadStore
from .memory import InMemoryStore
from .supabase_store import SupabaseStore


@lru_cache()
def get_store() -> LeadStore:
    """Return the configured store: Supabase when credentials exist, in-memory otherwise."""
    client = get_supabase_client()
    if client is None:
        logging.warning("Supabase not configured - leads and distributions are kept in memory only")
        return InMemoryStore()
    return SupabaseStore(client)


__all__ = ["DistributionQuery", "InMemoryStore", "LeadStore", "SupabaseStore", "get_store"]
