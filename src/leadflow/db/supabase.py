"""Supabase client for Python backend."""

import logging
from functools import lru_cache
from supabase import Client, ClientOptions, create_client
from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Every PostgREST request made through the client is bounded by
        ``settings.storage_timeout_seconds``.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        options = ClientOptions(postgrest_client_timeout=settings.storage_timeout_seconds)
        return create_client(settings.supabase_url, settings.supabase_key, options=options)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


# Tables used by the store:
#
#   agents(id, name, email, mobile, password_hash, is_active, created_at)
#   agent_customers(id, agent_id, first_name, phone, notes, assigned_at)
#   admins(id, name, email)
#   distributions(id, filename, uploaded_by, uploaded_at, total_customers, assignments jsonb)
#
# See sql/schema.sql for the full definitions.
