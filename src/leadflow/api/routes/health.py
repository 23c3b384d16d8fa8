"""Health endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check which store backs the service and whether it answers."""
    from ...db.supabase import get_supabase_client
    from ...persistence import get_store

    if not get_supabase_client():
        return {
            "configured": False,
            "message": "Supabase not configured. Set LEADFLOW_SUPABASE_URL and LEADFLOW_SUPABASE_KEY environment variables.",
        }

    try:
        agent_count = get_store().count_agents()
        return {
            "configured": True,
            "connected": True,
            "agents_count": agent_count,
            "message": f"Database connected. Found {agent_count} agents.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
