"""Roster service exports."""

from .service import (
    AgentWorkload,
    agent_workloads,
    create_agent,
    delete_agent,
    get_agent,
    list_active_agents,
    list_agents,
    lookup_identities,
    update_agent,
)

__all__ = [
    "AgentWorkload",
    "agent_workloads",
    "create_agent",
    "delete_agent",
    "get_agent",
    "list_active_agents",
    "list_agents",
    "lookup_identities",
    "update_agent",
]
