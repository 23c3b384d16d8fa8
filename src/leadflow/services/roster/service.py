"""Agent roster management and the lookups the distribution pipeline relies on."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from werkzeug.security import generate_password_hash

from ...config import settings
from ...errors import ConflictError, NotFoundError, RosterLimitError, ValidationError
from ...models.domain import Agent, AssignedCustomer, Identity
from ...persistence import get_store
from ...persistence.base import LeadStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AgentWorkload:
    agent: Agent
    customers: List[AssignedCustomer]

    @property
    def total_customers(self) -> int:
        return len(self.customers)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def list_active_agents(*, store: LeadStore | None = None) -> list[Agent]:
    """Active agents in roster order, which is also the round-robin order."""
    return (store or get_store()).list_agents(active_only=True)


def lookup_identities(
    agent_ids: Iterable[str],
    admin_ids: Iterable[str] = (),
    *,
    store: LeadStore | None = None,
) -> tuple[dict[str, Identity], dict[str, Identity]]:
    store = store or get_store()
    agent_ids, admin_ids = set(agent_ids), set(admin_ids)
    agents = {identity.id: identity for identity in store.find_agents_by_ids(agent_ids)} if agent_ids else {}
    admins = {identity.id: identity for identity in store.find_admins_by_ids(admin_ids)} if admin_ids else {}
    return agents, admins


def list_agents(*, store: LeadStore | None = None) -> list[Agent]:
    """All agents, newest first."""
    agents = (store or get_store()).list_agents()
    return list(reversed(agents))


def get_agent(agent_id: str, *, store: LeadStore | None = None) -> Agent:
    agent = (store or get_store()).get_agent(agent_id)
    if agent is None:
        raise NotFoundError("Agent not found.")
    return agent


def create_agent(
    *,
    name: str,
    email: str,
    mobile: str,
    password: str,
    store: LeadStore | None = None,
) -> Agent:
    store = store or get_store()
    name, mobile = (name or "").strip(), (mobile or "").strip()
    email = _normalize_email(email or "")
    if not name or not email or not mobile or not password:
        raise ValidationError("All fields (name, email, mobile, password) are required.")

    if store.find_agent_by_email(email) is not None:
        raise ConflictError("Agent with this email already exists.")
    if store.count_agents() >= settings.max_agents:
        raise RosterLimitError(f"Agent limit reached (maximum {settings.max_agents} agents allowed).")

    agent = store.insert_agent(
        name=name,
        email=email,
        mobile=mobile,
        password_hash=generate_password_hash(password),
    )
    logger.info(f"Created agent {agent.id} <{agent.email}>")
    return agent


def update_agent(
    agent_id: str,
    *,
    name: Optional[str] = None,
    email: Optional[str] = None,
    mobile: Optional[str] = None,
    is_active: Optional[bool] = None,
    store: LeadStore | None = None,
) -> Agent:
    """Apply the provided fields only; empty strings leave a field unchanged."""
    store = store or get_store()
    changes: dict = {}
    if name and name.strip():
        changes["name"] = name.strip()
    if email and email.strip():
        normalized = _normalize_email(email)
        existing = store.find_agent_by_email(normalized)
        if existing is not None and existing.id != agent_id:
            raise ConflictError("Agent with this email already exists.")
        changes["email"] = normalized
    if mobile and mobile.strip():
        changes["mobile"] = mobile.strip()
    if is_active is not None:
        changes["is_active"] = is_active

    if not changes:
        return get_agent(agent_id, store=store)

    agent = store.update_agent(agent_id, changes)
    if agent is None:
        raise NotFoundError("Agent not found.")
    return agent


def delete_agent(agent_id: str, *, store: LeadStore | None = None) -> None:
    if not (store or get_store()).delete_agent(agent_id):
        raise NotFoundError("Agent not found.")
    logger.info(f"Deleted agent {agent_id}")


def agent_workloads(*, store: LeadStore | None = None) -> list[AgentWorkload]:
    """Every agent with the customers currently assigned to them."""
    store = store or get_store()
    return [
        AgentWorkload(agent=agent, customers=store.list_assigned_customers(agent.id))
        for agent in store.list_agents()
    ]
