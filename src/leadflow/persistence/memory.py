"""In-process store used for local runs without Supabase and for tests."""

from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Sequence

from ..models.domain import Agent, AssignedCustomer, CustomerRecord, DistributionEvent, Identity
from .base import DistributionQuery, LeadStore


class InMemoryStore(LeadStore):
    """Lock-guarded dictionaries standing in for the ``agents``, ``admins`` and ``distributions`` tables."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._agents: dict[str, Agent] = {}
        self._admins: dict[str, Identity] = {}
        self._distributions: dict[str, DistributionEvent] = {}

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex

    def _snapshot(self, agent: Agent) -> Agent:
        return replace(agent, assigned_customers=list(agent.assigned_customers))

    # Roster

    def list_agents(self, *, active_only: bool = False) -> list[Agent]:
        with self._lock:
            agents = [a for a in self._agents.values() if a.is_active or not active_only]
            return [self._snapshot(agent) for agent in agents]

    def get_agent(self, agent_id: str) -> Agent | None:
        with self._lock:
            agent = self._agents.get(agent_id)
            return self._snapshot(agent) if agent else None

    def find_agent_by_email(self, email: str) -> Agent | None:
        normalized = email.strip().lower()
        with self._lock:
            for agent in self._agents.values():
                if agent.email == normalized:
                    return self._snapshot(agent)
        return None

    def count_agents(self) -> int:
        with self._lock:
            return len(self._agents)

    def insert_agent(self, *, name: str, email: str, mobile: str, password_hash: str) -> Agent:
        agent = Agent(
            id=self._new_id(),
            name=name,
            email=email,
            mobile=mobile,
            password_hash=password_hash,
            is_active=True,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._agents[agent.id] = agent
        return self._snapshot(agent)

    def update_agent(self, agent_id: str, changes: dict) -> Agent | None:
        with self._lock:
            agent = self._agents.get(agent_id)
            if agent is None:
                return None
            for key, value in changes.items():
                setattr(agent, key, value)
            return self._snapshot(agent)

    def delete_agent(self, agent_id: str) -> bool:
        with self._lock:
            return self._agents.pop(agent_id, None) is not None

    def find_agents_by_ids(self, agent_ids: Iterable[str]) -> list[Identity]:
        wanted = set(agent_ids)
        with self._lock:
            return [
                Identity(id=agent.id, name=agent.name, email=agent.email)
                for agent_id, agent in self._agents.items()
                if agent_id in wanted
            ]

    def find_admins_by_ids(self, admin_ids: Iterable[str]) -> list[Identity]:
        wanted = set(admin_ids)
        with self._lock:
            return [admin for admin_id, admin in self._admins.items() if admin_id in wanted]

    def add_admin(self, admin: Identity) -> None:
        with self._lock:
            self._admins[admin.id] = admin

    # Assigned customers

    def append_assigned_customers(
        self, agent_id: str, customers: Sequence[CustomerRecord], assigned_at: datetime
    ) -> int:
        entries = [AssignedCustomer(customer=customer, assigned_at=assigned_at) for customer in customers]
        with self._lock:
            agent = self._agents.get(agent_id)
            if agent is None:
                raise KeyError(f"Agent '{agent_id}' not found")
            agent.assigned_customers.extend(entries)
        return len(entries)

    def list_assigned_customers(self, agent_id: str) -> list[AssignedCustomer]:
        with self._lock:
            agent = self._agents.get(agent_id)
            return list(agent.assigned_customers) if agent else []

    def count_assigned_customers(self, agent_id: str) -> int:
        with self._lock:
            agent = self._agents.get(agent_id)
            return len(agent.assigned_customers) if agent else 0

    # Distribution events

    def insert_distribution(self, event: DistributionEvent) -> str:
        distribution_id = self._new_id()
        with self._lock:
            self._distributions[distribution_id] = replace(event, id=distribution_id)
        return distribution_id

    def query_distributions(self, query: DistributionQuery) -> list[DistributionEvent]:
        needle = query.filename.lower() if query.filename else None
        with self._lock:
            # Latest insert first so equal timestamps still list newest first.
            events = list(reversed(self._distributions.values()))

        matched = []
        for event in events:
            if needle and needle not in (event.filename or "").lower():
                continue
            if query.start and event.uploaded_at < query.start:
                continue
            if query.end and event.uploaded_at > query.end:
                continue
            if query.agent_id and not any(part.agent_id == query.agent_id for part in event.assignments):
                continue
            matched.append(event)

        matched.sort(key=lambda event: event.uploaded_at, reverse=True)
        return matched[query.offset : query.offset + query.limit]

    def get_distribution(self, distribution_id: str) -> DistributionEvent | None:
        with self._lock:
            return self._distributions.get(distribution_id)
