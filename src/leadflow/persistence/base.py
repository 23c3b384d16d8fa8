"""Storage contract shared by the Supabase and in-memory backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..models.domain import Agent, AssignedCustomer, CustomerRecord, DistributionEvent, Identity


@dataclass(frozen=True, slots=True)
class DistributionQuery:
    """Filter, sort and window applied to stored distribution events."""

    filename: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    agent_id: Optional[str] = None
    offset: int = 0
    limit: int = 20


class LeadStore(ABC):
    """Contract for durable storage of agents, their leads and distribution events.

    Every method either completes or raises ``StorageError`` /
    ``StorageTimeoutError``; no call may block indefinitely.
    """

    # Roster

    @abstractmethod
    def list_agents(self, *, active_only: bool = False) -> list[Agent]:
        """Return agents ordered by creation time, oldest first."""
        raise NotImplementedError

    @abstractmethod
    def get_agent(self, agent_id: str) -> Agent | None:
        raise NotImplementedError

    @abstractmethod
    def find_agent_by_email(self, email: str) -> Agent | None:
        raise NotImplementedError

    @abstractmethod
    def count_agents(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def insert_agent(self, *, name: str, email: str, mobile: str, password_hash: str) -> Agent:
        raise NotImplementedError

    @abstractmethod
    def update_agent(self, agent_id: str, changes: dict) -> Agent | None:
        raise NotImplementedError

    @abstractmethod
    def delete_agent(self, agent_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def find_agents_by_ids(self, agent_ids: Iterable[str]) -> list[Identity]:
        raise NotImplementedError

    @abstractmethod
    def find_admins_by_ids(self, admin_ids: Iterable[str]) -> list[Identity]:
        raise NotImplementedError

    # Assigned customers

    @abstractmethod
    def append_assigned_customers(
        self, agent_id: str, customers: Sequence[CustomerRecord], assigned_at: datetime
    ) -> int:
        """Atomically append ``customers`` to the agent's list; returns rows written."""
        raise NotImplementedError

    @abstractmethod
    def list_assigned_customers(self, agent_id: str) -> list[AssignedCustomer]:
        raise NotImplementedError

    @abstractmethod
    def count_assigned_customers(self, agent_id: str) -> int:
        """Return how many customers the agent holds across all uploads."""
        raise NotImplementedError

    # Distribution events

    @abstractmethod
    def insert_distribution(self, event: DistributionEvent) -> str:
        """Persist ``event`` once and return its identifier."""
        raise NotImplementedError

    @abstractmethod
    def query_distributions(self, query: DistributionQuery) -> list[DistributionEvent]:
        """Return matching events sorted by ``uploaded_at`` descending."""
        raise NotImplementedError

    @abstractmethod
    def get_distribution(self, distribution_id: str) -> DistributionEvent | None:
        raise NotImplementedError
