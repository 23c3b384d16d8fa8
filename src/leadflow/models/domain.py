"""Domain models for leads, agents and distribution events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True, slots=True)
class CustomerRecord:
    """A normalized lead row. Duplicates are legitimate and preserved."""

    first_name: str
    phone: str
    notes: str = ""

    def to_document(self) -> dict:
        return {"FirstName": self.first_name, "Phone": self.phone, "Notes": self.notes}

    @classmethod
    def from_document(cls, document: dict) -> "CustomerRecord":
        return cls(
            first_name=document.get("FirstName") or "",
            phone=document.get("Phone") or "",
            notes=document.get("Notes") or "",
        )


@dataclass(frozen=True, slots=True)
class AssignedCustomer:
    customer: CustomerRecord
    assigned_at: datetime


@dataclass(slots=True)
class Agent:
    """Roster entry eligible to receive leads while ``is_active`` is set."""

    id: str
    name: str
    email: str
    mobile: str
    password_hash: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    assigned_customers: list[AssignedCustomer] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Identity:
    """Display identity of an agent or admin; a stub carries only ``id``."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True, slots=True)
class AssignmentPart:
    agent_id: str
    customers: tuple[CustomerRecord, ...]

    @property
    def count(self) -> int:
        return len(self.customers)


@dataclass(frozen=True, slots=True)
class DistributionEvent:
    """Immutable audit record of one upload-and-assign operation."""

    filename: str
    uploaded_by: Optional[str]
    uploaded_at: datetime
    assignments: tuple[AssignmentPart, ...]
    id: Optional[str] = None

    @property
    def total_customers(self) -> int:
        return sum(part.count for part in self.assignments)


@dataclass(frozen=True, slots=True)
class PartialAssignmentFailure:
    """An agent whose append did not complete by the deadline.

    With ``in_flight`` unset nothing was written and the agent may be
    retried. An in-flight write was already running and may still land.
    """

    agent_id: str
    agent_name: str
    reason: str
    in_flight: bool = False
