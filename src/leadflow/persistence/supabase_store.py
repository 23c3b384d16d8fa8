"""Supabase-backed persistence for agents, assigned customers and distributions."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Sequence, TypeVar

import httpx
from supabase import Client

from ..errors import StorageError, StorageTimeoutError
from ..models.domain import (
    Agent,
    AssignedCustomer,
    AssignmentPart,
    CustomerRecord,
    DistributionEvent,
    Identity,
)
from .base import DistributionQuery, LeadStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

AGENT_COLUMNS = "id,name,email,mobile,password_hash,is_active,created_at"


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def agent_from_row(row: dict) -> Agent:
    return Agent(
        id=str(row["id"]),
        name=row.get("name") or "",
        email=row.get("email") or "",
        mobile=row.get("mobile") or "",
        password_hash=row.get("password_hash") or "",
        is_active=bool(row.get("is_active", True)),
        created_at=_parse_timestamp(row.get("created_at")),
    )


def distribution_to_row(event: DistributionEvent) -> dict:
    return {
        "filename": event.filename,
        "uploaded_by": event.uploaded_by,
        "uploaded_at": event.uploaded_at.isoformat(),
        "total_customers": event.total_customers,
        "assignments": [
            {
                "agent": part.agent_id,
                "customers": [customer.to_document() for customer in part.customers],
                "count": part.count,
            }
            for part in event.assignments
        ],
    }


def distribution_from_row(row: dict) -> DistributionEvent:
    assignments = row.get("assignments") or []
    if isinstance(assignments, str):
        assignments = json.loads(assignments)
    return DistributionEvent(
        id=str(row["id"]),
        filename=row.get("filename") or "",
        uploaded_by=str(row["uploaded_by"]) if row.get("uploaded_by") else None,
        uploaded_at=_parse_timestamp(row.get("uploaded_at")) or datetime.now(timezone.utc),
        assignments=tuple(
            AssignmentPart(
                agent_id=str(part.get("agent")),
                customers=tuple(CustomerRecord.from_document(doc) for doc in part.get("customers") or []),
            )
            for part in assignments
        ),
    )


class SupabaseStore(LeadStore):
    """PostgREST queries over the ``agents``, ``agent_customers``, ``admins`` and ``distributions`` tables."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def _execute(self, operation: str, call: Callable[[], T]) -> T:
        try:
            return call()
        except httpx.TimeoutException as exc:
            logger.warning(f"Supabase request timed out during {operation}: {exc}")
            raise StorageTimeoutError(f"Backing store timed out during {operation}.") from exc
        except Exception as exc:
            logger.error(f"Supabase request failed during {operation}: {exc}")
            raise StorageError(f"Backing store failed during {operation}.") from exc

    # Roster

    def list_agents(self, *, active_only: bool = False) -> list[Agent]:
        def call():
            request = self.client.table("agents").select(AGENT_COLUMNS)
            if active_only:
                request = request.eq("is_active", True)
            return request.order("created_at").order("id").execute()

        response = self._execute("list_agents", call)
        return [agent_from_row(row) for row in response.data or []]

    def get_agent(self, agent_id: str) -> Agent | None:
        if not _is_uuid(agent_id):
            return None
        response = self._execute(
            "get_agent",
            lambda: self.client.table("agents").select(AGENT_COLUMNS).eq("id", agent_id).limit(1).execute(),
        )
        rows = response.data or []
        return agent_from_row(rows[0]) if rows else None

    def find_agent_by_email(self, email: str) -> Agent | None:
        response = self._execute(
            "find_agent_by_email",
            lambda: self.client.table("agents")
            .select(AGENT_COLUMNS)
            .eq("email", email.strip().lower())
            .limit(1)
            .execute(),
        )
        rows = response.data or []
        return agent_from_row(rows[0]) if rows else None

    def count_agents(self) -> int:
        response = self._execute(
            "count_agents",
            lambda: self.client.table("agents").select("id", count="exact").limit(1).execute(),
        )
        return response.count or 0

    def insert_agent(self, *, name: str, email: str, mobile: str, password_hash: str) -> Agent:
        payload = {
            "name": name,
            "email": email,
            "mobile": mobile,
            "password_hash": password_hash,
            "is_active": True,
        }
        response = self._execute("insert_agent", lambda: self.client.table("agents").insert(payload).execute())
        rows = response.data or []
        if not rows:
            raise StorageError("Backing store returned no row for the new agent.")
        return agent_from_row(rows[0])

    def update_agent(self, agent_id: str, changes: dict) -> Agent | None:
        if not _is_uuid(agent_id):
            return None
        response = self._execute(
            "update_agent",
            lambda: self.client.table("agents").update(changes).eq("id", agent_id).execute(),
        )
        rows = response.data or []
        return agent_from_row(rows[0]) if rows else None

    def delete_agent(self, agent_id: str) -> bool:
        if not _is_uuid(agent_id):
            return False
        response = self._execute(
            "delete_agent",
            lambda: self.client.table("agents").delete().eq("id", agent_id).execute(),
        )
        return bool(response.data)

    def find_agents_by_ids(self, agent_ids: Iterable[str]) -> list[Identity]:
        return self._find_identities("agents", agent_ids)

    def find_admins_by_ids(self, admin_ids: Iterable[str]) -> list[Identity]:
        return self._find_identities("admins", admin_ids)

    def _find_identities(self, table: str, ids: Iterable[str]) -> list[Identity]:
        wanted = sorted(value for value in set(ids) if _is_uuid(value))
        if not wanted:
            return []
        response = self._execute(
            f"lookup {table}",
            lambda: self.client.table(table).select("id,name,email").in_("id", wanted).execute(),
        )
        return [
            Identity(id=str(row["id"]), name=row.get("name"), email=row.get("email"))
            for row in response.data or []
        ]

    # Assigned customers

    def append_assigned_customers(
        self, agent_id: str, customers: Sequence[CustomerRecord], assigned_at: datetime
    ) -> int:
        if not customers:
            return 0
        # A single bulk insert is one statement, so the append is all-or-nothing.
        rows = [
            {
                "agent_id": agent_id,
                "first_name": customer.first_name,
                "phone": customer.phone,
                "notes": customer.notes,
                "assigned_at": assigned_at.isoformat(),
            }
            for customer in customers
        ]
        self._execute(
            f"append customers for agent {agent_id}",
            lambda: self.client.table("agent_customers").insert(rows).execute(),
        )
        return len(rows)

    def list_assigned_customers(self, agent_id: str) -> list[AssignedCustomer]:
        response = self._execute(
            "list_assigned_customers",
            lambda: self.client.table("agent_customers")
            .select("first_name,phone,notes,assigned_at")
            .eq("agent_id", agent_id)
            .order("id")
            .execute(),
        )
        return [
            AssignedCustomer(
                customer=CustomerRecord(
                    first_name=row.get("first_name") or "",
                    phone=row.get("phone") or "",
                    notes=row.get("notes") or "",
                ),
                assigned_at=_parse_timestamp(row.get("assigned_at")) or datetime.now(timezone.utc),
            )
            for row in response.data or []
        ]

    def count_assigned_customers(self, agent_id: str) -> int:
        if not _is_uuid(agent_id):
            return 0
        response = self._execute(
            "count_assigned_customers",
            lambda: self.client.table("agent_customers")
            .select("id", count="exact")
            .eq("agent_id", agent_id)
            .limit(1)
            .execute(),
        )
        return response.count or 0

    # Distribution events

    def insert_distribution(self, event: DistributionEvent) -> str:
        payload = distribution_to_row(event)
        response = self._execute(
            "insert_distribution",
            lambda: self.client.table("distributions").insert(payload).execute(),
        )
        rows = response.data or []
        if not rows or "id" not in rows[0]:
            raise StorageError("Backing store returned no identifier for the distribution.")
        return str(rows[0]["id"])

    def query_distributions(self, query: DistributionQuery) -> list[DistributionEvent]:
        def call():
            request = self.client.table("distributions").select("*")
            if query.filename:
                request = request.ilike("filename", f"%{_escape_like(query.filename)}%")
            if query.start:
                request = request.gte("uploaded_at", query.start.isoformat())
            if query.end:
                request = request.lte("uploaded_at", query.end.isoformat())
            if query.agent_id:
                request = request.filter("assignments", "cs", json.dumps([{"agent": query.agent_id}]))
            return (
                request.order("uploaded_at", desc=True)
                .range(query.offset, query.offset + query.limit - 1)
                .execute()
            )

        response = self._execute("query_distributions", call)
        return [distribution_from_row(row) for row in response.data or []]

    def get_distribution(self, distribution_id: str) -> DistributionEvent | None:
        if not _is_uuid(distribution_id):
            return None
        response = self._execute(
            "get_distribution",
            lambda: self.client.table("distributions").select("*").eq("id", distribution_id).limit(1).execute(),
        )
        rows = response.data or []
        return distribution_from_row(rows[0]) if rows else None
