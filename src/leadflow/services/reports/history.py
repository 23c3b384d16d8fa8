"""Distribution history queries with agent/uploader resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import List, Optional

from ...config import settings
from ...errors import NotFoundError, ValidationError
from ...models.domain import CustomerRecord, DistributionEvent, Identity
from ...persistence import get_store
from ...persistence.base import DistributionQuery, LeadStore
from ..roster import lookup_identities


@dataclass(frozen=True, slots=True)
class DistributionFilters:
    filename: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    agent_id: Optional[str] = None


@dataclass(slots=True)
class ResolvedAssignment:
    agent: Identity
    count: int
    customers: List[CustomerRecord]


@dataclass(slots=True)
class ResolvedDistribution:
    id: str
    filename: str
    uploaded_at: datetime
    total_customers: int
    uploaded_by: Optional[Identity]
    assignments: List[ResolvedAssignment] = field(default_factory=list)


@dataclass(slots=True)
class DistributionPage:
    page: int
    page_size: int
    results: List[ResolvedDistribution]


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def parse_date_bound(value: str | None, *, end: bool = False) -> datetime | None:
    """Parse an ISO date or datetime filter value.

    A bare date used as an upper bound covers the whole day.
    """
    if value is None or not value.strip():
        return None
    text = value.strip()
    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            return datetime.combine(day, time.max if end else time.min, tzinfo=timezone.utc)
        return _as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError as exc:
        raise ValidationError(f"Invalid date value '{value}'.") from exc


def _resolve(identifier: str, lookup: dict[str, Identity]) -> Identity:
    return lookup.get(identifier) or Identity(id=identifier)


def _resolve_event(event: DistributionEvent, agents: dict[str, Identity], admins: dict[str, Identity]) -> ResolvedDistribution:
    return ResolvedDistribution(
        id=event.id or "",
        filename=event.filename,
        uploaded_at=event.uploaded_at,
        total_customers=event.total_customers,
        uploaded_by=_resolve(event.uploaded_by, admins) if event.uploaded_by else None,
        assignments=[
            ResolvedAssignment(
                agent=_resolve(part.agent_id, agents),
                count=part.count,
                customers=list(part.customers),
            )
            for part in event.assignments
        ],
    )


def list_distributions(
    filters: DistributionFilters | None = None,
    page: int = 1,
    page_size: int | None = None,
    *,
    store: LeadStore | None = None,
) -> DistributionPage:
    """Return one page of distribution events, newest first."""
    filters = filters or DistributionFilters()
    page_size = page_size or settings.default_page_size
    if page < 1:
        raise ValidationError("page must be >= 1")
    if page_size < 1 or page_size > settings.max_page_size:
        raise ValidationError(f"limit must be between 1 and {settings.max_page_size}")

    store = store or get_store()
    query = DistributionQuery(
        filename=(filters.filename or "").strip() or None,
        start=_as_utc(filters.start_date) if filters.start_date else None,
        end=_as_utc(filters.end_date) if filters.end_date else None,
        agent_id=filters.agent_id or None,
        offset=(page - 1) * page_size,
        limit=page_size,
    )
    events = store.query_distributions(query)

    agents, admins = lookup_identities(
        (part.agent_id for event in events for part in event.assignments),
        (event.uploaded_by for event in events if event.uploaded_by),
        store=store,
    )
    return DistributionPage(
        page=page,
        page_size=page_size,
        results=[_resolve_event(event, agents, admins) for event in events],
    )


def get_distribution(distribution_id: str, *, store: LeadStore | None = None) -> ResolvedDistribution:
    store = store or get_store()
    event = store.get_distribution(distribution_id)
    if event is None:
        raise NotFoundError("Distribution not found.")

    agents, admins = lookup_identities(
        (part.agent_id for part in event.assignments),
        [event.uploaded_by] if event.uploaded_by else [],
        store=store,
    )
    return _resolve_event(event, agents, admins)
