from datetime import datetime, timezone

import pytest

from leadflow.config import settings
from leadflow.errors import NotFoundError, ValidationError
from leadflow.models.domain import AssignmentPart, CustomerRecord, DistributionEvent, Identity
from leadflow.persistence.memory import InMemoryStore
from leadflow.services.reports import DistributionFilters, get_distribution, list_distributions, parse_date_bound


def _at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 3, day, hour, tzinfo=timezone.utc)


def _event(filename: str, uploaded_at: datetime, *parts: tuple[str, int], uploaded_by: str | None = None):
    return DistributionEvent(
        filename=filename,
        uploaded_by=uploaded_by,
        uploaded_at=uploaded_at,
        assignments=tuple(
            AssignmentPart(
                agent_id=agent_id,
                customers=tuple(CustomerRecord(first_name=f"{agent_id}-{i}", phone="555") for i in range(count)),
            )
            for agent_id, count in parts
        ),
    )


def _agent(store: InMemoryStore, name: str):
    return store.insert_agent(name=name, email=f"{name.lower()}@example.com", mobile="+100", password_hash="x")


@pytest.fixture
def store():
    return InMemoryStore()


def test_results_are_newest_first(store):
    store.insert_distribution(_event("old.csv", _at(1)))
    store.insert_distribution(_event("new.csv", _at(3)))
    store.insert_distribution(_event("mid.csv", _at(2)))

    page = list_distributions(store=store)

    assert [r.filename for r in page.results] == ["new.csv", "mid.csv", "old.csv"]
    assert page.page == 1
    assert page.page_size == settings.default_page_size


def test_pagination_slices_the_sorted_results(store):
    for day in range(1, 6):
        store.insert_distribution(_event(f"day{day}.csv", _at(day)))

    first = list_distributions(page=1, page_size=2, store=store)
    third = list_distributions(page=3, page_size=2, store=store)
    beyond = list_distributions(page=4, page_size=2, store=store)

    assert [r.filename for r in first.results] == ["day5.csv", "day4.csv"]
    assert [r.filename for r in third.results] == ["day1.csv"]
    assert beyond.results == []


def test_filename_filter_is_a_case_insensitive_substring(store):
    store.insert_distribution(_event("March_Leads.xlsx", _at(1)))
    store.insert_distribution(_event("april.csv", _at(2)))

    page = list_distributions(DistributionFilters(filename="leads"), store=store)

    assert [r.filename for r in page.results] == ["March_Leads.xlsx"]


def test_date_range_bounds_are_inclusive(store):
    store.insert_distribution(_event("a.csv", _at(1, 0)))
    store.insert_distribution(_event("b.csv", _at(2, 23)))
    store.insert_distribution(_event("c.csv", _at(3, 0)))

    filters = DistributionFilters(
        start_date=parse_date_bound("2024-03-01"),
        end_date=parse_date_bound("2024-03-02", end=True),
    )
    page = list_distributions(filters, store=store)

    assert [r.filename for r in page.results] == ["b.csv", "a.csv"]


def test_agent_filter_matches_events_containing_the_agent(store):
    store.insert_distribution(_event("one.csv", _at(1), ("agent-a", 1), ("agent-b", 1)))
    store.insert_distribution(_event("two.csv", _at(2), ("agent-b", 2)))

    page = list_distributions(DistributionFilters(agent_id="agent-a"), store=store)

    assert [r.filename for r in page.results] == ["one.csv"]


def test_known_identities_are_resolved_and_unknown_ids_become_stubs(store):
    alice = _agent(store, "Alice")
    store.add_admin(Identity(id="admin-1", name="Root", email="root@example.com"))
    store.insert_distribution(
        _event("leads.csv", _at(1), (alice.id, 2), ("deleted-agent", 1), uploaded_by="admin-1")
    )

    result = list_distributions(store=store).results[0]

    assert result.uploaded_by == Identity(id="admin-1", name="Root", email="root@example.com")
    assert result.assignments[0].agent == Identity(id=alice.id, name="Alice", email="alice@example.com")
    assert result.assignments[0].count == 2
    assert result.assignments[1].agent == Identity(id="deleted-agent")
    assert result.total_customers == 3


def test_unknown_uploader_becomes_a_stub_and_missing_uploader_stays_empty(store):
    store.insert_distribution(_event("a.csv", _at(1), uploaded_by="ghost"))
    store.insert_distribution(_event("b.csv", _at(2)))

    results = list_distributions(store=store).results

    assert results[0].uploaded_by is None
    assert results[1].uploaded_by == Identity(id="ghost")


def test_get_distribution_returns_the_resolved_event(store):
    alice = _agent(store, "Alice")
    distribution_id = store.insert_distribution(_event("leads.csv", _at(1), (alice.id, 3)))

    resolved = get_distribution(distribution_id, store=store)

    assert resolved.id == distribution_id
    assert resolved.assignments[0].agent.name == "Alice"
    assert len(resolved.assignments[0].customers) == 3


def test_get_distribution_raises_for_unknown_id(store):
    with pytest.raises(NotFoundError):
        get_distribution("missing", store=store)


@pytest.mark.parametrize(("page", "page_size"), [(0, 10), (-1, 10), (1, settings.max_page_size + 1), (1, -5)])
def test_invalid_paging_is_rejected(store, page, page_size):
    with pytest.raises(ValidationError):
        list_distributions(page=page, page_size=page_size, store=store)


def test_reads_do_not_modify_the_store(store):
    alice = _agent(store, "Alice")
    distribution_id = store.insert_distribution(_event("leads.csv", _at(1), (alice.id, 2)))
    before = store.get_distribution(distribution_id)

    list_distributions(store=store)
    get_distribution(distribution_id, store=store)

    assert store.get_distribution(distribution_id) == before
    assert store.list_assigned_customers(alice.id) == []


def test_parse_date_bound():
    assert parse_date_bound(None) is None
    assert parse_date_bound("  ") is None
    assert parse_date_bound("2024-03-01") == datetime(2024, 3, 1, tzinfo=timezone.utc)
    end = parse_date_bound("2024-03-01", end=True)
    assert (end.date(), end.hour, end.minute) == (datetime(2024, 3, 1).date(), 23, 59)
    assert parse_date_bound("2024-03-01T08:30:00Z") == datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)
    with pytest.raises(ValidationError):
        parse_date_bound("yesterday")
