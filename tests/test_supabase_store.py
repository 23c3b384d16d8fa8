import re
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest

from leadflow.errors import StorageError, StorageTimeoutError
from leadflow.models.domain import AssignmentPart, CustomerRecord, DistributionEvent
from leadflow.persistence.base import DistributionQuery
from leadflow.persistence.supabase_store import (
    SupabaseStore,
    agent_from_row,
    distribution_from_row,
    distribution_to_row,
)

AGENT_ID = str(uuid.uuid4())


class FakeQuery:
    def __init__(self, client: "FakeClient", table: str) -> None:
        self.client = client
        self.table = table
        self.calls: list[tuple] = []

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return record

    def execute(self):
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(data=self.client.data, count=self.client.count)


class FakeClient:
    def __init__(self, data=None, count=None, error=None) -> None:
        self.data = data or []
        self.count = count
        self.error = error
        self.queries: list[FakeQuery] = []

    def table(self, name):
        query = FakeQuery(self, name)
        self.queries.append(query)
        return query


def _event() -> DistributionEvent:
    return DistributionEvent(
        filename="leads.csv",
        uploaded_by=None,
        uploaded_at=datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc),
        assignments=(
            AssignmentPart(agent_id=AGENT_ID, customers=(CustomerRecord("Alice", "555", "VIP"),)),
        ),
    )


def test_distribution_rows_keep_agent_reference_and_documents():
    row = distribution_to_row(_event())

    assert row["total_customers"] == 1
    assert row["assignments"] == [
        {"agent": AGENT_ID, "customers": [{"FirstName": "Alice", "Phone": "555", "Notes": "VIP"}], "count": 1}
    ]

    restored = distribution_from_row({"id": "d1", **row})
    assert restored.id == "d1"
    assert restored.uploaded_at == _event().uploaded_at
    assert restored.assignments == _event().assignments


def test_agent_rows_parse_timestamps():
    agent = agent_from_row(
        {"id": AGENT_ID, "name": "Alice", "email": "a@example.com", "mobile": "+1", "is_active": False,
         "created_at": "2024-03-01T09:30:00Z"}
    )

    assert agent.created_at == datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
    assert agent.is_active is False
    assert agent.password_hash == ""


def test_query_distributions_builds_filters():
    client = FakeClient()
    store = SupabaseStore(client)
    query = DistributionQuery(
        filename="50%_off",
        start=datetime(2024, 3, 1, tzinfo=timezone.utc),
        agent_id=AGENT_ID,
        offset=20,
        limit=10,
    )

    assert store.query_distributions(query) == []

    calls = {name: args for name, args, _ in client.queries[0].calls}
    assert calls["ilike"] == ("filename", "%50\\%\\_off%")
    assert calls["gte"][0] == "uploaded_at"
    assert "lte" not in calls
    assert calls["filter"] == ("assignments", "cs", f'[{{"agent": "{AGENT_ID}"}}]')
    assert calls["range"] == (20, 29)


def test_append_assigned_customers_is_one_bulk_insert():
    client = FakeClient()
    store = SupabaseStore(client)
    customers = [CustomerRecord("C0", "1"), CustomerRecord("C1", "2")]

    written = store.append_assigned_customers(AGENT_ID, customers, datetime(2024, 3, 1, tzinfo=timezone.utc))

    assert written == 2
    assert len(client.queries) == 1
    (name, args, _), = client.queries[0].calls
    assert name == "insert"
    assert [row["first_name"] for row in args[0]] == ["C0", "C1"]


def test_non_uuid_ids_are_treated_as_missing_without_a_request():
    client = FakeClient()
    store = SupabaseStore(client)

    assert store.get_agent("not-a-uuid") is None
    assert store.get_distribution("not-a-uuid") is None
    assert store.delete_agent("not-a-uuid") is False
    assert store.find_agents_by_ids(["not-a-uuid"]) == []
    assert client.queries == []


def test_timeouts_map_to_storage_timeout_error():
    store = SupabaseStore(FakeClient(error=httpx.ReadTimeout("slow")))

    with pytest.raises(StorageTimeoutError) as excinfo:
        store.count_agents()

    assert excinfo.value.status_code == 504


def test_other_failures_map_to_storage_error():
    store = SupabaseStore(FakeClient(error=RuntimeError("boom")))

    with pytest.raises(StorageError) as excinfo:
        store.insert_distribution(_event())

    assert not isinstance(excinfo.value, StorageTimeoutError)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_insert_distribution_without_returned_id_is_a_storage_error():
    store = SupabaseStore(FakeClient(data=[]))

    with pytest.raises(StorageError):
        store.insert_distribution(_event())


def test_non_uuid_uploader_is_stored_as_text():
    event = replace(_event(), uploaded_by="admin-1")

    row = distribution_to_row(event)

    assert row["uploaded_by"] == "admin-1"
    assert distribution_from_row({"id": "d1", **row}).uploaded_by == "admin-1"
    schema = (Path(__file__).resolve().parents[1] / "sql" / "schema.sql").read_text(encoding="utf-8")
    assert re.search(r"^\s*uploaded_by text,", schema, re.MULTILINE)


def test_count_assigned_customers_uses_an_exact_count():
    client = FakeClient(count=7)
    store = SupabaseStore(client)

    assert store.count_assigned_customers(AGENT_ID) == 7
    assert store.count_assigned_customers("not-a-uuid") == 0
    assert len(client.queries) == 1
    calls = {name: (args, kwargs) for name, args, kwargs in client.queries[0].calls}
    assert calls["select"] == (("id",), {"count": "exact"})
    assert calls["eq"] == (("agent_id", AGENT_ID), {})
