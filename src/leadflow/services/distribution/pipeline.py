"""Upload pipeline: extract, normalize, partition, assign and record."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ...config import settings
from ...errors import NoActiveAgentsError, PayloadTooLargeError, StorageError
from ...models.domain import PartialAssignmentFailure
from ...persistence import get_store
from ...persistence.base import LeadStore
from ..ingest import extract_rows, normalize_rows, resolve_extension
from ..roster import list_active_agents
from .assignment import AssignmentWriter
from .partitioner import partition_round_robin
from .recorder import DistributionRecorder, build_event

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AgentAllocation:
    agent_id: str
    agent_name: str
    agent_email: str
    customers_assigned: int
    written: bool
    total_customers: Optional[int] = None


@dataclass(slots=True)
class UploadResult:
    filename: str
    total_customers: int
    total_agents: int
    allocations: List[AgentAllocation] = field(default_factory=list)
    failed_agents: List[PartialAssignmentFailure] = field(default_factory=list)
    distribution_id: Optional[str] = None

    @property
    def per_agent_counts(self) -> dict[str, int]:
        return {allocation.agent_id: allocation.customers_assigned for allocation in self.allocations}


def _running_total(store: LeadStore, agent_id: str) -> int | None:
    try:
        return store.count_assigned_customers(agent_id)
    except StorageError as exc:
        logger.warning(f"Could not read running total for agent {agent_id}: {exc}")
        return None


def submit_upload(
    payload: bytes,
    filename: str,
    uploaded_by: Optional[str] = None,
    *,
    store: LeadStore | None = None,
    writer: AssignmentWriter | None = None,
) -> UploadResult:
    """Distribute the leads in ``payload`` across the active agents.

    Raises ``PayloadTooLargeError``, ``UnsupportedFormatError``,
    ``NoActiveAgentsError``, ``ParseError`` or ``NoValidRecordsError``
    before anything is written. Per-agent write failures are returned in
    ``failed_agents``; a failed audit write leaves ``distribution_id`` unset.
    """
    if len(payload) > settings.max_upload_bytes:
        raise PayloadTooLargeError(
            f"Uploaded file exceeds the maximum allowed size of {settings.max_upload_bytes} bytes."
        )

    store = store or get_store()
    extension = resolve_extension(filename)

    # Single roster snapshot, read before parsing.
    agents = list_active_agents(store=store)
    if not agents:
        raise NoActiveAgentsError()

    rows = extract_rows(payload, extension)
    customers = normalize_rows(rows)
    partitions = partition_round_robin(customers, agents)

    writer = writer or AssignmentWriter(store)
    outcome = writer.write(agents, partitions)

    event = build_event(
        filename=filename,
        uploaded_by=uploaded_by,
        uploaded_at=outcome.assigned_at,
        agents=agents,
        partitions=partitions,
    )
    distribution_id = DistributionRecorder(store).record(event)

    failed_ids = {failure.agent_id for failure in outcome.failures}
    allocations = [
        AgentAllocation(
            agent_id=agent.id,
            agent_name=agent.name,
            agent_email=agent.email,
            customers_assigned=len(partition),
            written=agent.id not in failed_ids,
            total_customers=_running_total(store, agent.id),
        )
        for agent, partition in zip(agents, partitions)
    ]

    logger.info(
        f"Distributed {len(customers)} customers from '{filename}' among {len(agents)} agents "
        f"({len(outcome.failures)} failed writes, distribution={distribution_id})"
    )
    return UploadResult(
        filename=filename,
        total_customers=len(customers),
        total_agents=len(agents),
        allocations=allocations,
        failed_agents=list(outcome.failures),
        distribution_id=distribution_id,
    )
