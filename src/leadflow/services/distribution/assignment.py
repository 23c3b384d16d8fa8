"""Fan-out writer appending each partition to its agent's customer list."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Sequence

from ...config import settings
from ...models.domain import Agent, CustomerRecord, PartialAssignmentFailure
from ...persistence.base import LeadStore

logger = logging.getLogger(__name__)

WRITE_NOT_STARTED = "Write not started before the deadline."
WRITE_IN_FLIGHT = "Write timed out and may still complete."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class AssignmentOutcome:
    assigned_at: datetime
    written: Dict[str, int] = field(default_factory=dict)
    failures: List[PartialAssignmentFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures


class AssignmentWriter:
    """Issues one independent append per agent and joins them with a deadline.

    A failed or late write is reported, never rolled back. Writes still
    queued at the deadline are cancelled; writes already running keep going
    in the background until the store's own timeout ends them and are
    reported as in flight.
    """

    def __init__(
        self,
        store: LeadStore,
        *,
        max_parallel_writes: int | None = None,
        join_timeout_seconds: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.max_parallel_writes = max_parallel_writes or settings.assignment_max_parallel_writes
        self.join_timeout_seconds = (
            join_timeout_seconds if join_timeout_seconds is not None else settings.assignment_join_timeout_seconds
        )
        self.clock = clock

    def write(self, agents: Sequence[Agent], partitions: Sequence[Sequence[CustomerRecord]]) -> AssignmentOutcome:
        if len(agents) != len(partitions):
            raise ValueError("agents and partitions must have the same length")

        outcome = AssignmentOutcome(assigned_at=self.clock())
        if not agents:
            return outcome

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_parallel_writes, len(agents)),
            thread_name_prefix="assign",
        )
        try:
            futures: list[tuple[Agent, Future]] = [
                (
                    agent,
                    executor.submit(
                        self.store.append_assigned_customers, agent.id, list(partition), outcome.assigned_at
                    ),
                )
                for agent, partition in zip(agents, partitions)
            ]
            wait([future for _, future in futures], timeout=self.join_timeout_seconds)

            for agent, future in futures:
                # A queued write is cancelled so a failure report means nothing was written.
                if not future.done() and future.cancel():
                    logger.warning(f"Assignment write for agent {agent.id} cancelled before it started")
                    outcome.failures.append(
                        PartialAssignmentFailure(
                            agent_id=agent.id, agent_name=agent.name, reason=WRITE_NOT_STARTED
                        )
                    )
                    continue
                if not future.done():
                    logger.warning(
                        f"Assignment write for agent {agent.id} did not finish within "
                        f"{self.join_timeout_seconds:.1f}s"
                    )
                    outcome.failures.append(
                        PartialAssignmentFailure(
                            agent_id=agent.id, agent_name=agent.name, reason=WRITE_IN_FLIGHT, in_flight=True
                        )
                    )
                    continue
                try:
                    outcome.written[agent.id] = future.result()
                except Exception as exc:
                    logger.warning(f"Assignment write failed for agent {agent.id}: {exc}")
                    outcome.failures.append(
                        PartialAssignmentFailure(agent_id=agent.id, agent_name=agent.name, reason=str(exc))
                    )
        finally:
            executor.shutdown(wait=False)

        if outcome.failures:
            logger.warning(f"Partial failure: {len(outcome.failures)}/{len(agents)} agent writes failed")
        return outcome
