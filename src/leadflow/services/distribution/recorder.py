"""Persist the audit record of a distribution."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ...errors import StorageError
from ...models.domain import Agent, AssignmentPart, CustomerRecord, DistributionEvent
from ...persistence.base import LeadStore

logger = logging.getLogger(__name__)


def build_event(
    *,
    filename: str,
    uploaded_by: Optional[str],
    uploaded_at: datetime,
    agents: Sequence[Agent],
    partitions: Sequence[Sequence[CustomerRecord]],
) -> DistributionEvent:
    return DistributionEvent(
        filename=filename,
        uploaded_by=uploaded_by or None,
        uploaded_at=uploaded_at,
        assignments=tuple(
            AssignmentPart(agent_id=agent.id, customers=tuple(partition))
            for agent, partition in zip(agents, partitions)
        ),
    )


class DistributionRecorder:
    def __init__(self, store: LeadStore) -> None:
        self.store = store

    def record(self, event: DistributionEvent) -> str | None:
        """Insert ``event`` once; returns ``None`` if the audit write failed.

        Agents already hold their customers at this point, so a failed
        insert is logged and reported instead of failing the upload.
        """
        try:
            distribution_id = self.store.insert_distribution(event)
        except StorageError as exc:
            logger.error(
                f"Distribution persist error for '{event.filename}' "
                f"({event.total_customers} customers): {exc}"
            )
            return None
        logger.info(f"Recorded distribution {distribution_id} for '{event.filename}'")
        return distribution_id
