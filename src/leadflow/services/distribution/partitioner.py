"""Round-robin partitioning of leads across the active roster."""

from __future__ import annotations

from typing import List, Sequence, TypeVar

from ...errors import NoActiveAgentsError

T = TypeVar("T")


def partition_round_robin(customers: Sequence[T], agents: Sequence[object]) -> List[List[T]]:
    """Place customer ``i`` into partition ``i % len(agents)``.

    The first ``len(customers) % len(agents)`` partitions receive one extra
    customer and every partition keeps file order.
    """
    if not agents:
        raise NoActiveAgentsError()

    partitions: List[List[T]] = [[] for _ in agents]
    for index, customer in enumerate(customers):
        partitions[index % len(agents)].append(customer)
    return partitions
