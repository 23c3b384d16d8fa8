"""Lead distribution service exports."""

from .assignment import AssignmentOutcome, AssignmentWriter
from .partitioner import partition_round_robin
from .pipeline import AgentAllocation, UploadResult, submit_upload
from .recorder import DistributionRecorder, build_event

__all__ = [
    "AgentAllocation",
    "AssignmentOutcome",
    "AssignmentWriter",
    "DistributionRecorder",
    "UploadResult",
    "build_event",
    "partition_round_robin",
    "submit_upload",
]
