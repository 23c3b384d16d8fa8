"""Lead upload endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, File, Header, HTTPException, UploadFile, status
from starlette.concurrency import run_in_threadpool

from ...config import settings
from ...errors import LeadflowError, PayloadTooLargeError
from ...schemas.uploads import (
    AgentAllocationModel,
    AgentWorkloadModel,
    AssignedCustomerModel,
    FailedAgentModel,
    UploadResponse,
    WorkloadResponse,
)
from ...services.distribution import submit_upload
from ...services.roster import agent_workloads
from ..errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("/customers", response_model=UploadResponse, status_code=status.HTTP_200_OK)
async def upload_customers(
    file: UploadFile | None = File(default=None),
    uploader_id: str | None = Header(default=None, alias="X-Uploader-Id"),
) -> UploadResponse:
    """Distribute an uploaded CSV/XLS/XLSX lead list across the active agents."""
    if file is None or not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded. Please upload a CSV, XLS, or XLSX file.",
        )

    # Read one byte past the ceiling so oversize uploads are rejected unparsed.
    payload = await file.read(settings.max_upload_bytes + 1)
    try:
        if len(payload) > settings.max_upload_bytes:
            raise PayloadTooLargeError(
                f"Uploaded file exceeds the maximum allowed size of {settings.max_upload_bytes} bytes."
            )
        result = await run_in_threadpool(submit_upload, payload, file.filename, uploader_id)
    except LeadflowError as exc:
        logger.info(f"Rejected upload '{file.filename}': {exc}")
        raise to_http_exception(exc) from exc

    message = (
        f"Successfully uploaded and distributed {result.total_customers} customers "
        f"among {result.total_agents} agents."
    )
    if result.failed_agents:
        retryable = sum(1 for failure in result.failed_agents if not failure.in_flight)
        message += (
            f" Assignment failed for {len(result.failed_agents)} agent(s);"
            f" {retryable} can be retried safely."
        )

    return UploadResponse(
        message=message,
        filename=result.filename,
        total_customers=result.total_customers,
        total_agents=result.total_agents,
        distribution=[
            AgentAllocationModel(
                agent_id=allocation.agent_id,
                agent_name=allocation.agent_name,
                agent_email=allocation.agent_email,
                customers_assigned=allocation.customers_assigned,
                total_customers=allocation.total_customers,
                written=allocation.written,
            )
            for allocation in result.allocations
        ],
        failed_agents=[
            FailedAgentModel(
                agent_id=failure.agent_id,
                agent_name=failure.agent_name,
                reason=failure.reason,
                in_flight=failure.in_flight,
            )
            for failure in result.failed_agents
        ],
        distribution_id=result.distribution_id,
    )


@router.get("/distribution", response_model=WorkloadResponse, status_code=status.HTTP_200_OK)
def get_current_distribution() -> WorkloadResponse:
    """Every agent with the customers currently assigned to them."""
    try:
        workloads = agent_workloads()
    except LeadflowError as exc:
        raise to_http_exception(exc) from exc

    return WorkloadResponse(
        distribution=[
            AgentWorkloadModel(
                agent_id=workload.agent.id,
                agent_name=workload.agent.name,
                agent_email=workload.agent.email,
                total_customers=workload.total_customers,
                customers=[
                    AssignedCustomerModel(
                        first_name=entry.customer.first_name,
                        phone=entry.customer.phone,
                        notes=entry.customer.notes,
                        assigned_at=entry.assigned_at,
                    )
                    for entry in workload.customers
                ],
            )
            for workload in workloads
        ]
    )
