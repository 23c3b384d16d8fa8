"""Distribution history endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Path, Query, status

from ...config import settings
from ...errors import LeadflowError
from ...schemas.distributions import (
    AssignmentModel,
    DistributionDetailResponse,
    DistributionListResponse,
    DistributionModel,
    IdentityModel,
)
from ...schemas.uploads import CustomerModel
from ...services.reports import (
    DistributionFilters,
    ResolvedDistribution,
    get_distribution,
    list_distributions,
    parse_date_bound,
)
from ..errors import to_http_exception

router = APIRouter(prefix="/distributions", tags=["distributions"])


def _to_model(distribution: ResolvedDistribution) -> DistributionModel:
    uploader = distribution.uploaded_by
    return DistributionModel(
        id=distribution.id,
        filename=distribution.filename,
        uploaded_at=distribution.uploaded_at,
        total_customers=distribution.total_customers,
        uploaded_by=IdentityModel(id=uploader.id, name=uploader.name, email=uploader.email) if uploader else None,
        assignments=[
            AssignmentModel(
                agent=IdentityModel(id=part.agent.id, name=part.agent.name, email=part.agent.email),
                count=part.count,
                customers=[
                    CustomerModel(first_name=c.first_name, phone=c.phone, notes=c.notes) for c in part.customers
                ],
            )
            for part in distribution.assignments
        ],
    )


@router.get("", response_model=DistributionListResponse, status_code=status.HTTP_200_OK)
def get_distributions(
    filename: str | None = Query(default=None, description="Case-insensitive filename search"),
    start_date: str | None = Query(default=None, alias="startDate", description="Inclusive lower bound (ISO date)"),
    end_date: str | None = Query(default=None, alias="endDate", description="Inclusive upper bound (ISO date)"),
    agent_id: str | None = Query(default=None, alias="agentId", description="Only events assigning to this agent"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
) -> DistributionListResponse:
    try:
        filters = DistributionFilters(
            filename=filename,
            start_date=parse_date_bound(start_date),
            end_date=parse_date_bound(end_date, end=True),
            agent_id=agent_id,
        )
        result = list_distributions(filters, page=page, page_size=limit)
    except LeadflowError as exc:
        raise to_http_exception(exc) from exc

    return DistributionListResponse(
        page=result.page,
        limit=result.page_size,
        results=[_to_model(item) for item in result.results],
    )


@router.get("/{distribution_id}", response_model=DistributionDetailResponse, status_code=status.HTTP_200_OK)
def get_distribution_detail(
    distribution_id: str = Path(..., description="Distribution identifier"),
) -> DistributionDetailResponse:
    try:
        distribution = get_distribution(distribution_id)
    except LeadflowError as exc:
        raise to_http_exception(exc) from exc
    return DistributionDetailResponse(distribution=_to_model(distribution))
