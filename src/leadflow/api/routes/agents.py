"""Agent roster endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Path, status

from ...errors import LeadflowError
from ...models.domain import Agent
from ...schemas.agents import (
    AgentCreateRequest,
    AgentListResponse,
    AgentModel,
    AgentResponse,
    AgentUpdateRequest,
)
from ...services import roster
from ..errors import to_http_exception

router = APIRouter(prefix="/agents", tags=["agents"])


def _to_model(agent: Agent) -> AgentModel:
    return AgentModel(
        id=agent.id,
        name=agent.name,
        email=agent.email,
        mobile=agent.mobile,
        is_active=agent.is_active,
        created_at=agent.created_at,
    )


@router.get("", response_model=AgentListResponse, status_code=status.HTTP_200_OK)
def list_agents() -> AgentListResponse:
    try:
        agents = roster.list_agents()
    except LeadflowError as exc:
        raise to_http_exception(exc) from exc
    return AgentListResponse(count=len(agents), agents=[_to_model(agent) for agent in agents])


@router.get("/{agent_id}", response_model=AgentResponse, status_code=status.HTTP_200_OK)
def get_agent(agent_id: str = Path(..., description="Agent identifier")) -> AgentResponse:
    try:
        agent = roster.get_agent(agent_id)
    except LeadflowError as exc:
        raise to_http_exception(exc) from exc
    return AgentResponse(agent=_to_model(agent))


@router.post("", response_model=AgentResponse, status_code=status.HTTP_201_CREATED)
def create_agent(request: AgentCreateRequest) -> AgentResponse:
    try:
        agent = roster.create_agent(
            name=request.name,
            email=request.email,
            mobile=request.mobile,
            password=request.password,
        )
    except LeadflowError as exc:
        raise to_http_exception(exc) from exc
    return AgentResponse(message="Agent created successfully.", agent=_to_model(agent))


@router.put("/{agent_id}", response_model=AgentResponse, status_code=status.HTTP_200_OK)
def update_agent(request: AgentUpdateRequest, agent_id: str = Path(...)) -> AgentResponse:
    try:
        agent = roster.update_agent(
            agent_id,
            name=request.name,
            email=request.email,
            mobile=request.mobile,
            is_active=request.is_active,
        )
    except LeadflowError as exc:
        raise to_http_exception(exc) from exc
    return AgentResponse(message="Agent updated successfully.", agent=_to_model(agent))


@router.delete("/{agent_id}", status_code=status.HTTP_200_OK)
def delete_agent(agent_id: str = Path(...)) -> dict:
    try:
        roster.delete_agent(agent_id)
    except LeadflowError as exc:
        raise to_http_exception(exc) from exc
    return {"success": True, "message": "Agent deleted successfully."}
