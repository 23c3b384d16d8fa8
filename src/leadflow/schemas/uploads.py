"""Upload API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomerModel(BaseModel):
    first_name: str = Field("", alias="FirstName")
    phone: str = Field("", alias="Phone")
    notes: str = Field("", alias="Notes")

    model_config = ConfigDict(populate_by_name=True)


class AssignedCustomerModel(CustomerModel):
    assigned_at: datetime = Field(..., alias="assignedAt")


class AgentAllocationModel(BaseModel):
    agent_id: str = Field(..., alias="agentId")
    agent_name: str = Field(..., alias="agentName")
    agent_email: str = Field(..., alias="agentEmail")
    customers_assigned: int = Field(..., alias="customersAssigned")
    total_customers: Optional[int] = Field(None, alias="totalCustomers")
    written: bool

    model_config = ConfigDict(populate_by_name=True)


class FailedAgentModel(BaseModel):
    agent_id: str = Field(..., alias="agentId")
    agent_name: str = Field(..., alias="agentName")
    reason: str
    in_flight: bool = Field(False, alias="inFlight")

    model_config = ConfigDict(populate_by_name=True)


class UploadResponse(BaseModel):
    success: bool = True
    message: str
    filename: str
    total_customers: int = Field(..., alias="totalCustomers")
    total_agents: int = Field(..., alias="totalAgents")
    distribution: List[AgentAllocationModel]
    failed_agents: List[FailedAgentModel] = Field(default_factory=list, alias="failedAgents")
    distribution_id: Optional[str] = Field(None, alias="distributionId")

    model_config = ConfigDict(populate_by_name=True)


class AgentWorkloadModel(BaseModel):
    agent_id: str = Field(..., alias="agentId")
    agent_name: str = Field(..., alias="agentName")
    agent_email: str = Field(..., alias="agentEmail")
    total_customers: int = Field(..., alias="totalCustomers")
    customers: List[AssignedCustomerModel]

    model_config = ConfigDict(populate_by_name=True)


class WorkloadResponse(BaseModel):
    success: bool = True
    distribution: List[AgentWorkloadModel]
