"""Agent roster API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AgentCreateRequest(BaseModel):
    name: str = Field("", description="Agent display name.")
    email: str = Field("", description="Login email; unique, case-insensitive.")
    mobile: str = Field("", description="Mobile number with country code.")
    password: str = ""


class AgentUpdateRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)


class AgentModel(BaseModel):
    id: str
    name: str
    email: str
    mobile: str
    is_active: bool = Field(..., alias="isActive")
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


class AgentListResponse(BaseModel):
    success: bool = True
    count: int
    agents: List[AgentModel]


class AgentResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    agent: AgentModel
