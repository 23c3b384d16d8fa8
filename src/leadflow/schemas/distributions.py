"""Distribution history API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .uploads import CustomerModel


class IdentityModel(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class AssignmentModel(BaseModel):
    agent: IdentityModel
    count: int
    customers: List[CustomerModel]


class DistributionModel(BaseModel):
    id: str
    filename: str
    uploaded_at: datetime = Field(..., alias="uploadedAt")
    total_customers: int = Field(..., alias="totalCustomers")
    uploaded_by: Optional[IdentityModel] = Field(None, alias="uploadedBy")
    assignments: List[AssignmentModel]

    model_config = ConfigDict(populate_by_name=True)


class DistributionListResponse(BaseModel):
    success: bool = True
    page: int
    limit: int
    results: List[DistributionModel]


class DistributionDetailResponse(BaseModel):
    success: bool = True
    distribution: DistributionModel
