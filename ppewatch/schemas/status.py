"""
Compliance status schemas for API request/response validation.
"""

from pydantic import Field, field_validator
from datetime import datetime
from typing import List, Optional

from ppewatch.schemas.base import CamelModel


def format_status_code(code: str) -> str:
    """Upper-case a status code and replace whitespace runs with underscores."""
    return "_".join(code.upper().split())


class ComplianceStatusBase(CamelModel):
    """Fields shared by status create and update."""
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    order: Optional[int] = None
    is_default: bool = False


class ComplianceStatusCreate(ComplianceStatusBase):
    """Schema for creating a status."""
    code: str = Field(..., min_length=1)
    
    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return format_status_code(value)


class ComplianceStatusUpdate(CamelModel):
    """Schema for updating a status; omitted fields are left unchanged."""
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    order: Optional[int] = None
    is_default: Optional[bool] = None


class ComplianceStatusResponse(CamelModel):
    """Schema for status responses."""
    id: int
    team_id: int
    name: str
    code: str
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    order: int = 0
    is_default: bool = False
    created_at: Optional[datetime] = None


class ComplianceStatusListResponse(CamelModel):
    statuses: List[ComplianceStatusResponse]


class DefaultStatusesRequest(CamelModel):
    """Initial status set for a team."""
    statuses: List[ComplianceStatusCreate] = Field(..., min_length=1)


class DefaultStatusesResponse(CamelModel):
    message: str
    statuses: List[ComplianceStatusResponse]
