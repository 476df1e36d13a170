"""
Alert schemas for API request/response validation.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from ppewatch.models.compliance import Severity
from ppewatch.schemas.base import CamelModel
from ppewatch.schemas.status import ComplianceStatusResponse


class AlertStatusSchema(CamelModel):
    """Status attached to an alert."""
    id: int
    name: str
    code: str
    color: Optional[str] = None
    icon: Optional[str] = None


class AlertResponse(CamelModel):
    """One compliance record with active violations."""
    id: int
    worker_id: str
    timestamp: datetime
    zone: str
    location: str
    violations: List[str]
    severity: str
    status: Optional[AlertStatusSchema] = None
    # [{text, timestamp, user, statusFrom, statusTo}]
    comments: List[Dict[str, Any]] = []


class ZoneOption(CamelModel):
    """Zone available as a filter value."""
    id: int
    name: str
    location_id: int
    location_name: str


class AlertListResponse(CamelModel):
    """Schema for a page of alerts plus filter options."""
    alerts: List[AlertResponse]
    total: int
    limit: int
    offset: int
    stats: Dict[str, Any] = {}
    zones: List[ZoneOption] = []
    statuses: List[ComplianceStatusResponse] = []
    severities: List[str] = [s.value for s in Severity]


class ComplianceRecordResponse(CamelModel):
    """Raw compliance record."""
    id: int
    worker_id: str
    filter_id: str
    timestamp: datetime
    severity: str
    status_id: Optional[int] = None
    compliances: Dict[str, str] = {}
    comments: Optional[List[Dict[str, Any]]] = None


class UpdateStatusRequest(CamelModel):
    """
    Move an alert to another status.
    
    statusId and a non-blank comment are required; they are checked by the
    endpoint so that missing values answer 400.
    """
    status_id: Optional[int] = None
    comment: Optional[str] = None
    severity: Optional[str] = None


class UpdateStatusResponse(CamelModel):
    success: bool = True
    message: str
    data: ComplianceRecordResponse
