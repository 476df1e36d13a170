"""
Dashboard schemas for API request/response validation.
"""

from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from ppewatch.schemas.base import CamelModel


class WorkerRiskEntry(CamelModel):
    """Repeat offender summary."""
    id: str
    worker_id: str
    employee_id: str
    violations: int
    last_violation: Optional[datetime] = None
    last_violation_type: str = ""
    zone: str = ""
    location_name: str = ""
    location: str = ""
    risk_level: str = "low"  # low, medium, high
    violation_types: List[str] = []


class ZoneRiskData(CamelModel):
    """High-risk zone summary."""
    id: int
    name: str
    location: str
    violations: int
    compliance_rate: int  # Rounded percentage


class TrendDataPoint(BaseModel):
    """
    Violation counts for one bucket.
    
    Besides ``week`` and ``date`` there is one integer key per active PPE
    item (its lowercased name), so extra keys are allowed.
    """
    week: str
    date: str
    
    class Config:
        extra = "allow"
