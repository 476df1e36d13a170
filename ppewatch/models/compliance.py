"""
Compliance record and compliance status models.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Text, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from ppewatch.database import Base


class Severity(str, enum.Enum):
    """Alert severity levels, assigned upstream or by a reviewer."""
    NOT_SET = "NOT_SET"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ComplianceStatus(Base):
    """
    Model for a team-defined alert workflow status.
    
    One status per team should be the default; records without a status
    are reported under it.
    """
    
    __tablename__ = "compliance_statuses"
    
    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    
    name = Column(String(100), nullable=False)
    code = Column(String(100), nullable=False)  # e.g. IN_REVIEW
    description = Column(Text, nullable=True)
    color = Column(String(50), nullable=True)
    icon = Column(String(100), nullable=True)
    order = Column(Integer, default=0, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    team = relationship("Team", back_populates="compliance_statuses")
    
    def __repr__(self):
        return f"<ComplianceStatus {self.id}: {self.code}>"


class ComplianceRecord(Base):
    """
    Model for one PPE compliance reading of a worker.
    
    Each record is:
    - Written by the detection ingestion (not by this service)
    - Keyed by the filter that produced it
    - Immutable apart from status, severity and the comment trail
    """
    
    __tablename__ = "compliance_records"
    
    id = Column(Integer, primary_key=True, index=True)
    worker_id = Column(String(100), nullable=False, index=True)
    filter_id = Column(String(100), nullable=False, index=True)
    timestamp = Column(DateTime, nullable=False, index=True, default=datetime.utcnow)
    
    severity = Column(String(20), default=Severity.NOT_SET.value, nullable=False)
    status_id = Column(
        Integer, ForeignKey("compliance_statuses.id", ondelete="SET NULL"), nullable=True
    )
    
    # {"HardHatCompliance": "Yes", "VestCompliance": "No", ...}
    compliances = Column(JSON, nullable=False, default=dict)
    # [{text, timestamp, user, statusFrom, statusTo}, ...]
    comments = Column(JSON, nullable=True)
    
    status = relationship("ComplianceStatus", lazy="joined")
    
    def __repr__(self):
        return f"<ComplianceRecord {self.id}: worker {self.worker_id} at {self.timestamp}>"
