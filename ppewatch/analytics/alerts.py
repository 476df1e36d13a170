"""
Violation and alert extraction from single compliance records.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Mapping, Optional
import logging

from ppewatch.analytics.active_items import ActiveItems
from ppewatch.analytics.filter_info import FilterInfo
from ppewatch.analytics.ppe_fields import NON_COMPLIANT, display_for_field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertStatus:
    """Workflow status attached to an alert."""
    id: int
    name: str
    code: str
    color: Optional[str] = None
    icon: Optional[str] = None
    
    @classmethod
    def from_status(cls, status) -> "AlertStatus":
        return cls(
            id=status.id,
            name=status.name,
            code=status.code,
            color=status.color or None,
            icon=status.icon or None,
        )


@dataclass
class Alert:
    """One compliance record with at least one active violation."""
    id: int
    worker_id: str
    timestamp: datetime
    zone: str
    location: str
    violations: List[str]
    severity: str
    status: Optional[AlertStatus] = None
    comments: List[dict] = field(default_factory=list)


def extract_violations(compliances: Mapping[str, str], active: ActiveItems) -> List[str]:
    """
    Display names of the active items a record marks as non-compliant.
    
    Order follows the record's own field order.
    """
    violations = []
    for field_name, value in (compliances or {}).items():
        if value == NON_COMPLIANT and field_name in active:
            display = active.display_names.get(field_name) or display_for_field(field_name)
            violations.append(display)
    return violations


def build_alert(
    record,
    active: ActiveItems,
    filter_index: Mapping[str, FilterInfo],
    default_status=None,
) -> Optional[Alert]:
    """
    Turn a compliance record into an alert.
    
    Args:
        record: A compliance record (ORM row or any object with the same attributes).
        active: The team's active PPE fields.
        filter_index: filter_id -> FilterInfo for the team.
        default_status: The team's default ComplianceStatus, used when the
            record has none.
            
    Returns:
        The alert, or None when nothing active was violated or the record's
        filter does not belong to a known zone.
    """
    violations = extract_violations(record.compliances, active)
    if not violations:
        return None
    
    info = filter_index.get(record.filter_id)
    if info is None:
        logger.debug(f"Record {record.id} has unresolved filter {record.filter_id}, skipped")
        return None
    
    status = getattr(record, "status", None) or default_status
    
    return Alert(
        id=record.id,
        worker_id=record.worker_id,
        timestamp=record.timestamp,
        zone=info.zone_name,
        location=info.location_name,
        violations=violations,
        severity=record.severity,
        status=AlertStatus.from_status(status) if status is not None else None,
        comments=list(record.comments or []),
    )


class AlertStats:
    """
    Violation counts per PPE item across a batch of alerts.
    
    A fresh instance is used per request.
    """
    
    def __init__(self):
        self.by_item: Dict[str, int] = defaultdict(int)
    
    def add(self, alert: Alert):
        for item in alert.violations:
            self.by_item[item] += 1
    
    def to_dict(self) -> Dict[str, int]:
        return dict(self.by_item)


def build_alerts(
    records,
    active: ActiveItems,
    filter_index: Mapping[str, FilterInfo],
    default_status=None,
    stats: Optional[AlertStats] = None,
) -> List[Alert]:
    """Build alerts for a sequence of records, feeding ``stats`` if given."""
    alerts = []
    for record in records:
        alert = build_alert(record, active, filter_index, default_status)
        if alert is None:
            continue
        if stats is not None:
            stats.add(alert)
        alerts.append(alert)
    return alerts
