"""
Risk ranking of workers (repeat offenders) and zones (high-risk zones).

Both rankings reduce a set of compliance records into per-key summaries,
drop keys under a violation threshold, sort and truncate.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Set
import logging

from ppewatch.analytics.active_items import ActiveItems
from ppewatch.analytics.aggregator import percentage
from ppewatch.analytics.alerts import extract_violations
from ppewatch.analytics.filter_info import FilterInfo
from ppewatch.analytics.ppe_fields import COMPLIANT

logger = logging.getLogger(__name__)

SORT_KEYS = ("violations", "lastViolation", "name", "location", "riskLevel")
RISK_ORDER = {"high": 3, "medium": 2, "low": 1}


@dataclass(frozen=True)
class RiskThresholds:
    """Violation counts at which a worker becomes medium or high risk."""
    high: int = 20
    medium: int = 15
    
    def level(self, violations: int) -> str:
        if violations >= self.high:
            return "high"
        if violations >= self.medium:
            return "medium"
        return "low"


@dataclass
class WorkerViolationSummary:
    """Violations of one worker within the query window."""
    worker_id: str
    violations: int = 0
    last_violation: Optional[datetime] = None
    last_violation_types: List[str] = field(default_factory=list)
    violation_types: Set[str] = field(default_factory=set)
    zone: str = ""
    location_name: str = ""
    risk_level: str = "low"
    
    def add(self, timestamp: datetime, violations: List[str], info: FilterInfo):
        """Fold one violating record into the summary."""
        self.violations += len(violations)
        self.violation_types.update(violations)
        if self.last_violation is None or timestamp > self.last_violation:
            self.last_violation = timestamp
            self.last_violation_types = list(violations)
            self.zone = info.zone_name
            self.location_name = info.location_name
    
    def to_dict(self) -> dict:
        return {
            "id": self.worker_id,
            "workerId": self.worker_id,
            "employeeId": self.worker_id,
            "violations": self.violations,
            "lastViolation": self.last_violation,
            "lastViolationType": ", ".join(self.last_violation_types),
            "zone": self.zone,
            "locationName": self.location_name,
            "location": self.location_name,
            "riskLevel": self.risk_level,
            "violationTypes": sorted(self.violation_types),
        }


@dataclass
class ZoneViolationSummary:
    """Active-item checks of one zone."""
    zone_id: int
    zone_name: str
    location_name: str
    total_checks: int = 0
    compliant_checks: int = 0
    violations_by_field: Dict[str, int] = field(default_factory=dict)
    
    @property
    def violations(self) -> int:
        return self.total_checks - self.compliant_checks
    
    @property
    def compliance_rate(self) -> int:
        return round(percentage(self.compliant_checks, self.total_checks))
    
    def meets(self, threshold: int) -> bool:
        if self.violations >= threshold:
            return True
        return any(count >= threshold for count in self.violations_by_field.values())
    
    def to_dict(self) -> dict:
        return {
            "id": self.zone_id,
            "name": self.zone_name,
            "location": self.location_name,
            "violations": self.violations,
            "complianceRate": self.compliance_rate,
        }


def summarize_workers(
    records: Iterable,
    active: ActiveItems,
    filter_index: Mapping[str, FilterInfo],
) -> Dict[str, WorkerViolationSummary]:
    """
    Accumulate violations per worker.
    
    ``violations`` counts every violated item on every record, so two
    missing items on one record add two. Records without active violations
    or with an unknown filter are ignored.
    """
    summaries: Dict[str, WorkerViolationSummary] = {}
    for record in records:
        violations = extract_violations(record.compliances, active)
        if not violations:
            continue
        info = filter_index.get(record.filter_id)
        if info is None:
            continue
        summary = summaries.get(record.worker_id)
        if summary is None:
            summary = summaries[record.worker_id] = WorkerViolationSummary(worker_id=record.worker_id)
        summary.add(record.timestamp, violations, info)
    return summaries


def _sort_key(sort_by: str):
    if sort_by == "lastViolation":
        return lambda w: w.last_violation or datetime.min
    if sort_by == "name":
        return lambda w: w.worker_id.lower()
    if sort_by == "location":
        return lambda w: w.location_name.lower()
    if sort_by == "riskLevel":
        return lambda w: RISK_ORDER.get(w.risk_level, 0)
    return lambda w: w.violations


def rank_repeat_offenders(
    records: Iterable,
    active: ActiveItems,
    filter_index: Mapping[str, FilterInfo],
    min_violations: int = 10,
    limit: int = 5,
    sort_by: str = "violations",
    sort_order: str = "desc",
    thresholds: RiskThresholds = RiskThresholds(),
) -> List[WorkerViolationSummary]:
    """
    Workers with at least ``min_violations`` violated items.
    
    Args:
        records: Compliance records of the window, newest first.
        active: The team's active PPE fields.
        filter_index: filter_id -> FilterInfo for the team.
        min_violations: Inclusive threshold.
        limit: Maximum entries returned, applied after sorting.
        sort_by: One of SORT_KEYS; anything else sorts by violations.
        sort_order: "asc" or "desc".
        thresholds: Risk level bucketing.
        
    Returns:
        Summaries sorted stably, so ties keep first-seen order.
    """
    if sort_by not in SORT_KEYS:
        sort_by = "violations"
    
    summaries = summarize_workers(records, active, filter_index)
    
    offenders = [s for s in summaries.values() if s.violations >= min_violations]
    for offender in offenders:
        offender.risk_level = thresholds.level(offender.violations)
    
    offenders.sort(key=_sort_key(sort_by), reverse=(sort_order == "desc"))
    
    logger.debug(
        f"{len(offenders)} of {len(summaries)} workers at or above {min_violations} violations"
    )
    return offenders[:max(limit, 0)]


def summarize_zones(
    records: Iterable,
    active: ActiveItems,
    filter_index: Mapping[str, FilterInfo],
) -> Dict[int, ZoneViolationSummary]:
    """
    Count active checks per zone.
    
    Any active value other than "Yes" counts as a violation.
    """
    zones: Dict[int, ZoneViolationSummary] = {}
    for record in records:
        info = filter_index.get(record.filter_id)
        if info is None:
            continue
        for field_name, value in (record.compliances or {}).items():
            if field_name not in active:
                continue
            zone = zones.get(info.zone_id)
            if zone is None:
                zone = zones[info.zone_id] = ZoneViolationSummary(
                    zone_id=info.zone_id,
                    zone_name=info.zone_name,
                    location_name=info.location_name,
                )
            zone.total_checks += 1
            if value == COMPLIANT:
                zone.compliant_checks += 1
            else:
                zone.violations_by_field[field_name] = zone.violations_by_field.get(field_name, 0) + 1
    return zones


def rank_high_risk_zones(
    records: Iterable,
    active: ActiveItems,
    filter_index: Mapping[str, FilterInfo],
    min_violations: int = 1400,
) -> List[ZoneViolationSummary]:
    """
    Zones whose violations reach ``min_violations``, lowest compliance first.
    
    A zone qualifies on its total violations or on the violations of any
    single PPE item.
    """
    zones = summarize_zones(records, active, filter_index)
    risky = [z for z in zones.values() if z.total_checks > 0 and z.meets(min_violations)]
    risky.sort(key=lambda z: z.compliance_rate)
    
    logger.debug(f"{len(risky)} of {len(zones)} zones at or above {min_violations} violations")
    return risky
