"""
Compliance aggregation across records.

Tallies compliant and total checks per active PPE field and derives
percentages. Ratios are returned unrounded; rounding belongs to the caller.
"""

from typing import Dict, Iterable, Mapping
from dataclasses import dataclass, field
import logging

from ppewatch.analytics.active_items import ActiveItems
from ppewatch.analytics.ppe_fields import COMPLIANT, api_key_for_field, all_fields

logger = logging.getLogger(__name__)


def percentage(part: int, whole: int) -> float:
    """part / whole * 100, or 0.0 when there is nothing to divide."""
    if whole <= 0:
        return 0.0
    return part / whole * 100


@dataclass
class FieldTally:
    """Checks seen for one PPE field."""
    total: int = 0
    compliant: int = 0
    
    @property
    def ratio(self) -> float:
        """Compliance percentage (0-100)."""
        return percentage(self.compliant, self.total)


@dataclass
class ComplianceTally:
    """Per-field tallies plus the weighted overall figure."""
    fields: Dict[str, FieldTally] = field(default_factory=dict)
    records_seen: int = 0
    
    @property
    def total(self) -> int:
        return sum(t.total for t in self.fields.values())
    
    @property
    def compliant(self) -> int:
        return sum(t.compliant for t in self.fields.values())
    
    @property
    def overall_ratio(self) -> float:
        """
        Sum of compliant checks over sum of all checks.
        
        Weighted by check count, so a field seen four times counts twice as
        much as one seen twice.
        """
        return percentage(self.compliant, self.total)
    
    def add(self, compliances: Mapping[str, str], active: ActiveItems):
        """Count one record's active checks."""
        self.records_seen += 1
        for field_name, value in (compliances or {}).items():
            if field_name not in active:
                continue
            tally = self.fields.setdefault(field_name, FieldTally())
            tally.total += 1
            if value == COMPLIANT:
                tally.compliant += 1
    
    def to_api(self) -> Dict[str, float]:
        """
        Percentages under the compliance-data response keys.
        
        Every known PPE key is present; fields that are inactive or unseen
        report 0.
        """
        result = {"overall": self.overall_ratio}
        for field_name in all_fields():
            result[api_key_for_field(field_name)] = 0.0
        for field_name, tally in self.fields.items():
            key = api_key_for_field(field_name)
            if key:
                result[key] = tally.ratio
        return result


def aggregate_compliance(records: Iterable, active: ActiveItems) -> ComplianceTally:
    """
    Tally compliance over records for the active fields.
    
    Args:
        records: Objects with a ``compliances`` mapping (field -> "Yes"/"No").
        active: The team's active PPE fields.
        
    Returns:
        A tally with an entry (possibly 0/0) for every active field.
    """
    tally = ComplianceTally(fields={f: FieldTally() for f in active.fields})
    for record in records:
        tally.add(record.compliances, active)
    
    logger.debug(
        f"Aggregated {tally.records_seen} records over {len(active)} active fields: "
        f"{tally.compliant}/{tally.total} compliant"
    )
    return tally
