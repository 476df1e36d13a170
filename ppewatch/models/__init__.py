"""
Models package initialization.
"""

from ppewatch.models.team import Team, TeamMember
from ppewatch.models.ppe_item import PPEItem, TeamPPEItem
from ppewatch.models.location import Location, Zone, Device, FilterDevice
from ppewatch.models.compliance import ComplianceRecord, ComplianceStatus, Severity

__all__ = [
    "Team", "TeamMember", "PPEItem", "TeamPPEItem", "Location", "Zone",
    "Device", "FilterDevice", "ComplianceRecord", "ComplianceStatus", "Severity",
]
