"""
Filter to zone/location resolution.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List


@dataclass(frozen=True)
class FilterInfo:
    """Where a detection filter is installed."""
    filter_id: str
    zone_id: int
    zone_name: str
    location_id: int
    location_name: str


def build_filter_index(locations: Iterable) -> Dict[str, FilterInfo]:
    """
    Walk Location -> Zone -> Device -> FilterDevice and index by filter id.
    
    Devices without a filter are skipped.
    """
    index: Dict[str, FilterInfo] = {}
    for location in locations:
        for zone in location.zones:
            for device in zone.devices:
                filter_device = device.filter_device
                if filter_device is None:
                    continue
                index[filter_device.filter_id] = FilterInfo(
                    filter_id=filter_device.filter_id,
                    zone_id=zone.id,
                    zone_name=zone.name,
                    location_id=location.id,
                    location_name=location.name,
                )
    return index


def unique_zones(index: Dict[str, FilterInfo]) -> List[dict]:
    """Distinct zones of an index, first occurrence wins."""
    seen = set()
    zones = []
    for info in index.values():
        if info.zone_id in seen:
            continue
        seen.add(info.zone_id)
        zones.append({
            "id": info.zone_id,
            "name": info.zone_name,
            "locationId": info.location_id,
            "locationName": info.location_name,
        })
    return zones


def filters_for_zone(index: Dict[str, FilterInfo], zone: str) -> List[str]:
    """Filter ids installed in a zone, matched by zone name or id."""
    return [
        filter_id for filter_id, info in index.items()
        if info.zone_name == zone or str(info.zone_id) == zone
    ]
