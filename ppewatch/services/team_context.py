"""
Tenant context loading.

Resolves, once per request, everything the analytics functions need about a
team: its active PPE items, its filter -> zone/location index and its
compliance statuses.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ppewatch.analytics.active_items import ActiveItems, resolve_active_items
from ppewatch.analytics.filter_info import FilterInfo, build_filter_index
from ppewatch.models.compliance import ComplianceRecord, ComplianceStatus
from ppewatch.models.location import Device, FilterDevice, Location, Zone
from ppewatch.models.ppe_item import PPEItem, TeamPPEItem

logger = logging.getLogger(__name__)


async def load_active_items(db: AsyncSession, team_id: int) -> ActiveItems:
    """Active PPE items of a team, in catalogue id order."""
    result = await db.execute(
        select(PPEItem.name)
        .join(TeamPPEItem, TeamPPEItem.ppe_item_id == PPEItem.id)
        .where(TeamPPEItem.team_id == team_id, TeamPPEItem.active.is_(True))
        .order_by(PPEItem.id)
    )
    active = resolve_active_items(row[0] for row in result.all())
    logger.debug(f"Team {team_id} tracks {len(active)} PPE items")
    return active


async def load_filter_index(db: AsyncSession, team_id: int) -> Dict[str, FilterInfo]:
    """filter_id -> zone/location for every filter installed at the team's sites."""
    result = await db.execute(
        select(Location)
        .where(Location.team_id == team_id)
        .options(
            selectinload(Location.zones)
            .selectinload(Zone.devices)
            .selectinload(Device.filter_device)
        )
        .order_by(Location.id)
    )
    return build_filter_index(result.scalars().all())


async def load_statuses(db: AsyncSession, team_id: int) -> List[ComplianceStatus]:
    result = await db.execute(
        select(ComplianceStatus)
        .where(ComplianceStatus.team_id == team_id)
        .order_by(ComplianceStatus.order, ComplianceStatus.id)
    )
    return list(result.scalars().all())


def find_default_status(statuses: List[ComplianceStatus]) -> Optional[ComplianceStatus]:
    return next((s for s in statuses if s.is_default), None)


def team_filter_ids(team_id: int):
    """Subquery of the filter ids that belong to a team."""
    return (
        select(FilterDevice.filter_id)
        .join(Device, FilterDevice.device_id == Device.id)
        .join(Zone, Device.zone_id == Zone.id)
        .join(Location, Zone.location_id == Location.id)
        .where(Location.team_id == team_id)
    )


def day_bounds(day: datetime):
    """[00:00, next day 00:00) around ``day``."""
    start = day.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def status_condition(status_id: int, default_status: Optional[ComplianceStatus]):
    """
    WHERE clause for a status filter.
    
    Records without a status are shown under the default status, so
    filtering by the default also matches them.
    """
    if default_status is not None and status_id == default_status.id:
        return or_(ComplianceRecord.status_id == status_id, ComplianceRecord.status_id.is_(None))
    return ComplianceRecord.status_id == status_id


def parse_day(value: str) -> datetime:
    """Parse YYYY-MM-DD; raises ValueError."""
    return datetime.strptime(value, "%Y-%m-%d")


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO date or datetime into naive UTC; raises ValueError.
    
    A trailing ``Z`` is accepted.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment
