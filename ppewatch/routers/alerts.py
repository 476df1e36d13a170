"""
Alert listing and status workflow endpoints.
"""

from fastapi import APIRouter, HTTPException, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Optional
from datetime import datetime, timedelta
import logging

from ppewatch.config import settings
from ppewatch.core.auth import TeamAccess, require_team_access
from ppewatch.database import get_db
from ppewatch.analytics.alerts import AlertStats, build_alerts
from ppewatch.analytics.filter_info import filters_for_zone, unique_zones
from ppewatch.models.compliance import ComplianceRecord, ComplianceStatus, Severity
from ppewatch.schemas.alert import (
    AlertListResponse, AlertResponse, ComplianceRecordResponse,
    UpdateStatusRequest, UpdateStatusResponse
)
from ppewatch.schemas.status import ComplianceStatusResponse
from ppewatch.services import team_context
from ppewatch.services.response_cache import response_cache

logger = logging.getLogger(__name__)

router = APIRouter()

SEVERITIES = [s.value for s in Severity]


def _parse_bound(value: Optional[str], name: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return team_context.parse_timestamp(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}")


@router.get("/alerts/all-alerts", response_model=AlertListResponse)
async def list_all_alerts(
    request: Request,
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    zone: Optional[str] = None,
    status: Optional[int] = None,
    severity: Optional[str] = None,
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """
    List alerts (records with active violations), newest first.
    
    Filters:
    - startDate / endDate: ISO dates; window defaults to the last ALERTS_DEFAULT_WINDOW_DAYS days
    - zone: zone name or id
    - status: status id; the default status also matches records without one
    - severity: NOT_SET, LOW, MEDIUM, HIGH or CRITICAL (unknown values are ignored)
    
    ``total`` counts matching records; ``alerts`` only holds the records of
    the page that violate an active item.
    """
    cached = response_cache.get(request)
    if cached is not None:
        return cached
    
    limit = limit or settings.ALERTS_DEFAULT_LIMIT
    start = _parse_bound(start_date, "startDate") or (
        datetime.utcnow() - timedelta(days=settings.ALERTS_DEFAULT_WINDOW_DAYS)
    )
    end = _parse_bound(end_date, "endDate")
    
    team = access.team
    statuses = await team_context.load_statuses(db, team.id)
    status_items = [ComplianceStatusResponse.model_validate(s) for s in statuses]
    
    def empty(zones=None):
        return AlertListResponse(
            alerts=[], total=0, limit=limit, offset=offset, stats={},
            zones=zones or [], statuses=status_items, severities=SEVERITIES,
        )
    
    # No workflow configured yet: nothing to show
    if not statuses:
        return empty()
    
    default_status = team_context.find_default_status(statuses)
    active = await team_context.load_active_items(db, team.id)
    filter_index = await team_context.load_filter_index(db, team.id)
    
    if not filter_index:
        return empty()
    
    zones = unique_zones(filter_index)
    
    filter_ids = list(filter_index)
    if zone:
        filter_ids = filters_for_zone(filter_index, zone)
        if not filter_ids:
            return empty(zones)
    
    # Conditions shared by the page, the total and the status counts
    base = [ComplianceRecord.filter_id.in_(filter_ids), ComplianceRecord.timestamp >= start]
    if end is not None:
        base.append(ComplianceRecord.timestamp <= end)
    
    conditions = list(base)
    if severity in SEVERITIES:
        conditions.append(ComplianceRecord.severity == severity)
    if status is not None:
        conditions.append(team_context.status_condition(status, default_status))
    
    total_result = await db.execute(
        select(func.count()).select_from(ComplianceRecord).where(*conditions)
    )
    total = total_result.scalar() or 0
    
    # Counts per status; records without one are reported under the default
    status_result = await db.execute(
        select(ComplianceRecord.status_id, func.count(ComplianceRecord.id))
        .where(*base)
        .group_by(ComplianceRecord.status_id)
    )
    status_counts = {}
    null_count = 0
    for status_id, count in status_result.all():
        if status_id is None:
            null_count = count
        else:
            status_counts[str(status_id)] = count
    if default_status is not None:
        status_counts["_pending"] = null_count
        key = str(default_status.id)
        status_counts[key] = status_counts.get(key, 0) + null_count
    total_alerts = sum(c for k, c in status_counts.items() if k != "_pending")
    
    page_result = await db.execute(
        select(ComplianceRecord)
        .where(*conditions)
        .order_by(ComplianceRecord.timestamp.desc(), ComplianceRecord.id.desc())
        .offset(offset)
        .limit(limit)
    )
    records = page_result.scalars().all()
    
    alert_stats = AlertStats()
    alerts = build_alerts(records, active, filter_index, default_status, stats=alert_stats)
    
    stats = alert_stats.to_dict()
    stats["_statusCounts"] = status_counts
    stats["_totalAlerts"] = total_alerts
    
    response = AlertListResponse(
        alerts=[AlertResponse.model_validate(a) for a in alerts],
        total=total,
        limit=limit,
        offset=offset,
        stats=stats,
        zones=zones,
        statuses=status_items,
        severities=SEVERITIES,
    )
    response_cache.put(request, response)
    return response


@router.post("/alerts/{alert_id}/update-status", response_model=UpdateStatusResponse)
async def update_alert_status(
    alert_id: int,
    body: UpdateStatusRequest,
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Move an alert to another status.
    
    - statusId: Target status (must belong to the team)
    - comment: Required note, appended to the alert's comment trail
    - severity: Optional new severity
    """
    if body.status_id is None:
        raise HTTPException(status_code=400, detail="Status ID is required")
    if not body.comment or not body.comment.strip():
        raise HTTPException(status_code=400, detail="Comment is required")
    
    team = access.team
    result = await db.execute(
        select(ComplianceRecord).where(
            ComplianceRecord.id == alert_id,
            ComplianceRecord.filter_id.in_(team_context.team_filter_ids(team.id))
        )
    )
    record = result.scalar_one_or_none()
    if not record:
        raise HTTPException(status_code=404, detail="Alert not found")
    
    result = await db.execute(
        select(ComplianceStatus).where(
            ComplianceStatus.id == body.status_id,
            ComplianceStatus.team_id == team.id
        )
    )
    new_status = result.scalar_one_or_none()
    if not new_status:
        raise HTTPException(status_code=404, detail="Status not found or not associated with this team")
    
    comment = {
        "text": body.comment.strip(),
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "user": access.member.name or access.member.email,
        "statusFrom": record.status_id,
        "statusTo": new_status.id,
    }
    # Reassign so the JSON column is flagged dirty
    record.comments = list(record.comments or []) + [comment]
    record.status_id = new_status.id
    record.status = new_status
    if body.severity in SEVERITIES:
        record.severity = body.severity
    
    await db.commit()
    await db.refresh(record)
    
    logger.info(f"Alert {record.id} of team {team.slug} moved to status {new_status.code}")
    response_cache.invalidate_prefix(f"/api/teams/{team.slug}/")
    
    return UpdateStatusResponse(
        success=True,
        message="Alert status updated successfully",
        data=ComplianceRecordResponse.model_validate(record),
    )
