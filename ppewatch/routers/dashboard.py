"""
Risk ranking and trend endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from datetime import datetime

from ppewatch.config import settings
from ppewatch.core.auth import TeamAccess, require_team_access
from ppewatch.database import get_db
from ppewatch.analytics.ranker import RiskThresholds, rank_high_risk_zones, rank_repeat_offenders
from ppewatch.analytics.trends import PERIODS, build_trend, trend_window_start
from ppewatch.models.compliance import ComplianceRecord
from ppewatch.schemas.dashboard import TrendDataPoint, WorkerRiskEntry, ZoneRiskData
from ppewatch.services import team_context
from ppewatch.services.response_cache import response_cache

router = APIRouter()


async def _team_records(db: AsyncSession, team_id: int, *conditions):
    """Team records matching ``conditions``, newest first."""
    result = await db.execute(
        select(ComplianceRecord)
        .where(ComplianceRecord.filter_id.in_(team_context.team_filter_ids(team_id)), *conditions)
        .order_by(ComplianceRecord.timestamp.desc(), ComplianceRecord.id.desc())
    )
    return result.scalars().all()


def _window(start_date: Optional[str], end_date: Optional[str]):
    conditions = []
    try:
        if start_date:
            conditions.append(ComplianceRecord.timestamp >= team_context.parse_timestamp(start_date))
        if end_date:
            conditions.append(ComplianceRecord.timestamp <= team_context.parse_timestamp(end_date))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format")
    return conditions


@router.get("/repeat-offenders", response_model=List[WorkerRiskEntry])
async def get_repeat_offenders(
    request: Request,
    min_violations: Optional[int] = Query(None, alias="minViolations"),
    limit: Optional[int] = None,
    sort_by: str = Query("violations", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Workers with repeated violations.
    
    Args:
        minViolations: Minimum violated items (default: REPEAT_OFFENDER_MIN_VIOLATIONS)
        limit: Maximum results, applied after sorting (default: REPEAT_OFFENDER_LIMIT)
        sortBy: violations, lastViolation, name, location or riskLevel
        sortOrder: asc or desc
    """
    cached = response_cache.get(request)
    if cached is not None:
        return cached
    
    team_id = access.team.id
    conditions = _window(start_date, end_date)
    active = await team_context.load_active_items(db, team_id)
    filter_index = await team_context.load_filter_index(db, team_id)
    if not filter_index:
        return []
    
    records = await _team_records(db, team_id, *conditions)
    
    offenders = rank_repeat_offenders(
        records,
        active,
        filter_index,
        min_violations=min_violations or settings.REPEAT_OFFENDER_MIN_VIOLATIONS,
        limit=limit or settings.REPEAT_OFFENDER_LIMIT,
        sort_by=sort_by,
        sort_order=sort_order,
        thresholds=RiskThresholds(high=settings.RISK_LEVEL_HIGH, medium=settings.RISK_LEVEL_MEDIUM),
    )
    
    result = [WorkerRiskEntry.model_validate(o.to_dict()) for o in offenders]
    response_cache.put(request, result)
    return result


@router.get("/high-risk-zones", response_model=List[ZoneRiskData])
async def get_high_risk_zones(
    request: Request,
    min_violations: Optional[int] = Query(None, alias="minViolations"),
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Zones whose non-compliant checks reach the threshold, lowest compliance first.
    
    Args:
        minViolations: Threshold (default: HIGH_RISK_ZONE_MIN_VIOLATIONS)
    """
    cached = response_cache.get(request)
    if cached is not None:
        return cached
    
    team_id = access.team.id
    active = await team_context.load_active_items(db, team_id)
    filter_index = await team_context.load_filter_index(db, team_id)
    if not filter_index:
        return []
    
    records = await _team_records(db, team_id)
    threshold = settings.HIGH_RISK_ZONE_MIN_VIOLATIONS if min_violations is None else min_violations
    zones = rank_high_risk_zones(records, active, filter_index, min_violations=threshold)
    
    result = [ZoneRiskData.model_validate(z.to_dict()) for z in zones]
    response_cache.put(request, result)
    return result


@router.get("/trends", response_model=List[TrendDataPoint])
async def get_trends(
    request: Request,
    period: str = Query("week", pattern=f"^({'|'.join(PERIODS)})$"),
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Violations per active PPE item, bucketed by week or month.
    
    Returns TREND_BUCKETS past periods plus the current one, oldest first.
    Empty buckets report zeros unless TREND_DEMO_MODE is on.
    """
    cached = response_cache.get(request)
    if cached is not None:
        return cached
    
    team_id = access.team.id
    now = datetime.utcnow()
    active = await team_context.load_active_items(db, team_id)
    
    since = trend_window_start(period, now, settings.TREND_BUCKETS)
    records = await _team_records(db, team_id, ComplianceRecord.timestamp >= since)
    
    points = build_trend(
        records,
        active,
        period=period,
        now=now,
        buckets=settings.TREND_BUCKETS,
        demo_mode=settings.TREND_DEMO_MODE,
    )
    
    result = [TrendDataPoint(**p) for p in points]
    response_cache.put(request, result)
    return result
