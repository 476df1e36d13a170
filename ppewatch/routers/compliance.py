"""
Compliance percentage and record count endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Optional

from ppewatch.config import settings
from ppewatch.core.auth import TeamAccess, require_team_access
from ppewatch.database import get_db
from ppewatch.analytics.aggregator import aggregate_compliance
from ppewatch.models.compliance import ComplianceRecord
from ppewatch.schemas.compliance import ComplianceData, ComplianceCount
from ppewatch.services import team_context
from ppewatch.services.response_cache import response_cache

router = APIRouter()


def _day_conditions(date: Optional[str]):
    if not date:
        return []
    try:
        start, end = team_context.day_bounds(team_context.parse_day(date))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD")
    return [ComplianceRecord.timestamp >= start, ComplianceRecord.timestamp < end]


@router.get("/compliance-data", response_model=ComplianceData)
async def get_compliance_data(
    request: Request,
    date: Optional[str] = None,
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Compliance percentages for the team's active PPE items.
    
    - date: Optional YYYY-MM-DD, restricts to that day
    
    Only the newest COMPLIANCE_RECORD_LIMIT records are scanned. A team
    without records gets all zeros.
    """
    cached = response_cache.get(request)
    if cached is not None:
        return cached
    
    conditions = _day_conditions(date)
    active = await team_context.load_active_items(db, access.team.id)
    
    result = await db.execute(
        select(ComplianceRecord)
        .where(
            ComplianceRecord.filter_id.in_(team_context.team_filter_ids(access.team.id)),
            *conditions
        )
        .order_by(ComplianceRecord.timestamp.desc())
        .limit(settings.COMPLIANCE_RECORD_LIMIT)
    )
    records = result.scalars().all()
    
    tally = aggregate_compliance(records, active)
    data = ComplianceData.model_validate(tally.to_api())
    
    response_cache.put(request, data)
    return data


@router.get("/compliance-count", response_model=ComplianceCount)
async def get_compliance_count(
    date: Optional[str] = None,
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """Number of compliance records for the team, optionally on one day."""
    conditions = _day_conditions(date)
    
    result = await db.execute(
        select(func.count()).select_from(ComplianceRecord)
        .where(
            ComplianceRecord.filter_id.in_(team_context.team_filter_ids(access.team.id)),
            *conditions
        )
    )
    return ComplianceCount(count=result.scalar() or 0)
