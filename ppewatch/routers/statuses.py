"""
Team compliance status workflow endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from typing import Optional
import logging

from ppewatch.core.auth import TeamAccess, require_team_access
from ppewatch.database import get_db
from ppewatch.models.compliance import ComplianceRecord, ComplianceStatus
from ppewatch.schemas.status import (
    ComplianceStatusCreate,
    ComplianceStatusUpdate,
    ComplianceStatusResponse,
    ComplianceStatusListResponse,
    DefaultStatusesRequest,
    DefaultStatusesResponse,
)
from ppewatch.services import team_context
from ppewatch.services.response_cache import response_cache

logger = logging.getLogger(__name__)

router = APIRouter()

# Columns an update may change but never clear
REQUIRED_FIELDS = ("name", "order", "is_default")


async def _get_status(db: AsyncSession, team_id: int, status_id: int) -> ComplianceStatus:
    result = await db.execute(
        select(ComplianceStatus).where(
            ComplianceStatus.id == status_id,
            ComplianceStatus.team_id == team_id
        )
    )
    status = result.scalar_one_or_none()
    if not status:
        raise HTTPException(status_code=404, detail="Status not found")
    return status


async def _clear_default(db: AsyncSession, team_id: int, keep_id: Optional[int] = None):
    """Unset is_default on every team status except ``keep_id``."""
    query = update(ComplianceStatus).where(
        ComplianceStatus.team_id == team_id,
        ComplianceStatus.is_default.is_(True)
    )
    if keep_id is not None:
        query = query.where(ComplianceStatus.id != keep_id)
    await db.execute(query.values(is_default=False))


def _invalidate(access: TeamAccess):
    response_cache.invalidate_prefix(f"/api/teams/{access.team.slug}/")


@router.get("", response_model=ComplianceStatusListResponse)
async def list_statuses(
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """List team statuses by display order."""
    statuses = await team_context.load_statuses(db, access.team.id)
    return ComplianceStatusListResponse(
        statuses=[ComplianceStatusResponse.model_validate(s) for s in statuses]
    )


@router.post("", response_model=ComplianceStatusResponse, status_code=201)
async def create_status(
    payload: ComplianceStatusCreate,
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """Create a status. Codes are unique per team."""
    team_id = access.team.id
    existing = await db.execute(
        select(ComplianceStatus.id).where(
            ComplianceStatus.team_id == team_id,
            ComplianceStatus.code == payload.code
        )
    )
    if existing.first() is not None:
        raise HTTPException(status_code=400, detail=f"Status with code {payload.code} already exists")
    
    if payload.is_default:
        await _clear_default(db, team_id)
    
    status = ComplianceStatus(
        team_id=team_id,
        name=payload.name,
        code=payload.code,
        description=payload.description,
        color=payload.color,
        icon=payload.icon,
        order=payload.order or 0,
        is_default=payload.is_default,
    )
    db.add(status)
    await db.commit()
    await db.refresh(status)
    
    logger.info(f"Created status {status.code} for team {access.team.slug}")
    _invalidate(access)
    return status


@router.post("/defaults", response_model=DefaultStatusesResponse, status_code=201)
async def create_default_statuses(
    payload: DefaultStatusesRequest,
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Seed a team's status set.
    
    Only allowed while the team has no statuses. The first entry flagged
    ``isDefault`` becomes the default, otherwise the first entry does.
    """
    team_id = access.team.id
    if await team_context.load_statuses(db, team_id):
        raise HTTPException(status_code=409, detail="Team already has compliance statuses")
    
    codes = [item.code for item in payload.statuses]
    if len(set(codes)) != len(codes):
        raise HTTPException(status_code=400, detail="Status codes must be unique")
    
    default_index = next(
        (i for i, item in enumerate(payload.statuses) if item.is_default),
        0
    )
    
    created = []
    for index, item in enumerate(payload.statuses):
        status = ComplianceStatus(
            team_id=team_id,
            name=item.name,
            code=item.code,
            description=item.description,
            color=item.color,
            icon=item.icon,
            order=item.order if item.order is not None else index,
            is_default=index == default_index,
        )
        db.add(status)
        created.append(status)
    
    await db.commit()
    for status in created:
        await db.refresh(status)
    
    logger.info(f"Seeded {len(created)} statuses for team {access.team.slug}")
    _invalidate(access)
    return DefaultStatusesResponse(
        message=f"Created {len(created)} statuses",
        statuses=[ComplianceStatusResponse.model_validate(s) for s in created]
    )


@router.get("/{status_id}", response_model=ComplianceStatusResponse)
async def get_status(
    status_id: int,
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """Get a single status."""
    return await _get_status(db, access.team.id, status_id)


@router.put("/{status_id}", response_model=ComplianceStatusResponse)
async def update_status(
    status_id: int,
    payload: ComplianceStatusUpdate,
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """Update a status. Setting isDefault moves the default flag to this status."""
    status = await _get_status(db, access.team.id, status_id)
    
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and not changes["name"]:
        raise HTTPException(status_code=400, detail="Status name cannot be empty")
    for field_name in REQUIRED_FIELDS:
        if field_name in changes and changes[field_name] is None:
            raise HTTPException(status_code=400, detail=f"{to_camel(field_name)} cannot be null")
    
    if changes.get("is_default"):
        await _clear_default(db, access.team.id, keep_id=status.id)
    for field_name, value in changes.items():
        setattr(status, field_name, value)
    
    await db.commit()
    await db.refresh(status)
    
    _invalidate(access)
    return status


@router.delete("/{status_id}")
async def delete_status(
    status_id: int,
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """Delete a status. Records holding it fall back to no status."""
    status = await _get_status(db, access.team.id, status_id)
    
    await db.execute(
        update(ComplianceRecord)
        .where(ComplianceRecord.status_id == status.id)
        .values(status_id=None)
    )
    await db.delete(status)
    await db.commit()
    
    logger.info(f"Deleted status {status_id} of team {access.team.slug}")
    _invalidate(access)
    return {"success": True, "message": "Status deleted"}
