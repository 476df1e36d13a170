"""
Team PPE item configuration endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
import logging

from ppewatch.core.auth import TeamAccess, require_team_access
from ppewatch.database import get_db
from ppewatch.models.ppe_item import PPEItem, TeamPPEItem
from ppewatch.schemas.ppe_item import (
    TeamPPEItemResponse,
    TeamPPEItemListResponse,
    TeamPPEItemsUpdate,
    TeamPPEItemsUpdateResponse,
)
from ppewatch.services.response_cache import response_cache

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=TeamPPEItemListResponse)
async def list_team_ppe_items(
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """List the team's PPE item rows, active and inactive."""
    result = await db.execute(
        select(TeamPPEItem)
        .options(selectinload(TeamPPEItem.ppe_item))
        .where(TeamPPEItem.team_id == access.team.id)
        .order_by(TeamPPEItem.ppe_item_id)
    )
    rows = result.scalars().all()
    return TeamPPEItemListResponse(
        data=[TeamPPEItemResponse.model_validate(row) for row in rows]
    )


@router.post("/update", response_model=TeamPPEItemsUpdateResponse)
async def update_team_ppe_items(
    payload: TeamPPEItemsUpdate,
    access: TeamAccess = Depends(require_team_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Activate or deactivate catalogue items for the team.
    
    Missing team rows are created. Historical records are not touched,
    deactivated items simply stop being reported.
    """
    team_id = access.team.id
    requested = {item.ppe_item_id: item.active for item in payload.items}
    
    catalogue = await db.execute(
        select(PPEItem.id).where(PPEItem.id.in_(list(requested)))
    )
    known_ids = set(catalogue.scalars().all())
    unknown = sorted(set(requested) - known_ids)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown PPE item ids: {unknown}")
    
    result = await db.execute(
        select(TeamPPEItem).where(TeamPPEItem.team_id == team_id)
    )
    existing = {row.ppe_item_id: row for row in result.scalars().all()}
    
    for ppe_item_id, active in requested.items():
        row = existing.get(ppe_item_id)
        if row is None:
            db.add(TeamPPEItem(team_id=team_id, ppe_item_id=ppe_item_id, active=active))
        else:
            row.active = active
    
    await db.commit()
    
    logger.info(f"Updated {len(requested)} PPE items for team {access.team.slug}")
    response_cache.invalidate_prefix(f"/api/teams/{access.team.slug}/")
    return TeamPPEItemsUpdateResponse(message=f"Updated {len(requested)} PPE items")
