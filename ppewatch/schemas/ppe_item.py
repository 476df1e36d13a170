"""
PPE item schemas for API request/response validation.
"""

from typing import List, Optional

from ppewatch.schemas.base import CamelModel


class PPEItemResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None


class TeamPPEItemResponse(CamelModel):
    """A team's configuration row for one catalogue item."""
    id: int
    team_id: int
    ppe_item_id: int
    active: bool
    ppe_item: PPEItemResponse


class TeamPPEItemListResponse(CamelModel):
    success: bool = True
    data: List[TeamPPEItemResponse]


class PPEItemToggle(CamelModel):
    ppe_item_id: int
    active: bool


class TeamPPEItemsUpdate(CamelModel):
    items: List[PPEItemToggle]


class TeamPPEItemsUpdateResponse(CamelModel):
    success: bool = True
    message: str
