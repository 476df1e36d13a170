"""
PPE catalogue and per-team PPE configuration models.
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from ppewatch.database import Base


class PPEItem(Base):
    """Model for a catalogue PPE item (Hard Hat, Vest, ...)."""
    
    __tablename__ = "ppe_items"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(String(500), nullable=True)
    
    def __repr__(self):
        return f"<PPEItem {self.id}: {self.name}>"


class TeamPPEItem(Base):
    """
    Model linking a team to a tracked PPE item.
    
    Deactivating a row retires the requirement for the team without
    touching historical compliance records.
    """
    
    __tablename__ = "team_ppe_items"
    __table_args__ = (UniqueConstraint("team_id", "ppe_item_id", name="uq_team_ppe_item"),)
    
    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    ppe_item_id = Column(Integer, ForeignKey("ppe_items.id", ondelete="CASCADE"), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    
    # Relationships
    team = relationship("Team", back_populates="ppe_items")
    ppe_item = relationship("PPEItem")
    
    def __repr__(self):
        return f"<TeamPPEItem team={self.team_id} item={self.ppe_item_id} active={self.active}>"
