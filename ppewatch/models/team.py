"""
Team (tenant) and membership models.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from ppewatch.database import Base


class Team(Base):
    """
    Model for a tenant.
    
    Every location, PPE configuration and compliance status belongs to
    exactly one team. Teams are addressed by their slug in the API.
    """
    
    __tablename__ = "teams"
    
    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    members = relationship("TeamMember", back_populates="team", cascade="all, delete-orphan")
    locations = relationship("Location", back_populates="team", cascade="all, delete-orphan")
    ppe_items = relationship("TeamPPEItem", back_populates="team", cascade="all, delete-orphan")
    compliance_statuses = relationship(
        "ComplianceStatus", back_populates="team", cascade="all, delete-orphan"
    )
    
    def __repr__(self):
        return f"<Team {self.id}: {self.slug}>"


class TeamMember(Base):
    """Model for a user's membership in a team."""
    
    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "email", name="uq_team_member_email"),)
    
    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=True)
    role = Column(String(50), default="member")  # owner, admin, member
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    team = relationship("Team", back_populates="members")
    
    def __repr__(self):
        return f"<TeamMember {self.email} in team {self.team_id}>"
