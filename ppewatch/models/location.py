"""
Site hierarchy models: Location -> Zone -> Device -> FilterDevice.

Compliance records reference a detection filter by its filter_id; walking
this hierarchy resolves a filter to its zone and location.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from ppewatch.database import Base


class DeviceStatus(str, enum.Enum):
    """Device connectivity states."""
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class Location(Base):
    """Model for a physical site owned by a team."""
    
    __tablename__ = "locations"
    
    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    team = relationship("Team", back_populates="locations")
    zones = relationship("Zone", back_populates="location", cascade="all, delete-orphan")
    
    def __repr__(self):
        return f"<Location {self.id}: {self.name}>"


class Zone(Base):
    """Model for an area within a location."""
    
    __tablename__ = "zones"
    
    id = Column(Integer, primary_key=True, index=True)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    
    location = relationship("Location", back_populates="zones")
    devices = relationship("Device", back_populates="zone", cascade="all, delete-orphan")
    
    def __repr__(self):
        return f"<Zone {self.id}: {self.name}>"


class Device(Base):
    """Model for a camera or sensor installed in a zone."""
    
    __tablename__ = "devices"
    
    id = Column(Integer, primary_key=True, index=True)
    zone_id = Column(Integer, ForeignKey("zones.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    device_type = Column(String(50), default="CAMERA")
    status = Column(String(50), default=DeviceStatus.ONLINE.value)
    
    zone = relationship("Zone", back_populates="devices")
    filter_device = relationship(
        "FilterDevice", back_populates="device", uselist=False, cascade="all, delete-orphan"
    )
    
    def __repr__(self):
        return f"<Device {self.id}: {self.name}>"


class FilterDevice(Base):
    """Model binding a device to the detection filter that emits its records."""
    
    __tablename__ = "filter_devices"
    
    id = Column(Integer, primary_key=True, index=True)
    device_id = Column(Integer, ForeignKey("devices.id", ondelete="CASCADE"), nullable=False, unique=True)
    filter_id = Column(String(100), nullable=False, unique=True, index=True)
    
    device = relationship("Device", back_populates="filter_device")
    
    def __repr__(self):
        return f"<FilterDevice {self.filter_id} -> device {self.device_id}>"
