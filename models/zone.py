# models/zone.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from models.enums import ZoneStatus


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class ZoneBase(BaseModel):
    name: str = Field(..., min_length=1)
    zone_number: int = Field(..., ge=1)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    total_slots: int = Field(..., ge=1)
    cost_per_hour: float = Field(15.0, ge=0)


# -------------------------------------------------
# Create
# -------------------------------------------------
class ZoneCreate(ZoneBase):
    """
    available_slots defaults to total_slots (an empty zone),
    zone_number to the next free number of the location.
    location_id comes from the URL.
    """
    zone_number: Optional[int] = Field(None, ge=1)
    available_slots: Optional[int] = Field(None, ge=0)
    status: Optional[ZoneStatus] = None

    @model_validator(mode="after")
    def check_slots(self):
        if self.available_slots is not None and self.available_slots > self.total_slots:
            raise ValueError("available_slots cannot exceed total_slots")
        return self


# -------------------------------------------------
# Update (PATCH), checked against the stored row in services.zones
# -------------------------------------------------
class ZoneUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    zone_number: Optional[int] = Field(None, ge=1)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    total_slots: Optional[int] = Field(None, ge=1)
    available_slots: Optional[int] = Field(None, ge=0)
    cost_per_hour: Optional[float] = Field(None, ge=0)
    status: Optional[ZoneStatus] = None


class ZoneAvailabilityUpdate(BaseModel):
    available_slots: int


# -------------------------------------------------
# Read
# -------------------------------------------------
class ZoneRead(ZoneBase):
    id: str
    location_id: str
    available_slots: int
    is_full: bool = False
    status: ZoneStatus = ZoneStatus.available
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# -------------------------------------------------
# Derived per-location statistics
# -------------------------------------------------
class ZoneAvailability(BaseModel):
    location_id: Optional[str] = None
    total_zones: int = 0
    total_slots: int = 0
    available_slots: int = 0
    occupied_slots: int = 0
    occupancy_percentage: float = 0.0
