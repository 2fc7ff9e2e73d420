# models/location.py

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class LocationBase(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    description: Optional[str] = None


# -------------------------------------------------
# Create
# -------------------------------------------------
class LocationCreate(LocationBase):
    """
    owner_user_id is never accepted from the client;
    the API sets it to the caller.
    """
    pass


# -------------------------------------------------
# Update (PATCH)
# -------------------------------------------------
class LocationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    description: Optional[str] = None


# -------------------------------------------------
# Read
# -------------------------------------------------
class LocationRead(LocationBase):
    id: str
    owner_user_id: str
    total_zones: Optional[int] = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# -------------------------------------------------
# Owner listing (super admin "Manage Owners")
# -------------------------------------------------
class OwnedLocation(BaseModel):
    id: str
    name: str


class OwnerSummary(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    user_role: str
    location_count: int = 0
    locations: List[OwnedLocation] = []
    created_at: Optional[datetime] = None


class OwnerRemovalResult(BaseModel):
    owner_id: str
    locations_removed: int
    zones_removed: int
    role: str = "user"
