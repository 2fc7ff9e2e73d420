# models/profile.py

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from models.enums import UserRole


class MeRead(BaseModel):
    """Caller identity plus what the client may show (route guards)."""
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
    capabilities: List[str] = []
    home: str = "/dashboard"


class ProfileUpdate(BaseModel):
    """
    Display fields only. Unknown keys (user_role included) are rejected,
    so a self-service edit can never change authorization.
    """
    model_config = ConfigDict(extra="forbid")

    full_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=40)
    email: Optional[EmailStr] = None
