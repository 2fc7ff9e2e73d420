# models/owner_application.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from models.enums import ApplicationStatus


class OwnerApplicationBase(BaseModel):
    """Contact details a user supplies when asking to become a location owner."""
    contact_person: str = Field(..., min_length=1, description="Person to contact about the application")
    phone: str = Field(..., min_length=1)
    email: EmailStr
    justification: str = Field(..., min_length=1, description="Why the user should manage locations")

    @field_validator("contact_person", "phone", "justification")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class OwnerApplicationCreate(OwnerApplicationBase):
    """Submit payload. user_id always comes from the verified token."""
    pass


class OwnerApplicationDecision(BaseModel):
    """Reviewer decision (super_admin only)."""
    approve: bool
    admin_notes: Optional[str] = Field(None, description="Optional message stored with the decision")


class ApplicantInfo(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None


class OwnerApplicationRead(OwnerApplicationBase):
    id: str
    user_id: str
    status: ApplicationStatus
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    admin_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    # Joined from profiles for reviewer listings
    applicant: Optional[ApplicantInfo] = None

    model_config = {"from_attributes": True}


class DecisionResult(BaseModel):
    application_id: str
    status: ApplicationStatus
    processed: bool = True
