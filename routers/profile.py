# routers/profile.py

from fastapi import APIRouter, Depends, HTTPException

from dependencies.auth import get_current_user, CurrentUser
from core.permission_helpers import capabilities_for_role, home_for_role
from core.profile_helpers import update_contact_fields
from core.supabase_client import get_supabase_client
from models.profile import MeRead, ProfileUpdate

router = APIRouter(
    prefix="/me",
    tags=["Profile"],
)


def _me(user_id: str, email, full_name, phone, role) -> MeRead:
    return MeRead(
        id=user_id,
        email=email,
        full_name=full_name,
        phone=phone,
        role=role,
        capabilities=capabilities_for_role(role),
        home=home_for_role(role),
    )


# -----------------------------------------------------
# GET /me
# Role + capabilities for client-side route guards.
# The guards are UX only; every mutation re-checks server-side.
# -----------------------------------------------------
@router.get("", response_model=MeRead, summary="Current user, role and capabilities")
def read_me(current_user: CurrentUser = Depends(get_current_user)):
    return _me(
        current_user.id,
        current_user.email,
        current_user.full_name,
        current_user.phone,
        current_user.role,
    )


# -----------------------------------------------------
# PATCH /me
# Contact details only; the sign-in email stays with Supabase Auth.
# -----------------------------------------------------
@router.patch("", response_model=MeRead, summary="Edit own name, phone or contact email")
def update_me(
    payload: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    profile = update_contact_fields(
        client, current_user.id, payload.model_dump(exclude_unset=True)
    )
    return _me(
        current_user.id,
        profile.get("email"),
        profile.get("full_name"),
        profile.get("phone"),
        profile.get("user_role") or current_user.role,
    )
