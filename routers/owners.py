# routers/owners.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from dependencies.auth import get_current_user, CurrentUser
from core.config import settings
from core.permission_helpers import requires_capability
from core.supabase_client import get_supabase_client, get_user_client
from models.enums import Capability
from models.location import OwnerRemovalResult, OwnerSummary
from services import ownership_cascade

router = APIRouter(
    prefix="/owners",
    tags=["Owners"],
    dependencies=[Depends(requires_capability(Capability.manage_owners))],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


# -----------------------------------------------------
# GET /owners
# -----------------------------------------------------
@router.get("", response_model=List[OwnerSummary], summary="Location owners and their locations")
def list_location_owners(current_user: CurrentUser = Depends(get_current_user)):
    return ownership_cascade.list_owners(_client(), current_user.id)


# -----------------------------------------------------
# DELETE /owners/{owner_id}
# -----------------------------------------------------
@router.delete(
    "/{owner_id}",
    response_model=OwnerRemovalResult,
    summary="Remove an owner: delete locations and zones, revert role to user",
)
def remove_location_owner(
    owner_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Safe to call again on an owner that was already (partly) removed.

    - **500 partial_failure** (client cascade mode only): some steps ran;
      the body lists what completed. Calling again finishes the removal.
    """
    rpc_client = None
    if settings.OWNER_CASCADE_MODE == "rpc":
        rpc_client = get_user_client(current_user.access_token)
        if not rpc_client:
            raise HTTPException(500, "Supabase client not configured")

    counts = ownership_cascade.remove_owner(
        _client(),
        current_user.id,
        owner_id,
        rpc_client=rpc_client,
    )
    return OwnerRemovalResult(owner_id=owner_id, **counts)
