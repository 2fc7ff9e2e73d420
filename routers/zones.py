# routers/zones.py

from fastapi import APIRouter, Depends, HTTPException

from dependencies.auth import get_current_user, CurrentUser
from core.supabase_client import get_supabase_client
from models.zone import ZoneAvailabilityUpdate, ZoneRead, ZoneUpdate
from services import zones as zone_service

router = APIRouter(
    prefix="/zones",
    tags=["Zones"],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


@router.get("/{zone_id}", response_model=ZoneRead)
def get_zone(zone_id: str, current_user: CurrentUser = Depends(get_current_user)):
    return zone_service.get_zone(_client(), zone_id)


# -----------------------------------------------------
# PATCH /zones/{zone_id}
# Changes are validated against the stored row before writing.
# -----------------------------------------------------
@router.patch("/{zone_id}", response_model=ZoneRead)
def update_zone(
    zone_id: str,
    payload: ZoneUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    return zone_service.update_zone(
        _client(), current_user.id, zone_id, payload.model_dump(exclude_none=True)
    )


# -----------------------------------------------------
# PUT /zones/{zone_id}/availability
# -----------------------------------------------------
@router.put("/{zone_id}/availability", response_model=ZoneRead)
def set_zone_availability(
    zone_id: str,
    payload: ZoneAvailabilityUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    **422** when available_slots falls outside [0, total_slots];
    **409** when the zone changed between read and write.
    """
    return zone_service.set_available_slots(
        _client(), current_user.id, zone_id, payload.available_slots
    )


@router.delete("/{zone_id}")
def delete_zone(zone_id: str, current_user: CurrentUser = Depends(get_current_user)):
    return zone_service.delete_zone(_client(), current_user.id, zone_id)
