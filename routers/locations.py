# routers/locations.py

import asyncio
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect
from starlette.concurrency import run_in_threadpool

from dependencies.auth import authenticate_token, get_current_user, CurrentUser
from core.logging_config import logger
from core.permission_helpers import can, requires_capability
from core.realtime import subscribe_zone_changes
from core.supabase_client import get_supabase_client
from models.enums import Capability
from models.location import LocationCreate, LocationRead, LocationUpdate
from models.zone import ZoneAvailability, ZoneCreate, ZoneRead
from services import locations as location_service
from services import zones as zone_service
from services.zone_availability import AvailabilityWatcher, location_availability

router = APIRouter(
    prefix="/locations",
    tags=["Locations"],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


# ============================================================
# LOCATIONS
# ============================================================
@router.get(
    "",
    response_model=List[LocationRead],
    summary="All parking locations (map view)",
    dependencies=[Depends(requires_capability(Capability.view_map))],
)
def list_all_locations(current_user: CurrentUser = Depends(get_current_user)):
    return location_service.list_locations(_client(), current_user.id)


@router.get(
    "/managed",
    response_model=List[LocationRead],
    summary="Locations the caller manages (owners: theirs, super admin: all)",
    dependencies=[Depends(requires_capability(Capability.manage_own_locations))],
)
def list_managed_locations(current_user: CurrentUser = Depends(get_current_user)):
    return location_service.list_locations(_client(), current_user.id, managed_only=True)


@router.post(
    "",
    response_model=LocationRead,
    status_code=201,
    dependencies=[Depends(requires_capability(Capability.manage_own_locations))],
)
def create_location(
    payload: LocationCreate,
    current_user: CurrentUser = Depends(get_current_user),
):
    return location_service.create_location(_client(), current_user.id, payload.model_dump())


@router.get("/{location_id}", response_model=LocationRead)
def get_location(
    location_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    return location_service.get_location(_client(), location_id)


@router.patch("/{location_id}", response_model=LocationRead)
def update_location(
    location_id: str,
    payload: LocationUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    return location_service.update_location(
        _client(), current_user.id, location_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/{location_id}")
def delete_location(
    location_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    return location_service.delete_location(_client(), current_user.id, location_id)


# ============================================================
# ZONES OF A LOCATION
# ============================================================
@router.get("/{location_id}/zones", response_model=List[ZoneRead])
def list_location_zones(
    location_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    return zone_service.list_zones(_client(), location_id)


@router.get("/{location_id}/zones/next-number")
def suggest_zone_number(
    location_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    return {"zone_number": zone_service.next_zone_number(_client(), location_id)}


@router.post("/{location_id}/zones", response_model=ZoneRead, status_code=201)
def create_location_zone(
    location_id: str,
    payload: ZoneCreate,
    current_user: CurrentUser = Depends(get_current_user),
):
    return zone_service.create_zone(
        _client(), current_user.id, location_id, payload.model_dump(exclude_none=True)
    )


# ============================================================
# AVAILABILITY
# ============================================================
@router.get("/{location_id}/availability", response_model=ZoneAvailability)
def get_location_availability(
    location_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    return location_availability(_client(), location_id)


@router.websocket("/{location_id}/availability/stream")
async def stream_location_availability(
    websocket: WebSocket,
    location_id: str,
    token: str = Query(...),
):
    """
    Pushes a fresh ZoneAvailability snapshot whenever a zone of the
    location changes. Browsers cannot set headers on WebSockets, so the
    access token travels as ?token=.
    """
    try:
        user = await run_in_threadpool(authenticate_token, token)
    except HTTPException:
        await websocket.close(code=4401)
        return
    if not can(user.role, Capability.view_map):
        await websocket.close(code=4403)
        return

    client = _client()
    loop = asyncio.get_running_loop()
    changed = asyncio.Event()

    watcher = AvailabilityWatcher(
        location_id,
        fetch_zones=lambda: zone_service.list_zones(client, location_id),
    )

    await websocket.accept()
    subscription = await subscribe_zone_changes(
        lambda payload: loop.call_soon_threadsafe(changed.set),
        location_id=location_id,
    )

    disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        snapshot = await run_in_threadpool(watcher.refresh)
        await websocket.send_json(snapshot.model_dump())

        while True:
            change = asyncio.create_task(changed.wait())
            done, _ = await asyncio.wait(
                {change, disconnected}, return_when=asyncio.FIRST_COMPLETED
            )
            if disconnected in done:
                change.cancel()
                break

            changed.clear()
            snapshot = await run_in_threadpool(watcher.handle_change)
            await websocket.send_json(snapshot.model_dump())
    except WebSocketDisconnect:
        logger.debug(f"Availability stream for {location_id} dropped mid-send")
    finally:
        disconnected.cancel()
        await subscription.close()
        logger.debug(f"Availability stream for {location_id} closed")


async def _wait_for_disconnect(websocket: WebSocket):
    """Drain client frames; returns once the client goes away."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return
