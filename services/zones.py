# services/zones.py

"""
Parking zone writes.

Every insert/update is validated here before it reaches the store:
coordinates present and finite, and 0 <= available_slots <= total_slots.
The same rules exist as NOT NULL / CHECK constraints in the migration;
a constraint violation that still slips through is reported as
ValidationError rather than a generic store failure.
"""

import math
from typing import List, Optional

from core.errors import (
    NotFound,
    StaleWrite,
    Unauthorized,
    ValidationError,
    raise_constraint_violation,
)
from core.logging_config import logger
from core.permission_helpers import can_manage_location, require_capability
from core.profile_helpers import utc_now_iso
from models.enums import Capability, ZoneStatus


ZONE_FIELDS = (
    "name",
    "zone_number",
    "lat",
    "lng",
    "total_slots",
    "available_slots",
    "cost_per_hour",
    "status",
)


# -----------------------------------------------------
# Validation
# -----------------------------------------------------
def _is_number(value) -> bool:
    if isinstance(value, bool) or value is None:
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def validate_zone(zone: dict) -> dict:
    """
    Check a complete zone row (new, or stored row merged with changes).
    Collects every problem and raises one ValidationError.
    """
    errors = []

    if not str(zone.get("name") or "").strip():
        errors.append("name is required")

    lat, lng = zone.get("lat"), zone.get("lng")
    if not _is_number(lat) or not _is_number(lng):
        errors.append("lat and lng are required")
    else:
        if not -90 <= float(lat) <= 90:
            errors.append("lat must be between -90 and 90")
        if not -180 <= float(lng) <= 180:
            errors.append("lng must be between -180 and 180")
        if float(lat) == 0 and float(lng) == 0:
            errors.append("zone coordinates cannot be 0,0")

    total = zone.get("total_slots")
    available = zone.get("available_slots")
    if not isinstance(total, int) or isinstance(total, bool) or total < 1:
        errors.append("total_slots must be an integer of at least 1")
    elif not isinstance(available, int) or isinstance(available, bool):
        errors.append("available_slots must be an integer")
    elif not 0 <= available <= total:
        errors.append(f"available_slots must be between 0 and total_slots ({total})")

    zone_number = zone.get("zone_number")
    if zone_number is not None and (not isinstance(zone_number, int) or zone_number < 1):
        errors.append("zone_number must be at least 1")

    cost = zone.get("cost_per_hour")
    if cost is not None and (not _is_number(cost) or float(cost) < 0):
        errors.append("cost_per_hour cannot be negative")

    if errors:
        raise ValidationError("; ".join(errors))
    return zone


def derive_status(available_slots: int, current_status: Optional[str] = None) -> dict:
    """is_full/status follow available_slots; maintenance is kept as set."""
    is_full = available_slots == 0
    if current_status == ZoneStatus.maintenance.value:
        status = ZoneStatus.maintenance.value
    else:
        status = ZoneStatus.full.value if is_full else ZoneStatus.available.value
    return {"is_full": is_full, "status": status}


def _check_requested_status(requested: Optional[str], available_slots: int):
    """
    Only maintenance is a free choice. full/available may be sent
    (e.g. to leave maintenance) but must agree with available_slots.
    """
    if requested is None:
        return
    requested = str(requested)
    if requested == ZoneStatus.maintenance.value:
        return
    expected = derive_status(available_slots)["status"]
    if requested != expected:
        raise ValidationError(
            f"status '{requested}' contradicts available_slots={available_slots}; "
            f"expected '{expected}'"
        )


# -----------------------------------------------------
# Lookups
# -----------------------------------------------------
def get_zone(client, zone_id: str) -> dict:
    result = (
        client.table("parking_zones")
        .select("*")
        .eq("id", zone_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFound(f"Zone {zone_id} not found")
    return result.data[0]


def list_zones(client, location_id: str) -> List[dict]:
    result = (
        client.table("parking_zones")
        .select("*")
        .eq("location_id", location_id)
        .order("zone_number")
        .execute()
    )
    return result.data or []


def next_zone_number(client, location_id: str) -> int:
    result = (
        client.table("parking_zones")
        .select("zone_number")
        .eq("location_id", location_id)
        .order("zone_number", desc=True)
        .limit(1)
        .execute()
    )
    rows = result.data or []
    return rows[0]["zone_number"] + 1 if rows else 1


def load_location_for_write(client, actor_id: str, location_id: str) -> dict:
    """Location row, after checking the actor may modify it."""
    role = require_capability(client, actor_id, Capability.manage_own_locations)

    result = (
        client.table("parking_locations")
        .select("*")
        .eq("id", location_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFound(f"Location {location_id} not found")

    location = result.data[0]
    if not can_manage_location(role, actor_id, location):
        logger.warning(f"User {actor_id} tried to modify location {location_id} it does not own")
        raise Unauthorized("You can only manage your own locations")
    return location


# -----------------------------------------------------
# Writes
# -----------------------------------------------------
def create_zone(client, actor_id: str, location_id: str, data: dict) -> dict:
    load_location_for_write(client, actor_id, location_id)

    zone = {field: data.get(field) for field in ZONE_FIELDS if data.get(field) is not None}
    zone.setdefault("available_slots", zone.get("total_slots"))
    zone.setdefault("cost_per_hour", 15.0)
    if "zone_number" not in zone:
        zone["zone_number"] = next_zone_number(client, location_id)
    validate_zone(zone)
    _check_requested_status(zone.get("status"), zone["available_slots"])

    zone.update(derive_status(zone["available_slots"], zone.get("status")))
    zone["location_id"] = location_id

    try:
        result = client.table("parking_zones").insert(zone).execute()
    except Exception as e:
        raise_constraint_violation(e, "Create zone")

    created = result.data[0]
    logger.info(f"User {actor_id} created zone {created['id']} in location {location_id}")
    return created


def _conditional_zone_update(client, zone: dict, changes: dict) -> dict:
    """
    Update guarded by the slot values that were validated, so a concurrent
    change to either cannot combine into an out-of-range row.
    """
    changes["updated_at"] = utc_now_iso()
    try:
        result = (
            client.table("parking_zones")
            .update(changes)
            .eq("id", zone["id"])
            .eq("total_slots", zone["total_slots"])
            .eq("available_slots", zone["available_slots"])
            .execute()
        )
    except Exception as e:
        raise_constraint_violation(e, "Update zone")

    if not result.data:
        raise StaleWrite(f"Zone {zone['id']} changed concurrently; reload and retry")
    return result.data[0]


def update_zone(client, actor_id: str, zone_id: str, changes: dict) -> dict:
    zone = get_zone(client, zone_id)
    load_location_for_write(client, actor_id, zone["location_id"])

    changes = {k: v for k, v in changes.items() if k in ZONE_FIELDS and v is not None}
    if not changes:
        return zone

    merged = {**zone, **changes}
    validate_zone(merged)
    _check_requested_status(changes.get("status"), merged["available_slots"])
    changes.update(derive_status(merged["available_slots"], merged.get("status")))

    updated = _conditional_zone_update(client, zone, changes)
    logger.info(f"User {actor_id} updated zone {zone_id}")
    return updated


def set_available_slots(client, actor_id: str, zone_id: str, available_slots: int) -> dict:
    """Occupancy update from the owner dashboard or a gate sensor feed."""
    zone = get_zone(client, zone_id)
    load_location_for_write(client, actor_id, zone["location_id"])

    validate_zone({**zone, "available_slots": available_slots})

    changes = {"available_slots": available_slots}
    changes.update(derive_status(available_slots, zone.get("status")))

    updated = _conditional_zone_update(client, zone, changes)
    logger.info(
        f"Zone {zone_id} availability {zone['available_slots']} → {available_slots} "
        f"(of {zone['total_slots']}) by {actor_id}"
    )
    return updated


def delete_zone(client, actor_id: str, zone_id: str) -> dict:
    zone = get_zone(client, zone_id)
    load_location_for_write(client, actor_id, zone["location_id"])

    client.table("parking_zones").delete().eq("id", zone_id).execute()
    logger.info(f"User {actor_id} deleted zone {zone_id}")
    return {"status": "deleted", "zone_id": zone_id}
