# services/locations.py

from typing import List

from core.errors import (
    PG_UNIQUE_VIOLATION,
    NotFound,
    ValidationError,
    extract_supabase_code,
    raise_constraint_violation,
)
from core.logging_config import logger
from core.permission_helpers import can, require_capability
from core.profile_helpers import utc_now_iso
from models.enums import Capability
from services.zones import load_location_for_write


LOCATION_FIELDS = ("name", "address", "lat", "lng", "description")


def list_locations(client, actor_id: str, managed_only: bool = False) -> List[dict]:
    """
    managed_only=False → every location (map view, any authenticated role).
    managed_only=True  → admins get all, owners get their own.
    """
    query = client.table("parking_locations").select("*")

    if managed_only:
        role = require_capability(client, actor_id, Capability.manage_own_locations)
        if not can(role, Capability.manage_all_locations):
            query = query.eq("owner_user_id", actor_id)
    else:
        require_capability(client, actor_id, Capability.view_map)

    return query.order("name").execute().data or []


def get_location(client, location_id: str) -> dict:
    result = (
        client.table("parking_locations")
        .select("*")
        .eq("id", location_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFound(f"Location {location_id} not found")
    return result.data[0]


def _write_location(client, operation: str, query_builder):
    try:
        return query_builder.execute()
    except Exception as e:
        if extract_supabase_code(e) == PG_UNIQUE_VIOLATION:
            raise ValidationError(
                "A location with this name and coordinates already exists"
            ) from e
        raise_constraint_violation(e, operation)


def create_location(client, actor_id: str, data: dict) -> dict:
    require_capability(client, actor_id, Capability.manage_own_locations)

    row = {field: data.get(field) for field in LOCATION_FIELDS}
    missing = [f for f in ("name", "address", "lat", "lng") if row.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required location data: {', '.join(missing)}")
    row["owner_user_id"] = actor_id

    result = _write_location(
        client, "Create location", client.table("parking_locations").insert(row)
    )
    location = result.data[0]
    logger.info(f"User {actor_id} created location {location['id']} ({location['name']})")
    return location


def update_location(client, actor_id: str, location_id: str, changes: dict) -> dict:
    location = load_location_for_write(client, actor_id, location_id)

    changes = {k: v for k, v in changes.items() if k in LOCATION_FIELDS and v is not None}
    if not changes:
        return location
    changes["updated_at"] = utc_now_iso()

    result = _write_location(
        client,
        "Update location",
        client.table("parking_locations").update(changes).eq("id", location_id),
    )
    logger.info(f"User {actor_id} updated location {location_id}")
    return result.data[0] if result.data else {**location, **changes}


def delete_location(client, actor_id: str, location_id: str) -> dict:
    """Zones go with the location (ON DELETE CASCADE)."""
    load_location_for_write(client, actor_id, location_id)

    client.table("parking_locations").delete().eq("id", location_id).execute()
    logger.info(f"User {actor_id} deleted location {location_id} and its zones")
    return {"status": "deleted", "location_id": location_id}
