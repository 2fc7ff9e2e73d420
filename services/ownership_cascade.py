# services/ownership_cascade.py

"""
Removing a location owner.

End state for every mode: no parking_locations and no parking_zones left
for the owner, and profiles.user_role = 'user'. The profile itself is kept.

"rpc" mode runs everything inside `remove_location_owner`, one transaction.
"client" mode issues the steps one by one; each step is idempotent so a
re-invocation after a crash finishes the job, and a failure after data has
already changed is reported as PartialFailure.
"""

from typing import Optional

from core.config import settings
from core.errors import (
    NotFound,
    PartialFailure,
    Unauthorized,
    ValidationError,
    extract_supabase_code,
    extract_supabase_error,
    MSG_NOT_AUTHORIZED,
    MSG_PROFILE_NOT_FOUND,
    PG_INSUFFICIENT_PRIVILEGE,
)
from core.logging_config import logger
from core.permission_helpers import require_capability
from core.profile_helpers import get_profile, list_profiles_by_role, set_role
from models.enums import Capability, UserRole


# -----------------------------------------------------
# Remove owner
# -----------------------------------------------------
def remove_owner(
    client,
    actor_id: str,
    owner_id: str,
    mode: Optional[str] = None,
    rpc_client=None,
) -> dict:
    """
    Delete every location (and zone) of `owner_id` and revert the role to user.

    Returns {"locations_removed": int, "zones_removed": int}.

    Raises:
        Unauthorized: actor is not a super_admin
        NotFound: owner has no profile
        ValidationError: target is a super_admin
        PartialFailure: client mode stopped after changing data
    """
    require_capability(client, actor_id, Capability.manage_owners)

    profile = get_profile(client, owner_id)
    if not profile:
        raise NotFound(f"Profile {owner_id} not found")
    if profile.get("user_role") == UserRole.super_admin.value:
        raise ValidationError("Cannot remove ownership from a super admin")

    mode = mode or settings.OWNER_CASCADE_MODE
    if mode == "rpc":
        counts = _remove_owner_transaction(rpc_client or client, owner_id)
    else:
        counts = _remove_owner_stepwise(client, owner_id)

    logger.info(
        f"Admin {actor_id} removed owner {owner_id}: "
        f"{counts['locations_removed']} location(s), {counts['zones_removed']} zone(s)"
    )
    return counts


def _remove_owner_transaction(rpc_client, owner_id: str) -> dict:
    try:
        result = (
            rpc_client.rpc("remove_location_owner", {"p_owner_id": owner_id})
            .execute()
        )
    except Exception as e:
        code = extract_supabase_code(e)
        message = extract_supabase_error(e)
        if code == PG_INSUFFICIENT_PRIVILEGE or MSG_NOT_AUTHORIZED in message:
            raise Unauthorized("Super admin privileges required") from e
        if MSG_PROFILE_NOT_FOUND in message:
            raise NotFound(f"Profile {owner_id} not found") from e
        raise

    data = result.data
    if isinstance(data, list):
        data = data[0] if data else {}
    data = data or {}

    return {
        "locations_removed": int(data.get("locations_removed", 0)),
        "zones_removed": int(data.get("zones_removed", 0)),
    }


def _remove_owner_stepwise(client, owner_id: str) -> dict:
    completed = {"locations_removed": 0, "zones_removed": 0, "role_reverted": False}
    changed = False
    step = "collect_locations"

    try:
        locations = (
            client.table("parking_locations")
            .select("id")
            .eq("owner_user_id", owner_id)
            .execute()
        ).data or []
        location_ids = [row["id"] for row in locations]

        # Zones first, explicitly, so the count is exact even where the
        # foreign key would cascade them away.
        step = "delete_zones"
        if location_ids:
            deleted_zones = (
                client.table("parking_zones")
                .delete()
                .in_("location_id", location_ids)
                .execute()
            ).data or []
            completed["zones_removed"] = len(deleted_zones)
            changed = changed or bool(deleted_zones)

        step = "delete_locations"
        deleted_locations = (
            client.table("parking_locations")
            .delete()
            .eq("owner_user_id", owner_id)
            .execute()
        ).data or []
        completed["locations_removed"] = len(deleted_locations)
        changed = changed or bool(deleted_locations)

        step = "revert_role"
        profile = get_profile(client, owner_id)
        if profile and profile.get("user_role") != UserRole.user.value:
            set_role(client, owner_id, UserRole.user)
        completed["role_reverted"] = True

    except Exception as e:
        if not changed:
            raise
        logger.error(
            f"Owner removal for {owner_id} stopped at '{step}' after partial progress "
            f"{completed}: {extract_supabase_error(e)}"
        )
        raise PartialFailure(
            f"Owner removal for {owner_id} failed at step '{step}'; "
            "re-run the removal to finish it",
            completed=completed,
            failed_step=step,
        ) from e

    return {
        "locations_removed": completed["locations_removed"],
        "zones_removed": completed["zones_removed"],
    }


# -----------------------------------------------------
# Owner listing
# -----------------------------------------------------
def list_owners(client, actor_id: str) -> list:
    """Every location_owner with the locations they hold."""
    require_capability(client, actor_id, Capability.manage_owners)

    owners = list_profiles_by_role(client, UserRole.location_owner)
    if not owners:
        return []

    locations = (
        client.table("parking_locations")
        .select("id, name, owner_user_id")
        .in_("owner_user_id", [o["id"] for o in owners])
        .execute()
    ).data or []

    by_owner = {}
    for location in locations:
        by_owner.setdefault(location["owner_user_id"], []).append(
            {"id": location["id"], "name": location["name"]}
        )

    for owner in owners:
        owned = by_owner.get(owner["id"], [])
        owner["locations"] = owned
        owner["location_count"] = len(owned)
    return owners
