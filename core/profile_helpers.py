# core/profile_helpers.py

"""
Profile store access.

profiles.user_role is the only profile field the ownership core writes.
Every helper takes the Supabase client explicitly so services can run
against the service-role client or a test double.
"""

from datetime import datetime, timezone
from typing import List, Optional

from core.errors import NotFound
from core.logging_config import logger
from models.enums import UserRole


PROFILE_COLUMNS = "id, email, full_name, phone, avatar_url, user_role, created_at, updated_at"
EDITABLE_PROFILE_FIELDS = ("full_name", "phone", "email")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_profile(client, user_id: str) -> Optional[dict]:
    result = (
        client.table("profiles")
        .select(PROFILE_COLUMNS)
        .eq("id", user_id)
        .limit(1)
        .execute()
    )
    rows = result.data or []
    return rows[0] if rows else None


def get_role(client, user_id: str) -> Optional[str]:
    """Current role straight from the store. None when the profile is missing."""
    profile = get_profile(client, user_id)
    if not profile:
        return None
    return profile.get("user_role")


def set_role(client, user_id: str, role: UserRole) -> dict:
    """Write profiles.user_role. Raises NotFound when no profile matched."""
    result = (
        client.table("profiles")
        .update({"user_role": str(role), "updated_at": utc_now_iso()})
        .eq("id", user_id)
        .execute()
    )
    if not result.data:
        raise NotFound(f"Profile {user_id} not found")

    logger.info(f"Profile {user_id} role set to {role}")
    return result.data[0]


def update_contact_fields(client, user_id: str, changes: dict) -> dict:
    """
    Self-service profile edit. Only display fields are written;
    user_role is never touched here.
    """
    changes = {k: v for k, v in changes.items() if k in EDITABLE_PROFILE_FIELDS}
    if not changes:
        profile = get_profile(client, user_id)
        if not profile:
            raise NotFound(f"Profile {user_id} not found")
        return profile

    changes["updated_at"] = utc_now_iso()
    result = (
        client.table("profiles")
        .update(changes)
        .eq("id", user_id)
        .execute()
    )
    if not result.data:
        raise NotFound(f"Profile {user_id} not found")

    logger.info(f"Profile {user_id} updated: {sorted(k for k in changes if k != 'updated_at')}")
    return result.data[0]


def list_profiles_by_role(client, role: UserRole) -> List[dict]:
    result = (
        client.table("profiles")
        .select(PROFILE_COLUMNS)
        .eq("user_role", str(role))
        .order("created_at", desc=True)
        .execute()
    )
    return result.data or []


def get_profiles_by_ids(client, user_ids: List[str]) -> dict:
    """id → {full_name, email}; unknown ids are simply absent."""
    if not user_ids:
        return {}

    result = (
        client.table("profiles")
        .select("id, full_name, email")
        .in_("id", list(set(user_ids)))
        .execute()
    )
    return {
        row["id"]: {"full_name": row.get("full_name"), "email": row.get("email")}
        for row in (result.data or [])
    }
