from typing import Optional

from fastapi import Depends, HTTPException

from core.errors import Unauthorized
from core.logging_config import logger
from core.permissions import ROLE_CAPABILITIES
from core.profile_helpers import get_role
from dependencies.auth import get_current_user, CurrentUser
from models.enums import Capability


# -----------------------------------------------------
# Policy evaluation (pure)
# -----------------------------------------------------
def can(role: Optional[str], capability) -> bool:
    """
    Does `role` grant `capability`?
    Unknown roles and unknown capabilities are denied.
    """
    if role is None:
        return False
    return str(capability) in ROLE_CAPABILITIES.get(str(role), frozenset())


def can_manage_location(role: Optional[str], actor_id: str, location: dict) -> bool:
    """Admins manage every location, owners only the ones they own."""
    if can(role, Capability.manage_all_locations):
        return True
    return (
        can(role, Capability.manage_own_locations)
        and location.get("owner_user_id") == actor_id
    )


def capabilities_for_role(role: Optional[str]) -> list:
    return sorted(ROLE_CAPABILITIES.get(str(role), frozenset()))


# Where the client lands after login
ROLE_HOME = {
    "super_admin": "/super-admin",
    "location_owner": "/owner",
}


def home_for_role(role: Optional[str]) -> str:
    return ROLE_HOME.get(str(role), "/dashboard")


# -----------------------------------------------------
# Data-access boundary check
# -----------------------------------------------------
def require_capability(client, actor_id: str, capability) -> str:
    """
    Re-read the actor's role from the store and check it.
    Returns the role; raises Unauthorized on denial.

    Services call this before every mutation, independently of
    whatever the route dependency already decided.
    """
    role = get_role(client, actor_id)
    if not can(role, capability):
        logger.warning(f"Denied {capability} to user {actor_id} (role={role})")
        raise Unauthorized(f"'{capability}' is not allowed for role '{role}'")
    return role


# -----------------------------------------------------
# FastAPI dependency wrapper
# -----------------------------------------------------
def requires_capability(capability: Capability):
    """
    Usage:
        @router.post("/", dependencies=[Depends(requires_capability(Capability.manage_owners))])
    """

    def dependency(current_user: CurrentUser = Depends(get_current_user)):
        if not can(current_user.role, capability):
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions: '{capability}' required"
            )
        return current_user

    return dependency
