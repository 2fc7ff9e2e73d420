# -------------------------
# Enums
# -------------------------
from .enums import (
    ApplicationStatus,
    Capability,
    UserRole,
    ZoneStatus,
)

# -------------------------
# Owner Application Models
# -------------------------
from .owner_application import (
    ApplicantInfo,
    DecisionResult,
    OwnerApplicationCreate,
    OwnerApplicationDecision,
    OwnerApplicationRead,
)

# -------------------------
# Location Models
# -------------------------
from .location import (
    LocationCreate,
    LocationRead,
    LocationUpdate,
    OwnedLocation,
    OwnerRemovalResult,
    OwnerSummary,
)

# -------------------------
# Zone Models
# -------------------------
from .zone import (
    ZoneAvailability,
    ZoneAvailabilityUpdate,
    ZoneCreate,
    ZoneRead,
    ZoneUpdate,
)

# -------------------------
# Profile Models
# -------------------------
from .profile import MeRead, ProfileUpdate

__all__ = [
    # enums
    "ApplicationStatus",
    "Capability",
    "UserRole",
    "ZoneStatus",

    # owner applications
    "ApplicantInfo",
    "DecisionResult",
    "OwnerApplicationCreate",
    "OwnerApplicationDecision",
    "OwnerApplicationRead",

    # locations
    "LocationCreate",
    "LocationRead",
    "LocationUpdate",
    "OwnedLocation",
    "OwnerRemovalResult",
    "OwnerSummary",

    # zones
    "ZoneAvailability",
    "ZoneAvailabilityUpdate",
    "ZoneCreate",
    "ZoneRead",
    "ZoneUpdate",

    # profiles
    "MeRead",
    "ProfileUpdate",
]
