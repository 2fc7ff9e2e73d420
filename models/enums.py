from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# USER ROLE
# -----------------------------------------------------
class UserRole(BaseStrEnum):
    """Stored in profiles.user_role; the only authorization signal."""

    user = "user"
    location_owner = "location_owner"
    super_admin = "super_admin"


# -----------------------------------------------------
# OWNER APPLICATION STATUS
# -----------------------------------------------------
class ApplicationStatus(BaseStrEnum):
    """pending → approved | rejected. Both outcomes are terminal."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# -----------------------------------------------------
# CAPABILITY
# -----------------------------------------------------
class Capability(BaseStrEnum):
    """What a role may do. Evaluated by core.permission_helpers.can()."""

    view_map = "view_map"
    submit_application = "submit_application"
    manage_own_locations = "manage_own_locations"
    manage_all_locations = "manage_all_locations"
    review_applications = "review_applications"
    manage_owners = "manage_owners"


# -----------------------------------------------------
# ZONE STATUS
# -----------------------------------------------------
class ZoneStatus(BaseStrEnum):
    available = "available"
    full = "full"
    maintenance = "maintenance"
