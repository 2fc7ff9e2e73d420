# ============================================
# CENTRALIZED ROLE → CAPABILITIES MAP
# ============================================
from models.enums import Capability, UserRole


ROLE_CAPABILITIES = {

    # =====================================================
    # SUPER ADMIN: every location, every application
    # =====================================================
    UserRole.super_admin.value: frozenset({
        Capability.view_map.value,
        Capability.manage_own_locations.value,
        Capability.manage_all_locations.value,
        Capability.review_applications.value,
        Capability.manage_owners.value,
    }),

    # =====================================================
    # LOCATION OWNER: only the locations they own
    # =====================================================
    UserRole.location_owner.value: frozenset({
        Capability.view_map.value,
        Capability.manage_own_locations.value,
    }),

    # =====================================================
    # USER: browse the map, apply to become an owner
    # =====================================================
    UserRole.user.value: frozenset({
        Capability.view_map.value,
        Capability.submit_application.value,
    }),
}
