# tests/test_ownership_cascade.py

"""
Tests for owner removal (locations + zones + role revert).
"""

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from core.errors import NotFound, PartialFailure, Unauthorized, ValidationError
from services.ownership_cascade import list_owners, remove_owner
from tests.conftest import auth_headers


def _seed_owner_with_zones(supabase, owner):
    """Two locations holding five zones in total."""
    north = supabase.add_location(owner["id"], name="North Lot")
    south = supabase.add_location(owner["id"], name="South Lot", lat=28.5)
    for n in range(1, 4):
        supabase.add_zone(north["id"], zone_number=n)
    for n in range(1, 3):
        supabase.add_zone(south["id"], zone_number=n)
    return north, south


def _remaining_for(supabase, owner_id):
    locations = [l for l in supabase.store.rows("parking_locations") if l["owner_user_id"] == owner_id]
    location_ids = {l["id"] for l in locations}
    zones = [z for z in supabase.store.rows("parking_zones") if z["location_id"] in location_ids]
    return locations, zones


@pytest.mark.parametrize("mode", ["rpc", "client"])
def test_remove_owner_deletes_everything_and_reverts_role(supabase, admin, owner, mode):
    _seed_owner_with_zones(supabase, owner)

    result = remove_owner(
        supabase, admin["id"], owner["id"], mode=mode, rpc_client=supabase.as_user(admin["id"])
    )

    assert result == {"locations_removed": 2, "zones_removed": 5}
    assert _remaining_for(supabase, owner["id"]) == ([], [])
    assert supabase.store.rows("parking_zones") == []
    assert supabase.store.profile(owner["id"])["user_role"] == "user"


@pytest.mark.parametrize("mode", ["rpc", "client"])
def test_remove_owner_is_idempotent(supabase, admin, owner, mode):
    _seed_owner_with_zones(supabase, owner)
    rpc_client = supabase.as_user(admin["id"])

    remove_owner(supabase, admin["id"], owner["id"], mode=mode, rpc_client=rpc_client)
    again = remove_owner(supabase, admin["id"], owner["id"], mode=mode, rpc_client=rpc_client)

    assert again == {"locations_removed": 0, "zones_removed": 0}
    assert supabase.store.profile(owner["id"])["user_role"] == "user"


def test_other_owners_are_untouched(supabase, admin, owner):
    _seed_owner_with_zones(supabase, owner)
    other = supabase.add_profile("location_owner")
    kept = supabase.add_location(other["id"], name="Kept Lot", lat=19.07)
    supabase.add_zone(kept["id"])

    remove_owner(supabase, admin["id"], owner["id"], mode="client")

    assert [l["id"] for l in supabase.store.rows("parking_locations")] == [kept["id"]]
    assert len(supabase.store.rows("parking_zones")) == 1
    assert supabase.store.profile(other["id"])["user_role"] == "location_owner"


def test_only_super_admin_can_remove(supabase, owner):
    _seed_owner_with_zones(supabase, owner)
    other_owner = supabase.add_profile("location_owner")

    with pytest.raises(Unauthorized):
        remove_owner(supabase, other_owner["id"], owner["id"], mode="client")

    assert len(supabase.store.rows("parking_locations")) == 2


def test_super_admin_target_is_refused(supabase, admin):
    second_admin = supabase.add_profile("super_admin")

    with pytest.raises(ValidationError):
        remove_owner(supabase, admin["id"], second_admin["id"])


def test_unknown_owner_is_not_found(supabase, admin):
    with pytest.raises(NotFound):
        remove_owner(supabase, admin["id"], "missing-profile", mode="client")


def test_role_revert_failure_is_partial_and_resumable(supabase, admin, owner):
    _seed_owner_with_zones(supabase, owner)
    supabase.store.fail_on("profiles", "update")

    with pytest.raises(PartialFailure) as exc:
        remove_owner(supabase, admin["id"], owner["id"], mode="client")

    assert exc.value.failed_step == "revert_role"
    assert exc.value.completed["locations_removed"] == 2
    assert exc.value.completed["zones_removed"] == 5
    assert exc.value.completed["role_reverted"] is False
    assert supabase.store.profile(owner["id"])["user_role"] == "location_owner"

    # Re-invoking finishes the job
    result = remove_owner(supabase, admin["id"], owner["id"], mode="client")
    assert result == {"locations_removed": 0, "zones_removed": 0}
    assert supabase.store.profile(owner["id"])["user_role"] == "user"


def test_failure_before_any_change_is_not_partial(supabase, admin, owner):
    _seed_owner_with_zones(supabase, owner)
    supabase.store.fail_on("parking_zones", "delete")

    with pytest.raises(APIError):
        remove_owner(supabase, admin["id"], owner["id"], mode="client")

    assert len(supabase.store.rows("parking_zones")) == 5


def test_list_owners_counts_locations(supabase, admin, owner):
    _seed_owner_with_zones(supabase, owner)

    owners = list_owners(supabase, admin["id"])

    assert len(owners) == 1
    assert owners[0]["location_count"] == 2
    assert {l["name"] for l in owners[0]["locations"]} == {"North Lot", "South Lot"}


# -----------------------------------------------------
# HTTP
# -----------------------------------------------------
def test_remove_owner_over_http(client: TestClient, supabase, admin, owner):
    _seed_owner_with_zones(supabase, owner)

    response = client.delete(f"/owners/{owner['id']}", headers=auth_headers(admin))

    assert response.status_code == 200
    body = response.json()
    assert body["locations_removed"] == 2
    assert body["zones_removed"] == 5
    assert body["role"] == "user"
    assert supabase.store.profile(owner["id"])["user_role"] == "user"


def test_owner_cannot_call_remove_over_http(client: TestClient, supabase, owner):
    _seed_owner_with_zones(supabase, owner)

    response = client.delete(f"/owners/{owner['id']}", headers=auth_headers(owner))

    assert response.status_code == 403
    assert len(supabase.store.rows("parking_locations")) == 2


def test_partial_failure_body_over_http(client: TestClient, supabase, admin, owner, monkeypatch):
    monkeypatch.setattr("core.config.settings.OWNER_CASCADE_MODE", "client")
    _seed_owner_with_zones(supabase, owner)
    supabase.store.fail_on("profiles", "update")

    response = client.delete(f"/owners/{owner['id']}", headers=auth_headers(admin))

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "partial_failure"
    assert body["failed_step"] == "revert_role"
    assert body["completed"]["locations_removed"] == 2


def test_store_failure_over_http_is_reported(client: TestClient, supabase, admin, owner, monkeypatch):
    monkeypatch.setattr("core.config.settings.OWNER_CASCADE_MODE", "client")
    _seed_owner_with_zones(supabase, owner)
    supabase.store.fail_on("parking_zones", "delete")

    response = client.delete(f"/owners/{owner['id']}", headers=auth_headers(admin))

    assert response.status_code == 500
    assert response.json()["detail"] == f"DELETE /owners/{owner['id']} failed"
    assert len(supabase.store.rows("parking_zones")) == 5
