# tests/test_owner_applications.py

"""
Tests for the owner application workflow.
"""

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

import pytest
from fastapi.testclient import TestClient

from core.errors import AlreadyProcessed, DuplicateApplication, Unauthorized, ValidationError
from services.owner_applications import (
    decide_application,
    get_application,
    latest_for_user,
    list_applications,
    submit_application,
)
from tests.conftest import CONTACT_INFO, auth_headers


def _decide(supabase, admin, application_id, approve=True, notes=None):
    return decide_application(
        supabase,
        admin["id"],
        application_id,
        approve,
        admin_notes=notes,
        rpc_client=supabase.as_user(admin["id"]),
    )


# -----------------------------------------------------
# submit
# -----------------------------------------------------
def test_submit_creates_pending_application(supabase, user):
    application = submit_application(supabase, user["id"], CONTACT_INFO)

    assert application["status"] == "pending"
    assert application["user_id"] == user["id"]
    assert latest_for_user(supabase, user["id"])["id"] == application["id"]


def test_second_pending_application_is_rejected(supabase, user):
    submit_application(supabase, user["id"], CONTACT_INFO)

    with pytest.raises(DuplicateApplication):
        submit_application(supabase, user["id"], CONTACT_INFO)

    assert len(supabase.store.rows("owner_applications")) == 1


def test_concurrent_submits_leave_one_pending_row(supabase, user):
    barrier = Barrier(4)

    def attempt():
        barrier.wait()
        try:
            submit_application(supabase, user["id"], CONTACT_INFO)
            return "ok"
        except DuplicateApplication:
            return "duplicate"

    with ThreadPoolExecutor(max_workers=4) as pool:
        outcomes = list(pool.map(lambda _: attempt(), range(4)))

    assert outcomes.count("ok") == 1
    assert outcomes.count("duplicate") == 3


def test_owner_cannot_apply(supabase, owner):
    with pytest.raises(Unauthorized):
        submit_application(supabase, owner["id"], CONTACT_INFO)


def test_blank_contact_field_is_rejected(supabase, user):
    with pytest.raises(ValidationError) as exc:
        submit_application(supabase, user["id"], {**CONTACT_INFO, "justification": "   "})

    assert "justification" in exc.value.detail
    assert supabase.store.rows("owner_applications") == []


def test_user_can_reapply_after_rejection(supabase, admin, user):
    first = submit_application(supabase, user["id"], CONTACT_INFO)
    _decide(supabase, admin, first["id"], approve=False)

    second = submit_application(supabase, user["id"], CONTACT_INFO)

    assert second["status"] == "pending"
    assert second["id"] != first["id"]


# -----------------------------------------------------
# decide
# -----------------------------------------------------
def test_approval_escalates_role_in_same_step(supabase, admin, user):
    application = submit_application(supabase, user["id"], CONTACT_INFO)

    assert _decide(supabase, admin, application["id"], notes="Welcome") is True

    stored = supabase.store.rows("owner_applications")[0]
    assert stored["status"] == "approved"
    assert stored["reviewed_by"] == admin["id"]
    assert stored["reviewed_at"] is not None
    assert stored["admin_notes"] == "Welcome"
    assert supabase.store.profile(user["id"])["user_role"] == "location_owner"


def test_rejection_leaves_role_unchanged(supabase, admin, user):
    application = submit_application(supabase, user["id"], CONTACT_INFO)

    _decide(supabase, admin, application["id"], approve=False)

    assert supabase.store.rows("owner_applications")[0]["status"] == "rejected"
    assert supabase.store.profile(user["id"])["user_role"] == "user"


def test_decided_application_cannot_transition_again(supabase, admin, user):
    application = submit_application(supabase, user["id"], CONTACT_INFO)
    _decide(supabase, admin, application["id"], approve=False)

    with pytest.raises(AlreadyProcessed):
        _decide(supabase, admin, application["id"], approve=True)

    assert supabase.store.rows("owner_applications")[0]["status"] == "rejected"
    assert supabase.store.profile(user["id"])["user_role"] == "user"


def test_unknown_application_reports_already_processed(supabase, admin):
    with pytest.raises(AlreadyProcessed):
        _decide(supabase, admin, "no-such-application")


def test_concurrent_decisions_exactly_one_succeeds(supabase, admin, user):
    application = submit_application(supabase, user["id"], CONTACT_INFO)
    barrier = Barrier(2)

    def attempt(approve):
        barrier.wait()
        try:
            return _decide(supabase, admin, application["id"], approve=approve)
        except AlreadyProcessed:
            return "already_processed"

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = list(pool.map(attempt, [True, True]))

    assert sorted(outcomes, key=str) == sorted([True, "already_processed"], key=str)
    assert supabase.store.profile(user["id"])["user_role"] == "location_owner"


def test_non_admin_reviewer_is_refused(supabase, owner, user):
    application = submit_application(supabase, user["id"], CONTACT_INFO)

    with pytest.raises(Unauthorized):
        decide_application(supabase, owner["id"], application["id"], True)

    assert supabase.store.rows("owner_applications")[0]["status"] == "pending"


def test_procedure_checks_caller_identity_itself(supabase, admin, owner, user):
    """The API check passes, but the JWT sent to the procedure is not an admin's."""
    application = submit_application(supabase, user["id"], CONTACT_INFO)

    with pytest.raises(Unauthorized):
        decide_application(
            supabase, admin["id"], application["id"], True,
            rpc_client=supabase.as_user(owner["id"]),
        )

    assert supabase.store.profile(user["id"])["user_role"] == "user"


# -----------------------------------------------------
# reads
# -----------------------------------------------------
def test_reviewer_queue_includes_applicant(supabase, admin, user):
    submit_application(supabase, user["id"], CONTACT_INFO)

    queue = list_applications(supabase, admin["id"])

    assert len(queue) == 1
    assert queue[0]["applicant"]["full_name"] == "Regular User"


def test_other_users_cannot_read_an_application(supabase, user):
    application = submit_application(supabase, user["id"], CONTACT_INFO)
    stranger = supabase.add_profile("user")

    with pytest.raises(Unauthorized):
        get_application(supabase, stranger["id"], application["id"])


# -----------------------------------------------------
# HTTP
# -----------------------------------------------------
def test_submit_and_decide_over_http(client: TestClient, supabase, admin, user):
    response = client.post("/owner-applications", json=CONTACT_INFO, headers=auth_headers(user))
    assert response.status_code == 201
    application_id = response.json()["id"]

    response = client.post(
        f"/owner-applications/{application_id}/decision",
        json={"approve": True},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    # Second decision on the same application
    response = client.post(
        f"/owner-applications/{application_id}/decision",
        json={"approve": False},
        headers=auth_headers(admin),
    )
    assert response.status_code == 409
    assert response.json()["error"] == "already_processed"

    me = client.get("/me", headers=auth_headers(user)).json()
    assert me["role"] == "location_owner"
    assert me["home"] == "/owner"


def test_duplicate_submit_over_http_is_409(client: TestClient, user):
    client.post("/owner-applications", json=CONTACT_INFO, headers=auth_headers(user))
    response = client.post("/owner-applications", json=CONTACT_INFO, headers=auth_headers(user))

    assert response.status_code == 409
    assert response.json()["error"] == "duplicate_application"


def test_user_cannot_decide_over_http(client: TestClient, supabase, user):
    application = submit_application(supabase, user["id"], CONTACT_INFO)

    response = client.post(
        f"/owner-applications/{application['id']}/decision",
        json={"approve": True},
        headers=auth_headers(user),
    )

    assert response.status_code == 403
    assert supabase.store.profile(user["id"])["user_role"] == "user"


def test_my_application_is_null_before_applying(client: TestClient, user):
    response = client.get("/owner-applications/me", headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json() is None
