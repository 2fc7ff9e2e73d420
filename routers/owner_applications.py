# routers/owner_applications.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dependencies.auth import get_current_user, CurrentUser
from core.permission_helpers import requires_capability
from core.supabase_client import get_supabase_client, get_user_client
from models.enums import ApplicationStatus, Capability
from models.owner_application import (
    DecisionResult,
    OwnerApplicationCreate,
    OwnerApplicationDecision,
    OwnerApplicationRead,
)
from services import owner_applications as workflow

router = APIRouter(
    prefix="/owner-applications",
    tags=["Owner Applications"],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


# -----------------------------------------------------
# POST /owner-applications
# -----------------------------------------------------
@router.post(
    "",
    response_model=OwnerApplicationRead,
    status_code=201,
    summary="Apply to become a location owner",
    dependencies=[Depends(requires_capability(Capability.submit_application))],
)
def submit_owner_application(
    payload: OwnerApplicationCreate,
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Creates a **pending** application for the caller.

    - Only users with role `user` can apply.
    - A second application while one is pending returns **409**.
    """
    return workflow.submit_application(_client(), current_user.id, payload.model_dump())


# -----------------------------------------------------
# GET /owner-applications/me
# -----------------------------------------------------
@router.get(
    "/me",
    response_model=Optional[OwnerApplicationRead],
    summary="Caller's latest application",
)
def my_owner_application(current_user: CurrentUser = Depends(get_current_user)):
    return workflow.latest_for_user(_client(), current_user.id)


# -----------------------------------------------------
# GET /owner-applications
# -----------------------------------------------------
@router.get(
    "",
    response_model=List[OwnerApplicationRead],
    summary="Reviewer queue",
    dependencies=[Depends(requires_capability(Capability.review_applications))],
)
def list_owner_applications(
    status: Optional[str] = Query(
        "pending",
        description="pending, approved, rejected or all",
    ),
    current_user: CurrentUser = Depends(get_current_user),
):
    if status == "all":
        status_filter = None
    elif status in ApplicationStatus.list():
        status_filter = ApplicationStatus(status)
    else:
        raise HTTPException(400, "Invalid status. Must be 'pending', 'approved', 'rejected' or 'all'")

    return workflow.list_applications(_client(), current_user.id, status=status_filter)


# -----------------------------------------------------
# GET /owner-applications/{application_id}
# -----------------------------------------------------
@router.get("/{application_id}", response_model=OwnerApplicationRead)
def get_owner_application(
    application_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    return workflow.get_application(_client(), current_user.id, application_id)


# -----------------------------------------------------
# POST /owner-applications/{application_id}/decision
# -----------------------------------------------------
@router.post(
    "/{application_id}/decision",
    response_model=DecisionResult,
    summary="Approve or reject a pending application",
    dependencies=[Depends(requires_capability(Capability.review_applications))],
)
def decide_owner_application(
    application_id: str,
    payload: OwnerApplicationDecision,
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Runs `process_owner_application` under the reviewer's own token.

    - **409** when the application was already decided (or does not exist).
      Of two simultaneous decisions exactly one succeeds.
    - On approval the applicant's role becomes `location_owner` in the
      same transaction.
    """
    rpc_client = get_user_client(current_user.access_token)
    if not rpc_client:
        raise HTTPException(500, "Supabase client not configured")

    workflow.decide_application(
        _client(),
        current_user.id,
        application_id,
        payload.approve,
        admin_notes=payload.admin_notes,
        rpc_client=rpc_client,
    )
    status = ApplicationStatus.approved if payload.approve else ApplicationStatus.rejected
    return DecisionResult(application_id=application_id, status=status)
