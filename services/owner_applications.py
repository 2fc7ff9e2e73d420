# services/owner_applications.py

"""
Owner application workflow.

    pending ──approve──▶ approved   (profile role → location_owner)
       └────reject────▶ rejected

Both outcomes are terminal. The decision is made by the store procedure
`process_owner_application`, which updates the application with a
`WHERE status = 'pending'` guard and escalates the role in the same
transaction. Of two concurrent decisions only one matches the guard;
the other gets `application_not_pending` and surfaces as AlreadyProcessed.

Submission relies on the partial unique index
`owner_applications_one_pending_per_user` instead of a read-then-insert
check, so two racing submits cannot both create a pending row.
"""

from typing import List, Optional

from core.errors import (
    AlreadyProcessed,
    DuplicateApplication,
    NotFound,
    Unauthorized,
    ValidationError,
    extract_supabase_code,
    extract_supabase_error,
    MSG_APPLICATION_NOT_PENDING,
    MSG_NOT_AUTHORIZED,
    PG_INSUFFICIENT_PRIVILEGE,
    PG_NO_DATA_FOUND,
    PG_UNIQUE_VIOLATION,
)
from core.logging_config import logger
from core.permission_helpers import require_capability
from core.profile_helpers import get_profiles_by_ids
from models.enums import ApplicationStatus, Capability


TABLE = "owner_applications"
CONTACT_FIELDS = ("contact_person", "phone", "email", "justification")


# -----------------------------------------------------
# Submit
# -----------------------------------------------------
def submit_application(client, user_id: str, contact_info: dict) -> dict:
    """
    Create a pending application for `user_id`.

    Raises:
        Unauthorized: the user is already an owner or an admin
        ValidationError: a contact field is missing or blank
        DuplicateApplication: the user already has a pending application
    """
    require_capability(client, user_id, Capability.submit_application)

    missing = [
        field for field in CONTACT_FIELDS
        if not str(contact_info.get(field) or "").strip()
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    row = {field: str(contact_info[field]).strip() for field in CONTACT_FIELDS}
    row["user_id"] = user_id
    row["status"] = ApplicationStatus.pending.value

    try:
        result = client.table(TABLE).insert(row).execute()
    except Exception as e:
        if extract_supabase_code(e) == PG_UNIQUE_VIOLATION:
            logger.info(f"User {user_id} already has a pending owner application")
            raise DuplicateApplication(
                "You already have a pending owner application"
            ) from e
        raise

    application = result.data[0]
    logger.info(f"User {user_id} submitted owner application {application['id']}")
    return application


# -----------------------------------------------------
# Decide
# -----------------------------------------------------
def decide_application(
    client,
    reviewer_id: str,
    application_id: str,
    approve: bool,
    admin_notes: Optional[str] = None,
    rpc_client=None,
) -> bool:
    """
    Approve or reject a pending application in one store transaction.

    `client` is used for the reviewer role check; `rpc_client` must carry
    the reviewer's own JWT so the procedure can verify auth.uid() too.

    Raises:
        Unauthorized: reviewer is not a super_admin (checked here AND in the procedure)
        AlreadyProcessed: application is unknown or no longer pending
    """
    require_capability(client, reviewer_id, Capability.review_applications)

    rpc_client = rpc_client or client
    params = {
        "p_application_id": application_id,
        "p_approve": approve,
        "p_admin_notes": admin_notes or None,
    }

    try:
        result = rpc_client.rpc("process_owner_application", params).execute()
    except Exception as e:
        code = extract_supabase_code(e)
        message = extract_supabase_error(e)

        if code == PG_INSUFFICIENT_PRIVILEGE or MSG_NOT_AUTHORIZED in message:
            logger.warning(f"Procedure refused reviewer {reviewer_id} for application {application_id}")
            raise Unauthorized("Super admin privileges required") from e
        if code == PG_NO_DATA_FOUND or MSG_APPLICATION_NOT_PENDING in message:
            logger.info(f"Application {application_id} was already processed")
            raise AlreadyProcessed(
                f"Application {application_id} is not pending"
            ) from e
        raise

    if result.data is not True:
        raise AlreadyProcessed(f"Application {application_id} is not pending")

    decision = ApplicationStatus.approved if approve else ApplicationStatus.rejected
    logger.info(f"Reviewer {reviewer_id} {decision} owner application {application_id}")
    return True


# -----------------------------------------------------
# Reads
# -----------------------------------------------------
def latest_for_user(client, user_id: str) -> Optional[dict]:
    """The user's most recent application, whatever its status."""
    result = (
        client.table(TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(1)
        .execute()
    )
    rows = result.data or []
    return rows[0] if rows else None


def get_application(client, actor_id: str, application_id: str) -> dict:
    """Visible to the applicant and to reviewers only."""
    result = (
        client.table(TABLE)
        .select("*")
        .eq("id", application_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFound(f"Application {application_id} not found")

    application = result.data[0]
    if application["user_id"] != actor_id:
        require_capability(client, actor_id, Capability.review_applications)
    return application


def list_applications(
    client,
    reviewer_id: str,
    status: Optional[ApplicationStatus] = ApplicationStatus.pending,
) -> List[dict]:
    """
    Reviewer queue, newest first, with applicant name/email attached.
    Pass status=None for every application.
    """
    require_capability(client, reviewer_id, Capability.review_applications)

    query = client.table(TABLE).select("*")
    if status is not None:
        query = query.eq("status", str(status))
    result = query.order("created_at", desc=True).execute()
    applications = result.data or []

    applicants = get_profiles_by_ids(client, [a["user_id"] for a in applications])
    for application in applications:
        application["applicant"] = applicants.get(
            application["user_id"], {"full_name": None, "email": None}
        )
    return applications
