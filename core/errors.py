# core/errors.py

from typing import Optional

from fastapi import HTTPException


# ============================================================
# Postgres / PostgREST error codes we act on
# ============================================================
PG_UNIQUE_VIOLATION = "23505"
PG_CHECK_VIOLATION = "23514"
PG_NOT_NULL_VIOLATION = "23502"
PG_INSUFFICIENT_PRIVILEGE = "42501"
PG_NO_DATA_FOUND = "P0002"

# Messages raised by the procedures in supabase/migrations
MSG_NOT_AUTHORIZED = "not_authorized"
MSG_APPLICATION_NOT_PENDING = "application_not_pending"
MSG_PROFILE_NOT_FOUND = "profile_not_found"


# ============================================================
# Domain errors
# ============================================================
class ParkwiseError(Exception):
    """Base class for every failure the ownership core reports."""

    status_code = 500
    error = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.error, "detail": self.detail}


class Unauthorized(ParkwiseError):
    status_code = 403
    error = "unauthorized"


class NotFound(ParkwiseError):
    status_code = 404
    error = "not_found"


class AlreadyProcessed(ParkwiseError):
    status_code = 409
    error = "already_processed"


class DuplicateApplication(ParkwiseError):
    status_code = 409
    error = "duplicate_application"


class StaleWrite(ParkwiseError):
    """A conditional update matched no row because the row changed underneath."""

    status_code = 409
    error = "stale_write"


class ValidationError(ParkwiseError):
    status_code = 422
    error = "validation_error"


class PartialFailure(ParkwiseError):
    """
    A multi-step cascade stopped after changing data.
    Carries what was completed so the caller can reconcile or re-invoke.
    """

    status_code = 500
    error = "partial_failure"

    def __init__(self, detail: str, completed: dict, failed_step: str):
        super().__init__(detail)
        self.completed = completed
        self.failed_step = failed_step

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["completed"] = self.completed
        data["failed_step"] = self.failed_step
        return data


# ============================================================
# Supabase error decoding
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: PostgREST APIError / GoTrue errors
    if getattr(error, "message", None):
        try:
            return str(error.message)
        except Exception:
            pass

    # Case 2: Supabase errors with args (common)
    if hasattr(error, "args") and error.args:
        try:
            return str(error.args[0])
        except Exception:
            pass

    # Case 3: Plain string fallback
    try:
        return str(error)
    except Exception:
        return "Unknown Supabase error"


def extract_supabase_code(error: Exception) -> Optional[str]:
    """SQLSTATE / PostgREST code of an error, when the client exposes one."""
    code = getattr(error, "code", None)
    if code:
        return str(code)

    # Older clients put the raw JSON body in args[0]
    if getattr(error, "args", None) and isinstance(error.args[0], dict):
        raw = error.args[0].get("code")
        return str(raw) if raw else None

    return None


def handle_supabase_error(error: Exception, operation: str = "Database operation", status_code: int = 500) -> HTTPException:
    """
    Handle Supabase errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what operation failed (e.g., "Failed to create zone")
        status_code: HTTP status code (default 500)
    """
    from core.logging_config import logger

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    error_lower = error_detail.lower()
    if "duplicate" in error_lower or "unique" in error_lower:
        return HTTPException(status_code=409, detail=f"{operation}: Record already exists")
    elif "foreign key" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Invalid reference")
    elif "not found" in error_lower or "does not exist" in error_lower:
        return HTTPException(status_code=404, detail=f"{operation}: Resource not found")
    else:
        return HTTPException(status_code=status_code, detail=f"{operation} failed")


def raise_constraint_violation(error: Exception, operation: str):
    """
    Re-raise store constraint violations on zone/location rows as ValidationError.
    Anything else propagates unchanged.
    """
    code = extract_supabase_code(error)
    if code in (PG_CHECK_VIOLATION, PG_NOT_NULL_VIOLATION):
        raise ValidationError(f"{operation}: {extract_supabase_error(error)}") from error
    raise error
