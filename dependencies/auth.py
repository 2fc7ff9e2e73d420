from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import Client

from core.supabase_client import get_supabase_client
from core.profile_helpers import get_profile
from core.logging_config import logger


bearer_scheme = HTTPBearer()


# ============================================================
# Current User Model (verified identity + stored role)
# ============================================================
class CurrentUser(BaseModel):
    id: str                         # Supabase Auth UID == profiles.id
    email: Optional[str] = None
    role: str                       # profiles.user_role at request time

    full_name: Optional[str] = None
    phone: Optional[str] = None

    # Raw bearer token, forwarded to procedures that check auth.uid()
    access_token: Optional[str] = None


# ============================================================
# AUTH DECODING (Supabase: validates JWT + reads profile role)
# ============================================================
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:
    return authenticate_token(credentials.credentials)


def authenticate_token(token: str) -> CurrentUser:
    """Validate a bearer token and load the caller's profile role."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    client: Client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(token)
        if not auth_resp or not auth_resp.user:
            raise unauthorized
        auth_user = auth_resp.user
    except HTTPException:
        raise
    except Exception:
        raise unauthorized

    # ---------------------------------------------------------
    # Role comes from profiles, NEVER from user_metadata:
    # metadata is writable by the client itself.
    # ---------------------------------------------------------
    try:
        profile = get_profile(client, auth_user.id)
    except Exception as e:
        logger.error(f"Profile lookup failed for {auth_user.id}: {e}")
        raise HTTPException(500, "Failed to load user profile")

    if not profile:
        logger.warning(f"Authenticated user {auth_user.id} has no profile row")
        raise HTTPException(status_code=403, detail="User profile not found")

    return CurrentUser(
        id=auth_user.id,
        email=profile.get("email") or auth_user.email,
        role=profile.get("user_role") or "user",
        full_name=profile.get("full_name"),
        phone=profile.get("phone"),
        access_token=token,
    )

