# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# ============================================================
# Supabase Client Factory (ALWAYS service role)
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.
    REQUIRED for:
        - auth.get_user (token validation)
        - reads/writes on profiles, locations and zones after the
          API has checked the caller's role
    """
    try:
        supabase_url = settings.SUPABASE_URL
        supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY  # MUST be service-role

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
            return None

        return create_client(supabase_url, supabase_key)

    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Caller-scoped client (anon key + caller JWT)
# ============================================================

def get_user_client(access_token: str) -> Optional[Client]:
    """
    Creates a Supabase client that acts AS the caller.

    PostgREST receives the caller's JWT, so row-level security and
    `auth.uid()` inside procedures (process_owner_application,
    remove_location_owner) see the real identity instead of the
    service role.
    """
    try:
        supabase_url = settings.SUPABASE_URL
        anon_key = settings.SUPABASE_ANON_KEY

        if not supabase_url or not anon_key:
            logger.error("Missing Supabase anon credentials for caller-scoped client")
            return None

        client = create_client(supabase_url, anon_key)
        client.postgrest.auth(access_token)
        return client

    except Exception as e:
        logger.error(f"Supabase User Client Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Health probe
# ============================================================

HEALTH_TABLES = ("profiles", "owner_applications", "parking_locations", "parking_zones")


def ping_supabase(client: Optional[Client] = None) -> dict:
    """
    One-row read from each ownership table.
    status is "ok", "degraded" (some tables failing) or "not_configured".
    """
    client = client or get_supabase_client()
    if client is None:
        return {"status": "not_configured", "tables": {}}

    tables = {}
    for table in HEALTH_TABLES:
        try:
            client.table(table).select("id").limit(1).execute()
            tables[table] = "ok"
        except Exception as e:
            logger.warning(f"Health probe failed on {table}: {e}")
            tables[table] = "error"

    healthy = all(state == "ok" for state in tables.values())
    return {"status": "ok" if healthy else "degraded", "tables": tables}
