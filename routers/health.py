# routers/health.py

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.config import settings
from core.config_validator import validate_required_config
from core.supabase_client import get_supabase_client, ping_supabase

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/app
# Liveness only, never touches Supabase
# -----------------------------------------------------
@router.get("/app", summary="App health check")
def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
        "env": settings.ENV,
        "owner_cascade_mode": settings.OWNER_CASCADE_MODE,
    }


# -----------------------------------------------------
# GET /health/db
# Readiness: config present + ownership tables readable
# -----------------------------------------------------
@router.get("/db", summary="Supabase readiness check")
def health_db():
    """
    **200** when every ownership table answers, **503** otherwise.
    No auth required (for uptime monitors).
    """
    missing = validate_required_config()
    if missing:
        return JSONResponse(
            status_code=503,
            content={"status": "not_configured", "missing": missing},
        )

    result = ping_supabase(get_supabase_client())
    status_code = 200 if result["status"] == "ok" else 503
    return JSONResponse(status_code=status_code, content=result)
