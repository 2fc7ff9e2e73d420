# core/config_validator.py

from typing import List
from core.config import settings
from core.logging_config import logger


def validate_required_config() -> List[str]:
    """
    Validate that all required environment variables are set.
    Returns list of missing required variables.
    """
    missing = []

    if not settings.SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        missing.append("SUPABASE_SERVICE_ROLE_KEY")
    if not settings.SUPABASE_ANON_KEY:
        # Needed to run procedures under the caller's own JWT
        missing.append("SUPABASE_ANON_KEY")

    return missing


def validate_config_on_startup():
    """
    Validate configuration on application startup.
    Raises RuntimeError in production if critical config is missing;
    other environments only log the gap.
    """
    missing_required = validate_required_config()

    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        if settings.ENV == "production":
            logger.error(error_msg)
            raise RuntimeError(error_msg)
        logger.warning(error_msg)
        return

    logger.info(
        f"Configuration validation passed (owner cascade mode: {settings.OWNER_CASCADE_MODE})"
    )
