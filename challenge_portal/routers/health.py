"""Health check endpoint.

Returns service status including database connectivity and whether the
webhook secret is configured (without it every delivery is rejected).
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from challenge_portal.core.constants import CANDIDATES_TABLE
from challenge_portal.dependencies import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(services: Services = Depends(get_services)) -> Any:
    """Return health status including a real Supabase connectivity test.

    Returns 200 OK when healthy, 503 when the database is down.
    """
    db_status = "disconnected"

    try:
        result = (
            services.supabase.table(CANDIDATES_TABLE)
            .select("id")
            .limit(1)
            .execute()
        )
        if result is not None:
            db_status = "connected"
    except Exception:
        logger.warning("Health check: Supabase connection failed", exc_info=True)

    payload: dict[str, Any] = {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "webhook_secret_configured": bool(services.settings.GITHUB_WEBHOOK_SECRET),
    }

    if db_status != "connected":
        return JSONResponse(status_code=503, content=payload)

    return payload
