"""Candidate download endpoint."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from challenge_portal.dependencies import get_download_orchestrator
from challenge_portal.models.download import InvalidToken, ValidTokenNoArtifact
from challenge_portal.services.downloads import DownloadOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/download/{token}")
def download(
    token: str,
    orchestrator: DownloadOrchestrator = Depends(get_download_orchestrator),
) -> Any:
    """Resolve a download token.

    - unknown token: 404 ``{valid: false, error}``
    - valid token, nothing to serve: 200 ``{valid: true, error}``
    - otherwise: 200 ``{valid: true, downloadUrl, candidate}``
    """
    result = orchestrator.resolve_download(token)

    if isinstance(result, InvalidToken):
        return JSONResponse(
            status_code=404,
            content={"valid": False, "error": result.reason},
        )

    if isinstance(result, ValidTokenNoArtifact):
        return {"valid": True, "error": result.reason}

    return {
        "valid": True,
        "downloadUrl": result.url,
        "candidate": {"email": result.email, "status": result.status.value},
    }
