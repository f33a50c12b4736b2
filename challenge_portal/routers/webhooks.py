"""GitHub release webhook endpoint.

The raw body is read unparsed so the HMAC is computed over the exact bytes
GitHub signed.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from challenge_portal.core.constants import GITHUB_SIGNATURE_HEADER, SIGNATURE_HEADER
from challenge_portal.dependencies import get_webhook_ingestor
from challenge_portal.models.release import WebhookAck
from challenge_portal.services.webhook import WebhookIngestor

router = APIRouter()


@router.post("/webhook/release", response_model=WebhookAck)
async def release_webhook(
    request: Request,
    ingestor: WebhookIngestor = Depends(get_webhook_ingestor),
) -> WebhookAck:
    """Verify a signed delivery and apply published releases.

    401 on a bad or missing signature, 400 on an unreadable verified body.
    """
    body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER) or request.headers.get(
        GITHUB_SIGNATURE_HEADER
    )
    outcome = await run_in_threadpool(ingestor.handle, body, signature)
    return WebhookAck(message=outcome.message)
