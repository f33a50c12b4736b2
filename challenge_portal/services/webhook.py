"""GitHub release webhook verification and ingestion.

A delivery is either received -> verified -> applied, or received ->
rejected. Nothing in the payload is parsed before the signature matches.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging

from pydantic import ValidationError as PydanticValidationError

from challenge_portal.core.constants import (
    RELEASE_PUBLISHED_ACTION,
    SIGNATURE_PREFIX,
)
from challenge_portal.core.errors import UnauthorizedError, ValidationError
from challenge_portal.models.release import WebhookOutcome
from challenge_portal.services.github import descriptor_from_release
from challenge_portal.services.releases import ReleaseCache

logger = logging.getLogger(__name__)


def compute_signature(body: bytes, secret: str) -> str:
    """Return ``sha256=<hex hmac>`` of *body* keyed with *secret*."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(body: bytes, signature_header: str | None, secret: str | None) -> bool:
    """Constant-time check of *signature_header* against *body*.

    Fails closed when either the header or the secret is missing.
    """
    if not signature_header or not secret:
        return False
    expected = compute_signature(body, secret)
    return hmac.compare_digest(
        signature_header.encode("utf-8"), expected.encode("utf-8")
    )


class WebhookIngestor:
    """Applies verified ``release`` deliveries to the release cache."""

    def __init__(self, cache: ReleaseCache, secret: str, asset_marker: str) -> None:
        self._cache = cache
        self._secret = secret
        self._asset_marker = asset_marker

    def handle(self, body: bytes, signature_header: str | None) -> WebhookOutcome:
        """Verify and apply one delivery.

        Raises ``UnauthorizedError`` on any verification failure and
        ``ValidationError`` for a verified body that cannot be interpreted.
        Verified events other than a published release are acknowledged
        without any state change.
        """
        if not verify_signature(body, signature_header, self._secret):
            logger.warning(
                "webhook_rejected",
                extra={
                    "has_signature": bool(signature_header),
                    "has_secret": bool(self._secret),
                },
            )
            raise UnauthorizedError("Invalid signature")

        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise ValidationError("Webhook body is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise ValidationError("Webhook body must be a JSON object")

        action = payload.get("action")
        release = payload.get("release")
        if action != RELEASE_PUBLISHED_ACTION or not release:
            logger.info("webhook_ignored", extra={"action": action})
            return WebhookOutcome(
                applied=False,
                message="Webhook received but no action taken",
            )

        try:
            descriptor = descriptor_from_release(release, self._asset_marker)
        except PydanticValidationError as exc:
            logger.warning(
                "webhook_release_malformed",
                extra={"error_message": str(exc)},
            )
            raise ValidationError("Webhook release payload is incomplete") from exc

        stored, created = self._cache.ingest_pushed_reporting(descriptor)
        if created:
            message = f"Release {stored.tag_name} stored successfully"
        else:
            message = f"Release {stored.tag_name} already cached"
        return WebhookOutcome(
            applied=created,
            message=message,
            release=stored,
        )
