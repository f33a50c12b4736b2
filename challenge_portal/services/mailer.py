"""Invitation email delivery through the Resend HTTP API."""

from __future__ import annotations

import logging

import httpx

from challenge_portal.core.config import Settings
from challenge_portal.core.constants import INVITE_EMAIL_SUBJECT, RESEND_API_URL

logger = logging.getLogger(__name__)

INVITE_EMAIL_TEMPLATE: str = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h1 style="color: #3b82f6; margin-bottom: 24px;">Welcome to the Composio SDK Design Challenge!</h1>
  <p style="margin-bottom: 16px; font-size: 16px; line-height: 1.5;">
    We're excited to see your approach to this challenge.
  </p>
  <p style="margin-bottom: 24px; font-size: 16px; line-height: 1.5;">
    Please click the button below to download the challenge repository:
  </p>
  <div style="text-align: center; margin: 32px 0;">
    <a href="{download_url}" style="background-color: #3b82f6; color: white; padding: 12px 24px; text-decoration: none; border-radius: 4px; font-weight: bold;">
      Download Challenge Repository
    </a>
  </div>
  <p style="margin-bottom: 16px; font-size: 16px; line-height: 1.5;">
    Instructions are included in the README.md file.
  </p>
  <p style="font-size: 16px; line-height: 1.5;">Good luck!</p>
  <div style="margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px;">
    <p>The Composio Team</p>
  </div>
</div>
"""


class InviteMailer:
    """Sends the download link to an invited candidate.

    ``send_invite`` reports success as a bool and never raises; the caller
    decides what an undelivered invitation means.
    """

    def __init__(
        self,
        api_key: str,
        sender: str,
        public_base_url: str,
        api_url: str = RESEND_API_URL,
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._sender = sender
        self._public_base_url = public_base_url.rstrip("/")
        self._api_url = api_url
        self._timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.Client | None = None,
    ) -> InviteMailer:
        return cls(
            api_key=settings.RESEND_API_KEY,
            sender=settings.EMAIL_FROM,
            public_base_url=settings.PUBLIC_BASE_URL,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            http_client=http_client,
        )

    def download_link(self, token: str) -> str:
        return f"{self._public_base_url}/download/{token}"

    def render_invite(self, token: str) -> str:
        return INVITE_EMAIL_TEMPLATE.format(download_url=self.download_link(token))

    def _post(self, payload: dict[str, object]) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if self._http_client is not None:
            return self._http_client.post(self._api_url, headers=headers, json=payload)
        with httpx.Client(timeout=self._timeout) as client:
            return client.post(self._api_url, headers=headers, json=payload)

    def send_invite(self, email: str, token: str) -> bool:
        """Email the download link for *token* to *email*. Returns ``True`` if accepted."""
        if not self._api_key:
            logger.warning("invite_email_skipped_no_api_key", extra={"email": email})
            return False

        payload: dict[str, object] = {
            "from": self._sender,
            "to": [email],
            "subject": INVITE_EMAIL_SUBJECT,
            "html": self.render_invite(token),
        }

        try:
            response = self._post(payload)
        except httpx.HTTPError as exc:
            logger.error(
                "invite_email_transport_failed",
                extra={"email": email, "error_message": str(exc)},
            )
            return False

        if response.is_error:
            logger.error(
                "invite_email_rejected",
                extra={"email": email, "status_code": response.status_code},
            )
            return False

        logger.info("invite_email_sent", extra={"email": email})
        return True
