"""GitHub release provider.

Fetches the latest published release of the configured repository over
the REST API and maps it, or a release object pushed by a webhook, to a
``ReleaseDescriptor``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from challenge_portal.core.config import Settings
from challenge_portal.core.constants import (
    GITHUB_ACCEPT_HEADER,
    GITHUB_API_VERSION,
    RELEASE_ASSET_SUFFIX,
)
from challenge_portal.core.errors import UpstreamError
from challenge_portal.models.release import (
    GitHubAsset,
    GitHubRelease,
    ReleaseDescriptor,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Asset matching
# ---------------------------------------------------------------------------

def match_zip_asset(assets: Iterable[GitHubAsset], marker: str) -> str | None:
    """Return the download URL of the first ``.zip`` asset whose name contains *marker*."""
    for asset in assets:
        if asset.name.endswith(RELEASE_ASSET_SUFFIX) and marker in asset.name:
            return asset.browser_download_url
    return None


def descriptor_from_release(
    release: dict[str, Any] | GitHubRelease,
    marker: str,
) -> ReleaseDescriptor:
    """Map a GitHub release object to a ``ReleaseDescriptor``.

    Raises ``pydantic.ValidationError`` if required release fields are missing.
    """
    if not isinstance(release, GitHubRelease):
        release = GitHubRelease.model_validate(release)

    return ReleaseDescriptor(
        tag_name=release.tag_name,
        name=release.name or release.tag_name,
        download_url=release.html_url,
        created_at=release.created_at,
        zip_asset_url=match_zip_asset(release.assets, marker),
    )


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

class GitHubReleaseProvider:
    """Reads ``/repos/{owner}/{repo}/releases/latest``.

    If *http_client* is given it is used for every request (and owned by the
    caller); otherwise a short-lived ``httpx.Client`` is opened per call.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str = "",
        asset_marker: str = "sdk-challenge",
        api_url: str = "https://api.github.com",
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.asset_marker = asset_marker
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.Client | None = None,
    ) -> GitHubReleaseProvider:
        return cls(
            owner=settings.GITHUB_REPO_OWNER,
            repo=settings.GITHUB_REPO_NAME,
            token=settings.GITHUB_TOKEN,
            asset_marker=settings.RELEASE_ASSET_MARKER,
            api_url=settings.GITHUB_API_URL,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            http_client=http_client,
        )

    @property
    def latest_release_url(self) -> str:
        return f"{self._api_url}/repos/{self.owner}/{self.repo}/releases/latest"

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": GITHUB_ACCEPT_HEADER,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get(self, url: str) -> httpx.Response:
        if self._http_client is not None:
            return self._http_client.get(url, headers=self._headers())
        with httpx.Client(timeout=self._timeout) as client:
            return client.get(url, headers=self._headers())

    def fetch_latest(self) -> ReleaseDescriptor:
        """Return the latest published release as a ``ReleaseDescriptor``.

        Raises ``UpstreamError`` on transport failure, a non-success status,
        or a body that is not a release object.
        """
        url = self.latest_release_url
        logger.info(
            "github_fetch_latest_started",
            extra={"owner": self.owner, "repo": self.repo},
        )

        try:
            response = self._get(url)
        except httpx.HTTPError as exc:
            logger.error(
                "github_fetch_latest_transport_failed",
                extra={"url": url, "error_message": str(exc)},
            )
            raise UpstreamError(f"GitHub API unreachable: {exc}") from exc

        if response.is_error:
            logger.error(
                "github_fetch_latest_http_error",
                extra={"url": url, "status_code": response.status_code},
            )
            raise UpstreamError(
                f"GitHub API error: {response.status_code} {response.reason_phrase}",
                upstream_status=response.status_code,
            )

        try:
            descriptor = descriptor_from_release(response.json(), self.asset_marker)
        except (ValueError, PydanticValidationError) as exc:
            logger.error(
                "github_fetch_latest_bad_payload",
                extra={"url": url, "error_message": str(exc)},
            )
            raise UpstreamError(f"Unexpected GitHub release payload: {exc}") from exc

        logger.info(
            "github_fetch_latest_completed",
            extra={
                "tag_name": descriptor.tag_name,
                "has_zip_asset": descriptor.zip_asset_url is not None,
            },
        )
        return descriptor
