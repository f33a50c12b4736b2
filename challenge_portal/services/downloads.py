"""Download orchestration: token -> release -> counted download.

The order is fixed. The token is resolved before the release cache is
touched, so an unknown token never reaches the store's release table or
GitHub. A candidate is only counted once a zip URL is actually handed back.
"""

from __future__ import annotations

import logging

from challenge_portal.core.constants import INVALID_TOKEN_MESSAGE, NO_RELEASE_MESSAGE
from challenge_portal.core.errors import PersistenceError, UpstreamError
from challenge_portal.models.download import (
    DownloadReady,
    DownloadResult,
    InvalidToken,
    ValidTokenNoArtifact,
)
from challenge_portal.services.candidates import CandidateRegistry
from challenge_portal.services.releases import ReleaseCache

logger = logging.getLogger(__name__)


class DownloadOrchestrator:
    def __init__(self, candidates: CandidateRegistry, releases: ReleaseCache) -> None:
        self._candidates = candidates
        self._releases = releases

    def resolve_download(self, token: str) -> DownloadResult:
        """Resolve *token* to a download URL, counting the download on success."""
        candidate = self._candidates.get_by_token(token)
        if candidate is None:
            logger.info("download_invalid_token")
            return InvalidToken(reason=INVALID_TOKEN_MESSAGE)

        try:
            release = self._releases.get_latest_with_fallback()
        except (UpstreamError, PersistenceError) as exc:
            logger.warning(
                "download_release_unavailable",
                extra={"candidate_id": str(candidate.id), "error_message": str(exc)},
            )
            return ValidTokenNoArtifact(email=candidate.email, reason=NO_RELEASE_MESSAGE)

        if not release.zip_asset_url:
            logger.warning(
                "download_release_without_zip",
                extra={"candidate_id": str(candidate.id), "tag_name": release.tag_name},
            )
            return ValidTokenNoArtifact(email=candidate.email, reason=NO_RELEASE_MESSAGE)

        updated = self._candidates.mark_downloaded(candidate.id)
        return DownloadReady(
            url=release.zip_asset_url,
            email=updated.email,
            status=updated.status,
        )
