"""Release cache backed by the Supabase ``releases`` table.

Reads are answered from the table; GitHub is only consulted when the table
is empty (or on an explicit resync). Fresh releases normally arrive through
the webhook push path. There is no TTL: if a webhook delivery is lost, the
cache stays on the previous release until the next push or manual resync.

A tag is stored at most once. Two concurrent inserts of the same new tag
race; the loser gets the ``tag_name`` unique-constraint violation as a
``PersistenceError``.
"""

from __future__ import annotations

import logging

from supabase import Client

from challenge_portal.core.constants import RELEASES_TABLE
from challenge_portal.core.errors import PersistenceError
from challenge_portal.db.supabase import STORE_ERRORS
from challenge_portal.models.release import Release, ReleaseDescriptor
from challenge_portal.services.github import GitHubReleaseProvider

logger = logging.getLogger(__name__)


class ReleaseCache:
    """Store-first view of the latest challenge release."""

    def __init__(self, client: Client, provider: GitHubReleaseProvider) -> None:
        self._client = client
        self._provider = provider

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def get_latest_cached(self) -> Release | None:
        """Return the most recently created stored release, or ``None``."""
        try:
            result = (
                self._client.table(RELEASES_TABLE)
                .select("*")
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except STORE_ERRORS as exc:
            logger.error("get_latest_cached_failed", extra={"error_message": str(exc)})
            raise PersistenceError(f"Failed to fetch latest release: {exc}") from exc

        if not result.data:
            return None
        return Release(**result.data[0])

    def get_by_tag(self, tag_name: str) -> Release | None:
        try:
            result = (
                self._client.table(RELEASES_TABLE)
                .select("*")
                .eq("tag_name", tag_name)
                .limit(1)
                .execute()
            )
        except STORE_ERRORS as exc:
            logger.error(
                "get_release_by_tag_failed",
                extra={"tag_name": tag_name, "error_message": str(exc)},
            )
            raise PersistenceError(f"Failed to fetch release {tag_name}: {exc}") from exc

        if not result.data:
            return None
        return Release(**result.data[0])

    def list_all(self) -> list[Release]:
        """Return every stored release, newest first."""
        try:
            result = (
                self._client.table(RELEASES_TABLE)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
        except STORE_ERRORS as exc:
            logger.error("list_releases_failed", extra={"error_message": str(exc)})
            raise PersistenceError(f"Failed to fetch releases: {exc}") from exc

        return [Release(**row) for row in result.data or []]

    # -----------------------------------------------------------------------
    # Upstream (pull path)
    # -----------------------------------------------------------------------

    def fetch_from_upstream(self) -> ReleaseDescriptor:
        return self._provider.fetch_latest()

    def sync_latest(self) -> Release:
        """Fetch the latest upstream release and store it unless its tag is known."""
        descriptor = self.fetch_from_upstream()
        release, _ = self._store_if_absent(descriptor, source="upstream")
        return release

    def get_latest_with_fallback(self) -> Release:
        """Return the cached release, syncing from upstream only on an empty cache."""
        cached = self.get_latest_cached()
        if cached is not None:
            return cached

        logger.info("release_cache_miss")
        return self.sync_latest()

    # -----------------------------------------------------------------------
    # Webhook (push path)
    # -----------------------------------------------------------------------

    def ingest_pushed(self, descriptor: ReleaseDescriptor) -> Release:
        """Store a release delivered by webhook, with the same de-duplication."""
        release, _ = self.ingest_pushed_reporting(descriptor)
        return release

    def ingest_pushed_reporting(self, descriptor: ReleaseDescriptor) -> tuple[Release, bool]:
        """Like ``ingest_pushed``, also returning whether a new row was inserted."""
        return self._store_if_absent(descriptor, source="webhook")

    def _store_if_absent(
        self, descriptor: ReleaseDescriptor, source: str
    ) -> tuple[Release, bool]:
        existing = self.get_by_tag(descriptor.tag_name)
        if existing is not None:
            logger.info(
                "release_already_cached",
                extra={"tag_name": descriptor.tag_name, "source": source},
            )
            return existing, False

        try:
            result = (
                self._client.table(RELEASES_TABLE)
                .insert(descriptor.model_dump(mode="json"))
                .execute()
            )
        except STORE_ERRORS as exc:
            logger.error(
                "store_release_failed",
                extra={
                    "tag_name": descriptor.tag_name,
                    "source": source,
                    "error_message": str(exc),
                },
            )
            raise PersistenceError(
                f"Failed to store release {descriptor.tag_name}: {exc}"
            ) from exc

        if not result.data:
            raise PersistenceError(
                f"Failed to store release {descriptor.tag_name}: no row returned"
            )

        release = Release(**result.data[0])
        logger.info(
            "release_stored",
            extra={
                "tag_name": release.tag_name,
                "source": source,
                "has_zip_asset": release.zip_asset_url is not None,
            },
        )
        return release, True
