"""Candidate registry backed by the Supabase ``candidates`` table.

Owns candidate creation, token lookup, and the forward-only status machine
``invited -> downloaded`` (``completed`` is set out of band).

``mark_downloaded`` reads the current row and then writes the new counter.
Two concurrent downloads for the same candidate can therefore lose one
increment; ``download_count`` is a best-effort counter.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from supabase import Client

from challenge_portal.core.constants import CANDIDATES_TABLE
from challenge_portal.core.errors import (
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from challenge_portal.db.supabase import STORE_ERRORS
from challenge_portal.models.candidate import Candidate, CandidateCreate
from challenge_portal.models.enums import CandidateStatus
from challenge_portal.services.tokens import generate_token

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_email(email: Any) -> str:
    """Return *email* if it passes the minimal syntactic check.

    Only presence of ``@`` is checked; deliverability is the mailer's problem.
    """
    if not isinstance(email, str) or not email or "@" not in email:
        raise ValidationError("Invalid email address")
    return email


class CandidateRegistry:
    """Create, look up, and advance candidates."""

    def __init__(
        self,
        client: Client,
        token_factory: Callable[[], str] = generate_token,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._token_factory = token_factory
        self._clock = clock

    # -----------------------------------------------------------------------
    # Creation
    # -----------------------------------------------------------------------

    def create_candidate(self, email: str) -> Candidate:
        """Insert a new ``invited`` candidate with a fresh token.

        A token collision surfaces as ``PersistenceError`` from the store's
        unique constraint; it is not retried.
        """
        email = validate_email(email)
        payload = CandidateCreate(
            email=email,
            token=self._token_factory(),
            status=CandidateStatus.invited,
            download_count=0,
            created_at=self._clock(),
        )

        try:
            result = (
                self._client.table(CANDIDATES_TABLE)
                .insert(payload.model_dump(mode="json"))
                .execute()
            )
        except STORE_ERRORS as exc:
            logger.error(
                "create_candidate_failed",
                extra={"email": email, "error_message": str(exc)},
            )
            raise PersistenceError(f"Failed to create candidate: {exc}") from exc

        if not result.data:
            logger.error("create_candidate_no_row", extra={"email": email})
            raise PersistenceError("Failed to create candidate: no row returned")

        candidate = Candidate(**result.data[0])
        logger.info(
            "candidate_created",
            extra={"candidate_id": str(candidate.id), "email": candidate.email},
        )
        return candidate

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def get_by_token(self, token: str) -> Candidate | None:
        """Return the candidate holding *token*, or ``None`` for an unknown token."""
        if not token:
            return None

        try:
            result = (
                self._client.table(CANDIDATES_TABLE)
                .select("*")
                .eq("token", token)
                .limit(1)
                .execute()
            )
        except STORE_ERRORS as exc:
            logger.error(
                "get_candidate_by_token_failed",
                extra={"error_message": str(exc)},
            )
            raise PersistenceError(f"Failed to fetch candidate: {exc}") from exc

        if not result.data:
            return None
        return Candidate(**result.data[0])

    def list_all(self) -> list[Candidate]:
        """Return every candidate, newest first."""
        try:
            result = (
                self._client.table(CANDIDATES_TABLE)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
        except STORE_ERRORS as exc:
            logger.error("list_candidates_failed", extra={"error_message": str(exc)})
            raise PersistenceError(f"Failed to fetch candidates: {exc}") from exc

        return [Candidate(**row) for row in result.data or []]

    # -----------------------------------------------------------------------
    # Status machine
    # -----------------------------------------------------------------------

    def mark_downloaded(self, candidate_id: UUID | str) -> Candidate:
        """Record one successful download for *candidate_id*.

        ``download_count`` is incremented on every call. ``status`` only moves
        from ``invited`` to ``downloaded`` and ``downloaded_at`` is only set
        when it is still empty, so repeat calls never move the candidate
        backward or overwrite the first download time.
        """
        candidate_key = str(candidate_id)

        try:
            current = (
                self._client.table(CANDIDATES_TABLE)
                .select("id, status, downloaded_at, download_count")
                .eq("id", candidate_key)
                .limit(1)
                .execute()
            )
        except STORE_ERRORS as exc:
            logger.error(
                "mark_downloaded_read_failed",
                extra={"candidate_id": candidate_key, "error_message": str(exc)},
            )
            raise PersistenceError(f"Failed to fetch candidate data: {exc}") from exc

        if not current.data:
            raise NotFoundError(f"Candidate not found: {candidate_key}")

        row = current.data[0]
        changes: dict[str, Any] = {
            "download_count": int(row.get("download_count") or 0) + 1,
        }
        if row.get("status") == CandidateStatus.invited.value:
            changes["status"] = CandidateStatus.downloaded.value
        if not row.get("downloaded_at"):
            changes["downloaded_at"] = self._clock().isoformat()

        try:
            result = (
                self._client.table(CANDIDATES_TABLE)
                .update(changes)
                .eq("id", candidate_key)
                .execute()
            )
        except STORE_ERRORS as exc:
            logger.error(
                "mark_downloaded_write_failed",
                extra={"candidate_id": candidate_key, "error_message": str(exc)},
            )
            raise PersistenceError(f"Failed to update candidate: {exc}") from exc

        if not result.data:
            raise NotFoundError(f"Candidate not found: {candidate_key}")

        candidate = Candidate(**result.data[0])
        logger.info(
            "candidate_downloaded",
            extra={
                "candidate_id": candidate_key,
                "status": candidate.status.value,
                "download_count": candidate.download_count,
            },
        )
        return candidate
