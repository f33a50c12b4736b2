"""Unit tests for the candidate registry.

Covers creation and email validation, token lookup, listing order, and the
forward-only download status machine.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import count
from unittest.mock import MagicMock
from uuid import uuid4

import httpx
import pytest

from challenge_portal.core.errors import NotFoundError, PersistenceError, ValidationError
from challenge_portal.models.enums import CandidateStatus
from challenge_portal.services.candidates import CandidateRegistry

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _ticking_clock(start: datetime = T0, step: timedelta = timedelta(minutes=1)):
    """Return a clock that advances by *step* on every call."""
    ticks = count()
    return lambda: start + step * next(ticks)


def _chainable_table_mock() -> MagicMock:
    """Return a mock that supports fluent chaining."""
    m = MagicMock()
    for method in ("select", "insert", "update", "eq", "limit", "order"):
        getattr(m, method).return_value = m
    return m


# ---------------------------------------------------------------------------
# create_candidate
# ---------------------------------------------------------------------------

class TestCreateCandidate:
    def test_creates_invited_candidate(self, fake_supabase) -> None:
        """Given a valid email, an invited row with a fresh token is stored."""
        registry = CandidateRegistry(fake_supabase, clock=lambda: T0)

        candidate = registry.create_candidate("a@b.com")

        assert candidate.email == "a@b.com"
        assert candidate.status == CandidateStatus.invited
        assert candidate.download_count == 0
        assert candidate.downloaded_at is None
        assert candidate.created_at == T0
        assert len(candidate.token) == 12

        rows = fake_supabase.tables["candidates"]
        assert len(rows) == 1
        assert rows[0]["token"] == candidate.token
        assert rows[0]["status"] == "invited"

    @pytest.mark.parametrize("email", ["", "not-an-email", None, 42])
    def test_rejects_malformed_email(self, fake_supabase, email) -> None:
        """Given an email without '@', ValidationError is raised and nothing is written."""
        registry = CandidateRegistry(fake_supabase)

        with pytest.raises(ValidationError):
            registry.create_candidate(email)

        assert fake_supabase.calls == []

    def test_token_collision_surfaces_as_persistence_error(self, fake_supabase) -> None:
        """Given the generator repeats a token, the unique constraint failure is surfaced, not retried."""
        registry = CandidateRegistry(fake_supabase, token_factory=lambda: "SAMETOKEN123")
        registry.create_candidate("first@b.com")

        with pytest.raises(PersistenceError, match="Failed to create candidate"):
            registry.create_candidate("second@b.com")

        assert len(fake_supabase.tables["candidates"]) == 1
        assert fake_supabase.calls.count(("candidates", "insert")) == 2

    def test_transport_failure_is_persistence_error(self) -> None:
        """Given the HTTP layer under the client fails, PersistenceError is raised."""
        client = MagicMock()
        table = _chainable_table_mock()
        table.execute.side_effect = httpx.ConnectError("refused")
        client.table.return_value = table

        with pytest.raises(PersistenceError):
            CandidateRegistry(client).create_candidate("a@b.com")

    def test_empty_insert_result_is_persistence_error(self) -> None:
        client = MagicMock()
        table = _chainable_table_mock()
        table.execute.return_value = MagicMock(data=[])
        client.table.return_value = table

        with pytest.raises(PersistenceError):
            CandidateRegistry(client).create_candidate("a@b.com")


# ---------------------------------------------------------------------------
# get_by_token / list_all
# ---------------------------------------------------------------------------

class TestLookup:
    def test_get_by_token_found(self, fake_supabase) -> None:
        registry = CandidateRegistry(fake_supabase)
        created = registry.create_candidate("a@b.com")

        found = registry.get_by_token(created.token)

        assert found is not None
        assert found.id == created.id

    def test_get_by_token_unknown_returns_none(self, fake_supabase) -> None:
        """Given an unknown token, None is returned (not an error)."""
        registry = CandidateRegistry(fake_supabase)
        registry.create_candidate("a@b.com")

        assert registry.get_by_token("doesnotexist") is None

    def test_get_by_empty_token_skips_store(self, fake_supabase) -> None:
        assert CandidateRegistry(fake_supabase).get_by_token("") is None
        assert fake_supabase.calls == []

    def test_get_by_token_store_failure_is_error(self, fake_supabase) -> None:
        """Given the store fails, the failure is distinct from 'not found'."""
        fake_supabase.fail("candidates", "select")

        with pytest.raises(PersistenceError):
            CandidateRegistry(fake_supabase).get_by_token("sometoken123")

    def test_list_all_newest_first(self, fake_supabase) -> None:
        registry = CandidateRegistry(fake_supabase, clock=_ticking_clock())
        for email in ("one@x.com", "two@x.com", "three@x.com"):
            registry.create_candidate(email)

        emails = [c.email for c in registry.list_all()]

        assert emails == ["three@x.com", "two@x.com", "one@x.com"]

    def test_list_all_empty(self, fake_supabase) -> None:
        assert CandidateRegistry(fake_supabase).list_all() == []


# ---------------------------------------------------------------------------
# mark_downloaded
# ---------------------------------------------------------------------------

class TestMarkDownloaded:
    def test_first_download_moves_to_downloaded(self, fake_supabase) -> None:
        registry = CandidateRegistry(fake_supabase, clock=_ticking_clock())
        candidate = registry.create_candidate("a@b.com")

        updated = registry.mark_downloaded(candidate.id)

        assert updated.status == CandidateStatus.downloaded
        assert updated.download_count == 1
        assert updated.downloaded_at == T0 + timedelta(minutes=1)

    def test_repeat_downloads_count_but_keep_first_timestamp(self, fake_supabase) -> None:
        """Given three calls, the count is 3 and downloaded_at is the first call's time."""
        registry = CandidateRegistry(fake_supabase, clock=_ticking_clock())
        candidate = registry.create_candidate("a@b.com")

        first = registry.mark_downloaded(candidate.id)
        registry.mark_downloaded(candidate.id)
        third = registry.mark_downloaded(candidate.id)

        assert third.download_count == 3
        assert third.status == CandidateStatus.downloaded
        assert third.downloaded_at == first.downloaded_at

    def test_completed_candidate_is_never_moved_back(self, fake_supabase) -> None:
        """Given a completed candidate, a download counts but status stays completed."""
        registry = CandidateRegistry(fake_supabase, clock=_ticking_clock())
        candidate = registry.create_candidate("a@b.com")
        registry.mark_downloaded(candidate.id)
        fake_supabase.tables["candidates"][0]["status"] = "completed"

        updated = registry.mark_downloaded(candidate.id)

        assert updated.status == CandidateStatus.completed
        assert updated.download_count == 2

    def test_unknown_candidate_raises_not_found(self, fake_supabase) -> None:
        with pytest.raises(NotFoundError):
            CandidateRegistry(fake_supabase).mark_downloaded(uuid4())
        assert fake_supabase.writes() == []

    def test_read_modify_write_loses_concurrent_increment(self, fake_supabase) -> None:
        """Given two interleaved calls that read the same count, one increment is lost.

        ``download_count`` is a best-effort counter: there is no atomic
        increment, so this race is accepted rather than hidden.
        """
        registry = CandidateRegistry(fake_supabase)
        candidate = registry.create_candidate("a@b.com")
        row = fake_supabase.tables["candidates"][0]

        stale_read = dict(row)
        original_table = fake_supabase.table

        def _table_with_stale_read(name: str):
            query = original_table(name)
            real_execute = query.execute

            def _execute():
                response = real_execute()
                if query._op == "select":
                    response.data = [dict(stale_read)]
                return response

            query.execute = _execute
            return query

        fake_supabase.table = _table_with_stale_read  # type: ignore[method-assign]
        registry.mark_downloaded(candidate.id)
        registry.mark_downloaded(candidate.id)

        assert row["download_count"] == 1

    def test_write_failure_is_persistence_error(self, fake_supabase) -> None:
        registry = CandidateRegistry(fake_supabase)
        candidate = registry.create_candidate("a@b.com")
        fake_supabase.fail("candidates", "update")

        with pytest.raises(PersistenceError, match="Failed to update candidate"):
            registry.mark_downloaded(candidate.id)

        assert fake_supabase.tables["candidates"][0]["download_count"] == 0
