"""Enum types mirroring the PostgreSQL custom enums in ``schema.sql``."""

from enum import Enum


class CandidateStatus(str, Enum):
    """Candidate progress through the challenge (forward-only)."""
    invited = "invited"
    downloaded = "downloaded"
    completed = "completed"
