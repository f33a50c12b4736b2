"""Pydantic models for the ``candidates`` table and its HTTP payloads.

``id`` is generated by the database; ``token`` is generated by the API and
never changes afterwards.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from challenge_portal.models.enums import CandidateStatus


class CandidateCreate(BaseModel):
    """Payload for creating a candidate (insert)."""
    email: str
    token: str
    status: CandidateStatus = CandidateStatus.invited
    download_count: int = 0
    created_at: datetime


class Candidate(BaseModel):
    """Full candidate record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    token: str
    status: CandidateStatus = CandidateStatus.invited
    created_at: datetime
    downloaded_at: datetime | None = None
    download_count: int = 0


class CandidateSummary(BaseModel):
    """Candidate as listed on the admin dashboard (no token)."""
    id: UUID
    email: str
    status: CandidateStatus
    created_at: datetime
    downloaded_at: datetime | None = None
    download_count: int = 0


class InviteRequest(BaseModel):
    """Body of ``POST /invite``."""
    email: str


class InvitedCandidate(BaseModel):
    id: UUID
    email: str
    token: str


class InviteResponse(BaseModel):
    """Response of ``POST /invite``."""
    success: bool = True
    candidate: InvitedCandidate
    email_sent: bool
