"""Candidate endpoints: invitation and admin listing."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from challenge_portal.dependencies import get_candidate_registry, get_invitation_service
from challenge_portal.models.candidate import (
    CandidateSummary,
    InviteRequest,
    InviteResponse,
)
from challenge_portal.services.candidates import CandidateRegistry
from challenge_portal.services.invitations import InvitationService

router = APIRouter()


@router.post("/invite", response_model=InviteResponse)
def invite_candidate(
    body: InviteRequest,
    invitations: InvitationService = Depends(get_invitation_service),
) -> InviteResponse:
    """Create a candidate and email them their download link.

    400 on a malformed email, 500 if the candidate row cannot be written.
    """
    return invitations.invite(body.email)


@router.get("/candidates", response_model=list[CandidateSummary])
def list_candidates(
    registry: CandidateRegistry = Depends(get_candidate_registry),
) -> list[CandidateSummary]:
    """Return every candidate, newest first, without tokens."""
    return [
        CandidateSummary.model_validate(candidate.model_dump())
        for candidate in registry.list_all()
    ]
