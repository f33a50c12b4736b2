"""Invitation flow: create the candidate, then email the download link."""

from __future__ import annotations

import logging

from challenge_portal.models.candidate import (
    InvitedCandidate,
    InviteResponse,
)
from challenge_portal.services.candidates import CandidateRegistry
from challenge_portal.services.mailer import InviteMailer

logger = logging.getLogger(__name__)


class InvitationService:
    def __init__(self, candidates: CandidateRegistry, mailer: InviteMailer) -> None:
        self._candidates = candidates
        self._mailer = mailer

    def invite(self, email: str) -> InviteResponse:
        """Create a candidate for *email* and send the invitation.

        An undelivered email does not undo the candidate: the row stays and
        the response carries ``email_sent=False`` so the operator can share
        the link another way.
        """
        candidate = self._candidates.create_candidate(email)
        email_sent = self._mailer.send_invite(candidate.email, candidate.token)
        if not email_sent:
            logger.warning(
                "invite_email_not_delivered",
                extra={"candidate_id": str(candidate.id), "email": candidate.email},
            )

        return InviteResponse(
            candidate=InvitedCandidate(
                id=candidate.id,
                email=candidate.email,
                token=candidate.token,
            ),
            email_sent=email_sent,
        )
