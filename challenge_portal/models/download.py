"""Outcomes of resolving a download token.

``DownloadResult`` is one of three variants; the HTTP layer picks the
status code and body from the concrete type.
"""

from typing import Literal, Union

from pydantic import BaseModel

from challenge_portal.models.enums import CandidateStatus


class InvalidToken(BaseModel):
    """No candidate holds the token. Nothing was read or written beyond the lookup."""
    kind: Literal["invalid"] = "invalid"
    reason: str


class ValidTokenNoArtifact(BaseModel):
    """The token is valid but there is no zip to hand out."""
    kind: Literal["no_artifact"] = "no_artifact"
    email: str
    reason: str


class DownloadReady(BaseModel):
    """The candidate was counted and can fetch ``url``."""
    kind: Literal["ready"] = "ready"
    url: str
    email: str
    status: CandidateStatus


DownloadResult = Union[InvalidToken, ValidTokenNoArtifact, DownloadReady]
