"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to; ``main`` renders them all
as ``{"error": message}``.
"""

from __future__ import annotations


class ChallengePortalError(Exception):
    """Base class for expected, request-local failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ChallengePortalError):
    """Bad caller input (e.g. a malformed email). Never retried."""

    status_code = 400


class NotFoundError(ChallengePortalError):
    """A referenced row does not exist."""

    status_code = 404


class UnauthorizedError(ChallengePortalError):
    """Webhook signature verification failed."""

    status_code = 401


class UpstreamError(ChallengePortalError):
    """The release provider was unreachable or answered with an error."""

    status_code = 502

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class PersistenceError(ChallengePortalError):
    """The store rejected a read or write (uniqueness violations included)."""

    status_code = 500
