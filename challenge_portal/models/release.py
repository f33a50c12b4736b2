"""Pydantic models for the ``releases`` table and GitHub release payloads."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class GitHubAsset(BaseModel):
    """A single asset attached to a GitHub release."""
    model_config = ConfigDict(extra="ignore")

    name: str
    browser_download_url: str


class GitHubRelease(BaseModel):
    """The subset of a GitHub release object this service reads.

    Used both for ``GET /releases/latest`` responses and for the ``release``
    object of a ``release`` webhook delivery.
    """
    model_config = ConfigDict(extra="ignore")

    tag_name: str
    name: str | None = None
    html_url: str
    created_at: str
    assets: list[GitHubAsset] = Field(default_factory=list)


class ReleaseDescriptor(BaseModel):
    """A release as reported upstream, ready to be stored.

    ``created_at`` is kept exactly as GitHub reported it.
    """
    tag_name: str
    name: str
    download_url: str
    created_at: str
    zip_asset_url: str | None = None


class Release(BaseModel):
    """Full release record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tag_name: str
    name: str
    download_url: str
    created_at: datetime
    zip_asset_url: str | None = None


class WebhookAck(BaseModel):
    """Response of ``POST /webhook/release``."""
    success: bool = True
    message: str


class WebhookOutcome(BaseModel):
    """Result of handling one verified webhook delivery."""
    applied: bool
    message: str
    release: Release | None = None
