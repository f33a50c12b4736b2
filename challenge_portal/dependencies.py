"""Service wiring and FastAPI dependencies.

``build_services`` constructs every component once from ``Settings``; the
resulting ``Services`` bundle lives on ``app.state`` and route handlers pull
individual components from it through ``Depends``.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from fastapi import Depends, Request
from supabase import Client

from challenge_portal.core.config import Settings
from challenge_portal.db.supabase import create_supabase
from challenge_portal.services.candidates import CandidateRegistry
from challenge_portal.services.downloads import DownloadOrchestrator
from challenge_portal.services.github import GitHubReleaseProvider
from challenge_portal.services.invitations import InvitationService
from challenge_portal.services.mailer import InviteMailer
from challenge_portal.services.releases import ReleaseCache
from challenge_portal.services.webhook import WebhookIngestor


@dataclass
class Services:
    settings: Settings
    supabase: Client
    candidates: CandidateRegistry
    releases: ReleaseCache
    downloads: DownloadOrchestrator
    webhooks: WebhookIngestor
    invitations: InvitationService


def build_services(
    settings: Settings,
    supabase: Client | None = None,
    http_client: httpx.Client | None = None,
) -> Services:
    """Construct all components for *settings*.

    *supabase* and *http_client* default to real clients; tests pass fakes.
    """
    client = supabase if supabase is not None else create_supabase(settings)

    candidates = CandidateRegistry(client)
    releases = ReleaseCache(
        client,
        GitHubReleaseProvider.from_settings(settings, http_client=http_client),
    )
    mailer = InviteMailer.from_settings(settings, http_client=http_client)

    return Services(
        settings=settings,
        supabase=client,
        candidates=candidates,
        releases=releases,
        downloads=DownloadOrchestrator(candidates, releases),
        webhooks=WebhookIngestor(
            releases,
            secret=settings.GITHUB_WEBHOOK_SECRET,
            asset_marker=settings.RELEASE_ASSET_MARKER,
        ),
        invitations=InvitationService(candidates, mailer),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_candidate_registry(services: Services = Depends(get_services)) -> CandidateRegistry:
    return services.candidates


def get_release_cache(services: Services = Depends(get_services)) -> ReleaseCache:
    return services.releases


def get_download_orchestrator(services: Services = Depends(get_services)) -> DownloadOrchestrator:
    return services.downloads


def get_webhook_ingestor(services: Services = Depends(get_services)) -> WebhookIngestor:
    return services.webhooks


def get_invitation_service(services: Services = Depends(get_services)) -> InvitationService:
    return services.invitations
