"""Release cache endpoints: listing and manual resync.

``POST /releases/sync`` is the recovery path when a webhook delivery was
lost and the cache is stuck on an older release.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from challenge_portal.dependencies import get_release_cache
from challenge_portal.models.release import Release
from challenge_portal.services.releases import ReleaseCache

router = APIRouter()


@router.get("/releases", response_model=list[Release])
def list_releases(cache: ReleaseCache = Depends(get_release_cache)) -> list[Release]:
    return cache.list_all()


@router.post("/releases/sync", response_model=Release)
def sync_release(cache: ReleaseCache = Depends(get_release_cache)) -> Release:
    """Pull the latest release from GitHub and store it if its tag is new."""
    return cache.sync_latest()
