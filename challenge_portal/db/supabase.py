"""Supabase client construction.

``create_supabase`` builds the client once at application start-up; the
client is then passed explicitly to the registry and the release cache.
"""

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from challenge_portal.core.config import Settings

# Failures raised by the fluent ``table(...).execute()`` chain: PostgREST
# error responses and transport errors from the underlying httpx session.
STORE_ERRORS: tuple[type[Exception], ...] = (APIError, httpx.HTTPError)


def create_supabase(settings: Settings) -> Client:
    """Return a Supabase client for *settings*."""
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
