"""
Supabase client for the merchant backend.
Used for table access, auth calls and storage uploads.
"""

import logging
from typing import Optional

from supabase import create_client, Client

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

_client: Optional[Client] = None


def create_supabase(settings: Settings) -> Optional[Client]:
    """Build a service-role client, or None if Supabase is not configured."""
    key = settings.supabase_service_role_key or settings.supabase_anon_key
    if not (settings.supabase_url and key):
        logger.warning("SUPABASE_URL or Supabase key not set. Supabase client not initialized.")
        return None
    try:
        return create_client(settings.supabase_url, key)
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {e}")
        return None


def create_auth_client(settings: Settings) -> Client:
    """
    Fresh anon-key client for sign-up/sign-in calls.

    Signing in stores the session on the client, so these calls never use
    the shared service-role client.
    """
    if not (settings.supabase_url and settings.supabase_anon_key):
        raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY must be set for auth calls")
    return create_client(settings.supabase_url, settings.supabase_anon_key)


def get_client() -> Optional[Client]:
    """Get or create the shared Supabase client."""
    global _client
    if _client is None:
        _client = create_supabase(get_settings())
    return _client
