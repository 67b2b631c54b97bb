"""
FastAPI dependencies: settings, Supabase client, token verification and
the current merchant.
"""

import logging
from typing import Any, Dict

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt import PyJWTError
from supabase import Client

from .config import Settings, get_settings
from .merchants import get_merchant_profile
from .offers import OfferService, OfferStore, get_config
from .supabase_client import create_auth_client, get_client
from .webhooks import WebhookRegistry

logger = logging.getLogger(__name__)


def get_supabase() -> Client:
    client = get_client()
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Supabase is not configured"
        )
    return client


def verify_token(
    authorization: str = Header(None),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """
    Verify Supabase JWT token and return user data.
    Expects Authorization header: "Bearer <token>"
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header"
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization format. Use: Bearer <token>"
        )

    token = authorization[len("Bearer "):]

    if not settings.supabase_jwt_secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Supabase JWT secret not configured"
        )

    try:
        payload = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience="authenticated"
        )
    except PyJWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid or expired token: {str(e)}"
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID"
        )

    return {
        "user_id": user_id,
        "email": payload.get("email"),
        "role": (payload.get("user_metadata") or {}).get("role"),
        "payload": payload,
        "token": token,
    }


def get_current_merchant(
    user: Dict[str, Any] = Depends(verify_token),
    client: Client = Depends(get_supabase),
) -> Dict[str, Any]:
    merchant = get_merchant_profile(client, user["user_id"])
    if not merchant:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Merchant profile not found"
        )
    return merchant


def get_offer_service(client: Client = Depends(get_supabase)) -> OfferService:
    return OfferService(get_config(), OfferStore(client))


def get_auth_client(settings: Settings = Depends(get_settings)) -> Client:
    try:
        return create_auth_client(settings)
    except RuntimeError as e:
        logger.error(f"Cannot create Supabase auth client: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Supabase auth is not configured"
        )


def get_webhooks(settings: Settings = Depends(get_settings)) -> WebhookRegistry:
    return WebhookRegistry.from_settings(settings)
