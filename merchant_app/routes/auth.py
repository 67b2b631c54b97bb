"""
Auth Routes

POST /api/auth/signup  - Create a merchant account (Supabase auth user)
POST /api/auth/login   - Email/password sign-in, returns session tokens
POST /api/auth/logout  - Revoke the current session
GET  /api/auth/session - Verified token claims plus merchant profile
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel
from supabase import Client

from ..deps import get_auth_client, get_supabase, get_webhooks, verify_token
from ..merchants import get_merchant_profile
from ..security import (
    LOGIN_ATTEMPT,
    LOGIN_FAILURE,
    LOGIN_LIMIT,
    LOGIN_SUCCESS,
    SIGNUP,
    SIGNUP_LIMIT,
    SUSPICIOUS_ACTIVITY,
    limiter,
    security_auditor,
)
from ..storage import resolve_logo_preview
from ..validation import (
    normalize_vat_number,
    validate_business_name,
    validate_email,
    validate_password,
    validate_vat_number,
)
from ..webhooks import SIGNUP_WEBHOOK, WebhookRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# --- Pydantic Models ---

class SignupRequest(BaseModel):
    email: str
    password: str
    confirm_password: str
    name: str
    legal_name: str
    vat_number: Optional[str] = None
    address: str
    preferred_language: Optional[str] = "en"


class LoginRequest(BaseModel):
    email: str
    password: str


def signup_errors(data: SignupRequest) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    for field, result in (
        ("email", validate_email(data.email)),
        ("password", validate_password(data.password)),
        ("name", validate_business_name(data.name)),
        ("vat_number", validate_vat_number(data.vat_number)),
    ):
        if not result.is_valid:
            errors[field] = result.error

    if not data.confirm_password:
        errors["confirm_password"] = "Please confirm your password"
    elif data.password and data.password != data.confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    if not data.legal_name.strip():
        errors["legal_name"] = "This field is required"
    if not data.address.strip():
        errors["address"] = "This field is required"

    return errors


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


# --- Routes ---

@router.post("/signup", status_code=status.HTTP_201_CREATED)
@limiter.limit(SIGNUP_LIMIT)
async def signup(
    request: Request,
    data: SignupRequest,
    auth_client: Client = Depends(get_auth_client),
    webhooks: WebhookRegistry = Depends(get_webhooks),
):
    """
    Only creates the auth user; public.users and merchants rows are created
    by database triggers from the user metadata.
    """
    errors = signup_errors(data)
    if errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Please fix the highlighted fields", "errors": errors},
        )

    email = data.email.strip().lower()
    metadata = {
        "role": "merchant",
        "name": data.name.strip(),
        "legal_name": data.legal_name.strip(),
        "vat_number": normalize_vat_number(data.vat_number) if data.vat_number else None,
        "address": data.address.strip(),
        "preferred_language": data.preferred_language,
    }

    try:
        response = auth_client.auth.sign_up({
            "email": email,
            "password": data.password,
            "options": {"data": metadata},
        })
    except Exception as e:
        logger.error(f"Signup failed for {email}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e) or "Account could not be created"
        )

    user_id = response.user.id if response.user else None
    security_auditor.log_event(SIGNUP, user_id=user_id, email=email, ip=_client_ip(request))

    result = await webhooks.call(SIGNUP_WEBHOOK, {"email": email, "user_id": user_id, **metadata})
    if not result.success:
        logger.warning(f"Signup webhook failed for {email}: {result.error}")

    return {
        "user_id": user_id,
        "email": email,
        "confirmation_required": response.session is None,
    }


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    data: LoginRequest,
    auth_client: Client = Depends(get_auth_client),
):
    email = data.email.strip().lower()
    ip = _client_ip(request)

    security_auditor.log_event(LOGIN_ATTEMPT, email=email, ip=ip)
    if security_auditor.detect_suspicious_activity(email=email):
        security_auditor.log_event(SUSPICIOUS_ACTIVITY, email=email, ip=ip)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts. Please try again later."
        )

    try:
        response = auth_client.auth.sign_in_with_password({"email": email, "password": data.password})
    except Exception as e:
        security_auditor.log_event(LOGIN_FAILURE, email=email, ip=ip, details={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    session = response.session
    user = response.user
    if session is None or user is None:
        security_auditor.log_event(LOGIN_FAILURE, email=email, ip=ip)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    security_auditor.log_event(LOGIN_SUCCESS, user_id=user.id, email=email, ip=ip)
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_at": session.expires_at,
        "token_type": "bearer",
        "user": {"id": user.id, "email": user.email},
    }


@router.post("/logout")
async def logout(
    user: Dict[str, Any] = Depends(verify_token),
    client: Client = Depends(get_supabase),
):
    try:
        client.auth.admin.sign_out(user["token"])
    except Exception as e:
        logger.error(f"Sign out failed for {user['user_id']}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to sign out"
        )
    return {"success": True}


@router.get("/session")
async def session(
    user: Dict[str, Any] = Depends(verify_token),
    client: Client = Depends(get_supabase),
):
    merchant = get_merchant_profile(client, user["user_id"])
    if merchant:
        merchant = {**merchant, "logo_signed_url": resolve_logo_preview(client, merchant.get("logo_url"))}
    return {
        "user": {"id": user["user_id"], "email": user["email"], "role": user["role"]},
        "merchant": merchant,
    }
