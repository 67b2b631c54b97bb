"""
Profile Routes

GET  /api/profile      - Merchant profile with split street lines and logo URL
PUT  /api/profile      - Update business details
POST /api/profile/logo - Upload a new logo to storage
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from postgrest.exceptions import APIError
from pydantic import BaseModel
from supabase import Client

from ..deps import get_current_merchant, get_supabase
from ..merchants import update_merchant
from ..storage import (
    ALLOWED_LOGO_TYPES,
    MAX_LOGO_BYTES,
    StorageError,
    resolve_logo_preview,
    upload_merchant_logo,
)
from ..validation import (
    normalize_vat_number,
    sanitize_string,
    validate_business_name,
    validate_vat_number,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])


class ProfileUpdateRequest(BaseModel):
    name: str
    legal_name: Optional[str] = None
    vat_number: Optional[str] = None
    street_line1: str = ""
    street_line2: str = ""
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    contact_email: Optional[str] = None
    instagram_handle: Optional[str] = None
    logo_url: Optional[str] = None


def parse_street_lines(street: Optional[str]) -> Dict[str, str]:
    lines = [line.strip() for line in (street or "").split("\n") if line.strip()]
    return {
        "street_line1": lines[0] if lines else "",
        "street_line2": lines[1] if len(lines) > 1 else "",
    }


def merge_street_lines(line1: str, line2: str) -> Optional[str]:
    lines = [line.strip() for line in (line1, line2) if line and line.strip()]
    return "\n".join(lines) if lines else None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def build_profile_update(data: ProfileUpdateRequest, merchant: Dict[str, Any]) -> Dict[str, Any]:
    """Update payload; address columns are only written when the row has them."""
    fields: Dict[str, Any] = {
        "name": data.name.strip(),
        "legal_name": _blank_to_none(data.legal_name),
        "vat_number": normalize_vat_number(data.vat_number) if _blank_to_none(data.vat_number) else None,
        "logo_url": _blank_to_none(data.logo_url),
        "instagram_handle": sanitize_string(data.instagram_handle).lstrip("@") or None,
    }
    if "street" in merchant:
        fields["street"] = merge_street_lines(data.street_line1, data.street_line2)
    for column in ("city", "postal_code", "country", "contact_email"):
        if column in merchant:
            fields[column] = _blank_to_none(getattr(data, column))
    return fields


def _profile_view(client: Client, merchant: Dict[str, Any], email: Optional[str] = None) -> Dict[str, Any]:
    view = {**merchant, **parse_street_lines(merchant.get("street"))}
    if not view.get("contact_email") and email:
        view["contact_email"] = email
    view["logo_signed_url"] = resolve_logo_preview(client, merchant.get("logo_url"))
    return view


@router.get("")
async def get_profile(
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    client: Client = Depends(get_supabase),
):
    return {"profile": _profile_view(client, merchant)}


@router.put("")
async def update_profile(
    data: ProfileUpdateRequest,
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    client: Client = Depends(get_supabase),
):
    errors = {}
    name_check = validate_business_name(data.name)
    if not name_check.is_valid:
        errors["name"] = name_check.error
    vat_check = validate_vat_number(data.vat_number)
    if not vat_check.is_valid:
        errors["vat_number"] = vat_check.error
    if errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Please fix the highlighted fields", "errors": errors},
        )

    fields = build_profile_update(data, merchant)
    try:
        updated = update_merchant(client, merchant["id"], fields)
    except APIError as e:
        logger.error(f"Failed to update profile for merchant {merchant['id']}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update profile: {str(e)}"
        )

    return {"profile": _profile_view(client, {**merchant, **fields, **updated})}


@router.post("/logo")
async def upload_logo(
    file: UploadFile = File(...),
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    client: Client = Depends(get_supabase),
):
    content_type = file.content_type or ""
    if content_type and content_type not in ALLOWED_LOGO_TYPES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Unsupported logo type: {content_type}"
        )

    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Logo file is empty")
    if len(content) > MAX_LOGO_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Logo file too large. Max 5MB allowed."
        )

    try:
        uploaded = upload_merchant_logo(client, merchant["id"], content, file.filename, content_type or None)
        update_merchant(client, merchant["id"], {"logo_url": uploaded["path"]})
    except (StorageError, APIError) as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Logo upload failed: {str(e)}"
        )

    return {"logo_url": uploaded["path"], "logo_signed_url": uploaded["signed_url"]}
