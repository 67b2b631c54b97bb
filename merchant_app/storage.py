"""
Supabase Storage helpers for merchant logos.
"""

import logging
import time
import uuid
from typing import Dict, Optional

from supabase import Client

logger = logging.getLogger(__name__)

MERCHANT_BUCKET = "merchant-logos"
SIGNED_URL_TTL_SECONDS = 60 * 60
ALLOWED_LOGO_TYPES = {"image/png", "image/jpeg", "image/webp", "image/svg+xml", "image/gif"}
MAX_LOGO_BYTES = 5 * 1024 * 1024


class StorageError(Exception):
    """Raised when an upload or signed URL request fails."""


def extract_file_extension(filename: Optional[str]) -> Optional[str]:
    parts = [p for p in (filename or "").split(".") if p]
    return parts[-1].lower() if len(parts) > 1 else None


def build_logo_path(merchant_id: int, filename: Optional[str], now_ms: Optional[int] = None) -> str:
    extension = extract_file_extension(filename) or "png"
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{merchant_id}/{timestamp}-{uuid.uuid4()}.{extension}"


def get_merchant_logo_url(client: Client, path: str, expires_in: int = SIGNED_URL_TTL_SECONDS) -> str:
    try:
        data = client.storage.from_(MERCHANT_BUCKET).create_signed_url(path, expires_in)
    except Exception as e:
        logger.error(f"Failed to sign logo URL for {path}: {e}")
        raise StorageError(str(e)) from e

    # Key name differs between storage client versions
    signed = (data.get("signedURL") or data.get("signedUrl")) if isinstance(data, dict) else None
    if not signed:
        raise StorageError(f"No signed URL returned for {path}")
    return signed


def upload_merchant_logo(
    client: Client,
    merchant_id: int,
    content: bytes,
    filename: Optional[str],
    content_type: Optional[str] = None,
) -> Dict[str, str]:
    """Upload a logo and return its storage path and a signed URL."""
    path = build_logo_path(merchant_id, filename)
    extension = path.rsplit(".", 1)[-1]

    try:
        client.storage.from_(MERCHANT_BUCKET).upload(
            path,
            content,
            {
                "cache-control": "3600",
                "upsert": "true",
                "content-type": content_type or f"image/{extension}",
            },
        )
    except Exception as e:
        logger.error(f"Logo upload failed for merchant {merchant_id}: {e}")
        raise StorageError(str(e)) from e

    logger.info(f"Uploaded logo for merchant {merchant_id} to {path}")
    return {"path": path, "signed_url": get_merchant_logo_url(client, path)}


def resolve_logo_preview(client: Client, logo_url: Optional[str]) -> Optional[str]:
    """Signed URL for a stored path; absolute URLs are returned unchanged."""
    if not logo_url:
        return None
    if logo_url.startswith("http"):
        return logo_url
    try:
        return get_merchant_logo_url(client, logo_url)
    except StorageError:
        return None
