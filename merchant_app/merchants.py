"""
Merchant and user row lookups.

public.users rows are linked to Supabase auth users through auth_user_id;
merchants are owned by a public.users row through owner_user_id.
"""

import logging
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

logger = logging.getLogger(__name__)

SUSPENDED = "suspended"


def _first(rows: Optional[List[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
    return rows[0] if rows else None


def get_user_record(client: Client, auth_user_id: str) -> Optional[Dict[str, Any]]:
    try:
        response = (
            client.table("users")
            .select("*")
            .eq("auth_user_id", auth_user_id)
            .limit(1)
            .execute()
        )
    except APIError as e:
        logger.error(f"Failed to fetch user record for {auth_user_id}: {e}")
        return None
    return _first(response.data)


def get_merchant_profile(client: Client, auth_user_id: str) -> Optional[Dict[str, Any]]:
    user_row = get_user_record(client, auth_user_id)
    if not user_row:
        return None

    try:
        response = (
            client.table("merchants")
            .select("*")
            .eq("owner_user_id", user_row["id"])
            .limit(1)
            .execute()
        )
    except APIError as e:
        logger.error(f"Failed to fetch merchant for user {user_row['id']}: {e}")
        return None
    return _first(response.data)


def update_merchant(client: Client, merchant_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
    response = client.table("merchants").update(fields).eq("id", merchant_id).execute()
    return _first(response.data) or {}


def is_suspended(merchant: Dict[str, Any]) -> bool:
    return merchant.get("subscription_status") == SUSPENDED
