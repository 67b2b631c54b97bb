"""
Offer Store

Thin wrapper over the Supabase `offers` table.
"""

import logging
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

logger = logging.getLogger(__name__)

OFFERS_TABLE = "offers"


class OfferStoreError(Exception):
    """Raised when Supabase rejects an offer read or write."""


class OfferNotFoundError(OfferStoreError):
    """No offer row matched the id for this merchant."""


class OfferStore:
    """Offer persistence scoped to one merchant."""

    def __init__(self, client: Client):
        self.client = client

    def list_offers(self, merchant_id: int) -> List[Dict[str, Any]]:
        try:
            response = (
                self.client.table(OFFERS_TABLE)
                .select("*")
                .eq("merchant_id", merchant_id)
                .eq("deleted", False)
                .order("min_followers", desc=True)
                .execute()
            )
        except APIError as e:
            logger.error(f"Failed to fetch offers for merchant {merchant_id}: {e}")
            raise OfferStoreError(str(e)) from e
        return response.data or []

    def get_offer(self, merchant_id: int, offer_id: int) -> Optional[Dict[str, Any]]:
        try:
            response = (
                self.client.table(OFFERS_TABLE)
                .select("*")
                .eq("id", offer_id)
                .eq("merchant_id", merchant_id)
                .eq("deleted", False)
                .execute()
            )
        except APIError as e:
            logger.error(f"Failed to fetch offer {offer_id}: {e}")
            raise OfferStoreError(str(e)) from e
        rows = response.data or []
        return rows[0] if rows else None

    def insert_offers(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if not records:
            return []
        try:
            response = self.client.table(OFFERS_TABLE).insert(records).execute()
        except APIError as e:
            logger.error(f"Failed to insert {len(records)} offers: {e}")
            raise OfferStoreError(str(e)) from e
        logger.info(f"Inserted {len(records)} offers for merchant {records[0].get('merchant_id')}")
        return response.data or []

    def update_offer(self, merchant_id: int, offer_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = (
                self.client.table(OFFERS_TABLE)
                .update(fields)
                .eq("id", offer_id)
                .eq("merchant_id", merchant_id)
                .execute()
            )
        except APIError as e:
            logger.error(f"Failed to update offer {offer_id}: {e}")
            raise OfferStoreError(str(e)) from e

        rows = response.data or []
        if not rows:
            raise OfferNotFoundError(f"Offer {offer_id} not found")
        return rows[0]

    def soft_delete(self, merchant_id: int, offer_id: int) -> Dict[str, Any]:
        return self.update_offer(merchant_id, offer_id, {"deleted": True})

    def count_active(self, merchant_id: int) -> int:
        try:
            response = (
                self.client.table(OFFERS_TABLE)
                .select("id", count="exact")
                .eq("merchant_id", merchant_id)
                .eq("is_active", True)
                .eq("deleted", False)
                .execute()
            )
        except APIError as e:
            logger.error(f"Failed to count active offers for merchant {merchant_id}: {e}")
            raise OfferStoreError(str(e)) from e
        return response.count or 0

    def offer_ids(self, merchant_id: int) -> List[int]:
        try:
            response = (
                self.client.table(OFFERS_TABLE)
                .select("id")
                .eq("merchant_id", merchant_id)
                .execute()
            )
        except APIError as e:
            logger.error(f"Failed to list offer ids for merchant {merchant_id}: {e}")
            raise OfferStoreError(str(e)) from e
        return [row["id"] for row in (response.data or [])]
