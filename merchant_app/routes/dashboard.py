"""
Dashboard Routes

GET /api/dashboard/stats - Offer, redemption and subscription overview
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from postgrest.exceptions import APIError
from supabase import Client

from ..billing import fetch_redemptions, start_of_month, summarize_subscription
from ..deps import get_current_merchant, get_supabase
from ..offers import OfferStore, OfferStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats(
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    client: Client = Depends(get_supabase),
):
    now = datetime.now(timezone.utc)
    store = OfferStore(client)

    try:
        active_offers = store.count_active(merchant["id"])
        offer_ids = store.offer_ids(merchant["id"])
        total = fetch_redemptions(client, offer_ids, with_rows=False)["count"]
        monthly = fetch_redemptions(
            client, offer_ids, since=start_of_month(now.date()), with_rows=False
        )["count"]
    except (OfferStoreError, APIError) as e:
        logger.exception(f"Failed to load dashboard stats for merchant {merchant['id']}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load dashboard stats"
        )

    subscription = summarize_subscription(merchant, now)
    return {
        "active_offers": active_offers,
        "total_redemptions": total,
        "monthly_redemptions": monthly,
        "subscription_status": subscription.status,
        "renewal_date": subscription.renewal_date,
        "has_payment_method": subscription.has_payment_method,
        "subscription_ended": subscription.subscription_ended,
        "subscription_ends_soon": subscription.subscription_ends_soon,
    }
