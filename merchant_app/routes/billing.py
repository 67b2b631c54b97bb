"""
Billing Routes

GET  /api/billing/metrics - Month-to-date redemptions and charges
POST /api/billing/actions - Ask the billing webhook for a checkout/portal URL
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from postgrest.exceptions import APIError
from pydantic import BaseModel
from supabase import Client

from ..billing import (
    TOP_UP,
    TOP_UP_AMOUNTS,
    build_billing_metrics,
    fetch_redemptions,
    start_of_month,
    validate_billing_action,
)
from ..deps import get_current_merchant, get_supabase, get_webhooks
from ..offers import OfferStore, OfferStoreError
from ..webhooks import BILLING_WEBHOOK, WebhookRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/billing", tags=["billing"])


class BillingActionRequest(BaseModel):
    type: str
    quantity: Optional[int] = None


@router.get("/metrics")
async def billing_metrics(
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    client: Client = Depends(get_supabase),
):
    today = datetime.now(timezone.utc).date()
    try:
        offer_ids = OfferStore(client).offer_ids(merchant["id"])
        redemptions = fetch_redemptions(client, offer_ids, since=start_of_month(today))
    except (OfferStoreError, APIError) as e:
        logger.exception(f"Error fetching billing data for merchant {merchant['id']}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load billing data"
        )

    metrics = build_billing_metrics(
        (row.get("redeemed_at") for row in redemptions["rows"]),
        today,
        total=redemptions["count"],
    )
    payload = metrics.to_dict()
    payload["top_up_amounts"] = list(TOP_UP_AMOUNTS)
    payload["balance_cents"] = merchant.get("balance_cents") or 0
    return payload


@router.post("/actions")
async def billing_action(
    request: BillingActionRequest,
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    webhooks: WebhookRegistry = Depends(get_webhooks),
):
    """The billing workflow is external; we only relay the URL it returns."""
    if not merchant.get("owner_user_id"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Merchant has no owner user"
        )

    error = validate_billing_action(request.type, request.quantity)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    payload: Dict[str, Any] = {"type": request.type, "user_id": merchant["owner_user_id"]}
    if request.type == TOP_UP:
        payload["quantity"] = request.quantity

    result = await webhooks.call(BILLING_WEBHOOK, payload)
    if not result.success:
        logger.error(f"Billing webhook failed for merchant {merchant['id']}: {result.error}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=result.error or "Webhook call failed"
        )

    url = result.data.get("url") if isinstance(result.data, dict) else None
    if not url:
        logger.warning(f"Webhook response missing URL: {result.data}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Billing provider did not return a URL"
        )
    return {"url": url}
