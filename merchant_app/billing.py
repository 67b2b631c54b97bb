"""
Billing and subscription metrics.

Merchants are charged a flat amount per redemption; the billing page shows
month-to-date totals and a per-day series from the 1st up to today.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

logger = logging.getLogger(__name__)

CHARGE_PER_REDEMPTION = 1
TOP_UP_AMOUNTS = (50, 100, 200)
ENDS_SOON_WINDOW = timedelta(days=7)

MANAGE_SUBSCRIPTION = "manage subscription"
REACTIVATE_SUBSCRIPTION = "reactivate subscription"
NEW_SUBSCRIPTION = "new subscription"
TOP_UP = "top-up"
BILLING_ACTIONS = (MANAGE_SUBSCRIPTION, REACTIVATE_SUBSCRIPTION, NEW_SUBSCRIPTION, TOP_UP)

# PostgREST caps rows per response; redemptions are read in pages of this size
REDEMPTIONS_PAGE_SIZE = 1000

_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    normalized = value.replace("Z", "+00:00")
    # PostgREST trims trailing zeros; fromisoformat before 3.11 wants 3 or 6 digits
    normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized, count=1)
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def start_of_month(today: date) -> datetime:
    return datetime(today.year, today.month, 1, tzinfo=timezone.utc)


@dataclass
class DailyChargePoint:
    date: str
    redemptions: int
    charges: int


@dataclass
class BillingMetrics:
    monthly_redemptions: int = 0
    monthly_charges: int = 0
    daily_series: List[DailyChargePoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthly_redemptions": self.monthly_redemptions,
            "monthly_charges": self.monthly_charges,
            "charge_per_redemption": CHARGE_PER_REDEMPTION,
            "daily_series": [vars(point) for point in self.daily_series],
        }


def build_billing_metrics(
    redeemed_at: Iterable[Optional[str]], today: date, total: Optional[int] = None
) -> BillingMetrics:
    """Aggregate month-to-date redemption timestamps into per-day charges."""
    counts = Counter()
    seen = 0
    for value in redeemed_at:
        seen += 1
        parsed = parse_timestamp(value)
        if parsed is None:
            continue
        counts[parsed.date().isoformat()] += 1

    series = []
    for day in range(1, today.day + 1):
        key = date(today.year, today.month, day).isoformat()
        series.append(DailyChargePoint(key, counts[key], counts[key] * CHARGE_PER_REDEMPTION))

    monthly = total if total is not None else seen
    return BillingMetrics(
        monthly_redemptions=monthly,
        monthly_charges=monthly * CHARGE_PER_REDEMPTION,
        daily_series=series,
    )


@dataclass
class SubscriptionSummary:
    status: str
    renewal_date: Optional[str]
    has_payment_method: bool
    subscription_ended: bool
    subscription_ends_soon: bool


def summarize_subscription(merchant: Dict[str, Any], now: datetime) -> SubscriptionSummary:
    valid_until = parse_timestamp(merchant.get("subscription_valid_until"))
    ended = bool(valid_until and valid_until < now)
    ends_soon = bool(valid_until and valid_until >= now and valid_until - now <= ENDS_SOON_WINDOW)
    return SubscriptionSummary(
        status=merchant.get("subscription_status") or "inactive",
        renewal_date=merchant.get("subscription_valid_until"),
        has_payment_method=bool(merchant.get("stripe_customer_id")),
        subscription_ended=ended,
        subscription_ends_soon=ends_soon,
    )


def _redemptions_page(
    client: Client, offer_ids: List[int], since: Optional[datetime], start: int, end: int
):
    query = (
        client.table("redemptions")
        .select("id, redeemed_at, offer_claims!inner(offer_id)", count="exact")
        .in_("offer_claims.offer_id", offer_ids)
    )
    if since is not None:
        query = query.gte("redeemed_at", since.isoformat())
    try:
        return query.order("id").range(start, end).execute()
    except APIError as e:
        logger.error(f"Failed to fetch redemptions: {e}")
        raise


def fetch_redemptions(
    client: Client,
    offer_ids: List[int],
    since: Optional[datetime] = None,
    with_rows: bool = True,
) -> Dict[str, Any]:
    """
    Redemptions of claims on the given offers, with an exact count.

    Rows are read page by page until the exact count is reached. With
    `with_rows=False` only the count is requested.
    """
    if not offer_ids:
        return {"rows": [], "count": 0}

    if not with_rows:
        response = _redemptions_page(client, offer_ids, since, 0, 0)
        count = response.count if response.count is not None else len(response.data or [])
        return {"rows": [], "count": count}

    rows: List[Dict[str, Any]] = []
    count: Optional[int] = None
    start = 0
    while True:
        end = start + REDEMPTIONS_PAGE_SIZE - 1
        response = _redemptions_page(client, offer_ids, since, start, end)
        page = response.data or []
        rows.extend(page)
        if count is None:
            count = response.count
        if len(page) < REDEMPTIONS_PAGE_SIZE or (count is not None and len(rows) >= count):
            break
        start += REDEMPTIONS_PAGE_SIZE

    return {"rows": rows, "count": count if count is not None else len(rows)}


def validate_billing_action(action: str, quantity: Optional[int]) -> Optional[str]:
    if action not in BILLING_ACTIONS:
        return f"Unknown billing action: {action}"
    if action == TOP_UP:
        if not quantity or quantity <= 0:
            return "Top-up amount must be positive"
        if quantity not in TOP_UP_AMOUNTS:
            return f"Top-up amount must be one of {', '.join(str(a) for a in TOP_UP_AMOUNTS)}"
    return None
