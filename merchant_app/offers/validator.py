"""
Offer Validator

Field-level validation of a candidate offer before create/update.
Returns a mapping of field name to message; an empty mapping means valid.
"""

import logging
from typing import Any, Dict, Optional, Union

from .config import OfferConfig
from .tiers import BaseOffer, COUPON, PERCENT, tier_index

logger = logging.getLogger(__name__)

INVALID_PERCENTAGE = "invalid percentage"
INVALID_FIXED_AMOUNT = "invalid fixed amount"
INVALID_DISCOUNT_TYPE = "invalid discount type"
INVALID_FOLLOWER_TIER = "invalid follower tier"
START_DATE_REQUIRED = "start date required"
END_BEFORE_START = "end date before start date"
TITLE_REQUIRED = "title required"


def _as_int(value: Any) -> Optional[int]:
    """Accept ints and integral floats; reject bools, strings and fractions."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


class OfferValidator:
    """Validates discount, date and title fields of an offer."""

    def __init__(self, config: OfferConfig):
        self.config = config

    def validate(self, offer: Union[BaseOffer, Dict[str, Any]]) -> Dict[str, str]:
        if isinstance(offer, dict):
            offer = BaseOffer.from_dict(offer)

        errors: Dict[str, str] = {}

        if offer.discount_type == PERCENT:
            if not self._valid_percentage(offer.discount_value):
                errors["discount_value"] = INVALID_PERCENTAGE
        elif offer.discount_type == COUPON:
            if not self._valid_fixed_amount(offer.discount_value):
                errors["discount_value"] = INVALID_FIXED_AMOUNT
        else:
            errors["discount_type"] = INVALID_DISCOUNT_TYPE

        if tier_index(offer.min_followers) == -1:
            errors["min_followers"] = INVALID_FOLLOWER_TIER

        if self.config.require_title and not (offer.title or "").strip():
            errors["title"] = TITLE_REQUIRED

        if self.config.require_start_date and not offer.start_at:
            errors["start_at"] = START_DATE_REQUIRED

        # ISO dates compare correctly as strings
        if offer.start_at and offer.end_at and offer.start_at > offer.end_at:
            errors["end_at"] = END_BEFORE_START

        if errors:
            logger.debug(f"Offer rejected: {errors}")
        return errors

    def _valid_percentage(self, value: Any) -> bool:
        number = _as_int(value)
        if number is None:
            return False
        return (
            self.config.percent_min <= number <= self.config.percent_max
            and number % self.config.percent_multiple == 0
        )

    def _valid_fixed_amount(self, value: Any) -> bool:
        number = _as_int(value)
        if number is None:
            return False
        return number >= self.config.coupon_min
