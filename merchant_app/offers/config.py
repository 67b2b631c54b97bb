"""
Offer Configuration

Configuration dataclass with environment variable loading.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class OfferConfig:
    """Configuration for offer validation and tier scaling."""

    # Form variants
    require_start_date: bool = True
    require_title: bool = False

    # Percent rule
    percent_min: int = 5
    percent_max: int = 100
    percent_multiple: int = 5
    percent_step: int = 10

    # Coupon rule
    coupon_min: int = 1
    coupon_max_discount: int = 150  # At or above this the offer reads as "free"

    currency: str = "EUR"

    @classmethod
    def from_env(cls) -> "OfferConfig":
        """Create config from environment variables."""
        return cls(
            require_start_date=_env_flag("OFFER_REQUIRE_START_DATE", "true"),
            require_title=_env_flag("OFFER_REQUIRE_TITLE", "false"),
            percent_step=int(os.getenv("OFFER_PERCENT_STEP", "10")),
            coupon_max_discount=int(os.getenv("OFFER_COUPON_MAX_DISCOUNT", "150")),
            currency=os.getenv("OFFER_CURRENCY", "EUR").upper(),
        )

    def for_edit_form(self) -> "OfferConfig":
        """Variant used when editing an existing offer: title required, start date optional."""
        return OfferConfig(
            require_start_date=False,
            require_title=True,
            percent_min=self.percent_min,
            percent_max=self.percent_max,
            percent_multiple=self.percent_multiple,
            percent_step=self.percent_step,
            coupon_min=self.coupon_min,
            coupon_max_discount=self.coupon_max_discount,
            currency=self.currency,
        )
