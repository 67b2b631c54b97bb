"""
Offer Tier Scaler

Derives the ladder of higher-tier variants of a base offer. Each tier above
the base tier raises the discount by a fixed step: +percent_step points for
percent offers, +base value for coupon offers (capped at coupon_max_discount).
"""

import logging
from typing import List, Union, Dict, Any

from .config import OfferConfig
from .tiers import BaseOffer, COUPON, FOLLOWER_TIERS, ScalingOffer, tier_index
from .titles import generate_title

logger = logging.getLogger(__name__)


class OfferTierScaler:
    """Computes scaling ladders. Assumes the base offer already passed validation."""

    def __init__(self, config: OfferConfig):
        self.config = config

    def step_value(self, base: BaseOffer, tier_steps: int) -> int:
        """Discount value for a tier `tier_steps` above the base tier."""
        if base.discount_type == COUPON:
            # The increment is the base amount itself, not a fixed constant
            value = base.discount_value + tier_steps * base.discount_value
            return min(value, self.config.coupon_max_discount)

        value = base.discount_value + tier_steps * self.config.percent_step
        return min(value, self.config.percent_max)

    def compute_scaling_ladder(
        self, base_offer: Union[BaseOffer, Dict[str, Any]], merchant_display_name: str
    ) -> List[ScalingOffer]:
        if isinstance(base_offer, dict):
            base_offer = BaseOffer.from_dict(base_offer)

        base_index = tier_index(base_offer.min_followers)
        if base_index == -1 or base_index == len(FOLLOWER_TIERS) - 1:
            return []

        ladder: List[ScalingOffer] = []
        for index in range(base_index + 1, len(FOLLOWER_TIERS)):
            value = self.step_value(base_offer, index - base_index)
            ladder.append(
                ScalingOffer(
                    min_followers=FOLLOWER_TIERS[index].value,
                    discount_value=value,
                    title=generate_title(
                        base_offer.discount_type,
                        value,
                        merchant_display_name,
                        currency=self.config.currency,
                        free_threshold=self.config.coupon_max_discount,
                    ),
                )
            )

        logger.debug(
            f"Scaling ladder for {base_offer.discount_type} {base_offer.discount_value} "
            f"at {base_offer.min_followers}+: {len(ladder)} tiers"
        )
        return ladder
