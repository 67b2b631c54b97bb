"""
Offers Module - offer validation, follower-tier scaling and persistence.

The validator and scaler are pure; the store and service talk to Supabase.
"""

from .config import OfferConfig
from .tiers import BaseOffer, FollowerTier, ScalingOffer, FOLLOWER_TIERS, PERCENT, COUPON
from .validator import OfferValidator
from .scaler import OfferTierScaler
from .store import OfferStore, OfferStoreError, OfferNotFoundError
from .service import OfferService, OfferValidationError, ScalingPreview

# Singleton instances
_config: OfferConfig = None


def get_config() -> OfferConfig:
    """Get or create the offer config."""
    global _config
    if _config is None:
        _config = OfferConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next call re-reads the environment."""
    global _config
    _config = None


def validate(offer, config: OfferConfig = None):
    """Field errors for a candidate offer (empty dict when valid)."""
    return OfferValidator(config or get_config()).validate(offer)


def compute_scaling_ladder(base_offer, merchant_display_name: str, config: OfferConfig = None):
    """Higher-tier variants of a base offer, ascending by tier."""
    return OfferTierScaler(config or get_config()).compute_scaling_ladder(
        base_offer, merchant_display_name
    )


__all__ = [
    'OfferConfig',
    'BaseOffer',
    'FollowerTier',
    'ScalingOffer',
    'FOLLOWER_TIERS',
    'PERCENT',
    'COUPON',
    'OfferValidator',
    'OfferTierScaler',
    'OfferStore',
    'OfferStoreError',
    'OfferNotFoundError',
    'OfferService',
    'OfferValidationError',
    'ScalingPreview',
    'get_config',
    'reset_config',
    'validate',
    'compute_scaling_ladder',
]
