"""
Follower tiers and the offer model shared by the validator and the scaler.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple

PERCENT = "percent"
COUPON = "coupon"
DISCOUNT_TYPES = (PERCENT, COUPON)


@dataclass(frozen=True)
class FollowerTier:
    label: str
    value: int


FOLLOWER_TIERS: Tuple[FollowerTier, ...] = (
    FollowerTier("500+", 500),
    FollowerTier("1,000+", 1000),
    FollowerTier("2,000+", 2000),
    FollowerTier("5,000+", 5000),
    FollowerTier("10,000+", 10000),
    FollowerTier("20,000+", 20000),
    FollowerTier("50,000+", 50000),
    FollowerTier("100,000+", 100000),
)

TIER_VALUES: Tuple[int, ...] = tuple(tier.value for tier in FOLLOWER_TIERS)


def tier_index(min_followers: int) -> int:
    """Position of a threshold in FOLLOWER_TIERS, or -1 if it is not a tier."""
    try:
        return TIER_VALUES.index(min_followers)
    except ValueError:
        return -1


@dataclass
class BaseOffer:
    """An offer as entered by the merchant, before tier scaling."""

    discount_type: str
    discount_value: int
    min_followers: int = 1000
    start_at: Optional[str] = None
    end_at: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BaseOffer":
        return cls(
            discount_type=data.get("discount_type", PERCENT),
            discount_value=data.get("discount_value", 0),
            min_followers=data.get("min_followers", 1000),
            start_at=data.get("start_at") or None,
            end_at=data.get("end_at") or None,
            title=data.get("title"),
            description=data.get("description"),
        )


@dataclass
class ScalingOffer:
    """A derived higher-tier variant of a base offer."""

    min_followers: int
    discount_value: int
    title: str
    selected: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def tiers_as_dicts() -> List[Dict[str, Any]]:
    return [{"label": tier.label, "value": tier.value} for tier in FOLLOWER_TIERS]
