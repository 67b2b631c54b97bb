"""
Offer Service

Glue between the pure validator/scaler and the Supabase offer store:
validate, preview the scaling ladder, then bulk-insert the confirmed offers.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .config import OfferConfig
from .scaler import OfferTierScaler
from .store import OfferNotFoundError, OfferStore
from .tiers import BaseOffer, ScalingOffer
from .titles import generate_description, generate_title
from .validator import OfferValidator

logger = logging.getLogger(__name__)


class OfferValidationError(Exception):
    """Carries the field errors of a rejected offer."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__(", ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


@dataclass
class ScalingPreview:
    """Result of validating a base offer and computing its ladder."""

    base_title: str
    base_description: str
    ladder: List[ScalingOffer] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_title": self.base_title,
            "base_description": self.base_description,
            "ladder": [offer.to_dict() for offer in self.ladder],
            "can_scale": bool(self.ladder),
        }


class OfferService:
    """Offer create/update workflow for one merchant at a time."""

    def __init__(self, config: OfferConfig, store: OfferStore):
        self.config = config
        self.store = store
        self.validator = OfferValidator(config)
        self.edit_validator = OfferValidator(config.for_edit_form())
        self.scaler = OfferTierScaler(config)

    def validate(self, offer: BaseOffer, editing: bool = False) -> Dict[str, str]:
        validator = self.edit_validator if editing else self.validator
        return validator.validate(offer)

    def _title(self, offer: BaseOffer, value: int, merchant_name: str) -> str:
        return generate_title(
            offer.discount_type,
            value,
            merchant_name,
            currency=self.config.currency,
            free_threshold=self.config.coupon_max_discount,
        )

    def _description(self, offer: BaseOffer, value: int) -> str:
        return generate_description(
            offer.discount_type,
            value,
            currency=self.config.currency,
            free_threshold=self.config.coupon_max_discount,
        )

    def preview(self, base: BaseOffer, merchant_name: str) -> ScalingPreview:
        errors = self.validate(base)
        if errors:
            raise OfferValidationError(errors)

        return ScalingPreview(
            base_title=self._title(base, base.discount_value, merchant_name),
            base_description=self._description(base, base.discount_value),
            ladder=self.scaler.compute_scaling_ladder(base, merchant_name),
        )

    def build_records(
        self,
        merchant_id: int,
        merchant_name: str,
        base: BaseOffer,
        ladder: Iterable[ScalingOffer] = (),
    ) -> List[Dict[str, Any]]:
        """Insert payloads for the base offer plus every selected ladder entry."""

        def record(min_followers: int, value: int, title: str, description: str) -> Dict[str, Any]:
            return {
                "merchant_id": merchant_id,
                "title": title,
                "description": description,
                "discount_type": base.discount_type,
                "discount_value": value,
                "min_followers": min_followers,
                "start_at": base.start_at or None,
                "end_at": base.end_at or None,
                "is_active": True,
            }

        records = [
            record(
                base.min_followers,
                base.discount_value,
                (base.title or "").strip() or self._title(base, base.discount_value, merchant_name),
                base.description or self._description(base, base.discount_value),
            )
        ]
        for offer in ladder:
            if not offer.selected:
                continue
            records.append(
                record(
                    offer.min_followers,
                    offer.discount_value,
                    offer.title,
                    self._description(base, offer.discount_value),
                )
            )
        return records

    def create_offers(
        self,
        merchant_id: int,
        merchant_name: str,
        base: BaseOffer,
        selected_tiers: Optional[Iterable[int]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Validate and insert the base offer together with the confirmed ladder.

        The ladder is recomputed here; `selected_tiers` lists the follower
        thresholds the merchant kept checked. None or empty means base only.
        """
        errors = self.validate(base)
        if errors:
            raise OfferValidationError(errors)

        selected = set(selected_tiers or ())
        ladder = self.scaler.compute_scaling_ladder(base, merchant_name)
        for offer in ladder:
            offer.selected = offer.min_followers in selected

        records = self.build_records(merchant_id, merchant_name, base, ladder)
        created = self.store.insert_offers(records)
        logger.info(f"Merchant {merchant_id} created {len(records)} offer(s)")
        return created

    def update_offer(self, merchant_id: int, offer_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        offer = BaseOffer.from_dict(data)
        errors = self.validate(offer, editing=True)
        if errors:
            raise OfferValidationError(errors)

        fields = {
            "title": (offer.title or "").strip(),
            "description": offer.description or None,
            "discount_type": offer.discount_type,
            "discount_value": offer.discount_value,
            "min_followers": offer.min_followers,
            "start_at": offer.start_at or None,
            "end_at": offer.end_at or None,
        }
        if data.get("is_active") is not None:
            fields["is_active"] = bool(data["is_active"])
        return self.store.update_offer(merchant_id, offer_id, fields)

    def toggle_status(self, merchant_id: int, offer_id: int) -> Dict[str, Any]:
        current = self.store.get_offer(merchant_id, offer_id)
        if current is None:
            raise OfferNotFoundError(f"Offer {offer_id} not found")
        return self.store.update_offer(
            merchant_id, offer_id, {"is_active": not current.get("is_active", False)}
        )

    def delete_offer(self, merchant_id: int, offer_id: int) -> Dict[str, Any]:
        deleted = self.store.soft_delete(merchant_id, offer_id)
        logger.info(f"Merchant {merchant_id} deleted offer {offer_id}")
        return deleted
