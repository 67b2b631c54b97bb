"""
Offer API Routes

Offer listing, validation, scaling preview, bulk creation and edits for the
authenticated merchant.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from ..deps import get_current_merchant, get_offer_service
from ..merchants import is_suspended
from .service import OfferService, OfferValidationError
from .store import OfferNotFoundError, OfferStoreError
from .tiers import BaseOffer, tiers_as_dicts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/offers", tags=["offers"])


# ============================================
# Request/Response Models
# ============================================

class OfferPayload(BaseModel):
    discount_type: str = "percent"
    discount_value: int = 10
    min_followers: int = 1000
    start_at: Optional[str] = None
    end_at: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None

    def to_base_offer(self) -> BaseOffer:
        return BaseOffer.from_dict(self.model_dump())


class CreateOffersRequest(OfferPayload):
    # Follower thresholds of the ladder entries the merchant kept selected
    selected_tiers: List[int] = []


class UpdateOfferRequest(OfferPayload):
    # A full replacement: the create-form defaults must not overwrite stored values
    discount_type: str
    discount_value: int
    min_followers: int
    is_active: Optional[bool] = None


# ============================================
# Helpers
# ============================================

def _ensure_active(merchant: Dict[str, Any]) -> None:
    if is_suspended(merchant):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Merchant account is suspended"
        )


def _validation_failed(e: OfferValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": "Offer validation failed", "errors": e.errors},
    )


def _store_failed(action: str, e: OfferStoreError) -> HTTPException:
    if isinstance(e, OfferNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    logger.error(f"Failed to {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(e)}"
    )


# ============================================
# Endpoints
# ============================================

@router.get("/tiers")
async def list_tiers():
    """Follower tiers an offer can target."""
    return {"tiers": tiers_as_dicts()}


@router.get("")
async def list_offers(
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    service: OfferService = Depends(get_offer_service),
):
    """Merchant's non-deleted offers, highest tier first."""
    try:
        offers = service.store.list_offers(merchant["id"])
    except OfferStoreError as e:
        raise _store_failed("fetch offers", e)
    return {"offers": offers, "count": len(offers), "suspended": is_suspended(merchant)}


@router.post("/validate")
async def validate_offer(
    request: OfferPayload,
    editing: bool = False,
    service: OfferService = Depends(get_offer_service),
):
    """Field errors for a candidate offer; empty when valid."""
    errors = service.validate(request.to_base_offer(), editing=editing)
    return {"valid": not errors, "errors": errors}


@router.post("/scaling-preview")
async def scaling_preview(
    request: OfferPayload,
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    service: OfferService = Depends(get_offer_service),
):
    """Validate a base offer and return its higher-tier ladder for confirmation."""
    _ensure_active(merchant)
    try:
        preview = service.preview(request.to_base_offer(), merchant.get("name") or "")
    except OfferValidationError as e:
        raise _validation_failed(e)
    return preview.to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_offers(
    request: CreateOffersRequest,
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    service: OfferService = Depends(get_offer_service),
):
    """Insert the base offer plus the selected ladder entries in one call."""
    _ensure_active(merchant)
    try:
        created = service.create_offers(
            merchant["id"],
            merchant.get("name") or "",
            request.to_base_offer(),
            request.selected_tiers,
        )
    except OfferValidationError as e:
        raise _validation_failed(e)
    except OfferStoreError as e:
        raise _store_failed("create offers", e)

    return {"offers": created, "count": len(created)}


@router.put("/{offer_id}")
async def update_offer(
    offer_id: int,
    request: UpdateOfferRequest,
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    service: OfferService = Depends(get_offer_service),
):
    _ensure_active(merchant)
    try:
        offer = service.update_offer(
            merchant["id"], offer_id, request.model_dump(exclude_none=False)
        )
    except OfferValidationError as e:
        raise _validation_failed(e)
    except OfferStoreError as e:
        raise _store_failed("update offer", e)
    return {"offer": offer}


@router.post("/{offer_id}/toggle")
async def toggle_offer(
    offer_id: int,
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    service: OfferService = Depends(get_offer_service),
):
    """Flip an offer between active and inactive."""
    _ensure_active(merchant)
    try:
        offer = service.toggle_status(merchant["id"], offer_id)
    except OfferStoreError as e:
        raise _store_failed("update offer status", e)
    return {"offer": offer, "is_active": offer.get("is_active")}


@router.delete("/{offer_id}")
async def delete_offer(
    offer_id: int,
    merchant: Dict[str, Any] = Depends(get_current_merchant),
    service: OfferService = Depends(get_offer_service),
):
    """Soft delete: the row stays, flagged deleted."""
    _ensure_active(merchant)
    try:
        service.delete_offer(merchant["id"], offer_id)
    except OfferStoreError as e:
        raise _store_failed("delete offer", e)
    return {"success": True, "id": offer_id}
