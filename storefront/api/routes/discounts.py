"""Routes that apply or remove a discount across the catalog."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from storefront.errors import InternalError, StorefrontError
from storefront.models.discount import DiscountRequest
from storefront.services.discounts.engine import EngineDependency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/apply-discount", tags=["discounts"])


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    summary="Apply a discount to its products and categories",
)
async def apply_discount(payload: DiscountRequest, engine: EngineDependency) -> dict:
    """Recompute sale prices for every product the discount targets."""

    try:
        result = await engine.apply(payload.discount_id)
    except StorefrontError:
        raise
    except Exception as exc:
        logger.exception("Error applying discount %s", payload.discount_id)
        raise InternalError("Failed to apply discount") from exc

    return {
        "success": True,
        "message": f"Discount applied to {result.updated_count} products successfully",
        "updatedCount": result.updated_count,
        "discountInfo": result.discount.model_dump(),
    }


@router.delete(
    "",
    status_code=status.HTTP_200_OK,
    summary="Remove a discount and restore original prices",
)
async def remove_discount(payload: DiscountRequest, engine: EngineDependency) -> dict:
    """Revert every product currently carrying this discount."""

    try:
        result = await engine.revert(payload.discount_id)
    except StorefrontError:
        raise
    except Exception as exc:
        logger.exception("Error removing discount %s", payload.discount_id)
        raise InternalError("Failed to remove discount") from exc

    if result.updated_count == 0:
        message = "No products found with this discount"
    else:
        message = f"Discount removed from {result.updated_count} products successfully"
    return {"success": True, "message": message, "updatedCount": result.updated_count}
