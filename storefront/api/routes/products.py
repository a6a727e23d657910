"""Routes backing the product editor's SKU checks."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Query

from storefront.errors import InternalError
from storefront.models.product import NextSku, SkuAvailability
from storefront.services.catalog import CatalogDependency

logger = logging.getLogger(__name__)

router = APIRouter(tags=["products"])


@router.get(
    "/check-sku",
    response_model=SkuAvailability,
    summary="Check whether a SKU is already used by a product",
)
async def check_sku(
    sku: Annotated[str, Query(min_length=1)],
    catalog: CatalogDependency,
) -> SkuAvailability:
    try:
        available = await catalog.is_sku_available(sku)
    except Exception as exc:
        logger.exception("Error checking SKU %s", sku)
        raise InternalError("Failed to check SKU") from exc

    logger.debug("SKU %s available=%s", sku, available)
    return SkuAvailability(
        is_available=available,
        message="SKU is available" if available else "SKU already exists",
    )


@router.get(
    "/next-available-sku",
    response_model=NextSku,
    summary="Suggest the lowest unused numeric SKU",
)
async def next_available_sku(catalog: CatalogDependency) -> NextSku:
    try:
        next_sku, existing = await catalog.next_available_sku()
    except Exception as exc:
        logger.exception("Error finding next available SKU")
        raise InternalError("Failed to find next available SKU") from exc

    return NextSku(next_sku=next_sku, existing_skus=existing)
