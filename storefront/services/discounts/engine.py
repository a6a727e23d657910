"""Apply and remove catalog-wide discounts as single atomic batches."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import Depends

from storefront.errors import InvalidStateError, NotFoundError, ValidationError
from storefront.models.discount import (
    AppliedDiscountSummary,
    ApplyDiscountResult,
    Discount,
    RevertDiscountResult,
)
from storefront.models.product import DiscountInfo
from storefront.services.discounts.pricing import (
    calculate_discount,
    format_price,
    parse_price,
)
from storefront.services.storage.document_store import DocumentStore, StoreDependency

logger = logging.getLogger(__name__)

DISCOUNTS_COLLECTION = "discounts"
PRODUCTS_COLLECTION = "products"


class DiscountEngine:
    """Recomputes sale prices for a discount's target set.

    Products carry a ``discountInfo`` snapshot so that removal can restore
    their original price without consulting the discount again.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def _load_discount(self, discount_id: str) -> Discount:
        document = await self.store.get(DISCOUNTS_COLLECTION, discount_id)
        if document is None:
            raise NotFoundError("Discount not found")
        return Discount.model_validate(document)

    async def resolve_targets(self, discount: Discount) -> list[str]:
        """Union of explicit product ids and products in the listed categories."""
        targets: dict[str, None] = dict.fromkeys(discount.applicable_products)
        if discount.applicable_categories:
            matches = await self.store.where(
                PRODUCTS_COLLECTION,
                "categoryId",
                "in",
                discount.applicable_categories,
            )
            for product_id, _ in matches:
                targets.setdefault(product_id, None)
        return list(targets)

    async def _fetch_products(self, product_ids: list[str]) -> list[tuple[str, dict[str, Any]]]:
        # One read per id: a stale id is skipped instead of failing the batch.
        products: list[tuple[str, dict[str, Any]]] = []
        for product_id in product_ids:
            document = await self.store.get(PRODUCTS_COLLECTION, product_id)
            if document is None:
                logger.info("Product %s not found, skipping", product_id)
                continue
            products.append((product_id, document))
        return products

    async def apply(self, discount_id: str) -> ApplyDiscountResult:
        discount = await self._load_discount(discount_id)
        if not discount.active:
            raise InvalidStateError("Discount is not active")

        now = datetime.now(UTC)
        if not discount.has_started(now):
            raise InvalidStateError("Discount has not started yet")
        if discount.has_expired(now):
            raise InvalidStateError("Discount has expired")

        target_ids = await self.resolve_targets(discount)
        if not target_ids:
            raise ValidationError("No products found to apply discount to")

        products = await self._fetch_products(target_ids)
        if not products:
            raise NotFoundError("No products found")

        batch = self.store.batch()
        updated_count = 0
        timestamp = now.isoformat()
        for product_id, product in products:
            current_price = parse_price(product.get("price"))
            if current_price <= 0:
                logger.info("Skipping product %s - no price", product_id)
                continue

            change = calculate_discount(current_price, discount.type, discount.value)
            if change is None:
                logger.info(
                    "Skipping product %s - unknown discount type: %s",
                    product_id,
                    discount.type,
                )
                continue

            # Keep the stored text so removal restores it exactly.
            raw_price = product.get("price")
            if not isinstance(raw_price, str):
                raw_price = format_price(current_price)
            info = DiscountInfo(
                discount_id=discount_id,
                discount_name=discount.name,
                discount_type=discount.type,
                discount_value=discount.value,
                original_price=raw_price,
                discounted_price=format_price(change.discounted),
                discount_amount=format_price(change.amount),
                applied_at=now,
                valid_until=discount.end_date,
            )
            batch.update(
                PRODUCTS_COLLECTION,
                product_id,
                {
                    "salePrice": info.discounted_price,
                    "regularPrice": format_price(current_price),
                    "discountInfo": info.to_document(),
                    "updatedAt": timestamp,
                },
            )
            updated_count += 1

        # Usage counter rides in the same transaction as the price changes.
        batch.update(
            DISCOUNTS_COLLECTION,
            discount_id,
            {"usedCount": discount.used_count + 1, "updatedAt": timestamp},
        )
        await batch.commit()

        logger.info(
            "Discount applied",
            extra={"discount_id": discount_id, "updated_count": updated_count},
        )
        return ApplyDiscountResult(
            updated_count=updated_count,
            discount=AppliedDiscountSummary(
                name=discount.name, type=discount.type, value=discount.value
            ),
        )

    async def revert(self, discount_id: str) -> RevertDiscountResult:
        """Restore original prices on every product carrying this discount.

        The discount's own ``active`` flag and ``usedCount`` are left as is.
        """
        await self._load_discount(discount_id)

        matches = await self.store.where(
            PRODUCTS_COLLECTION, "discountInfo.discountId", "==", discount_id
        )
        if not matches:
            return RevertDiscountResult(updated_count=0)

        batch = self.store.batch()
        timestamp = datetime.now(UTC).isoformat()
        for product_id, product in matches:
            batch.update(
                PRODUCTS_COLLECTION,
                product_id,
                {
                    "price": product["discountInfo"]["originalPrice"],
                    "salePrice": None,
                    "regularPrice": None,
                    "discountInfo": None,
                    "updatedAt": timestamp,
                },
            )
        await batch.commit()

        logger.info(
            "Discount removed",
            extra={"discount_id": discount_id, "updated_count": len(matches)},
        )
        return RevertDiscountResult(updated_count=len(matches))


def get_discount_engine(store: StoreDependency) -> DiscountEngine:
    """FastAPI dependency factory."""
    return DiscountEngine(store)


EngineDependency = Annotated[DiscountEngine, Depends(get_discount_engine)]
