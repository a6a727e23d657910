"""SKU lookups used by the product editor.

Uniqueness is only checked here; product writes do not enforce it.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from storefront.services.storage.document_store import DocumentStore, StoreDependency

PRODUCTS_COLLECTION = "products"
PREVIEW_SIZE = 10


class CatalogService:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def is_sku_available(self, sku: str) -> bool:
        return not await self.store.where(PRODUCTS_COLLECTION, "sku", "==", sku)

    async def numeric_skus(self) -> list[int]:
        """Distinct numeric SKUs in ascending order."""
        skus: set[int] = set()
        for _, product in await self.store.stream(PRODUCTS_COLLECTION):
            try:
                skus.add(int(str(product.get("sku", "")).strip()))
            except ValueError:
                continue
        return sorted(skus)

    async def next_available_sku(self) -> tuple[int, list[int]]:
        """Return the first gap in the numeric SKU sequence starting at 1.

        Also returns the first few existing numeric SKUs for display.
        """
        existing = await self.numeric_skus()
        next_sku = 1
        for sku in existing:
            if sku != next_sku:
                break
            next_sku += 1
        return next_sku, existing[:PREVIEW_SIZE]


def get_catalog_service(store: StoreDependency) -> CatalogService:
    """FastAPI dependency factory."""
    return CatalogService(store)


CatalogDependency = Annotated[CatalogService, Depends(get_catalog_service)]
