"""Persist parsed products in paced batches."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass
from itertools import islice

from storefront.config import settings
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.services.importer.mapper import RowFailure
from storefront.services.storage.document_store import DocumentStore

logger = logging.getLogger(__name__)

PRODUCTS_COLLECTION = "products"
CATEGORIES_COLLECTION = "categories"

ImportItem = Product | RowFailure


@dataclass
class ImportReport:
    """Running counters for one import run."""

    imported: int = 0
    skipped: int = 0
    errors: int = 0

    @property
    def total(self) -> int:
        return self.imported + self.skipped + self.errors


def _chunks(items: Iterable[ImportItem], size: int) -> Iterator[list[ImportItem]]:
    iterator = iter(items)
    while chunk := list(islice(iterator, size)):
        yield chunk


class ProductImporter:
    """Writes products one document at a time, pausing between batches.

    The pause bounds the write rate against the store's quota. Batches are
    not atomic: a failing row is counted and the run continues.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        batch_size: int | None = None,
        batch_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.store = store
        self.batch_size = max(1, batch_size or settings.IMPORT_BATCH_SIZE)
        self.batch_delay = (
            settings.IMPORT_BATCH_DELAY_SECONDS if batch_delay is None else batch_delay
        )
        self._sleep = sleep

    async def import_products(self, products: Iterable[ImportItem]) -> ImportReport:
        report = ImportReport()
        for batch_number, batch in enumerate(_chunks(products, self.batch_size), start=1):
            if batch_number > 1 and self.batch_delay > 0:
                await self._sleep(self.batch_delay)
            logger.info("Processing batch %s (%s rows)", batch_number, len(batch))
            for product in batch:
                await self._import_one(product, report)

        logger.info(
            "Import completed",
            extra={
                "imported": report.imported,
                "skipped": report.skipped,
                "errors": report.errors,
            },
        )
        return report

    async def _import_one(self, product: ImportItem, report: ImportReport) -> None:
        if isinstance(product, RowFailure):
            report.errors += 1
            return
        if not product.title or not product.sku:
            logger.info("Skipping product without title or SKU: %s", product.sku)
            report.skipped += 1
            return
        if not product.published:
            logger.info("Skipping unpublished product %s", product.sku)
            report.skipped += 1
            return

        try:
            doc_id = await self.store.add(PRODUCTS_COLLECTION, product.to_document())
        except Exception as exc:
            report.errors += 1
            logger.error("Error importing %s: %s", product.sku, exc)
            return

        report.imported += 1
        logger.info("Imported %s (%s) as %s", product.title, product.sku, doc_id)


def slugify(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


async def seed_categories(store: DocumentStore) -> dict[str, int]:
    """Create brand, year and key-type categories for imported products.

    Categories whose ``(type, slug)`` already exists are left alone.
    """
    brands: dict[str, None] = {}
    years: dict[str, None] = {}
    key_types: dict[str, None] = {}
    for _, product in await store.stream(PRODUCTS_COLLECTION):
        if product.get("brand"):
            brands.setdefault(product["brand"], None)
        if product.get("year"):
            years.setdefault(str(product["year"]), None)
        if product.get("keyType"):
            key_types.setdefault(product["keyType"], None)

    existing = {
        (category.get("type"), category.get("slug"))
        for _, category in await store.stream(CATEGORIES_COLLECTION)
    }

    candidates = [
        Category(
            name=brand,
            slug=slugify(brand),
            description=f"{brand} car keys and remotes",
            type="brand",
            sort_order=1,
        )
        for brand in brands
    ]
    candidates += [
        Category(
            name=year,
            slug=year,
            description=f"Car keys for {year} models",
            type="year",
            sort_order=2,
        )
        for year in years
    ]
    candidates += [
        Category(
            name=key_type,
            slug=slugify(key_type),
            description=f"{key_type} type car keys",
            type="type",
            sort_order=3,
        )
        for key_type in key_types
    ]

    created = {"brand": 0, "year": 0, "type": 0}
    for category in candidates:
        if (category.type, category.slug) in existing:
            continue
        await store.add(CATEGORIES_COLLECTION, category.to_document())
        created[category.type] += 1

    logger.info(
        "Created %s brand categories, %s year categories, and %s key type categories",
        created["brand"],
        created["year"],
        created["type"],
    )
    return created
