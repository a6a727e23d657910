"""Command-line entry points for the spreadsheet importers."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from storefront.services.importer.classifier import default_classifier
from storefront.services.importer.mapper import iter_products
from storefront.services.importer.pipeline import (
    ImportReport,
    ProductImporter,
    seed_categories,
)
from storefront.services.importer.schemas import (
    CATALOG_SCHEMA,
    WOOCOMMERCE_SCHEMA,
    VendorSchema,
)
from storefront.services.storage.document_store import (
    DocumentStore,
    close_redis_client,
    create_document_store,
)

logger = logging.getLogger(__name__)


def parse_args(prog: str, argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Import products from a vendor CSV export into the catalog",
    )
    parser.add_argument("csv_path", nargs="?", help="Path to the CSV file")
    return parser.parse_args(argv)


async def run_import(
    csv_path: Path,
    schema: VendorSchema,
    store: DocumentStore,
    *,
    importer: ProductImporter | None = None,
) -> ImportReport:
    """Parse ``csv_path`` with ``schema`` and persist the products."""
    importer = importer or ProductImporter(store)
    with csv_path.open(newline="", encoding="utf-8-sig") as stream:
        report = await importer.import_products(
            iter_products(stream, schema, default_classifier)
        )

    if report.total == 0:
        logger.info("No products found in CSV file")
        return report

    if schema.infer_from_text:
        logger.info("Creating categories from imported products")
        await seed_categories(store)
    return report


async def _import_with_store(csv_path: Path, schema: VendorSchema) -> ImportReport:
    try:
        return await run_import(csv_path, schema, create_document_store())
    finally:
        await close_redis_client()


def _main(prog: str, schema: VendorSchema, argv: list[str] | None) -> int:
    args = parse_args(prog, argv)
    if not args.csv_path:
        logger.error("Please provide the CSV file path as an argument")
        print(f"Usage: {prog} <path-to-csv-file>")
        return 1

    csv_path = Path(args.csv_path)
    if not csv_path.is_file():
        logger.error("CSV file not found: %s", csv_path)
        return 1

    logger.info("Reading CSV file: %s (schema=%s)", csv_path, schema.name)
    try:
        report = asyncio.run(_import_with_store(csv_path, schema))
    except Exception:
        logger.exception("Import failed")
        return 1

    print("Import completed!")
    print(f"Successfully imported: {report.imported} products")
    print(f"Skipped: {report.skipped} products")
    print(f"Errors: {report.errors} products")
    return 0


def import_products_main(argv: list[str] | None = None) -> int:
    """``import-products <csv>``: generic catalog export."""
    return _main("import-products", CATALOG_SCHEMA, argv)


def import_woocommerce_main(argv: list[str] | None = None) -> int:
    """``import-woocommerce-products <csv>``: WooCommerce export."""
    return _main("import-woocommerce-products", WOOCOMMERCE_SCHEMA, argv)


if __name__ == "__main__":
    raise SystemExit(import_products_main())
