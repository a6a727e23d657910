"""Turn spreadsheet rows into product documents."""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TextIO

from storefront.models.product import Dimensions, Product
from storefront.services.importer.classifier import (
    VehicleClassifier,
    default_classifier,
)
from storefront.services.importer.schemas import ATTRIBUTE_SLOTS, VendorSchema

logger = logging.getLogger(__name__)


def read_attributes(row: Mapping[str, str | None]) -> list[tuple[str, str]]:
    """Collect the ``Attribute {i} name`` / ``Attribute {i} value(s)`` pairs."""
    pairs: list[tuple[str, str]] = []
    for index in ATTRIBUTE_SLOTS:
        name = row.get(f"Attribute {index} name")
        value = row.get(f"Attribute {index} value(s)")
        if not isinstance(name, str) or not isinstance(value, str):
            continue
        if name.strip() and value.strip():
            pairs.append((name.strip(), value.strip()))
    return pairs


def map_row(
    row: Mapping[str, str | None],
    schema: VendorSchema,
    classifier: VehicleClassifier = default_classifier,
) -> Product:
    """Map one vendor row to a :class:`Product`.

    Every recognized column has a default, so this never fails on missing or
    empty cells.
    """
    values = schema.read_fields(row)
    dimensions = Dimensions(
        length=values.pop("length", ""),
        width=values.pop("width", ""),
        height=values.pop("height", ""),
    )

    in_stock = schema.in_stock.read(row)
    categories = schema.categories.read(row)
    vehicle_types = classifier.vehicle_types(categories)
    compatibility = classifier.compatibility(vehicle_types, read_attributes(row))

    product = Product(
        **values,
        dimensions=dimensions,
        categories=categories,
        status="active" if in_stock else "out-of-stock",
        availability="in-stock" if in_stock else "out-of-stock",
        vehicle_types=vehicle_types,
        selected_compatibility=compatibility,
        published=schema.published.read(row) if schema.published else True,
    )

    if schema.infer_from_text:
        info = classifier.vehicle_info(product.title, product.description)
        product.brand = info.brand
        product.manufacturer = info.brand
        product.year = info.year
        product.key_type = info.key_type
        if (
            product.sale_price
            and product.regular_price
            and product.sale_price != product.regular_price
        ):
            product.old_price = product.regular_price

    return product


@dataclass(frozen=True)
class RowFailure:
    """Placeholder yielded for a row that could not be mapped."""

    line_number: int
    error: str


def iter_products(
    stream: TextIO,
    schema: VendorSchema,
    classifier: VehicleClassifier = default_classifier,
) -> Iterator[Product | RowFailure]:
    """Lazily yield one product per data row, in source order.

    A row that fails to map yields a :class:`RowFailure` instead, so the
    rows after it are still read. The generator consumes ``stream``;
    re-open the source to start over.
    """
    reader = csv.DictReader(stream)
    for line_number, row in enumerate(reader, start=2):
        try:
            product = map_row(row, schema, classifier)
        except Exception as exc:
            logger.error("Could not map row %s: %s", line_number, exc)
            yield RowFailure(line_number=line_number, error=str(exc))
            continue
        logger.debug(
            "Parsed row %s into product %s",
            line_number,
            product.sku or "<no sku>",
        )
        yield product
