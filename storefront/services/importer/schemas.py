"""Declarative column mappings for the supported vendor spreadsheet exports.

Each schema maps a product field to one or more source columns. The first
column with a non-empty value wins; otherwise the field default applies.
Columns not named here are ignored.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

TRUE_SENTINEL = "1"
ATTRIBUTE_SLOTS = range(1, 16)


def as_flag(value: str) -> bool:
    return value.strip() == TRUE_SENTINEL


def as_int(value: str) -> int:
    try:
        return int(float(value.strip()))
    except (ValueError, OverflowError):
        return 0


def as_decimal_text(value: str) -> str:
    """Keep numeric text as written; non-numbers collapse to ``""``."""
    text = value.strip()
    try:
        float(text)
    except ValueError:
        return ""
    return text


def as_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass(frozen=True)
class Column:
    """Source column(s) for one product field."""

    names: tuple[str, ...]
    default: Any = ""
    convert: Callable[[str], Any] | None = None

    def read(self, row: Mapping[str, str | None]) -> Any:
        for name in self.names:
            raw = row.get(name)
            if raw is None or not str(raw).strip():
                continue
            raw = str(raw)
            return self.convert(raw) if self.convert else raw.strip()
        return self.default() if callable(self.default) else self.default


def column(*names: str, default: Any = "", convert: Callable[[str], Any] | None = None) -> Column:
    return Column(names=names, default=default, convert=convert)


@dataclass(frozen=True)
class VendorSchema:
    """Column layout of one vendor export plus schema-level behaviour."""

    name: str
    fields: dict[str, Column]
    in_stock: Column
    categories: Column
    published: Column | None = None
    fixed_values: dict[str, Any] = field(default_factory=dict)
    infer_from_text: bool = False

    def read_fields(self, row: Mapping[str, str | None]) -> dict[str, Any]:
        values = {name: col.read(row) for name, col in self.fields.items()}
        values.update(self.fixed_values)
        return values


CATALOG_SCHEMA = VendorSchema(
    name="catalog",
    fields={
        "title": column("Name"),
        "sku": column("SKU"),
        "part_number": column("SKU"),
        "aftermarket_part_number": column("SKU"),
        "price": column("Regular price", "Sale price"),
        "stock": column("Stock", default=0, convert=as_int),
        "low_stock_amount": column("Low stock amount", default=5, convert=as_int),
        "is_featured": column("Is featured?", default=False, convert=as_flag),
        "visibility": column(
            "Visibility in catalog",
            default="visible",
            convert=lambda v: "hidden" if v.strip() == "hidden" else "visible",
        ),
        "short_description": column("Short description"),
        "description": column("Description"),
        "weight": column("Weight (kg)"),
        "length": column("Length (cm)"),
        "width": column("Width (cm)"),
        "height": column("Height (cm)"),
        "allow_reviews": column("Allow customer reviews?", default=False, convert=as_flag),
        "purchase_note": column("Purchase note"),
        "tags": column("Tags", default=list, convert=as_list),
        "shipping_class": column("Shipping class"),
    },
    in_stock=column("In stock?", default=False, convert=as_flag),
    categories=column("Categories", default=list, convert=as_list),
)

WOOCOMMERCE_SCHEMA = VendorSchema(
    name="woocommerce",
    fields={
        "title": column("Name"),
        "sku": column("SKU"),
        "part_number": column("SKU"),
        "price": column("Sale price", "Sale_price", "Regular price", "Regular_price", default="0"),
        "sale_price": column("Sale price", "Sale_price", default=None, convert=as_decimal_text),
        "regular_price": column(
            "Regular price", "Regular_price", default=None, convert=as_decimal_text
        ),
        "description": column("Description", "Short description"),
        "short_description": column("Short description"),
        "stock": column("Stock", default=0, convert=as_int),
        "low_stock_amount": column("Low stock amount", default=5, convert=as_int),
        "is_featured": column("Is featured?", default=False, convert=as_flag),
        "visibility": column(
            "Visibility in catalog",
            default="hidden",
            convert=lambda v: "visible" if v.strip() == "visible" else "hidden",
        ),
        "weight": column("Weight (kg)"),
        "length": column("Length (cm)"),
        "width": column("Width (cm)"),
        "height": column("Height (cm)"),
        "allow_reviews": column("Allow customer reviews?", default=False, convert=as_flag),
        "purchase_note": column("Purchase note"),
        "tags": column("Tags", default=list, convert=as_list),
        "shipping_class": column("Shipping class"),
        "images": column("Images", default=list, convert=as_list),
    },
    in_stock=column("In stock?", default=False, convert=as_flag),
    categories=column("Categories", default=list, convert=as_list),
    published=column("Published", default=False, convert=as_flag),
    fixed_values={"category": "Car Keys", "vehicle_type": "Car"},
    infer_from_text=True,
)

SCHEMAS: dict[str, VendorSchema] = {
    CATALOG_SCHEMA.name: CATALOG_SCHEMA,
    WOOCOMMERCE_SCHEMA.name: WOOCOMMERCE_SCHEMA,
}
