"""Product catalog documents."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Base for models persisted as camelCase JSON documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class CompatibilityEntry(DocumentModel):
    """Heuristically inferred vehicle fitment for a key or remote."""

    vehicle_type: str = "Car"
    brand: str = ""
    model: str = ""
    year_start: str = ""
    year_end: str = ""
    key_types: list[str] = Field(default_factory=list)


class TechnicalSpecs(DocumentModel):
    """Key-specific attributes; free-form and not validated."""

    fcc_id: str = ""
    can: str = ""
    frequency: str = ""
    battery_type: str = ""
    chip_type: str = ""
    test_blade: str = ""
    buttons: list[str] = Field(default_factory=list)
    button_count: int = 1
    emergency_key_included: bool = False
    aftermarket: bool = True
    reusable: bool = False
    cloneable: bool = False


class Dimensions(DocumentModel):
    length: str = ""
    width: str = ""
    height: str = ""


class DiscountInfo(DocumentModel):
    """Snapshot of the discount that produced a product's sale price."""

    discount_id: str
    discount_name: str = ""
    discount_type: str
    discount_value: float
    original_price: str = Field(
        ..., description="Price before the discount, restored on removal"
    )
    discounted_price: str
    discount_amount: str
    applied_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    valid_until: datetime | None = None


class Product(DocumentModel):
    """Canonical catalog entity as stored in the ``products`` collection."""

    title: str = ""
    sku: str = ""
    part_number: str = ""
    manufacturer: str = ""
    short_description: str = ""
    description: str = ""
    category: str = ""
    category_id: str | None = None
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    price: str = ""
    regular_price: str | None = None
    sale_price: str | None = None
    old_price: str | None = None
    discount_info: DiscountInfo | None = None

    stock: int = 0
    low_stock_amount: int = 5
    status: Literal["active", "out-of-stock"] = "active"
    availability: Literal["in-stock", "out-of-stock"] = "in-stock"
    visibility: Literal["visible", "hidden"] = "visible"
    is_featured: bool = False
    allow_reviews: bool = False
    published: bool = True

    technical_specs: TechnicalSpecs = Field(default_factory=TechnicalSpecs)
    is_oem: bool = False
    is_aftermarket: bool = True
    aftermarket_part_number: str = ""

    vehicle_types: list[str] = Field(default_factory=list)
    selected_compatibility: list[CompatibilityEntry] = Field(default_factory=list)
    vehicle_type: str = ""
    brand: str = ""
    year: int | None = None
    key_type: str = ""

    weight: str = ""
    dimensions: Dimensions = Field(default_factory=Dimensions)
    images: list[str] = Field(default_factory=list)
    shipping_class: str = ""
    purchase_note: str = ""

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class SkuAvailability(BaseModel):
    """Response body for GET /check-sku."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_available: bool
    message: str


class NextSku(BaseModel):
    """Response body for GET /next-available-sku."""

    model_config = ConfigDict(populate_by_name=True)

    next_sku: int = Field(..., alias="nextSKU")
    existing_skus: list[int] = Field(default_factory=list, alias="existingSKUs")
