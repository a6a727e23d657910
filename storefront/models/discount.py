"""Discount definitions and the apply/remove API schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from storefront.models.product import DocumentModel


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    BUY_X_GET_Y = "buy_x_get_y"


class Discount(DocumentModel):
    """Document stored in the ``discounts`` collection.

    ``type`` stays a plain string so that documents written with an unknown
    type can still be loaded; the engine skips products for such discounts.
    """

    name: str = ""
    type: str
    value: float = 0
    active: bool = False
    has_start_date: bool = False
    start_date: datetime | None = None
    has_end_date: bool = False
    end_date: datetime | None = None
    applicable_products: list[str] = Field(default_factory=list)
    applicable_categories: list[str] = Field(default_factory=list)
    used_count: int = 0

    @field_validator("start_date", "end_date")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def has_started(self, now: datetime) -> bool:
        """An unset start flag means the lower bound is not checked."""
        if not self.has_start_date or self.start_date is None:
            return True
        return self.start_date <= now

    def has_expired(self, now: datetime) -> bool:
        if not self.has_end_date or self.end_date is None:
            return False
        return self.end_date < now


class DiscountRequest(BaseModel):
    """Body of POST and DELETE /apply-discount."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    discount_id: str = Field(..., min_length=1)


class AppliedDiscountSummary(BaseModel):
    name: str
    type: str
    value: float


class ApplyDiscountResult(BaseModel):
    """Outcome of applying a discount across its target set."""

    updated_count: int = Field(..., ge=0)
    discount: AppliedDiscountSummary


class RevertDiscountResult(BaseModel):
    """Outcome of removing a discount from every product carrying it."""

    updated_count: int = Field(..., ge=0)
