"""Catalog navigation categories derived from imported products."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import Field

from storefront.models.product import DocumentModel

CategoryType = Literal["brand", "year", "type"]


class Category(DocumentModel):
    name: str
    slug: str
    description: str = ""
    type: CategoryType
    sort_order: int = 0
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
