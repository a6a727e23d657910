"""Vehicle metadata inference from free-text spreadsheet fields."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from storefront.models.product import CompatibilityEntry

KNOWN_BRANDS = (
    "Toyota", "Honda", "Ford", "Chevrolet", "BMW", "Mercedes", "Audi", "Nissan",
    "Hyundai", "Kia", "Mazda", "Subaru", "Volkswagen", "Volvo", "Lexus", "Acura",
    "Infiniti", "Buick", "Cadillac", "Chrysler", "Dodge", "Jeep", "Ram", "GMC",
)
KNOWN_KEY_TYPES = ("Transponder", "Remote", "Smart", "Fob", "Keyless", "Chip")
VEHICLE_TYPE_KEYWORDS = (("car", "Car"), ("truck", "Truck"), ("suv", "SUV"))

_YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")


@dataclass(frozen=True)
class VehicleInfo:
    """Best guess of brand, year and key type from a product's text."""

    brand: str = ""
    year: int | None = None
    key_type: str = ""


class VehicleClassifier(ABC):
    """Strategy used by the row mapper to infer vehicle metadata."""

    @abstractmethod
    def vehicle_types(self, categories: Sequence[str]) -> list[str]:
        """Return vehicle types mentioned by the product categories."""

    @abstractmethod
    def compatibility(
        self,
        vehicle_types: Sequence[str],
        attributes: Sequence[tuple[str, str]],
    ) -> list[CompatibilityEntry]:
        """Build compatibility entries from ``(name, value)`` attribute pairs."""

    @abstractmethod
    def vehicle_info(self, name: str, description: str) -> VehicleInfo:
        """Extract brand, year and key type from product text."""


class KeywordVehicleClassifier(VehicleClassifier):
    """Case-insensitive substring matching; a heuristic, not a parser."""

    def __init__(
        self,
        brands: Sequence[str] = KNOWN_BRANDS,
        key_types: Sequence[str] = KNOWN_KEY_TYPES,
    ) -> None:
        self._brands = tuple(brands)
        self._key_types = tuple(key_types)

    def vehicle_types(self, categories: Sequence[str]) -> list[str]:
        found: list[str] = []
        for category in categories:
            lowered = category.lower()
            for keyword, label in VEHICLE_TYPE_KEYWORDS:
                if keyword in lowered and label not in found:
                    found.append(label)
        return found

    def compatibility(
        self,
        vehicle_types: Sequence[str],
        attributes: Sequence[tuple[str, str]],
    ) -> list[CompatibilityEntry]:
        brands: list[str] = []
        models: list[str] = []
        years: list[str] = []
        for name, value in attributes:
            lowered = name.lower()
            values = _split(value)
            if "brand" in lowered or "make" in lowered:
                brands.extend(values)
            if "model" in lowered and not models:
                models = values
            if "year" in lowered and not years:
                years = values

        if not vehicle_types:
            return []

        # One entry per brand; model and years are shared, never cross-multiplied.
        entries = [
            CompatibilityEntry(vehicle_type=vehicle_types[0], brand=brand)
            for brand in brands
        ]
        for entry in entries:
            if models and not entry.model:
                entry.model = models[0]
            if len(years) >= 2:
                entry.year_start = years[0]
                entry.year_end = years[-1]
        return entries

    def vehicle_info(self, name: str, description: str) -> VehicleInfo:
        haystacks = [text for text in (name, description) if text]
        return VehicleInfo(
            brand=self._first_keyword(self._brands, haystacks),
            year=_first_year(haystacks),
            key_type=self._first_keyword(self._key_types, haystacks),
        )

    @staticmethod
    def _first_keyword(keywords: Sequence[str], haystacks: Sequence[str]) -> str:
        lowered = [text.lower() for text in haystacks]
        for keyword in keywords:
            if any(keyword.lower() in text for text in lowered):
                return keyword
        return ""


def _first_year(haystacks: Sequence[str]) -> int | None:
    for text in haystacks:
        match = _YEAR_PATTERN.search(text)
        if match:
            return int(match.group(0))
    return None


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


default_classifier = KeywordVehicleClassifier()
