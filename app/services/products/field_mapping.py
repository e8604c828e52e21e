"""
Mapping of commerce product fields onto PickHero product fields.

A mapping entry names a PickHero field and a source field. The source is
either a variant field (``ean``) or a field of the parent product
(``product.brand``). Values are extracted as follows:

- ``Asset`` -> its URL
- list of related elements -> first element (``Asset`` -> URL, else ``str``)
- anything else -> as is

Empty results (``None``, ``""``, empty list) are not sent.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from app.domain.models.commerce import Asset, Variant

logger = logging.getLogger(__name__)

PRODUCT_PREFIX = "product."

# PickHero product fields that can be filled from a mapping
PICKHERO_PRODUCT_FIELDS: dict[str, str] = {
    "gtin": "GTIN / EAN",
    "image_url": "Image URL",
    "description": "Description",
    "brand": "Brand",
    "category": "Category",
    "supplier": "Supplier",
    "supplier_code": "Supplier Code",
    "country_of_origin": "Country of Origin",
    "hs_code": "HS Code",
    "digital": "Digital Product",
}

# Dataclass attributes of Variant that are not mappable values
_NON_VALUE_ATTRS = {"product", "fields"}


@dataclass(frozen=True)
class FieldMapping:
    """
    One mapping entry.

    Attributes:
        pickhero_field: Target PickHero product field
        source_field: Variant field, or ``product.<field>`` for the parent product
    """

    pickhero_field: str
    source_field: str

    @property
    def from_product(self) -> bool:
        return self.source_field.startswith(PRODUCT_PREFIX)

    @property
    def field_handle(self) -> str:
        return self.source_field[len(PRODUCT_PREFIX):] if self.from_product else self.source_field

    @classmethod
    def from_config(cls, entry: Mapping[str, Any]) -> "FieldMapping | None":
        """Build an entry from ``{"pickheroField": ..., "craftField": ...}``; incomplete entries give ``None``."""
        pickhero_field = entry.get("pickheroField") or entry.get("pickhero_field")
        source_field = entry.get("craftField") or entry.get("source_field")
        if not pickhero_field or not source_field:
            return None
        return cls(pickhero_field=pickhero_field, source_field=source_field)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (list, tuple)) and not value)


def extract_value(value: Any) -> Any:
    """Reduce an asset or relation value to what PickHero stores."""
    if isinstance(value, Asset):
        return value.url
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        first = value[0]
        return first.url if isinstance(first, Asset) else str(first)
    return value


class FieldMappingEvaluator:
    """
    Evaluates a list of ``FieldMapping`` entries against a variant.

    Args:
        mappings: Mapping entries, in order (later entries win for the same target)
    """

    def __init__(self, mappings: Iterable[FieldMapping] = ()):
        self.mappings = list(mappings)

    @classmethod
    def from_config(cls, entries: Iterable[Mapping[str, Any]]) -> "FieldMappingEvaluator":
        mappings = []
        for entry in entries:
            mapping = FieldMapping.from_config(entry)
            if mapping is None:
                logger.debug(f"Skipping incomplete product field mapping: {entry}")
                continue
            mappings.append(mapping)
        return cls(mappings)

    def resolve(self, variant: Variant) -> dict[str, Any]:
        """
        Resolve all mapped fields for a variant.

        Returns:
            dict: PickHero field -> value, empty values left out
        """
        values: dict[str, Any] = {}
        for mapping in self.mappings:
            value = self.resolve_field(variant, mapping)
            if not _is_empty(value):
                values[mapping.pickhero_field] = value
        return values

    def resolve_field(self, variant: Variant, mapping: FieldMapping) -> Any:
        if mapping.from_product:
            if variant.product is None:
                return None
            source_fields = variant.product.fields
            element = variant.product
        else:
            source_fields = variant.fields
            element = variant

        handle = mapping.field_handle
        if handle in source_fields:
            raw = source_fields[handle]
        elif handle not in _NON_VALUE_ATTRS and hasattr(element, handle):
            raw = getattr(element, handle)
        else:
            return None

        return extract_value(raw)
