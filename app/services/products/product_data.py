"""
Product data transfer object for the PickHero products API.
"""

from dataclasses import dataclass, field
from typing import Any

from app.domain.models.commerce import Variant
from app.services.products.field_mapping import FieldMappingEvaluator


@dataclass
class ProductData:
    """
    PickHero product built from a commerce variant.

    Attributes:
        external_id: Variant ID
        product_code: SKU
        name: Display name
        price: Unit price
        weight, length, width, height: Dimensions as integers, if known
        mapped_fields: Values from the product field mapping
    """

    external_id: str
    product_code: str
    name: str
    price: float
    weight: int | None = None
    length: int | None = None
    width: int | None = None
    height: int | None = None
    mapped_fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_variant(cls, variant: Variant, evaluator: FieldMappingEvaluator | None = None) -> "ProductData":
        return cls(
            external_id=str(variant.id),
            product_code=variant.sku,
            name=cls.build_name(variant),
            price=float(variant.price or 0),
            weight=int(variant.weight) if variant.weight else None,
            length=int(variant.length) if variant.length else None,
            width=int(variant.width) if variant.width else None,
            height=int(variant.height) if variant.height else None,
            mapped_fields=evaluator.resolve(variant) if evaluator else {},
        )

    @staticmethod
    def build_name(variant: Variant) -> str:
        """``"<product> - <variant>"`` when the titles differ, else the product title, else the SKU."""
        product = variant.product
        if product is None:
            return variant.title or variant.sku

        if variant.title and variant.title != product.title:
            return f"{product.title} - {variant.title}"

        return product.title or variant.sku

    def to_dict(self) -> dict[str, Any]:
        """Payload for creating the product."""
        data: dict[str, Any] = {
            "external_id": self.external_id,
            "product_code": self.product_code,
            "name": self.name,
            "price": self.price,
        }
        for dimension in ("weight", "length", "width", "height"):
            value = getattr(self, dimension)
            if value is not None:
                data[dimension] = value

        data.update(self.mapped_fields)
        return data

    def to_update_dict(self) -> dict[str, Any]:
        """Payload for updating the product (``external_id`` cannot change)."""
        data = self.to_dict()
        data.pop("external_id", None)
        return data
