"""ProductResolver service - keeps PickHero products in line with commerce variants."""

import logging
from typing import Any, Iterable

from app.db.pickhero_clients import PickHeroAPI
from app.domain.models.commerce import Variant
from app.services.products.field_mapping import FieldMappingEvaluator
from app.services.products.product_data import ProductData
from app.utils.error_handler import PickHeroAPIException

logger = logging.getLogger(__name__)


class ProductResolver:
    """
    Looks PickHero products up by external id (the variant id) and creates
    or updates them.

    Args:
        api: PickHero gateway
        evaluator: Product field mapping
    """

    def __init__(self, api: PickHeroAPI, evaluator: FieldMappingEvaluator | None = None):
        self.api = api
        self.evaluator = evaluator or FieldMappingEvaluator()

    def product_data(self, variant: Variant) -> ProductData:
        return ProductData.from_variant(variant, self.evaluator)

    async def ensure_products_exist(self, purchasables: Iterable[Any]) -> None:
        """Create or update a PickHero product for every variant; other purchasables are skipped."""
        for purchasable in purchasables:
            if not isinstance(purchasable, Variant):
                continue

            existing = await self.api.products.find_by_external_id(str(purchasable.id))
            product_data = self.product_data(purchasable)

            if existing is not None:
                await self.api.products.update(existing["id"], product_data.to_update_dict())
            else:
                await self.api.products.create(product_data.to_dict())

    async def resolve_for_line_item(self, variant: Variant, create_missing: bool) -> dict[str, Any]:
        """
        Return the PickHero product to reference in an order row.

        An existing product is updated first. A missing product is created
        only when ``create_missing`` is set.

        Raises:
            PickHeroAPIException: 404 if the product does not exist and may not be created
        """
        product = await self.api.products.find_by_external_id(str(variant.id))
        product_data = self.product_data(variant)

        if product is not None:
            response = await self.api.products.update(product["id"], product_data.to_update_dict())
            product = (response or {}).get("data") or product
        elif create_missing:
            response = await self.api.products.create(product_data.to_dict())
            product = (response or {}).get("data")
            if product is not None:
                logger.info(f"Created PickHero product {product.get('id')} for SKU {variant.sku}")

        if product is None:
            raise PickHeroAPIException(f"Product '{variant.sku}' does not exist in PickHero.", 404)

        return product
