"""
PickHero stock resource (read only).

A product can have stock records in several locations; the helpers here
sum them per product.
"""

from typing import Any, Dict, Iterable, Optional

from app.db.pickhero_clients.api_resource import ApiResource, IdType, ResourceId

STOCK_INCLUDE = "product,location,location.warehouse"


class StockResource(ApiResource):
    endpoint = "stock"
    default_sort = "-quantity"

    async def get_by_product(self, product_id: ResourceId, id_type: Optional[IdType] = None) -> Dict[str, Any]:
        return await self.client.get(f"{self.endpoint}/product/{self.format_id(product_id, id_type)}")

    async def get_by_product_code(self, product_code: str) -> Dict[str, Any]:
        return await self.list({"product.product_code": product_code}, None, STOCK_INCLUDE)

    async def get_by_external_product_id(self, external_id: str) -> Dict[str, Any]:
        return await self.list({"product.external_id": external_id}, None, STOCK_INCLUDE)

    async def get_available_stock_by_product_code(self, product_code: str) -> int:
        """Total quantity across all locations for a SKU (0 when unknown)."""
        result = await self.get_by_product_code(product_code)
        return sum(int(record.get("quantity") or 0) for record in (result or {}).get("data") or [])

    @staticmethod
    def aggregate_by_product_code(records: Iterable[Dict[str, Any]]) -> Dict[str, int]:
        """
        Sum stock quantities per product code.

        Records without an included product or product code are skipped.

        Args:
            records: Stock records with the ``product`` relation included

        Returns:
            Dict[str, int]: SKU -> total quantity, in first-seen order
        """
        totals: Dict[str, int] = {}
        for record in records:
            product_code = (record.get("product") or {}).get("product_code")
            if not product_code:
                continue
            totals[product_code] = totals.get(product_code, 0) + int(record.get("quantity") or 0)
        return totals
