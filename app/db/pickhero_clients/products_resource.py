"""
PickHero products resource.
"""

from typing import Any, Dict, Optional

from app.db.pickhero_clients.api_resource import IdType, ResourceId, WritableApiResource


class ProductsResource(WritableApiResource):
    endpoint = "products"
    default_sort = "-created_at"

    async def restore(self, resource_id: ResourceId, id_type: Optional[IdType] = None) -> Dict[str, Any]:
        """Restore a soft-deleted product."""
        return await self.client.post(self._path(resource_id, id_type, "restore"))

    async def find_by_product_code(self, product_code: str) -> Optional[Dict[str, Any]]:
        return await self._first_match({"product_code": product_code})

    async def find_by_external_id(self, external_id: str) -> Optional[Dict[str, Any]]:
        return await self._first_match({"external_id": external_id})
