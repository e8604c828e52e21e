"""
PickHero orders resource.
"""

from typing import Any, Dict, Optional

from app.db.pickhero_clients.api_resource import ApiResource, IdType, ResourceId


class OrdersResource(ApiResource):
    """Orders can be created and updated but never deleted through the API."""

    endpoint = "orders"
    default_sort = "-created_at"

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(self.endpoint, data)

    async def update(
        self, resource_id: ResourceId, data: Dict[str, Any], id_type: Optional[IdType] = None
    ) -> Dict[str, Any]:
        """Update an order. Order rows cannot be changed once the order exists."""
        return await self.client.patch(self._path(resource_id, id_type), data)

    async def process(
        self,
        resource_id: ResourceId,
        id_type: Optional[IdType] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Process an order: allocate stock and, depending on the PickHero
        settings, create picklists.
        """
        return await self.client.post(self._path(resource_id, id_type, "process"), options or {})

    async def find_by_reference(self, reference: str) -> Dict[str, Any]:
        return await self.list({"reference": reference})

    async def find_by_external_id(self, external_id: str) -> Dict[str, Any]:
        return await self.list({"external_id": external_id})
