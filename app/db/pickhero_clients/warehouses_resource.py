"""
PickHero warehouses resource (read only).
"""

from typing import List

from app.db.pickhero_clients.api_resource import ApiResource


class WarehousesResource(ApiResource):
    endpoint = "warehouses"
    default_sort = "name"

    async def get_all_ids(self) -> List[int]:
        result = await self.list()
        return [warehouse["id"] for warehouse in (result or {}).get("data") or []]
