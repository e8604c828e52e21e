"""
PickHero shipments resource (read only).
"""

from typing import Any, Dict, List

from app.db.pickhero_clients.api_resource import ApiResource


class ShipmentsResource(ApiResource):
    endpoint = "shipments"
    default_sort = "-created_at"

    async def find_by_order_id(self, order_id: int) -> List[Dict[str, Any]]:
        result = await self.list({"order_id": order_id})
        return (result or {}).get("data") or []
