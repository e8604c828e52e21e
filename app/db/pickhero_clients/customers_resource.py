"""
PickHero customers resource.
"""

from typing import Any, Dict, Optional

from app.db.pickhero_clients.api_resource import WritableApiResource


class CustomersResource(WritableApiResource):
    endpoint = "customers"
    default_sort = "-created_at"

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self._first_match({"email": email})

    async def find_by_external_id(self, external_id: str) -> Optional[Dict[str, Any]]:
        return await self._first_match({"external_id": external_id})
