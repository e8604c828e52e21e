"""
Base class for PickHero API resources.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from app.db.pickhero_clients.base_client import PickHeroClient
from app.utils.error_handler import PickHeroAPIException

ResourceId = Union[int, str]

# Sentinel: use the resource's default sort
DEFAULT = object()


class IdType(str, Enum):
    """
    How PickHero interprets an ID path segment.

    Without an explicit type PickHero first tries an internal-ID match and
    falls back to an external-ID match.
    """

    INTERNAL = "internal"
    EXTERNAL = "external"


class ApiResource:
    """
    Common query building for a PickHero collection endpoint.

    Subclasses set ``endpoint`` and ``default_sort``.
    """

    endpoint: str = ""
    default_sort: Optional[str] = "-created_at"

    def __init__(self, client: PickHeroClient):
        self.client = client

    @staticmethod
    def build_list_params(
        filters: Optional[Dict[str, Any]] = None,
        sort: Optional[str] = None,
        include: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Build ``filter[<key>]``, ``sort`` and ``include`` query parameters.

        Filters whose value is ``None`` or ``""`` are left out.
        """
        params: Dict[str, Any] = {}
        for key, value in (filters or {}).items():
            if value is not None and value != "":
                params[f"filter[{key}]"] = value
        if sort is not None:
            params["sort"] = sort
        if include is not None:
            params["include"] = include
        return params

    @staticmethod
    def format_id(resource_id: ResourceId, id_type: Optional[IdType] = None) -> str:
        """Format an ID path segment: ``external_id:<v>``, ``id:<v>`` or bare."""
        if id_type == IdType.EXTERNAL:
            return f"external_id:{resource_id}"
        if id_type == IdType.INTERNAL:
            return f"id:{resource_id}"
        return str(resource_id)

    def _path(self, resource_id: ResourceId, id_type: Optional[IdType] = None, action: str = "") -> str:
        path = f"{self.endpoint}/{self.format_id(resource_id, id_type)}"
        return f"{path}/{action}" if action else path

    async def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort: Any = DEFAULT,
        include: Optional[str] = None,
    ) -> Dict[str, Any]:
        if sort is DEFAULT:
            sort = self.default_sort
        return await self.client.get(self.endpoint, self.build_list_params(filters, sort, include))

    async def get(
        self, resource_id: ResourceId, id_type: Optional[IdType] = None, include: Optional[str] = None
    ) -> Dict[str, Any]:
        params = self.build_list_params(include=include) if include else None
        return await self.client.get(self._path(resource_id, id_type), params)

    async def _first_match(self, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """First record matching ``filters``, or ``None``; a 404 counts as no match."""
        try:
            result = await self.list(filters)
        except PickHeroAPIException as e:
            if e.is_not_found:
                return None
            raise
        data: List[Dict[str, Any]] = (result or {}).get("data") or []
        return data[0] if data else None


class WritableApiResource(ApiResource):
    """Resource supporting create, update (PATCH) and delete."""

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(self.endpoint, data)

    async def update(
        self, resource_id: ResourceId, data: Dict[str, Any], id_type: Optional[IdType] = None
    ) -> Dict[str, Any]:
        return await self.client.patch(self._path(resource_id, id_type), data)

    async def delete(self, resource_id: ResourceId, id_type: Optional[IdType] = None) -> Dict[str, Any]:
        return await self.client.delete(self._path(resource_id, id_type))
