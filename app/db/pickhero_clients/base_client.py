"""
Base PickHero REST client.

Handles the HTTP session, bearer authentication, JSON encoding and the
classification of every failure into a ``PickHeroAPIException``.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientTimeout

from app.utils.error_handler import PickHeroAPIException

logger = logging.getLogger(__name__)

# Fixed so that webhook handling, which may call PickHero, stays bounded
REQUEST_TIMEOUT = ClientTimeout(total=30, connect=10)


class PickHeroClient:
    """
    Authenticated HTTP client for the PickHero API.

    Args:
        base_url: API base URL (normalised to end with ``/``)
        bearer_token: API token sent as ``Authorization: Bearer``
        debug: Log every outbound request with its body
        session: Existing session to use instead of creating one
    """

    def __init__(
        self,
        base_url: str,
        bearer_token: str,
        debug: bool = False,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self.bearer_token = bearer_token
        self.debug = debug
        self.session = session
        self._owns_session = session is None

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.bearer_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def initialize(self):
        """Create the HTTP session if none was injected."""
        if self.session is None:
            self.session = aiohttp.ClientSession(timeout=REQUEST_TIMEOUT, headers=self.headers)
            self._owns_session = True
            logger.info(f"PickHero client initialized for {self.base_url}")

    async def close(self):
        """Close the HTTP session if this client created it."""
        if self.session is not None and self._owns_session:
            await self.session.close()
            logger.info("PickHero client closed")
        self.session = None

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", endpoint, data=data)

    async def put(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PUT", endpoint, data=data)

    async def patch(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PATCH", endpoint, data=data)

    async def delete(self, endpoint: str) -> Any:
        return await self.request("DELETE", endpoint)

    async def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send a request and decode the JSON response.

        Args:
            method: HTTP method
            endpoint: Path relative to the base URL (e.g. ``orders/12``)
            params: Query parameters
            data: JSON body

        Returns:
            Decoded response body; ``{}`` for an empty body

        Raises:
            PickHeroAPIException: On any HTTP, transport or decoding failure
        """
        if self.session is None:
            await self.initialize()

        url = f"{self.base_url}{endpoint}"
        query = self._prepare_params(params)

        if self.debug:
            payload = data if data is not None else query
            logger.debug(f"PickHero API {method} {url}: {json.dumps(payload, default=str)}")

        try:
            async with self.session.request(
                method,
                url,
                params=query,
                json=data,
                headers=self.headers,
                timeout=REQUEST_TIMEOUT,
            ) as response:
                status = response.status
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise PickHeroAPIException(f"HTTP request failed: {e or type(e).__name__}", 0, endpoint=endpoint) from e

        if not 200 <= status < 300:
            raise self._build_error(status, body, endpoint)

        if not body.strip():
            return {}

        try:
            return json.loads(body)
        except ValueError as e:
            raise PickHeroAPIException(f"Invalid JSON response: {e}", status, endpoint=endpoint) from e

    @staticmethod
    def _prepare_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, str]]:
        if not params:
            return None
        prepared = {}
        for key, value in params.items():
            if isinstance(value, bool):
                prepared[key] = "true" if value else "false"
            else:
                prepared[key] = str(value)
        return prepared

    @staticmethod
    def _build_error(status: int, body: str, endpoint: str) -> PickHeroAPIException:
        try:
            decoded = json.loads(body) if body else None
        except ValueError:
            decoded = None

        if isinstance(decoded, dict):
            message = decoded.get("message") or "API request failed"
            errors = decoded.get("errors") or {}
            if not isinstance(errors, dict):
                errors = {"general": errors}
            return PickHeroAPIException(message, status, errors, endpoint=endpoint)

        return PickHeroAPIException(f"API request failed with status {status}: {body[:200]}", status, endpoint=endpoint)
