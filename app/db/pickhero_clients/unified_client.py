"""
Unified PickHero gateway combining all resources.

Resources are created on first use and share one ``PickHeroClient`` (and
therefore one HTTP session).
"""

import logging
from typing import Optional

from app.core.config import Settings, get_settings
from app.utils.error_handler import ConfigurationException

from .base_client import PickHeroClient
from .customers_resource import CustomersResource
from .orders_resource import OrdersResource
from .products_resource import ProductsResource
from .shipments_resource import ShipmentsResource
from .stock_resource import StockResource
from .warehouses_resource import WarehousesResource
from .webhooks_resource import WebhooksResource

logger = logging.getLogger(__name__)


class PickHeroAPI:
    """
    Single entry point to the PickHero API.

    Example:
        ```python
        api = PickHeroAPI(PickHeroClient(url, token))
        await api.open()
        product = await api.products.find_by_external_id("123")
        await api.close()
        ```
    """

    def __init__(self, client: PickHeroClient):
        self.client = client
        self._orders: Optional[OrdersResource] = None
        self._products: Optional[ProductsResource] = None
        self._customers: Optional[CustomersResource] = None
        self._stock: Optional[StockResource] = None
        self._shipments: Optional[ShipmentsResource] = None
        self._warehouses: Optional[WarehousesResource] = None
        self._webhooks: Optional[WebhooksResource] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PickHeroAPI":
        """
        Build the gateway from application settings.

        Raises:
            ConfigurationException: If the API URL or token is missing
        """
        settings = settings or get_settings()
        if not settings.PICKHERO_API_BASE_URL or not settings.PICKHERO_API_TOKEN:
            raise ConfigurationException(
                "PickHero API URL and token must be configured",
                setting="PICKHERO_API_BASE_URL",
            )
        return cls(PickHeroClient(settings.PICKHERO_API_BASE_URL, settings.PICKHERO_API_TOKEN, debug=settings.DEBUG))

    async def open(self):
        await self.client.initialize()

    async def close(self):
        await self.client.close()

    @property
    def orders(self) -> OrdersResource:
        if self._orders is None:
            self._orders = OrdersResource(self.client)
        return self._orders

    @property
    def products(self) -> ProductsResource:
        if self._products is None:
            self._products = ProductsResource(self.client)
        return self._products

    @property
    def customers(self) -> CustomersResource:
        if self._customers is None:
            self._customers = CustomersResource(self.client)
        return self._customers

    @property
    def stock(self) -> StockResource:
        if self._stock is None:
            self._stock = StockResource(self.client)
        return self._stock

    @property
    def shipments(self) -> ShipmentsResource:
        if self._shipments is None:
            self._shipments = ShipmentsResource(self.client)
        return self._shipments

    @property
    def warehouses(self) -> WarehousesResource:
        if self._warehouses is None:
            self._warehouses = WarehousesResource(self.client)
        return self._warehouses

    @property
    def webhooks(self) -> WebhooksResource:
        if self._webhooks is None:
            self._webhooks = WebhooksResource(self.client)
        return self._webhooks
