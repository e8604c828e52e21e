"""
PickHero REST API clients organized by resource.

``PickHeroClient`` handles transport and error classification; each
resource class wraps one API collection; ``PickHeroAPI`` bundles them over
a single HTTP session.
"""

from .api_resource import ApiResource, IdType
from .base_client import PickHeroClient
from .customers_resource import CustomersResource
from .orders_resource import OrdersResource
from .products_resource import ProductsResource
from .shipments_resource import ShipmentsResource
from .stock_resource import StockResource
from .unified_client import PickHeroAPI
from .warehouses_resource import WarehousesResource
from .webhooks_resource import WebhooksResource

__all__ = [
    "ApiResource",
    "IdType",
    "PickHeroClient",
    "PickHeroAPI",
    "OrdersResource",
    "ProductsResource",
    "CustomersResource",
    "StockResource",
    "ShipmentsResource",
    "WarehousesResource",
    "WebhooksResource",
]
