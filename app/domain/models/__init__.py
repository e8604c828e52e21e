"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .commerce import Address, Asset, LineItem, Order, OrderStatus, Product, Variant
from .sync_status import PICKHERO_ORDER_STATUSES, OrderSyncStatus
from .webhook import TYPE_ORDER_STATUS_CHANGED, WebhookRegistration

__all__ = [
    "Address",
    "Asset",
    "LineItem",
    "Order",
    "OrderStatus",
    "Product",
    "Variant",
    "OrderSyncStatus",
    "PICKHERO_ORDER_STATUSES",
    "WebhookRegistration",
    "TYPE_ORDER_STATUS_CHANGED",
]
