"""
Boundary to the commerce platform: order/variant store and the order
post-save notification channel.
"""

from .interfaces import ICommerceStore
from .memory_store import InMemoryCommerceStore
from .order_events import OrderEventBus, is_auto_push_suppressed, suppress_auto_push

__all__ = [
    "ICommerceStore",
    "InMemoryCommerceStore",
    "OrderEventBus",
    "is_auto_push_suppressed",
    "suppress_auto_push",
]
