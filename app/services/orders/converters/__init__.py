"""
Converter services for transforming commerce orders to PickHero payloads.
"""

from .order_converter import (
    ADDRESS_TYPE_CUSTOMER,
    ADDRESS_TYPE_DELIVERY,
    ADDRESS_TYPE_INVOICE,
    OrderConverter,
    compare_addresses,
)

__all__ = [
    "OrderConverter",
    "compare_addresses",
    "ADDRESS_TYPE_DELIVERY",
    "ADDRESS_TYPE_INVOICE",
    "ADDRESS_TYPE_CUSTOMER",
]
