"""
Resolvers that make sure the PickHero customer and products referenced by
an order exist.
"""

from .customer_resolver import CustomerResolver
from .product_resolver import ProductResolver

__all__ = ["CustomerResolver", "ProductResolver"]
