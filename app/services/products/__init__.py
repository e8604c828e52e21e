"""
Product data sent to PickHero.
"""

from .field_mapping import FieldMapping, FieldMappingEvaluator
from .product_data import ProductData

__all__ = ["FieldMapping", "FieldMappingEvaluator", "ProductData"]
