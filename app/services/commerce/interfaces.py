"""
Protocol for the commerce platform this service synchronizes with.
"""

from typing import Protocol

from app.domain.models.commerce import Order, OrderStatus, Variant
from app.services.commerce.order_events import OrderSavedListener


class ICommerceStore(Protocol):
    """Orders, order statuses and variants of the commerce platform."""

    async def get_order(self, order_id: int) -> Order | None:
        """Get an order by ID."""
        ...

    async def find_order_by_reference(self, reference: str) -> Order | None:
        """Find an order by its human-readable reference."""
        ...

    async def find_order_by_number(self, number: str) -> Order | None:
        """Find an order by its internal number."""
        ...

    async def get_order_status_by_handle(self, handle: str) -> OrderStatus | None:
        """Get a configured order status by handle."""
        ...

    async def save_order(self, order: Order, message: str | None = None) -> None:
        """Save an order and notify post-save listeners."""
        ...

    async def get_variant_by_sku(self, sku: str) -> Variant | None:
        """Get a purchasable variant by SKU."""
        ...

    async def save_variant(self, variant: Variant) -> None:
        """Save a variant (stock level and other attributes)."""
        ...

    async def list_variants(self, limit: int | None = None, offset: int = 0) -> list[Variant]:
        """List variants ordered by ID."""
        ...

    def subscribe(self, listener: OrderSavedListener) -> None:
        """Register a listener for order post-save notifications."""
        ...

    def unsubscribe(self, listener: OrderSavedListener) -> None:
        """Remove a previously registered listener."""
        ...
