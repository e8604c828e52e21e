"""
Interfaces/Protocols for order services (Dependency Inversion Principle).

These protocols define contracts that services must implement,
allowing for loose coupling and easy testing.
"""

from typing import Any, Protocol

from app.domain.models import Order, OrderSyncStatus, Variant
from app.domain.models.commerce import Address, LineItem


class IOrderConverter(Protocol):
    """Protocol for commerce order -> PickHero payload conversion."""

    def transform_order(self, order: Order, submission_count: int = 0) -> dict[str, Any]:
        """Build the PickHero order payload (without rows)."""
        ...

    def collect_line_items(self, order: Order) -> list[LineItem]:
        """Line items to send, after line-item modifiers."""
        ...

    def extract_name(self, address: Address | None) -> str | None:
        """Primary name of an address."""
        ...

    def extract_contact_name(self, address: Address | None) -> str | None:
        """Contact person of an organization address."""
        ...


class ICustomerResolver(Protocol):
    """Protocol for PickHero customer resolution."""

    async def ensure_customer_exists(self, order: Order) -> dict[str, Any] | None:
        """Find or create the PickHero customer for an order."""
        ...


class IProductResolver(Protocol):
    """Protocol for PickHero product resolution."""

    async def ensure_products_exist(self, purchasables: list[Any]) -> None:
        """Create or update a PickHero product for every variant."""
        ...

    async def resolve_for_line_item(self, variant: Variant, create_missing: bool) -> dict[str, Any]:
        """Return the PickHero product for a line item's variant."""
        ...


class ISyncStatusRepository(Protocol):
    """Protocol for order sync state persistence."""

    async def find_by_order_id(self, order_id: int) -> OrderSyncStatus | None:
        """Stored record for an order, if any."""
        ...

    async def get_or_new(self, order_id: int) -> OrderSyncStatus:
        """Stored record, or a fresh unsaved one bound to the order."""
        ...

    async def upsert(self, status: OrderSyncStatus) -> OrderSyncStatus:
        """Insert or update a record."""
        ...

    async def delete(self, order_id: int) -> bool:
        """Delete the record of an order."""
        ...
