"""
In-memory commerce store.

Used when the service runs standalone and in tests. Saving an order
publishes it on the store's ``OrderEventBus``.
"""

import json
import logging
from pathlib import Path
from typing import Iterable

from app.domain.models.commerce import Order, OrderStatus, Variant
from app.utils.error_handler import ConfigurationException
from app.services.commerce.order_events import OrderEventBus, OrderSavedListener

logger = logging.getLogger(__name__)


class InMemoryCommerceStore:
    """
    Commerce store backed by dictionaries.

    Args:
        statuses: Configured order statuses
        orders: Initial orders
        variants: Initial variants
    """

    def __init__(
        self,
        statuses: Iterable[OrderStatus] = (),
        orders: Iterable[Order] = (),
        variants: Iterable[Variant] = (),
    ):
        self.events = OrderEventBus()
        self._statuses: dict[str, OrderStatus] = {status.handle: status for status in statuses}
        self._orders: dict[int, Order] = {order.id: order for order in orders}
        self._variants: dict[int, Variant] = {variant.id: variant for variant in variants}

    @classmethod
    def from_catalog_file(cls, path: str | Path) -> "InMemoryCommerceStore":
        """
        Carga estados de pedido y variantes desde un fichero JSON.

        Formato: ``{"statuses": [{"id", "handle", "name"}], "variants": [...]}``

        Raises:
            ConfigurationException: Si el fichero no existe o no es JSON válido
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationException(
                f"Cannot load commerce catalog {path}: {e}", setting="COMMERCE_CATALOG_FILE"
            ) from e

        statuses = [
            OrderStatus(id=int(s["id"]), handle=s["handle"], name=s.get("name", ""))
            for s in data.get("statuses", [])
        ]
        variants = [Variant.from_dict(v) for v in data.get("variants", [])]
        logger.info(f"📦 Commerce catalog loaded from {path}: {len(statuses)} statuses, {len(variants)} variants")
        return cls(statuses=statuses, variants=variants)

    # === PEDIDOS ===

    async def get_order(self, order_id: int) -> Order | None:
        return self._orders.get(order_id)

    async def find_order_by_reference(self, reference: str) -> Order | None:
        return next((order for order in self._orders.values() if order.reference == reference), None)

    async def find_order_by_number(self, number: str) -> Order | None:
        return next((order for order in self._orders.values() if order.number == number), None)

    async def get_order_status_by_handle(self, handle: str) -> OrderStatus | None:
        return self._statuses.get(handle)

    def add_order_status(self, status: OrderStatus) -> None:
        self._statuses[status.handle] = status

    async def save_order(self, order: Order, message: str | None = None) -> None:
        if message:
            order.status_history.append(message)
        self._orders[order.id] = order
        logger.debug(f"Order {order.id} saved (status: {order.status_handle})")
        await self.events.publish(order)

    # === VARIANTES ===

    async def get_variant_by_sku(self, sku: str) -> Variant | None:
        return next((variant for variant in self._variants.values() if variant.sku == sku), None)

    async def save_variant(self, variant: Variant) -> None:
        self._variants[variant.id] = variant

    async def list_variants(self, limit: int | None = None, offset: int = 0) -> list[Variant]:
        variants = [self._variants[key] for key in sorted(self._variants)]
        end = offset + limit if limit is not None else None
        return variants[offset:end]

    # === NOTIFICACIONES ===

    def subscribe(self, listener: OrderSavedListener) -> None:
        self.events.subscribe(listener)

    def unsubscribe(self, listener: OrderSavedListener) -> None:
        self.events.unsubscribe(listener)
