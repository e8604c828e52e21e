"""
Tests de integración del flujo completo de pedidos.

Servicios reales (contenedor, cola, repositorios sobre SQLite en memoria,
almacén en memoria) con la API de PickHero simulada.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from app.core.config import Settings
from app.core.container import ServiceContainer
from app.db.connection import ConnDB
from app.domain.models.commerce import LineItem, Order, OrderStatus, Product, Variant
from app.domain.models.webhook import TYPE_ORDER_STATUS_CHANGED, WebhookRegistration
from app.services.commerce.memory_store import InMemoryCommerceStore
from app.services.webhook_handler import compute_signature

PAID = OrderStatus(id=1, handle="paid")
COMPLETED = OrderStatus(id=2, handle="completed")
SHIPPED = OrderStatus(id=3, handle="shipped")
SECRET = "flow-secret"


def make_api() -> MagicMock:
    api = MagicMock()
    api.open = AsyncMock()
    api.close = AsyncMock()
    api.customers.find_by_external_id = AsyncMock(return_value={"id": 5})
    api.products.find_by_external_id = AsyncMock(return_value={"id": 77})
    api.products.update = AsyncMock(return_value={"data": {"id": 77}})
    api.orders.create = AsyncMock(return_value={"data": {"id": 900, "number": "PH-900"}})
    api.orders.update = AsyncMock(return_value={"data": {"id": 900}})
    api.orders.process = AsyncMock(return_value={})
    return api


def make_order(order_status: OrderStatus) -> Order:
    variant = Variant(id=10, sku="SKU1", title="Azul", price=Decimal("10"), product=Product(id=1, title="Camisa"))
    return Order(
        id=42,
        number="a1b2",
        reference="1001",
        customer_id=3,
        order_status=order_status,
        line_items=[LineItem(id=1, qty=2, sale_price=Decimal("10"), purchasable=variant)],
    )


@pytest_asyncio.fixture
async def container():
    conn_db = ConnDB("sqlite+aiosqlite:///:memory:")
    await conn_db.initialize()

    settings = Settings(
        PUSH_ORDERS=True,
        ORDER_STATUS_TO_PUSH=["paid"],
        ORDER_STATUS_TO_PROCESS=["completed"],
        SYNC_ORDER_STATUS=True,
        ORDER_STATUS_MAPPING=[{"pickhero": "completed", "changeTo": "shipped"}],
    )
    store = InMemoryCommerceStore(statuses=[PAID, COMPLETED, SHIPPED])
    services = ServiceContainer(settings, make_api(), store, conn_db)
    await services.start()

    yield services

    await services.stop()
    await conn_db.close()


class TestOrderPushFlow:
    """Guardar un pedido lo envía a PickHero a través de la cola."""

    @pytest.mark.asyncio
    async def test_saved_order_is_submitted_once(self, container):
        order = make_order(PAID)

        await container.store.save_order(order)
        await container.queue.join()
        await container.store.save_order(order)
        await container.queue.join()

        container.api.orders.create.assert_awaited_once()
        payload = container.api.orders.create.call_args.args[0]
        assert payload["external_id"] == "42"
        assert payload["customer_id"] == 5
        assert payload["rows"] == [{"product_id": 77, "quantity": 2}]

        stored = await container.sync_repository.find_by_order_id(42)
        assert stored.pushed is True
        assert stored.pickhero_order_id == 900
        assert stored.processed is False

    @pytest.mark.asyncio
    async def test_completed_order_is_processed(self, container):
        order = make_order(COMPLETED)

        await container.store.save_order(order)
        await container.queue.join()

        container.api.orders.process.assert_awaited_once_with(900)
        stored = await container.sync_repository.find_by_order_id(42)
        assert stored.pushed and stored.stock_allocated and stored.processed


class TestOrderStatusWebhookFlow:
    """El webhook de PickHero actualiza el pedido sin reenviarlo."""

    @pytest.mark.asyncio
    async def test_webhook_updates_status_without_push(self, container):
        order = make_order(COMPLETED)
        container.store._orders[order.id] = order
        await container.webhook_repository.save(
            WebhookRegistration(type=TYPE_ORDER_STATUS_CHANGED, pickhero_webhook_id=1, secret=SECRET)
        )
        raw = b'{"data": {"external_id": "1001", "status": "completed"}}'

        result = await container.webhook_receiver.handle_order_status_changed(raw, compute_signature(SECRET, raw))
        await container.queue.join()

        assert result == (200, {"status": "OK"})
        assert order.order_status.handle == "shipped"
        assert container.queue.pending_count == 0
        container.api.orders.create.assert_not_awaited()

        stored = await container.sync_repository.find_by_order_id(42)
        assert stored.stock_allocated is True
        assert stored.processed is True
        assert stored.pushed is False

    @pytest.mark.asyncio
    async def test_webhook_with_wrong_signature(self, container):
        await container.webhook_repository.save(
            WebhookRegistration(type=TYPE_ORDER_STATUS_CHANGED, pickhero_webhook_id=1, secret=SECRET)
        )

        result = await container.webhook_receiver.handle_order_status_changed(b"{}", "bad")

        assert result == (401, {"status": "ERROR"})

    @pytest.mark.asyncio
    async def test_webhook_for_unregistered_topic(self, container):
        result = await container.webhook_receiver.handle_order_status_changed(b"{}", None)
        assert result == (400, {"status": "ERROR"})
