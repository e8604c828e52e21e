"""Tests unitarios para la cola de sincronización y el listener de pedidos."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.domain.models.commerce import Order, OrderStatus
from app.services.commerce.memory_store import InMemoryCommerceStore
from app.services.commerce.order_events import is_auto_push_suppressed, suppress_auto_push
from app.services.orders.order_listener import OrderSavedHandler
from app.services.orders.sync_queue import SyncOrderQueue


def make_order(order_id: int = 1, is_completed: bool = True) -> Order:
    return Order(
        id=order_id,
        number=f"n{order_id}",
        is_completed=is_completed,
        order_status=OrderStatus(id=1, handle="paid"),
    )


def make_queue(*orders: Order) -> SyncOrderQueue:
    orchestrator = MagicMock()
    orchestrator.handle_order_change = AsyncMock()
    return SyncOrderQueue(InMemoryCommerceStore(orders=orders), orchestrator)


class TestSyncOrderQueue:
    """Tests para SyncOrderQueue."""

    def test_pending_order_is_coalesced(self):
        """Debe encolar una sola vez un pedido que ya está pendiente."""
        queue = make_queue()

        assert queue.enqueue(1) is True
        assert queue.enqueue(1) is False
        assert queue.enqueue(2) is True
        assert queue.pending_count == 2

    @pytest.mark.asyncio
    async def test_process_runs_orchestrator_with_fresh_order(self):
        order = make_order()
        queue = make_queue(order)
        queue.enqueue(order.id)

        await queue.process(order.id)

        queue.orchestrator.handle_order_change.assert_awaited_once_with(order)
        assert queue.pending_count == 0

    @pytest.mark.asyncio
    async def test_process_skips_missing_order(self):
        queue = make_queue()
        await queue.process(99)
        queue.orchestrator.handle_order_change.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_process_skips_incomplete_order(self):
        """Los carritos sin completar nunca se envían."""
        order = make_order(is_completed=False)
        queue = make_queue(order)

        await queue.process(order.id)

        queue.orchestrator.handle_order_change.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_worker_drains_queue(self):
        first, second = make_order(1), make_order(2)
        queue = make_queue(first, second)
        await queue.start()
        try:
            queue.enqueue(1)
            queue.enqueue(2)
            queue.enqueue(1)
            await queue.join()
        finally:
            await queue.stop()

        assert queue.orchestrator.handle_order_change.await_count == 2
        assert not queue.is_running

    @pytest.mark.asyncio
    async def test_worker_survives_failures(self):
        order = make_order()
        queue = make_queue(order)
        queue.orchestrator.handle_order_change.side_effect = [RuntimeError("boom"), None]
        await queue.start()
        try:
            queue.enqueue(order.id)
            await queue.join()
            queue.enqueue(order.id)
            await queue.join()
        finally:
            await queue.stop()

        assert queue.orchestrator.handle_order_change.await_count == 2


class TestOrderSavedHandler:
    """Tests para el listener que alimenta la cola."""

    @pytest.mark.asyncio
    async def test_enqueues_when_push_enabled(self):
        queue = MagicMock()
        handler = OrderSavedHandler(queue, push_orders=True)

        await handler(make_order(5))

        queue.enqueue.assert_called_once_with(5)

    @pytest.mark.asyncio
    async def test_ignores_when_push_disabled(self):
        queue = MagicMock()
        await OrderSavedHandler(queue, push_orders=False)(make_order(5))
        queue.enqueue.assert_not_called()

    @pytest.mark.asyncio
    async def test_ignores_saves_inside_suppression(self):
        """Los cambios que vienen de PickHero no se reenvían."""
        queue = MagicMock()
        handler = OrderSavedHandler(queue, push_orders=True)

        with suppress_auto_push():
            assert is_auto_push_suppressed()
            await handler(make_order(5))

        assert not is_auto_push_suppressed()
        queue.enqueue.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_save_notifies_listener(self):
        order = make_order(5)
        store = InMemoryCommerceStore()
        queue = make_queue()
        store.subscribe(OrderSavedHandler(queue, push_orders=True))

        await store.save_order(order)

        assert queue.pending_count == 1
