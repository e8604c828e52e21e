"""
SyncOrderQueue - background queue for order synchronization.

Order saves only enqueue the order id. A worker task re-fetches the order
and runs the orchestrator under the per-order lock, so a save never waits
on PickHero and two syncs of the same order never overlap.
"""

import asyncio
import logging
from typing import Optional, Set

from app.services.commerce.interfaces import ICommerceStore
from app.services.orders.orchestrator import OrderSyncOrchestrator
from app.utils.order_lock import LockAcquisitionError, OrderLock

logger = logging.getLogger(__name__)


class SyncOrderQueue:
    """
    Cola asíncrona de IDs de pedido.

    Un ID que ya está pendiente no se encola de nuevo: el worker vuelve a
    leer el pedido, así que una sola pasada refleja todos los cambios.

    Args:
        store: Commerce store used to re-fetch orders
        orchestrator: Order sync orchestrator
    """

    def __init__(self, store: ICommerceStore, orchestrator: OrderSyncOrchestrator):
        self.store = store
        self.orchestrator = orchestrator
        self._queue: asyncio.Queue[int] = asyncio.Queue()
        self._pending: Set[int] = set()
        self._worker: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def enqueue(self, order_id: int) -> bool:
        """
        Add an order id to the queue.

        Returns:
            bool: False if the order was already pending
        """
        if order_id in self._pending:
            logger.debug(f"Order {order_id} already queued for PickHero sync")
            return False

        self._pending.add(order_id)
        self._queue.put_nowait(order_id)
        logger.debug(f"Order {order_id} queued for PickHero sync")
        return True

    async def start(self) -> None:
        if self.is_running:
            return
        self._worker = asyncio.create_task(self._run(), name="pickhero-order-sync")
        logger.info("✅ Order sync queue started")

    async def stop(self) -> None:
        """Cancel the worker; pending orders are dropped."""
        if self._worker is None:
            return

        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

        if self._pending:
            logger.warning(f"⚠️ Order sync queue stopped with {len(self._pending)} pending orders")
        logger.info("Order sync queue stopped")

    async def join(self) -> None:
        """Wait until every queued order has been handled."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            order_id = await self._queue.get()
            try:
                await self.process(order_id)
            except Exception as e:
                logger.error(f"❌ Unexpected error syncing order {order_id}: {e}", exc_info=True)
            finally:
                self._queue.task_done()

    async def process(self, order_id: int) -> None:
        """Sync a single order: re-fetch it and run the orchestrator under its lock."""
        # Releasing the pending mark first lets saves made during the sync queue another pass
        self._pending.discard(order_id)

        order = await self.store.get_order(order_id)
        if order is None:
            logger.debug(f"Order {order_id} no longer exists, skipping PickHero sync")
            return
        if not order.is_completed:
            logger.debug(f"Order {order_id} is not completed, skipping PickHero sync")
            return

        try:
            async with OrderLock(order_id):
                await self.orchestrator.handle_order_change(order)
        except LockAcquisitionError as e:
            logger.error(f"❌ Could not lock order {order_id} for PickHero sync: {e}")
