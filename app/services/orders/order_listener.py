"""Order post-save listener that feeds the sync queue."""

import logging

from app.domain.models.commerce import Order
from app.services.commerce.order_events import is_auto_push_suppressed
from app.services.orders.sync_queue import SyncOrderQueue

logger = logging.getLogger(__name__)


class OrderSavedHandler:
    """
    Enqueues saved orders for PickHero sync.

    Args:
        queue: Order sync queue
        push_orders: ``PUSH_ORDERS`` setting
    """

    def __init__(self, queue: SyncOrderQueue, push_orders: bool):
        self.queue = queue
        self.push_orders = push_orders

    async def __call__(self, order: Order) -> None:
        if not self.push_orders:
            return
        if is_auto_push_suppressed():
            logger.debug(f"Auto push suppressed for order {order.id}")
            return
        self.queue.enqueue(order.id)
