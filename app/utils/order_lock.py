"""
OrderLock - per-order lock for PickHero order synchronization.

Serializes every operation that touches the sync state of a single order:
- Queue worker reacting to order saves
- Webhook callbacks from PickHero
- Manual admin actions (push, process, unlink)

Usage:
    from app.utils.order_lock import OrderLock, LockAcquisitionError

    async with OrderLock(order_id):
        await orchestrator.handle_order_change(order)
"""

import logging

from app.core.config import get_settings
from app.utils.distributed_lock import DistributedLock, LockAcquisitionError

logger = logging.getLogger(__name__)

__all__ = ["OrderLock", "LockAcquisitionError"]


class OrderLock(DistributedLock):
    """
    Distributed lock keyed by the local order id (``lock:order:{id}``).

    The TTL defaults to ``ORDER_LOCK_TIMEOUT_SECONDS``; a caller waits at
    most that long (or ``max_wait_seconds``) before ``LockAcquisitionError``
    is raised.
    """

    def __init__(self, order_id: int, timeout_seconds: int = None, max_wait_seconds: float = None):
        if timeout_seconds is None:
            timeout_seconds = get_settings().ORDER_LOCK_TIMEOUT_SECONDS

        super().__init__(
            lock_key=f"order:{order_id}", timeout_seconds=timeout_seconds, max_wait_seconds=max_wait_seconds
        )
        self.order_id = order_id

    async def __aenter__(self):
        logger.debug(f"Attempting to acquire lock for order {self.order_id}")
        return await super().__aenter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        result = await super().__aexit__(exc_type, exc_val, exc_tb)
        if exc_type:
            logger.debug(f"Lock released for order {self.order_id} (exception occurred: {exc_type.__name__})")
        return result
