"""
Order post-save notification channel and auto-push suppression.

The commerce store publishes every saved order to its subscribers. Code
that changes an order because PickHero told it to (the status webhook)
runs inside ``suppress_auto_push()`` so the change is not pushed straight
back to PickHero. The flag is context-local, so concurrent requests are
not affected.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Awaitable, Callable, Iterator

from app.domain.models.commerce import Order

logger = logging.getLogger(__name__)

OrderSavedListener = Callable[[Order], Awaitable[None]]

_auto_push_suppressed: ContextVar[bool] = ContextVar("auto_push_suppressed", default=False)


@contextmanager
def suppress_auto_push() -> Iterator[None]:
    """Disable automatic pushes for order saves made inside the block."""
    token = _auto_push_suppressed.set(True)
    try:
        yield
    finally:
        _auto_push_suppressed.reset(token)


def is_auto_push_suppressed() -> bool:
    return _auto_push_suppressed.get()


class OrderEventBus:
    """Fan-out of order post-save notifications to async listeners."""

    def __init__(self):
        self._listeners: list[OrderSavedListener] = []

    def subscribe(self, listener: OrderSavedListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: OrderSavedListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def publish(self, order: Order) -> None:
        """
        Notify every listener.

        A failing listener is logged and does not stop the others or the
        save that triggered it.
        """
        for listener in list(self._listeners):
            try:
                await listener(order)
            except Exception as e:
                logger.error(f"Order post-save listener failed for order {order.id}: {e}", exc_info=True)
