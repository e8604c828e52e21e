"""
Repository for order synchronization records (``pickhero_order_sync``).
"""

import logging
from typing import Optional

from sqlalchemy import delete, insert, select, update

from app.db.repositories.base import BaseRepository, log_operation, utcnow
from app.db.tables import order_sync_table
from app.domain.models.sync_status import OrderSyncStatus
from app.utils.error_handler import ErrorCode, SyncException

logger = logging.getLogger(__name__)

_PERSISTED_FIELDS = (
    "order_id",
    "pickhero_order_id",
    "pickhero_order_number",
    "pushed",
    "stock_allocated",
    "processed",
    "submission_count",
    "public_status_page",
)


class OrderSyncStatusRepository(BaseRepository):
    """
    Persists one ``OrderSyncStatus`` per order.

    A missing record means "never synced"; callers that need a record use
    ``get_or_new`` and get an unsaved one.
    """

    @log_operation()
    async def find_by_order_id(self, order_id: int) -> Optional[OrderSyncStatus]:
        async with self.get_session() as session:
            result = await session.execute(select(order_sync_table).where(order_sync_table.c.order_id == order_id))
            row = result.mappings().first()
        return OrderSyncStatus.from_row(row) if row else None

    async def get_or_new(self, order_id: int) -> OrderSyncStatus:
        """
        Get the stored record for an order, or a fresh unsaved one.

        Args:
            order_id: Local order ID

        Returns:
            OrderSyncStatus: Stored record or new record bound to the order
        """
        status = await self.find_by_order_id(order_id)
        if status is None:
            status = OrderSyncStatus()
            status.bind_order(order_id)
        return status

    @log_operation()
    async def upsert(self, status: OrderSyncStatus) -> OrderSyncStatus:
        """
        Insert or update a sync record.

        A record without ``id`` whose order already has a row updates that
        row, so the unique constraint on ``order_id`` always holds.

        Args:
            status: Record to persist (``id`` and timestamps are filled in)

        Returns:
            OrderSyncStatus: The persisted record

        Raises:
            SyncException: If the record has an ``id`` that no longer exists
        """
        if status.order_id is None:
            raise SyncException(
                "Cannot save a sync status that is not bound to an order.",
                operation="save_sync_status",
                error_code=ErrorCode.ORDER_NOT_BOUND,
            )

        now = utcnow()
        values = {name: getattr(status, name) for name in _PERSISTED_FIELDS}
        values["date_updated"] = now

        async with self.get_session() as session:
            if status.id is None:
                result = await session.execute(
                    select(order_sync_table.c.id).where(order_sync_table.c.order_id == status.order_id)
                )
                status.id = result.scalar()

            if status.id is None:
                values["date_created"] = now
                result = await session.execute(insert(order_sync_table).values(**values))
                status.id = result.inserted_primary_key[0]
                status.date_created = now
            else:
                result = await session.execute(
                    update(order_sync_table).where(order_sync_table.c.id == status.id).values(**values)
                )
                if result.rowcount == 0:
                    raise SyncException(
                        f"Invalid sync status ID: {status.id}",
                        operation="save_sync_status",
                        order_id=status.order_id,
                    )
            await session.commit()

        status.date_updated = now
        return status

    @log_operation()
    async def delete(self, order_id: int) -> bool:
        async with self.get_session() as session:
            result = await session.execute(delete(order_sync_table).where(order_sync_table.c.order_id == order_id))
            await session.commit()
        return result.rowcount > 0
