"""
Order synchronization status domain model.

One record per commerce order, describing what has been done with the order
in PickHero. The three flags are independent: a webhook can mark an order
processed without the local processing trigger having run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.models.commerce import Order

# PickHero order statuses
STATUS_CONCEPT = "concept"
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

PICKHERO_ORDER_STATUSES: dict[str, str] = {
    STATUS_CONCEPT: "Concept",
    STATUS_PROCESSING: "Processing",
    STATUS_COMPLETED: "Completed",
    STATUS_CANCELLED: "Cancelled",
}


@dataclass
class OrderSyncStatus:
    """
    Synchronization state of a single order.

    Attributes:
        order_id: Local order ID (immutable once bound)
        pickhero_order_id: PickHero order ID, ``None`` until first push
        pickhero_order_number: PickHero order number, ``None`` until first push
        pushed: Order has been submitted to PickHero
        stock_allocated: Stock has been allocated in PickHero
        processed: Order has been processed in PickHero
        submission_count: Number of unlinks; drives the external id suffix
        public_status_page: PickHero public status page URL
        id: Surrogate key, ``None`` until persisted
    """

    order_id: int | None = None
    pickhero_order_id: int | None = None
    pickhero_order_number: str | None = None
    pushed: bool = False
    stock_allocated: bool = False
    processed: bool = False
    submission_count: int = 0
    public_status_page: str | None = None
    id: int | None = None
    date_created: datetime | None = None
    date_updated: datetime | None = None
    date_deleted: datetime | None = None
    # Loaded order, not persisted
    order: Order | None = field(default=None, repr=False, compare=False)

    def bind_order(self, order_id: int) -> None:
        """
        Bind this record to an order.

        Raises:
            ValueError: If the record is already bound to a different order
        """
        if self.order_id is not None and self.order_id != order_id:
            raise ValueError("Cannot change order ID after initialization.")
        self.order_id = order_id

    def attach_order(self, order: Order) -> None:
        """Bind the record to an order and keep the loaded order on it."""
        self.bind_order(order.id)
        self.order = order

    @property
    def external_id(self) -> str:
        """
        Identifier this order carries in PickHero.

        PickHero never allows changing an external id once set, so every
        resubmission after an unlink gets a ``-<n>`` suffix.
        """
        if self.submission_count == 0:
            return str(self.order_id)
        return f"{self.order_id}-{self.submission_count}"

    @property
    def is_submitted(self) -> bool:
        return self.pushed and self.pickhero_order_id is not None

    @property
    def is_fully_processed(self) -> bool:
        return self.pushed and self.stock_allocated and self.processed

    def unlink(self) -> None:
        """Forget the PickHero order so the next submit creates a new one."""
        self.submission_count += 1
        self.pickhero_order_id = None
        self.pickhero_order_number = None
        self.public_status_page = None
        self.pushed = False
        self.stock_allocated = False
        self.processed = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "pickhero_order_id": self.pickhero_order_id,
            "pickhero_order_number": self.pickhero_order_number,
            "pushed": self.pushed,
            "stock_allocated": self.stock_allocated,
            "processed": self.processed,
            "submission_count": self.submission_count,
            "public_status_page": self.public_status_page,
            "external_id": self.external_id if self.order_id is not None else None,
            "date_created": self.date_created.isoformat() if self.date_created else None,
            "date_updated": self.date_updated.isoformat() if self.date_updated else None,
        }

    @classmethod
    def from_row(cls, row: Any) -> "OrderSyncStatus":
        """Create a status from a database row mapping."""
        return cls(
            id=row["id"],
            order_id=row["order_id"],
            pickhero_order_id=row["pickhero_order_id"],
            pickhero_order_number=row["pickhero_order_number"],
            pushed=bool(row["pushed"]),
            stock_allocated=bool(row["stock_allocated"]),
            processed=bool(row["processed"]),
            submission_count=row["submission_count"] or 0,
            public_status_page=row["public_status_page"],
            date_created=row["date_created"],
            date_updated=row["date_updated"],
            date_deleted=row["date_deleted"],
        )
