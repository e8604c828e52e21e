"""
Webhook registration domain model.

One record per topic registered in PickHero, holding the locally generated
signing secret.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

TYPE_ORDER_STATUS_CHANGED = "order_status_changed"

# Local route (relative to the webhooks router) that receives each topic
WEBHOOK_PATHS: dict[str, str] = {
    TYPE_ORDER_STATUS_CHANGED: "order-status-changed",
}


@dataclass
class WebhookRegistration:
    """
    Attributes:
        type: Topic identifier (unique)
        pickhero_webhook_id: Webhook ID in PickHero
        secret: Shared signing secret, ``None`` disables signature checks
        id: Surrogate key, ``None`` until persisted
    """

    type: str
    pickhero_webhook_id: int | None = None
    secret: str | None = None
    id: int | None = None
    date_created: datetime | None = None
    date_updated: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "pickhero_webhook_id": self.pickhero_webhook_id,
            "has_secret": bool(self.secret),
            "date_created": self.date_created.isoformat() if self.date_created else None,
        }

    @classmethod
    def from_row(cls, row: Any) -> "WebhookRegistration":
        return cls(
            id=row["id"],
            type=row["type"],
            pickhero_webhook_id=row["pickhero_webhook_id"],
            secret=row["secret"],
            date_created=row["date_created"],
            date_updated=row["date_updated"],
        )
