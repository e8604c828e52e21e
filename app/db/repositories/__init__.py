"""
Repositories for the local synchronization state.
"""

from .sync_status_repository import OrderSyncStatusRepository
from .webhook_repository import WebhookRepository

__all__ = ["OrderSyncStatusRepository", "WebhookRepository"]
