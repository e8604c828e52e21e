"""
PickHero webhooks resource.
"""

from typing import Any, Dict, Optional

from app.db.pickhero_clients.api_resource import ApiResource

TOPIC_ORDER_STATUS_CHANGED = "order_status_changed"


class WebhooksResource(ApiResource):
    endpoint = "webhooks"
    default_sort = "-created_at"

    async def get(self, webhook_id: int, id_type=None, include=None) -> Dict[str, Any]:
        return await self.client.get(f"{self.endpoint}/{int(webhook_id)}")

    async def create(
        self,
        url: str,
        topic: str,
        secret: Optional[str] = None,
        company_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Register a webhook.

        Args:
            url: URL PickHero delivers events to
            topic: Event topic (e.g. ``order_status_changed``)
            secret: Signing secret for ``x-webhook-signature``
            company_id: Restrict to one PickHero company
        """
        data: Dict[str, Any] = {"url": url, "topic": topic}
        if secret is not None:
            data["secret"] = secret
        if company_id is not None:
            data["company_id"] = company_id
        return await self.client.post(self.endpoint, data)

    async def delete(self, webhook_id: int) -> Dict[str, Any]:
        return await self.client.delete(f"{self.endpoint}/{int(webhook_id)}")

    async def enable(self, webhook_id: int) -> Dict[str, Any]:
        """Enable a webhook (this also clears its error log in PickHero)."""
        return await self.client.post(f"{self.endpoint}/{int(webhook_id)}/enable")

    async def disable(self, webhook_id: int) -> Dict[str, Any]:
        return await self.client.post(f"{self.endpoint}/{int(webhook_id)}/disable")

    async def find_by_topic(self, topic: str) -> Dict[str, Any]:
        return await self.list({"topic": topic})
