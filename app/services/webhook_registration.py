"""
WebhookRegistrationService - registers PickHero webhooks for this service.

Each topic has one local record holding the PickHero webhook id and the
signing secret generated here. Registering again always replaces the
remote hook and the secret.
"""

import logging
import secrets
from typing import Any, Dict, Optional

from app.db.pickhero_clients import PickHeroAPI
from app.db.repositories.webhook_repository import WebhookRepository
from app.domain.models.webhook import WEBHOOK_PATHS, WebhookRegistration
from app.utils.error_handler import PickHeroAPIException, WebhookException

logger = logging.getLogger(__name__)

STATUS_NONE = "none"
STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"

STATUS_TEXTS = {
    STATUS_NONE: "Not registered",
    STATUS_ACTIVE: "Active",
    STATUS_INACTIVE: "Inactive",
}


def _status(status: str, hook_info: Optional[Dict[str, Any]] = None, text: Optional[str] = None) -> Dict[str, Any]:
    result: Dict[str, Any] = {"status": status, "statusText": text or STATUS_TEXTS[status]}
    if hook_info is not None:
        result["hookInfo"] = hook_info
    return result


class WebhookRegistrationService:
    """
    Args:
        api: PickHero gateway
        repository: Local webhook registrations
        webhook_base_url: Public base URL of the webhooks router
    """

    def __init__(self, api: PickHeroAPI, repository: WebhookRepository, webhook_base_url: str):
        self.api = api
        self.repository = repository
        self.webhook_base_url = webhook_base_url.rstrip("/")

    def webhook_url(self, webhook_type: str) -> Optional[str]:
        path = WEBHOOK_PATHS.get(webhook_type)
        if path is None:
            return None
        return f"{self.webhook_base_url}/{path}"

    async def get_hook_status(self, webhook_type: str) -> Dict[str, Any]:
        """
        Estado del registro de un topic.

        Si PickHero ya no conoce el webhook, el registro local se elimina.
        """
        registration = await self.repository.find_by_type(webhook_type)
        if registration is None or not registration.pickhero_webhook_id:
            return _status(STATUS_NONE)

        try:
            response = await self.api.webhooks.get(registration.pickhero_webhook_id)
        except PickHeroAPIException as e:
            if not e.is_not_found:
                raise
            logger.warning(f"⚠️ Webhook {registration.pickhero_webhook_id} no longer exists in PickHero")
            await self.repository.delete(webhook_type)
            return _status(STATUS_NONE)

        hook_info = (response or {}).get("data") or response or {}
        is_active = bool(hook_info.get("is_active")) and hook_info.get("is_active") != "false"
        return _status(STATUS_ACTIVE if is_active else STATUS_INACTIVE, hook_info)

    async def refresh(self, webhook_type: str) -> Dict[str, Any]:
        """
        Registra (o vuelve a registrar) el webhook de un topic con un secreto nuevo.

        Raises:
            WebhookException: 400 si el topic no es conocido
            PickHeroAPIException: Si PickHero rechaza el registro
        """
        await self._remove_existing(webhook_type)

        url = self.webhook_url(webhook_type)
        if url is None:
            raise WebhookException(f"Unknown webhook type: {webhook_type}", status_code=400)

        secret = secrets.token_hex(16)
        response = await self.api.webhooks.create(url, webhook_type, secret)
        hook_info = (response or {}).get("data") or response or {}

        if not hook_info.get("id"):
            raise PickHeroAPIException(f"Failed to register webhook: {hook_info}", endpoint="webhooks")

        await self.repository.save(
            WebhookRegistration(type=webhook_type, pickhero_webhook_id=int(hook_info["id"]), secret=secret)
        )
        logger.info(f"✅ Webhook '{webhook_type}' registered in PickHero (ID: {hook_info['id']}) -> {url}")
        return _status(STATUS_ACTIVE, hook_info)

    async def remove(self, webhook_type: str) -> Dict[str, Any]:
        await self._remove_existing(webhook_type)
        logger.info(f"Webhook '{webhook_type}' removed")
        return _status(STATUS_INACTIVE, text=STATUS_TEXTS[STATUS_NONE])

    async def _remove_existing(self, webhook_type: str) -> None:
        registration = await self.repository.find_by_type(webhook_type)
        if registration is None or not registration.pickhero_webhook_id:
            return

        try:
            await self.api.webhooks.delete(registration.pickhero_webhook_id)
        except PickHeroAPIException as e:
            if not e.is_not_found:
                raise
        await self.repository.delete(webhook_type)
