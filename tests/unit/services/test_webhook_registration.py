"""Tests unitarios para el registro de webhooks en PickHero."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.domain.models.webhook import TYPE_ORDER_STATUS_CHANGED, WebhookRegistration
from app.services.webhook_registration import STATUS_ACTIVE, STATUS_INACTIVE, STATUS_NONE, WebhookRegistrationService
from app.utils.error_handler import PickHeroAPIException, WebhookException

BASE_URL = "https://sync.example.com/api/v1/webhooks/"


def make_service(registration=None) -> WebhookRegistrationService:
    api = MagicMock()
    api.webhooks.get = AsyncMock()
    api.webhooks.create = AsyncMock(return_value={"data": {"id": 55, "is_active": True}})
    api.webhooks.delete = AsyncMock(return_value={})

    repository = AsyncMock()
    repository.find_by_type.return_value = registration
    repository.save.side_effect = lambda reg: reg

    return WebhookRegistrationService(api, repository, BASE_URL)


class TestWebhookUrl:
    def test_known_topic(self):
        service = make_service()
        assert (
            service.webhook_url(TYPE_ORDER_STATUS_CHANGED)
            == "https://sync.example.com/api/v1/webhooks/order-status-changed"
        )

    def test_unknown_topic(self):
        assert make_service().webhook_url("stock_changed") is None


class TestGetHookStatus:
    """Tests para la consulta de estado de un webhook."""

    @pytest.mark.asyncio
    async def test_not_registered(self):
        result = await make_service().get_hook_status(TYPE_ORDER_STATUS_CHANGED)
        assert result == {"status": STATUS_NONE, "statusText": "Not registered"}

    @pytest.mark.asyncio
    async def test_active_hook(self):
        service = make_service(WebhookRegistration(type=TYPE_ORDER_STATUS_CHANGED, pickhero_webhook_id=55))
        service.api.webhooks.get.return_value = {"data": {"id": 55, "is_active": True}}

        result = await service.get_hook_status(TYPE_ORDER_STATUS_CHANGED)

        assert result["status"] == STATUS_ACTIVE
        assert result["hookInfo"]["id"] == 55

    @pytest.mark.asyncio
    async def test_inactive_hook(self):
        service = make_service(WebhookRegistration(type=TYPE_ORDER_STATUS_CHANGED, pickhero_webhook_id=55))
        service.api.webhooks.get.return_value = {"data": {"id": 55, "is_active": "false"}}

        result = await service.get_hook_status(TYPE_ORDER_STATUS_CHANGED)

        assert result["status"] == STATUS_INACTIVE

    @pytest.mark.asyncio
    async def test_hook_deleted_in_pickhero_removes_local_record(self):
        """Debe borrar el registro local si PickHero ya no conoce el webhook."""
        service = make_service(WebhookRegistration(type=TYPE_ORDER_STATUS_CHANGED, pickhero_webhook_id=55))
        service.api.webhooks.get.side_effect = PickHeroAPIException("Not found", 404)

        result = await service.get_hook_status(TYPE_ORDER_STATUS_CHANGED)

        assert result["status"] == STATUS_NONE
        service.repository.delete.assert_awaited_once_with(TYPE_ORDER_STATUS_CHANGED)

    @pytest.mark.asyncio
    async def test_other_api_errors_propagate(self):
        service = make_service(WebhookRegistration(type=TYPE_ORDER_STATUS_CHANGED, pickhero_webhook_id=55))
        service.api.webhooks.get.side_effect = PickHeroAPIException("Server error", 500)

        with pytest.raises(PickHeroAPIException):
            await service.get_hook_status(TYPE_ORDER_STATUS_CHANGED)


class TestRefresh:
    """Tests para el registro (o re-registro) de un webhook."""

    @pytest.mark.asyncio
    async def test_registers_with_new_secret(self):
        service = make_service()

        result = await service.refresh(TYPE_ORDER_STATUS_CHANGED)

        assert result["status"] == STATUS_ACTIVE
        url, topic, secret = service.api.webhooks.create.call_args.args
        assert url.endswith("/order-status-changed")
        assert topic == TYPE_ORDER_STATUS_CHANGED
        assert len(secret) == 32

        saved = service.repository.save.call_args.args[0]
        assert saved.pickhero_webhook_id == 55
        assert saved.secret == secret

    @pytest.mark.asyncio
    async def test_replaces_existing_hook(self):
        service = make_service(WebhookRegistration(type=TYPE_ORDER_STATUS_CHANGED, pickhero_webhook_id=12, secret="old"))

        await service.refresh(TYPE_ORDER_STATUS_CHANGED)

        service.api.webhooks.delete.assert_awaited_once_with(12)
        assert service.repository.save.call_args.args[0].secret != "old"

    @pytest.mark.asyncio
    async def test_existing_hook_already_gone(self):
        service = make_service(WebhookRegistration(type=TYPE_ORDER_STATUS_CHANGED, pickhero_webhook_id=12))
        service.api.webhooks.delete.side_effect = PickHeroAPIException("Not found", 404)

        result = await service.refresh(TYPE_ORDER_STATUS_CHANGED)

        assert result["status"] == STATUS_ACTIVE

    @pytest.mark.asyncio
    async def test_unknown_type(self):
        with pytest.raises(WebhookException) as exc_info:
            await make_service().refresh("stock_changed")
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_response_without_id(self):
        service = make_service()
        service.api.webhooks.create.return_value = {"data": {}}

        with pytest.raises(PickHeroAPIException):
            await service.refresh(TYPE_ORDER_STATUS_CHANGED)

        service.repository.save.assert_not_awaited()


class TestRemove:
    @pytest.mark.asyncio
    async def test_remove(self):
        service = make_service(WebhookRegistration(type=TYPE_ORDER_STATUS_CHANGED, pickhero_webhook_id=12))

        result = await service.remove(TYPE_ORDER_STATUS_CHANGED)

        assert result == {"status": STATUS_INACTIVE, "statusText": "Not registered"}
        service.api.webhooks.delete.assert_awaited_once_with(12)
        service.repository.delete.assert_awaited_once_with(TYPE_ORDER_STATUS_CHANGED)
