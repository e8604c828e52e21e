"""Tests de integración de los endpoints HTTP con servicios simulados."""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.domain.models.commerce import Order, OrderStatus, Variant
from app.domain.models.sync_status import OrderSyncStatus
from app.main import create_application
from app.services.commerce.memory_store import InMemoryCommerceStore
from app.utils.error_handler import PickHeroAPIException, WebhookException


def make_container(sync_stock: bool = True) -> SimpleNamespace:
    store = InMemoryCommerceStore(
        orders=[
            Order(id=42, number="a1b2", reference="1001", order_status=OrderStatus(id=1, handle="paid")),
            Order(id=43, number="cart", is_completed=False),
        ],
        variants=[Variant(id=i, sku=f"SKU{i}", title="", price=Decimal("1")) for i in range(1, 4)],
    )

    orchestrator = MagicMock()

    async def get_sync_status(order):
        status = OrderSyncStatus()
        status.attach_order(order)
        return status

    orchestrator.get_sync_status = AsyncMock(side_effect=get_sync_status)
    orchestrator.submit_to_pickhero = AsyncMock(return_value=True)
    orchestrator.trigger_processing = AsyncMock(return_value=True)
    orchestrator.unlink = AsyncMock()

    product_sync = MagicMock()
    product_sync.export_multiple = AsyncMock(
        return_value={"created": 2, "updated": 1, "skipped": 0, "errors": 0, "error_messages": []}
    )
    product_sync.import_stock = AsyncMock(
        return_value={"processed": 2, "skipped": 0, "errors": 0, "error_messages": []}
    )

    return SimpleNamespace(
        settings=Settings(SYNC_STOCK=sync_stock),
        store=store,
        orchestrator=orchestrator,
        product_sync=product_sync,
        webhook_receiver=MagicMock(handle_order_status_changed=AsyncMock(return_value=(200, {"status": "OK"}))),
        webhook_registration=MagicMock(
            get_hook_status=AsyncMock(return_value={"status": "none", "statusText": "Not registered"}),
            refresh=AsyncMock(return_value={"status": "active", "statusText": "Active"}),
            remove=AsyncMock(return_value={"status": "inactive", "statusText": "Not registered"}),
        ),
    )


@pytest.fixture
def container():
    return make_container()


@pytest.fixture
def client(container):
    return TestClient(create_application(container))


class TestRootEndpoints:
    def test_ping(self, client):
        response = client.get("/ping")
        assert response.status_code == 200
        assert response.json()["message"] == "pong"

    def test_root_lists_endpoints(self, client):
        assert client.get("/").json()["endpoints"]["webhooks"] == "/api/v1/webhooks"


class TestWebhookEndpoint:
    """Tests para el endpoint de webhooks de PickHero."""

    def test_passes_raw_body_and_signature(self, client, container):
        response = client.post(
            "/api/v1/webhooks/order-status-changed",
            content=b'{"data": {}}',
            headers={"x-webhook-signature": "abc"},
        )

        assert response.status_code == 200
        assert response.json() == {"status": "OK"}
        container.webhook_receiver.handle_order_status_changed.assert_awaited_once_with(b'{"data": {}}', "abc")

    def test_receiver_status_code_is_returned(self, client, container):
        container.webhook_receiver.handle_order_status_changed.return_value = (401, {"status": "ERROR"})

        response = client.post("/api/v1/webhooks/order-status-changed", content=b"{}")

        assert response.status_code == 401
        assert response.json() == {"status": "ERROR"}


class TestAdminWebhookEndpoints:
    def test_status(self, client, container):
        response = client.get("/api/v1/admin/webhooks/status", params={"type": "order_status_changed"})

        assert response.json()["status"] == "none"
        container.webhook_registration.get_hook_status.assert_awaited_once_with("order_status_changed")

    def test_refresh_default_type(self, client, container):
        response = client.post("/api/v1/admin/webhooks/refresh", json={})

        assert response.json()["status"] == "active"
        container.webhook_registration.refresh.assert_awaited_once_with("order_status_changed")

    def test_refresh_unknown_type(self, client, container):
        container.webhook_registration.refresh.side_effect = WebhookException("Unknown webhook type: x")

        response = client.post("/api/v1/admin/webhooks/refresh", json={"type": "x"})

        assert response.status_code == 400
        assert response.json()["message"] == "Unknown webhook type: x"

    def test_pickhero_error_is_502(self, client, container):
        container.webhook_registration.remove.side_effect = PickHeroAPIException("Unauthenticated.", 401)

        response = client.post("/api/v1/admin/webhooks/remove", json={"type": "order_status_changed"})

        assert response.status_code == 502
        assert response.json()["api_status"] == 401


class TestOrderEndpoints:
    """Tests para las acciones manuales sobre pedidos."""

    def test_status(self, client):
        body = client.get("/api/v1/orders/42").json()

        assert body["reference"] == "1001"
        assert body["sync_status"]["external_id"] == "42"

    def test_unknown_or_incomplete_order(self, client):
        assert client.get("/api/v1/orders/99").status_code == 404
        assert client.post("/api/v1/orders/43/push").status_code == 404

    def test_push_forces_resubmit(self, client, container):
        response = client.post("/api/v1/orders/42/push")

        assert response.json()["success"] is True
        assert response.json()["message"] == "Order sent to PickHero successfully."
        assert container.orchestrator.submit_to_pickhero.call_args.kwargs == {"force_resubmit": True}

    def test_push_failure_reports_message(self, client, container):
        container.orchestrator.submit_to_pickhero.side_effect = PickHeroAPIException("Server error", 500)

        body = client.post("/api/v1/orders/42/push").json()

        assert body["success"] is False
        assert body["message"] == "Failed to send order to PickHero. Check the logs for details."

    def test_process(self, client, container):
        body = client.post("/api/v1/orders/42/process").json()

        assert body["success"] is True
        container.orchestrator.trigger_processing.assert_awaited_once()

    def test_unlink(self, client, container):
        body = client.post("/api/v1/orders/42/unlink").json()

        assert body == {
            "success": True,
            "message": "Order unlinked from PickHero.",
            "sync_status": body["sync_status"],
        }
        container.orchestrator.unlink.assert_awaited_once()


class TestSyncEndpoints:
    """Tests para la exportación de productos y la importación de stock."""

    def test_export_products(self, client, container):
        response = client.post("/api/v1/sync/products/export", json={"limit": 2, "offset": 1, "dry_run": True})

        assert response.status_code == 200
        assert response.json()["created"] == 2
        variants = container.product_sync.export_multiple.call_args.args[0]
        assert [variant.id for variant in variants] == [2, 3]
        assert container.product_sync.export_multiple.call_args.kwargs == {"only_new": False, "dry_run": True}

    def test_import_stock(self, client, container):
        response = client.post("/api/v1/sync/stock/import", json={})

        assert response.json()["processed"] == 2
        container.product_sync.import_stock.assert_awaited_once_with(limit=None, offset=None)

    def test_import_stock_disabled(self):
        client = TestClient(create_application(make_container(sync_stock=False)))

        response = client.post("/api/v1/sync/stock/import", json={})

        assert response.status_code == 400
