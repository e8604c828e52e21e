"""Tests unitarios para el estado de sincronización de pedidos."""

import pytest

from app.domain.models.commerce import Order
from app.domain.models.sync_status import OrderSyncStatus


class TestExternalId:
    """Tests para el external id que el pedido lleva en PickHero."""

    def test_first_submission_uses_order_id(self):
        """Debe usar el ID del pedido tal cual en el primer envío."""
        status = OrderSyncStatus(order_id=42)
        assert status.external_id == "42"

    def test_after_unlink_adds_suffix(self):
        """Debe añadir el sufijo -<n> después de desvincular."""
        status = OrderSyncStatus(order_id=42, submission_count=1)
        assert status.external_id == "42-1"

    def test_unlink_increments_count_and_resets_flags(self):
        """Debe olvidar el pedido de PickHero y pasar al siguiente sufijo."""
        status = OrderSyncStatus(
            order_id=42,
            pickhero_order_id=900,
            pickhero_order_number="PH-900",
            pushed=True,
            stock_allocated=True,
            processed=True,
        )

        status.unlink()

        assert status.submission_count == 1
        assert status.external_id == "42-1"
        assert status.pickhero_order_id is None
        assert status.pickhero_order_number is None
        assert not status.pushed
        assert not status.stock_allocated
        assert not status.processed


class TestBindOrder:
    """Tests para la asociación del registro con un pedido."""

    def test_bind_same_order_twice(self):
        """Debe permitir volver a asociar el mismo pedido."""
        status = OrderSyncStatus()
        status.bind_order(7)
        status.bind_order(7)
        assert status.order_id == 7

    def test_bind_different_order_raises(self):
        """Debe rechazar cambiar el pedido una vez asociado."""
        status = OrderSyncStatus(order_id=7)
        with pytest.raises(ValueError, match="Cannot change order ID"):
            status.bind_order(8)

    def test_attach_order_keeps_loaded_order(self):
        """Debe guardar el pedido cargado sin formar parte de la igualdad."""
        order = Order(id=5, number="abc")
        status = OrderSyncStatus()
        status.attach_order(order)

        assert status.order is order
        assert status == OrderSyncStatus(order_id=5)

    def test_flags_are_independent(self):
        """Un pedido procesado por webhook no tiene por qué estar enviado."""
        status = OrderSyncStatus(order_id=1, stock_allocated=True, processed=True)
        assert not status.is_submitted
        assert not status.is_fully_processed

    def test_to_dict_includes_external_id(self):
        data = OrderSyncStatus(order_id=3, submission_count=2).to_dict()
        assert data["external_id"] == "3-2"
        assert data["pushed"] is False
