"""Tests unitarios para el almacén de comercio en memoria."""

import json
from decimal import Decimal

import pytest

from app.domain.models.commerce import Order, Variant
from app.services.commerce.memory_store import InMemoryCommerceStore
from app.utils.error_handler import ConfigurationException

CATALOG = {
    "statuses": [{"id": 1, "handle": "completed", "name": "Completed"}, {"id": 2, "handle": "shipped"}],
    "variants": [
        {
            "id": 10,
            "sku": "SKU1",
            "title": "Azul",
            "price": "12.50",
            "stock": 3,
            "product": {"id": 1, "title": "Camisa", "fields": {"brand": "Acme"}},
            "fields": {"ean": "123"},
        },
        {"id": 11, "sku": "SKU2", "price": 5},
    ],
}


class TestCatalogFile:
    """Tests para la carga del catálogo desde JSON."""

    @pytest.mark.asyncio
    async def test_loads_statuses_and_variants(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(CATALOG), encoding="utf-8")

        store = InMemoryCommerceStore.from_catalog_file(path)

        assert (await store.get_order_status_by_handle("shipped")).id == 2
        variant = await store.get_variant_by_sku("SKU1")
        assert variant.price == Decimal("12.50")
        assert variant.product.title == "Camisa"
        assert variant.product.fields == {"brand": "Acme"}
        assert [v.sku for v in await store.list_variants()] == ["SKU1", "SKU2"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationException):
            InMemoryCommerceStore.from_catalog_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{", encoding="utf-8")

        with pytest.raises(ConfigurationException):
            InMemoryCommerceStore.from_catalog_file(path)


class TestStore:
    @pytest.mark.asyncio
    async def test_list_variants_paging(self):
        store = InMemoryCommerceStore(
            variants=[Variant(id=i, sku=f"S{i}", title="", price=Decimal("1")) for i in (3, 1, 2)]
        )

        assert [v.id for v in await store.list_variants(limit=2, offset=1)] == [2, 3]

    @pytest.mark.asyncio
    async def test_save_order_records_message(self):
        store = InMemoryCommerceStore()
        order = Order(id=1, number="n1", reference="1001")

        await store.save_order(order, "Status changed")

        assert (await store.find_order_by_reference("1001")) is order
        assert (await store.find_order_by_number("n1")) is order
        assert order.status_history == ["Status changed"]

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_block_save(self):
        store = InMemoryCommerceStore()
        calls = []

        async def failing(order):
            raise RuntimeError("boom")

        async def recording(order):
            calls.append(order.id)

        store.subscribe(failing)
        store.subscribe(recording)

        await store.save_order(Order(id=1, number="n1"))

        assert calls == [1]
