"""Tests unitarios para la exportación de productos y la importación de stock."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.db.pickhero_clients.stock_resource import StockResource
from app.domain.models.commerce import Product, Variant
from app.services.commerce.memory_store import InMemoryCommerceStore
from app.services.product_sync import ProductSync
from app.utils.error_handler import ConfigurationException, PickHeroAPIException

STOCK_RECORDS = [
    {"quantity": 5, "product": {"product_code": "SKU1"}},
    {"quantity": 3, "product": {"product_code": "SKU1"}},
    {"quantity": 2, "product": {"product_code": "SKU2"}},
    {"quantity": 9, "product": None},
]


def make_variant(variant_id: int, sku: str, stock: int = 0) -> Variant:
    return Variant(
        id=variant_id,
        sku=sku,
        title=sku,
        price=Decimal("10"),
        stock=stock,
        product=Product(id=variant_id, title=f"Product {sku}"),
    )


def make_api(existing=None) -> MagicMock:
    api = MagicMock()
    api.products.find_by_external_id = AsyncMock(return_value=existing)
    api.products.create = AsyncMock(return_value={"data": {"id": 1}})
    api.products.update = AsyncMock(return_value={"data": {"id": 1}})
    api.stock.list = AsyncMock(return_value={"data": STOCK_RECORDS})
    api.stock.aggregate_by_product_code = StockResource.aggregate_by_product_code
    api.stock.get_available_stock_by_product_code = AsyncMock(return_value=4)
    return api


class TestAggregateStock:
    def test_sums_per_product_code(self):
        """Debe sumar el stock de todas las ubicaciones por SKU."""
        assert StockResource.aggregate_by_product_code(STOCK_RECORDS) == {"SKU1": 8, "SKU2": 2}


class TestImportStock:
    """Tests para la importación de stock desde PickHero."""

    @pytest.mark.asyncio
    async def test_disabled_raises(self):
        sync = ProductSync(make_api(), InMemoryCommerceStore(), sync_stock=False)
        with pytest.raises(ConfigurationException):
            await sync.import_stock()

    @pytest.mark.asyncio
    async def test_updates_variant_stock(self):
        store = InMemoryCommerceStore(variants=[make_variant(1, "SKU1"), make_variant(2, "SKU2")])
        api = make_api()
        sync = ProductSync(api, store, sync_stock=True)

        results = await sync.import_stock()

        assert results == {"processed": 2, "skipped": 0, "errors": 0, "error_messages": []}
        assert (await store.get_variant_by_sku("SKU1")).stock == 8
        assert (await store.get_variant_by_sku("SKU2")).stock == 2
        api.stock.list.assert_awaited_once_with({"has_stock": "true"}, "-quantity", "product")

    @pytest.mark.asyncio
    async def test_offset_and_limit(self):
        store = InMemoryCommerceStore(variants=[make_variant(1, "SKU1"), make_variant(2, "SKU2")])
        sync = ProductSync(make_api(), store, sync_stock=True)

        results = await sync.import_stock(limit=1, offset=1)

        assert results["processed"] == 1
        assert results["skipped"] == 1
        assert (await store.get_variant_by_sku("SKU1")).stock == 0
        assert (await store.get_variant_by_sku("SKU2")).stock == 2

    @pytest.mark.asyncio
    async def test_unknown_sku_is_not_an_error(self):
        sync = ProductSync(make_api(), InMemoryCommerceStore(), sync_stock=True)
        results = await sync.import_stock()
        assert results["errors"] == 0

    @pytest.mark.asyncio
    async def test_unchanged_stock_is_not_saved(self):
        store = InMemoryCommerceStore(variants=[make_variant(1, "SKU1", stock=8)])
        sync = ProductSync(make_api(), store, sync_stock=True)

        assert await sync.update_stock("SKU1", 8) is False
        assert await sync.update_stock("SKU1", 9) is True

    @pytest.mark.asyncio
    async def test_sync_single_sku(self):
        store = InMemoryCommerceStore(variants=[make_variant(1, "SKU1")])
        sync = ProductSync(make_api(), store, sync_stock=True)

        assert await sync.sync_stock_from_pickhero("SKU1") is True
        assert (await store.get_variant_by_sku("SKU1")).stock == 4


class TestExportProducts:
    """Tests para la exportación de variantes a PickHero."""

    @pytest.mark.asyncio
    async def test_creates_missing_product(self):
        api = make_api(existing=None)
        sync = ProductSync(api, InMemoryCommerceStore())

        assert await sync.export_to_pickhero(make_variant(1, "SKU1")) == "created"

        payload = api.products.create.call_args.args[0]
        assert payload["external_id"] == "1"
        assert payload["product_code"] == "SKU1"

    @pytest.mark.asyncio
    async def test_updates_existing_product(self):
        api = make_api(existing={"id": 300})
        sync = ProductSync(api, InMemoryCommerceStore())

        assert await sync.export_to_pickhero(make_variant(1, "SKU1")) == "updated"

        product_id, payload = api.products.update.call_args.args
        assert product_id == 300
        assert "external_id" not in payload

    @pytest.mark.asyncio
    async def test_only_new_skips_existing(self):
        api = make_api(existing={"id": 300})
        sync = ProductSync(api, InMemoryCommerceStore())

        assert await sync.export_to_pickhero(make_variant(1, "SKU1"), only_new=True) == "skipped"
        api.products.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dry_run_sends_nothing(self):
        api = make_api(existing=None)
        sync = ProductSync(api, InMemoryCommerceStore())

        assert await sync.export_to_pickhero(make_variant(1, "SKU1"), dry_run=True) == "created"
        api.products.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_variant_without_sku_is_skipped(self):
        sync = ProductSync(make_api(), InMemoryCommerceStore())
        assert await sync.export_to_pickhero(make_variant(1, "")) == "skipped"

    @pytest.mark.asyncio
    async def test_export_multiple_counts_and_unique_errors(self):
        api = make_api(existing=None)
        api.products.create.side_effect = [
            {"data": {"id": 1}},
            PickHeroAPIException("Invalid", 422, {"product_code": ["taken"]}),
            PickHeroAPIException("Invalid", 422, {"product_code": ["taken"]}),
        ]
        sync = ProductSync(api, InMemoryCommerceStore())
        variants = [make_variant(1, "SKU1"), make_variant(2, "SKU2"), make_variant(3, "SKU2")]

        results = await sync.export_multiple(variants)

        assert results["created"] == 1
        assert results["errors"] == 2
        assert results["error_messages"] == ["SKU 'SKU2': Invalid - product_code: taken"]

    @pytest.mark.asyncio
    async def test_export_multiple_stop_on_error(self):
        api = make_api(existing=None)
        api.products.create.side_effect = PickHeroAPIException("Server error", 500)
        sync = ProductSync(api, InMemoryCommerceStore())

        with pytest.raises(PickHeroAPIException):
            await sync.export_multiple([make_variant(1, "SKU1"), make_variant(2, "SKU2")], stop_on_error=True)

        assert api.products.create.await_count == 1
