"""Tests unitarios para los resolvers de clientes y productos de PickHero."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.domain.models.commerce import Address, Order, Product, Variant
from app.services.orders.converters import ADDRESS_TYPE_CUSTOMER, OrderConverter
from app.services.orders.resolvers import CustomerResolver, ProductResolver
from app.utils.error_handler import PickHeroAPIException


def make_api() -> MagicMock:
    api = MagicMock()
    api.customers.find_by_external_id = AsyncMock(return_value=None)
    api.customers.create = AsyncMock(return_value={"data": {"id": 501}})
    api.products.find_by_external_id = AsyncMock(return_value=None)
    api.products.create = AsyncMock(return_value={"data": {"id": 77}})
    api.products.update = AsyncMock(return_value={"data": {"id": 77, "name": "Camisa"}})
    return api


def make_variant() -> Variant:
    return Variant(id=10, sku="SKU1", title="Camisa", price=Decimal("10"), product=Product(id=1, title="Camisa"))


class TestCustomerResolver:
    """Tests para CustomerResolver."""

    @pytest.mark.asyncio
    async def test_guest_order_has_no_customer(self):
        api = make_api()
        resolver = CustomerResolver(api, OrderConverter())

        assert await resolver.ensure_customer_exists(Order(id=1, number="n1", customer_id=None)) is None
        api.customers.find_by_external_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_existing_customer_is_reused(self):
        api = make_api()
        api.customers.find_by_external_id.return_value = {"id": 9}
        resolver = CustomerResolver(api, OrderConverter())

        assert await resolver.ensure_customer_exists(Order(id=1, number="n1", customer_id=3)) == {"id": 9}
        api.customers.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_creates_customer_from_billing_address(self):
        api = make_api()
        resolver = CustomerResolver(api, OrderConverter())
        order = Order(
            id=1,
            number="n1",
            customer_id=3,
            email="ana@example.com",
            shipping_address=Address(first_name="Otro", address_line1="Envío 1"),
            billing_address=Address(first_name="Ana", last_name="Mora", address_line1="Calle 1", country_code="CR"),
        )

        assert await resolver.ensure_customer_exists(order) == {"id": 501}

        payload = api.customers.create.call_args.args[0]
        assert payload == {
            "email": "ana@example.com",
            "name": "Ana Mora",
            "external_id": "3",
            "address": "Calle 1",
            "country": "CR",
        }

    def test_customer_address_modifier(self):
        def modifier(address, address_type, payload):
            return {**payload, "type": address_type}

        converter = OrderConverter(address_modifiers=[modifier])
        order = Order(id=1, number="n1", customer_id=3, billing_address=Address(first_name="Ana"))

        assert CustomerResolver(make_api(), converter).build_customer_data(order)["type"] == ADDRESS_TYPE_CUSTOMER


class TestProductResolver:
    """Tests para ProductResolver."""

    @pytest.mark.asyncio
    async def test_existing_product_is_updated(self):
        api = make_api()
        api.products.find_by_external_id.return_value = {"id": 77}

        product = await ProductResolver(api).resolve_for_line_item(make_variant(), create_missing=False)

        assert product["id"] == 77
        api.products.update.assert_awaited_once()
        api.products.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_product_is_created_when_allowed(self):
        api = make_api()

        product = await ProductResolver(api).resolve_for_line_item(make_variant(), create_missing=True)

        assert product == {"id": 77}
        assert api.products.create.call_args.args[0]["external_id"] == "10"

    @pytest.mark.asyncio
    async def test_missing_product_raises_when_not_allowed(self):
        api = make_api()

        with pytest.raises(PickHeroAPIException) as exc_info:
            await ProductResolver(api).resolve_for_line_item(make_variant(), create_missing=False)

        assert exc_info.value.is_not_found
        api.products.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ensure_products_exist_skips_non_variants(self):
        api = make_api()
        api.products.find_by_external_id.side_effect = [None, {"id": 5}]
        variants = [make_variant(), "donation", Variant(id=11, sku="SKU2", title="", price=Decimal("1"))]

        await ProductResolver(api).ensure_products_exist(variants)

        assert api.products.create.await_count == 1
        assert api.products.update.await_count == 1
