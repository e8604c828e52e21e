"""CustomerResolver service - SRP compliance."""

import logging
from typing import Any

from app.db.pickhero_clients import PickHeroAPI
from app.domain.models.commerce import Order
from app.services.orders.converters.order_converter import ADDRESS_TYPE_CUSTOMER, OrderConverter

logger = logging.getLogger(__name__)


class CustomerResolver:
    """Finds or creates the PickHero customer of an order (SRP: customer management only)."""

    def __init__(self, api: PickHeroAPI, converter: OrderConverter):
        """
        Initialize with SOLID dependencies (DIP).

        Args:
            api: PickHero gateway
            converter: Converter used for name extraction and address modifiers
        """
        self.api = api
        self.converter = converter

    async def ensure_customer_exists(self, order: Order) -> dict[str, Any] | None:
        """
        Return the PickHero customer for the order's buyer, creating it if needed.

        Guest orders (no customer id) have no PickHero customer.

        Returns:
            dict | None: PickHero customer or None for guest orders
        """
        if not order.customer_id:
            return None

        existing = await self.api.customers.find_by_external_id(str(order.customer_id))
        if existing is not None:
            logger.debug(f"Found existing PickHero customer {existing.get('id')} for customer {order.customer_id}")
            return existing

        response = await self.api.customers.create(self.build_customer_data(order))
        customer = (response or {}).get("data") or response
        logger.info(f"Created PickHero customer {customer.get('id')} for customer {order.customer_id}")
        return customer

    def build_customer_data(self, order: Order) -> dict[str, Any]:
        """
        Build the customer payload from the billing address (fallback: shipping).

        Empty values are left out.
        """
        address = order.billing_address or order.shipping_address

        data: dict[str, Any] = {
            "email": order.email,
            "name": self.converter.extract_name(address),
            "external_id": str(order.customer_id) if order.customer_id else None,
            "contact_name": self.converter.extract_contact_name(address),
        }

        if address is not None:
            data.update(
                {
                    "telephone": address.phone,
                    "address": address.address_line1,
                    "address2": address.address_line2,
                    "zipcode": address.postal_code,
                    "city": address.locality,
                    "region": address.administrative_area,
                    "country": address.country_code,
                }
            )

        data = {key: value for key, value in data.items() if value is not None and value != ""}

        if address is not None:
            for modifier in self.converter.address_modifiers:
                data = modifier(address, ADDRESS_TYPE_CUSTOMER, data)

        return data
