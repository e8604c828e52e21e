"""OrderConverter service - converts commerce orders to PickHero payloads (SRP)."""

import logging
from typing import Any, Callable, Iterable

from app.domain.models.commerce import Address, LineItem, Order

logger = logging.getLogger(__name__)

ADDRESS_TYPE_DELIVERY = "delivery"
ADDRESS_TYPE_INVOICE = "invoice"
ADDRESS_TYPE_CUSTOMER = "customer"

# (address, address_type, payload) -> payload
AddressModifier = Callable[[Address, str, dict[str, Any]], dict[str, Any]]
# (order, line_items) -> line_items
LineItemsModifier = Callable[[Order, list[LineItem]], list[LineItem]]
# (order, payload) -> payload
PayloadModifier = Callable[[Order, dict[str, Any]], dict[str, Any]]


def _sparse(data: dict[str, Any]) -> dict[str, Any]:
    """Elimina valores None y cadenas vacías."""
    return {key: value for key, value in data.items() if value is not None and value != ""}


def compare_addresses(a: Address | None, b: Address | None) -> bool:
    """
    Compara dos direcciones para decidir si la de facturación es la de entrega.

    Dos ``None`` son iguales; una sola ``None`` no. En otro caso se comparan
    exactamente línea 1, línea 2, código postal, localidad y país.
    """
    if a is None or b is None:
        return a is b

    return (
        a.address_line1 == b.address_line1
        and a.address_line2 == b.address_line2
        and a.postal_code == b.postal_code
        and a.locality == b.locality
        and a.country_code == b.country_code
    )


def _person_name(address: Address) -> str | None:
    if address.full_name:
        return address.full_name
    if address.first_name or address.last_name:
        return f"{address.first_name or ''} {address.last_name or ''}".strip()
    return None


class OrderConverter:
    """
    Builds PickHero order and address payloads.

    Collaborators can customize the result through modifiers:
    address modifiers (per address type), line-item modifiers and
    payload modifiers. Each receives the current value and returns the
    value to use.

    Args:
        order_url_template: Back-link to the order, with ``{order_id}``
        address_modifiers: Initial address modifiers
        line_items_modifiers: Initial line-item modifiers
        payload_modifiers: Initial payload modifiers
    """

    def __init__(
        self,
        order_url_template: str = "",
        address_modifiers: Iterable[AddressModifier] = (),
        line_items_modifiers: Iterable[LineItemsModifier] = (),
        payload_modifiers: Iterable[PayloadModifier] = (),
    ):
        self.order_url_template = order_url_template
        self.address_modifiers: list[AddressModifier] = list(address_modifiers)
        self.line_items_modifiers: list[LineItemsModifier] = list(line_items_modifiers)
        self.payload_modifiers: list[PayloadModifier] = list(payload_modifiers)

    def add_address_modifier(self, modifier: AddressModifier) -> None:
        self.address_modifiers.append(modifier)

    def add_line_items_modifier(self, modifier: LineItemsModifier) -> None:
        self.line_items_modifiers.append(modifier)

    def add_payload_modifier(self, modifier: PayloadModifier) -> None:
        self.payload_modifiers.append(modifier)

    @staticmethod
    def build_external_id(order_id: int, submission_count: int = 0) -> str:
        """``"<order_id>"`` on the first submission, ``"<order_id>-<n>"`` after n unlinks."""
        if submission_count > 0:
            return f"{order_id}-{submission_count}"
        return str(order_id)

    def build_order_url(self, order: Order) -> str | None:
        if not self.order_url_template:
            return None
        return self.order_url_template.format(order_id=order.id, number=order.number)

    def transform_order(self, order: Order, submission_count: int = 0) -> dict[str, Any]:
        """
        Transform an order into the PickHero order payload.

        Rows are not included; they are resolved separately because each
        one needs a PickHero product id.

        Args:
            order: Commerce order
            submission_count: Number of previous unlinks of the order

        Returns:
            dict: Order payload
        """
        shipping = order.shipping_address
        billing = order.billing_address

        payload: dict[str, Any] = {
            "external_id": self.build_external_id(order.id, submission_count),
            "external_number": order.reference or order.number,
            "external_url": self.build_order_url(order),
            "reference": order.reference,
            "email_address": order.email,
        }

        if order.message:
            payload["customer_remarks"] = order.message

        if shipping is not None and shipping.phone:
            payload["telephone"] = shipping.phone

        if shipping is not None:
            payload["delivery"] = self.transform_address(shipping, ADDRESS_TYPE_DELIVERY)

        if billing is not None:
            same_as_delivery = compare_addresses(shipping, billing)
            payload["invoice"] = {"same_as_delivery": same_as_delivery}
            if not same_as_delivery:
                payload["invoice"].update(self.transform_address(billing, ADDRESS_TYPE_INVOICE))

        for modifier in self.payload_modifiers:
            payload = modifier(order, payload)

        return payload

    def transform_address(self, address: Address, address_type: str = ADDRESS_TYPE_DELIVERY) -> dict[str, Any]:
        """
        Transform an address into a sparse PickHero address object.

        Args:
            address: Address to transform
            address_type: ``delivery``, ``invoice`` or ``customer``

        Returns:
            dict: Address payload after all address modifiers
        """
        payload = _sparse(
            {
                "name": self.extract_name(address),
                "contact_name": self.extract_contact_name(address),
                "address": address.address_line1,
                "address2": address.address_line2,
                "zipcode": address.postal_code,
                "city": address.locality,
                "region": address.administrative_area,
                "country": address.country_code,
            }
        )

        for modifier in self.address_modifiers:
            payload = modifier(address, address_type, payload)

        return payload

    def collect_line_items(self, order: Order) -> list[LineItem]:
        line_items = list(order.line_items)
        for modifier in self.line_items_modifiers:
            line_items = modifier(order, line_items)
        return line_items

    @staticmethod
    def extract_name(address: Address | None) -> str | None:
        """Organización, si no nombre completo, si no nombre + apellido."""
        if address is None:
            return None
        if address.organization:
            return address.organization
        return _person_name(address)

    @staticmethod
    def extract_contact_name(address: Address | None) -> str | None:
        """Persona de contacto; solo aplica cuando la dirección es de una organización."""
        if address is None or not address.organization:
            return None
        return _person_name(address)
