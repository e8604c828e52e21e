"""
Commerce platform models.

These dataclasses describe the parts of the commerce platform this service
reads and writes: orders with their addresses and line items, order
statuses, and purchasable variants with their parent product.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


@dataclass
class Asset:
    """A media asset (image, document) referenced by a product field."""

    url: str
    title: str = ""

    def __str__(self) -> str:
        return self.title or self.url


@dataclass
class Address:
    """
    Postal address attached to an order (shipping or billing).

    Attributes:
        first_name: Given name
        last_name: Family name
        full_name: Full name as entered, if any
        organization: Company name
        address_line1: Street and house number
        address_line2: Additional address line
        postal_code: Postal/ZIP code
        locality: City
        administrative_area: State/province/region
        country_code: ISO 3166-1 alpha-2 country code
        phone: Contact phone number
    """

    first_name: str | None = None
    last_name: str | None = None
    full_name: str | None = None
    organization: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    postal_code: str | None = None
    locality: str | None = None
    administrative_area: str | None = None
    country_code: str | None = None
    phone: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "organization": self.organization,
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "postal_code": self.postal_code,
            "locality": self.locality,
            "administrative_area": self.administrative_area,
            "country_code": self.country_code,
            "phone": self.phone,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Address":
        return cls(**{key: data.get(key) for key in cls.__dataclass_fields__})


@dataclass
class Product:
    """
    Parent product of one or more variants.

    ``fields`` holds custom field values (plain values, ``Asset`` objects or
    lists of related elements) that can be mapped onto PickHero product
    fields.
    """

    id: int
    title: str
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        return cls(id=int(data["id"]), title=data.get("title", ""), fields=dict(data.get("fields") or {}))


@dataclass
class Variant:
    """
    A purchasable variant of a product.

    Attributes:
        id: Variant ID (sent to PickHero as the product external_id)
        sku: Stock keeping unit (PickHero product_code)
        title: Variant title
        price: Unit price
        stock: Current stock level
        weight, length, width, height: Dimensions, if known
        product: Parent product
        fields: Custom field values
    """

    id: int
    sku: str
    title: str = ""
    price: Decimal = Decimal("0")
    stock: int = 0
    weight: float | None = None
    length: float | None = None
    width: float | None = None
    height: float | None = None
    product: Product | None = None
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Variant":
        """Build a variant from a catalog entry; ``product`` is a nested dict."""
        product = data.get("product")
        return cls(
            id=int(data["id"]),
            sku=data.get("sku") or "",
            title=data.get("title") or "",
            price=Decimal(str(data.get("price") or "0")),
            stock=int(data.get("stock") or 0),
            weight=data.get("weight"),
            length=data.get("length"),
            width=data.get("width"),
            height=data.get("height"),
            product=Product.from_dict(product) if product else None,
            fields=dict(data.get("fields") or {}),
        )


@dataclass
class LineItem:
    """
    An order line. ``purchasable`` is ``None`` for non-variant lines
    (donations, deleted products); those lines are not sent to PickHero.
    """

    id: int
    qty: int
    sale_price: Decimal
    sku: str = ""
    description: str = ""
    note: str = ""
    purchasable: Variant | None = None


@dataclass
class OrderStatus:
    """An order status configured in the commerce platform."""

    id: int
    handle: str
    name: str = ""


@dataclass
class Order:
    """
    Commerce order (Aggregate Root of the commerce side).

    Attributes:
        id: Order ID
        number: Internal order number (hash)
        reference: Human-readable order reference
        email: Buyer email
        customer_id: Buyer identifier, ``None`` for guest checkouts
        message: Customer remarks entered at checkout
        is_completed: Whether checkout was completed
        order_status: Current status, if any
        shipping_address: Delivery address
        billing_address: Invoice address
        line_items: Order lines
        status_history: Messages recorded on status changes
    """

    id: int
    number: str
    reference: str | None = None
    email: str | None = None
    customer_id: int | None = None
    message: str | None = None
    is_completed: bool = True
    order_status: OrderStatus | None = None
    shipping_address: Address | None = None
    billing_address: Address | None = None
    line_items: list[LineItem] = field(default_factory=list)
    status_history: list[str] = field(default_factory=list)

    @property
    def status_handle(self) -> str | None:
        """Handle of the current order status, if any."""
        return self.order_status.handle if self.order_status else None

    @property
    def display_reference(self) -> str:
        """Reference shown in logs: the reference when set, else the number."""
        return self.reference or self.number
