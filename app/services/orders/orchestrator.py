"""
OrderSyncOrchestrator - drives the per-order PickHero state machine.

The state of an order is the flag triple (pushed, stock_allocated,
processed) of its ``OrderSyncStatus``:

- submit: create the PickHero order once (or update it when forced)
- process: allocate stock in PickHero, at most once
- unlink: forget the PickHero order so the next submit creates a new one

Collaborators are injected through the constructor; ``create_orchestrator``
wires the default ones.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from app.core.config import Settings, get_settings
from app.core.logging_config import log_sync_operation
from app.db.pickhero_clients import PickHeroAPI
from app.domain.models import Order, OrderSyncStatus, Variant
from app.services.orders.converters import OrderConverter
from app.services.orders.interfaces import (
    ICustomerResolver,
    IOrderConverter,
    IProductResolver,
    ISyncStatusRepository,
)
from app.services.orders.resolvers import CustomerResolver, ProductResolver
from app.services.products.field_mapping import FieldMappingEvaluator
from app.utils.error_handler import ErrorCode, PickHeroAPIException, SyncException

logger = logging.getLogger(__name__)


@dataclass
class SyncOptions:
    """
    Order sync rules.

    Attributes:
        statuses_to_push: Order status handles that submit the order
        statuses_to_process: Order status handles that trigger processing
        push_prices: Send line-item sale prices
        create_missing_products: Create PickHero products that do not exist yet
    """

    statuses_to_push: list[str] = field(default_factory=list)
    statuses_to_process: list[str] = field(default_factory=list)
    push_prices: bool = False
    create_missing_products: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "SyncOptions":
        return cls(
            statuses_to_push=list(settings.ORDER_STATUS_TO_PUSH),
            statuses_to_process=list(settings.ORDER_STATUS_TO_PROCESS),
            push_prices=settings.PUSH_PRICES,
            create_missing_products=settings.CREATE_MISSING_PRODUCTS,
        )


class OrderSyncOrchestrator:
    """
    Orchestrates order synchronization with PickHero.

    Errors from PickHero propagate from ``submit_to_pickhero`` and
    ``trigger_processing``; only ``handle_order_change`` swallows them
    (after logging) because it runs in the background.
    """

    def __init__(
        self,
        api: PickHeroAPI,
        repository: ISyncStatusRepository,
        converter: IOrderConverter,
        product_resolver: IProductResolver,
        customer_resolver: ICustomerResolver,
        options: SyncOptions,
    ):
        """
        Initialize orchestrator with service dependencies (DIP).

        Args:
            api: PickHero gateway
            repository: Sync status persistence
            converter: Order -> PickHero payload conversion
            product_resolver: PickHero product lookup/creation
            customer_resolver: PickHero customer lookup/creation
            options: Status rules and push options
        """
        self.api = api
        self.repository = repository
        self.converter = converter
        self.product_resolver = product_resolver
        self.customer_resolver = customer_resolver
        self.options = options

    # === ESTADO DE SINCRONIZACIÓN ===

    async def get_sync_status(self, order: Order) -> OrderSyncStatus:
        """Sync status of an order; a new unsaved one if the order was never synced."""
        status = await self.repository.get_or_new(order.id)
        status.attach_order(order)
        return status

    async def save_sync_status(self, status: OrderSyncStatus) -> OrderSyncStatus:
        return await self.repository.upsert(status)

    # === FLUJO PRINCIPAL ===

    async def handle_order_change(self, order: Order) -> None:
        """
        React to an order save: submit and/or process depending on its status.

        Never raises; failures are logged.
        """
        try:
            status_handle = order.status_handle
            should_push = status_handle in self.options.statuses_to_push
            should_process = status_handle in self.options.statuses_to_process
            if status_handle is None or not (should_push or should_process):
                return

            sync_status = await self.get_sync_status(order)

            if should_push:
                await self.submit_to_pickhero(sync_status)

            if should_process:
                await self.trigger_processing(sync_status)

        except Exception as e:
            logger.error(f"❌ PickHero sync failed for order #{order.number}: {e}", exc_info=True)

    async def submit_to_pickhero(self, sync_status: OrderSyncStatus, force_resubmit: bool = False) -> bool:
        """
        Submit an order to PickHero.

        Creates the PickHero order when the status has no PickHero order id
        yet, otherwise updates it (rows cannot change after creation).

        Args:
            sync_status: Sync status with the order attached
            force_resubmit: Submit even if already pushed

        Returns:
            bool: True if the order was submitted, False if it already was

        Raises:
            SyncException: If no order is attached to the status
            PickHeroAPIException: If PickHero rejects a request
        """
        order = self._require_order(sync_status, "submit")

        if sync_status.pushed and not force_resubmit:
            return False

        if not sync_status.pickhero_order_id:
            result = await self.create_remote_order(order, sync_status.submission_count)
            sync_status.pickhero_order_id = result.get("id")
            sync_status.pickhero_order_number = result.get("number")
            sync_status.public_status_page = None
        else:
            await self.modify_remote_order(sync_status.pickhero_order_id, order, sync_status.submission_count)

        sync_status.pushed = True
        await self.save_sync_status(sync_status)

        logger.info(f"✅ Order #{order.number} submitted to PickHero (ID: {sync_status.pickhero_order_id})")
        log_sync_operation("submit", order.id, pickhero_order_id=sync_status.pickhero_order_id)
        return True

    async def trigger_processing(self, sync_status: OrderSyncStatus) -> bool:
        """
        Trigger stock allocation / processing of an order in PickHero.

        The order is submitted first if needed. A validation error from
        PickHero (e.g. the order is already processed) is logged and the
        order is still marked processed; other errors propagate.

        Returns:
            bool: True if processing was triggered, False if already processed
        """
        order = self._require_order(sync_status, "process")

        if not sync_status.pushed:
            await self.submit_to_pickhero(sync_status)

        if sync_status.processed:
            return False

        try:
            await self.api.orders.process(sync_status.pickhero_order_id)
        except PickHeroAPIException as e:
            if not e.is_validation_error:
                raise
            logger.warning(f"Processing request declined: {e.message}")

        sync_status.stock_allocated = True
        sync_status.processed = True
        await self.save_sync_status(sync_status)

        logger.info(f"Order #{order.number} processing triggered in PickHero")
        log_sync_operation("process", order.id, pickhero_order_id=sync_status.pickhero_order_id)
        return True

    async def unlink(self, sync_status: OrderSyncStatus) -> OrderSyncStatus:
        """Forget the PickHero order; the next submit creates a new one with a new external id."""
        sync_status.unlink()
        await self.save_sync_status(sync_status)
        logger.info(
            f"Order {sync_status.order_id} unlinked from PickHero (submission count: {sync_status.submission_count})"
        )
        log_sync_operation("unlink", sync_status.order_id, submission_count=sync_status.submission_count)
        return sync_status

    async def find_matching_orders(self, order: Order) -> list[dict[str, Any]]:
        """PickHero orders whose external id equals the order id."""
        response = await self.api.orders.find_by_external_id(str(order.id))
        return (response or {}).get("data") or []

    # === LLAMADAS A PICKHERO ===

    async def create_remote_order(self, order: Order, submission_count: int = 0) -> dict[str, Any]:
        """
        Create the order in PickHero with customer and rows.

        Returns:
            dict: The created PickHero order
        """
        customer = await self.customer_resolver.ensure_customer_exists(order)

        payload = self.converter.transform_order(order, submission_count)
        if customer is not None:
            payload["customer_id"] = int(customer["id"])

        payload["rows"] = []
        for line_item in self.converter.collect_line_items(order):
            variant = line_item.purchasable
            if not isinstance(variant, Variant):
                continue

            product = await self.product_resolver.resolve_for_line_item(
                variant, self.options.create_missing_products
            )

            row: dict[str, Any] = {"product_id": int(product["id"]), "quantity": int(line_item.qty)}
            if self.options.push_prices:
                row["price"] = float(line_item.sale_price)
            if line_item.note:
                row["remarks"] = str(line_item.note)

            payload["rows"].append(row)

        response = await self.api.orders.create(payload)
        return (response or {}).get("data") or response or {}

    async def modify_remote_order(
        self, pickhero_order_id: int, order: Order, submission_count: int = 0
    ) -> dict[str, Any]:
        """Update order details in PickHero; rows are never sent."""
        payload = self.converter.transform_order(order, submission_count)
        payload.pop("rows", None)

        response = await self.api.orders.update(pickhero_order_id, payload)
        return (response or {}).get("data") or response or {}

    @staticmethod
    def _require_order(sync_status: OrderSyncStatus, operation: str) -> Order:
        if sync_status.order is None:
            raise SyncException(
                "Order not found in sync status.",
                operation=operation,
                order_id=sync_status.order_id,
                error_code=ErrorCode.ORDER_NOT_BOUND,
            )
        return sync_status.order


# Factory function to create orchestrator with all dependencies
def create_orchestrator(
    api: PickHeroAPI,
    repository: ISyncStatusRepository,
    settings: Settings | None = None,
    converter: OrderConverter | None = None,
) -> OrderSyncOrchestrator:
    """
    Create a fully wired orchestrator.

    Args:
        api: PickHero gateway
        repository: Sync status repository
        settings: Application settings (default: ``get_settings()``)
        converter: Converter to use, e.g. one with modifiers registered

    Returns:
        OrderSyncOrchestrator: Configured orchestrator
    """
    settings = settings or get_settings()
    converter = converter or OrderConverter(order_url_template=settings.ORDER_URL_TEMPLATE)
    evaluator = FieldMappingEvaluator.from_config(settings.PRODUCT_FIELD_MAPPING)

    return OrderSyncOrchestrator(
        api=api,
        repository=repository,
        converter=converter,
        product_resolver=ProductResolver(api, evaluator),
        customer_resolver=CustomerResolver(api, converter),
        options=SyncOptions.from_settings(settings),
    )
