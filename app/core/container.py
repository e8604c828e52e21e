"""
Contenedor de servicios de la aplicación.

Construye una sola vez todos los servicios con sus dependencias explícitas
(gateway de PickHero, repositorios, orquestador, cola, receptor de webhooks)
y los expone a los endpoints a través de ``app.state.container``.
"""

import logging
from typing import Optional

from fastapi import Request

from app.core.config import Settings, get_settings
from app.db.connection import ConnDB, get_db_connection
from app.db.pickhero_clients import PickHeroAPI
from app.db.repositories import OrderSyncStatusRepository, WebhookRepository
from app.services.commerce.interfaces import ICommerceStore
from app.services.commerce.memory_store import InMemoryCommerceStore
from app.services.orders.converters import OrderConverter
from app.services.orders.order_listener import OrderSavedHandler
from app.services.orders.orchestrator import create_orchestrator
from app.services.orders.sync_queue import SyncOrderQueue
from app.services.product_sync import ProductSync
from app.services.products.field_mapping import FieldMappingEvaluator
from app.services.webhook_handler import WebhookReceiver
from app.services.webhook_registration import WebhookRegistrationService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Servicios compartidos de la aplicación.

    Args:
        settings: Configuración de la aplicación
        api: Gateway de PickHero
        store: Plataforma de comercio
        conn_db: Conexión a la base de datos de sincronización
    """

    def __init__(self, settings: Settings, api: PickHeroAPI, store: ICommerceStore, conn_db: ConnDB):
        self.settings = settings
        self.api = api
        self.store = store
        self.conn_db = conn_db

        self.sync_repository = OrderSyncStatusRepository(conn_db)
        self.webhook_repository = WebhookRepository(conn_db)

        self.converter = OrderConverter(order_url_template=settings.ORDER_URL_TEMPLATE)
        self.evaluator = FieldMappingEvaluator.from_config(settings.PRODUCT_FIELD_MAPPING)
        self.orchestrator = create_orchestrator(api, self.sync_repository, settings, self.converter)

        self.queue = SyncOrderQueue(store, self.orchestrator)
        self.order_listener = OrderSavedHandler(self.queue, settings.PUSH_ORDERS)

        self.webhook_receiver = WebhookReceiver(
            webhook_repository=self.webhook_repository,
            store=store,
            sync_repository=self.sync_repository,
            status_mapping=settings.ORDER_STATUS_MAPPING,
            sync_order_status=settings.SYNC_ORDER_STATUS,
        )
        self.webhook_registration = WebhookRegistrationService(
            api, self.webhook_repository, settings.webhook_base_url
        )
        self.product_sync = ProductSync(api, store, self.evaluator, sync_stock=settings.SYNC_STOCK)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        store: Optional[ICommerceStore] = None,
        conn_db: Optional[ConnDB] = None,
    ) -> "ServiceContainer":
        """
        Construye el contenedor desde la configuración.

        Raises:
            ConfigurationException: Si falta la configuración de PickHero
        """
        settings = settings or get_settings()
        return cls(
            settings=settings,
            api=PickHeroAPI.from_settings(settings),
            store=store or _default_store(settings),
            conn_db=conn_db or get_db_connection(),
        )

    async def start(self) -> None:
        """Abre la sesión HTTP, suscribe el listener de pedidos e inicia la cola."""
        await self.api.open()
        self.store.subscribe(self.order_listener)
        await self.queue.start()
        logger.info(f"✅ Services started (push orders: {self.settings.PUSH_ORDERS})")

    async def stop(self) -> None:
        self.store.unsubscribe(self.order_listener)
        await self.queue.stop()
        await self.api.close()
        logger.info("Services stopped")


def _default_store(settings: Settings) -> InMemoryCommerceStore:
    if settings.COMMERCE_CATALOG_FILE:
        return InMemoryCommerceStore.from_catalog_file(settings.COMMERCE_CATALOG_FILE)
    return InMemoryCommerceStore()


def get_container(request: Request) -> ServiceContainer:
    """Dependencia de FastAPI que devuelve el contenedor de la aplicación."""
    return request.app.state.container
