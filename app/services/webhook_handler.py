"""
Manejador de webhooks de PickHero.

PickHero notifica cambios de estado de pedidos. El receptor valida el
payload contra el registro local del topic (incluida la firma HMAC),
traduce el estado de PickHero a un estado local según el mapeo configurado
y marca el pedido como procesado, sin volver a enviarlo a PickHero.
"""

import hashlib
import hmac
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from app.db.repositories.webhook_repository import WebhookRepository
from app.domain.models.commerce import Order
from app.domain.models.webhook import TYPE_ORDER_STATUS_CHANGED
from app.services.commerce.interfaces import ICommerceStore
from app.services.commerce.order_events import suppress_auto_push
from app.services.orders.interfaces import ISyncStatusRepository
from app.utils.error_handler import ConfigurationException, WebhookException
from app.utils.order_lock import LockAcquisitionError, OrderLock

logger = logging.getLogger(__name__)

STATUS_MESSAGE = "[PickHero] Status updated via webhook ({status})"

# A busy order answers 500 quickly; PickHero redelivers the webhook
WEBHOOK_LOCK_WAIT_SECONDS = 5


def compute_signature(secret: str, payload: bytes) -> str:
    """Firma esperada: ``hex(hmac_sha256(secret, payload))``."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_signature(secret: str, payload: bytes, signature: Optional[str]) -> bool:
    """
    Verifica la firma HMAC del webhook.

    Args:
        secret: Secreto compartido del registro
        payload: Cuerpo crudo de la petición
        signature: Valor del header ``x-webhook-signature``

    Returns:
        bool: True si la firma es válida
    """
    expected = compute_signature(secret, payload)
    # Comparación segura contra timing attacks
    return hmac.compare_digest(expected.encode("utf-8"), (signature or "").encode("utf-8"))


class WebhookReceiver:
    """
    Procesador de webhooks entrantes de PickHero.

    Args:
        webhook_repository: Registros de webhooks (secreto por topic)
        store: Plataforma de comercio
        sync_repository: Estado de sincronización de pedidos
        status_mapping: Lista ordenada de ``{"pickhero": ..., "changeTo": ...}``
        sync_order_status: Setting ``SYNC_ORDER_STATUS``
    """

    def __init__(
        self,
        webhook_repository: WebhookRepository,
        store: ICommerceStore,
        sync_repository: ISyncStatusRepository,
        status_mapping: List[Dict[str, str]],
        sync_order_status: bool,
    ):
        self.webhook_repository = webhook_repository
        self.store = store
        self.sync_repository = sync_repository
        self.status_mapping = status_mapping
        self.sync_order_status = sync_order_status

    async def receive_payload(self, topic: str, raw_body: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Valida y decodifica el payload de un webhook.

        Raises:
            WebhookException: 400 si el topic no está registrado o el JSON es
                inválido, 401 si la firma no coincide
        """
        registration = await self.webhook_repository.find_by_type(topic)
        if registration is None:
            raise WebhookException(f"Webhook not configured for topic: {topic}", status_code=400)

        try:
            payload = json.loads(raw_body)
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise WebhookException("Invalid JSON payload", status_code=400)

        if registration.secret and not verify_signature(registration.secret, raw_body, signature):
            raise WebhookException("Invalid webhook signature", status_code=401)

        logger.debug(f"PickHero webhook received: {topic}")
        return payload

    async def handle_order_status_changed(
        self, raw_body: bytes, signature: Optional[str]
    ) -> Tuple[int, Dict[str, str]]:
        """
        Procesa el webhook ``order_status_changed``.

        Returns:
            Tuple[int, Dict]: Código HTTP y cuerpo de la respuesta
        """
        if not self.sync_order_status:
            return 400, {"status": "IGNORED"}

        try:
            # Los cambios hechos aquí vienen de PickHero: no se reenvían
            with suppress_auto_push():
                payload = await self.receive_payload(TYPE_ORDER_STATUS_CHANGED, raw_body, signature)

                data = payload.get("data") if isinstance(payload, dict) else None
                data = data if isinstance(data, dict) else {}
                external_id = data.get("external_id")
                pickhero_status = data.get("status")

                if not external_id:
                    logger.debug("Order status webhook without order external_id received. Skipping.")
                    return 200, {"status": "OK"}

                if not pickhero_status:
                    logger.debug("Order status webhook without status received. Skipping.")
                    return 200, {"status": "OK"}

                order = await self.find_order(str(external_id))
                if order is None:
                    logger.debug(f"Order '{external_id}' not found in commerce store.")
                    return 200, {"status": "OK"}

                async with OrderLock(order.id, max_wait_seconds=WEBHOOK_LOCK_WAIT_SECONDS):
                    await self.update_order_status(order, str(pickhero_status))
                    await self.mark_processed(order)

        except WebhookException as e:
            logger.error(f"❌ Webhook processing failed: {e.message}")
            return e.status_code, {"status": "ERROR"}
        except LockAcquisitionError as e:
            logger.warning(f"⚠️ Order busy, webhook will be redelivered: {e}")
            return 500, {"status": "ERROR"}
        except Exception as e:
            logger.error(f"❌ Webhook processing failed: {e}", exc_info=True)
            return 500, {"status": "ERROR"}

        return 200, {"status": "OK"}

    async def find_order(self, external_id: str) -> Optional[Order]:
        """Busca el pedido por referencia y, si no, por número."""
        order = await self.store.find_order_by_reference(external_id)
        if order is None:
            order = await self.store.find_order_by_number(external_id)
        return order

    def mapped_status_handle(self, pickhero_status: str) -> Optional[str]:
        """Handle local de la primera entrada del mapeo que coincide con el estado."""
        for mapping in self.status_mapping:
            if mapping.get("pickhero") == pickhero_status:
                return mapping.get("changeTo")
        return None

    async def update_order_status(self, order: Order, pickhero_status: str) -> bool:
        """
        Cambia el estado del pedido según el mapeo.

        Returns:
            bool: True si el pedido se guardó con un nuevo estado

        Raises:
            ConfigurationException: Si el estado destino no existe
        """
        handle = self.mapped_status_handle(pickhero_status)
        if handle is None:
            return False

        target_status = await self.store.get_order_status_by_handle(handle)
        if target_status is None:
            raise ConfigurationException(
                f"Order status '{handle}' not found in commerce store.", setting="ORDER_STATUS_MAPPING"
            )

        if order.order_status is not None and order.order_status.id == target_status.id:
            return False

        order.order_status = target_status
        await self.store.save_order(order, STATUS_MESSAGE.format(status=pickhero_status))
        logger.info(f"Order status updated to '{target_status.handle}' for order '{order.display_reference}'.")
        return True

    async def mark_processed(self, order: Order) -> None:
        sync_status = await self.sync_repository.get_or_new(order.id)
        sync_status.attach_order(order)
        sync_status.stock_allocated = True
        sync_status.processed = True
        await self.sync_repository.upsert(sync_status)
