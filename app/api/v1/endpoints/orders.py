"""
Acciones manuales de sincronización de pedidos con PickHero.

Cada acción toma el lock del pedido, igual que la cola de sincronización,
para no competir con un envío automático en curso.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.v1.schemas.admin_schemas import OrderActionResponse
from app.core.container import ServiceContainer, get_container
from app.domain.models.commerce import Order
from app.utils.order_lock import OrderLock

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_completed_order(order_id: int, container: ServiceContainer) -> Order:
    order = await container.store.get_order(order_id)
    if order is None or not order.is_completed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Order {order_id} not found")
    return order


@router.get("/{order_id}")
async def get_order_sync_status(order_id: int, container: ServiceContainer = Depends(get_container)) -> Dict[str, Any]:
    """Estado de sincronización del pedido (no se guarda si aún no existe)."""
    order = await _get_completed_order(order_id, container)
    sync_status = await container.orchestrator.get_sync_status(order)
    return {"order_id": order.id, "reference": order.display_reference, "sync_status": sync_status.to_dict()}


@router.post("/{order_id}/push", response_model=OrderActionResponse)
async def push_order(order_id: int, container: ServiceContainer = Depends(get_container)) -> OrderActionResponse:
    """
    Envía el pedido a PickHero aunque ya se haya enviado.
    """
    order = await _get_completed_order(order_id, container)

    success = False
    sync_status = None
    try:
        async with OrderLock(order.id):
            sync_status = await container.orchestrator.get_sync_status(order)
            success = await container.orchestrator.submit_to_pickhero(sync_status, force_resubmit=True)
    except Exception as e:
        logger.error(f"❌ Failed to submit order {order.id} to PickHero: {e}", exc_info=True)

    if success:
        message = "Order sent to PickHero successfully."
    else:
        message = "Failed to send order to PickHero. Check the logs for details."

    return OrderActionResponse(
        success=success, message=message, sync_status=sync_status.to_dict() if sync_status else None
    )


@router.post("/{order_id}/process", response_model=OrderActionResponse)
async def process_order(order_id: int, container: ServiceContainer = Depends(get_container)) -> OrderActionResponse:
    order = await _get_completed_order(order_id, container)

    success = False
    sync_status = None
    try:
        async with OrderLock(order.id):
            sync_status = await container.orchestrator.get_sync_status(order)
            success = await container.orchestrator.trigger_processing(sync_status)
    except Exception as e:
        logger.error(f"❌ Failed to process order {order.id} in PickHero: {e}", exc_info=True)

    if success:
        message = "Order processing triggered successfully."
    else:
        message = "Failed to process order in PickHero. Check the logs for details."

    return OrderActionResponse(
        success=success, message=message, sync_status=sync_status.to_dict() if sync_status else None
    )


@router.post("/{order_id}/unlink", response_model=OrderActionResponse)
async def unlink_order(order_id: int, container: ServiceContainer = Depends(get_container)) -> OrderActionResponse:
    """
    Olvida el pedido de PickHero; el próximo envío crea uno nuevo con un
    external id distinto (``<id>-<n>``). El pedido en PickHero no se toca.
    """
    order = await _get_completed_order(order_id, container)

    try:
        async with OrderLock(order.id):
            sync_status = await container.orchestrator.get_sync_status(order)
            await container.orchestrator.unlink(sync_status)
    except Exception as e:
        logger.error(f"❌ Failed to unlink order {order.id} from PickHero: {e}", exc_info=True)
        return OrderActionResponse(success=False, message="Failed to unlink order from PickHero.")

    return OrderActionResponse(
        success=True, message="Order unlinked from PickHero.", sync_status=sync_status.to_dict()
    )
