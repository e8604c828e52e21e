"""
Endpoints de administración de los webhooks registrados en PickHero.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from app.api.v1.schemas.admin_schemas import WebhookTypeRequest
from app.core.container import ServiceContainer, get_container
from app.domain.models.webhook import TYPE_ORDER_STATUS_CHANGED

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/status")
async def get_hook_status(
    type: str = Query(TYPE_ORDER_STATUS_CHANGED, description="Webhook topic"),
    container: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    """Estado del registro: ``none``, ``active`` o ``inactive``."""
    return await container.webhook_registration.get_hook_status(type)


@router.post("/refresh")
async def refresh_webhook(
    request: WebhookTypeRequest, container: ServiceContainer = Depends(get_container)
) -> Dict[str, Any]:
    """
    Registra (o vuelve a registrar) el webhook en PickHero con un secreto nuevo.
    """
    return await container.webhook_registration.refresh(request.type)


@router.post("/remove")
async def remove_webhook(
    request: WebhookTypeRequest, container: ServiceContainer = Depends(get_container)
) -> Dict[str, Any]:
    return await container.webhook_registration.remove(request.type)
