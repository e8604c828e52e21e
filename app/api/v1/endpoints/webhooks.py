"""
Endpoints para webhooks de PickHero.

PickHero entrega aquí los eventos de los webhooks registrados por
``WebhookRegistrationService``. La firma viene en ``x-webhook-signature``.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.core.container import ServiceContainer, get_container

logger = logging.getLogger(__name__)

# Crear router
router = APIRouter()

SIGNATURE_HEADER = "x-webhook-signature"


@router.post("/order-status-changed")
async def order_status_changed_webhook(
    request: Request, container: ServiceContainer = Depends(get_container)
) -> JSONResponse:
    """
    Webhook de cambio de estado de pedido en PickHero.

    Se procesa en la petición: la respuesta indica a PickHero si el
    evento fue aceptado (``OK``), ignorado (``IGNORED``) o falló (``ERROR``).

    Args:
        request: Request HTTP con el webhook
        container: Servicios de la aplicación

    Returns:
        JSONResponse: ``{"status": ...}`` con el código HTTP correspondiente
    """
    raw_body = await request.body()
    status_code, body = await container.webhook_receiver.handle_order_status_changed(
        raw_body, request.headers.get(SIGNATURE_HEADER)
    )
    return JSONResponse(status_code=status_code, content=body)
