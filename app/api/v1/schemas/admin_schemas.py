"""
Modelos Pydantic para los endpoints de administración.

Incluye las peticiones de registro de webhooks, exportación de productos,
importación de stock y las respuestas de acciones manuales sobre pedidos.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.domain.models.webhook import TYPE_ORDER_STATUS_CHANGED


class WebhookTypeRequest(BaseModel):
    """Topic del webhook a registrar o eliminar."""

    type: str = Field(default=TYPE_ORDER_STATUS_CHANGED, description="Webhook topic")


class ExportProductsRequest(BaseModel):
    """Opciones de exportación de productos a PickHero."""

    limit: Optional[int] = Field(default=None, ge=1, description="Maximum number of variants")
    offset: int = Field(default=0, ge=0, description="Variants to skip")
    only_new: bool = Field(default=False, description="Only create products missing in PickHero")
    dry_run: bool = Field(default=False, description="Do not send anything to PickHero")


class ExportProductsResponse(BaseModel):
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    error_messages: List[str] = Field(default_factory=list)


class ImportStockRequest(BaseModel):
    """Opciones de importación de stock desde PickHero."""

    limit: Optional[int] = Field(default=None, ge=1, description="Maximum number of SKUs")
    offset: Optional[int] = Field(default=None, ge=0, description="SKUs to skip")


class ImportStockResponse(BaseModel):
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    error_messages: List[str] = Field(default_factory=list)


class OrderActionResponse(BaseModel):
    """Resultado de una acción manual sobre un pedido."""

    success: bool
    message: str
    sync_status: Optional[Dict[str, Any]] = None
