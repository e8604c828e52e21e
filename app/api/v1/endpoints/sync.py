"""
Endpoints para exportación de productos e importación de stock.

Cada operación toma un lock propio para evitar dos ejecuciones
simultáneas del mismo proceso batch.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.v1.schemas.admin_schemas import (
    ExportProductsRequest,
    ExportProductsResponse,
    ImportStockRequest,
    ImportStockResponse,
)
from app.core.container import ServiceContainer, get_container
from app.utils.distributed_lock import DistributedLock, LockAcquisitionError

logger = logging.getLogger(__name__)

# Crear router
router = APIRouter()

EXPORT_LOCK_KEY = "sync:product-export"
IMPORT_LOCK_KEY = "sync:stock-import"


@router.post("/products/export", response_model=ExportProductsResponse)
async def export_products(
    request: ExportProductsRequest, container: ServiceContainer = Depends(get_container)
) -> ExportProductsResponse:
    """
    Exporta variantes de la plataforma de comercio a PickHero.

    Args:
        request: Opciones de exportación
        container: Servicios de la aplicación

    Returns:
        ExportProductsResponse: Contadores y errores únicos
    """
    try:
        async with DistributedLock(EXPORT_LOCK_KEY, timeout_seconds=3600, max_wait_seconds=1):
            variants = await container.store.list_variants(limit=request.limit, offset=request.offset)
            logger.info(f"Starting bulk product export to PickHero ({len(variants)} variants)")
            results = await container.product_sync.export_multiple(
                variants, only_new=request.only_new, dry_run=request.dry_run
            )
    except LockAcquisitionError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Product export already running")

    logger.info(f"Product export finished: {results['created']} created, {results['updated']} updated")
    return ExportProductsResponse(**results)


@router.post("/stock/import", response_model=ImportStockResponse)
async def import_stock(
    request: ImportStockRequest, container: ServiceContainer = Depends(get_container)
) -> ImportStockResponse:
    """
    Importa el stock de PickHero a las variantes (requiere ``SYNC_STOCK``).
    """
    if not container.settings.SYNC_STOCK:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Stock synchronization is disabled")

    try:
        async with DistributedLock(IMPORT_LOCK_KEY, timeout_seconds=3600, max_wait_seconds=1):
            results = await container.product_sync.import_stock(limit=request.limit, offset=request.offset)
    except LockAcquisitionError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Stock import already running")

    logger.info(f"Stock import finished: {results['processed']} processed")
    return ImportStockResponse(**results)
