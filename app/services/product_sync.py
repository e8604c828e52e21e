"""
Sincronización de productos entre la plataforma de comercio y PickHero.

- Exportación de productos: variantes -> productos de PickHero
- Importación de stock: stock de PickHero -> stock de las variantes
"""

import logging
from typing import Any, Dict, Iterable, Optional

from app.db.pickhero_clients import PickHeroAPI
from app.domain.models.commerce import Variant
from app.services.commerce.interfaces import ICommerceStore
from app.services.products.field_mapping import FieldMappingEvaluator
from app.services.products.product_data import ProductData
from app.utils.error_handler import ConfigurationException, ErrorAggregator, SyncException

logger = logging.getLogger(__name__)

RESULT_CREATED = "created"
RESULT_UPDATED = "updated"
RESULT_SKIPPED = "skipped"


class ProductSync:
    """
    Servicio de exportación de productos e importación de stock.

    Args:
        api: PickHero gateway
        store: Plataforma de comercio
        evaluator: Mapeo de campos de producto
        sync_stock: Setting ``SYNC_STOCK``
    """

    def __init__(
        self,
        api: PickHeroAPI,
        store: ICommerceStore,
        evaluator: Optional[FieldMappingEvaluator] = None,
        sync_stock: bool = False,
    ):
        self.api = api
        self.store = store
        self.evaluator = evaluator or FieldMappingEvaluator()
        self.sync_stock = sync_stock

    # === IMPORTACIÓN DE STOCK (PickHero -> comercio) ===

    async def update_stock(self, sku: str, stock: int) -> bool:
        """
        Actualiza el stock de una variante por SKU.

        Returns:
            bool: True si el stock cambió y se guardó
        """
        variant = await self.store.get_variant_by_sku(sku)
        if variant is None:
            logger.debug(f"Variant '{sku}' not found.")
            return False

        if variant.stock == stock:
            logger.debug(f"Variant '{sku}' stock remains unchanged: '{stock}'")
            return False

        variant.stock = stock
        await self.store.save_variant(variant)
        logger.debug(f"Variant '{sku}' stock updated to '{stock}'.")
        return True

    async def sync_stock_from_pickhero(self, sku: str) -> bool:
        """Lee el stock disponible de un SKU en PickHero y lo aplica."""
        stock = await self.api.stock.get_available_stock_by_product_code(sku)
        return await self.update_stock(sku, stock)

    async def import_stock(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        stop_on_error: bool = False,
    ) -> Dict[str, Any]:
        """
        Importa el stock de todos los productos con stock en PickHero.

        Args:
            limit: Máximo de SKUs a procesar
            offset: SKUs a saltar antes de procesar
            stop_on_error: Propagar el primer error

        Returns:
            Dict: ``processed``, ``skipped``, ``errors`` y mensajes de error

        Raises:
            ConfigurationException: Si ``SYNC_STOCK`` está deshabilitado
        """
        if not self.sync_stock:
            raise ConfigurationException(
                "Stock synchronization is disabled. Enable SYNC_STOCK.", setting="SYNC_STOCK"
            )

        logger.info("Starting stock import from PickHero.")
        response = await self.api.stock.list({"has_stock": "true"}, "-quantity", "product")
        stock_by_sku = self.api.stock.aggregate_by_product_code((response or {}).get("data") or [])

        aggregator = ErrorAggregator()
        processed = 0
        skipped = 0

        for index, (sku, quantity) in enumerate(stock_by_sku.items(), start=1):
            if offset is not None and index <= offset:
                skipped += 1
                continue
            if limit is not None and processed >= limit:
                break

            try:
                await self.update_stock(sku, quantity)
                processed += 1
                aggregator.increment_processed()
            except Exception as e:
                logger.error(f"❌ Failed to update stock for '{sku}': {e}", exc_info=True)
                aggregator.add_error(e, {"sku": sku})
                if stop_on_error:
                    raise

        logger.info(f"Stock import completed. Processed: {processed}, Skipped: {skipped}")
        return {
            "processed": processed,
            "skipped": skipped,
            "errors": len(aggregator.errors),
            "error_messages": aggregator.error_messages(),
        }

    # === EXPORTACIÓN DE PRODUCTOS (comercio -> PickHero) ===

    async def export_to_pickhero(self, variant: Variant, only_new: bool = False, dry_run: bool = False) -> str:
        """
        Exporta una variante a PickHero.

        Args:
            variant: Variante a exportar
            only_new: Saltar productos que ya existen en PickHero
            dry_run: No enviar nada, solo calcular el resultado

        Returns:
            str: ``created``, ``updated`` o ``skipped``
        """
        if not variant.sku:
            return RESULT_SKIPPED

        existing = await self.api.products.find_by_external_id(str(variant.id))
        if only_new and existing is not None:
            return RESULT_SKIPPED

        product_data = ProductData.from_variant(variant, self.evaluator)

        if dry_run:
            logger.debug(f"Would export product '{variant.sku}': {product_data.to_dict()}")
            return RESULT_UPDATED if existing is not None else RESULT_CREATED

        if existing is not None:
            await self.api.products.update(existing["id"], product_data.to_update_dict())
            logger.info(f"Updated product '{variant.sku}' in PickHero.")
            return RESULT_UPDATED

        await self.api.products.create(product_data.to_dict())
        logger.info(f"Created product '{variant.sku}' in PickHero.")
        return RESULT_CREATED

    async def export_multiple(
        self,
        variants: Iterable[Variant],
        only_new: bool = False,
        dry_run: bool = False,
        stop_on_error: bool = False,
    ) -> Dict[str, Any]:
        """
        Exporta varias variantes; los errores se cuentan y se continúa.

        Returns:
            Dict: contadores ``created``, ``updated``, ``skipped``, ``errors``
            y ``error_messages`` (únicos, en orden de aparición)
        """
        results: Dict[str, Any] = {RESULT_CREATED: 0, RESULT_UPDATED: 0, RESULT_SKIPPED: 0, "errors": 0}
        aggregator = ErrorAggregator()

        for variant in variants:
            try:
                result = await self.export_to_pickhero(variant, only_new=only_new, dry_run=dry_run)
                results[result] += 1
                aggregator.increment_processed()
            except Exception as e:
                results["errors"] += 1
                aggregator.add_error(
                    SyncException(f"SKU '{variant.sku}': {e}", operation="export_product"), {"sku": variant.sku}
                )
                logger.error(f"❌ Failed to export product '{variant.sku}': {e}", exc_info=True)
                if stop_on_error:
                    raise

        results["error_messages"] = aggregator.error_messages()
        logger.info(
            f"Product export completed. Created: {results[RESULT_CREATED]}, Updated: {results[RESULT_UPDATED]}, "
            f"Skipped: {results[RESULT_SKIPPED]}, Errors: {results['errors']}"
        )
        return results
