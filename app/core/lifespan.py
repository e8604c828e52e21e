"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown de la aplicación,
incluyendo inicialización de servicios, verificación de conexiones y limpieza.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI

from app.core.config import get_settings, validate_required_settings
from app.core.container import ServiceContainer
from app.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.
    Maneja eventos de startup y shutdown de manera ordenada.

    Si ``app.state.container`` ya existe (p. ej. en tests) se usa tal cual.

    Args:
        app: Instancia de FastAPI
    """
    # === STARTUP ===
    logger.info("🚀 Iniciando Commerce-PickHero Sync...")

    try:
        # 1. Configurar logging
        await startup_configure_logging()

        # 2. Verificar configuración
        await startup_verify_configuration()

        # 3. Base de datos de sincronización
        await startup_initialize_database(app)

        # 4. Servicios (gateway, listener de pedidos, cola)
        await startup_initialize_services(app)

        # 5. Redis (opcional)
        await startup_verify_redis()

        logger.info("🎉 Aplicación iniciada correctamente")

    except Exception as e:
        logger.error(f"❌ Error durante el startup: {e}")
        await cleanup_on_startup_failure(app)
        sys.exit(1)

    # === YIELD (aplicación corriendo) ===
    yield

    # === SHUTDOWN ===
    logger.info("🛑 Cerrando Commerce-PickHero Sync...")

    try:
        # 1. Detener servicios
        await shutdown_cleanup_services(app)

        # 2. Cerrar conexiones
        await shutdown_close_connections(app)

        logger.info("👋 Aplicación cerrada correctamente")

    except Exception as e:
        logger.error(f"❌ Error durante el shutdown: {e}")


# === FUNCIONES DE STARTUP ===


async def startup_configure_logging():
    """Configura el sistema de logging."""
    setup_logging()
    logger.info("✅ Sistema de logging configurado")


async def startup_verify_configuration():
    """Verifica que la configuración sea válida."""
    settings = get_settings()
    validate_required_settings(settings)

    if settings.PUSH_ORDERS and not (settings.ORDER_STATUS_TO_PUSH or settings.ORDER_STATUS_TO_PROCESS):
        logger.warning("⚠️ PUSH_ORDERS is enabled but no order statuses are configured")

    logger.info("✅ Configuración verificada")


async def startup_initialize_database(app: FastAPI):
    """Inicializa la base de datos y crea las tablas si no existen."""
    container = getattr(app.state, "container", None)
    if container is not None:
        conn_db = container.conn_db
    else:
        from app.db.connection import get_db_connection

        conn_db = get_db_connection()

    if not conn_db.is_initialized():
        await conn_db.initialize()
    logger.info("✅ Base de datos de sincronización inicializada")


async def startup_initialize_services(app: FastAPI):
    """Crea el contenedor de servicios (si no existe) y lo arranca."""
    if getattr(app.state, "container", None) is None:
        app.state.container = ServiceContainer.from_settings()

    await app.state.container.start()
    logger.info("✅ Servicios asíncronos inicializados")


async def startup_verify_redis():
    """Verifica Redis; sin Redis los locks de pedido son locales al proceso."""
    from app.core.redis_client import is_redis_configured, test_redis_connection

    if not is_redis_configured():
        logger.info("ℹ️ Redis no configurado - usando locks locales")
        return

    if await test_redis_connection():
        logger.info("✅ Conexión a Redis verificada")
    else:
        logger.warning("⚠️ Conexión a Redis falló (no crítico)")


async def cleanup_on_startup_failure(app: FastAPI):
    """Limpia recursos en caso de fallo durante startup."""
    logger.info("🧹 Limpiando recursos tras fallo en startup...")
    await shutdown_cleanup_services(app)
    await shutdown_close_connections(app)


# === FUNCIONES DE SHUTDOWN ===


async def shutdown_cleanup_services(app: FastAPI):
    """Detiene la cola de sincronización y cierra el cliente HTTP."""
    container = getattr(app.state, "container", None)
    if container is None:
        return

    try:
        await container.stop()
        logger.info("✅ Servicios detenidos")
    except Exception as e:
        logger.error(f"Error deteniendo servicios: {e}")


async def shutdown_close_connections(app: FastAPI):
    """Cierra conexiones de manera limpia."""
    from app.core.redis_client import close_redis
    from app.utils.distributed_lock import cleanup_locks

    container = getattr(app.state, "container", None)
    try:
        if container is not None:
            await container.conn_db.close()
        else:
            from app.db.connection import close_database

            await close_database()
        logger.info("✅ Base de datos cerrada")
    except Exception as e:
        logger.error(f"Error cerrando base de datos: {e}")

    try:
        await close_redis()
    except Exception as e:
        logger.error(f"Error cerrando Redis: {e}")

    cleanup_locks()


def get_startup_info() -> Dict[str, Any]:
    """
    Obtiene información sobre la configuración activa.

    Returns:
        Dict: Información del startup
    """
    settings = get_settings()
    return {
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "features": {
            "push_orders": settings.PUSH_ORDERS,
            "push_prices": settings.PUSH_PRICES,
            "create_missing_products": settings.CREATE_MISSING_PRODUCTS,
            "sync_stock": settings.SYNC_STOCK,
            "sync_order_status": settings.SYNC_ORDER_STATUS,
        },
        "services": {
            "redis_enabled": bool(settings.REDIS_URL),
            "pickhero_configured": bool(settings.PICKHERO_API_BASE_URL and settings.PICKHERO_API_TOKEN),
        },
    }
