"""
Configuración centralizada de routers para la aplicación FastAPI.

Este módulo se encarga de registrar todos los routers de la API,
configurar endpoints base y organizar las rutas de manera estructurada.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.responses import JSONResponse

# Importar routers de la API
from app.api.v1.endpoints.admin_webhooks import router as admin_webhooks_router
from app.api.v1.endpoints.orders import router as orders_router
from app.api.v1.endpoints.sync import router as sync_router
from app.api.v1.endpoints.webhooks import router as webhooks_router
from app.core.config import get_settings
from app.core.health import get_health_status
from app.core.lifespan import get_startup_info

logger = logging.getLogger(__name__)


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        """
        Endpoint raíz que proporciona información básica de la API.

        Returns:
            Dict con información de la API
        """
        return {
            "message": f"{settings.APP_NAME} API",
            "description": "Sincronización de pedidos, productos y stock con PickHero",
            "version": settings.APP_VERSION,
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": get_router_info()["base_paths"],
        }

    @app.get("/ping", tags=["Root"], summary="Simple Ping")
    async def ping():
        """
        Endpoint simple para verificar que la API responde.

        Returns:
            Dict con pong y timestamp
        """
        return {"message": "pong", "timestamp": datetime.now(timezone.utc).isoformat()}


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints de health check y de información.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check():
        """
        Estado de la base de datos, configuración de PickHero, Redis y sistema.

        Returns:
            JSONResponse: 200 si los servicios críticos están sanos, si no 503
        """
        health = await get_health_status()
        return JSONResponse(status_code=200 if health["overall"] else 503, content=health)

    @app.get("/info", tags=["Health"], summary="Active configuration")
    async def info():
        return get_startup_info()


def configure_api_v1_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la API v1.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando routers de API v1...")

    # Router de webhooks entrantes de PickHero
    app.include_router(
        webhooks_router,
        prefix="/api/v1/webhooks",
        tags=["Webhooks"],
        responses={
            400: {"description": "Webhook not configured, invalid payload or ignored"},
            401: {"description": "Invalid webhook signature"},
            500: {"description": "Webhook processing error"},
        },
    )
    logger.info("✅ Router de webhooks configurado")

    # Router de administración de webhooks
    app.include_router(
        admin_webhooks_router,
        prefix="/api/v1/admin/webhooks",
        tags=["Webhook Administration"],
        responses={502: {"description": "PickHero API error"}},
    )
    logger.info("✅ Router de administración de webhooks configurado")

    # Router de acciones manuales sobre pedidos
    app.include_router(
        orders_router,
        prefix="/api/v1/orders",
        tags=["Orders"],
        responses={404: {"description": "Order not found or not completed"}},
    )
    logger.info("✅ Router de pedidos configurado")

    # Router de exportación de productos e importación de stock
    app.include_router(
        sync_router,
        prefix="/api/v1/sync",
        tags=["Synchronization"],
        responses={
            409: {"description": "Operation already running"},
            500: {"description": "Internal server error"},
        },
    )
    logger.info("✅ Router de sincronización configurado")


def configure_all_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando todos los routers...")

    # Endpoints base
    create_root_endpoints(app)
    create_health_endpoints(app)

    # Routers principales de API v1
    configure_api_v1_routers(app)

    logger.info("✅ Todos los routers configurados correctamente")


def get_router_info() -> Dict[str, Any]:
    """
    Obtiene información sobre los routers configurados.

    Returns:
        Dict con información de routers
    """
    return {
        "api_version": "v1",
        "base_paths": {
            "root": "/",
            "health": "/health",
            "webhooks": "/api/v1/webhooks",
            "admin_webhooks": "/api/v1/admin/webhooks",
            "orders": "/api/v1/orders",
            "sync": "/api/v1/sync",
        },
    }
