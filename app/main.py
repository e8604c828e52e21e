"""
Commerce-PickHero Sync - FastAPI Application Entry Point

Servicio de sincronización entre una plataforma de comercio y el WMS
PickHero: envío y procesamiento de pedidos, webhooks de estado,
exportación de productos e importación de stock.

Este archivo actúa como el punto de entrada principal de la aplicación,
orquestando todos los componentes de manera modular y mantenible.
"""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

# Importaciones de configuración
from app.core.config import get_settings
from app.core.container import ServiceContainer
from app.core.exception_handlers import configure_exception_handlers
from app.core.lifespan import lifespan
from app.core.routers import configure_all_routers

logger = logging.getLogger(__name__)


def create_application(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Args:
        container: Servicios ya construidos; si no se pasa, el lifespan
            los construye desde la configuración al arrancar

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    settings = get_settings()
    logger.info("🏗️ Creando aplicación FastAPI...")

    docs_enabled = settings.DEBUG or settings.ENABLE_DOCS
    app = FastAPI(
        title=settings.APP_NAME,
        description="Sincronización de pedidos, productos y stock con PickHero",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )
    app.state.container = container

    # 1. Manejadores de excepciones
    configure_exception_handlers(app)

    # 2. Routers y endpoints
    configure_all_routers(app)

    logger.info("✅ Aplicación FastAPI creada y configurada")
    return app


# Instancia principal que usa el servidor ASGI
app = create_application()


if __name__ == "__main__":
    """
    Ejecutar la aplicación directamente para desarrollo.

    Para producción se recomienda usar:
    uvicorn app.main:app --host 0.0.0.0 --port 8080
    """
    settings = get_settings()
    logger.info("🚀 Iniciando aplicación desde main.py...")

    # Un solo worker: la cola de sincronización vive en el proceso
    uvicorn_config = {
        "app": "app.main:app",
        "host": settings.HOST,
        "port": settings.PORT,
        "reload": settings.DEBUG,
        "log_level": settings.LOG_LEVEL.lower(),
        "access_log": True,
    }

    if settings.DEBUG:
        uvicorn_config.update({"reload_dirs": ["app"], "reload_excludes": ["*.pyc", "__pycache__"]})

    try:
        uvicorn.run(**uvicorn_config)
    except KeyboardInterrupt:
        logger.info("🛑 Aplicación detenida por el usuario")
