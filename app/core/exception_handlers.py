"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Este módulo define los manejadores de excepciones personalizados y globales,
proporcionando respuestas consistentes y logging apropiado para diferentes tipos de errores.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.utils.error_handler import AppException, PickHeroAPIException, SyncException, ValidationException

logger = logging.getLogger(__name__)


def _error_body(request: Request, error_type: str, message: str, **extra: Any) -> Dict[str, Any]:
    return {
        "error": True,
        "error_type": error_type,
        "message": message,
        **extra,
        "path": str(request.url.path),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request.headers.get("X-Request-ID"),
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        JSONResponse: Respuesta JSON con error formateado
    """
    logger.error(
        f"App Exception: {exc.message} - "
        f"Code: {exc.error_code.value} - "
        f"URL: {request.url} - "
        f"Details: {exc.details}"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(
            request,
            "application_error",
            exc.message,
            error_code=exc.error_code.value,
            details=exc.details if get_settings().DEBUG else None,
        ),
    )


async def sync_exception_handler(request: Request, exc: SyncException) -> JSONResponse:
    """
    Manejador específico para errores de sincronización.

    Args:
        request: Request de FastAPI
        exc: Excepción de sincronización

    Returns:
        JSONResponse: Respuesta JSON con información de error de sync
    """
    logger.error(f"Sync Exception: {exc.message} - Operation: {exc.operation} - Order: {exc.order_id}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(
            request,
            "synchronization_error",
            exc.message,
            error_code=exc.error_code.value,
            operation=exc.operation,
            order_id=exc.order_id,
        ),
    )


async def pickhero_api_exception_handler(request: Request, exc: PickHeroAPIException) -> JSONResponse:
    """
    Manejador específico para errores de la API de PickHero.

    La respuesta es siempre 502; el status de PickHero va en ``api_status``.
    """
    logger.error(f"PickHero API Exception: {exc.message} - Status: {exc.api_status} - Endpoint: {exc.endpoint}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(
            request,
            "pickhero_api_error",
            exc.user_message,
            error_code=exc.error_code.value,
            api_status=exc.api_status,
            errors=exc.errors,
        ),
    )


async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    logger.warning(f"Validation Exception: {exc.message} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(
            request, "validation_error", exc.message, error_code=exc.error_code.value, details=exc.details
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Manejador para HTTPException (FastAPI y Starlette).

    Args:
        request: Request de FastAPI
        exc: HTTPException

    Returns:
        JSONResponse: Respuesta JSON estandarizada
    """
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, "http_error", exc.detail, status_code=exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Manejador global para excepciones no capturadas.

    Args:
        request: Request de FastAPI
        exc: Excepción no manejada

    Returns:
        JSONResponse: Respuesta JSON de error interno
    """
    logger.error(
        f"Unhandled Exception: {str(exc)} - Type: {type(exc).__name__} - URL: {request.url}",
        exc_info=exc,
    )

    debug = get_settings().DEBUG
    # Respuesta genérica (sin exponer detalles internos)
    error_message = f"{type(exc).__name__}: {str(exc)}" if debug else "Internal server error occurred"

    return JSONResponse(
        status_code=500,
        content=_error_body(
            request,
            "internal_server_error",
            error_message,
            traceback="".join(traceback.format_exception(exc)) if debug else None,
        ),
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configura todos los manejadores de excepciones de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando manejadores de excepciones...")

    # Manejadores específicos (orden de especificidad)
    app.add_exception_handler(ValidationException, validation_exception_handler)
    app.add_exception_handler(SyncException, sync_exception_handler)
    app.add_exception_handler(PickHeroAPIException, pickhero_api_exception_handler)
    app.add_exception_handler(AppException, app_exception_handler)

    # Manejadores HTTP estándar
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Manejador global (debe ser el último)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("✅ Manejadores de excepciones configurados correctamente")
