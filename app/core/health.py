"""
Sistema de health checks para monitoreo de servicios.

Este módulo verifica el estado de la base de datos de sincronización,
Redis (si está configurado), la configuración de PickHero y los recursos
del sistema.
"""

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict

import psutil

from app.core.config import get_settings
from app.core.redis_client import is_redis_configured, test_redis_connection

logger = logging.getLogger(__name__)

HealthCheck = Callable[[], Awaitable[bool]]

# Variable global para tracking de uptime
_app_start_time = datetime.now(timezone.utc)

DISK_SPACE_THRESHOLD = 10
MEMORY_USAGE_THRESHOLD = 90


async def get_health_status(timeout: float = 5.0) -> Dict[str, Any]:
    """
    Obtiene el estado de salud de todos los servicios.

    Redis solo se verifica cuando ``REDIS_URL`` está configurado; su fallo
    no afecta el estado general porque los locks caen a locks locales.

    Returns:
        Dict: Estado de salud completo del sistema
    """
    checks: Dict[str, HealthCheck] = {
        "database": check_database_health,
        "pickhero_config": check_pickhero_config,
        "memory": check_memory_usage,
        "disk_space": check_disk_space,
    }
    if is_redis_configured():
        checks["redis"] = test_redis_connection

    results = await asyncio.gather(
        *(run_health_check_with_timeout(name, check, timeout) for name, check in checks.items())
    )
    services = dict(zip(checks.keys(), results))

    critical = ("database", "pickhero_config")
    overall = all(services[name]["status"] == "healthy" for name in critical)

    return {
        "overall": overall,
        "services": services,
        "uptime": get_uptime_info(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def run_health_check_with_timeout(service_name: str, check_func: HealthCheck, timeout: float) -> Dict[str, Any]:
    """
    Ejecuta una verificación de salud individual con timeout específico.

    Args:
        service_name: Nombre del servicio
        check_func: Función de verificación
        timeout: Timeout en segundos

    Returns:
        Dict: Resultado de la verificación
    """
    start_time = time.time()

    try:
        result = await asyncio.wait_for(check_func(), timeout=timeout)
        status = "healthy" if result else "unhealthy"
        error = None
    except asyncio.TimeoutError:
        logger.warning(f"Health check timeout for {service_name} after {timeout}s")
        status = "timeout"
        error = f"Health check timeout after {timeout}s"
    except Exception as e:
        logger.error(f"Health check failed for {service_name}: {e}")
        status = "unhealthy"
        error = str(e)

    result_dict: Dict[str, Any] = {
        "status": status,
        "latency_ms": round((time.time() - start_time) * 1000, 2),
    }
    if error:
        result_dict["error"] = error
    return result_dict


async def check_database_health() -> bool:
    """Verifica la base de datos del estado de sincronización."""
    from app.db.connection import get_db_connection

    conn_db = get_db_connection()
    if not conn_db.is_initialized():
        return False
    return await conn_db.test_connection()


async def check_pickhero_config() -> bool:
    """La URL base y el token de PickHero deben estar configurados."""
    settings = get_settings()
    return bool(settings.PICKHERO_API_BASE_URL and settings.PICKHERO_API_TOKEN)


async def check_disk_space() -> bool:
    """Alerta si queda menos del 10% de espacio en disco."""
    disk_usage = psutil.disk_usage("/")
    free_percent = (disk_usage.free / disk_usage.total) * 100
    return free_percent > DISK_SPACE_THRESHOLD


async def check_memory_usage() -> bool:
    return psutil.virtual_memory().percent < MEMORY_USAGE_THRESHOLD


def get_uptime_info() -> Dict[str, Any]:
    """
    Obtiene información de uptime de la aplicación.

    Returns:
        Dict: Información de uptime
    """
    current_time = datetime.now(timezone.utc)
    uptime_delta = current_time - _app_start_time

    return {
        "start_time": _app_start_time.isoformat(),
        "uptime_seconds": int(uptime_delta.total_seconds()),
        "uptime_human": format_uptime(uptime_delta),
    }


def format_uptime(uptime_delta: timedelta) -> str:
    """Formatea el uptime como ``1d 2h 3m 4s``."""
    total_seconds = int(uptime_delta.total_seconds())
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)

    if days:
        return f"{days}d {hours}h {minutes}m {seconds}s"
    if hours:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"
