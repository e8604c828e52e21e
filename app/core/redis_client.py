"""
Cliente Redis para locks distribuidos.

Redis es opcional: sin REDIS_URL la aplicación usa locks locales
al proceso (ver app.utils.distributed_lock).
"""

import logging
from typing import Optional

import redis.asyncio as redis

from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Global Redis client instance
_redis_client: Optional[redis.Redis] = None


def is_redis_configured() -> bool:
    """Indica si hay una URL de Redis configurada."""
    return bool(get_settings().REDIS_URL)


def get_redis_client() -> redis.Redis:
    """
    Returns a Redis client instance.

    Returns:
        redis.Redis: Redis client instance

    Raises:
        RuntimeError: If Redis URL is not configured
    """
    global _redis_client

    settings = get_settings()
    if not settings.REDIS_URL:
        raise RuntimeError("Redis URL not configured")

    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
        logger.debug("Redis client instance created")

    return _redis_client


async def test_redis_connection() -> bool:
    """
    Verifica la conectividad con Redis.

    Returns:
        bool: True si la conexión es exitosa, False en caso contrario
    """
    if not is_redis_configured():
        logger.info("Redis URL not configured - using process-local locks")
        return False

    try:
        await get_redis_client().ping()
        logger.info("✅ Redis connection OK")
        return True
    except redis.RedisError as e:
        logger.error(f"❌ Redis connection test failed: {e}")
        return False


async def close_redis() -> None:
    """
    Cierra el cliente Redis si fue creado.
    """
    global _redis_client

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
        logger.info("Redis client closed")
