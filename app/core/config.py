"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación usando Pydantic Settings para validación automática.
"""

from functools import lru_cache
from typing import Annotated, Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Commerce-PickHero Sync"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8080)
    LOG_LEVEL: str = Field(default="INFO")
    ENABLE_DOCS: bool = Field(default=True)

    # URL pública de este servicio (usada al registrar webhooks en PickHero)
    PUBLIC_BASE_URL: str = Field(default="http://localhost:8080")

    # === CONFIGURACIÓN DE PICKHERO ===
    PICKHERO_API_BASE_URL: str = Field(default="")
    PICKHERO_API_TOKEN: str = Field(default="")
    PICKHERO_DISPLAY_NAME: str = Field(default="PickHero")

    # === SINCRONIZACIÓN DE PEDIDOS ===
    PUSH_ORDERS: bool = Field(default=False)
    ORDER_STATUS_TO_PUSH: Annotated[List[str], NoDecode] = Field(default_factory=list)
    ORDER_STATUS_TO_PROCESS: Annotated[List[str], NoDecode] = Field(default_factory=list)
    PUSH_PRICES: bool = Field(default=False)
    CREATE_MISSING_PRODUCTS: bool = Field(default=False)
    # Plantilla del enlace de vuelta al pedido en la plataforma de comercio
    ORDER_URL_TEMPLATE: str = Field(
        default="http://localhost/admin/commerce/orders/{order_id}"
    )
    ORDER_LOCK_TIMEOUT_SECONDS: int = Field(default=120)

    # === WEBHOOKS ENTRANTES ===
    SYNC_STOCK: bool = Field(default=False)
    SYNC_ORDER_STATUS: bool = Field(default=False)
    # Lista ordenada de {"pickhero": "<estado>", "changeTo": "<handle local>"}
    ORDER_STATUS_MAPPING: List[Dict[str, str]] = Field(default_factory=list)

    # === MAPEO DE CAMPOS DE PRODUCTO ===
    # Lista de {"pickheroField": "gtin", "craftField": "product.ean"}
    PRODUCT_FIELD_MAPPING: List[Dict[str, str]] = Field(default_factory=list)

    # === PLATAFORMA DE COMERCIO (modo standalone) ===
    COMMERCE_CATALOG_FILE: Optional[str] = Field(default=None)

    # === BASE DE DATOS LOCAL (estado de sincronización) ===
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./pickhero_sync.db")

    # === CONFIGURACIÓN DE REDIS ===
    REDIS_URL: Optional[str] = Field(default=None)

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_FILE_PATH: Optional[str] = Field(default="logs/pickhero.log")
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)
    LOG_FORMAT: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    LOG_JSON: bool = Field(default=False)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "allow",
    }

    @field_validator("ORDER_STATUS_TO_PUSH", "ORDER_STATUS_TO_PROCESS", mode="before")
    @classmethod
    def parse_status_list(cls, v):
        """Parsea listas de handles de estado separadas por comas."""
        if isinstance(v, str):
            return [handle.strip() for handle in v.split(",") if handle.strip()]
        return v or []

    @field_validator("ORDER_STATUS_MAPPING")
    @classmethod
    def validate_status_mapping(cls, v):
        """Valida que cada entrada del mapeo tenga 'pickhero' y 'changeTo'."""
        for entry in v:
            if not entry.get("pickhero") or not entry.get("changeTo"):
                raise ValueError("Cada entrada de ORDER_STATUS_MAPPING requiere 'pickhero' y 'changeTo'")
        return v

    @field_validator("PICKHERO_API_BASE_URL")
    @classmethod
    def validate_api_base_url(cls, v):
        """Valida la URL base de la API de PickHero y elimina la barra final."""
        if not v:
            return v
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("PICKHERO_API_BASE_URL debe ser una URL http(s) válida")
        return v.rstrip("/")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        """Valida que el puerto esté en rango válido."""
        if not 1 <= v <= 65535:
            raise ValueError("PORT debe estar entre 1 y 65535")
        return v

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        """Verifica si está en entorno de desarrollo."""
        return self.ENVIRONMENT == "development"

    @property
    def webhook_base_url(self) -> str:
        """URL base bajo la cual PickHero entrega los webhooks."""
        return f"{self.PUBLIC_BASE_URL.rstrip('/')}/api/v1/webhooks"

    def get_logging_config(self) -> dict:
        """
        Obtiene configuración completa de logging.

        Returns:
            dict: Configuración de logging para dictConfig
        """
        handlers: Dict[str, Any] = {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if self.LOG_JSON else "colored",
                "level": self.LOG_LEVEL,
            },
        }
        if self.LOG_FILE_PATH:
            handlers["file"] = {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": self.LOG_FILE_PATH,
                "maxBytes": self.LOG_MAX_SIZE_MB * 1024 * 1024,
                "backupCount": self.LOG_BACKUP_COUNT,
                "formatter": "detailed",
                "level": self.LOG_LEVEL,
                "encoding": "utf-8",
            }

        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "colored": {"()": "app.core.logging_config.ColoredFormatter", "format": self.LOG_FORMAT},
                "json": {"()": "app.core.logging_config.StructuredFormatter"},
                "detailed": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
                },
            },
            "handlers": handlers,
            "root": {
                "level": self.LOG_LEVEL,
                "handlers": list(handlers.keys()),
            },
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Usa LRU cache para evitar recrear la configuración
    múltiples veces durante la ejecución.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Recarga la configuración (útil para testing).

    Returns:
        Settings: Nueva instancia de configuración
    """
    get_settings.cache_clear()
    return get_settings()


def validate_required_settings(settings: Optional[Settings] = None) -> bool:
    """
    Valida que todas las configuraciones requeridas estén presentes.

    Returns:
        bool: True si todas las configuraciones están presentes

    Raises:
        ValueError: Si alguna configuración requerida falta
    """
    settings = settings or get_settings()

    required_fields = ["PICKHERO_API_BASE_URL", "PICKHERO_API_TOKEN"]

    missing_fields = []
    for field in required_fields:
        value = getattr(settings, field, None)
        if not value or (isinstance(value, str) and not value.strip()):
            missing_fields.append(field)

    if missing_fields:
        raise ValueError(f"Configuraciones requeridas faltantes: {missing_fields}")

    return True
