"""
Configuración del sistema de logging.

Este módulo configura el logging de la aplicación con:
- Consola con colores (o JSON estructurado si LOG_JSON=true)
- Archivo rotativo en LOG_FILE_PATH
- Loggers de librerías externas silenciados
"""

import json
import logging
import logging.config
import sys
from datetime import datetime, timezone
from pathlib import Path

from app.core.config import get_settings

# Atributos estándar de LogRecord que no se copian como "extra"
_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "taskName",
    "color_message",
}


class ColoredFormatter(logging.Formatter):
    """
    Formatter que colorea el nivel de log cuando la salida es una terminal.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def format(self, record):
        formatted = super().format(record)

        if hasattr(sys.stderr, "isatty") and sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            reset = self.COLORS["RESET"]
            formatted = formatted.replace(record.levelname, f"{color}{record.levelname}{reset}", 1)

        return formatted


class StructuredFormatter(logging.Formatter):
    """
    Formatter para logging estructurado en JSON.

    Cada línea es un objeto JSON con timestamp, nivel, logger, mensaje,
    datos de la aplicación y cualquier campo pasado en ``extra``.
    """

    def format(self, record):
        """
        Formatea el record como JSON estructurado.

        Args:
            record: LogRecord a formatear

        Returns:
            str: Mensaje en formato JSON
        """
        settings = get_settings()

        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "app_name": settings.APP_NAME,
            "app_version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS}
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging() -> None:
    """
    Configura el sistema de logging completo de la aplicación.
    """
    settings = get_settings()

    if settings.LOG_FILE_PATH:
        Path(settings.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(settings.get_logging_config())
    configure_external_loggers(debug=settings.DEBUG)

    logger = logging.getLogger(__name__)
    logger.info(f"Sistema de logging configurado - Nivel: {settings.LOG_LEVEL}")
    if settings.LOG_FILE_PATH:
        logger.info(f"Logs guardándose en: {settings.LOG_FILE_PATH}")


def configure_external_loggers(debug: bool = False) -> None:
    """
    Reduce la verbosidad de librerías externas.

    Args:
        debug: Si True, muestra las queries de SQLAlchemy
    """
    for logger_name in ("aiohttp.access", "aiohttp.client", "httpx", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)


def log_sync_operation(operation: str, order_id: int, **kwargs) -> None:
    """
    Registra una operación de sincronización con datos estructurados.

    Args:
        operation: Tipo de operación (submit, process, unlink, webhook)
        order_id: ID del pedido local
        **kwargs: Datos adicionales
    """
    logger = logging.getLogger("app.sync.operation")
    extra_data = {
        "sync_operation": operation,
        "order_id": order_id,
        "sync_timestamp": datetime.now(timezone.utc).isoformat(),
        **kwargs,
    }
    logger.info(f"Sync operation: {operation} on order {order_id}", extra=extra_data)
