"""
Sistema de manejo de errores personalizado.

Este módulo define todas las excepciones personalizadas de la aplicación
y proporciona utilidades para manejo consistente de errores.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Errores de PickHero
    PICKHERO_API_ERROR = "PICKHERO_API_ERROR"
    PICKHERO_NOT_FOUND = "PICKHERO_NOT_FOUND"
    PICKHERO_VALIDATION_ERROR = "PICKHERO_VALIDATION_ERROR"
    PICKHERO_AUTH_ERROR = "PICKHERO_AUTH_ERROR"
    PICKHERO_CONNECTION_FAILED = "PICKHERO_CONNECTION_FAILED"

    # Errores de sincronización
    SYNC_FAILED = "SYNC_FAILED"
    ORDER_NOT_BOUND = "ORDER_NOT_BOUND"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"

    # Errores de webhooks
    WEBHOOK_ERROR = "WEBHOOK_ERROR"
    INVALID_WEBHOOK_SIGNATURE = "INVALID_WEBHOOK_SIGNATURE"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_critical: bool = False,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
            is_critical: Si requiere alerta inmediata
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_critical = is_critical
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_critical": self.is_critical,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return self.message


class ValidationException(AppException):
    """
    Excepción para errores de validación de datos.
    """

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        **kwargs,
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            status_code=422,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value
        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
            }
        )


class PickHeroAPIException(AppException):
    """
    Error devuelto por (o al comunicarse con) la API de PickHero.

    The HTTP status of the failed call is kept in ``api_status`` (0 when no
    response was received) and field-level validation messages in
    ``errors``. The exception message carries those details appended as
    ``" - field: m1, m2; other: m"``.
    """

    def __init__(
        self,
        message: str,
        api_status: int = 0,
        errors: Optional[Dict[str, Any]] = None,
        endpoint: Optional[str] = None,
        **kwargs,
    ):
        self.base_message = message
        self.api_status = api_status
        self.errors = errors or {}
        self.endpoint = endpoint

        full_message = message
        if self.errors:
            full_message = f"{message} - {self._format_errors(self.errors)}"

        if api_status == 404:
            error_code = ErrorCode.PICKHERO_NOT_FOUND
        elif api_status == 422:
            error_code = ErrorCode.PICKHERO_VALIDATION_ERROR
        elif api_status in (401, 403):
            error_code = ErrorCode.PICKHERO_AUTH_ERROR
        elif api_status == 0:
            error_code = ErrorCode.PICKHERO_CONNECTION_FAILED
        else:
            error_code = ErrorCode.PICKHERO_API_ERROR

        super().__init__(
            message=full_message,
            error_code=error_code,
            status_code=502,
            severity=ErrorSeverity.HIGH if api_status >= 500 or api_status == 0 else ErrorSeverity.MEDIUM,
            **kwargs,
        )
        self.details.update({"api_status": api_status, "errors": self.errors, "endpoint": endpoint})

    @staticmethod
    def _format_errors(errors: Dict[str, Any]) -> str:
        parts = []
        for field, messages in errors.items():
            if isinstance(messages, (list, tuple)):
                text = ", ".join(str(m) for m in messages)
            else:
                text = str(messages)
            parts.append(f"{field}: {text}")
        return "; ".join(parts)

    @property
    def is_not_found(self) -> bool:
        return self.api_status == 404

    @property
    def is_validation_error(self) -> bool:
        return self.api_status == 422

    @property
    def is_auth_error(self) -> bool:
        return self.api_status in (401, 403)

    @property
    def user_message(self) -> str:
        """Mensaje legible para mostrar en la interfaz de administración."""
        if self.is_not_found:
            return "The requested resource was not found in PickHero."
        if self.is_auth_error:
            return "Authentication failed. Please check your PickHero API credentials."
        if self.is_validation_error:
            return f"PickHero rejected the request due to invalid data: {self.message}"
        return f"An error occurred while communicating with PickHero: {self.message}"


class WebhookException(AppException):
    """
    Excepción para webhooks rechazados; ``status_code`` es la respuesta HTTP.
    """

    def __init__(self, message: str, status_code: int = 400, **kwargs):
        error_code = ErrorCode.INVALID_WEBHOOK_SIGNATURE if status_code == 401 else ErrorCode.WEBHOOK_ERROR
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status_code,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )


class SyncException(AppException):
    """
    Excepción para errores de sincronización.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        order_id: Optional[int] = None,
        error_code: ErrorCode = ErrorCode.SYNC_FAILED,
        status_code: int = 500,
        sync_stats: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de sincronización.

        Args:
            message: Mensaje de error
            operation: Operación que falló
            order_id: Pedido involucrado, si aplica
            error_code: Código de error
            status_code: Código HTTP asociado
            sync_stats: Estadísticas de la sincronización
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status_code,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.operation = operation
        self.order_id = order_id
        self.sync_stats = sync_stats or {}
        self.details.update({"operation": operation, "order_id": order_id, "sync_stats": sync_stats})


class ConfigurationException(AppException):
    """
    Excepción para configuración faltante o inválida.
    """

    def __init__(self, message: str, setting: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            status_code=500,
            severity=ErrorSeverity.CRITICAL,
            is_critical=True,
            **kwargs,
        )
        self.setting = setting
        self.details.update({"setting": setting})


# === FUNCIONES DE UTILIDAD ===


def convert_to_app_exception(exception: Exception, context: Optional[Dict[str, Any]] = None) -> AppException:
    """
    Convierte una excepción estándar a AppException.

    Args:
        exception: Excepción a convertir
        context: Contexto adicional

    Returns:
        AppException: Excepción convertida
    """
    if isinstance(exception, AppException):
        if context:
            exception.details.update(context)
        return exception

    exception_type = type(exception).__name__
    return AppException(
        message=f"{exception_type}: {exception}",
        details={"original_exception": exception_type, **(context or {})},
    )


def create_error_response(exception: Union[AppException, Exception]) -> Dict[str, Any]:
    """
    Crea respuesta de error estandardizada.

    Args:
        exception: Excepción a convertir

    Returns:
        Dict: Respuesta de error
    """
    return {"error": True, **convert_to_app_exception(exception).to_dict()}


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Loggea un error de manera consistente.

    Args:
        exception: Excepción a loggear
        context: Contexto adicional
        level: Nivel de logging
    """
    log_data = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        **(context or {}),
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update({"error_code": exception.error_code.value, "severity": exception.severity.value})
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {exception}"

    logger.log(level, message, extra=log_data)


class ErrorAggregator:
    """
    Agregador de errores para procesos batch (exportación de productos,
    importación de stock).
    """

    def __init__(self):
        """Inicializa el agregador."""
        self.errors: List[AppException] = []
        self.total_processed = 0
        self.start_time = datetime.now(timezone.utc)

    def add_error(self, exception: Union[AppException, Exception], context: Optional[Dict] = None):
        """
        Agrega un error al agregador.

        Args:
            exception: Excepción a agregar
            context: Contexto adicional
        """
        exception = convert_to_app_exception(exception, context)
        self.errors.append(exception)

        if exception.is_critical:
            log_error(exception, context, logging.CRITICAL)

    def increment_processed(self):
        """Incrementa contador de procesados."""
        self.total_processed += 1

    def has_errors(self) -> bool:
        """Verifica si hay errores."""
        return len(self.errors) > 0

    def error_messages(self, limit: Optional[int] = None) -> List[str]:
        """
        Mensajes de error únicos en orden de aparición.

        Args:
            limit: Máximo de mensajes a devolver

        Returns:
            List[str]: Mensajes sin duplicados
        """
        unique: List[str] = []
        for error in self.errors:
            if error.message not in unique:
                unique.append(error.message)
        return unique[:limit] if limit is not None else unique

    def get_summary(self) -> Dict[str, Any]:
        """
        Obtiene resumen de errores.

        Returns:
            Dict: Resumen de errores
        """
        end_time = datetime.now(timezone.utc)
        return {
            "total_processed": self.total_processed,
            "error_count": len(self.errors),
            "success_count": self.total_processed - len(self.errors),
            "duration_seconds": (end_time - self.start_time).total_seconds(),
            "errors": self.error_messages(),
        }
