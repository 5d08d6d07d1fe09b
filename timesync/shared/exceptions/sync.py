"""
Excepciones del pipeline de sync (configuracion, Google Calendar, Notion).
"""
from typing import Optional, Sequence

from timesync.shared.exceptions.base import AppException


class ConfigurationException(AppException):
    """
    Falta una credencial o id obligatorio, o una variable no se puede parsear.
    Fatal al inicio, sin corrida parcial.
    """

    def __init__(self, missing: Sequence[str] = (), invalid: Sequence[str] = ()):
        parts = []
        if missing:
            parts.append(f"Faltan variables de entorno obligatorias: {', '.join(missing)}")
        if invalid:
            parts.append(f"Variables de entorno con valor invalido: {', '.join(invalid)}")
        super().__init__(
            message="; ".join(parts),
            error_code="CONFIG_ERROR",
            details={"missing": list(missing), "invalid": list(invalid)}
        )
        self.missing = list(missing)
        self.invalid = list(invalid)


class CalendarAuthException(AppException):
    """Fallo al refrescar el token de Google."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"No se pudo refrescar el token de Google: {reason}",
            error_code="CALENDAR_AUTH_ERROR",
            details={"reason": reason}
        )


class CalendarApiException(AppException):
    """Error de la API de Google Calendar al listar eventos."""

    def __init__(self, calendar_id: str, reason: str):
        super().__init__(
            message=f"Google Calendar fallo listando eventos de '{calendar_id}': {reason}",
            error_code="CALENDAR_API_ERROR",
            details={"calendar_id": calendar_id, "reason": reason}
        )


class NotionApiError(AppException):
    """
    Respuesta no-2xx (o error de transporte) de la API de Notion.

    Los writes ya aplicados quedan aplicados: el job no es transaccional.
    """

    def __init__(
        self,
        method: str,
        path: str,
        status: Optional[int],
        body: str,
        error_code: str = "NOTION_API_ERROR",
    ):
        super().__init__(
            message=f"Notion API error {status} on {method} {path}: {body}",
            error_code=error_code,
            details={"method": method, "path": path, "status": status, "body": body}
        )
        self.method = method
        self.path = path
        self.status = status
        self.body = body


class NotionRateLimitError(NotionApiError):
    """429 repetido tras el unico reintento permitido."""

    def __init__(self, method: str, path: str, body: str):
        super().__init__(
            method=method,
            path=path,
            status=429,
            body=body,
            error_code="NOTION_RATE_LIMITED",
        )
