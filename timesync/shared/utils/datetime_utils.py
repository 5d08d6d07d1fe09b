"""
Utilidades para manejo de fechas y horas.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo


class DateTimeUtils:
    """Clase de utilidades para operaciones con fechas y horas."""

    @staticmethod
    def now_utc() -> datetime:
        """
        Obtiene la fecha y hora actual en UTC.

        Returns:
            datetime: Fecha y hora actual en UTC
        """
        return datetime.now(timezone.utc)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """
        Normaliza datetime a UTC (aware). Un datetime naive se asume UTC.
        """
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def to_rfc3339(dt: datetime) -> str:
        """
        Serializa a RFC3339 en UTC con precision de segundos.

        Ejemplo: 2025-01-15T06:30:00+00:00
        """
        return DateTimeUtils.ensure_utc(dt).replace(microsecond=0).isoformat()

    @staticmethod
    def from_iso_string(iso_string: Optional[str]) -> Optional[datetime]:
        """
        Convierte un string ISO 8601 a datetime aware.

        Args:
            iso_string: String en formato ISO 8601 (acepta sufijo 'Z')

        Returns:
            Optional[datetime]: Objeto datetime o None si hay error
        """
        if not iso_string:
            return None
        try:
            dt = datetime.fromisoformat(iso_string.strip().replace("Z", "+00:00"))
        except (ValueError, TypeError, AttributeError):
            return None
        return DateTimeUtils.ensure_utc(dt)

    @staticmethod
    def to_epoch_seconds(iso_string: Optional[str]) -> Optional[int]:
        """
        Instante absoluto en segundos. Dos strings con distinto offset que
        representan el mismo instante dan el mismo valor.
        """
        dt = DateTimeUtils.from_iso_string(iso_string)
        if dt is None:
            return None
        return int(dt.timestamp())

    @staticmethod
    def sync_window(days_back: int, now: Optional[datetime] = None) -> Tuple[str, str]:
        """
        Ventana absoluta [now - days_back, now] en RFC3339 UTC.

        Returns:
            Tuple[str, str]: (time_min, time_max)
        """
        now = DateTimeUtils.ensure_utc(now or DateTimeUtils.now_utc())
        time_min = now - timedelta(days=days_back)
        return DateTimeUtils.to_rfc3339(time_min), DateTimeUtils.to_rfc3339(now)

    @staticmethod
    def local_day(iso_string: str, tz_name: str) -> Optional[str]:
        """Dia (YYYY-MM-DD) del instante en la zona horaria indicada."""
        dt = DateTimeUtils.from_iso_string(iso_string)
        if dt is None:
            return None
        return dt.astimezone(ZoneInfo(tz_name)).strftime("%Y-%m-%d")
