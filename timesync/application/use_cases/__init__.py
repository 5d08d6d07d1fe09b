"""
Casos de uso de la aplicacion.
"""
from .calendar_sync_use_cases import CalendarSyncUseCase

__all__ = ["CalendarSyncUseCase"]
