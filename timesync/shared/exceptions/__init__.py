"""
Excepciones de la aplicacion.
"""
from timesync.shared.exceptions.base import AppException
from timesync.shared.exceptions.sync import (
    CalendarApiException,
    CalendarAuthException,
    ConfigurationException,
    NotionApiError,
    NotionRateLimitError,
)

__all__ = [
    "AppException",
    "CalendarApiException",
    "CalendarAuthException",
    "ConfigurationException",
    "NotionApiError",
    "NotionRateLimitError",
]
