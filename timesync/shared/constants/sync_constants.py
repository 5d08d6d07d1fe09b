"""
Constantes del pipeline de sync Google Calendar -> Notion.
"""
from enum import Enum


class ResolverMode(str, Enum):
    """
    Modo de resolucion de personas y deals.

    Se elige uno por despliegue y se usa durante toda la corrida.
    """
    WARM = "warm"   # Scan completo al inicio; un miss es "no encontrado"
    LAZY = "lazy"   # Query puntual por cada miss, cacheada


DEFAULT_DAYS_BACK = 90
DEFAULT_TYPE_TAG = "session"

# Tamaños de pagina usados contra Notion / Google
NOTION_SCAN_PAGE_SIZE = 100
GCAL_PAGE_SIZE = 2500
