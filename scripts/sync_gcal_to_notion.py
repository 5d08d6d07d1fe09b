"""
CLI: Google Calendar -> Notion time entries (one-way sync).

Uso recomendado:
  - Ejecutar como job (cron/systemd timer).

Variables de entorno requeridas:
  - GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REFRESH_TOKEN
  - NOTION_TOKEN, NOTION_DB_TIME_ENTRIES_ID, NOTION_DB_PEOPLE_ID

Opcionales (ver timesync.core.config.Settings):
  - NOTION_DB_DEALS_ID, CALENDAR_ID_PERSONAL, CALENDAR_ID_CROSS_MOCKS, ...

Ejecución:
  python scripts/sync_gcal_to_notion.py
  python scripts/sync_gcal_to_notion.py --days 30
  python scripts/sync_gcal_to_notion.py --resolver lazy --no-prefetch -v
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv
from loguru import logger

# Permite ejecutar este script desde cualquier cwd sin instalar el paquete.
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

# Cargar variables desde .env si existe (raiz del repo).
load_dotenv(_REPO_ROOT / ".env", override=False)

from timesync.core.config import Settings
from timesync.infrastructure.external.sync_builder import build_from_settings
from timesync.shared.constants.sync_constants import ResolverMode
from timesync.shared.exceptions.base import AppException


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Sync Google Calendar events into Notion time entries")
    parser.add_argument("--days", type=int, default=None, help="Dias hacia atras a sincronizar (default: SYNC_DAYS_BACK)")
    parser.add_argument(
        "--resolver",
        choices=[mode.value for mode in ResolverMode],
        default=None,
        help="Modo de resolucion de personas/deals (default: RESOLVER_MODE)",
    )
    parser.add_argument("--no-prefetch", action="store_true", help="No precargar time entries de la ventana")
    parser.add_argument("--verbose", "-v", action="store_true", help="Mostrar mensajes de debug")
    args = parser.parse_args(argv)

    overrides = {}
    if args.resolver:
        overrides["RESOLVER_MODE"] = ResolverMode(args.resolver)
    if args.no_prefetch:
        overrides["PREFETCH_TIME_ENTRIES"] = False

    _configure_logging("DEBUG" if args.verbose else "INFO")

    try:
        settings = Settings.load()
        if overrides:
            settings = settings.model_copy(update=overrides)
        if not args.verbose:
            _configure_logging(settings.LOG_LEVEL)

        use_case = build_from_settings(settings)
        days_back = settings.effective_days_back(args.days)
        logger.info(f"Iniciando sync Google Calendar -> Notion ({days_back} dias, modo {settings.RESOLVER_MODE.value})")
        report = use_case.run(days_back)
    except AppException as e:
        logger.error(f"{e.error_code}: {e.message}")
        return 1

    logger.success(f"Sync OK: {report.summary()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
