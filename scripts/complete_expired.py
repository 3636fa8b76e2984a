"""Sweep for suspensions past their expiration date (run from cron)."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.tardiness_system.tardiness_system.container import build_container
from src.tardiness_system.tardiness_system.main import configure_logging


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(settings)
    completed = container.processing_service.complete_expired_records()
    print(f"OK: completed {completed} expired suspension(s)")


if __name__ == "__main__":
    main()
