from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .incidents.controller import register as register_incidents
from .processing.controller import register as register_processing

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_app(settings=None, *, store=None, notifier=None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = None
    if settings is None:
        settings_module = get_settings_module()
        settings = importlib.import_module(settings_module)

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    backend = getattr(settings, "STORE_BACKEND", "mysql")
    db_config = getattr(settings, "DB_CONFIG", {})
    logger.info(
        "settings=%s store=%s db=%s@%s:%s/%s",
        settings_module or getattr(settings, "__name__", "custom"),
        backend,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if store is None and backend == "mysql":
        database_dir = Path(__file__).resolve().parents[3] / "database"
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=database_dir / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=database_dir / "seed.sql")
            logger.info("rule seed ready")

    container = build_container(settings, store=store, notifier=notifier)
    app.extensions["tardiness_container"] = container

    register_processing(app, container)
    register_incidents(app, container)

    return app
