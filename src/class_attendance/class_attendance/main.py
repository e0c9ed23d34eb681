from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .core.constants import DEFAULT_EDIT_WINDOW_DAYS, DEFAULT_REFERENCE_TIMEZONE
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

from .container import build_container
from .attendance.controller import register as register_attendance
from .faculty.controller import register as register_faculty

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    repo_root = Path(__file__).resolve().parents[3]
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=repo_root / "database" / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=repo_root / "database" / "seed.sql")
        logger.info("demo seed ready")

    container = build_container(
        db_config=db_config,
        edit_window_days=int(getattr(settings, "EDIT_WINDOW_DAYS", DEFAULT_EDIT_WINDOW_DAYS)),
        tz_name=str(getattr(settings, "REFERENCE_TIMEZONE", DEFAULT_REFERENCE_TIMEZONE)),
        enforce_edit_window=bool(getattr(settings, "ENFORCE_EDIT_WINDOW", True)),
    )

    register_faculty(app, container)
    register_attendance(app, container)

    return app
