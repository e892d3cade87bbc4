from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

import structlog
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .core.constants import DEFAULT_BULK_CLOSE_MAX_WORKERS, DEFAULT_MAX_TIME_ENTRIES, DEFAULT_REALTIME_TIMEOUT_SECONDS
from .core.logging import install_request_id, setup_logging

from .container import Container, build_container
from .assignments.controller import register as register_assignments
from .timesheets.controller import register as register_timesheets
from .users.controller import register as register_users

logger = structlog.get_logger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Passing a ready ``container`` skips every database step; tests use this
    with in-memory repositories.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))
    install_request_id(app)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "app_starting",
            settings=settings_module,
            db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("schema_ready", tables=len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            # seed.sql assigns the demo users, so they go in first
            ensure_demo_users(db_config)
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            logger.info("demo_seed_ready")

        container = build_container(
            db_config=db_config,
            realtime_relay_url=getattr(settings, "REALTIME_RELAY_URL", None) or None,
            realtime_timeout=float(getattr(settings, "REALTIME_TIMEOUT_SECONDS", DEFAULT_REALTIME_TIMEOUT_SECONDS)),
            max_entries=int(getattr(settings, "MAX_TIME_ENTRIES", DEFAULT_MAX_TIME_ENTRIES)),
            bulk_close_max_workers=int(getattr(settings, "BULK_CLOSE_MAX_WORKERS", DEFAULT_BULK_CLOSE_MAX_WORKERS)),
        )

    app.extensions["staffing_workflow"] = container

    register_users(app, container)
    register_assignments(app, container)
    register_timesheets(app, container)

    return app
