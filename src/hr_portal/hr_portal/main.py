from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .announcements.controller import register as register_announcements
from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .container import Container, build_container
from .core.constants import SESSION_IDLE_MINUTES
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_admin_user, list_tables
from .goalsheets.controller import register as register_goalsheets
from .leaves.controller import register as register_leaves
from .payroll.controller import register as register_payroll
from .tasks.controller import register as register_tasks
from .timesheets.controller import register as register_timesheets
from .training.controller import register as register_training
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")

        container = build_container(
            db_config=db_config,
            trust_proxy_headers=bool(getattr(settings, "TRUST_PROXY_HEADERS", False)),
            session_idle_minutes=int(getattr(settings, "SESSION_IDLE_MINUTES", SESSION_IDLE_MINUTES)),
        )
        if getattr(settings, "ADMIN_EMAIL", None):
            ensure_admin_user(
                container.users_repo,
                email=getattr(settings, "ADMIN_EMAIL", None),
                password=getattr(settings, "ADMIN_PASSWORD", None),
            )

    app.extensions["hr_portal"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_attendance(app, container)
    register_timesheets(app, container)
    register_leaves(app, container)
    register_tasks(app, container)
    register_payroll(app, container)
    register_training(app, container)
    register_goalsheets(app, container)
    register_announcements(app, container)
    register_dashboard(app, container)

    return app
