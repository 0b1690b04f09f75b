from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hr_portal.hr_portal.container import build_container
from src.hr_portal.hr_portal.database.bootstrap import apply_seed_sql, ensure_admin_user


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    container = build_container(db_config=db_config)
    created = ensure_admin_user(
        container.users_repo,
        email=getattr(settings, "ADMIN_EMAIL", None),
        password=getattr(settings, "ADMIN_PASSWORD", None),
    )

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
        f" (admin {'created' if created else 'unchanged'})"
    )


if __name__ == "__main__":
    main()
