from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.event_checkin.event_checkin.database.bootstrap import apply_seed_sql, ensure_demo_organizer
from src.event_checkin.event_checkin.database.connection import DBConfig

logger = logging.getLogger("seed_db")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo data and the demo organizer account.")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--password", default="admin123")
    args = parser.parse_args()

    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    user_id = ensure_demo_organizer(db_config, username=args.username, password=args.password)

    logger.info(
        "OK: Seeded database -> %s (organizer %s, user id %s)",
        DBConfig.from_dict(db_config).describe(),
        args.username,
        user_id,
    )


if __name__ == "__main__":
    main()
