"""Create the club's tables in the configured database.

Reads DATABASE_URL (or the PG* variables) from .env / environment.

Usage:
  python scripts/create_tables.py
  python scripts/create_tables.py --database-url sqlite:///./dead_pigeons.db
"""

from __future__ import annotations

import argparse
import pathlib
import sys

from dotenv import load_dotenv
from sqlalchemy import inspect, text

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from dead_pigeons import models  # noqa: F401  registers tables
from dead_pigeons.config import resolve_database_url
from dead_pigeons.db import create_app_engine
from dead_pigeons.models.base import Base

# create_all() leaves existing tables alone; these keep older PostgreSQL
# databases in line with the invariants the services rely on.
POSTGRES_DDL = (
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_games_single_active ON games (is_active) WHERE is_active",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_boards_renewal ON boards (renewed_from_id, game_id)",
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create Dead Pigeons tables")
    parser.add_argument("--database-url", default=None, help="overrides DATABASE_URL")
    args = parser.parse_args(argv)

    load_dotenv()
    env_local = PROJECT_ROOT / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)

    engine = create_app_engine(args.database_url or resolve_database_url())
    Base.metadata.create_all(bind=engine)

    if engine.dialect.name == "postgresql":
        with engine.begin() as conn:
            for stmt in POSTGRES_DDL:
                conn.execute(text(stmt))

    print("Tables: " + ", ".join(sorted(inspect(engine).get_table_names())))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
