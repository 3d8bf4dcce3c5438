"""Open the next weekly round (or bootstrap the very first one).

Renews repeating boards from the previous round into the new one.

Usage:
  python scripts/open_round.py
  python scripts/open_round.py --week 12 --year 2026   # first round only
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys

from dotenv import load_dotenv
from flask import Config

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from dead_pigeons.config import get_config
from dead_pigeons.db import create_app_engine, create_session_factory
from dead_pigeons.errors import AppError
from dead_pigeons.logging_config import LOG_FORMAT
from dead_pigeons.models.base import Base
from dead_pigeons.rules import GameRules
from dead_pigeons.services import build_services

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--week", type=int, default=None, help="week number of the first round")
    parser.add_argument("--year", type=int, default=None, help="year of the first round")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = _parse_args(argv)

    # Same keys the web app sees, without building the app.
    config = Config(str(PROJECT_ROOT))
    config.from_object(get_config())
    logging.basicConfig(level=str(config["LOG_LEVEL"]).upper(), format=LOG_FORMAT)

    engine = create_app_engine(str(config["DATABASE_URL"]))
    Base.metadata.create_all(bind=engine)
    session_factory = create_session_factory(engine)

    services = build_services(GameRules.from_config(config))

    with session_factory() as session:
        try:
            opened = services.games.open_next_round(session, week_number=args.week, year=args.year)
        except AppError as exc:
            logger.error("Could not open round: %s (%s)", exc.message, exc.code)
            return 1

    print(
        f"Opened game {opened.game.id} for week {opened.game.week_number}/{opened.game.year}: "
        f"{len(opened.renewal.renewed)} boards renewed, {len(opened.renewal.stopped_board_ids)} chains stopped."
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
