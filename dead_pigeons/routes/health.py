"""Liveness and readiness."""

from __future__ import annotations

from flask import Blueprint
from sqlalchemy import text

from dead_pigeons.db import get_session
from dead_pigeons.repositories.game_repository import GameRepository
from dead_pigeons.utils.responses import ok

health_bp = Blueprint("health", __name__)

_games = GameRepository()


@health_bp.get("/health")
def health_check():
    """Pings the database and reports which round, if any, is open."""

    session = get_session()
    session.execute(text("SELECT 1"))
    active = _games.get_active(session)
    return ok(
        {
            "status": "ok",
            "database": "ok",
            "active_game": None if active is None else {"id": active.id, "week_number": active.week_number, "year": active.year},
        }
    )
