"""Dead Pigeons: weekly club lottery rounds, boards and balances."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from flask import Flask


def create_app(overrides: Mapping[str, Any] | None = None) -> Flask:
    """Application factory.

    Args:
        overrides: Config values applied on top of the environment config
            (tests pass ``DATABASE_URL`` and friends here).

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from dead_pigeons.config import get_config
    from dead_pigeons.db import init_db
    from dead_pigeons.error_handlers import register_error_handlers
    from dead_pigeons.logging_config import configure_logging
    from dead_pigeons.routes.games import games_bp
    from dead_pigeons.routes.health import health_bp
    from dead_pigeons.routes.players import players_bp
    from dead_pigeons.routes.transactions import transactions_bp
    from dead_pigeons.rules import GameRules
    from dead_pigeons.services import build_services

    app = Flask(__name__)
    app.config.from_object(get_config())
    if overrides:
        app.config.update(overrides)

    configure_logging(app)
    init_db(app)
    register_error_handlers(app)

    app.extensions["services"] = build_services(GameRules.from_config(app.config))

    app.register_blueprint(health_bp)
    app.register_blueprint(games_bp)
    app.register_blueprint(players_bp)
    app.register_blueprint(transactions_bp)

    return app
