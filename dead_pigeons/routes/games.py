"""Round routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from dead_pigeons.db import get_session
from dead_pigeons.schemas.board import BoardSchema
from dead_pigeons.schemas.game import GameSchema, OpenRoundSchema, SettlementSummarySchema, WinningNumbersSchema
from dead_pigeons.services import get_services
from dead_pigeons.utils.responses import ok

games_bp = Blueprint("games", __name__, url_prefix="/games")

_game_schema = GameSchema()
_games_schema = GameSchema(many=True)
_boards_schema = BoardSchema(many=True)
_open_schema = OpenRoundSchema()
_winning_schema = WinningNumbersSchema()
_summary_schema = SettlementSummarySchema()


@games_bp.get("/active")
def get_active_game():
    game = get_services().games.get_active_game(get_session())
    return ok(_game_schema.dump(game))


@games_bp.get("/history")
def get_history():
    """Closed rounds, newest first."""

    games = get_services().games.get_history(get_session())
    return ok(_games_schema.dump(games))


@games_bp.get("/<int:game_id>")
def get_game(game_id: int):
    game = get_services().games.get_game(get_session(), game_id)
    return ok(_game_schema.dump(game))


@games_bp.post("/open")
def open_next_round():
    data = _open_schema.load(request.get_json(silent=True) or {})
    opened = get_services().games.open_next_round(
        get_session(), week_number=data.get("week_number"), year=data.get("year")
    )
    return ok(
        {
            "game": _game_schema.dump(opened.game),
            "renewed_boards": _boards_schema.dump(opened.renewal.renewed),
            "stopped_board_ids": opened.renewal.stopped_board_ids,
        },
        status_code=201,
    )


@games_bp.post("/<int:game_id>/winning-numbers")
def set_winning_numbers(game_id: int):
    data = _winning_schema.load(request.get_json(silent=True) or {})
    summary = get_services().games.set_winning_numbers(get_session(), game_id, data["winning_numbers"])
    return ok(_summary_schema.dump(summary))


@games_bp.get("/<int:game_id>/summary")
def get_settlement_summary(game_id: int):
    summary = get_services().games.get_settlement_summary(get_session(), game_id)
    return ok(_summary_schema.dump(summary))


@games_bp.get("/<int:game_id>/boards")
def get_boards_for_game(game_id: int):
    services = get_services()
    session = get_session()
    services.games.get_game(session, game_id)
    return ok(_boards_schema.dump(services.boards.get_boards_for_game(session, game_id)))
