"""Player routes (controllers). No business logic here.

The identity layer in front of this API is trusted: ``player_id`` in the
path is the already-authenticated player.
"""

from __future__ import annotations

from flask import Blueprint, request

from dead_pigeons.db import get_session
from dead_pigeons.errors import ValidationError
from dead_pigeons.schemas.board import BoardCreateSchema, BoardSchema
from dead_pigeons.schemas.game import PlayerHistoryItemSchema
from dead_pigeons.schemas.player import PlayerCreateSchema, PlayerSchema, PlayerUpdateSchema
from dead_pigeons.schemas.transaction import BalanceSchema, TransactionCreateSchema, TransactionSchema
from dead_pigeons.services import get_services
from dead_pigeons.utils.responses import ok

players_bp = Blueprint("players", __name__, url_prefix="/players")

_player_schema = PlayerSchema()
_players_schema = PlayerSchema(many=True)
_create_schema = PlayerCreateSchema()
_update_schema = PlayerUpdateSchema()
_board_schema = BoardSchema()
_boards_schema = BoardSchema(many=True)
_board_create_schema = BoardCreateSchema()
_history_schema = PlayerHistoryItemSchema(many=True)
_balance_schema = BalanceSchema()
_transaction_schema = TransactionSchema()
_transactions_schema = TransactionSchema(many=True)
_transaction_create_schema = TransactionCreateSchema()


def _parse_is_active(raw: str | None) -> bool | None:
    if raw is None or raw == "":
        return None
    lowered = raw.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValidationError(details={"is_active": ["Must be true or false"]})


@players_bp.get("")
def list_players():
    is_active = _parse_is_active(request.args.get("is_active"))
    players = get_services().players.list_players(get_session(), is_active=is_active)
    return ok(_players_schema.dump(players))


@players_bp.post("")
def create_player():
    data = _create_schema.load(request.get_json(silent=True) or {})
    player = get_services().players.create_player(
        get_session(), full_name=data["full_name"], email=data["email"], phone=data["phone"]
    )
    return ok(_player_schema.dump(player), status_code=201)


@players_bp.get("/<int:player_id>")
def get_player(player_id: int):
    return ok(_player_schema.dump(get_services().players.get_player(get_session(), player_id)))


@players_bp.put("/<int:player_id>")
def update_player(player_id: int):
    data = _update_schema.load(request.get_json(silent=True) or {})
    player = get_services().players.update_player(
        get_session(),
        player_id,
        full_name=data["full_name"],
        phone=data["phone"],
        email=data.get("email"),
    )
    return ok(_player_schema.dump(player))


@players_bp.post("/<int:player_id>/activate")
def activate_player(player_id: int):
    return ok(_player_schema.dump(get_services().players.activate_player(get_session(), player_id)))


@players_bp.post("/<int:player_id>/deactivate")
def deactivate_player(player_id: int):
    return ok(_player_schema.dump(get_services().players.deactivate_player(get_session(), player_id)))


@players_bp.delete("/<int:player_id>")
def delete_player(player_id: int):
    return ok(_player_schema.dump(get_services().players.soft_delete_player(get_session(), player_id)))


@players_bp.get("/<int:player_id>/boards")
def list_boards(player_id: int):
    boards = get_services().boards.get_boards_for_player(get_session(), player_id)
    return ok(_boards_schema.dump(boards))


@players_bp.post("/<int:player_id>/boards")
def create_board(player_id: int):
    data = _board_create_schema.load(request.get_json(silent=True) or {})
    board = get_services().boards.create_board(
        get_session(),
        player_id,
        data["game_id"],
        data["numbers"],
        repeat_weeks=data["repeat_weeks"],
    )
    return ok(_board_schema.dump(board), status_code=201)


@players_bp.post("/<int:player_id>/boards/<int:board_id>/stop-repeat")
def stop_repeating(player_id: int, board_id: int):
    board = get_services().boards.stop_repeating(get_session(), player_id, board_id)
    return ok(_board_schema.dump(board))


@players_bp.get("/<int:player_id>/history")
def player_history(player_id: int):
    items = get_services().games.get_player_history(get_session(), player_id)
    return ok(_history_schema.dump(items))


@players_bp.get("/<int:player_id>/balance")
def player_balance(player_id: int):
    statement = get_services().ledger.get_statement(get_session(), player_id)
    return ok(_balance_schema.dump(statement))


@players_bp.get("/<int:player_id>/transactions")
def list_transactions(player_id: int):
    transactions = get_services().transactions.list_for_player(get_session(), player_id)
    return ok(_transactions_schema.dump(transactions))


@players_bp.post("/<int:player_id>/transactions")
def create_transaction(player_id: int):
    data = _transaction_create_schema.load(request.get_json(silent=True) or {})
    created = get_services().transactions.create_transaction(
        get_session(), player_id, data["mobile_pay_number"], data["amount"]
    )
    return ok(_transaction_schema.dump(created), status_code=201)
