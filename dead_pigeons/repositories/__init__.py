"""Persistence helpers, one repository per aggregate."""

from dead_pigeons.repositories.board_repository import BoardRepository
from dead_pigeons.repositories.game_repository import GameRepository
from dead_pigeons.repositories.player_repository import PlayerRepository
from dead_pigeons.repositories.transaction_repository import TransactionRepository

__all__ = ["BoardRepository", "GameRepository", "PlayerRepository", "TransactionRepository"]
