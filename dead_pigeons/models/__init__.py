"""ORM models."""

from dead_pigeons.models.board import Board
from dead_pigeons.models.game import Game
from dead_pigeons.models.player import Player
from dead_pigeons.models.transaction import Transaction, TransactionStatus

__all__ = ["Board", "Game", "Player", "Transaction", "TransactionStatus"]
