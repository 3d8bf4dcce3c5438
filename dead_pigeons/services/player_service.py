"""Player lifecycle: registration, activation and soft deletion."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from sqlalchemy.orm import Session

from dead_pigeons.db import transaction
from dead_pigeons.errors import EmailAlreadyRegistered, PlayerNotFound
from dead_pigeons.models.base import utcnow
from dead_pigeons.models.player import Player
from dead_pigeons.repositories.player_repository import PlayerRepository

logger = logging.getLogger(__name__)


class PlayerService:
    """Player use-cases."""

    def __init__(
        self, repository: PlayerRepository | None = None, clock: Callable[[], datetime] = utcnow
    ) -> None:
        self._repo = repository or PlayerRepository()
        self._clock = clock

    def create_player(self, session: Session, full_name: str, email: str, phone: str) -> Player:
        """Register a player. New players are inactive until an admin activates them."""

        with transaction(session):
            if self._repo.email_taken(session, email):
                raise EmailAlreadyRegistered(email)
            player = self._repo.create(
                session,
                Player(
                    full_name=full_name,
                    email=email,
                    phone=phone,
                    is_active=False,
                    created_at=self._clock(),
                ),
            )

        logger.info("Registered player %s", player.id)
        return player

    def list_players(self, session: Session, is_active: bool | None = None) -> Sequence[Player]:
        return self._repo.list_players(session, is_active=is_active)

    def get_player(self, session: Session, player_id: int) -> Player:
        player = self._repo.get_by_id(session, player_id)
        if player is None:
            raise PlayerNotFound(player_id)
        return player

    def update_player(
        self,
        session: Session,
        player_id: int,
        *,
        full_name: str,
        phone: str,
        email: str | None = None,
    ) -> Player:
        with transaction(session):
            player = self.get_player(session, player_id)
            if email and email != player.email:
                if self._repo.email_taken(session, email, exclude_id=player_id):
                    raise EmailAlreadyRegistered(email)
                player.email = email
            player.full_name = full_name
            player.phone = phone
        return player

    def activate_player(self, session: Session, player_id: int) -> Player:
        with transaction(session):
            player = self.get_player(session, player_id)
            if not player.is_active:
                player.is_active = True
                player.activated_at = self._clock()
                logger.info("Activated player %s", player_id)
        return player

    def deactivate_player(self, session: Session, player_id: int) -> Player:
        with transaction(session):
            player = self.get_player(session, player_id)
            if player.is_active:
                player.is_active = False
                logger.info("Deactivated player %s", player_id)
        return player

    def soft_delete_player(self, session: Session, player_id: int) -> Player:
        with transaction(session):
            player = self.get_player(session, player_id)
            player.deleted_at = self._clock()
        logger.info("Soft-deleted player %s", player_id)
        return player
