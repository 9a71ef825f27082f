"""
Player Identity

SessionContext holds the local player explicitly instead of a module-level
cache. The identity is kept in a small JSON file so the same player is
reused across runs, and refreshed from the record store on first use.
"""

import json
import os
from pathlib import Path
from typing import Optional, Union

from ..errors import GameNotFoundError, PersistenceError
from ..models.player import Player
from ..utils.game_logger import game_logger
from ..utils.helpers import new_id
from .store import GameStore, random_nickname


class SessionContext:
    """
    Local player identity for one client.

    - get_or_create_local_player(): cached player, else stored identity, else a new player
    - update_nickname(): persist a new nickname and replace the cached player
    - invalidate() / refresh(): drop the cached player / reload it from the store
    """

    def __init__(self, store: GameStore, identity_file: Optional[Union[str, Path]] = None):
        self.store = store
        self.identity_file = Path(identity_file) if identity_file else None
        self._player: Optional[Player] = None

    @property
    def player(self) -> Optional[Player]:
        """Cached player, if any."""
        return self._player

    def _read_identity(self) -> Optional[Player]:
        if not self.identity_file or not self.identity_file.exists():
            return None
        try:
            with open(self.identity_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            player = Player.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            game_logger.logger.warning(f"Ignoring unreadable player identity file {self.identity_file}: {e}")
            return None
        if not player.id or not player.nickname:
            return None
        return player

    def _write_identity(self, player: Player) -> None:
        if not self.identity_file:
            return
        try:
            os.makedirs(self.identity_file.parent, exist_ok=True)
            with open(self.identity_file, 'w', encoding='utf-8') as f:
                json.dump(player.to_dict(), f, ensure_ascii=False)
        except OSError as e:
            game_logger.logger.warning(f"Could not save player identity to {self.identity_file}: {e}")

    def get_or_create_local_player(self) -> Player:
        """
        Return the local player, creating one with a random nickname when none exists.

        Raises:
            PersistenceError: a new player could not be created
        """
        if self._player is not None:
            return self._player

        stored = self._read_identity()
        if stored is not None:
            try:
                player = self.store.get_player(stored.id)
            except GameNotFoundError:
                game_logger.logger.warning(f"Stored player {stored.id} no longer exists, creating a new one")
                player = None
            except PersistenceError as e:
                # Offline: keep playing with the stored identity
                game_logger.logger.warning(f"Could not refresh player {stored.id}: {e}")
                player = stored

            if player is not None:
                self._write_identity(player)
                self._player = player
                return player

        player = self.store.create_player(random_nickname(), new_id())
        game_logger.log_game_event(None, 'player_created', player.id, nickname=player.nickname)
        self._write_identity(player)
        self._player = player
        return player

    def update_nickname(self, nickname: str) -> Optional[Player]:
        """Change the local player's nickname. Blank nicknames are ignored."""
        nickname = (nickname or "").strip()
        if not nickname:
            return None

        current = self.get_or_create_local_player()
        player = self.store.update_nickname(current.id, nickname)
        game_logger.log_game_event(None, 'nickname_updated', player.id, nickname=nickname)

        self._write_identity(player)
        self._player = player
        return player

    def invalidate(self) -> None:
        self._player = None

    def refresh(self) -> Player:
        """Drop the cache and reload the player from the store."""
        current = self._player or self._read_identity()
        self.invalidate()
        if current is None:
            return self.get_or_create_local_player()

        player = self.store.get_player(current.id)
        self._write_identity(player)
        self._player = player
        return player
