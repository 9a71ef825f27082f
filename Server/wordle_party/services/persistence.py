"""
Persistence Modes

Where the game state machine records games, memberships, guesses and
status changes. Solo games use LocalPersistence (no network, never fails);
multiplayer games use RemotePersistence, which delegates to a record store
whose writes are propagated to every participant.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..errors import PersistenceError, WordleError
from ..models.game import Game, GamePlayer, GameSnapshot, GameStatus, Guess
from ..models.player import Player
from ..utils.game_logger import game_logger
from .store import GameStore, InMemoryGameStore


class PersistenceMode(ABC):
    """Capability injected into GameService."""

    is_remote = False

    @abstractmethod
    def create_game(self, word: str, max_attempts: int, is_multiplayer: bool,
                    creator: Player, language: str) -> Game:
        ...

    @abstractmethod
    def add_player(self, game: Game, player: Player) -> GamePlayer:
        ...

    @abstractmethod
    def record_guess(self, game: Game, player_id: str, guess: str) -> Guess:
        ...

    @abstractmethod
    def update_game_status(self, game: Game, status: GameStatus, winner_id: Optional[str] = None) -> Game:
        ...

    @abstractmethod
    def load_snapshot(self, game_id: str) -> GameSnapshot:
        ...


class LocalPersistence(PersistenceMode):
    """In-process records for solo play."""

    def __init__(self):
        self._store = InMemoryGameStore()

    def create_game(self, word: str, max_attempts: int, is_multiplayer: bool,
                    creator: Player, language: str) -> Game:
        self._store.register_player(creator)
        return self._store.create_game(word, max_attempts, is_multiplayer, creator.id, language)

    def add_player(self, game: Game, player: Player) -> GamePlayer:
        self._store.register_player(player)
        return self._store.add_player(game.id, player.id)

    def record_guess(self, game: Game, player_id: str, guess: str) -> Guess:
        return self._store.insert_guess(game.id, player_id, guess)

    def update_game_status(self, game: Game, status: GameStatus, winner_id: Optional[str] = None) -> Game:
        return self._store.update_game_status(game.id, status, winner_id)

    def load_snapshot(self, game_id: str) -> GameSnapshot:
        return self._store.get_snapshot(game_id)


class RemotePersistence(PersistenceMode):
    """
    Records kept by a shared record store.

    Game errors raised by the store (game over, not found, validation) pass
    through unchanged; anything else is reported as a PersistenceError and
    never retried here.
    """

    is_remote = True

    def __init__(self, store: GameStore):
        self.store = store

    def _call(self, action: str, game_id: Optional[str], func, *args):
        try:
            return func(*args)
        except WordleError:
            raise
        except Exception as e:
            game_logger.logger.error(f"Persistence failure during {action} (game {game_id}): {e}")
            raise PersistenceError(f"Failed to {action.replace('_', ' ')}") from e

    def create_game(self, word: str, max_attempts: int, is_multiplayer: bool,
                    creator: Player, language: str) -> Game:
        return self._call('create_game', None, self.store.create_game,
                          word, max_attempts, is_multiplayer, creator.id, language)

    def add_player(self, game: Game, player: Player) -> GamePlayer:
        return self._call('add_player', game.id, self.store.add_player, game.id, player.id)

    def record_guess(self, game: Game, player_id: str, guess: str) -> Guess:
        return self._call('insert_guess', game.id, self.store.insert_guess, game.id, player_id, guess)

    def update_game_status(self, game: Game, status: GameStatus, winner_id: Optional[str] = None) -> Game:
        return self._call('update_game_status', game.id, self.store.update_game_status,
                          game.id, status, winner_id)

    def load_snapshot(self, game_id: str) -> GameSnapshot:
        return self._call('load_snapshot', game_id, self.store.get_snapshot, game_id)
