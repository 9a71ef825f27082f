"""
Game Record Store

Persistence collaborator for games, players, memberships and guesses.
Every successful write is announced to the publisher as a change event
(``GuessAdded``, ``PlayerJoined``, ``GameStatusChanged``), which the server
broadcasts to the game's realtime channel.
"""

import random
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from ..errors import GameNotFoundError, GameOverError, PersistenceError, ValidationError
from ..models.events import GameStatusChanged, GuessAdded, PlayerJoined, RemoteEvent
from ..models.game import Game, GamePlayer, GameSnapshot, GameStatus, Guess
from ..models.player import Player
from ..utils.game_logger import game_logger
from ..utils.helpers import new_id, utc_now

Publisher = Callable[[RemoteEvent], None]


def random_nickname() -> str:
    """Nickname given to players who never chose one."""
    return f"Player{random.randint(0, 9999)}"


class GameStore(ABC):
    """
    Record store interface.

    Guards enforced by every implementation:
    - guesses are rejected once the game is completed or the player used all attempts
    - only members of a game may guess in it
    - completion is first-writer-wins: a completed game is never updated again
    """

    def __init__(self, publisher: Optional[Publisher] = None):
        self._publisher = publisher

    def set_publisher(self, publisher: Optional[Publisher]) -> None:
        self._publisher = publisher

    def _publish(self, event: RemoteEvent) -> None:
        if self._publisher is None:
            return
        try:
            self._publisher(event)
        except Exception as e:
            # The record is committed; a failed broadcast only affects live viewers.
            game_logger.logger.error(f"Failed to publish {event.kind} for game {event.game_id}: {e}")

    # Players

    @abstractmethod
    def create_player(self, nickname: Optional[str] = None, session_id: Optional[str] = None) -> Player:
        ...

    @abstractmethod
    def get_player(self, player_id: str) -> Player:
        ...

    @abstractmethod
    def update_nickname(self, player_id: str, nickname: str) -> Player:
        ...

    # Games

    @abstractmethod
    def create_game(self, word: str, max_attempts: int, is_multiplayer: bool,
                    creator_id: Optional[str] = None, language: str = "en") -> Game:
        ...

    @abstractmethod
    def add_player(self, game_id: str, player_id: str) -> GamePlayer:
        ...

    @abstractmethod
    def insert_guess(self, game_id: str, player_id: str, guess: str) -> Guess:
        ...

    @abstractmethod
    def update_game_status(self, game_id: str, status: GameStatus, winner_id: Optional[str] = None) -> Game:
        ...

    @abstractmethod
    def get_snapshot(self, game_id: str) -> GameSnapshot:
        ...

    def get_game(self, game_id: str) -> Game:
        """The game record alone, without members and guesses."""
        return self.get_snapshot(game_id).game

    @abstractmethod
    def list_active_games(self, player_id: str) -> List[Game]:
        """Games the player is a member of that are not completed, newest first."""


class InMemoryGameStore(GameStore):
    """Thread-safe in-process store used for solo play, single-process servers and tests."""

    def __init__(self, publisher: Optional[Publisher] = None):
        super().__init__(publisher)
        self._lock = threading.Lock()
        self.players: Dict[str, Player] = {}
        self.games: Dict[str, Game] = {}
        self.memberships: Dict[str, List[GamePlayer]] = {}
        self.guesses: Dict[str, List[Guess]] = {}

    def _get_game(self, game_id: str) -> Game:
        if game_id not in self.games:
            raise GameNotFoundError("Game not found")
        return self.games[game_id]

    def create_player(self, nickname: Optional[str] = None, session_id: Optional[str] = None) -> Player:
        player = Player(
            id=new_id(),
            nickname=(nickname or "").strip() or random_nickname(),
            session_id=session_id or new_id(),
            created_at=utc_now()
        )
        with self._lock:
            self.players[player.id] = player
        return player

    def register_player(self, player: Player) -> Player:
        """Store a player created elsewhere (solo sessions reuse the local identity)."""
        with self._lock:
            self.players[player.id] = player
        return player

    def get_player(self, player_id: str) -> Player:
        with self._lock:
            if player_id not in self.players:
                raise GameNotFoundError("Player not found")
            return self.players[player_id]

    def update_nickname(self, player_id: str, nickname: str) -> Player:
        nickname = (nickname or "").strip()
        if not nickname:
            raise ValidationError("Nickname cannot be empty", reason="empty_nickname")
        with self._lock:
            if player_id not in self.players:
                raise GameNotFoundError("Player not found")
            player = replace(self.players[player_id], nickname=nickname)
            self.players[player_id] = player
        return player

    def create_game(self, word: str, max_attempts: int, is_multiplayer: bool,
                    creator_id: Optional[str] = None, language: str = "en") -> Game:
        now = utc_now()
        game = Game(
            id=new_id(),
            word=word,
            max_attempts=max_attempts,
            is_multiplayer=is_multiplayer,
            status=GameStatus.ACTIVE,
            language=language,
            creator_id=creator_id,
            created_at=now,
            updated_at=now
        )
        with self._lock:
            self.games[game.id] = game
            self.memberships[game.id] = []
            self.guesses[game.id] = []
        return game

    def add_player(self, game_id: str, player_id: str) -> GamePlayer:
        with self._lock:
            self._get_game(game_id)
            for membership in self.memberships[game_id]:
                if membership.player_id == player_id:
                    return membership

            player = self.players.get(player_id)
            membership = GamePlayer(
                id=new_id(),
                game_id=game_id,
                player_id=player_id,
                nickname=player.nickname if player else "",
                joined_at=utc_now()
            )
            self.memberships[game_id].append(membership)

        self._publish(PlayerJoined(game_id, membership))
        return membership

    def insert_guess(self, game_id: str, player_id: str, guess: str) -> Guess:
        with self._lock:
            game = self._get_game(game_id)
            if game.is_completed:
                raise GameOverError("Game is already over")

            if not any(membership.player_id == player_id for membership in self.memberships[game_id]):
                raise ValidationError("Player is not a member of this game", reason="not_a_member")

            attempts = sum(1 for item in self.guesses[game_id] if item.player_id == player_id)
            if attempts >= game.max_attempts:
                raise GameOverError("No attempts left")

            record = Guess(
                id=new_id(),
                game_id=game_id,
                player_id=player_id,
                guess=guess,
                created_at=utc_now()
            )
            self.guesses[game_id].append(record)

        self._publish(GuessAdded(game_id, record))
        return record

    def update_game_status(self, game_id: str, status: GameStatus, winner_id: Optional[str] = None) -> Game:
        with self._lock:
            game = self._get_game(game_id)
            if game.is_completed:
                return game

            game = replace(game, status=status, winner_id=winner_id, updated_at=utc_now())
            self.games[game_id] = game

        self._publish(GameStatusChanged(game_id, game.status, game.winner_id, game.updated_at))
        return game

    def get_snapshot(self, game_id: str) -> GameSnapshot:
        with self._lock:
            game = self._get_game(game_id)
            return GameSnapshot(
                game=game,
                players=list(self.memberships[game_id]),
                guesses=list(self.guesses[game_id])
            )

    def get_game(self, game_id: str) -> Game:
        with self._lock:
            return self._get_game(game_id)

    def list_active_games(self, player_id: str) -> List[Game]:
        # Games are kept in creation order
        with self._lock:
            return [
                game for game in reversed(list(self.games.values()))
                if not game.is_completed
                and any(membership.player_id == player_id for membership in self.memberships[game.id])
            ]


# Global store instance
_game_store: Optional[GameStore] = None


def get_game_store() -> Optional[GameStore]:
    """Get the global record store instance."""
    return _game_store


def initialize_game_store(config_class, publisher: Optional[Publisher] = None) -> GameStore:
    """Initialize the global record store from configuration."""
    global _game_store

    backend = getattr(config_class, 'STORE_BACKEND', 'memory')
    if backend == 'mongo':
        if not config_class.MONGO_URI:
            raise PersistenceError("MONGO_URI is required for the mongo store backend")
        from .mongo_store import MongoGameStore
        _game_store = MongoGameStore(config_class.MONGO_URI, config_class.MONGO_DB_NAME, publisher)
    elif backend == 'memory':
        _game_store = InMemoryGameStore(publisher)
    else:
        raise ValueError(f"Unknown store backend: {backend}")

    return _game_store
