"""
Game Session Controller

Owns the state of one game as seen by the local player. Local guess
submissions and remote event merges are serialized on a single lock, so at
most one state-mutating operation commits at a time. State and connection
health are exposed as two independent observable cells.
"""

import threading
from dataclasses import replace
from enum import Enum
from typing import Optional

from ..config.game_settings import DEFAULT_LANGUAGE, MAX_ATTEMPTS
from ..errors import CompletionPendingError, ConnectionDegradedError, GameNotFoundError
from ..models.events import RemoteEvent
from ..models.game import GuessResult
from ..models.player import Player
from ..utils.game_logger import game_logger
from ..utils.observable import ObservableState
from .game_service import GameService
from .player_service import SessionContext
from .reconciliation import LocalGameState, append_guess, apply_remote_event, snapshot_events
from .transport import Subscription, Transport


class ConnectionStatus(Enum):
    IDLE = "idle"
    CONNECTED = "connected"
    DEGRADED = "degraded"
    CLOSED = "closed"


class GameSession:
    """
    One player's view of one game.

    Use as a context manager so the realtime subscription is released on
    every exit path::

        with GameSession(context, service, transport) as session:
            session.open(game_id)
            session.submit_guess("crane")
    """

    def __init__(self, context: SessionContext, service: GameService, transport: Optional[Transport] = None):
        self.context = context
        self.service = service
        self.transport = transport

        self.state: ObservableState[Optional[LocalGameState]] = ObservableState(None)
        self.connection: ObservableState[ConnectionStatus] = ObservableState(ConnectionStatus.IDLE)
        self.last_connection_error: Optional[ConnectionDegradedError] = None

        self._subscription: Optional[Subscription] = None
        self._lock = threading.RLock()

    def __enter__(self) -> "GameSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    @property
    def player(self) -> Player:
        return self.context.get_or_create_local_player()

    @property
    def game_state(self) -> Optional[LocalGameState]:
        return self.state.get()

    @property
    def connection_status(self) -> ConnectionStatus:
        return self.connection.get()

    @property
    def is_game_over(self) -> bool:
        """True when the local player can no longer submit guesses."""
        state = self.state.get()
        return state is not None and state.is_over_for(self.player.id)

    def _require_state(self) -> LocalGameState:
        state = self.state.get()
        if state is None:
            raise GameNotFoundError("No game loaded in this session")
        return state

    def _is_live(self, state: LocalGameState) -> bool:
        return state.game.is_multiplayer and self.service.persistence.is_remote and self.transport is not None

    # Entering a game

    def start_solo(self, language: str = DEFAULT_LANGUAGE, target_word: Optional[str] = None,
                   max_attempts: int = MAX_ATTEMPTS) -> LocalGameState:
        with self._lock:
            state = self.service.create_game(self.player, False, language, target_word, max_attempts)
            self.state.set(state)
            return state

    def create_multiplayer(self, language: str = DEFAULT_LANGUAGE, target_word: Optional[str] = None,
                           max_attempts: int = MAX_ATTEMPTS) -> LocalGameState:
        with self._lock:
            state = self.service.create_game(self.player, True, language, target_word, max_attempts)
            self.state.set(state)
            if self._is_live(state):
                self._connect(state.game.id)
            return state

    def open(self, game_id: str) -> LocalGameState:
        """Seed local state from one snapshot, join the game if needed, then subscribe."""
        with self._lock:
            player = self.player
            state = self.service.load_game(game_id, player.id)
            state = self.service.join_game(state, player)
            self.state.set(state)
            if self._is_live(state):
                self._connect(game_id)
            return state

    # Mutations

    def submit_guess(self, raw_input) -> GuessResult:
        """
        Validate, evaluate, persist and apply one guess.

        Raises:
            ValidationError, GameOverError, PersistenceError
        """
        with self._lock:
            state = self._require_state()
            settled = self.service.settle_game(state)
            if settled is not state:
                self.state.set(settled)
                state = settled

            try:
                new_state, result = self.service.submit_guess(state, self.player.id, raw_input)
            except CompletionPendingError as e:
                # The guess is stored; show it and let the next call finish the game
                self.state.set(append_guess(self.state.get(), e.guess))
                raise

            # Echoes of this very write may already have been merged while persisting
            merged = append_guess(self.state.get(), result.guess)
            if new_state.game.is_completed and not merged.is_completed:
                merged = replace(merged, game=new_state.game)
            self.state.set(merged)
            return result

    def handle_remote_event(self, event: RemoteEvent) -> None:
        """Merge an event delivered by the transport."""
        with self._lock:
            state = self.state.get()
            if state is None:
                return

            updated = apply_remote_event(state, event)
            if updated is state:
                game_logger.logger.debug(f"Discarded duplicate {event.kind} {event.identity} for game {event.game_id}")
                return

            self.state.set(updated)
            game_logger.log_game_event(
                event.game_id, 'remote_event_applied', self.context.player.id if self.context.player else None,
                kind=event.kind, identity=event.identity
            )

    # Connection handling

    def _connect(self, game_id: str) -> bool:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

        try:
            self._subscription = self.transport.subscribe(
                game_id, self.handle_remote_event, self._on_connection_error
            )
        except ConnectionDegradedError as e:
            self._mark_degraded(e)
            return False

        self.last_connection_error = None
        self.connection.set(ConnectionStatus.CONNECTED)
        return True

    def _mark_degraded(self, error: ConnectionDegradedError) -> None:
        self.last_connection_error = error
        game_logger.logger.warning(f"Realtime connection degraded: {error}")
        if self.connection.get() is not ConnectionStatus.CLOSED:
            self.connection.set(ConnectionStatus.DEGRADED)

    def _on_connection_error(self, error: ConnectionDegradedError) -> None:
        with self._lock:
            if self._subscription is not None:
                self._subscription.close()
                self._subscription = None
            self._mark_degraded(error)

    def retry_connection(self) -> bool:
        """
        User-triggered reconnect: subscribe on a fresh channel, then replay the
        current snapshot so anything missed while disconnected is merged by identity.

        Returns:
            True when the subscription is live again
        """
        with self._lock:
            state = self._require_state()
            if not self._is_live(state):
                return False

            if not self._connect(state.game.id):
                return False

            snapshot = self.service.persistence.load_snapshot(state.game.id)
            replayed = self.state.get()
            for event in snapshot_events(snapshot):
                replayed = apply_remote_event(replayed, event)
            if replayed is not self.state.get():
                self.state.set(replayed)

            game_logger.log_game_event(state.game.id, 'connection_restored', self.player.id)
            return True

    def close(self) -> None:
        """Release the subscription. Safe to call more than once."""
        with self._lock:
            if self._subscription is not None:
                self._subscription.close()
                self._subscription = None
            if self.connection.get() is not ConnectionStatus.CLOSED:
                self.connection.set(ConnectionStatus.CLOSED)
