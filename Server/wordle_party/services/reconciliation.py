"""
Reconciliation Layer

Local view of one game and the reducer that merges remote change events
into it. Inserts are de-duplicated by record identity, so an echoed local
submission or a replayed event never produces a second copy.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from ..models.events import GameStatusChanged, GuessAdded, PlayerJoined, RemoteEvent
from ..models.game import Game, GamePlayer, GameSnapshot, GameStatus, Guess, LetterState
from .evaluator import evaluate_guess
from .keyboard import aggregate_keyboard_state


@dataclass(frozen=True)
class LocalGameState:
    """What one viewer holds about a game: record, members, guesses and keyboard."""
    game: Game
    viewer_id: Optional[str] = None
    players: Tuple[GamePlayer, ...] = ()
    guesses: Tuple[Guess, ...] = ()
    keyboard: Dict[str, LetterState] = field(default_factory=dict)

    @classmethod
    def from_snapshot(cls, snapshot: GameSnapshot, viewer_id: Optional[str]) -> "LocalGameState":
        state = cls(
            game=snapshot.game,
            viewer_id=viewer_id,
            players=tuple(snapshot.players),
            guesses=tuple(snapshot.guesses)
        )
        return replace(state, keyboard=state.viewer_keyboard())

    @property
    def is_completed(self) -> bool:
        return self.game.is_completed

    def guesses_for(self, player_id: Optional[str]) -> List[Guess]:
        return [guess for guess in self.guesses if guess.player_id == player_id]

    def attempts_used(self, player_id: Optional[str]) -> int:
        return len(self.guesses_for(player_id))

    def attempts_remaining(self, player_id: Optional[str]) -> int:
        return max(self.game.max_attempts - self.attempts_used(player_id), 0)

    def is_over_for(self, player_id: Optional[str]) -> bool:
        """No more guesses possible for this player."""
        return self.is_completed or self.attempts_used(player_id) >= self.game.max_attempts

    def has_guess(self, guess_id: str) -> bool:
        return any(guess.id == guess_id for guess in self.guesses)

    def has_membership(self, membership_id: str) -> bool:
        return any(player.id == membership_id for player in self.players)

    def is_member(self, player_id: str) -> bool:
        return any(player.player_id == player_id for player in self.players)

    def board_for(self, player_id: Optional[str]) -> List[Tuple[Guess, List[LetterState]]]:
        """A player's rows: each guess with its evaluation."""
        return [(guess, evaluate_guess(guess.guess, self.game.word)) for guess in self.guesses_for(player_id)]

    def viewer_keyboard(self) -> Dict[str, LetterState]:
        return aggregate_keyboard_state(self.guesses_for(self.viewer_id), self.game.word)


def append_guess(state: LocalGameState, guess: Guess) -> LocalGameState:
    """Insert a guess unless already held; recompute the keyboard for the viewer's own guesses."""
    if guess.game_id != state.game.id or state.has_guess(guess.id):
        return state

    state = replace(state, guesses=state.guesses + (guess,))
    if guess.player_id == state.viewer_id:
        state = replace(state, keyboard=state.viewer_keyboard())
    return state


def append_player(state: LocalGameState, membership: GamePlayer) -> LocalGameState:
    """Insert a membership unless already held."""
    if membership.game_id != state.game.id or state.has_membership(membership.id):
        return state
    return replace(state, players=state.players + (membership,))


def apply_remote_event(state: LocalGameState, event: RemoteEvent) -> LocalGameState:
    """
    Merge one remote event into local state.

    - GuessAdded: idempotent insert; kept for history even after completion
    - PlayerJoined: idempotent insert
    - GameStatusChanged: status and winner overwritten unconditionally
    Events of other games leave the state untouched.
    """
    if event.game_id != state.game.id:
        return state

    if isinstance(event, GuessAdded):
        return append_guess(state, event.guess)

    if isinstance(event, PlayerJoined):
        return append_player(state, event.membership)

    if isinstance(event, GameStatusChanged):
        game = replace(
            state.game,
            status=event.status,
            winner_id=event.winner_id,
            updated_at=event.updated_at or state.game.updated_at
        )
        return replace(state, game=game)

    return state


def snapshot_events(snapshot: GameSnapshot) -> List[RemoteEvent]:
    """Express a snapshot as the events that built it, for replay after reconnecting."""
    events: List[RemoteEvent] = [PlayerJoined(snapshot.game.id, player) for player in snapshot.players]
    events.extend(GuessAdded(snapshot.game.id, guess) for guess in snapshot.guesses)
    if snapshot.game.status is not GameStatus.ACTIVE:
        events.append(GameStatusChanged(
            snapshot.game.id, snapshot.game.status, snapshot.game.winner_id, snapshot.game.updated_at
        ))
    return events
