"""
Services Package

Contains the game core (evaluation, validation, state machine, keyboard
aggregation, reconciliation) and the collaborators it is wired to
(record stores, transports, player identity, sessions).
"""

from .evaluator import evaluate_guess, is_winning_evaluation
from .validator import WordValidator, is_valid_word, normalize_guess
from .keyboard import aggregate_keyboard_state, upgrade_letter_state
from .store import GameStore, InMemoryGameStore, get_game_store, initialize_game_store
from .transport import InProcessTransport, Subscription, Transport
from .persistence import LocalPersistence, PersistenceMode, RemotePersistence
from .reconciliation import LocalGameState, apply_remote_event, snapshot_events
from .game_service import GameService
from .player_service import SessionContext
from .session import ConnectionStatus, GameSession

__all__ = [
    'evaluate_guess', 'is_winning_evaluation',
    'WordValidator', 'is_valid_word', 'normalize_guess',
    'aggregate_keyboard_state', 'upgrade_letter_state',
    'GameStore', 'InMemoryGameStore', 'get_game_store', 'initialize_game_store',
    'InProcessTransport', 'Subscription', 'Transport',
    'LocalPersistence', 'PersistenceMode', 'RemotePersistence',
    'LocalGameState', 'apply_remote_event', 'snapshot_events',
    'GameService',
    'SessionContext',
    'ConnectionStatus', 'GameSession'
]
