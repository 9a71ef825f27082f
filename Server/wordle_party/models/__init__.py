"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import Game, GamePlayer, GameSnapshot, GameStatus, Guess, GuessResult, LetterState
from .player import Player
from .events import GameStatusChanged, GuessAdded, PlayerJoined, RemoteEvent, event_from_dict

__all__ = [
    'Game', 'GamePlayer', 'GameSnapshot', 'GameStatus', 'Guess', 'GuessResult', 'LetterState',
    'Player',
    'GameStatusChanged', 'GuessAdded', 'PlayerJoined', 'RemoteEvent', 'event_from_dict'
]
