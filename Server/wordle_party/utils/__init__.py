"""
Utilities Package

Contains utility functions, decorators, and helper modules.
"""

from .helpers import get_user_identity, new_id, utc_now, to_iso, parse_iso
from .game_logger import game_logger
from .observable import ObservableState

__all__ = [
    'get_user_identity', 'new_id', 'utc_now', 'to_iso', 'parse_iso',
    'game_logger', 'ObservableState'
]
