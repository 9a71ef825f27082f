"""
Game Errors

Typed failures raised at the boundary with user input and with the record
store / transport collaborators. Pure components (evaluator, keyboard
aggregator, reconciliation reducer) never raise.
"""

from typing import Optional


class WordleError(Exception):
    """Base class for every failure surfaced by the game core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WordleError):
    """User input rejected (wrong length, not in dictionary...). Never consumes an attempt."""

    def __init__(self, message: str, reason: str = "invalid"):
        super().__init__(message)
        self.reason = reason


class GameOverError(WordleError):
    """Submission after the game completed or after the player ran out of attempts."""


class GameNotFoundError(WordleError):
    """Unknown game or player id."""


class PersistenceError(WordleError):
    """A create/insert/update call to the record store failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CompletionPendingError(PersistenceError):
    """
    The guess was recorded but the status update that ends the game failed.

    ``state`` already holds the recorded guess. Loading the game or
    submitting again re-issues the completion.
    """

    def __init__(self, message: str, state=None, guess=None, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.state = state
        self.guess = guess


class ConnectionDegradedError(WordleError):
    """Realtime subscription failed, timed out or dropped."""
