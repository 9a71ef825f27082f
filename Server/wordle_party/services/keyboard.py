"""
Keyboard-State Aggregator

Derives the best known state of every letter key from a player's guesses.
"""

from typing import Dict, Iterable, Optional, Union

from ..models.game import Guess, LetterState
from .evaluator import evaluate_guess


def upgrade_letter_state(current: Optional[LetterState], new: LetterState) -> LetterState:
    """Status can only progress in priority order: absent -> present -> correct."""
    if current is None or new.rank > current.rank:
        return new
    return current


def aggregate_keyboard_state(guesses: Iterable[Union[Guess, str]], target: str) -> Dict[str, LetterState]:
    """
    Fold the guesses, in submission order, into a letter -> state mapping.

    Letters never guessed are absent from the mapping.
    """
    keyboard: Dict[str, LetterState] = {}

    for guess in guesses:
        text = guess.guess if isinstance(guess, Guess) else guess
        for letter, state in zip(text, evaluate_guess(text, target)):
            keyboard[letter] = upgrade_letter_state(keyboard.get(letter), state)

    return keyboard
