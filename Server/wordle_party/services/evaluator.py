"""
Guess Evaluator

Implements the authentic Wordle letter evaluation algorithm.
"""

from typing import List, Optional, Sequence

from ..models.game import LetterState


def evaluate_guess(guess: str, target: str) -> List[LetterState]:
    """
    Score a guess against the target word.

    Both words must have the same length; callers validate input first.
    Exact position matches are resolved before present letters so a target
    letter is never claimed more often than it occurs.
    """
    result: List[Optional[LetterState]] = [None] * len(guess)

    # Working copy of the target letters, consumed as they are matched
    target_pool: List[Optional[str]] = list(target)

    # First pass: exact position matches
    for i, letter in enumerate(guess):
        if letter == target_pool[i]:
            result[i] = LetterState.CORRECT
            target_pool[i] = None

    # Second pass: present letters against what is left of the pool
    for i, letter in enumerate(guess):
        if result[i] is not None:
            continue
        if letter in target_pool:
            result[i] = LetterState.PRESENT
            target_pool[target_pool.index(letter)] = None
        else:
            result[i] = LetterState.ABSENT

    return [state for state in result if state is not None]


def is_winning_evaluation(evaluation: Sequence[LetterState]) -> bool:
    """True when every position is correct."""
    return bool(evaluation) and all(state is LetterState.CORRECT for state in evaluation)
