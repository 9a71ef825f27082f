"""
Word Validator

Checks guess well-formedness and dictionary membership for the active
language. Validation failures are normal user-input outcomes: the plain
predicate returns False, and only the state-machine facing ``check`` raises.
"""

from typing import AbstractSet, Iterable, Optional

from ..config.game_settings import DEFAULT_LANGUAGE, WORD_LENGTH, get_word_corpus
from ..errors import ValidationError

# str.upper() maps "i" to "I"; Turkish needs the dotted capital.
_TURKISH_UPPER = str.maketrans({"i": "İ", "ı": "I"})


def normalize_guess(raw, language: str = DEFAULT_LANGUAGE) -> str:
    """Strip whitespace and upper-case with the language's casing rules."""
    if not isinstance(raw, str):
        return ""
    text = raw.strip()
    if language == "tr":
        text = text.translate(_TURKISH_UPPER)
    return text.upper()


def is_valid_word(candidate, corpus: AbstractSet[str], language: str = DEFAULT_LANGUAGE) -> bool:
    """
    Accept only WORD_LENGTH-letter candidates present in the corpus.

    The comparison is case-insensitive on both sides; malformed input
    returns False.
    """
    word = normalize_guess(candidate, language)
    if len(word) != WORD_LENGTH:
        return False
    if word in corpus:
        return True
    return any(normalize_guess(entry, language) == word for entry in corpus)


class WordValidator:
    """Validator bound to the dictionary of one language."""

    def __init__(self, language: str = DEFAULT_LANGUAGE, corpus: Optional[Iterable[str]] = None):
        self.language = language
        if corpus is None:
            self.corpus = get_word_corpus(language)
        else:
            self.corpus = frozenset(normalize_guess(word, language) for word in corpus)

    def normalize(self, raw) -> str:
        return normalize_guess(raw, self.language)

    def is_valid(self, candidate) -> bool:
        return is_valid_word(candidate, self.corpus, self.language)

    def check(self, raw) -> str:
        """
        Return the normalized word or raise ValidationError.

        Raises:
            ValidationError: reason is 'wrong_length' or 'not_in_word_list'
        """
        word = self.normalize(raw)
        if len(word) != WORD_LENGTH:
            raise ValidationError(f"Guess must be exactly {WORD_LENGTH} letters", reason="wrong_length")
        if word not in self.corpus:
            raise ValidationError("Word not in word list", reason="not_in_word_list")
        return word
