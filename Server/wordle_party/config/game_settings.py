"""
Game Configuration Constants Module

This module defines all game configuration constants: word length, the
attempt limit, the alphabet of every supported language and the word lists
used both as target pool and as guess dictionary.
"""

import json
import os
import random
from typing import Dict, FrozenSet, List, Final, Optional, Tuple

# Core Game Configuration Constants
WORD_LENGTH: Final[int] = 5

MAX_ATTEMPTS: Final[int] = 6
"""
Default number of guess attempts allowed per player and game.
Type: Final[int] - Immutable to prevent accidental modification
"""

DEFAULT_LANGUAGE: Final[str] = "en"
SUPPORTED_LANGUAGES: Final[Tuple[str, ...]] = ("en", "tr")

ALPHABETS: Final[Dict[str, str]] = {
    "en": "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
    "tr": "ABCÇDEFGĞHIİJKLMNOÖPRSŞTUÜVYZ",
}


def _load_word_list(language: str) -> List[str]:
    """
    Load the word list of one language from words_<language>.json.

    Returns:
        List[str]: List of uppercase 5-letter words

    Raises:
        FileNotFoundError: If the JSON file is not found
        ValueError: If the JSON is malformed, the list is empty or contains invalid words
    """
    config_dir = os.path.dirname(os.path.abspath(__file__))
    json_file_path = os.path.join(config_dir, f'words_{language}.json')

    try:
        with open(json_file_path, 'r', encoding='utf-8') as f:
            word_list = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Word list file not found: {json_file_path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {json_file_path}: {e}")

    if not isinstance(word_list, list):
        raise ValueError("JSON file must contain an array of words")

    if not word_list:
        raise ValueError("Word list cannot be empty")

    alphabet = ALPHABETS[language]
    for word in word_list:
        if len(word) != WORD_LENGTH:
            raise ValueError(f"Word '{word}' is not {WORD_LENGTH} characters long")
        if any(char not in alphabet for char in word):
            raise ValueError(f"Word '{word}' contains characters outside the '{language}' alphabet")

    return list(word_list)


# Curated word databases loaded from JSON files
WORD_LISTS: Final[Dict[str, List[str]]] = {
    language: _load_word_list(language) for language in SUPPORTED_LANGUAGES
}
WORD_LIST: Final[List[str]] = WORD_LISTS[DEFAULT_LANGUAGE]

_CORPORA: Dict[str, FrozenSet[str]] = {
    language: frozenset(words) for language, words in WORD_LISTS.items()
}


def get_word_list(language: str = DEFAULT_LANGUAGE) -> List[str]:
    """Return a copy of the word list of a supported language."""
    if language not in WORD_LISTS:
        raise ValueError(f"Unsupported language: {language}")
    return WORD_LISTS[language].copy()


def get_word_corpus(language: str = DEFAULT_LANGUAGE) -> FrozenSet[str]:
    """Return the dictionary of a supported language as a set."""
    if language not in _CORPORA:
        raise ValueError(f"Unsupported language: {language}")
    return _CORPORA[language]


def get_random_word(language: str = DEFAULT_LANGUAGE, rng: Optional[random.Random] = None) -> str:
    """Pick a random target word for a new game."""
    chooser = rng or random
    return chooser.choice(get_word_list(language))


def validate_word_list_integrity(language: Optional[str] = None) -> bool:
    """
    Validates the integrity and consistency of the word databases.

    This function performs validation to ensure:
    1. Length validation: All words must be exactly WORD_LENGTH characters
    2. Character validation: Only letters of the language alphabet allowed
    3. Uniqueness validation: No duplicate entries

    Args:
        language: Only check this language (all languages when omitted)

    Returns:
        bool: True if the word lists pass all validation checks

    Raises:
        ValueError: If any validation check fails with detailed error message
    """
    languages = [language] if language else list(SUPPORTED_LANGUAGES)

    for lang in languages:
        words = get_word_list(lang)
        if not words:
            raise ValueError(f"Word list '{lang}' cannot be empty")

        alphabet = ALPHABETS[lang]
        for index, word in enumerate(words):
            if len(word) != WORD_LENGTH:
                raise ValueError(f"Word at index {index} '{word}' is not {WORD_LENGTH} characters long")

            if any(char not in alphabet for char in word):
                raise ValueError(f"Word at index {index} '{word}' contains characters outside the '{lang}' alphabet")

        if len(words) != len(set(words)):
            duplicates = sorted({word for word in words if words.count(word) > 1})
            raise ValueError(f"Duplicate words found in word list '{lang}': {duplicates}")

    return True


def get_word_statistics(language: str = DEFAULT_LANGUAGE) -> dict:
    """
    Analyzes a word list and returns statistical information.

    Returns:
        dict: total_words, avg_vowel_count, letter_frequency, most_common_letters
    """
    words = get_word_list(language)

    vowels = set('AEIOUÖÜİ' if language == "tr" else 'AEIOU')
    total_vowels = sum(len([char for char in word if char in vowels]) for word in words)

    letter_frequency: Dict[str, int] = {}
    for word in words:
        for char in word:
            letter_frequency[char] = letter_frequency.get(char, 0) + 1

    return {
        "total_words": len(words),
        "avg_vowel_count": round(total_vowels / len(words), 2),
        "letter_frequency": letter_frequency,
        "most_common_letters": sorted(letter_frequency.items(), key=lambda x: x[1], reverse=True)[:5]
    }


if __name__ == "__main__":

    try:
        validate_word_list_integrity()
        print(" Word list validation passed")

        for lang in SUPPORTED_LANGUAGES:
            print(f" {lang} statistics: {get_word_statistics(lang)}")

        print(" All configuration validation checks passed")
    except ValueError as config_error:
        print(f" Configuration validation failed: {config_error}")
        exit(1)
