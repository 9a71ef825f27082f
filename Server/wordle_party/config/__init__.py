"""
Configuration Package

Contains all configuration-related files and settings.

This package separates two types of configuration:
- app_config.py: Flask application and client configuration (environment-based)
- game_settings.py: Game rules, alphabets and word lists (business logic)
"""

from .app_config import Config, DevelopmentConfig, ProductionConfig, TestingConfig, config, get_config
from .game_settings import (
    WORD_LENGTH, MAX_ATTEMPTS, DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES, ALPHABETS,
    WORD_LIST, WORD_LISTS, get_word_list, get_word_corpus, get_random_word,
    validate_word_list_integrity, get_word_statistics
)

__all__ = [
    # App configuration
    'Config', 'DevelopmentConfig', 'ProductionConfig', 'TestingConfig', 'config', 'get_config',
    # Game rules
    'WORD_LENGTH', 'MAX_ATTEMPTS', 'DEFAULT_LANGUAGE', 'SUPPORTED_LANGUAGES', 'ALPHABETS',
    'WORD_LIST', 'WORD_LISTS', 'get_word_list', 'get_word_corpus', 'get_random_word',
    'validate_word_list_integrity', 'get_word_statistics'
]
