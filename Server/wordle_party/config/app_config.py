"""
Configuration Management Module

Server and client settings, loaded from environment variables (optionally
from a config.env file next to this module) with sensible defaults.
"""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.env'))


def _env_flag(name: str, default: str = 'False') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration class with all settings."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = _env_flag('DEBUG')
    TESTING = False
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', 5000))

    # Record store: "memory" keeps everything in the server process, "mongo" uses MONGO_URI
    STORE_BACKEND = os.getenv('STORE_BACKEND', 'memory')
    MONGO_URI = os.getenv('MONGO_URI')
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'wordle_party')

    # Game defaults
    MAX_ATTEMPTS = int(os.getenv('MAX_ATTEMPTS', 6))
    DEFAULT_LANGUAGE = os.getenv('DEFAULT_LANGUAGE', 'en')

    # Python client (HTTP record store + Socket.IO transport)
    SERVER_URL = os.getenv('SERVER_URL', 'http://127.0.0.1:5000')
    REQUEST_TIMEOUT_SECONDS = float(os.getenv('REQUEST_TIMEOUT_SECONDS', 5))
    SUBSCRIBE_TIMEOUT_SECONDS = float(os.getenv('SUBSCRIBE_TIMEOUT_SECONDS', 5))
    PLAYER_FILE = os.getenv('PLAYER_FILE', os.path.join(os.path.expanduser('~'), '.wordle_party', 'player.json'))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    STORE_BACKEND = os.getenv('STORE_BACKEND', 'mongo')


class TestingConfig(Config):
    TESTING = True
    DEBUG = True
    STORE_BACKEND = 'memory'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(name: Optional[str] = None):
    """Configuration class by name, falling back to WORDLE_ENV and then to the default."""
    return config.get(name or os.getenv('WORDLE_ENV', 'default'), config['default'])
