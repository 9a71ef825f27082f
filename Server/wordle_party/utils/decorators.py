"""
Controller Decorators

Contains the decorator that turns game errors into JSON error responses.
"""

from functools import wraps
from flask import request, jsonify

from ..errors import (
    GameNotFoundError, GameOverError, PersistenceError, ValidationError, WordleError
)
from .game_logger import game_logger

ERROR_STATUS_CODES = [
    (ValidationError, 400),
    (GameNotFoundError, 404),
    (GameOverError, 409),
    (PersistenceError, 500),
]


def status_code_for(error: Exception) -> int:
    """HTTP status code for a raised error."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


def handle_game_errors(action):
    """
    Decorator converting errors raised by an endpoint into
    ``{'success': False, 'error': ...}`` responses, logging every failure.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            game_id = kwargs.get('game_id')
            try:
                return f(*args, **kwargs)
            except WordleError as e:
                game_logger.log_error(request, e, action, game_id)
                error_response = {
                    'success': False,
                    'error': e.message
                }
                if isinstance(e, ValidationError):
                    error_response['reason'] = e.reason
                game_logger.log_server_response(request, action, False, error_response, game_id)
                return jsonify(error_response), status_code_for(e)
            except Exception as e:
                game_logger.log_error(request, e, action, game_id)
                error_response = {
                    'success': False,
                    'error': str(e)
                }
                game_logger.log_server_response(request, action, False, error_response, game_id)
                return jsonify(error_response), 500

        return decorated_function
    return decorator


def get_json_body() -> dict:
    """Return the JSON request body or raise ValidationError."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body is required', reason='missing_body')
    return data
