"""
Game Logger Module for Wordle Party

Structured logging shared by the server and by client sessions. Every
record is one JSON object carrying the event type, the action, who did it
and free-form details, so a day of play can be replayed from the log file.
"""

import json
import logging
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config.app_config import Config

LOGGER_NAME = 'wordle_party'


class GameLogger:
    """
    Logger facade used by controllers, websocket handlers and game sessions.

    Event types written:
    - USER_ACTION: an HTTP request reached an endpoint
    - SERVER_RESPONSE_SUCCESS / SERVER_RESPONSE_ERROR: what the endpoint answered
    - GAME_EVENT: guesses, completions, joins, reconciliation and connection changes
    - ERROR: an exception raised while handling a request
    """

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = logging.getLevelName(str(level).upper())
        if not isinstance(self.level, int):
            self.level = logging.INFO

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(self.level)
        self.logger.handlers.clear()
        for handler in self._build_handlers():
            self.logger.addHandler(handler)

    def _build_handlers(self) -> List[logging.Handler]:
        # One file per day, a week of history
        file_handler = TimedRotatingFileHandler(
            self.log_dir / 'game_log.log', when='midnight', backupCount=7, encoding='utf-8'
        )
        file_handler.setLevel(self.level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s', datefmt='%Y-%m-%d %H:%M:%S'
        ))

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

        return [file_handler, console_handler]

    def _write(self, level: int, event_type: str, action: str,
               user: Dict[str, Optional[str]], details: Dict[str, Any]) -> None:
        if not self.logger.isEnabledFor(level):
            return
        entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user,
            'details': details
        }
        self.logger.log(level, json.dumps(entry, ensure_ascii=False, default=str))

    @staticmethod
    def _request_user(request) -> Dict[str, Optional[str]]:
        from .helpers import get_user_identity
        return get_user_identity(request)

    @staticmethod
    def _request_details(request) -> Dict[str, Any]:
        return {
            'endpoint': request.endpoint,
            'method': request.method,
            'path': request.path
        }

    def log_user_action(self, request, action: str, game_id: Optional[str] = None, **kwargs):
        """
        Log an incoming request.

        Args:
            request: Flask request object
            action: Endpoint action (e.g., 'create_game', 'insert_guess', 'get_snapshot')
            game_id: Game identifier if applicable
            **kwargs: Additional details to log
        """
        details = {'game_id': game_id, **self._request_details(request), **kwargs}
        self._write(logging.INFO, 'USER_ACTION', action, self._request_user(request), details)

    def log_server_response(self, request, action: str, success: bool,
                            response_data: Dict[str, Any], game_id: Optional[str] = None, **kwargs):
        """
        Log the response sent for a request. The target word of an
        unfinished game never reaches the log.
        """
        details = {
            'game_id': game_id,
            'success': success,
            'response_data': self._mask_response(response_data),
            **kwargs
        }
        if success:
            self._write(logging.INFO, 'SERVER_RESPONSE_SUCCESS', action, self._request_user(request), details)
        else:
            self._write(logging.ERROR, 'SERVER_RESPONSE_ERROR', action, self._request_user(request), details)

    def log_game_event(self, game_id: Optional[str], event: str, player_id: Optional[str], **kwargs):
        """
        Log a game event.

        Args:
            game_id: Game identifier (None for player-level events)
            event: e.g. 'guess_recorded', 'game_won', 'late_solve', 'remote_event_applied'
            player_id: Acting player
            **kwargs: Additional game details
        """
        self._write(logging.INFO, 'GAME_EVENT', event,
                    {'user_ip': None, 'player_id': player_id}, {'game_id': game_id, **kwargs})

    def log_error(self, request, error: Exception, action: str, game_id: Optional[str] = None):
        """Log an exception raised while handling a request."""
        details = {
            'game_id': game_id,
            'error_type': type(error).__name__,
            'error_message': str(error)
        }
        self._write(logging.ERROR, 'ERROR', action, self._request_user(request), details)

    @staticmethod
    def _mask_response(data: Any) -> Any:
        """Replace game payloads by a summary without the target word."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        def summarize(game: Dict[str, Any]) -> Dict[str, Any]:
            summary = {key: game.get(key) for key in ('id', 'status', 'winner_id', 'is_multiplayer')}
            if game.get('status') == 'completed':
                summary['word'] = game.get('word')
            return summary

        masked = dict(data)
        game = masked.get('game')
        if isinstance(game, dict):
            masked['game'] = summarize(game)

        games = masked.get('games')
        if isinstance(games, list):
            masked['games'] = [summarize(item) for item in games if isinstance(item, dict)]

        snapshot = masked.get('snapshot')
        if isinstance(snapshot, dict):
            masked['snapshot'] = {
                'game_id': (snapshot.get('game') or {}).get('id'),
                'players_count': len(snapshot.get('players') or []),
                'guesses_count': len(snapshot.get('guesses') or [])
            }

        return masked


# Global logger instance
game_logger = GameLogger(Config.LOG_DIR, Config.LOG_LEVEL)
