"""
HTTP Game Store

Record store talking to the server's REST API. Writes are broadcast to the
game's realtime channel by the server, so this store never publishes.
"""

from typing import Any, Dict, List, Optional

import requests

from ..config.app_config import Config
from ..errors import GameNotFoundError, GameOverError, PersistenceError, ValidationError
from ..models.game import Game, GamePlayer, GameSnapshot, GameStatus, Guess
from ..models.player import Player
from ..services.store import GameStore


class HttpGameStore(GameStore):

    def __init__(self, base_url: str = Config.SERVER_URL, timeout: float = Config.REQUEST_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        super().__init__()
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}/api{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise PersistenceError(f"Request to {url} failed: {e}")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.status_code < 300 and data.get('success', True):
            return data

        message = data.get('error') or f"{response.status_code} {response.text}"
        if response.status_code == 400:
            raise ValidationError(message, reason=data.get('reason', 'invalid'))
        if response.status_code == 404:
            raise GameNotFoundError(message)
        if response.status_code == 409:
            raise GameOverError(message)
        raise PersistenceError(message, status_code=response.status_code)

    # Players

    def create_player(self, nickname: Optional[str] = None, session_id: Optional[str] = None) -> Player:
        data = self._request('POST', '/players', {"nickname": nickname, "session_id": session_id})
        return Player.from_dict(data['player'])

    def get_player(self, player_id: str) -> Player:
        data = self._request('GET', f'/players/{player_id}')
        return Player.from_dict(data['player'])

    def update_nickname(self, player_id: str, nickname: str) -> Player:
        data = self._request('PATCH', f'/players/{player_id}', {"nickname": nickname})
        return Player.from_dict(data['player'])

    # Games

    def create_game(self, word: str, max_attempts: int, is_multiplayer: bool,
                    creator_id: Optional[str] = None, language: str = "en") -> Game:
        data = self._request('POST', '/games', {
            "word": word,
            "max_attempts": max_attempts,
            "is_multiplayer": is_multiplayer,
            "creator_id": creator_id,
            "language": language
        })
        return Game.from_dict(data['game'])

    def add_player(self, game_id: str, player_id: str) -> GamePlayer:
        data = self._request('POST', f'/games/{game_id}/players', {"player_id": player_id})
        return GamePlayer.from_dict(data['membership'])

    def insert_guess(self, game_id: str, player_id: str, guess: str) -> Guess:
        data = self._request('POST', f'/games/{game_id}/guesses', {"player_id": player_id, "guess": guess})
        return Guess.from_dict(data['guess'])

    def update_game_status(self, game_id: str, status: GameStatus, winner_id: Optional[str] = None) -> Game:
        data = self._request('PATCH', f'/games/{game_id}/status', {"status": status.value, "winner_id": winner_id})
        return Game.from_dict(data['game'])

    def get_snapshot(self, game_id: str) -> GameSnapshot:
        data = self._request('GET', f'/games/{game_id}')
        return GameSnapshot.from_dict(data['snapshot'])

    def list_active_games(self, player_id: str) -> List[Game]:
        data = self._request('GET', f'/players/{player_id}/games')
        return [Game.from_dict(item) for item in data['games']]
