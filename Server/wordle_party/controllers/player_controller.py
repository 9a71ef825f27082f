"""
Player Controller

Handles the player identity endpoints: create, fetch, rename and the
list of games a player still has running.
"""

from flask import Blueprint, request, jsonify

from ..errors import PersistenceError, ValidationError
from ..services.store import get_game_store
from ..utils.decorators import get_json_body, handle_game_errors
from ..utils.game_logger import game_logger

player_bp = Blueprint('player', __name__)


def _require_store():
    store = get_game_store()
    if not store:
        raise PersistenceError('Game store unavailable')
    return store


@player_bp.route('/players', methods=['POST'])
@handle_game_errors('create_player')
def create_player():
    """Create a player. A random nickname is assigned when none is given."""
    store = _require_store()
    data = request.get_json(silent=True) or {}

    game_logger.log_user_action(request, 'create_player', nickname=data.get('nickname'))

    player = store.create_player(data.get('nickname'), data.get('session_id'))

    response_data = {
        'success': True,
        'player': player.to_dict()
    }
    game_logger.log_server_response(request, 'create_player', True, response_data)
    return jsonify(response_data), 201


@player_bp.route('/players/<player_id>', methods=['GET'])
@handle_game_errors('get_player')
def get_player(player_id):
    """Fetch a player."""
    store = _require_store()
    player = store.get_player(player_id)
    return jsonify({
        'success': True,
        'player': player.to_dict()
    })


@player_bp.route('/players/<player_id>/games', methods=['GET'])
@handle_game_errors('list_active_games')
def list_active_games(player_id):
    """Games the player takes part in that are still running, newest first."""
    store = _require_store()
    game_logger.log_user_action(request, 'list_active_games', player_id=player_id)

    store.get_player(player_id)
    games = store.list_active_games(player_id)

    response_data = {
        'success': True,
        'games': [game.to_dict() for game in games]
    }
    game_logger.log_server_response(request, 'list_active_games', True, response_data)
    return jsonify(response_data)


@player_bp.route('/players/<player_id>', methods=['PATCH'])
@handle_game_errors('update_nickname')
def update_nickname(player_id):
    """Change a player's nickname."""
    store = _require_store()
    data = get_json_body()

    nickname = (data.get('nickname') or '').strip()
    if not nickname:
        raise ValidationError('Nickname cannot be empty', reason='empty_nickname')

    game_logger.log_user_action(request, 'update_nickname', player_id=player_id, nickname=nickname)

    player = store.update_nickname(player_id, nickname)

    response_data = {
        'success': True,
        'player': player.to_dict()
    }
    game_logger.log_server_response(request, 'update_nickname', True, response_data)
    return jsonify(response_data)
