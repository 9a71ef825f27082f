"""
Game Controller

Handles the game record endpoints: create, snapshot, join, insert guess
and completion. Every committed write is broadcast to the game room by
the record store's publisher.
"""

from flask import Blueprint, current_app, request, jsonify

from ..config.game_settings import SUPPORTED_LANGUAGES, get_random_word
from ..errors import PersistenceError, ValidationError
from ..models.game import GameStatus
from ..services.store import get_game_store
from ..services.validator import WordValidator
from ..utils.decorators import get_json_body, handle_game_errors
from ..utils.game_logger import game_logger

game_bp = Blueprint('game', __name__)


def _require_store():
    store = get_game_store()
    if not store:
        raise PersistenceError('Game store unavailable')
    return store


def _check_completion(snapshot, winner_id):
    game = snapshot.game
    if winner_id:
        if not any(guess.player_id == winner_id and guess.guess == game.word for guess in snapshot.guesses):
            raise ValidationError('Winner has no winning guess in this game', reason='unverified_winner')
        return

    exhausted = any(
        sum(1 for guess in snapshot.guesses if guess.player_id == player.player_id) >= game.max_attempts
        for player in snapshot.players
    )
    if game.is_multiplayer or not exhausted:
        raise ValidationError('A game without a winner can only end after a solo loss', reason='game_not_lost')


@game_bp.route('/games', methods=['POST'])
@handle_game_errors('create_game')
def create_game():
    """Create a new game record."""
    store = _require_store()
    data = get_json_body()

    language = data.get('language') or current_app.config['DEFAULT_LANGUAGE']
    if language not in SUPPORTED_LANGUAGES:
        raise ValidationError(f'Unsupported language: {language}', reason='unsupported_language')

    max_attempts = data.get('max_attempts')
    try:
        max_attempts = int(max_attempts if max_attempts is not None else current_app.config['MAX_ATTEMPTS'])
    except (TypeError, ValueError):
        raise ValidationError('max_attempts must be an integer', reason='invalid_max_attempts')
    if max_attempts < 1:
        raise ValidationError('max_attempts must be at least 1', reason='invalid_max_attempts')

    word = data.get('word')
    word = WordValidator(language).check(word) if word else get_random_word(language)

    is_multiplayer = bool(data.get('is_multiplayer', False))
    creator_id = data.get('creator_id')

    game_logger.log_user_action(
        request, 'create_game',
        creator_id=creator_id, is_multiplayer=is_multiplayer, language=language
    )

    game = store.create_game(word, max_attempts, is_multiplayer, creator_id, language)

    response_data = {
        'success': True,
        'game': game.to_dict()
    }
    game_logger.log_server_response(request, 'create_game', True, response_data, game.id)
    return jsonify(response_data), 201


@game_bp.route('/games/<game_id>', methods=['GET'])
@handle_game_errors('get_snapshot')
def get_snapshot(game_id):
    """Get the game with its players and guesses."""
    store = _require_store()
    game_logger.log_user_action(request, 'get_snapshot', game_id)

    snapshot = store.get_snapshot(game_id)

    response_data = {
        'success': True,
        'snapshot': snapshot.to_dict()
    }
    game_logger.log_server_response(
        request, 'get_snapshot', True, response_data, game_id,
        status=snapshot.game.status.value, guesses_count=len(snapshot.guesses)
    )
    return jsonify(response_data)


@game_bp.route('/games/<game_id>/players', methods=['POST'])
@handle_game_errors('add_player')
def add_player(game_id):
    """Add a player to a game (idempotent)."""
    store = _require_store()
    data = get_json_body()

    player_id = data.get('player_id')
    if not player_id:
        raise ValidationError('player_id is required', reason='missing_player_id')

    game_logger.log_user_action(request, 'add_player', game_id, player_id=player_id)

    membership = store.add_player(game_id, player_id)

    response_data = {
        'success': True,
        'membership': membership.to_dict()
    }
    game_logger.log_server_response(request, 'add_player', True, response_data, game_id)
    return jsonify(response_data)


@game_bp.route('/games/<game_id>/guesses', methods=['POST'])
@handle_game_errors('insert_guess')
def insert_guess(game_id):
    """Record a guess. Rejected once the game is over or the player has no attempts left."""
    store = _require_store()
    data = get_json_body()

    player_id = data.get('player_id')
    if not player_id:
        raise ValidationError('player_id is required', reason='missing_player_id')
    if 'guess' not in data:
        raise ValidationError('Guess is required', reason='missing_guess')

    game_logger.log_user_action(request, 'insert_guess', game_id, player_id=player_id, guess=data['guess'])

    game = store.get_game(game_id)
    word = WordValidator(game.language).check(data['guess'])

    guess = store.insert_guess(game_id, player_id, word)

    response_data = {
        'success': True,
        'guess': guess.to_dict()
    }
    game_logger.log_server_response(request, 'insert_guess', True, response_data, game_id)
    return jsonify(response_data), 201


@game_bp.route('/games/<game_id>/status', methods=['PATCH'])
@handle_game_errors('update_game_status')
def update_game_status(game_id):
    """
    Complete a game. A winner must hold a winning guess; completing without
    a winner is only allowed for a solo game whose player used every attempt.
    A completed game keeps its first winner.
    """
    store = _require_store()
    data = get_json_body()

    try:
        status = GameStatus(data.get('status'))
    except ValueError:
        raise ValidationError(f"Invalid status: {data.get('status')}", reason='invalid_status')
    if status is not GameStatus.COMPLETED:
        raise ValidationError('Only game completion can be recorded', reason='invalid_status')

    winner_id = data.get('winner_id')
    game_logger.log_user_action(request, 'update_game_status', game_id, status=status.value, winner_id=winner_id)

    snapshot = store.get_snapshot(game_id)
    if not snapshot.game.is_completed:
        _check_completion(snapshot, winner_id)

    game = store.update_game_status(game_id, status, winner_id)

    response_data = {
        'success': True,
        'game': game.to_dict()
    }
    game_logger.log_server_response(request, 'update_game_status', True, response_data, game_id)

    if game.is_completed and game.winner_id == winner_id and winner_id:
        game_logger.log_game_event(game_id, 'game_won', winner_id)

    return jsonify(response_data)


@game_bp.route('/health', methods=['GET'])
@handle_game_errors('health_check')
def health_check():
    """Health check endpoint."""
    store = get_game_store()

    response_data = {
        'status': 'healthy',
        'store': type(store).__name__ if store else None
    }
    return jsonify(response_data)
