"""
Wordle Party Application Package

Multiplayer word-guessing game: the game core (evaluation, validation,
state machine, keyboard aggregation, reconciliation) plus the Flask-SocketIO
server acting as record store and realtime transport for multiplayer games.
"""

from flask import Flask, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
from .config import Config


def create_app(config_class=Config):
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config_class: Configuration class to use

    Returns:
        Tuple of (Flask application, SocketIO instance) with the record store
        initialized and its change events broadcast to game rooms
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app)
    socketio = SocketIO(app, cors_allowed_origins="*", logger=False, engineio_logger=False)

    # Record store; every committed write is pushed to the game's room
    from .services.store import initialize_game_store
    from .websocket.handlers import broadcast_event, register_websocket_handlers

    initialize_game_store(config_class, publisher=lambda event: broadcast_event(socketio, event))

    # Register blueprints
    from .controllers.game_controller import game_bp
    from .controllers.player_controller import player_bp

    app.register_blueprint(game_bp, url_prefix='/api')
    app.register_blueprint(player_bp, url_prefix='/api')

    # Register WebSocket handlers
    register_websocket_handlers(socketio)

    # Unknown routes and methods answer with the same JSON envelope as the API
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    # Store socketio instance for use in other modules
    app.socketio = socketio

    return app, socketio
