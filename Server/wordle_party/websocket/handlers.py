"""
WebSocket Event Handlers

Per-game realtime subscriptions. Each client joins the Socket.IO room of a
game and receives the change events committed to the record store.
"""

from flask import request
from flask_socketio import join_room, leave_room

from ..models.events import RemoteEvent
from ..services.store import get_game_store
from ..errors import GameNotFoundError, PersistenceError
from ..utils.game_logger import game_logger


def game_room(game_id: str) -> str:
    return f"game_{game_id}"


def broadcast_event(socketio, event: RemoteEvent) -> None:
    """Push a committed change event to every subscriber of the game."""
    socketio.emit(event.kind, event.to_dict(), room=game_room(event.game_id))


def register_websocket_handlers(socketio):
    """Register all WebSocket event handlers."""

    @socketio.on('connect')
    def handle_connect():
        """Handle WebSocket connection."""
        game_logger.logger.info(f"WebSocket: client {request.sid} connected")

    @socketio.on('disconnect')
    def handle_disconnect(*args):
        """Handle WebSocket disconnection. Rooms are left automatically."""
        game_logger.logger.info(f"WebSocket: client {request.sid} disconnected")

    @socketio.on('subscribe_game')
    def handle_subscribe_game(data):
        """Join a game room for real-time updates. The return value is the acknowledgement."""
        game_id = data.get('game_id') if isinstance(data, dict) else None
        if not game_id:
            return {'success': False, 'error': 'Game ID is required'}

        store = get_game_store()
        if not store:
            return {'success': False, 'error': 'Game store unavailable'}

        try:
            store.get_snapshot(game_id)
        except GameNotFoundError:
            return {'success': False, 'error': 'Game not found'}
        except PersistenceError as e:
            game_logger.logger.error(f"WebSocket: subscribe to game {game_id} failed: {e}")
            return {'success': False, 'error': e.message}

        join_room(game_room(game_id))
        game_logger.logger.info(
            f"WebSocket: client {request.sid} subscribed to game {game_id} (channel {data.get('channel_id')})"
        )
        return {'success': True, 'game_id': game_id}

    @socketio.on('unsubscribe_game')
    def handle_unsubscribe_game(data):
        """Leave a game room."""
        game_id = data.get('game_id') if isinstance(data, dict) else None
        if not game_id:
            return {'success': False, 'error': 'Game ID is required'}

        leave_room(game_room(game_id))
        game_logger.logger.info(f"WebSocket: client {request.sid} unsubscribed from game {game_id}")
        return {'success': True, 'game_id': game_id}
