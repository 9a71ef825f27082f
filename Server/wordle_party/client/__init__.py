"""
Client Package

Collaborators used by a Python process playing against a running server:
an HTTP record store, a Socket.IO realtime transport and a factory wiring
both into a game session.
"""

from .http_store import HttpGameStore
from .socketio_transport import SocketIOTransport
from .factory import build_remote_session

__all__ = ['HttpGameStore', 'SocketIOTransport', 'build_remote_session']
