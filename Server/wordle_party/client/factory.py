"""
Remote Session Factory

Wires a GameSession to a running server: HTTP record store, Socket.IO
transport and a player identity kept in the configured player file.
"""

from typing import Optional

from ..config.app_config import Config
from ..services.game_service import GameService
from ..services.persistence import RemotePersistence
from ..services.player_service import SessionContext
from ..services.session import GameSession
from .http_store import HttpGameStore
from .socketio_transport import SocketIOTransport


def build_remote_session(config_class=Config, identity_file: Optional[str] = None) -> GameSession:
    """
    Create a session playing against ``config_class.SERVER_URL``.

    Args:
        config_class: Configuration class providing server URL and timeouts
        identity_file: Player identity file (``config_class.PLAYER_FILE`` when omitted)
    """
    store = HttpGameStore(config_class.SERVER_URL, config_class.REQUEST_TIMEOUT_SECONDS)
    transport = SocketIOTransport(config_class.SERVER_URL, config_class.SUBSCRIBE_TIMEOUT_SECONDS)
    context = SessionContext(store, identity_file or config_class.PLAYER_FILE)
    return GameSession(context, GameService(RemotePersistence(store)), transport)
