"""
Socket.IO Transport

Client side of the per-game change stream served by the Flask-SocketIO
server. Every subscription opens its own client connection (a fresh
channel) and its own delivery thread, so events reach the session one at
a time in arrival order. Automatic reconnection is disabled; reconnecting
is an explicit user action.
"""

import queue
import threading
from typing import Callable, Optional

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError, SocketIOError, TimeoutError as SocketTimeoutError

from ..config.app_config import Config
from ..errors import ConnectionDegradedError
from ..models.events import EVENT_TYPES, event_from_dict
from ..services.transport import ErrorHandler, EventHandler, Subscription, Transport
from ..utils.game_logger import game_logger
from ..utils.helpers import new_id

_STOP = object()


class SocketIOTransport(Transport):

    def __init__(self, server_url: str = Config.SERVER_URL,
                 timeout: float = Config.SUBSCRIBE_TIMEOUT_SECONDS,
                 client_factory: Optional[Callable[..., socketio.Client]] = None):
        self.server_url = server_url
        self.timeout = timeout
        self.client_factory = client_factory or socketio.Client

    def subscribe(self, game_id: str, on_event: EventHandler,
                  on_error: Optional[ErrorHandler] = None) -> Subscription:
        channel_id = new_id()
        client = self.client_factory(reconnection=False)
        closing = threading.Event()

        # The client runs every handler on its own thread; one worker per
        # channel hands events to the session in the order they arrived.
        deliveries = queue.Queue()

        def deliver():
            while True:
                item = deliveries.get()
                if item is _STOP:
                    return
                if closing.is_set():
                    continue
                try:
                    if isinstance(item, ConnectionDegradedError):
                        if on_error is not None:
                            on_error(item)
                    else:
                        on_event(item)
                except Exception as e:
                    game_logger.logger.error(f"Event handler failed on channel {channel_id}: {e}")

        worker = threading.Thread(target=deliver, name=f"channel-{channel_id}", daemon=True)

        def make_handler(kind: str):
            def handler(payload):
                try:
                    event = event_from_dict(kind, payload)
                except (KeyError, TypeError, ValueError) as e:
                    game_logger.logger.error(f"Malformed {kind} payload on channel {channel_id}: {e}")
                    return
                deliveries.put(event)
            return handler

        for kind in EVENT_TYPES:
            client.on(kind, make_handler(kind))

        def on_disconnect(*args):
            if closing.is_set():
                return
            game_logger.logger.warning(f"Channel {channel_id} for game {game_id} disconnected")
            deliveries.put(ConnectionDegradedError("Realtime connection lost"))

        client.on('disconnect', on_disconnect)

        def stop_worker() -> None:
            # No join: the caller may hold the session lock the worker is waiting on
            closing.set()
            deliveries.put(_STOP)

        worker.start()
        try:
            client.connect(self.server_url, wait_timeout=self.timeout)
            ack = client.call('subscribe_game', {'game_id': game_id, 'channel_id': channel_id},
                              timeout=self.timeout)
        except (SocketConnectionError, SocketTimeoutError) as e:
            stop_worker()
            client.disconnect()
            raise ConnectionDegradedError(f"Could not subscribe to game {game_id}: {e}")

        if not isinstance(ack, dict) or not ack.get('success'):
            stop_worker()
            client.disconnect()
            error = ack.get('error') if isinstance(ack, dict) else 'no acknowledgement'
            raise ConnectionDegradedError(f"Subscription to game {game_id} refused: {error}")

        def close() -> None:
            stop_worker()
            try:
                client.emit('unsubscribe_game', {'game_id': game_id, 'channel_id': channel_id})
            except SocketIOError as e:
                game_logger.logger.debug(f"Unsubscribe on closed channel {channel_id}: {e}")
            client.disconnect()

        return Subscription(game_id, channel_id, on_close=close)
