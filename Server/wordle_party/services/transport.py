"""
Realtime Transport

Per-game change stream used by multiplayer sessions. A subscription is a
scoped resource: closing it is idempotent and safe from any exit path.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from ..errors import ConnectionDegradedError
from ..models.events import RemoteEvent
from ..utils.game_logger import game_logger
from ..utils.helpers import new_id

EventHandler = Callable[[RemoteEvent], None]
ErrorHandler = Callable[[ConnectionDegradedError], None]


class Subscription:
    """Handle on one channel subscribed to one game."""

    def __init__(self, game_id: str, channel_id: str, on_close: Optional[Callable[[], None]] = None):
        self.game_id = game_id
        self.channel_id = channel_id
        self._on_close = on_close
        self._closed = False
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return not self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            on_close, self._on_close = self._on_close, None
        if on_close is not None:
            on_close()


class Transport(ABC):
    """Subscribe to the change events of one game."""

    @abstractmethod
    def subscribe(self, game_id: str, on_event: EventHandler,
                  on_error: Optional[ErrorHandler] = None) -> Subscription:
        """
        Open a fresh channel for a game.

        Raises:
            ConnectionDegradedError: if the subscription cannot be established
        """


class InProcessTransport(Transport):
    """
    Event bus delivering events synchronously on the publishing thread.

    Suitable as a store publisher when every session lives in the same
    process and thread (solo play, tests).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._channels: Dict[str, Dict[str, Tuple[EventHandler, Optional[ErrorHandler]]]] = {}

    def subscribe(self, game_id: str, on_event: EventHandler,
                  on_error: Optional[ErrorHandler] = None) -> Subscription:
        channel_id = new_id()
        with self._lock:
            self._channels.setdefault(game_id, {})[channel_id] = (on_event, on_error)

        return Subscription(game_id, channel_id, on_close=lambda: self._remove(game_id, channel_id))

    def _remove(self, game_id: str, channel_id: str) -> None:
        with self._lock:
            channels = self._channels.get(game_id, {})
            channels.pop(channel_id, None)
            if not channels:
                self._channels.pop(game_id, None)

    def subscriber_count(self, game_id: str) -> int:
        with self._lock:
            return len(self._channels.get(game_id, {}))

    def publish(self, event: RemoteEvent) -> None:
        """Deliver an event to every channel subscribed to its game, in subscription order."""
        with self._lock:
            handlers = list(self._channels.get(event.game_id, {}).values())
        for on_event, _ in handlers:
            on_event(event)

    def disconnect(self, game_id: str, reason: str = "connection lost") -> None:
        """Drop every channel of a game, reporting a connection error to each subscriber."""
        with self._lock:
            channels = self._channels.pop(game_id, {})
        game_logger.logger.warning(f"Dropping {len(channels)} channel(s) of game {game_id}: {reason}")
        for _, on_error in channels.values():
            if on_error is not None:
                on_error(ConnectionDegradedError(reason))
