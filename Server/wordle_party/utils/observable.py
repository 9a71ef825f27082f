"""
Observable State Cell

A value holder that notifies subscribed listeners every time a new value is
committed. Used by game sessions so a UI layer can re-render on change
without the core depending on any UI framework.
"""

import threading
from typing import Callable, Generic, List, TypeVar

T = TypeVar('T')

Listener = Callable[[T], None]


class ObservableState(Generic[T]):

    def __init__(self, initial: T):
        self._value = initial
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Commit a new value and notify listeners (outside the internal lock)."""
        with self._lock:
            self._value = value
            listeners = list(self._listeners)
        for listener in listeners:
            listener(value)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
