"""In-process publish/subscribe used for client events such as focus regain."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class Subscription:
    def __init__(self, hub: "EventHub", topic: str, listener: Listener):
        self._hub = hub
        self._topic = topic
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._hub._remove(self._topic, self._listener)
            self.active = False


class EventHub:
    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str, listener: Listener) -> Subscription:
        with self._lock:
            self._listeners.setdefault(topic, []).append(listener)
        return Subscription(self, topic, listener)

    def publish(self, topic: str) -> int:
        with self._lock:
            listeners = list(self._listeners.get(topic, []))
        for listener in listeners:
            listener()
        return len(listeners)

    def listener_count(self, topic: str) -> int:
        with self._lock:
            return len(self._listeners.get(topic, []))

    def _remove(self, topic: str, listener: Listener) -> None:
        with self._lock:
            listeners = self._listeners.get(topic, [])
            if listener in listeners:
                listeners.remove(listener)
