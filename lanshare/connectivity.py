"""
Online/offline tracking.

ConnectivitySensor holds the current reading and fans transition events out
to subscribers. Something platform-specific has to feed it; on a plain
Python host that is ReachabilityProbe, which polls a TCP endpoint.
"""

import logging
import socket
from typing import Callable, List, Optional
from urllib.parse import urlsplit

from lanshare.models import ConnectivityState

logger = logging.getLogger(__name__)

Listener = Callable[[ConnectivityState], None]


class Subscription:
    def __init__(self, sensor: "ConnectivitySensor", listener: Listener):
        self._sensor = sensor
        self._listener = listener

    def unsubscribe(self) -> None:
        self._sensor._remove(self._listener)


class ConnectivitySensor:
    def __init__(self, initial: ConnectivityState = ConnectivityState.ONLINE):
        self._state = ConnectivityState(initial)
        self._listeners: List[Listener] = []

    def current_state(self) -> ConnectivityState:
        return self._state

    @property
    def online(self) -> bool:
        return self._state is ConnectivityState.ONLINE

    def on_change(self, listener: Listener) -> Subscription:
        """Register `listener` for transitions. Registering it twice is a no-op."""
        if listener not in self._listeners:
            self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def report(self, online: bool) -> None:
        """
        Record one platform transition event and notify every listener once.

        Events are passed through as-is: repeated reports of the same state
        are delivered again.
        """
        self._state = ConnectivityState.from_bool(online)
        logger.info("Connectivity: %s", self._state.value)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Connectivity listener %r failed", listener)

    def close(self) -> None:
        self._listeners.clear()


class ReachabilityProbe:
    """Treats a successful TCP connect to (host, port) as being online."""

    def __init__(self, host: str, port: int, timeout: float = 3.0,
                 connect: Optional[Callable] = None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self._connect = connect or socket.create_connection

    @classmethod
    def for_url(cls, url: str, timeout: float = 3.0) -> "ReachabilityProbe":
        parts = urlsplit(url)
        port = parts.port or (443 if parts.scheme == "https" else 80)
        return cls(parts.hostname or "localhost", port, timeout)

    def check(self) -> bool:
        try:
            conn = self._connect((self.host, self.port), self.timeout)
        except OSError as e:
            logger.debug("Reachability check to %s:%s failed: %s", self.host, self.port, e)
            return False
        conn.close()
        return True

    def poll(self, sensor: ConnectivitySensor) -> bool:
        """Report to `sensor` only when the probed state differs. Returns True if it reported."""
        online = self.check()
        if online == sensor.online:
            return False
        sensor.report(online)
        return True
