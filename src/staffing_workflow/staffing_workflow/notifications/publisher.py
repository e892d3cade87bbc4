"""Realtime channel publishers.

``InMemoryChannelHub`` serves in-process subscribers (tests, a single worker);
``HttpRelayPublisher`` forwards events to an external realtime relay.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional, Protocol

import httpx
import structlog

logger = structlog.get_logger(__name__)

Subscriber = Callable[[str, Dict[str, Any]], None]


class Publisher(Protocol):
    def publish(self, topic: str, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError


class InMemoryChannelHub:
    def __init__(self) -> None:
        # topic -> callbacks, called with (event, payload)
        self._subscribers: Dict[str, List[Subscriber]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str, callback: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.setdefault(topic, []).append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(topic)
                if callbacks and callback in callbacks:
                    callbacks.remove(callback)
                    if not callbacks:
                        self._subscribers.pop(topic, None)

        return unsubscribe

    def publish(self, topic: str, event: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            targets = list(self._subscribers.get(topic, ()))
        for callback in targets:
            try:
                callback(event, payload)
            except Exception as e:
                # best-effort; one broken listener must not starve the others
                logger.warning("subscriber_failed", topic=topic, notification_event=event, error=str(e))


class HttpRelayPublisher:
    """POST ``{channel, event, data}`` to a realtime relay (Pusher-style trigger)."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 2.0,
        auth_token: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        if not url:
            raise ValueError("Realtime relay URL is required")
        self._url = url
        headers = {"Authorization": f"Bearer {auth_token}"} if auth_token else {}
        self._client = client or httpx.Client(timeout=timeout, headers=headers)

    def publish(self, topic: str, event: str, payload: Dict[str, Any]) -> None:
        response = self._client.post(self._url, json={"channel": topic, "event": event, "data": payload})
        response.raise_for_status()
