"""WebSocket subscriber tracking and reload fan-out."""

import asyncio
import logging
import threading
from typing import Protocol

from fastapi import WebSocket, WebSocketDisconnect

from md2html.config.settings import RELOAD_MESSAGE

logger = logging.getLogger(__name__)


class Subscriber(Protocol):
    """An open push channel to one browser."""

    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000, reason: str | None = None) -> None: ...


class SubscriberRegistry:
    """Set of open push channels.

    Thread-safe: membership is protected by a lock, and iteration happens
    over snapshots so callers never mutate the set while walking it.
    """

    def __init__(self) -> None:
        # Keyed by identity: WebSocket objects compare like mappings
        self._subscribers: dict[int, Subscriber] = {}
        self._lock = threading.Lock()

    def register(self, subscriber: Subscriber) -> None:
        """Add a newly accepted connection."""
        with self._lock:
            self._subscribers[id(subscriber)] = subscriber
        logger.debug(f"Subscriber registered ({len(self)} open)")

    def unregister(self, subscriber: Subscriber) -> bool:
        """Remove a connection. Returns False if it was not registered."""
        with self._lock:
            if self._subscribers.pop(id(subscriber), None) is None:
                return False
        logger.debug(f"Subscriber removed ({len(self)} open)")
        return True

    def snapshot(self) -> tuple[Subscriber, ...]:
        """Current subscribers (no lock held on return)."""
        with self._lock:
            return tuple(self._subscribers.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def __contains__(self, subscriber: object) -> bool:
        with self._lock:
            return id(subscriber) in self._subscribers


class Notifier:
    """Tells every registered subscriber to reload.

    Delivery is best effort: a subscriber whose send fails is removed and
    closed once the pass over the snapshot completes, and the remaining
    subscribers are still notified.
    """

    def __init__(self, registry: SubscriberRegistry, message: str = RELOAD_MESSAGE) -> None:
        self.registry = registry
        self.message = message
        self._lock = asyncio.Lock()

    async def notify_all(self) -> int:
        """
        Send the reload message to all current subscribers.

        Returns:
            Number of subscribers the message was delivered to
        """
        async with self._lock:
            subscribers = self.registry.snapshot()
            if not subscribers:
                return 0

            results = await asyncio.gather(
                *(subscriber.send_text(self.message) for subscriber in subscribers),
                return_exceptions=True,
            )

            failed = []
            for subscriber, result in zip(subscribers, results):
                if isinstance(result, Exception):
                    logger.warning(f"Websocket error: {result!r}")
                    failed.append(subscriber)
                elif isinstance(result, BaseException):
                    raise result

            for subscriber in failed:
                self.registry.unregister(subscriber)
                await _close_quietly(subscriber)

            delivered = len(subscribers) - len(failed)
            logger.debug(f"Reload sent to {delivered}/{len(subscribers)} subscribers")
            return delivered


async def _close_quietly(subscriber: Subscriber) -> None:
    """Close a subscriber whose connection is already broken."""
    try:
        await subscriber.close()
    except (RuntimeError, OSError, WebSocketDisconnect) as e:
        logger.debug(f"Closing failed subscriber: {e!r}")


async def websocket_endpoint(websocket: WebSocket, registry: SubscriberRegistry) -> None:
    """Accept a push channel, register it and wait for it to close.

    Inbound frames carry no meaning; they are read only so that a closed
    connection is noticed and removed from the registry.

    Args:
        websocket: Incoming WebSocket connection
        registry: Registry the accepted connection is added to
    """
    try:
        await websocket.accept()
    except (RuntimeError, OSError) as e:
        logger.error(f"Failed to upgrade ws: {e}")
        return

    registry.register(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.debug(f"Websocket closed with code {message.get('code')}")
                break
            logger.debug(f"Received a message of type {message['type']}")
    except (WebSocketDisconnect, RuntimeError, OSError) as e:
        logger.info(f"Error during message reading: {e!r}")
    finally:
        registry.unregister(websocket)
