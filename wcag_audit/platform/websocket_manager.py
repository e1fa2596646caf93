"""
Progress Broadcaster

Fans analysis progress events out to every connected observer.
Observers are WebSocket clients of the progress channel or in-process queues
backing the SSE stream. Delivery is best effort and at most once: there is
no buffering or replay, observers that are not ready are skipped, and an
observer that fails or stalls is dropped without affecting the others.
"""

import asyncio
from typing import Any, Dict, Set

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from wcag_audit.platform.config import settings
from wcag_audit.platform.logger import get_logger

logger = get_logger(__name__)

PROGRESS_EVENT = "analysis-progress"


class Observer:
    """A connected consumer of progress events."""

    def is_ready(self) -> bool:
        raise NotImplementedError

    async def send(self, message: Dict[str, Any]) -> None:
        raise NotImplementedError


class WebSocketObserver(Observer):

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    def is_ready(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send(self, message: Dict[str, Any]) -> None:
        await self.websocket.send_json(message)


class QueueObserver(Observer):
    """
    Bounded in-process mailbox.

    ``send`` never waits: when the consumer falls behind, new messages are
    dropped rather than stalling the broadcaster.
    """

    def __init__(self, maxsize: int = settings.SSE_QUEUE_SIZE):
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def is_ready(self) -> bool:
        return not self.closed

    async def send(self, message: Dict[str, Any]) -> None:
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning("Observer queue full, dropping progress event")

    async def get(self) -> Dict[str, Any]:
        return await self.queue.get()

    def close(self) -> None:
        self.closed = True


class ProgressBroadcaster:
    """
    Owns the set of active observers.

    ``notify`` iterates a snapshot of the set, so observers may connect and
    disconnect while a delivery is in flight.
    """

    def __init__(self, send_timeout: float = settings.BROADCAST_SEND_TIMEOUT_SECONDS):
        self.send_timeout = send_timeout
        self.active_connections: Set[Observer] = set()

    async def connect(self, websocket: WebSocket) -> WebSocketObserver:
        """Accept a WebSocket and register it as an observer."""
        await websocket.accept()
        observer = WebSocketObserver(websocket)
        self.add_observer(observer)
        return observer

    def add_observer(self, observer: Observer) -> None:
        self.active_connections.add(observer)
        logger.info(f"Observer connected. Total connections: {len(self.active_connections)}")

    def disconnect(self, observer: Observer) -> None:
        if observer in self.active_connections:
            self.active_connections.discard(observer)
            logger.info(f"Observer disconnected. Remaining connections: {len(self.active_connections)}")

    async def notify(self, analysis_id: str, payload: Dict[str, Any]) -> int:
        """
        Deliver ``payload`` for ``analysis_id`` to every ready observer.

        Returns:
            Number of successful deliveries
        """
        message = {
            "event": PROGRESS_EVENT,
            "data": {**payload, "analysisId": analysis_id},
        }

        observers = [observer for observer in list(self.active_connections) if observer.is_ready()]
        if not observers:
            logger.debug(f"[{analysis_id}] No ready observers. Event not delivered.")
            return 0

        outcomes = await asyncio.gather(
            *(self._deliver(observer, message) for observer in observers)
        )
        successful_sends = sum(1 for ok in outcomes if ok)

        logger.info(
            f"[{analysis_id}] Sent {payload.get('status')} event. "
            f"Successful: {successful_sends}, Failed: {len(observers) - successful_sends}"
        )
        return successful_sends

    async def _deliver(self, observer: Observer, message: Dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(observer.send(message), timeout=self.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Observer timed out after {self.send_timeout}s, dropping it")
        except Exception as e:
            logger.warning(f"Failed to send progress event: {e}")

        self.disconnect(observer)
        return False

    def get_total_connection_count(self) -> int:
        return len(self.active_connections)


# Global singleton instance
broadcaster = ProgressBroadcaster()
