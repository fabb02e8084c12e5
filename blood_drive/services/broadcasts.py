import json
import logging
from typing import Any, Protocol

from blood_drive.models import DriveView

logger = logging.getLogger(__name__)


class Subscriber(Protocol):
    """Anything that can receive text frames, e.g. ``aiohttp.web.WebSocketResponse``."""

    closed: bool

    async def send_str(self, data: str, compress: Any = None) -> None: ...


def state_message(view: DriveView) -> str:
    return json.dumps({"event": "state", "data": view.model_dump(mode="json")})


class BroadcastHub:
    """Connected displays that receive the light view on every flush."""

    def __init__(self):
        self._subscribers: set[Subscriber] = set()

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.add(subscriber)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.discard(subscriber)

    async def send_to(self, subscriber: Subscriber, view: DriveView) -> None:
        await subscriber.send_str(state_message(view))

    async def publish(self, view: DriveView) -> tuple[int, int]:
        """Push *view* to every subscriber; returns (delivered, failed).

        Subscribers whose connection is gone are dropped.
        """
        message = state_message(view)
        success_count = 0
        fail_count = 0
        for subscriber in list(self._subscribers):
            if subscriber.closed:
                self._subscribers.discard(subscriber)
                continue
            try:
                await subscriber.send_str(message)
                success_count += 1
            except (ConnectionError, RuntimeError) as e:
                logger.info("Dropping subscriber after failed push: %s", e)
                self._subscribers.discard(subscriber)
                fail_count += 1
        return success_count, fail_count
