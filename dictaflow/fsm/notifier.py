"""State change notifications pushed to the UI layer."""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, TextIO

from dictaflow.fsm.events import AppEvent
from dictaflow.fsm.states import AppState
from dictaflow.fsm.views import snapshot
from dictaflow.utils.logging import get_logger

logger = get_logger("fsm.notifier")

DEFAULT_CHANNEL = "app-state-changed"


@dataclass
class AppStateChanged:
    """A single state change, as seen by observers."""

    previous_state: str
    current_state: str
    event: str
    timestamp: float = field(default_factory=time.monotonic)
    context: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        previous: AppState,
        current: AppState,
        event: AppEvent,
    ) -> AppStateChanged:
        """Package a transition with the derived views of the new state."""
        return cls(
            previous_state=repr(previous),
            current_state=repr(current),
            event=repr(event),
            context=snapshot(current).to_dict(),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "previous_state": self.previous_state,
            "current_state": self.current_state,
            "event": self.event,
            "timestamp": self.timestamp,
            "context": dict(self.context),
        }


class NotificationSink(Protocol):
    """Receives serialized state changes on a named channel."""

    def __call__(self, channel: str, payload: dict) -> None:
        ...


class CallbackSink:
    """Adapts a payload-only callable into a sink."""

    def __init__(self, callback: Callable[[dict], Any]) -> None:
        self.callback = callback

    def __call__(self, channel: str, payload: dict) -> None:
        self.callback(payload)


class QueueSink:
    """
    Hands payloads to an asyncio queue owned by a running event loop.

    Safe to call from any thread; the put is scheduled on ``loop``.
    Items are ``(channel, payload)`` tuples.
    """

    def __init__(
        self,
        queue: asyncio.Queue,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.queue = queue
        self.loop = loop or asyncio.get_running_loop()

    def __call__(self, channel: str, payload: dict) -> None:
        self.loop.call_soon_threadsafe(self.queue.put_nowait, (channel, payload))


class StreamSink:
    """Writes each payload as one JSON line."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream

    def __call__(self, channel: str, payload: dict) -> None:
        line = json.dumps({"channel": channel, **payload}, default=str)
        self.stream.write(line + "\n")
        self.stream.flush()


class StateChangeNotifier:
    """
    Pushes state changes to a single sink.

    Delivery is best effort: a failing sink is logged and reported, the
    state change it describes stays applied.
    """

    def __init__(
        self,
        sink: NotificationSink,
        channel: str = DEFAULT_CHANNEL,
    ) -> None:
        """
        Initialize the notifier.

        Args:
            sink: Callable receiving (channel, payload)
            channel: Channel name observers listen on
        """
        self.sink = sink
        self.channel = channel
        self.sent = 0
        self.failed = 0

    def send(self, change: AppStateChanged) -> bool:
        """
        Deliver a packaged change.

        Returns:
            True if the sink accepted it
        """
        return self._deliver(change.to_dict)

    def notify(
        self,
        previous: AppState,
        current: AppState,
        event: AppEvent,
    ) -> bool:
        """Package and deliver one transition."""
        return self._deliver(
            lambda: AppStateChanged.build(previous, current, event).to_dict()
        )

    def _deliver(self, payload: Callable[[], dict]) -> bool:
        try:
            self.sink(self.channel, payload())
        except Exception as e:
            self.failed += 1
            logger.warning(
                "notification_failed",
                channel=self.channel,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        self.sent += 1
        logger.debug("notification_sent", channel=self.channel)
        return True
