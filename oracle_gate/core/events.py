"""
Condition-met notifications.

The gate publishes a ConditionMetEvent on every Idle -> Armed transition.
Consumers either subscribe (push) or poll by sequence number (pull).

Notification adapters turn events into human-facing messages; the bundled
ones log or do nothing. Network transports are the host's concern.
"""

from __future__ import annotations

import dataclasses
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable

from ..utils.logger import get_logger
from .types import ConditionMetEvent

logger = get_logger()

Subscriber = Callable[[ConditionMetEvent], None]

DEFAULT_MAX_EVENTS = 1000


class EventBus:
    """
    In-process event log with push and poll delivery.

    Events are numbered from 1 in publish order. Only the newest
    max_events are kept for polling (None keeps everything). Subscriber
    failures are logged and never propagate: by the time an event is
    delivered the gate transition that produced it is already committed.

    publish() is record() followed by deliver(). The gate records while it
    holds its lock and delivers after releasing it, so subscribers always
    see a finished operation.
    """

    def __init__(self, max_events: int | None = DEFAULT_MAX_EVENTS):
        if max_events is not None and max_events < 1:
            raise ValueError(f"max_events must be positive, got {max_events}")
        self._lock = threading.Lock()
        self._callback_lock = threading.Lock()
        self._subscribers: list[Subscriber] = []
        self._events: list[ConditionMetEvent] = []
        self._seq = 0
        self._max_events = max_events

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback. Returns a function that unsubscribes it."""
        with self._callback_lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._callback_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def publish(self, event: ConditionMetEvent) -> ConditionMetEvent:
        """Number, store and deliver an event. Returns the numbered event."""
        event = self.record(event)
        self.deliver(event)
        return event

    def record(self, event: ConditionMetEvent) -> ConditionMetEvent:
        """Number and store an event without notifying subscribers."""
        with self._lock:
            self._seq += 1
            event = dataclasses.replace(event, seq=self._seq)
            self._events.append(event)
            if self._max_events is not None and len(self._events) > self._max_events:
                del self._events[: len(self._events) - self._max_events]
        return event

    def deliver(self, event: ConditionMetEvent) -> None:
        """Call every current subscriber with an already recorded event."""
        with self._callback_lock:
            callbacks_copy = list(self._subscribers)
        for callback in callbacks_copy:
            try:
                callback(event)
            except Exception as e:
                # One broken consumer must not starve the others
                logger.error(f"Event subscriber failed: {e} | seq={event.seq}")

    def poll(self, since_seq: int = 0) -> list[ConditionMetEvent]:
        """Return stored events with seq greater than since_seq."""
        with self._lock:
            return [e for e in self._events if e.seq > since_seq]

    @property
    def last_seq(self) -> int:
        with self._lock:
            return self._seq

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


class NotificationAdapter(ABC):
    """Base class for notification adapters."""

    @abstractmethod
    def send(self, message: str) -> bool:
        """Send a notification message. Returns True on success."""
        ...

    def notify_condition_met(self, event: ConditionMetEvent) -> bool:
        """Send a condition-met notification."""
        gate = f" {event.gate_id}" if event.gate_id else ""
        return self.send(
            f"Condition met{gate}: observed={event.observed_value} caller={event.caller}"
        )

    def __call__(self, event: ConditionMetEvent) -> None:
        self.notify_condition_met(event)


class LogAdapter(NotificationAdapter):
    """Writes notifications to the gate event log."""

    def send(self, message: str) -> bool:
        logger.event_logger.info(f"[NOTIFY] {message}")
        return True


class NoopAdapter(NotificationAdapter):
    """No-op adapter when no notification target is configured."""

    def send(self, message: str) -> bool:
        return True
