"""
Downstream action handlers.

A successful trigger hands control to exactly one handler. What the handler
does is opaque to the gate; its return value is carried in TriggerResult.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

from ..utils.logger import get_logger

logger = get_logger()


@runtime_checkable
class ActionHandler(Protocol):
    """Performs the downstream effect of a trigger."""

    def execute(self, caller: str) -> Any:
        ...


class NoopAction:
    """Default handler: logs and returns None."""

    def execute(self, caller: str) -> Any:
        logger.debug(f"NoopAction executed | caller={caller}")
        return None


class RecordingAction:
    """Records every execution. Used by tests and simulations."""

    def __init__(self):
        self.calls: list[dict] = []

    @property
    def count(self) -> int:
        return len(self.calls)

    def execute(self, caller: str) -> Any:
        record = {
            "caller": caller,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self.calls.append(record)
        return record


class CallbackAction:
    """Adapts a callable taking the caller identity."""

    def __init__(self, fn: Callable[[str], Any]):
        self._fn = fn

    def execute(self, caller: str) -> Any:
        return self._fn(caller)
