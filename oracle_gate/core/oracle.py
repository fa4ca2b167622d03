"""
Oracle Port Protocol.

Read-only interface to the external data source the gate observes.

Architecture Principle: Pure Protocol
- OraclePort defines WHAT to read
- The gate decides WHEN to call
- Freshness, retries and timeouts belong to the oracle implementation
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable, Iterable
from typing import Protocol, runtime_checkable

from .errors import OracleUnavailable


@runtime_checkable
class OraclePort(Protocol):
    """
    Protocol for oracle data sources.

    Implementations return the latest observed integer value, or raise
    if no value is available. The gate converts any failure into
    OracleUnavailable.
    """

    @property
    def source_name(self) -> str:
        """Unique name identifying this oracle (e.g., 'fixed', 'feed:eth-usd')."""
        ...

    def get_latest_value(self) -> int:
        """
        Get the latest observed value.

        Returns:
            Latest value as an integer

        Raises:
            Exception: Any failure to produce a reading
        """
        ...


def read_oracle(oracle: OraclePort) -> int:
    """
    Read exactly one value from an oracle.

    Raises:
        OracleUnavailable: If the read raises, or returns None or a non-integer
    """
    name = getattr(oracle, "source_name", type(oracle).__name__)
    try:
        value = oracle.get_latest_value()
    except OracleUnavailable:
        raise
    except Exception as e:
        raise OracleUnavailable(name, reason=f"Oracle read failed ({e})") from e

    # bool is an int subclass but never a reading
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        raise OracleUnavailable(name, reason=f"Oracle returned no usable value ({value!r})")
    return value


class FixedOracle:
    """Oracle returning a settable constant. Useful for tests and manual sessions."""

    def __init__(self, value: int | None = None, name: str = "fixed"):
        self._value = value
        self._name = name
        self._lock = threading.Lock()
        self.reads = 0

    @property
    def source_name(self) -> str:
        return self._name

    def set_value(self, value: int | None) -> None:
        with self._lock:
            self._value = value

    def get_latest_value(self) -> int:
        with self._lock:
            self.reads += 1
            if self._value is None:
                raise LookupError("no value published yet")
            return self._value


class SequenceOracle:
    """
    Scripted feed returning one value per read, in order.

    Raises LookupError once exhausted, which the gate surfaces as
    OracleUnavailable.
    """

    def __init__(self, values: Iterable[int], name: str = "sequence"):
        self._values = deque(values)
        self._name = name
        self._lock = threading.Lock()

    @property
    def source_name(self) -> str:
        return self._name

    @property
    def remaining(self) -> int:
        with self._lock:
            return len(self._values)

    def push(self, value: int) -> None:
        """Append a value to the end of the feed."""
        with self._lock:
            self._values.append(value)

    def get_latest_value(self) -> int:
        with self._lock:
            if not self._values:
                raise LookupError("feed exhausted")
            return self._values.popleft()


class CallableOracle:
    """Adapts any zero-argument callable to the OraclePort protocol."""

    def __init__(self, fn: Callable[[], int], name: str = "callable"):
        self._fn = fn
        self._name = name

    @property
    def source_name(self) -> str:
        return self._name

    def get_latest_value(self) -> int:
        return self._fn()
