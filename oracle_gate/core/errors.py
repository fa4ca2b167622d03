"""
Gate error kinds.

Every error is a synchronous rejection: the operation that raised it
made no change to gate state.
"""

from __future__ import annotations


class GateError(Exception):
    """Base class for all condition gate rejections."""

    kind = "GateError"


class Unauthorized(GateError):
    """Raised when a non-owner attempts a privileged write."""

    kind = "Unauthorized"

    def __init__(self, caller: str, operation: str = "set_predicted_value"):
        self.caller = caller
        self.operation = operation
        super().__init__(f"Caller '{caller}' is not the owner: {operation} rejected")


class ConditionNotMet(GateError):
    """Raised when a trigger is attempted while the condition flag is false."""

    kind = "ConditionNotMet"

    def __init__(self, caller: str | None = None):
        self.caller = caller
        suffix = f" (caller={caller})" if caller is not None else ""
        super().__init__(f"Condition not met: nothing to trigger{suffix}")


class OracleUnavailable(GateError):
    """Raised when the oracle read fails or returns no usable value."""

    kind = "OracleUnavailable"

    def __init__(self, oracle_name: str, reason: str = "Oracle returned no value"):
        self.oracle_name = oracle_name
        self.reason = reason
        super().__init__(f"{reason}: oracle={oracle_name}")


class InvalidValue(GateError, ValueError):
    """Raised when a predicted value or threshold is not a non-negative integer."""

    kind = "InvalidValue"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"{field} must be a non-negative integer, got {value!r}")
