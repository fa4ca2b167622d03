"""
Condition Gate Types.

Enums and dataclasses shared by the gate, the event bus and the tools layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class GateState(str, Enum):
    """
    Gate states.

    IDLE  - condition flag false, nothing to trigger
    ARMED - a qualifying observation is waiting to be consumed
    """

    IDLE = "idle"
    ARMED = "armed"


class EvaluationOutcome(str, Enum):
    """What a single evaluate_condition call did."""

    ARMED = "armed"                  # Idle -> Armed, event emitted
    ALREADY_ARMED = "already_armed"  # qualifying, flag was already set
    NOT_QUALIFIED = "not_qualified"  # flag left unchanged


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ConditionMetEvent:
    """
    Notification emitted on the Idle -> Armed transition.

    Attributes:
        caller: Identity that ran the qualifying evaluation
        observed_value: Oracle value at qualification time
        gate_id: Gate that armed
        seq: Position in the emitting bus (assigned on publish)
        timestamp: UTC time of the transition
    """

    caller: str
    observed_value: int
    gate_id: str = ""
    seq: int = 0
    timestamp: datetime = field(default_factory=_utc_now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


@dataclass(frozen=True)
class EvaluationResult:
    """Result of one evaluate_condition call."""

    outcome: EvaluationOutcome
    observed_value: int
    predicted_value: int
    trigger_threshold: int
    condition_met: bool
    event: Optional[ConditionMetEvent] = None

    @property
    def qualified(self) -> bool:
        return self.outcome != EvaluationOutcome.NOT_QUALIFIED

    @property
    def armed_now(self) -> bool:
        """True only when this call performed the Idle -> Armed transition."""
        return self.outcome == EvaluationOutcome.ARMED


@dataclass(frozen=True)
class TriggerResult:
    """Result of a successful trigger_action call."""

    caller: str
    action_result: Any = None
    timestamp: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class GateSnapshot:
    """Read-only view of gate state."""

    gate_id: str
    owner: str
    predicted_value: int
    trigger_threshold: int
    condition_met: bool

    @property
    def state(self) -> GateState:
        return GateState.ARMED if self.condition_met else GateState.IDLE

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["state"] = self.state.value
        return data
