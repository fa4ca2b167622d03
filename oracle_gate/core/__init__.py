"""
Core gate logic.

Condition gate state machine, oracle port, access control, notifications,
downstream actions and journaling.
"""

from .errors import (
    GateError,
    Unauthorized,
    ConditionNotMet,
    OracleUnavailable,
    InvalidValue,
)
from .types import (
    GateState,
    EvaluationOutcome,
    ConditionMetEvent,
    EvaluationResult,
    TriggerResult,
    GateSnapshot,
)
from .oracle import (
    OraclePort,
    read_oracle,
    FixedOracle,
    SequenceOracle,
    CallableOracle,
)
from .auth import Authorizer, OwnerAuthorizer
from .events import EventBus, NotificationAdapter, LogAdapter, NoopAdapter
from .action import ActionHandler, NoopAction, RecordingAction, CallbackAction
from .journal import BaseJournal, GateJournal, MemoryJournal
from .gate import ConditionGate
from .factory import build_gate_from_config

__all__ = [
    # Errors
    "GateError",
    "Unauthorized",
    "ConditionNotMet",
    "OracleUnavailable",
    "InvalidValue",
    # Types
    "GateState",
    "EvaluationOutcome",
    "ConditionMetEvent",
    "EvaluationResult",
    "TriggerResult",
    "GateSnapshot",
    # Oracle
    "OraclePort",
    "read_oracle",
    "FixedOracle",
    "SequenceOracle",
    "CallableOracle",
    # Access control
    "Authorizer",
    "OwnerAuthorizer",
    # Notifications
    "EventBus",
    "NotificationAdapter",
    "LogAdapter",
    "NoopAdapter",
    # Actions
    "ActionHandler",
    "NoopAction",
    "RecordingAction",
    "CallbackAction",
    # Journal
    "BaseJournal",
    "GateJournal",
    "MemoryJournal",
    # Gate
    "ConditionGate",
    "build_gate_from_config",
]
