"""
ORACLE GATE - Single-owner conditional-action gate

Tracks a value published by an external oracle, compares it against an
owner-set predicted value and a fixed trigger threshold, and arms a one-shot
flag that a trigger consumes to run a downstream action.
"""

__version__ = "1.0.0"
__author__ = "ORACLE GATE"

from .config import get_config
from .core import (
    ConditionGate,
    GateState,
    FixedOracle,
    SequenceOracle,
    Unauthorized,
    ConditionNotMet,
    OracleUnavailable,
    build_gate_from_config,
)

__all__ = [
    "__version__",
    "get_config",
    "ConditionGate",
    "GateState",
    "FixedOracle",
    "SequenceOracle",
    "Unauthorized",
    "ConditionNotMet",
    "OracleUnavailable",
    "build_gate_from_config",
]
