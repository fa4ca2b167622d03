"""
Tools layer for the oracle gate.

This package provides callable tools that can be invoked by:
- The CLI (gate_cli.py)
- Scenario runs (oracle_gate.scenario)
- Host processes embedding a gate

Core Modules:
- shared.py: ToolResult type and error conversion
- gate_tools.py: Predicted value, evaluation, trigger, status, events

Usage:
    from oracle_gate.tools import ToolResult, evaluate_condition_tool

    result = evaluate_condition_tool(gate, caller="keeper")
    if result.success:
        print(result.message)
"""

from .shared import ToolResult, gate_error_result
from .gate_tools import (
    set_predicted_value_tool,
    evaluate_condition_tool,
    trigger_action_tool,
    get_gate_status_tool,
    list_events_tool,
)

__all__ = [
    "ToolResult",
    "gate_error_result",
    "set_predicted_value_tool",
    "evaluate_condition_tool",
    "trigger_action_tool",
    "get_gate_status_tool",
    "list_events_tool",
]
