"""
Gate tools: the four gate operations plus event listing.

Every tool takes the gate explicitly and returns a ToolResult. Gate
rejections come back as success=False with data["error_kind"] set to the
error kind (Unauthorized, ConditionNotMet, OracleUnavailable, InvalidValue).
"""

from typing import Any, Dict

from ..core.errors import GateError
from ..core.gate import ConditionGate
from .shared import ToolResult, gate_error_result


def _state(gate: ConditionGate) -> Dict[str, Any]:
    return gate.snapshot().to_dict()


def set_predicted_value_tool(gate: ConditionGate, caller: str, value: int) -> ToolResult:
    """
    Set the gate's predicted value (owner only).

    Args:
        gate: Target gate
        caller: Identity issuing the write
        value: New predicted value (non-negative integer)

    Returns:
        ToolResult with data["state"] holding the gate snapshot
    """
    try:
        gate.set_predicted_value(caller, value)
    except GateError as e:
        return gate_error_result(gate.gate_id, e, _state(gate))

    return ToolResult(
        success=True,
        message=f"Predicted value set to {value}",
        gate_id=gate.gate_id,
        data={"state": _state(gate)},
    )


def evaluate_condition_tool(gate: ConditionGate, caller: str) -> ToolResult:
    """
    Evaluate the gate condition against one oracle reading.

    Returns:
        ToolResult with data["outcome"], data["observed"], data["state"] and,
        when the gate armed, data["event"]
    """
    try:
        result = gate.evaluate_condition(caller)
    except GateError as e:
        return gate_error_result(gate.gate_id, e, _state(gate))

    if result.armed_now:
        message = f"Condition met at {result.observed_value}: gate armed"
    elif result.qualified:
        message = f"Observed {result.observed_value}: gate already armed"
    else:
        message = (
            f"Observed {result.observed_value}: below predicted {result.predicted_value} "
            f"or threshold {result.trigger_threshold}"
        )

    data: Dict[str, Any] = {
        "outcome": result.outcome.value,
        "observed": result.observed_value,
        "state": _state(gate),
    }
    if result.event is not None:
        data["event"] = result.event.to_dict()

    return ToolResult(success=True, message=message, gate_id=gate.gate_id, data=data)


def trigger_action_tool(gate: ConditionGate, caller: str) -> ToolResult:
    """
    Consume the armed condition and run the downstream action.

    A failure inside the action handler is reported with error_kind
    "ActionFailed"; the arming is consumed either way.
    """
    try:
        result = gate.trigger_action(caller)
    except GateError as e:
        return gate_error_result(gate.gate_id, e, _state(gate))
    except Exception as e:
        return ToolResult(
            success=False,
            gate_id=gate.gate_id,
            error=f"Action failed after trigger: {str(e)}",
            data={"error_kind": "ActionFailed", "state": _state(gate)},
        )

    return ToolResult(
        success=True,
        message=f"Action triggered by {caller}",
        gate_id=gate.gate_id,
        data={
            "caller": result.caller,
            "action_result": result.action_result,
            "state": _state(gate),
        },
    )


def get_gate_status_tool(gate: ConditionGate) -> ToolResult:
    """Read-only gate status."""
    snap = gate.snapshot()
    return ToolResult(
        success=True,
        message=f"Gate {snap.gate_id} is {snap.state.value}",
        gate_id=snap.gate_id,
        data={"state": snap.to_dict(), "events": gate.events.last_seq},
    )


def list_events_tool(gate: ConditionGate, since_seq: int = 0) -> ToolResult:
    """List condition-met events published after since_seq."""
    events = gate.events.poll(since_seq)
    return ToolResult(
        success=True,
        message=f"Found {len(events)} event(s)",
        gate_id=gate.gate_id,
        data={"events": [e.to_dict() for e in events], "count": len(events)},
    )
