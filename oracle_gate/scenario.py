"""
Gate scenarios.

A scenario is a YAML file describing one gate, a scripted oracle feed and a
list of steps to run against it through the tools layer:

    gate_id: demo
    owner: alice
    trigger_threshold: 1000
    prices: [1100, 1500]
    steps:
      - {op: set_predicted, caller: alice, value: 1200}
      - {op: evaluate, caller: keeper, expect: not_qualified}
      - {op: evaluate, caller: keeper, expect: armed}
      - {op: trigger, caller: bob}
      - {op: trigger, caller: bob, expect: ConditionNotMet}

Step ops: set_predicted, evaluate, trigger, status, events.
`expect` is optional: "ok" (default), "fail", an error kind
(Unauthorized, ConditionNotMet, OracleUnavailable, InvalidValue,
ActionFailed) or, for evaluate, an outcome (armed, already_armed,
not_qualified).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .core.action import RecordingAction
from .core.gate import ConditionGate
from .core.journal import MemoryJournal
from .core.oracle import SequenceOracle
from .core.types import EvaluationOutcome
from .tools import (
    ToolResult,
    evaluate_condition_tool,
    get_gate_status_tool,
    list_events_tool,
    set_predicted_value_tool,
    trigger_action_tool,
)
from .utils.logger import get_logger

logger = get_logger()

STEP_OPS = ("set_predicted", "evaluate", "trigger", "status", "events")
ERROR_KINDS = ("Unauthorized", "ConditionNotMet", "OracleUnavailable", "InvalidValue", "ActionFailed")
OUTCOMES = tuple(o.value for o in EvaluationOutcome)


@dataclass(frozen=True)
class ScenarioStep:
    """One operation in a scenario."""

    op: str
    caller: str = ""
    value: int | None = None
    expect: str = "ok"

    @classmethod
    def from_dict(cls, raw: dict, index: int) -> ScenarioStep:
        if not isinstance(raw, dict):
            raise ValueError(f"Step {index}: expected a mapping, got {type(raw).__name__}")
        op = raw.get("op")
        if op not in STEP_OPS:
            raise ValueError(f"Step {index}: unknown op '{op}'. Valid ops: {list(STEP_OPS)}")
        if op == "set_predicted" and "value" not in raw:
            raise ValueError(f"Step {index}: set_predicted requires 'value'")
        if op in ("set_predicted", "evaluate", "trigger") and not raw.get("caller"):
            raise ValueError(f"Step {index}: {op} requires 'caller'")

        expect = str(raw.get("expect", "ok"))
        valid_expect = ("ok", "fail") + ERROR_KINDS + OUTCOMES
        if expect not in valid_expect:
            raise ValueError(f"Step {index}: unknown expect '{expect}'. Valid: {list(valid_expect)}")

        return cls(
            op=op,
            caller=str(raw.get("caller", "")),
            value=raw.get("value"),
            expect=expect,
        )


@dataclass(frozen=True)
class Scenario:
    """A gate definition plus the steps to run against it."""

    owner: str
    trigger_threshold: int
    prices: tuple[int, ...]
    steps: tuple[ScenarioStep, ...]
    gate_id: str = "scenario"
    name: str = ""

    @classmethod
    def from_dict(cls, raw: dict) -> Scenario:
        for key in ("owner", "trigger_threshold"):
            if key not in raw:
                raise ValueError(f"Scenario is missing required key '{key}'")
        prices = raw.get("prices") or []
        if not isinstance(prices, list):
            raise ValueError("Scenario 'prices' must be a list")
        steps = raw.get("steps") or []
        if not steps:
            raise ValueError("Scenario has no steps")

        return cls(
            owner=str(raw["owner"]),
            trigger_threshold=raw["trigger_threshold"],
            prices=tuple(prices),
            steps=tuple(ScenarioStep.from_dict(s, i) for i, s in enumerate(steps, start=1)),
            gate_id=str(raw.get("gate_id", "scenario")),
            name=str(raw.get("name", "")),
        )


@dataclass
class StepOutcome:
    """A step together with the tool result it produced."""

    index: int
    step: ScenarioStep
    result: ToolResult
    matched: bool


@dataclass
class ScenarioRun:
    """Everything a scenario run produced."""

    scenario: Scenario
    gate: ConditionGate
    action: RecordingAction
    journal: MemoryJournal
    outcomes: list[StepOutcome] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(o.matched for o in self.outcomes)

    @property
    def mismatches(self) -> list[StepOutcome]:
        return [o for o in self.outcomes if not o.matched]


def load_scenario(path: str | Path) -> Scenario:
    """
    Load a scenario from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the YAML is empty or malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not raw or not isinstance(raw, dict):
        raise ValueError(f"Empty or invalid YAML in {path}")

    scenario = Scenario.from_dict(raw)
    if not scenario.name:
        scenario = Scenario(
            owner=scenario.owner,
            trigger_threshold=scenario.trigger_threshold,
            prices=scenario.prices,
            steps=scenario.steps,
            gate_id=scenario.gate_id,
            name=path.stem,
        )
    return scenario


def _matches(step: ScenarioStep, result: ToolResult) -> bool:
    if step.expect == "ok":
        return result.success
    if step.expect == "fail":
        return not result.success
    if step.expect in ERROR_KINDS:
        return not result.success and result.error_kind == step.expect
    # Evaluation outcome
    return result.success and (result.data or {}).get("outcome") == step.expect


def _run_step(gate: ConditionGate, step: ScenarioStep) -> ToolResult:
    if step.op == "set_predicted":
        return set_predicted_value_tool(gate, step.caller, step.value)
    if step.op == "evaluate":
        return evaluate_condition_tool(gate, step.caller)
    if step.op == "trigger":
        return trigger_action_tool(gate, step.caller)
    if step.op == "events":
        return list_events_tool(gate, step.value or 0)
    return get_gate_status_tool(gate)


def run_scenario(scenario: Scenario) -> ScenarioRun:
    """Build a fresh gate for the scenario and run every step in order."""
    action = RecordingAction()
    journal = MemoryJournal(scenario.gate_id)
    gate = ConditionGate(
        owner=scenario.owner,
        oracle=SequenceOracle(scenario.prices, name=f"{scenario.gate_id}:feed"),
        trigger_threshold=scenario.trigger_threshold,
        gate_id=scenario.gate_id,
        action=action,
        journal=journal,
    )

    run = ScenarioRun(scenario=scenario, gate=gate, action=action, journal=journal)
    for index, step in enumerate(scenario.steps, start=1):
        result = _run_step(gate, step)
        matched = _matches(step, result)
        if not matched:
            logger.warning(
                f"Scenario step {index} ({step.op}) expected {step.expect}: "
                f"{result.error or result.message}"
            )
        run.outcomes.append(StepOutcome(index=index, step=step, result=result, matched=matched))

    logger.info(
        f"Scenario '{scenario.name or scenario.gate_id}' finished: "
        f"{len(run.outcomes) - len(run.mismatches)}/{len(run.outcomes)} steps as expected"
    )
    return run
