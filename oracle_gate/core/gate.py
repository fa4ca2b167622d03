"""
Condition Gate.

Tracks an oracle value against two lower bounds and arms a one-shot flag.

State Flow:
    IDLE  -> ARMED  (evaluate, observed >= predicted and observed >= threshold)
    ARMED -> ARMED  (evaluate, any outcome; no new event)
    IDLE  -> IDLE   (evaluate, not qualifying)
    ARMED -> IDLE   (trigger)

Rules:
- Only the owner may change the predicted value.
- Evaluation never clears the flag; only a trigger does.
- A trigger clears the flag before the downstream action runs, so the
  action cannot consume the same arming twice.
- Every rejected call leaves state untouched.

Each instance serializes its operations with a re-entrant lock, which
gives the same one-at-a-time ordering a hosting ledger would.
"""

from __future__ import annotations

import threading
from typing import Any

from ..utils.logger import get_logger
from .action import ActionHandler, NoopAction
from .auth import Authorizer, OwnerAuthorizer
from .errors import ConditionNotMet, GateError, InvalidValue, OracleUnavailable, Unauthorized
from .events import EventBus
from .journal import BaseJournal
from .oracle import OraclePort, read_oracle
from .types import (
    ConditionMetEvent,
    EvaluationOutcome,
    EvaluationResult,
    GateSnapshot,
    GateState,
    TriggerResult,
)

logger = get_logger()


def _require_non_negative_int(field: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidValue(field, value)
    return value


class ConditionGate:
    """
    Single-owner conditional-action gate.

    Args:
        owner: Identity allowed to set the predicted value
        oracle: Source of observed values
        trigger_threshold: Immutable lower bound for the observed value
        gate_id: Name used in logs, events and journal records
        authorizer: Ownership policy (defaults to exact match on owner)
        event_bus: Receives ConditionMetEvent on each arming
        action: Downstream effect run by trigger_action
        journal: Optional operation journal
    """

    def __init__(
        self,
        owner: str,
        oracle: OraclePort,
        trigger_threshold: int,
        *,
        gate_id: str = "gate",
        authorizer: Authorizer | None = None,
        event_bus: EventBus | None = None,
        action: ActionHandler | None = None,
        journal: BaseJournal | None = None,
    ):
        if not owner:
            raise ValueError("owner identity is required")
        if oracle is None or not callable(getattr(oracle, "get_latest_value", None)):
            raise TypeError("oracle must provide get_latest_value()")

        self._owner = owner
        self._oracle = oracle
        self._trigger_threshold = _require_non_negative_int("trigger_threshold", trigger_threshold)
        self._gate_id = gate_id
        self._authorizer = authorizer or OwnerAuthorizer(owner)
        self._bus = event_bus or EventBus()
        self._action = action or NoopAction()
        self._journal = journal

        self._predicted_value = 0
        self._condition_met = False
        self._lock = threading.RLock()

        logger.debug(
            f"ConditionGate created | gate={gate_id} | owner={owner} | "
            f"threshold={self._trigger_threshold}"
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def gate_id(self) -> str:
        return self._gate_id

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def predicted_value(self) -> int:
        with self._lock:
            return self._predicted_value

    @property
    def trigger_threshold(self) -> int:
        return self._trigger_threshold

    @property
    def condition_met(self) -> bool:
        with self._lock:
            return self._condition_met

    @property
    def state(self) -> GateState:
        return GateState.ARMED if self.condition_met else GateState.IDLE

    @property
    def events(self) -> EventBus:
        return self._bus

    def snapshot(self) -> GateSnapshot:
        """Consistent read of all gate state."""
        with self._lock:
            return GateSnapshot(
                gate_id=self._gate_id,
                owner=self._owner,
                predicted_value=self._predicted_value,
                trigger_threshold=self._trigger_threshold,
                condition_met=self._condition_met,
            )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def set_predicted_value(self, caller: str, value: int) -> None:
        """
        Overwrite the predicted value (owner only).

        Raises:
            Unauthorized: caller is not the owner
            InvalidValue: value is not a non-negative integer
        """
        with self._lock:
            try:
                if not self._authorizer.is_owner(caller):
                    raise Unauthorized(caller, "set_predicted_value")
                value = _require_non_negative_int("predicted_value", value)
            except GateError as e:
                self._reject("set_predicted_value", e, caller)
                raise

            previous = self._predicted_value
            self._predicted_value = value

            logger.transition("PREDICTED_SET", self._gate_id, caller=caller, value=value, previous=previous)
            if self._journal is not None:
                self._journal.record_predicted_set(caller, value, previous)

    def evaluate_condition(self, caller: str) -> EvaluationResult:
        """
        Read the oracle once and arm the gate if the reading qualifies.

        A reading qualifies when it meets both the predicted value and the
        trigger threshold as stored at the time of the call. Only the
        Idle -> Armed transition publishes an event. Subscribers are called
        after the evaluation is logged, journaled and the lock released.

        Raises:
            OracleUnavailable: oracle read failed; state unchanged
        """
        result = self._evaluate_locked(caller)
        if result.event is not None:
            self._bus.deliver(result.event)
        return result

    def _evaluate_locked(self, caller: str) -> EvaluationResult:
        with self._lock:
            try:
                observed = read_oracle(self._oracle)
            except OracleUnavailable as e:
                self._reject("evaluate_condition", e, caller)
                raise

            qualifies = observed >= self._predicted_value and observed >= self._trigger_threshold
            event = None

            if not qualifies:
                outcome = EvaluationOutcome.NOT_QUALIFIED
            elif self._condition_met:
                outcome = EvaluationOutcome.ALREADY_ARMED
            else:
                self._condition_met = True
                outcome = EvaluationOutcome.ARMED
                event = self._bus.record(ConditionMetEvent(
                    caller=caller,
                    observed_value=observed,
                    gate_id=self._gate_id,
                ))

            result = EvaluationResult(
                outcome=outcome,
                observed_value=observed,
                predicted_value=self._predicted_value,
                trigger_threshold=self._trigger_threshold,
                condition_met=self._condition_met,
                event=event,
            )

            if outcome == EvaluationOutcome.ARMED:
                logger.transition("ARMED", self._gate_id, caller=caller, observed=observed, seq=event.seq)
            else:
                logger.debug(
                    f"[EVALUATED] | gate={self._gate_id} | caller={caller} | "
                    f"observed={observed} | outcome={outcome.value}"
                )
            if self._journal is not None:
                self._journal.record_evaluation(caller, result)

            return result

    def trigger_action(self, caller: str) -> TriggerResult:
        """
        Consume the armed condition and run the downstream action.

        Any caller may trigger. The flag is cleared before the action runs;
        if the action raises, the error propagates and the arming stays
        consumed.

        Raises:
            ConditionNotMet: the gate is not armed
        """
        with self._lock:
            if not self._condition_met:
                error = ConditionNotMet(caller)
                self._reject("trigger_action", error, caller)
                raise error

            self._condition_met = False

            logger.transition("TRIGGERED", self._gate_id, caller=caller)
            if self._journal is not None:
                self._journal.record_trigger(caller)

            action_result = self._action.execute(caller)
            return TriggerResult(caller=caller, action_result=action_result)

    def _reject(self, operation: str, error: GateError, caller: str | None) -> None:
        logger.rejected(error.kind, str(error), gate=self._gate_id, operation=operation)
        if self._journal is not None:
            self._journal.record_rejected(operation, error.kind, caller, str(error))

    def __repr__(self) -> str:
        snap = self.snapshot()
        return (
            f"ConditionGate(gate_id={snap.gate_id!r}, owner={snap.owner!r}, "
            f"predicted={snap.predicted_value}, threshold={snap.trigger_threshold}, "
            f"state={snap.state.value})"
        )
