"""
Tests for the ConditionGate state machine.

Validates that:
1. Only the owner can change the predicted value
2. Evaluation arms the gate only when both bounds are met
3. Arming publishes exactly one event; re-arming while armed publishes none
4. A trigger consumes the arming exactly once, before the action runs
5. Every rejected operation leaves state untouched
"""

import random
import threading

import pytest

from oracle_gate.core import (
    CallableOracle,
    CallbackAction,
    ConditionGate,
    ConditionNotMet,
    EvaluationOutcome,
    FixedOracle,
    GateState,
    InvalidValue,
    OracleUnavailable,
    RecordingAction,
    SequenceOracle,
    Unauthorized,
)

from tests.conftest import OWNER, THRESHOLD


class TestConstruction:
    """Construction parameters and initial state."""

    def test_initial_state_is_idle(self, gate):
        """A new gate is idle with predicted value 0."""
        assert gate.state == GateState.IDLE
        assert gate.condition_met is False
        assert gate.predicted_value == 0
        assert gate.trigger_threshold == THRESHOLD
        assert gate.owner == OWNER

    def test_missing_owner_raises(self, oracle):
        with pytest.raises(ValueError, match="owner"):
            ConditionGate(owner="", oracle=oracle, trigger_threshold=10)

    def test_missing_oracle_raises(self):
        with pytest.raises(TypeError, match="oracle"):
            ConditionGate(owner=OWNER, oracle=None, trigger_threshold=10)

    @pytest.mark.parametrize("threshold", [-1, 1.5, "1000", True, None])
    def test_invalid_threshold_raises(self, oracle, threshold):
        """Threshold must be a non-negative integer."""
        with pytest.raises(InvalidValue):
            ConditionGate(owner=OWNER, oracle=oracle, trigger_threshold=threshold)

    def test_zero_threshold_allowed(self, oracle):
        gate = ConditionGate(owner=OWNER, oracle=oracle, trigger_threshold=0)
        assert gate.trigger_threshold == 0

    def test_threshold_is_read_only(self, gate):
        with pytest.raises(AttributeError):
            gate.trigger_threshold = 5

    def test_gates_are_independent(self):
        """Two gates share no state."""
        a = ConditionGate(owner=OWNER, oracle=FixedOracle(2000), trigger_threshold=1000)
        b = ConditionGate(owner=OWNER, oracle=FixedOracle(2000), trigger_threshold=1000)

        a.evaluate_condition("keeper")

        assert a.condition_met is True
        assert b.condition_met is False
        assert len(b.events) == 0


class TestSetPredictedValue:
    """Owner-gated predicted value writes."""

    def test_owner_can_set(self, gate, journal):
        gate.set_predicted_value(OWNER, 1200)

        assert gate.predicted_value == 1200
        assert journal.of_type("predicted_set")[0]["value"] == 1200

    def test_non_owner_rejected(self, predicted_gate):
        """Scenario 4: non-owner write fails and the value stays 1200."""
        with pytest.raises(Unauthorized):
            predicted_gate.set_predicted_value("mallory", 900)

        assert predicted_gate.predicted_value == 1200

    @pytest.mark.parametrize("caller", ["mallory", "ALICE", "alice ", "", "bob"])
    def test_any_non_owner_never_changes_value(self, predicted_gate, caller):
        with pytest.raises(Unauthorized):
            predicted_gate.set_predicted_value(caller, 1)
        assert predicted_gate.predicted_value == 1200

    def test_unauthorized_checked_before_value(self, gate):
        """A non-owner with a bad value still gets Unauthorized."""
        with pytest.raises(Unauthorized):
            gate.set_predicted_value("mallory", -5)

    @pytest.mark.parametrize("value", [-1, 12.5, "1200", None, False])
    def test_invalid_value_rejected(self, predicted_gate, value):
        with pytest.raises(InvalidValue):
            predicted_gate.set_predicted_value(OWNER, value)
        assert predicted_gate.predicted_value == 1200

    def test_invalid_value_is_value_error(self, gate):
        with pytest.raises(ValueError):
            gate.set_predicted_value(OWNER, -1)

    def test_set_does_not_touch_flag_or_events(self, gate, oracle, bus):
        oracle.set_value(1500)
        gate.evaluate_condition("keeper")

        gate.set_predicted_value(OWNER, 10_000)

        assert gate.condition_met is True
        assert len(bus) == 1

    def test_huge_value_accepted(self, gate):
        gate.set_predicted_value(OWNER, 2**256 - 1)
        assert gate.predicted_value == 2**256 - 1

    def test_rejection_is_journaled(self, gate, journal):
        with pytest.raises(Unauthorized):
            gate.set_predicted_value("mallory", 1)

        rejected = journal.of_type("rejected")
        assert len(rejected) == 1
        assert rejected[0]["error_kind"] == "Unauthorized"
        assert rejected[0]["caller"] == "mallory"


class TestEvaluateCondition:
    """Oracle comparison and arming."""

    def test_qualifying_evaluation_arms(self, predicted_gate, oracle, bus):
        """Scenario 1: threshold 1000, predicted 1200, oracle 1500 arms and emits."""
        oracle.set_value(1500)

        result = predicted_gate.evaluate_condition("keeper")

        assert result.outcome == EvaluationOutcome.ARMED
        assert result.armed_now
        assert predicted_gate.condition_met is True
        events = bus.poll()
        assert len(events) == 1
        assert events[0].caller == "keeper"
        assert events[0].observed_value == 1500
        assert events[0].gate_id == "test-gate"
        assert result.event == events[0]

    def test_below_predicted_does_not_arm(self, predicted_gate, oracle, bus):
        """Scenario 2: oracle 1100 is below predicted 1200."""
        oracle.set_value(1100)

        result = predicted_gate.evaluate_condition("keeper")

        assert result.outcome == EvaluationOutcome.NOT_QUALIFIED
        assert predicted_gate.condition_met is False
        assert len(bus) == 0

    def test_below_threshold_does_not_arm(self, gate, oracle):
        """Predicted 0 is met but threshold 1000 is not."""
        gate.set_predicted_value(OWNER, 500)
        oracle.set_value(900)

        assert gate.evaluate_condition("keeper").qualified is False
        assert gate.condition_met is False

    def test_equal_to_both_bounds_arms(self, gate, oracle):
        gate.set_predicted_value(OWNER, 1000)
        oracle.set_value(1000)

        assert gate.evaluate_condition("keeper").armed_now

    def test_default_predicted_zero_uses_threshold_only(self, gate, oracle):
        oracle.set_value(THRESHOLD)
        assert gate.evaluate_condition("keeper").armed_now

    def test_uses_current_predicted_value(self, gate, oracle):
        """Comparison uses the value stored at call time."""
        oracle.set_value(1300)
        gate.set_predicted_value(OWNER, 1400)
        assert gate.evaluate_condition("keeper").qualified is False

        gate.set_predicted_value(OWNER, 1250)
        assert gate.evaluate_condition("keeper").armed_now

    def test_already_armed_does_not_reemit(self, predicted_gate, oracle, bus):
        oracle.set_value(1500)
        predicted_gate.evaluate_condition("keeper")

        oracle.set_value(1700)
        result = predicted_gate.evaluate_condition("other-keeper")

        assert result.outcome == EvaluationOutcome.ALREADY_ARMED
        assert result.event is None
        assert predicted_gate.condition_met is True
        assert len(bus) == 1
        assert bus.poll()[0].observed_value == 1500

    def test_non_qualifying_never_resets_flag(self, predicted_gate, oracle):
        oracle.set_value(1500)
        predicted_gate.evaluate_condition("keeper")

        oracle.set_value(10)
        result = predicted_gate.evaluate_condition("keeper")

        assert result.outcome == EvaluationOutcome.NOT_QUALIFIED
        assert result.condition_met is True
        assert predicted_gate.condition_met is True

    def test_reads_oracle_exactly_once(self, predicted_gate, oracle):
        oracle.set_value(1500)
        predicted_gate.evaluate_condition("keeper")
        assert oracle.reads == 1

    def test_evaluation_never_changes_predicted_value(self, predicted_gate, oracle):
        for value in (0, 1199, 1200, 5000):
            oracle.set_value(value)
            predicted_gate.evaluate_condition("keeper")
        assert predicted_gate.predicted_value == 1200

    def test_oracle_exception_becomes_unavailable(self, predicted_gate, oracle, journal):
        """No value published: FixedOracle raises, gate reports OracleUnavailable."""
        with pytest.raises(OracleUnavailable):
            predicted_gate.evaluate_condition("keeper")

        assert predicted_gate.condition_met is False
        assert predicted_gate.predicted_value == 1200
        assert journal.of_type("rejected")[0]["error_kind"] == "OracleUnavailable"
        assert journal.of_type("evaluation") == []

    def test_oracle_failure_keeps_armed_state(self, predicted_gate, oracle, bus):
        oracle.set_value(1500)
        predicted_gate.evaluate_condition("keeper")
        oracle.set_value(None)

        with pytest.raises(OracleUnavailable):
            predicted_gate.evaluate_condition("keeper")

        assert predicted_gate.condition_met is True
        assert len(bus) == 1

    @pytest.mark.parametrize("bad", [None, "1500", 15.0, True])
    def test_unusable_oracle_value(self, bad):
        gate = ConditionGate(
            owner=OWNER,
            oracle=CallableOracle(lambda: bad, name="bad"),
            trigger_threshold=0,
        )
        with pytest.raises(OracleUnavailable, match="oracle=bad"):
            gate.evaluate_condition("keeper")
        assert gate.condition_met is False

    def test_exhausted_feed(self):
        gate = ConditionGate(owner=OWNER, oracle=SequenceOracle([2000]), trigger_threshold=1000)
        gate.evaluate_condition("keeper")
        gate.trigger_action("bob")

        with pytest.raises(OracleUnavailable):
            gate.evaluate_condition("keeper")
        assert gate.condition_met is False


class TestTriggerAction:
    """Consuming the armed condition."""

    def test_trigger_when_idle_fails(self, gate, action, journal):
        with pytest.raises(ConditionNotMet):
            gate.trigger_action("bob")

        assert action.count == 0
        assert gate.condition_met is False
        assert journal.of_type("trigger") == []

    def test_trigger_fires_once_and_resets(self, predicted_gate, oracle, action):
        """Scenario 3: any caller triggers once; the second trigger fails."""
        oracle.set_value(1500)
        predicted_gate.evaluate_condition("keeper")

        result = predicted_gate.trigger_action("bob")

        assert result.caller == "bob"
        assert action.count == 1
        assert action.calls[0]["caller"] == "bob"
        assert predicted_gate.condition_met is False
        assert predicted_gate.state == GateState.IDLE

        with pytest.raises(ConditionNotMet):
            predicted_gate.trigger_action("bob")
        assert action.count == 1

    def test_trigger_needs_no_ownership(self, predicted_gate, oracle, action):
        oracle.set_value(1500)
        predicted_gate.evaluate_condition("keeper")

        predicted_gate.trigger_action("total-stranger")

        assert action.count == 1

    def test_action_result_is_returned(self, oracle):
        oracle.set_value(5)
        gate = ConditionGate(
            owner=OWNER,
            oracle=oracle,
            trigger_threshold=0,
            action=CallbackAction(lambda caller: f"paid:{caller}"),
        )
        gate.evaluate_condition("keeper")

        assert gate.trigger_action("bob").action_result == "paid:bob"

    def test_flag_cleared_before_action_runs(self, oracle):
        seen = []
        oracle.set_value(5)
        gate = None

        def _observe(caller):
            seen.append(gate.condition_met)

        gate = ConditionGate(owner=OWNER, oracle=oracle, trigger_threshold=0, action=CallbackAction(_observe))
        gate.evaluate_condition("keeper")
        gate.trigger_action("bob")

        assert seen == [False]

    def test_reentrant_trigger_from_action_fails(self, oracle):
        """The action cannot consume the same arming twice."""
        inner_errors = []
        fired = RecordingAction()
        oracle.set_value(5)
        gate = None

        def _reenter(caller):
            fired.execute(caller)
            try:
                gate.trigger_action(caller)
            except ConditionNotMet as e:
                inner_errors.append(e)

        gate = ConditionGate(owner=OWNER, oracle=oracle, trigger_threshold=0, action=CallbackAction(_reenter))
        gate.evaluate_condition("keeper")
        gate.trigger_action("bob")

        assert fired.count == 1
        assert len(inner_errors) == 1

    def test_action_failure_propagates_and_consumes(self, oracle):
        oracle.set_value(5)

        def _boom(caller):
            raise RuntimeError("downstream failed")

        gate = ConditionGate(owner=OWNER, oracle=oracle, trigger_threshold=0, action=CallbackAction(_boom))
        gate.evaluate_condition("keeper")

        with pytest.raises(RuntimeError, match="downstream failed"):
            gate.trigger_action("bob")
        assert gate.condition_met is False

    def test_rearm_after_trigger_emits_again(self, predicted_gate, oracle, bus):
        oracle.set_value(1500)
        predicted_gate.evaluate_condition("keeper")
        predicted_gate.trigger_action("bob")

        oracle.set_value(1600)
        result = predicted_gate.evaluate_condition("carol")

        assert result.armed_now
        events = bus.poll()
        assert [e.seq for e in events] == [1, 2]
        assert events[1].caller == "carol"
        assert events[1].observed_value == 1600


class TestSubscriberDelivery:
    """Subscribers run after the evaluation that armed the gate has finished."""

    def test_subscriber_trigger_runs_after_evaluation(self, predicted_gate, oracle, action, journal, bus):
        seen = []

        def _trigger_on_event(event):
            seen.append((event.seq, predicted_gate.condition_met))
            predicted_gate.trigger_action("sub")

        bus.subscribe(_trigger_on_event)
        oracle.set_value(1500)
        result = predicted_gate.evaluate_condition("keeper")

        assert result.outcome == EvaluationOutcome.ARMED
        assert result.condition_met is True
        assert result.event.seq == 1
        assert seen == [(1, True)]
        assert action.count == 1
        assert predicted_gate.condition_met is False
        events = [r["event"] for r in journal.records if r["event"] != "predicted_set"]
        assert events == ["evaluation", "condition_met", "trigger"]

    def test_subscriber_runs_outside_gate_lock(self, predicted_gate, oracle, bus):
        """Another thread can use the gate while a subscriber is still running."""
        other_thread = []

        def _query_from_thread(event):
            worker = threading.Thread(target=lambda: other_thread.append(predicted_gate.snapshot()))
            worker.start()
            worker.join(timeout=5)

        bus.subscribe(_query_from_thread)
        oracle.set_value(1500)
        predicted_gate.evaluate_condition("keeper")

        assert len(other_thread) == 1
        assert other_thread[0].condition_met is True

    def test_event_pollable_before_delivery(self, predicted_gate, oracle, bus):
        polled = []
        bus.subscribe(lambda event: polled.extend(bus.poll()))
        oracle.set_value(1500)
        predicted_gate.evaluate_condition("keeper")

        assert [e.seq for e in polled] == [1]


class TestSnapshot:

    def test_snapshot_reflects_state(self, predicted_gate, oracle):
        oracle.set_value(1500)
        predicted_gate.evaluate_condition("keeper")

        snap = predicted_gate.snapshot()

        assert snap.owner == OWNER
        assert snap.predicted_value == 1200
        assert snap.trigger_threshold == THRESHOLD
        assert snap.condition_met is True
        assert snap.to_dict()["state"] == "armed"

    def test_repr_mentions_state(self, gate):
        assert "state=idle" in repr(gate)


class TestInvariants:
    """Randomized operation sequences checked against a reference model."""

    @pytest.mark.parametrize("seed", range(20))
    def test_flag_tracks_last_qualifying_evaluation(self, seed):
        rng = random.Random(seed)
        oracle = FixedOracle(0)
        action = RecordingAction()
        gate = ConditionGate(owner=OWNER, oracle=oracle, trigger_threshold=500, action=action)

        model_flag = False
        model_predicted = 0
        model_events = 0
        model_actions = 0

        for _ in range(200):
            op = rng.choice(["set_owner", "set_other", "evaluate", "evaluate", "trigger", "fail"])
            if op == "set_owner":
                model_predicted = rng.randint(0, 1000)
                gate.set_predicted_value(OWNER, model_predicted)
            elif op == "set_other":
                with pytest.raises(Unauthorized):
                    gate.set_predicted_value("mallory", rng.randint(0, 1000))
            elif op == "evaluate":
                observed = rng.randint(0, 1200)
                oracle.set_value(observed)
                gate.evaluate_condition("keeper")
                if observed >= model_predicted and observed >= 500 and not model_flag:
                    model_flag = True
                    model_events += 1
            elif op == "trigger":
                if model_flag:
                    gate.trigger_action("bob")
                    model_flag = False
                    model_actions += 1
                else:
                    with pytest.raises(ConditionNotMet):
                        gate.trigger_action("bob")
            else:
                oracle.set_value(None)
                with pytest.raises(OracleUnavailable):
                    gate.evaluate_condition("keeper")

            assert gate.condition_met == model_flag
            assert gate.predicted_value == model_predicted
            assert gate.trigger_threshold == 500
            assert len(gate.events) == model_events
            assert action.count == model_actions

    def test_concurrent_triggers_fire_once(self, oracle, action):
        oracle.set_value(5)
        gate = ConditionGate(owner=OWNER, oracle=oracle, trigger_threshold=0, action=action)
        gate.evaluate_condition("keeper")

        outcomes = []
        barrier = threading.Barrier(8)

        def _worker(i):
            barrier.wait()
            try:
                gate.trigger_action(f"caller-{i}")
                outcomes.append("ok")
            except ConditionNotMet:
                outcomes.append("rejected")

        threads = [threading.Thread(target=_worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("ok") == 1
        assert outcomes.count("rejected") == 7
        assert action.count == 1
