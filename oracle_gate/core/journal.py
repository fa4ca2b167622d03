"""
Gate journal for persistent operation logging.

Writes gate events as JSONL (one JSON object per line) for post-analysis.
Each line is a complete JSON object with event type, timestamp, and details.

Journal files are stored at {journal_dir}/{gate_id}.jsonl
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from ..utils.logger import get_logger
from .types import EvaluationResult

logger = get_logger()


class BaseJournal(ABC):
    """
    Builds journal records; subclasses decide where they go.

    Record types:
    - predicted_set: caller, value, previous
    - evaluation: caller, observed, predicted, threshold, outcome
    - condition_met: caller, observed, seq
    - trigger: caller
    - rejected: operation, error_kind, caller, reason
    """

    def __init__(self, gate_id: str):
        self._gate_id = gate_id

    def record_predicted_set(self, caller: str, value: int, previous: int) -> None:
        """Record an owner write of the predicted value."""
        self._write(self._base("predicted_set", {
            "caller": caller,
            "value": value,
            "previous": previous,
        }))

    def record_evaluation(self, caller: str, result: EvaluationResult) -> None:
        """Record an evaluation, and the condition_met event when it armed the gate."""
        self._write(self._base("evaluation", {
            "caller": caller,
            "observed": result.observed_value,
            "predicted": result.predicted_value,
            "threshold": result.trigger_threshold,
            "outcome": result.outcome.value,
        }))
        if result.event is not None:
            self._write(self._base("condition_met", {
                "caller": result.event.caller,
                "observed": result.event.observed_value,
                "seq": result.event.seq,
            }))

    def record_trigger(self, caller: str) -> None:
        """Record a consumed trigger."""
        self._write(self._base("trigger", {"caller": caller}))

    def record_rejected(self, operation: str, error_kind: str, caller: str | None, reason: str) -> None:
        """Record a rejected operation."""
        self._write(self._base("rejected", {
            "operation": operation,
            "error_kind": error_kind,
            "caller": caller,
            "reason": reason,
        }))

    def _base(self, event: str, fields: dict) -> dict:
        data = {
            "event": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "gate_id": self._gate_id,
        }
        data.update(fields)
        return data

    @abstractmethod
    def _write(self, data: dict) -> None:
        """Persist one record."""
        ...


class GateJournal(BaseJournal):
    """Persistent gate journal writing JSONL files."""

    def __init__(self, gate_id: str, journal_dir: str | Path = "data/journal"):
        super().__init__(gate_id)
        self._journal_dir = Path(journal_dir)
        self._journal_dir.mkdir(parents=True, exist_ok=True)
        self._path = self._journal_dir / f"{gate_id}.jsonl"
        logger.info(f"GateJournal initialized: {self._path}")

    def _write(self, data: dict) -> None:
        """Append a JSON line to the journal file."""
        try:
            with open(self._path, "a", encoding="utf-8", newline="\n") as f:
                f.write(json.dumps(data, default=str) + "\n")
        except OSError as e:
            logger.warning(f"Failed to write journal entry: {e}")

    @property
    def path(self) -> Path:
        """Path to the journal file."""
        return self._path


class MemoryJournal(BaseJournal):
    """In-memory journal keeping records in a list."""

    def __init__(self, gate_id: str = ""):
        super().__init__(gate_id)
        self.records: list[dict] = []

    def _write(self, data: dict) -> None:
        self.records.append(data)

    def of_type(self, event: str) -> list[dict]:
        return [r for r in self.records if r["event"] == event]
