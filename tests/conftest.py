"""
Pytest configuration for gate tests.
"""

import os

import pytest

from oracle_gate.config.config import Config
from oracle_gate.core import (
    ConditionGate,
    EventBus,
    FixedOracle,
    MemoryJournal,
    RecordingAction,
)

OWNER = "alice"
THRESHOLD = 1000


@pytest.fixture
def oracle() -> FixedOracle:
    """Oracle with no published value yet."""
    return FixedOracle(name="test-oracle")


@pytest.fixture
def action() -> RecordingAction:
    return RecordingAction()


@pytest.fixture
def journal() -> MemoryJournal:
    return MemoryJournal("test-gate")


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def gate(oracle, action, journal, bus) -> ConditionGate:
    """Gate owned by alice with threshold 1000, predicted value still 0."""
    return ConditionGate(
        owner=OWNER,
        oracle=oracle,
        trigger_threshold=THRESHOLD,
        gate_id="test-gate",
        event_bus=bus,
        action=action,
        journal=journal,
    )


@pytest.fixture
def predicted_gate(gate) -> ConditionGate:
    """Gate with predicted value 1200 set by the owner."""
    gate.set_predicted_value(OWNER, 1200)
    return gate


CONFIG_ENV_VARS = (
    "GATE_ID", "GATE_OWNER", "GATE_TRIGGER_THRESHOLD", "GATE_PREDICTED_VALUE",
    "GATE_JOURNAL_ENABLED", "GATE_JOURNAL_DIR", "LOG_LEVEL", "LOG_DIR",
)


@pytest.fixture
def clean_config(monkeypatch, tmp_path):
    """Fresh Config singleton with no gate env vars, run from an empty directory."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    Config._instance = None
    yield tmp_path
    Config._instance = None
    # load_dotenv writes straight into os.environ; monkeypatch restores originals afterwards
    for name in CONFIG_ENV_VARS:
        os.environ.pop(name, None)
