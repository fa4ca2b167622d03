"""
ConditionGate factory.

Builds gates from the environment-backed Config so that the CLI and host
processes share one construction path:
- owner and trigger threshold come from GATE_OWNER / GATE_TRIGGER_THRESHOLD
- GATE_PREDICTED_VALUE, if set, is applied by the owner after construction
- GATE_JOURNAL_ENABLED attaches a JSONL journal under GATE_JOURNAL_DIR

Usage:
    from oracle_gate.core import build_gate_from_config, FixedOracle

    gate = build_gate_from_config(oracle=FixedOracle(1500))
"""

from __future__ import annotations

from ..config.config import Config, get_config
from ..utils.logger import get_logger
from .action import ActionHandler
from .events import EventBus
from .gate import ConditionGate
from .journal import BaseJournal, GateJournal
from .oracle import OraclePort

logger = get_logger()


def build_gate_from_config(
    oracle: OraclePort,
    config: Config | None = None,
    *,
    action: ActionHandler | None = None,
    event_bus: EventBus | None = None,
    journal: BaseJournal | None = None,
) -> ConditionGate:
    """
    Create a ConditionGate from configuration.

    Args:
        oracle: Oracle the gate will read
        config: Config instance (defaults to the global config)
        action: Downstream action handler
        event_bus: Event bus to publish on
        journal: Explicit journal; overrides GATE_JOURNAL_ENABLED

    Raises:
        ValueError: If the configuration is invalid
    """
    config = config or get_config()
    is_valid, messages = config.validate()
    if not is_valid:
        raise ValueError("Invalid gate configuration:\n  " + "\n  ".join(messages))

    gate_cfg = config.gate
    if journal is None and config.journal.enabled:
        journal = GateJournal(gate_cfg.gate_id, config.journal.journal_dir)

    gate = ConditionGate(
        owner=gate_cfg.owner,
        oracle=oracle,
        trigger_threshold=gate_cfg.trigger_threshold,
        gate_id=gate_cfg.gate_id,
        event_bus=event_bus,
        action=action,
        journal=journal,
    )

    if gate_cfg.predicted_value is not None:
        gate.set_predicted_value(gate_cfg.owner, gate_cfg.predicted_value)

    logger.info(f"Gate built from config: {gate!r}")
    return gate
