"""
Configuration management for the oracle gate.
Loads settings from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from typing import List, Optional
from pathlib import Path
from dotenv import load_dotenv


@dataclass
class GateConfig:
    """
    Condition gate construction parameters.

    The owner and trigger threshold have no defaults that make sense in
    production: GATE_OWNER and GATE_TRIGGER_THRESHOLD must be set before a
    gate is built from configuration. GATE_PREDICTED_VALUE, when present,
    is applied once by the owner right after construction.
    """
    gate_id: str = "gate-0"
    owner: str = ""
    trigger_threshold: Optional[int] = None
    predicted_value: Optional[int] = None

    def has_owner(self) -> bool:
        return bool(self.owner.strip())


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_dir: str = "logs"


@dataclass
class JournalConfig:
    """JSONL journal configuration."""
    enabled: bool = False
    journal_dir: str = "data/journal"


def _parse_optional_int(raw: Optional[str], name: str) -> Optional[int]:
    """Parse an optional integer env value, raising on garbage."""
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


class Config:
    """
    Central configuration manager.

    Loads configuration from environment variables and provides
    typed access to all settings.
    """

    _instance: Optional['Config'] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, env_file: str = ".env"):
        if self._initialized:
            return

        # Later files override earlier ones
        for env_name in [".env", env_file]:
            env_path = Path(env_name)
            if env_path.exists():
                load_dotenv(env_path, override=True)

        self.gate = self._load_gate_config()
        self.log = self._load_log_config()
        self.journal = self._load_journal_config()

        self._initialized = True

    def _load_gate_config(self) -> GateConfig:
        """Load gate construction parameters from environment."""
        return GateConfig(
            gate_id=os.getenv("GATE_ID", "gate-0"),
            owner=os.getenv("GATE_OWNER", ""),
            trigger_threshold=_parse_optional_int(
                os.getenv("GATE_TRIGGER_THRESHOLD"), "GATE_TRIGGER_THRESHOLD"
            ),
            predicted_value=_parse_optional_int(
                os.getenv("GATE_PREDICTED_VALUE"), "GATE_PREDICTED_VALUE"
            ),
        )

    def _load_log_config(self) -> LogConfig:
        """Load logging configuration from environment."""
        return LogConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=os.getenv("LOG_DIR", "logs"),
        )

    def _load_journal_config(self) -> JournalConfig:
        """Load journal configuration from environment."""
        return JournalConfig(
            enabled=os.getenv("GATE_JOURNAL_ENABLED", "false").lower() == "true",
            journal_dir=os.getenv("GATE_JOURNAL_DIR", "data/journal"),
        )

    def validate(self) -> tuple[bool, List[str]]:
        """
        Validate configuration.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        messages = []

        if not self.gate.has_owner():
            messages.append("ERROR: GATE_OWNER is not set")

        if self.gate.trigger_threshold is None:
            messages.append("ERROR: GATE_TRIGGER_THRESHOLD is not set")
        elif self.gate.trigger_threshold < 0:
            messages.append(
                f"ERROR: GATE_TRIGGER_THRESHOLD must be non-negative, got {self.gate.trigger_threshold}"
            )

        if self.gate.predicted_value is not None and self.gate.predicted_value < 0:
            messages.append(
                f"ERROR: GATE_PREDICTED_VALUE must be non-negative, got {self.gate.predicted_value}"
            )

        if self.log.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            messages.append(f"ERROR: LOG_LEVEL '{self.log.level}' is not a valid level")

        return len(messages) == 0, messages

    def summary(self) -> str:
        """Generate a configuration summary string."""
        threshold = self.gate.trigger_threshold
        predicted = self.gate.predicted_value
        lines = [
            "=" * 45,
            "Oracle Gate Configuration",
            "=" * 45,
            f"Gate ID:           {self.gate.gate_id}",
            f"Owner:             {self.gate.owner or '(not set)'}",
            f"Trigger threshold: {threshold if threshold is not None else '(not set)'}",
            f"Predicted value:   {predicted if predicted is not None else '(default 0)'}",
            f"Log level:         {self.log.level}",
            f"Log dir:           {self.log.log_dir}",
            f"Journal:           {'enabled' if self.journal.enabled else 'disabled'} ({self.journal.journal_dir})",
            "=" * 45,
        ]
        return "\n".join(lines)


def get_config(env_file: str = ".env") -> Config:
    """Get or create the global config instance."""
    return Config(env_file)
