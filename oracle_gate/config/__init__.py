"""
Configuration management.
"""

from .config import (
    Config,
    get_config,
    GateConfig,
    LogConfig,
    JournalConfig,
)

__all__ = [
    "Config",
    "get_config",
    "GateConfig",
    "LogConfig",
    "JournalConfig",
]
