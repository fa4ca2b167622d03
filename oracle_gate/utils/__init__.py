"""
Utility modules.
"""

from .logger import get_logger, setup_logger, GateLogger

__all__ = [
    "get_logger",
    "setup_logger",
    "GateLogger",
]
