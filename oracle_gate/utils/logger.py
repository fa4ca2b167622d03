"""
Logging system for the oracle gate.
Provides structured, human-readable logs with file and console output.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

# ANSI color codes for terminal output
class Colors:
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    BOLD = "\033[1m"


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record):
        # Work on a copy so file handlers never see the escape codes
        colored = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored.levelname = f"{color}{record.levelname}{Colors.RESET}"
        colored.msg = f"{color}{record.getMessage()}{Colors.RESET}"
        colored.args = None
        return super().format(colored)


class GateLogger:
    """
    Central logging system for condition gates.

    Features:
    - Console output with colors
    - Daily log files
    - Separate log files for gate events and errors
    - Structured key=value lines for easy parsing
    """

    _instance: Optional['GateLogger'] = None
    _initialized: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_dir: str = "logs", log_level: str = "INFO"):
        if GateLogger._initialized:
            return

        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = self._create_logger("gate", log_level)
        self.event_logger = self._create_logger("gate.events", log_level, "events")
        self.error_logger = self._create_logger("gate.errors", "ERROR", "errors")

        GateLogger._initialized = True

    def _create_logger(self, name: str, level: str, file_prefix: str = None) -> logging.Logger:
        """Create a configured logger instance."""
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        logger.handlers.clear()

        # Child loggers write their own files; keep them off the parent's console
        if "." in name:
            logger.propagate = False

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(ColoredFormatter(
            "%(asctime)s | %(levelname)s | %(message)s",
            datefmt="%H:%M:%S"
        ))
        logger.addHandler(console_handler)

        if file_prefix:
            log_file = self.log_dir / f"{file_prefix}_{datetime.now().strftime('%Y%m%d')}.log"
        else:
            log_file = self.log_dir / f"gate_{datetime.now().strftime('%Y%m%d')}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(file_handler)

        return logger

    def info(self, msg: str, *args, **kwargs):
        """Log info message."""
        self.main_logger.info(msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        """Log debug message."""
        self.main_logger.debug(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        """Log warning message."""
        self.main_logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        """Log error message."""
        self.main_logger.error(msg, *args, **kwargs)
        self.error_logger.error(msg, *args, **kwargs)

    def transition(self, action: str, gate_id: str, **kwargs):
        """
        Log a gate state transition with structured format.

        Args:
            action: PREDICTED_SET, ARMED, EVALUATED, TRIGGERED
            gate_id: Identifier of the gate instance
            **kwargs: Additional fields (caller, observed, ...)
        """
        parts = [f"[{action}]", f"gate={gate_id}"]
        for key, value in kwargs.items():
            parts.append(f"{key}={value}")

        msg = " | ".join(parts)
        self.event_logger.info(msg)
        self.main_logger.info(msg)

    def rejected(self, kind: str, reason: str, **kwargs):
        """
        Log a rejected gate operation.

        Args:
            kind: Error kind (Unauthorized, ConditionNotMet, OracleUnavailable, ...)
            reason: Human-readable reason
            **kwargs: Additional context
        """
        parts = [f"[GATE:REJECTED:{kind}]", reason]
        for key, value in kwargs.items():
            parts.append(f"{key}={value}")

        self.main_logger.warning(" | ".join(parts))


# Global logger instance
_logger: Optional[GateLogger] = None


def get_logger(log_dir: str = "logs", log_level: str = "INFO") -> GateLogger:
    """Get or create the global logger instance."""
    global _logger
    if _logger is None:
        _logger = GateLogger(log_dir, log_level)
    return _logger


def setup_logger(log_dir: str = "logs", log_level: str = "INFO") -> GateLogger:
    """Initialize the logger with custom settings."""
    global _logger
    GateLogger._initialized = False
    GateLogger._instance = None
    _logger = GateLogger(log_dir, log_level)
    return _logger
