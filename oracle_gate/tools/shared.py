"""
Shared types for the tools layer.

This module provides:
- ToolResult: Standard return type for all tools
- gate_error_result: Conversion of gate rejections into failed results

All tools should import ToolResult from this module.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

from ..core.errors import GateError


@dataclass
class ToolResult:
    """
    Standard return type for all tools.

    Attributes:
        success: Whether the operation succeeded
        message: Human-readable success/info message
        gate_id: Gate the tool operated on
        data: Structured data payload (state snapshot, event info, etc.)
        error: Error message if success=False
    """
    success: bool
    message: str = ""
    gate_id: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def error_kind(self) -> Optional[str]:
        if self.data:
            return self.data.get("error_kind")
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def gate_error_result(gate_id: str, error: GateError, snapshot: Optional[Dict[str, Any]] = None) -> ToolResult:
    """Build a failed ToolResult from a gate rejection."""
    data: Dict[str, Any] = {"error_kind": error.kind}
    if snapshot is not None:
        data["state"] = snapshot
    return ToolResult(
        success=False,
        gate_id=gate_id,
        error=str(error),
        data=data,
    )
