"""
Pydantic models for the stitch work system.

This module provides:
- Pattern: Read-only pattern tree (sections, rows, instructions)
- WorkSession: One account's traversal of one pattern
- WorkProgress: The persisted cursor of a session
- WorkDisplayState: What the work view shows
- StitchUnit: One step of a row's flattened sequence
"""

from chuk_mcp_stitch.models.pattern import (
    Instruction,
    Pattern,
    PatternSection,
    Row,
)
from chuk_mcp_stitch.models.progress import (
    SessionSummary,
    StitchUnit,
    WorkDisplayState,
    WorkProgress,
    WorkSession,
)

__all__ = [
    "Instruction",
    "Pattern",
    "PatternSection",
    "Row",
    "SessionSummary",
    "StitchUnit",
    "WorkDisplayState",
    "WorkProgress",
    "WorkSession",
]
