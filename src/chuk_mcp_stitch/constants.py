"""
Constants and enums for the stitch work system.

No magic strings - use enums and Literal types for constrained values.
"""

from enum import Enum
from typing import Literal


class RowType(str, Enum):
    """
    How a row is worked.

    Only affects display labeling, never flattening or navigation.
    """

    ROW = "row"  # Flat, worked back and forth
    JOINED_ROUND = "joined_round"  # Round closed with a slip stitch
    CONTINUOUS_ROUND = "continuous_round"  # Spiral round


# Row types that are labeled as rounds
ROUND_TYPES: frozenset[RowType] = frozenset({RowType.JOINED_ROUND, RowType.CONTINUOUS_ROUND})

# File suffixes for persisted YAML documents
PATTERN_FILE_SUFFIX = ".pattern.yaml"
SESSION_FILE_SUFFIX = ".session.yaml"

# Schema versions - frozen for v1
SchemaVersion = Literal[
    "pattern/v1",
    "session/v1",
]


class ErrorCode(str, Enum):
    """Error codes surfaced by the tool layer."""

    NO_INSTRUCTIONS = "no_instructions"
    INTEGRITY_ERROR = "integrity_error"
    SESSION_NOT_FOUND = "session_not_found"
    PATTERN_NOT_FOUND = "pattern_not_found"
    INTERNAL = "internal"


class ErrorMessages:
    """Standardized error messages."""

    NO_INSTRUCTIONS = "Pattern '{pattern_id}' has no instructions to track yet."
    PATTERN_NOT_FOUND = "Pattern '{pattern_id}' not found."
    SESSION_NOT_FOUND = "Work session {session_id} not found."
    SECTION_MISSING = "Section {section_id} not found in pattern."
    ROW_MISSING = "Row {row_id} not found in section {section_id}."
    UNIT_MISSING = (
        "Stitch (instruction {instruction_id}, stitch {stitch_index}, "
        "group repeat {group_repeat_index}) not found in row {row_id}."
    )


class SuccessMessages:
    """Standardized success messages."""

    SESSION_STARTED = "Started work session {session_id} on '{pattern_id}'."
    SESSION_RESUMED = "Resumed work session {session_id} on '{pattern_id}'."
    SESSION_RESTARTED = "Restarted work session {session_id} from the first stitch."
    PATTERN_COMPLETED = "Pattern complete!"
