"""
Work-progress engine.

Turns a row's nested, repeat-structured instructions into a linear
sequence of stitch-units and moves a single cursor through the pattern:
    Row instructions → flatten() → [StitchUnit, ...]
    (WorkProgress, sections) → advance()/undo() → NavigationResult
"""

from chuk_mcp_stitch.progress.display import (
    build_display_state,
    build_session_summary,
    count_rows_in_section,
    describe_sections,
    row_label,
)
from chuk_mcp_stitch.progress.errors import (
    NoInstructionsError,
    PatternNotFoundError,
    ProgressIntegrityError,
    SessionNotFoundError,
    StitchError,
)
from chuk_mcp_stitch.progress.flatten import (
    find_unit_index,
    flatten,
    row_unit_count,
    section_unit_count,
    total_unit_count,
)
from chuk_mcp_stitch.progress.navigator import (
    NavigationResult,
    advance,
    check_progress,
    initial_progress,
    undo,
)

__all__ = [
    # Flattening
    "find_unit_index",
    "flatten",
    "row_unit_count",
    "section_unit_count",
    "total_unit_count",
    # Navigation
    "NavigationResult",
    "advance",
    "check_progress",
    "initial_progress",
    "undo",
    # Display
    "build_display_state",
    "build_session_summary",
    "count_rows_in_section",
    "describe_sections",
    "row_label",
    # Errors
    "NoInstructionsError",
    "PatternNotFoundError",
    "ProgressIntegrityError",
    "SessionNotFoundError",
    "StitchError",
]
