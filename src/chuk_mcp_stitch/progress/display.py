"""
Display helpers - turn a cursor into what the work view shows.

Row numbers count every repeat as its own row, 1-based within a section.
"""

from __future__ import annotations

from collections.abc import Sequence

from chuk_mcp_stitch.models.pattern import Pattern, PatternSection, Row
from chuk_mcp_stitch.models.progress import (
    SessionSummary,
    WorkDisplayState,
    WorkProgress,
    WorkSession,
)
from chuk_mcp_stitch.progress.flatten import flatten


def row_label(rows: Sequence[Row], row_id: int) -> str:
    """
    Display label for a row.

    Uses the row's own label when set, otherwise 'Row 3', 'Rnd 3' or
    'Rnds 5-10' for repeated rows.
    """
    number = 1
    for row in rows:
        if row.id == row_id:
            if row.label:
                return row.label
            prefix = "Rnd" if row.is_round else "Row"
            if row.repeat_count > 1:
                return f"{prefix}s {number}-{number + row.repeat_count - 1}"
            return f"{prefix} {number}"
        number += row.repeat_count
    return "?"


def count_rows_in_section(
    rows: Sequence[Row], row_id: int, row_repeat_index: int
) -> tuple[int, int]:
    """
    Count rows in a section, treating each repeat as a row.

    Returns:
        (total rows in section, 1-based number of the current row or 0)
    """
    total = 0
    current = 0
    for row in rows:
        for repeat in range(row.repeat_count):
            total += 1
            if row.id == row_id and repeat == row_repeat_index:
                current = total
    return total, current


def build_display_state(
    session: WorkSession,
    progress: WorkProgress,
    pattern: Pattern,
) -> WorkDisplayState:
    """
    Compute the work view state for a session.

    Args:
        session: The work session
        progress: Its current cursor
        pattern: The pattern tree

    Returns:
        WorkDisplayState (identity only when the session is completed)
    """
    state = WorkDisplayState(
        session_id=session.id,
        pattern_id=session.pattern_id,
        pattern_name=pattern.name,
        completed=session.is_completed,
    )
    if state.completed:
        return state

    section = pattern.get_section(progress.section_id)
    row = section.get_row(progress.row_id) if section else None
    if section is not None and row is not None:
        state.section_name = section.name
        state.row_label = row_label(section.rows, row.id)
        state.row_repeat_index = progress.row_repeat_index
        state.row_repeat_count = row.repeat_count
        state.total_rows_in_section, state.row_number_in_section = count_rows_in_section(
            section.rows, row.id, progress.row_repeat_index
        )
        state.expected_stitch_count = row.expected_stitch_count

        instruction = row.get_instruction(progress.instruction_id)
        if instruction is not None:
            state.current_stitch_abbr = instruction.stitch_abbr
            state.current_stitch_count = instruction.count

    state.current_instruction_id = progress.instruction_id
    state.current_stitch_index = progress.stitch_index
    state.current_group_repeat_index = progress.group_repeat_index
    state.stitches_completed = progress.stitches_completed_in_row
    return state


def build_session_summary(
    session: WorkSession,
    progress: WorkProgress,
    pattern: Pattern,
) -> SessionSummary:
    """Dashboard line for an active session."""
    summary = SessionSummary(
        session_id=session.id,
        pattern_id=session.pattern_id,
        pattern_name=pattern.name,
        stitches_completed=progress.stitches_completed_in_row,
        last_active_at=session.last_active_at,
    )

    section = pattern.get_section(progress.section_id)
    if section is not None:
        summary.section_name = section.name
        summary.row_label = row_label(section.rows, progress.row_id)
        summary.total_rows_in_section, summary.row_number_in_section = count_rows_in_section(
            section.rows, progress.row_id, progress.row_repeat_index
        )
        row = section.get_row(progress.row_id)
        if row is not None:
            summary.expected_stitches = row.expected_stitch_count

    return summary


def describe_sections(sections: Sequence[PatternSection]) -> list[dict]:
    """Section/row outline with stitch-unit totals, for pattern discovery."""
    result = []
    for section in sections:
        rows = []
        for row in section.rows:
            units = len(flatten(row))
            rows.append(
                {
                    "id": row.id,
                    "label": row_label(section.rows, row.id),
                    "type": row.type.value,
                    "repeat_count": row.repeat_count,
                    "expected_stitch_count": row.expected_stitch_count,
                    "stitch_units": units,
                    "total_stitch_units": units * row.repeat_count,
                }
            )
        result.append(
            {
                "id": section.id,
                "name": section.name,
                "rows": rows,
                "total_stitch_units": sum(r["total_stitch_units"] for r in rows),
            }
        )
    return result
