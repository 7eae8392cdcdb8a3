"""
Navigator - moves a work cursor one stitch-unit forward or back.

Both directions are pure functions of (cursor, completed flag, pattern tree).
Nothing is replayed from history: every call recomputes the row's flattened
sequence from the current tree and locates the cursor in it.

Row lookahead is one-sided. Within a section only the single
adjacent row is considered; if it is empty the move falls through to the
neighbouring sections, which are scanned in full. Two consecutive empty rows
mid-section therefore jump the cursor to the next (or previous) section.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from chuk_mcp_stitch.constants import ErrorMessages
from chuk_mcp_stitch.models.pattern import PatternSection, Row
from chuk_mcp_stitch.models.progress import StitchUnit, WorkProgress
from chuk_mcp_stitch.progress.errors import NoInstructionsError, ProgressIntegrityError
from chuk_mcp_stitch.progress.flatten import find_unit_index, flatten

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationResult:
    """Outcome of one advance or undo."""

    progress: WorkProgress
    completed: bool
    moved: bool


@dataclass(frozen=True)
class _Located:
    section: PatternSection
    section_index: int
    row: Row
    row_index: int
    units: list[StitchUnit]
    unit_index: int


def initial_progress(
    session_id: int, sections: Sequence[PatternSection], pattern_id: str = ""
) -> WorkProgress:
    """
    Cursor at the first stitch-unit of the first non-empty row.

    Args:
        session_id: Session that will own the cursor
        sections: Pattern sections in position order
        pattern_id: Used in the error message only

    Returns:
        The initial WorkProgress

    Raises:
        NoInstructionsError: If no row anywhere has stitch-units
    """
    for section in sections:
        for row in section.rows:
            units = flatten(row)
            if units:
                first = units[0]
                return WorkProgress(
                    session_id=session_id,
                    section_id=section.id,
                    row_id=row.id,
                    row_repeat_index=0,
                    instruction_id=first.instruction_id,
                    stitch_index=first.stitch_index,
                    group_repeat_index=first.group_repeat_index,
                    stitches_completed_in_row=0,
                )
    raise NoInstructionsError(pattern_id)


def advance(
    progress: WorkProgress,
    sections: Sequence[PatternSection],
    completed: bool = False,
) -> NavigationResult:
    """
    Move forward by one stitch-unit.

    Args:
        progress: Current cursor
        sections: Pattern sections in position order
        completed: Whether the session is already completed

    Returns:
        NavigationResult with the new cursor, or the unchanged cursor and
        `completed=True` once the pattern runs out

    Raises:
        ProgressIntegrityError: If the cursor no longer matches the tree
    """
    if completed:
        return NavigationResult(progress, completed=True, moved=False)

    loc = _locate(progress, sections)

    # Next unit in this repeat
    if loc.unit_index + 1 < len(loc.units):
        index = loc.unit_index + 1
        return _moved(progress.at(loc.units[index], index))

    # Next repeat of this row
    if progress.row_repeat_index + 1 < loc.row.repeat_count:
        return _moved(
            progress.at(loc.units[0], 0, row_repeat_index=progress.row_repeat_index + 1)
        )

    # Immediately following row only
    if loc.row_index + 1 < len(loc.section.rows):
        next_row = loc.section.rows[loc.row_index + 1]
        next_units = flatten(next_row)
        if next_units:
            return _moved(progress.at(next_units[0], 0, row_id=next_row.id, row_repeat_index=0))

    # Following sections, scanned in full
    for section in sections[loc.section_index + 1 :]:
        for row in section.rows:
            units = flatten(row)
            if units:
                return _moved(
                    progress.at(
                        units[0], 0, section_id=section.id, row_id=row.id, row_repeat_index=0
                    )
                )

    logger.debug(f"Session {progress.session_id} reached the end of the pattern")
    return NavigationResult(progress, completed=True, moved=True)


def undo(
    progress: WorkProgress,
    sections: Sequence[PatternSection],
    completed: bool = False,
) -> NavigationResult:
    """
    Move back by one stitch-unit.

    A completed session sits one step past its last unit, so undoing it
    reactivates the session without moving the cursor. Undo at the very
    first unit of the pattern is a no-op.

    Raises:
        ProgressIntegrityError: If the cursor no longer matches the tree
    """
    loc = _locate(progress, sections)

    if completed:
        return NavigationResult(progress, completed=False, moved=True)

    # Previous unit in this repeat
    if loc.unit_index > 0:
        index = loc.unit_index - 1
        return _moved(progress.at(loc.units[index], index))

    # Last unit of the previous repeat
    if progress.row_repeat_index > 0:
        last = len(loc.units) - 1
        return _moved(
            progress.at(loc.units[last], last, row_repeat_index=progress.row_repeat_index - 1)
        )

    # Immediately preceding row only
    if loc.row_index > 0:
        prev_row = loc.section.rows[loc.row_index - 1]
        prev_units = flatten(prev_row)
        if prev_units:
            return _moved(_at_last(progress, loc.section, prev_row, prev_units))

    # Preceding sections, scanned backwards in full
    for section in reversed(sections[: loc.section_index]):
        for row in reversed(section.rows):
            units = flatten(row)
            if units:
                return _moved(_at_last(progress, section, row, units))

    return NavigationResult(progress, completed=False, moved=False)


def check_progress(progress: WorkProgress, sections: Sequence[PatternSection]) -> None:
    """
    Verify that a cursor still points at a stitch-unit of the tree.

    Raises:
        ProgressIntegrityError: If the section, row or unit is gone, or the
            recorded row position no longer matches
    """
    _locate(progress, sections)


def _locate(progress: WorkProgress, sections: Sequence[PatternSection]) -> _Located:
    for section_index, section in enumerate(sections):
        if section.id == progress.section_id:
            break
    else:
        raise _integrity(
            progress, ErrorMessages.SECTION_MISSING.format(section_id=progress.section_id)
        )

    for row_index, row in enumerate(section.rows):
        if row.id == progress.row_id:
            break
    else:
        raise _integrity(
            progress,
            ErrorMessages.ROW_MISSING.format(row_id=progress.row_id, section_id=section.id),
        )

    units = flatten(row)
    unit_index = find_unit_index(units, progress)
    if unit_index is None:
        raise _integrity(
            progress,
            ErrorMessages.UNIT_MISSING.format(
                instruction_id=progress.instruction_id,
                stitch_index=progress.stitch_index,
                group_repeat_index=progress.group_repeat_index,
                row_id=row.id,
            ),
        )
    if unit_index != progress.stitches_completed_in_row:
        raise _integrity(
            progress,
            f"Cursor records {progress.stitches_completed_in_row} stitches done in row "
            f"{row.id} but its stitch is at index {unit_index}.",
        )
    if progress.row_repeat_index >= row.repeat_count:
        raise _integrity(
            progress,
            f"Row {row.id} has {row.repeat_count} repeats, cursor is on repeat "
            f"{progress.row_repeat_index + 1}.",
        )

    return _Located(section, section_index, row, row_index, units, unit_index)


def _integrity(progress: WorkProgress, message: str) -> ProgressIntegrityError:
    logger.warning(f"Session {progress.session_id}: {message}")
    return ProgressIntegrityError(progress.session_id, message)


def _at_last(
    progress: WorkProgress, section: PatternSection, row: Row, units: list[StitchUnit]
) -> WorkProgress:
    last = len(units) - 1
    return progress.at(
        units[last],
        last,
        section_id=section.id,
        row_id=row.id,
        row_repeat_index=row.repeat_count - 1,
    )


def _moved(progress: WorkProgress) -> NavigationResult:
    return NavigationResult(progress, completed=False, moved=True)
