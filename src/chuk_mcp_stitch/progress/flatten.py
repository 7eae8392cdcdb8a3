"""
Flattener - expands a row's instruction tree into stitch-units.

Groups are expanded repeat by repeat: every child of repeat 0, then every
child of repeat 1, and so on. Nothing is interleaved across repeats.
"""

from __future__ import annotations

from collections.abc import Iterable

from chuk_mcp_stitch.models.pattern import Pattern, PatternSection, Row
from chuk_mcp_stitch.models.progress import StitchUnit, WorkProgress


def flatten(row: Row) -> list[StitchUnit]:
    """
    Produce the ordered stitch-units of one repeat of a row.

    Args:
        row: The row to flatten

    Returns:
        Ordered list of stitch-units (empty for a row without instructions)
    """
    units: list[StitchUnit] = []
    for instruction in row.top_level_instructions():
        if instruction.is_group:
            children = row.children_of(instruction.id)
            for group_repeat_index in range(instruction.group_repeat):
                for child in children:
                    units.extend(
                        StitchUnit(child.id, stitch_index, group_repeat_index)
                        for stitch_index in range(child.count)
                    )
        else:
            units.extend(
                StitchUnit(instruction.id, stitch_index, 0)
                for stitch_index in range(instruction.count)
            )
    return units


def find_unit_index(units: list[StitchUnit], progress: WorkProgress) -> int | None:
    """
    Locate a cursor's stitch-unit by exact match.

    Returns None when the unit is not part of the sequence.
    """
    target = progress.unit
    for index, unit in enumerate(units):
        if unit == target:
            return index
    return None


def row_unit_count(row: Row) -> int:
    """Stitch-units across all repeats of a row."""
    return len(flatten(row)) * row.repeat_count


def section_unit_count(section: PatternSection) -> int:
    """Stitch-units across all rows of a section."""
    return sum(row_unit_count(row) for row in section.rows)


def total_unit_count(sections: Pattern | Iterable[PatternSection]) -> int:
    """
    Stitch-units in a whole pattern.

    This is the number of advances needed to complete a fresh session.
    """
    if isinstance(sections, Pattern):
        sections = sections.sections
    return sum(section_unit_count(section) for section in sections)
