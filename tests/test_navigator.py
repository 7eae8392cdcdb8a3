"""
Tests for cursor navigation.

Tests cover:
- Initial placement
- Advance across group repeats, row repeats, rows and sections
- Undo as the inverse of advance
- Boundaries at the first stitch and after completion
- Empty rows and sections
- Integrity errors when the tree no longer matches the cursor
"""

from collections.abc import Sequence

import pytest

from chuk_mcp_stitch.models import Pattern, PatternSection, WorkProgress
from chuk_mcp_stitch.progress import (
    NoInstructionsError,
    ProgressIntegrityError,
    advance,
    check_progress,
    initial_progress,
    total_unit_count,
    undo,
)


def _walk(sections: Sequence[PatternSection]) -> list[WorkProgress]:
    """Every cursor position reachable by advancing from the start."""
    progress = initial_progress(1, sections)
    positions = [progress]
    while True:
        result = advance(progress, sections)
        if result.completed:
            return positions
        progress = result.progress
        positions.append(progress)


def _cursor(**fields: int) -> WorkProgress:
    values = {"session_id": 1, "section_id": 1, "row_id": 10, "instruction_id": 100}
    values.update(fields)
    return WorkProgress(**values)


class TestInitialProgress:
    """Tests for initial_progress()."""

    def test_first_unit(self, scenario_pattern: Pattern) -> None:
        """Starts at the first unit of the first row."""
        progress = initial_progress(7, scenario_pattern.sections)
        assert progress.session_id == 7
        assert progress.position() == (1, 10, 0, 100, 0, 0, 0)

    def test_skips_empty_rows_and_sections(self, blanket_pattern: Pattern) -> None:
        """Empty leading rows and sections are skipped."""
        progress = initial_progress(1, blanket_pattern.sections[1:])
        assert (progress.section_id, progress.row_id, progress.instruction_id) == (3, 4, 401)

    def test_no_instructions(self, empty_data: dict) -> None:
        """A pattern without stitch-units cannot be started."""
        pattern = Pattern.from_yaml_dict(empty_data)
        with pytest.raises(NoInstructionsError) as exc_info:
            initial_progress(1, pattern.sections, pattern.id)
        assert exc_info.value.pattern_id == "empty"

    def test_no_sections(self) -> None:
        """A pattern without sections cannot be started."""
        with pytest.raises(NoInstructionsError):
            initial_progress(1, [])


class TestAdvance:
    """Tests for advance()."""

    def test_scenario_walk(self, scenario_pattern: Pattern) -> None:
        """Advancing visits every unit in order, then completes."""
        sections = scenario_pattern.sections
        progress = initial_progress(1, sections)

        expected = [
            (10, 100, 1, 0, 1),
            (10, 100, 2, 0, 2),
            (11, 111, 0, 0, 0),
            (11, 112, 0, 0, 1),
            (11, 111, 0, 1, 2),
            (11, 112, 0, 1, 3),
        ]
        for row_id, instruction_id, stitch, group_repeat, done in expected:
            result = advance(progress, sections)
            assert result.moved
            assert not result.completed
            progress = result.progress
            assert progress.row_id == row_id
            assert progress.instruction_id == instruction_id
            assert progress.stitch_index == stitch
            assert progress.group_repeat_index == group_repeat
            assert progress.stitches_completed_in_row == done

        result = advance(progress, sections)
        assert result.completed
        assert result.moved
        assert result.progress == progress

    def test_row_repeats(self, blanket_pattern: Pattern) -> None:
        """A repeated row is worked again from its first unit."""
        sections = blanket_pattern.sections
        progress = initial_progress(1, sections)
        progress = advance(progress, sections).progress
        result = advance(progress, sections)
        assert result.progress.row_id == 1
        assert result.progress.row_repeat_index == 1
        assert result.progress.stitch_index == 0
        assert result.progress.stitches_completed_in_row == 0

    def test_skips_empty_row_and_section(self, blanket_pattern: Pattern) -> None:
        """Advancing past an empty trailing row and an empty section."""
        sections = blanket_pattern.sections
        progress = _cursor(
            section_id=1,
            row_id=1,
            row_repeat_index=1,
            instruction_id=101,
            stitch_index=1,
            stitches_completed_in_row=1,
        )
        result = advance(progress, sections)
        assert result.progress.position() == (3, 4, 0, 401, 0, 0, 0)

    @pytest.mark.parametrize("name", ["scenario_pattern", "blanket_pattern", "gappy_pattern"])
    def test_completion_after_last_unit(self, name: str, request: pytest.FixtureRequest) -> None:
        """The walk ends only after the final unit is advanced past."""
        pattern: Pattern = request.getfixturevalue(name)
        positions = _walk(pattern.sections)
        last = positions[-1]
        final = advance(last, pattern.sections)
        assert final.completed
        assert final.progress == last

    @pytest.mark.parametrize("name", ["scenario_pattern", "blanket_pattern"])
    def test_unit_count_advances_complete(self, name: str, request: pytest.FixtureRequest) -> None:
        """N advances complete an N-unit pattern, N-1 do not."""
        pattern: Pattern = request.getfixturevalue(name)
        sections = pattern.sections
        n = total_unit_count(pattern)

        progress = initial_progress(1, sections)
        for _ in range(n - 1):
            result = advance(progress, sections)
            assert not result.completed
            progress = result.progress

        assert advance(progress, sections).completed

    def test_completed_is_noop(self, scenario_pattern: Pattern) -> None:
        """Advancing a completed session does not move."""
        progress = initial_progress(1, scenario_pattern.sections)
        result = advance(progress, scenario_pattern.sections, completed=True)
        assert result.completed
        assert not result.moved
        assert result.progress == progress


class TestUndo:
    """Tests for undo()."""

    @pytest.mark.parametrize("name", ["scenario_pattern", "blanket_pattern"])
    def test_inverse_of_advance(self, name: str, request: pytest.FixtureRequest) -> None:
        """Undo returns to the exact position before each advance."""
        pattern: Pattern = request.getfixturevalue(name)
        sections = pattern.sections
        positions = _walk(sections)
        for before, after in zip(positions, positions[1:], strict=False):
            result = undo(after, sections)
            assert result.moved
            assert result.progress.position() == before.position()

    def test_first_unit_is_noop(self, scenario_pattern: Pattern) -> None:
        """Undo at the first unit of the pattern does nothing."""
        progress = initial_progress(1, scenario_pattern.sections)
        result = undo(progress, scenario_pattern.sections)
        assert not result.moved
        assert not result.completed
        assert result.progress == progress

    def test_back_into_previous_repeat(self, blanket_pattern: Pattern) -> None:
        """Undo at the start of a repeat lands on the end of the previous one."""
        progress = _cursor(section_id=1, row_id=1, row_repeat_index=1, instruction_id=101)
        result = undo(progress, blanket_pattern.sections)
        assert result.progress.position() == (1, 1, 0, 101, 1, 0, 1)

    def test_back_across_empty_sections(self, blanket_pattern: Pattern) -> None:
        """Undo at the start of a section scans back over empty rows and sections."""
        progress = _cursor(section_id=3, row_id=4, instruction_id=401)
        result = undo(progress, blanket_pattern.sections)
        assert result.progress.position() == (1, 1, 1, 101, 1, 0, 1)

    def test_after_completion(self, scenario_pattern: Pattern) -> None:
        """Undo on a completed session reopens it at the last unit."""
        sections = scenario_pattern.sections
        last = _walk(sections)[-1]

        result = undo(last, sections, completed=True)
        assert result.moved
        assert not result.completed
        assert result.progress == last

        result = undo(result.progress, sections)
        assert result.progress.position() == (1, 11, 0, 111, 0, 1, 2)


class TestEmptyRowLookahead:
    """Two consecutive empty rows mid-section."""

    def test_advance_skips_to_next_section(self, gappy_pattern: Pattern) -> None:
        """The row after the gap is skipped on the way forward."""
        progress = _cursor(row_id=1, instruction_id=11, stitch_index=1, stitches_completed_in_row=1)
        result = advance(progress, gappy_pattern.sections)
        assert (result.progress.section_id, result.progress.row_id) == (2, 5)

    def test_walk_never_visits_row_after_gap(self, gappy_pattern: Pattern) -> None:
        """Row 4 is unreachable by advancing from the start."""
        rows = [p.row_id for p in _walk(gappy_pattern.sections)]
        assert rows == [1, 1, 5]

    def test_undo_from_next_section_lands_after_gap(self, gappy_pattern: Pattern) -> None:
        """Backwards, the section scan finds the row after the gap."""
        progress = _cursor(section_id=2, row_id=5, instruction_id=51)
        result = undo(progress, gappy_pattern.sections)
        assert (result.progress.row_id, result.progress.instruction_id) == (4, 41)

    def test_undo_after_gap_is_noop(self, gappy_pattern: Pattern) -> None:
        """Undo cannot cross the gap when no earlier section exists."""
        progress = _cursor(row_id=4, instruction_id=41)
        result = undo(progress, gappy_pattern.sections)
        assert not result.moved
        assert result.progress == progress

    def test_advance_after_gap(self, gappy_pattern: Pattern) -> None:
        """Advancing from the row after the gap continues to the next section."""
        progress = _cursor(row_id=4, instruction_id=41)
        result = advance(progress, gappy_pattern.sections)
        assert (result.progress.row_id, result.progress.instruction_id) == (5, 51)


class TestIntegrity:
    """Tests for cursors that no longer match the tree."""

    @pytest.mark.parametrize(
        "fields",
        [
            {"section_id": 99},
            {"row_id": 99},
            {"instruction_id": 999},
            {"stitch_index": 5},
            {"stitches_completed_in_row": 1},
            {"row_repeat_index": 1},
        ],
    )
    def test_mismatch_raises(self, scenario_pattern: Pattern, fields: dict) -> None:
        """Both directions refuse a cursor that does not fit the tree."""
        progress = _cursor(**fields)
        with pytest.raises(ProgressIntegrityError) as exc_info:
            advance(progress, scenario_pattern.sections)
        assert exc_info.value.session_id == 1
        with pytest.raises(ProgressIntegrityError):
            undo(progress, scenario_pattern.sections)
        with pytest.raises(ProgressIntegrityError):
            check_progress(progress, scenario_pattern.sections)

    def test_check_accepts_every_reachable_cursor(self, blanket_pattern: Pattern) -> None:
        """Cursors produced by advancing always pass the check."""
        for progress in _walk(blanket_pattern.sections):
            check_progress(progress, blanket_pattern.sections)

    def test_undo_after_completion_checks_cursor(self, scenario_pattern: Pattern) -> None:
        """Reopening a completed session still validates its cursor."""
        with pytest.raises(ProgressIntegrityError):
            undo(_cursor(row_id=99), scenario_pattern.sections, completed=True)

    def test_completed_advance_does_not_check(self, scenario_pattern: Pattern) -> None:
        """Advance on a completed session is a no-op even for a stale cursor."""
        result = advance(_cursor(row_id=99), scenario_pattern.sections, completed=True)
        assert not result.moved

    def test_group_shrunk_under_cursor(self, scenario_data: dict) -> None:
        """Editing a group's repeats out from under the cursor is detected."""
        progress = _cursor(
            row_id=11,
            instruction_id=112,
            group_repeat_index=1,
            stitches_completed_in_row=3,
        )
        scenario_data["sections"][0]["rows"][1]["instructions"][0]["group_repeat"] = 1
        edited = Pattern.from_yaml_dict(scenario_data)
        with pytest.raises(ProgressIntegrityError):
            advance(progress, edited.sections)
