"""
Pytest configuration and shared fixtures.
"""

import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from chuk_mcp_stitch.models import Pattern
from chuk_mcp_stitch.patterns import PatternLoader
from chuk_mcp_stitch.sessions import ProgressStore, WorkSessionManager


def _stitch(abbr: str, name: str) -> dict[str, str]:
    return {"abbr": abbr, "name": name}


SC = _stitch("sc", "single crochet")
INC = _stitch("inc", "increase")
DC = _stitch("dc", "double crochet")
CH = _stitch("ch", "chain")
SL_ST = _stitch("sl st", "slip stitch")


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def scenario_data() -> dict[str, Any]:
    """
    Section 'S': Row A is sc x3, Row B is a group worked twice of [sc, inc].

    7 stitch-units in total.
    """
    return {
        "id": "scenario",
        "name": "Scenario",
        "sections": [
            {
                "id": 1,
                "position": 1,
                "name": "S",
                "rows": [
                    {
                        "id": 10,
                        "position": 1,
                        "label": "Row A",
                        "expected_stitch_count": 3,
                        "instructions": [
                            {"id": 100, "position": 1, "stitch": SC, "count": 3},
                        ],
                    },
                    {
                        "id": 11,
                        "position": 2,
                        "label": "Row B",
                        "expected_stitch_count": 6,
                        "instructions": [
                            {
                                "id": 110,
                                "position": 1,
                                "group_repeat": 2,
                                "children": [
                                    {"id": 111, "position": 1, "stitch": SC, "count": 1},
                                    {"id": 112, "position": 2, "stitch": INC, "count": 1},
                                ],
                            },
                        ],
                    },
                ],
            },
        ],
    }


@pytest.fixture
def blanket_data() -> dict[str, Any]:
    """
    Three sections with repeats, an empty trailing row and an empty section.

    Border: Row 1 (ch x2, worked twice), Row 2 (empty)
    Empty: Row 3 (empty)
    Body: Row 4 (sc, [dc x2] twice, turn)

    10 stitch-units in total.
    """
    return {
        "id": "blanket",
        "name": "Baby Blanket",
        "description": "Sections, repeats and gaps",
        "sections": [
            {
                "id": 1,
                "position": 1,
                "name": "Border",
                "rows": [
                    {
                        "id": 1,
                        "position": 1,
                        "type": "row",
                        "repeat_count": 2,
                        "expected_stitch_count": 2,
                        "instructions": [{"id": 101, "position": 1, "stitch": CH, "count": 2}],
                    },
                    {"id": 2, "position": 2, "instructions": []},
                ],
            },
            {
                "id": 2,
                "position": 2,
                "name": "Empty",
                "rows": [{"id": 3, "position": 1, "instructions": []}],
            },
            {
                "id": 3,
                "position": 3,
                "name": "Body",
                "rows": [
                    {
                        "id": 4,
                        "position": 1,
                        "type": "joined_round",
                        "expected_stitch_count": 5,
                        "instructions": [
                            {"id": 401, "position": 1, "stitch": SC, "count": 1},
                            {
                                "id": 402,
                                "position": 2,
                                "group_repeat": 2,
                                "children": [
                                    {"id": 403, "position": 1, "stitch": DC, "count": 2},
                                ],
                            },
                            {"id": 404, "position": 3, "count": 1, "note": "turn"},
                        ],
                    },
                ],
            },
        ],
    }


@pytest.fixture
def gappy_data() -> dict[str, Any]:
    """
    Two consecutive empty rows in the middle of a section.

    Main: Row 1 (sc x2), Row 2 (empty), Row 3 (empty), Row 4 (dc)
    Edge: Row 5 (sl st)
    """
    return {
        "id": "gappy",
        "name": "Gappy",
        "sections": [
            {
                "id": 1,
                "position": 1,
                "name": "Main",
                "rows": [
                    {
                        "id": 1,
                        "position": 1,
                        "instructions": [{"id": 11, "position": 1, "stitch": SC, "count": 2}],
                    },
                    {"id": 2, "position": 2, "instructions": []},
                    {"id": 3, "position": 3, "instructions": []},
                    {
                        "id": 4,
                        "position": 4,
                        "instructions": [{"id": 41, "position": 1, "stitch": DC, "count": 1}],
                    },
                ],
            },
            {
                "id": 2,
                "position": 2,
                "name": "Edge",
                "rows": [
                    {
                        "id": 5,
                        "position": 1,
                        "instructions": [{"id": 51, "position": 1, "stitch": SL_ST, "count": 1}],
                    },
                ],
            },
        ],
    }


@pytest.fixture
def empty_data() -> dict[str, Any]:
    """A pattern with sections and rows but no instructions yet."""
    return {
        "id": "empty",
        "name": "Work in progress",
        "sections": [
            {"id": 1, "position": 1, "name": "Main", "rows": [{"id": 1, "position": 1}]},
            {"id": 2, "position": 2, "name": "Edge", "rows": []},
        ],
    }


@pytest.fixture
def scenario_pattern(scenario_data: dict[str, Any]) -> Pattern:
    return Pattern.from_yaml_dict(scenario_data)


@pytest.fixture
def blanket_pattern(blanket_data: dict[str, Any]) -> Pattern:
    return Pattern.from_yaml_dict(blanket_data)


@pytest.fixture
def gappy_pattern(gappy_data: dict[str, Any]) -> Pattern:
    return Pattern.from_yaml_dict(gappy_data)


@pytest.fixture
def patterns_dir(temp_dir: Path) -> Path:
    path = temp_dir / "patterns"
    path.mkdir()
    return path


@pytest.fixture
def sessions_dir(temp_dir: Path) -> Path:
    return temp_dir / "sessions"


@pytest.fixture
def write_pattern(patterns_dir: Path) -> Callable[[dict[str, Any]], Path]:
    """Write a pattern dict to the patterns directory, as the authoring side would."""

    def _write(data: dict[str, Any]) -> Path:
        path = patterns_dir / f"{data['id']}.pattern.yaml"
        existed = path.exists()
        old_mtime = path.stat().st_mtime_ns if existed else 0
        with open(path, "w") as f:
            yaml.safe_dump(data, f, sort_keys=False)
        if existed:
            # Make the edit visible even on filesystems with coarse timestamps
            new_mtime = old_mtime + 1_000_000_000
            os.utime(path, ns=(new_mtime, new_mtime))
        return path

    return _write


@pytest.fixture
def loader(
    patterns_dir: Path,
    write_pattern: Callable[[dict[str, Any]], Path],
    scenario_data: dict[str, Any],
    blanket_data: dict[str, Any],
    gappy_data: dict[str, Any],
    empty_data: dict[str, Any],
) -> PatternLoader:
    """Pattern loader over a directory holding every sample pattern."""
    for data in (scenario_data, blanket_data, gappy_data, empty_data):
        write_pattern(data)
    return PatternLoader(patterns_dir)


@pytest.fixture
def store(sessions_dir: Path) -> ProgressStore:
    return ProgressStore(sessions_dir)


@pytest.fixture
def manager(store: ProgressStore, loader: PatternLoader) -> WorkSessionManager:
    return WorkSessionManager(store, loader)
