"""
Progress models - sessions, cursors and what the work view shows.

A WorkSession is one account's traversal of one pattern. Each session owns
exactly one WorkProgress cursor, overwritten in place on every move.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from chuk_mcp_stitch.constants import SchemaVersion


@dataclass(frozen=True)
class StitchUnit:
    """One indivisible step in a row's flattened sequence."""

    instruction_id: int
    stitch_index: int
    group_repeat_index: int

    def __str__(self) -> str:
        return f"{self.instruction_id}[{self.stitch_index}]@{self.group_repeat_index}"


class WorkProgress(BaseModel):
    """
    The persisted cursor of a work session.

    Points at one stitch-unit of the current row's current repeat.
    `stitches_completed_in_row` is that unit's index in the row's
    flattened sequence.
    """

    session_id: int = Field(..., description="Owning session")
    section_id: int = Field(..., description="Current section")
    row_id: int = Field(..., description="Current row")
    row_repeat_index: int = Field(0, ge=0, description="Current repeat of the row")
    instruction_id: int = Field(..., description="Current instruction")
    stitch_index: int = Field(0, ge=0, description="Stitch within the instruction")
    group_repeat_index: int = Field(0, ge=0, description="Repeat of the enclosing group")
    stitches_completed_in_row: int = Field(0, ge=0, description="Units done in this repeat")
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Last write"
    )

    model_config = {"frozen": True}

    @property
    def unit(self) -> StitchUnit:
        """The stitch-unit this cursor points at."""
        return StitchUnit(self.instruction_id, self.stitch_index, self.group_repeat_index)

    def at(
        self,
        unit: StitchUnit,
        index: int,
        *,
        section_id: int | None = None,
        row_id: int | None = None,
        row_repeat_index: int | None = None,
    ) -> WorkProgress:
        """Return a copy of this cursor moved to `unit` at flattened `index`."""
        update: dict[str, Any] = {
            "instruction_id": unit.instruction_id,
            "stitch_index": unit.stitch_index,
            "group_repeat_index": unit.group_repeat_index,
            "stitches_completed_in_row": index,
        }
        if section_id is not None:
            update["section_id"] = section_id
        if row_id is not None:
            update["row_id"] = row_id
        if row_repeat_index is not None:
            update["row_repeat_index"] = row_repeat_index
        return self.model_copy(update=update)

    def position(self) -> tuple[int, int, int, int, int, int, int]:
        """Structural position, ignoring bookkeeping timestamps."""
        return (
            self.section_id,
            self.row_id,
            self.row_repeat_index,
            self.instruction_id,
            self.stitch_index,
            self.group_repeat_index,
            self.stitches_completed_in_row,
        )

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert to a YAML-friendly dict."""
        return {
            "section_id": self.section_id,
            "row_id": self.row_id,
            "row_repeat_index": self.row_repeat_index,
            "instruction_id": self.instruction_id,
            "stitch_index": self.stitch_index,
            "group_repeat_index": self.group_repeat_index,
            "stitches_completed_in_row": self.stitches_completed_in_row,
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_yaml_dict(cls, session_id: int, data: dict[str, Any]) -> WorkProgress:
        """Create a cursor from a YAML-parsed dict."""
        return cls(
            session_id=session_id,
            section_id=data["section_id"],
            row_id=data["row_id"],
            row_repeat_index=data.get("row_repeat_index", 0),
            instruction_id=data["instruction_id"],
            stitch_index=data.get("stitch_index", 0),
            group_repeat_index=data.get("group_repeat_index", 0),
            stitches_completed_in_row=data.get("stitches_completed_in_row", 0),
            updated_at=_parse_time(data.get("updated_at")),
        )


class WorkSession(BaseModel):
    """An account's active or completed work session on a pattern."""

    schema_version: SchemaVersion = Field("session/v1", description="Schema version")
    id: int = Field(..., description="Session identifier")
    account_id: str = Field(..., description="Owning account")
    pattern_id: str = Field(..., description="Pattern being worked")
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Session start"
    )
    last_active_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Last navigation"
    )
    completed_at: datetime | None = Field(None, description="Completion time (None if active)")

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def touch(self) -> None:
        """Record activity now."""
        self.last_active_at = datetime.now(UTC)

    def mark_completed(self) -> None:
        now = datetime.now(UTC)
        self.completed_at = now
        self.last_active_at = now

    def reactivate(self) -> None:
        self.completed_at = None
        self.touch()

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert to a YAML-friendly dict."""
        return {
            "schema": self.schema_version,
            "id": self.id,
            "account_id": self.account_id,
            "pattern_id": self.pattern_id,
            "started_at": self.started_at.isoformat(),
            "last_active_at": self.last_active_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_yaml_dict(cls, data: dict[str, Any]) -> WorkSession:
        """Create a session from a YAML-parsed dict."""
        completed = data.get("completed_at")
        return cls(
            schema_version=data.get("schema", "session/v1"),
            id=data["id"],
            account_id=str(data["account_id"]),
            pattern_id=str(data["pattern_id"]),
            started_at=_parse_time(data.get("started_at")),
            last_active_at=_parse_time(data.get("last_active_at")),
            completed_at=_parse_time(completed) if completed else None,
        )


class WorkDisplayState(BaseModel):
    """
    Everything the work view needs to show the current position.

    When `completed` is set only the identity fields are populated.
    """

    session_id: int
    pattern_id: str
    pattern_name: str
    completed: bool = False

    section_name: str = ""
    row_label: str = ""
    row_repeat_index: int = 0
    row_repeat_count: int = 0
    row_number_in_section: int = 0
    total_rows_in_section: int = 0

    current_instruction_id: int | None = None
    current_stitch_index: int = 0
    current_group_repeat_index: int = 0
    current_stitch_abbr: str | None = None
    current_stitch_count: int = 0

    stitches_completed: int = 0
    expected_stitch_count: int = 0


class SessionSummary(BaseModel):
    """Dashboard line for an active session."""

    session_id: int
    pattern_id: str
    pattern_name: str
    section_name: str = ""
    row_label: str = ""
    row_number_in_section: int = 0
    total_rows_in_section: int = 0
    stitches_completed: int = 0
    expected_stitches: int = 0
    last_active_at: datetime


def _parse_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return datetime.now(UTC)
    return datetime.fromisoformat(str(value))
