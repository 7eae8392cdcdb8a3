"""
Pattern model - the read-only tree the work engine navigates.

A Pattern contains:
- Sections (ordered by position)
- Rows within each section (ordered by position, each with a repeat count)
- Instructions within each row, kept as an arena keyed by identifier

Instructions are either atomic (a stitch worked `count` times in place) or
group headers (an ordered list of atomic children worked `group_repeat` times).
Groups do not nest.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from chuk_mcp_stitch.constants import ROUND_TYPES, RowType, SchemaVersion


class Instruction(BaseModel):
    """
    A single instruction record within a row.

    Top-level records have no parent. Children of a group point at the
    group header through `parent_id`.
    """

    id: int = Field(..., description="Instruction identifier")
    position: int = Field(..., description="Position among siblings (unique within parent)")
    parent_id: int | None = Field(None, description="Group header id for group children")

    # Atomic fields
    stitch_abbr: str | None = Field(None, description="Stitch abbreviation (None for actions)")
    stitch_name: str | None = Field(None, description="Stitch display name")
    count: int = Field(1, ge=0, description="Times the stitch is worked in place")
    into: str = Field("", description="Where the stitch is worked")

    # Group fields
    is_group: bool = Field(False, description="Whether this is a group header")
    group_repeat: int = Field(1, ge=0, description="Times the group's children are worked")

    note: str = Field("", description="Free-form note")

    model_config = {"frozen": True}


class Row(BaseModel):
    """
    A row or round of a section, possibly repeated.

    `repeat_count` means "work this row's instruction sequence this many
    times consecutively". The instruction list may be empty while the
    pattern is still being authored.
    """

    id: int = Field(..., description="Row identifier")
    position: int = Field(..., description="Position within the section")
    label: str = Field("", description="Display label (auto-generated when empty)")
    type: RowType = Field(RowType.ROW, description="Row, joined round or continuous round")
    repeat_count: int = Field(1, ge=1, description="Consecutive repeats of this row")
    expected_stitch_count: int = Field(0, ge=0, description="Stitch count at end of row")
    turning_chain_count: int = Field(0, ge=0, description="Turning chain length")
    turning_chain_counts_as_stitch: bool = Field(False, description="Turning chain is a stitch")
    notes: str = Field("", description="Free-form notes")

    # Arena of all instruction records in this row, keyed by id
    instructions: dict[int, Instruction] = Field(
        default_factory=dict, description="Instruction records keyed by id"
    )

    @field_validator("type", mode="before")
    @classmethod
    def default_unknown_type(cls, v: Any) -> Any:
        """Unrecognized row types are treated as continuous rounds."""
        if isinstance(v, RowType):
            return v
        try:
            return RowType(v)
        except ValueError:
            return RowType.CONTINUOUS_ROUND

    def top_level_instructions(self) -> list[Instruction]:
        """Get top-level instructions in position order."""
        return sorted(
            (i for i in self.instructions.values() if i.parent_id is None),
            key=lambda i: i.position,
        )

    def children_of(self, group_id: int) -> list[Instruction]:
        """Get the children of a group header in position order."""
        return sorted(
            (i for i in self.instructions.values() if i.parent_id == group_id),
            key=lambda i: i.position,
        )

    def get_instruction(self, instruction_id: int) -> Instruction | None:
        """Get an instruction record by id."""
        return self.instructions.get(instruction_id)

    @property
    def is_round(self) -> bool:
        """Whether this row is worked in the round."""
        return self.type in ROUND_TYPES


class PatternSection(BaseModel):
    """A named section of a pattern (e.g. 'Body', 'Sleeves')."""

    id: int = Field(..., description="Section identifier")
    position: int = Field(..., description="Position within the pattern")
    name: str = Field(..., description="Section name")
    notes: str = Field("", description="Free-form notes")
    rows: list[Row] = Field(default_factory=list, description="Rows in position order")

    @field_validator("rows")
    @classmethod
    def order_rows(cls, v: list[Row]) -> list[Row]:
        """Keep rows in position order."""
        return sorted(v, key=lambda r: r.position)

    def get_row(self, row_id: int) -> Row | None:
        """Get a row by id."""
        for row in self.rows:
            if row.id == row_id:
                return row
        return None


class Pattern(BaseModel):
    """
    A complete pattern tree.

    Produced by the authoring side and read-only to the work engine.
    """

    schema_version: SchemaVersion = Field("pattern/v1", description="Schema version")
    id: str = Field(..., description="Pattern identifier")
    name: str = Field(..., description="Pattern name")
    description: str = Field("", description="Human-readable description")
    sections: list[PatternSection] = Field(
        default_factory=list, description="Sections in position order"
    )

    @field_validator("sections")
    @classmethod
    def order_sections(cls, v: list[PatternSection]) -> list[PatternSection]:
        """Keep sections in position order."""
        return sorted(v, key=lambda s: s.position)

    @model_validator(mode="after")
    def check_unique_ids(self) -> Pattern:
        """Section and row identifiers must be unique across the pattern."""
        section_ids = [s.id for s in self.sections]
        if len(section_ids) != len(set(section_ids)):
            raise ValueError(f"Duplicate section ids in pattern {self.id}")
        row_ids = [r.id for s in self.sections for r in s.rows]
        if len(row_ids) != len(set(row_ids)):
            raise ValueError(f"Duplicate row ids in pattern {self.id}")
        return self

    def get_section(self, section_id: int) -> PatternSection | None:
        """Get a section by id."""
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def row_count(self) -> int:
        """Number of row records (not counting repeats)."""
        return sum(len(section.rows) for section in self.sections)

    @classmethod
    def from_yaml_dict(cls, data: dict[str, Any]) -> Pattern:
        """
        Create a Pattern from a YAML-parsed dict.

        Nested group children are flattened into the row's arena.
        """
        sections = [
            PatternSection(
                id=s["id"],
                position=s.get("position", index + 1),
                name=s["name"],
                notes=s.get("notes", ""),
                rows=[_row_from_dict(r, ri + 1) for ri, r in enumerate(s.get("rows", []))],
            )
            for index, s in enumerate(data.get("sections", []))
        ]

        return cls(
            schema_version=data.get("schema", "pattern/v1"),
            id=data["id"],
            name=data.get("name", data["id"]),
            description=data.get("description") or "",
            sections=sections,
        )


def _instruction_from_dict(
    data: dict[str, Any], position: int, parent_id: int | None
) -> Instruction:
    stitch = data.get("stitch")
    if isinstance(stitch, str):
        # Bare abbreviation
        stitch = {"abbr": stitch}

    return Instruction(
        id=data["id"],
        position=data.get("position", position),
        parent_id=parent_id,
        stitch_abbr=stitch.get("abbr") if stitch else None,
        stitch_name=stitch.get("name") if stitch else None,
        count=data.get("count", 1),
        into=data.get("into") or "",
        is_group="children" in data or data.get("is_group", False),
        group_repeat=data.get("group_repeat", 1),
        note=data.get("note") or "",
    )


def _row_from_dict(data: dict[str, Any], position: int) -> Row:
    arena: dict[int, Instruction] = {}
    for index, item in enumerate(data.get("instructions", [])):
        instruction = _instruction_from_dict(item, index + 1, None)
        arena[instruction.id] = instruction
        for child_index, child_data in enumerate(item.get("children", [])):
            child = _instruction_from_dict(child_data, child_index + 1, instruction.id)
            arena[child.id] = child

    return Row(
        id=data["id"],
        position=data.get("position", position),
        label=data.get("label") or "",
        type=data.get("type", RowType.ROW.value),
        repeat_count=data.get("repeat_count", 1),
        expected_stitch_count=data.get("expected_stitch_count", 0),
        turning_chain_count=data.get("turning_chain_count", 0),
        turning_chain_counts_as_stitch=data.get("turning_chain_counts_as_stitch", False),
        notes=data.get("notes") or "",
        instructions=arena,
    )
