"""
Pattern loader - reads pattern trees written by the authoring side.

Patterns live as `<id>.pattern.yaml` files in a patterns directory. The
loader never writes them. Every lookup re-checks the file so an edited
pattern is picked up on the next navigation call.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from chuk_mcp_stitch.constants import PATTERN_FILE_SUFFIX
from chuk_mcp_stitch.models.pattern import Pattern

logger = logging.getLogger(__name__)


class PatternMetadata(BaseModel):
    """
    Lightweight pattern metadata for listing/discovery.
    """

    id: str = Field(..., description="Pattern identifier")
    name: str = Field(..., description="Pattern name")
    description: str = Field("", description="Human-readable description")
    section_count: int = Field(0, description="Number of sections")
    row_count: int = Field(0, description="Number of row records")
    path: str | None = Field(None, description="Path to pattern file")

    @classmethod
    def from_pattern(cls, pattern: Pattern, path: str | None = None) -> PatternMetadata:
        """Create metadata from a full pattern."""
        return cls(
            id=pattern.id,
            name=pattern.name,
            description=pattern.description,
            section_count=len(pattern.sections),
            row_count=pattern.row_count(),
            path=path,
        )


class PatternLoader:
    """
    Discovers and loads pattern trees from YAML files.

    Parsed patterns are cached per file and reloaded when the file's
    modification time or size changes.
    """

    def __init__(self, patterns_dir: Path):
        """
        Initialize the loader.

        Args:
            patterns_dir: Directory containing pattern files
        """
        self.patterns_dir = patterns_dir
        self._cache: dict[str, tuple[tuple[int, int], Pattern]] = {}

    def list_patterns(self) -> list[PatternMetadata]:
        """
        List all readable patterns.

        Files that fail to parse are logged and skipped.
        """
        if not self.patterns_dir.exists():
            return []

        result = []
        for path in sorted(self.patterns_dir.glob(f"*{PATTERN_FILE_SUFFIX}")):
            try:
                pattern = self._load_file(path)
            except (OSError, yaml.YAMLError, ValueError, KeyError):
                logger.warning(f"Skipping unreadable pattern file: {path}")
                continue
            result.append(PatternMetadata.from_pattern(pattern, str(path)))

        return sorted(result, key=lambda m: m.name)

    def get_pattern(self, pattern_id: str) -> Pattern | None:
        """
        Get a pattern by id.

        Args:
            pattern_id: Pattern identifier

        Returns:
            The Pattern, or None if no file exists for it
        """
        path = self._get_path(pattern_id)
        if not path.exists():
            self._cache.pop(path.name.removesuffix(PATTERN_FILE_SUFFIX), None)
            return None
        return self._load_file(path)

    def _load_file(self, path: Path) -> Pattern:
        """Load a pattern file, using the cache while the file is unchanged."""
        stat = path.stat()
        version = (stat.st_mtime_ns, stat.st_size)
        key = path.name.removesuffix(PATTERN_FILE_SUFFIX)

        cached = self._cache.get(key)
        if cached is not None and cached[0] == version:
            return cached[1]

        with open(path) as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Pattern file {path} does not contain a pattern mapping")

        pattern = Pattern.from_yaml_dict(data)
        self._cache[key] = (version, pattern)
        logger.debug(f"Loaded pattern {pattern.id} from {path}")
        return pattern

    def _get_path(self, pattern_id: str) -> Path:
        """Get the file path for a pattern."""
        # Sanitize id for filename
        safe_id = pattern_id.replace(" ", "_").replace("/", "_")
        return self.patterns_dir / f"{safe_id}{PATTERN_FILE_SUFFIX}"
