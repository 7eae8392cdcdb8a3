"""
Pattern trees - read-only input to the work engine.

Patterns are authored elsewhere and stored as YAML files; this package
discovers and parses them.
"""

from chuk_mcp_stitch.patterns.loader import PatternLoader, PatternMetadata

__all__ = [
    "PatternLoader",
    "PatternMetadata",
]
