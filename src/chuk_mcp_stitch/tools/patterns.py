"""
Pattern tools - MCP tools for pattern discovery.

Patterns are read-only here; authoring happens elsewhere.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_stitch.constants import ErrorCode, ErrorMessages
from chuk_mcp_stitch.patterns import PatternLoader
from chuk_mcp_stitch.progress import describe_sections, total_unit_count

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_pattern_tools(
    mcp: ChukMCPServer,
    loader: PatternLoader,
) -> dict[str, Any]:
    """
    Register pattern discovery tools with the MCP server.

    Args:
        mcp: The MCP server instance
        loader: The pattern loader

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def stitch_list_patterns() -> str:
        """
        List available patterns.

        Returns:
            JSON string with list of pattern summaries

        Example:
            stitch_list_patterns()
        """
        try:
            patterns = loader.list_patterns()

            return json.dumps(
                {
                    "status": "success",
                    "patterns": [
                        {
                            "id": p.id,
                            "name": p.name,
                            "description": p.description,
                            "sections": p.section_count,
                            "rows": p.row_count,
                        }
                        for p in patterns
                    ],
                    "count": len(patterns),
                }
            )
        except Exception as e:
            logger.exception("Failed to list patterns")
            return json.dumps(
                {"status": "error", "code": ErrorCode.INTERNAL.value, "message": str(e)}
            )

    tools["stitch_list_patterns"] = stitch_list_patterns

    @mcp.tool  # type: ignore[arg-type]
    async def stitch_describe_pattern(pattern_id: str) -> str:
        """
        Get the structure of a pattern.

        Returns its sections and rows with the number of stitches to work
        in each, counting group and row repeats.

        Args:
            pattern_id: Pattern identifier (e.g., 'granny-square')

        Returns:
            JSON string with pattern structure

        Example:
            stitch_describe_pattern(pattern_id="granny-square")
        """
        try:
            pattern = loader.get_pattern(pattern_id)
            if pattern is None:
                return json.dumps(
                    {
                        "status": "error",
                        "code": ErrorCode.PATTERN_NOT_FOUND.value,
                        "message": ErrorMessages.PATTERN_NOT_FOUND.format(pattern_id=pattern_id),
                    }
                )

            return json.dumps(
                {
                    "status": "success",
                    "pattern": {
                        "id": pattern.id,
                        "name": pattern.name,
                        "description": pattern.description,
                        "sections": describe_sections(pattern.sections),
                        "total_stitch_units": total_unit_count(pattern),
                    },
                }
            )
        except Exception as e:
            logger.exception("Failed to describe pattern")
            return json.dumps(
                {"status": "error", "code": ErrorCode.INTERNAL.value, "message": str(e)}
            )

    tools["stitch_describe_pattern"] = stitch_describe_pattern

    return tools
