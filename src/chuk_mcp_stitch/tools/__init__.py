"""
MCP tool implementations.

Tools are organized by domain:
- work - Session start/resume, advance, undo, dashboard
- patterns - Pattern discovery
"""

from chuk_mcp_stitch.tools.patterns import register_pattern_tools
from chuk_mcp_stitch.tools.work import register_work_tools

__all__ = [
    "register_pattern_tools",
    "register_work_tools",
]
