#!/usr/bin/env python3
"""
Async Stitch MCP Server using chuk-mcp-server

This server provides MCP tools for working through crochet and knitting
patterns one stitch at a time. Patterns are authored elsewhere and dropped
into the patterns directory as YAML; the server tracks where each account
is in each pattern and survives restarts mid-row.

The server provides tools for:
- Starting or resuming a work session on a pattern
- Advancing and undoing stitches across groups, rows and sections
- Listing in-progress sessions
- Pattern discovery
"""

import logging
import os
from pathlib import Path

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_stitch.patterns import PatternLoader
from chuk_mcp_stitch.sessions import ProgressStore, WorkSessionManager
from chuk_mcp_stitch.tools import register_pattern_tools, register_work_tools

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-stitch")

# Paths - use standard project structure
BASE_PATH = Path(os.environ.get("STITCH_DATA_DIR", Path.cwd()))
PATTERNS_DIR = BASE_PATH / "patterns"
SESSIONS_DIR = BASE_PATH / "sessions"

# Create managers
pattern_loader = PatternLoader(PATTERNS_DIR)
progress_store = ProgressStore(SESSIONS_DIR)
session_manager = WorkSessionManager(progress_store, pattern_loader)

# Register all tools
work_tools = register_work_tools(mcp, session_manager)
pattern_tools = register_pattern_tools(mcp, pattern_loader)

# Export tool functions for direct access
stitch_start_work = work_tools["stitch_start_work"]
stitch_advance = work_tools["stitch_advance"]
stitch_undo = work_tools["stitch_undo"]
stitch_get_work_state = work_tools["stitch_get_work_state"]
stitch_restart_work = work_tools["stitch_restart_work"]
stitch_list_sessions = work_tools["stitch_list_sessions"]

stitch_list_patterns = pattern_tools["stitch_list_patterns"]
stitch_describe_pattern = pattern_tools["stitch_describe_pattern"]

logger.info("CHUK Stitch MCP Server initialized")
logger.info(f"  Patterns dir: {PATTERNS_DIR}")
logger.info(f"  Sessions dir: {SESSIONS_DIR}")
