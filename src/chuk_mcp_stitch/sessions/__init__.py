"""
Work sessions - lifecycle and persistence.

This module provides:
- ProgressStore: One persisted cursor per session, atomic overwrite
- WorkSessionManager: StartOrResume / Advance / Undo orchestration
"""

from chuk_mcp_stitch.sessions.manager import WorkSessionManager
from chuk_mcp_stitch.sessions.store import ProgressStore

__all__ = [
    "ProgressStore",
    "WorkSessionManager",
]
