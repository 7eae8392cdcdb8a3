"""
Work tools - MCP tools for working through a pattern.

Tools for starting/resuming a session, advancing and undoing stitches,
and listing in-progress sessions.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_stitch.constants import ErrorCode, SuccessMessages
from chuk_mcp_stitch.progress import StitchError
from chuk_mcp_stitch.sessions import WorkSessionManager

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def _error(e: Exception) -> str:
    """JSON error payload; domain errors carry their own code."""
    code = e.code if isinstance(e, StitchError) else ErrorCode.INTERNAL
    return json.dumps({"status": "error", "code": code.value, "message": str(e)})


def register_work_tools(
    mcp: ChukMCPServer,
    manager: WorkSessionManager,
) -> dict[str, Any]:
    """
    Register work-mode tools with the MCP server.

    Args:
        mcp: The MCP server instance
        manager: The work session manager

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def stitch_start_work(account_id: str, pattern_id: str) -> str:
        """
        Start or resume work on a pattern.

        Resumes the account's active session on the pattern if there is one,
        otherwise starts a new session at the first stitch.

        Args:
            account_id: Account doing the work
            pattern_id: Pattern identifier (e.g., 'granny-square')

        Returns:
            JSON string with the session id and current work state

        Example:
            stitch_start_work(account_id="alice", pattern_id="granny-square")
        """
        try:
            session, _, resumed = await manager.start_or_resume(account_id, pattern_id)
            state = await manager.get_state(session.id)

            template = (
                SuccessMessages.SESSION_RESUMED if resumed else SuccessMessages.SESSION_STARTED
            )
            return json.dumps(
                {
                    "status": "success",
                    "message": template.format(session_id=session.id, pattern_id=pattern_id),
                    "session_id": session.id,
                    "resumed": resumed,
                    "state": state.model_dump(),
                }
            )
        except StitchError as e:
            logger.info(f"Cannot start work on {pattern_id}: {e}")
            return _error(e)
        except Exception as e:
            logger.exception("Failed to start work")
            return _error(e)

    tools["stitch_start_work"] = stitch_start_work

    @mcp.tool  # type: ignore[arg-type]
    async def stitch_advance(session_id: int) -> str:
        """
        Mark the current stitch done and move to the next one.

        Crosses group repeats, row repeats, rows and sections as needed.
        After the last stitch the session is marked completed; advancing a
        completed session changes nothing.

        Args:
            session_id: Work session id

        Returns:
            JSON string with the new work state

        Example:
            stitch_advance(session_id=1)
        """
        try:
            state = await manager.advance(session_id)
            payload: dict[str, Any] = {"status": "success", "state": state.model_dump()}
            if state.completed:
                payload["message"] = SuccessMessages.PATTERN_COMPLETED
            return json.dumps(payload)
        except StitchError as e:
            logger.warning(f"Cannot advance session {session_id}: {e}")
            return _error(e)
        except Exception as e:
            logger.exception("Failed to advance")
            return _error(e)

    tools["stitch_advance"] = stitch_advance

    @mcp.tool  # type: ignore[arg-type]
    async def stitch_undo(session_id: int) -> str:
        """
        Step back one stitch.

        Undoing a completed session reopens it at its last stitch. Undo at
        the very first stitch of the pattern changes nothing.

        Args:
            session_id: Work session id

        Returns:
            JSON string with the new work state

        Example:
            stitch_undo(session_id=1)
        """
        try:
            state = await manager.undo(session_id)
            return json.dumps({"status": "success", "state": state.model_dump()})
        except StitchError as e:
            logger.warning(f"Cannot undo session {session_id}: {e}")
            return _error(e)
        except Exception as e:
            logger.exception("Failed to undo")
            return _error(e)

    tools["stitch_undo"] = stitch_undo

    @mcp.tool  # type: ignore[arg-type]
    async def stitch_get_work_state(session_id: int) -> str:
        """
        Get the current work state of a session without moving it.

        Args:
            session_id: Work session id

        Returns:
            JSON string with the work state

        Example:
            stitch_get_work_state(session_id=1)
        """
        try:
            state = await manager.get_state(session_id)
            return json.dumps({"status": "success", "state": state.model_dump()})
        except StitchError as e:
            return _error(e)
        except Exception as e:
            logger.exception("Failed to get work state")
            return _error(e)

    tools["stitch_get_work_state"] = stitch_get_work_state

    @mcp.tool  # type: ignore[arg-type]
    async def stitch_restart_work(session_id: int) -> str:
        """
        Restart a session from the first stitch of the pattern.

        Use this when a session reports an integrity error because its
        pattern was edited after work began.

        Args:
            session_id: Work session id

        Returns:
            JSON string with the new work state

        Example:
            stitch_restart_work(session_id=1)
        """
        try:
            state = await manager.restart(session_id)
            return json.dumps(
                {
                    "status": "success",
                    "message": SuccessMessages.SESSION_RESTARTED.format(session_id=session_id),
                    "state": state.model_dump(),
                }
            )
        except StitchError as e:
            return _error(e)
        except Exception as e:
            logger.exception("Failed to restart work")
            return _error(e)

    tools["stitch_restart_work"] = stitch_restart_work

    @mcp.tool  # type: ignore[arg-type]
    async def stitch_list_sessions(account_id: str) -> str:
        """
        List an account's in-progress sessions, most recent first.

        Args:
            account_id: Account identifier

        Returns:
            JSON string with session summaries

        Example:
            stitch_list_sessions(account_id="alice")
        """
        try:
            summaries = await manager.list_active_summaries(account_id)
            return json.dumps(
                {
                    "status": "success",
                    "sessions": [s.model_dump(mode="json") for s in summaries],
                    "count": len(summaries),
                }
            )
        except Exception as e:
            logger.exception("Failed to list sessions")
            return _error(e)

    tools["stitch_list_sessions"] = stitch_list_sessions

    return tools
