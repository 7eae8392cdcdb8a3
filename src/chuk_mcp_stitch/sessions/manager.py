"""
Work Session Manager - session lifecycle and navigation.

Every call reloads the pattern tree and the session's cursor, computes the
move, and writes the result back under the session's lock. Nothing is kept
in memory between calls.
"""

from __future__ import annotations

import logging

from chuk_mcp_stitch.models.pattern import Pattern
from chuk_mcp_stitch.models.progress import (
    SessionSummary,
    WorkDisplayState,
    WorkProgress,
    WorkSession,
)
from chuk_mcp_stitch.patterns import PatternLoader
from chuk_mcp_stitch.progress import (
    NavigationResult,
    NoInstructionsError,
    PatternNotFoundError,
    ProgressIntegrityError,
    SessionNotFoundError,
    advance,
    build_display_state,
    build_session_summary,
    check_progress,
    initial_progress,
    undo,
)
from chuk_mcp_stitch.sessions.store import ProgressStore

logger = logging.getLogger(__name__)


class WorkSessionManager:
    """
    Manages work sessions on top of the progress store.

    At most one active session exists per (account, pattern): starting work
    resumes it rather than creating another.
    """

    def __init__(self, store: ProgressStore, patterns: PatternLoader):
        """
        Initialize the manager.

        Args:
            store: Session and cursor persistence
            patterns: Source of pattern trees
        """
        self.store = store
        self.patterns = patterns

    async def start_or_resume(
        self, account_id: str, pattern_id: str
    ) -> tuple[WorkSession, WorkProgress, bool]:
        """
        Find the active session for (account, pattern) or start a new one.

        Args:
            account_id: Owning account
            pattern_id: Pattern to work

        Returns:
            (session, cursor, resumed) - `resumed` is False for a new session

        Raises:
            PatternNotFoundError: If the pattern does not exist
            NoInstructionsError: If the pattern has nothing to work yet
            ProgressIntegrityError: If the resumed cursor no longer matches the pattern
        """
        pattern = self._get_pattern(pattern_id)

        async with self.store.creation_lock:
            session = await self.store.find_active_session(account_id, pattern_id)
            if session is not None:
                progress = await self.store.load(session.id)
                check_progress(progress, pattern.sections)
                logger.debug(f"Resuming session {session.id}")
                return session, progress, True

            session = await self.store.create_session(account_id, pattern_id)
            try:
                progress = await self.store.initialize(session.id, pattern.sections, pattern_id)
            except NoInstructionsError:
                # No cursor means no usable session; leave nothing behind
                await self.store.delete_session(session.id)
                raise

        return session, progress, False

    async def advance(self, session_id: int) -> WorkDisplayState:
        """
        Move a session forward one stitch.

        Advancing a completed session changes nothing.

        Raises:
            SessionNotFoundError: If the session does not exist
            ProgressIntegrityError: If the pattern changed under the cursor
        """
        async with self.store.lock(session_id):
            session, progress, pattern = await self._load(session_id)
            result = advance(progress, pattern.sections, completed=session.is_completed)
            await self._apply(session, result)
            return build_display_state(session, result.progress, pattern)

    async def undo(self, session_id: int) -> WorkDisplayState:
        """
        Move a session back one stitch.

        Undoing a completed session reactivates it at its last stitch. Undo
        at the first stitch of the pattern changes nothing.

        Raises:
            SessionNotFoundError: If the session does not exist
            ProgressIntegrityError: If the pattern changed under the cursor
        """
        async with self.store.lock(session_id):
            session, progress, pattern = await self._load(session_id)
            result = undo(progress, pattern.sections, completed=session.is_completed)
            await self._apply(session, result)
            return build_display_state(session, result.progress, pattern)

    async def get_state(self, session_id: int) -> WorkDisplayState:
        """Current display state of a session without moving it."""
        session, progress, pattern = await self._load(session_id)
        check_progress(progress, pattern.sections)
        return build_display_state(session, progress, pattern)

    async def restart(self, session_id: int) -> WorkDisplayState:
        """
        Discard a session's cursor and start again from the first stitch.

        This is the recovery path after an integrity error.

        Raises:
            SessionNotFoundError: If the session does not exist
            NoInstructionsError: If the pattern no longer has anything to work
        """
        async with self.store.lock(session_id):
            session = await self.store.get_session(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            pattern = self._get_pattern(session.pattern_id)

            progress = initial_progress(session.id, pattern.sections, session.pattern_id)
            session.reactivate()
            progress = await self.store.save_state(session, progress)
            logger.info(f"Restarted session {session_id} from the first stitch")
            return build_display_state(session, progress, pattern)

    async def list_active_summaries(self, account_id: str) -> list[SessionSummary]:
        """
        Dashboard summaries of an account's active sessions.

        Most recently active first. Sessions whose pattern or cursor can no
        longer be read are skipped.
        """
        summaries = []
        for session in await self.store.list_sessions(account_id):
            if session.is_completed:
                continue
            pattern = self.patterns.get_pattern(session.pattern_id)
            if pattern is None:
                logger.warning(f"Session {session.id}: pattern {session.pattern_id} is gone")
                continue
            try:
                progress = await self.store.load(session.id)
            except (SessionNotFoundError, ProgressIntegrityError):
                continue
            summaries.append(build_session_summary(session, progress, pattern))
        return summaries

    async def _load(self, session_id: int) -> tuple[WorkSession, WorkProgress, Pattern]:
        session = await self.store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        progress = await self.store.load(session_id)
        pattern = self._get_pattern(session.pattern_id)
        return session, progress, pattern

    async def _apply(self, session: WorkSession, result: NavigationResult) -> None:
        """Persist a navigation result, updating session lifecycle fields in place."""
        if not result.moved:
            return

        if result.completed:
            session.mark_completed()
            logger.info(f"Session {session.id} completed {session.pattern_id}")
        elif session.is_completed:
            session.reactivate()
            logger.info(f"Session {session.id} reactivated by undo")
        else:
            session.touch()

        await self.store.save_state(session, result.progress)
        logger.debug(f"Session {session.id} now at {result.progress.unit}")

    def _get_pattern(self, pattern_id: str) -> Pattern:
        pattern = self.patterns.get_pattern(pattern_id)
        if pattern is None:
            raise PatternNotFoundError(pattern_id)
        return pattern
