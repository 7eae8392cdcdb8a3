"""
Progress Store - persists work sessions and their single cursor.

Each session is one YAML file (`<id>.session.yaml`) holding the session
record and its one WorkProgress record. Every write replaces the whole file
atomically, so a crash leaves either the old cursor or the new one. There
is no history log.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import yaml

from chuk_mcp_stitch.constants import SESSION_FILE_SUFFIX
from chuk_mcp_stitch.models.pattern import PatternSection
from chuk_mcp_stitch.models.progress import WorkProgress, WorkSession
from chuk_mcp_stitch.progress.errors import ProgressIntegrityError, SessionNotFoundError
from chuk_mcp_stitch.progress.navigator import initial_progress

logger = logging.getLogger(__name__)


class ProgressStore:
    """
    File-backed store for sessions and cursors.

    Writers serialize on a per-session lock (`lock(session_id)`); the
    `creation_lock` serializes find-or-create across sessions.
    """

    def __init__(self, sessions_dir: Path):
        """
        Initialize the store.

        Args:
            sessions_dir: Directory for session files
        """
        self.sessions_dir = sessions_dir
        self.creation_lock = asyncio.Lock()
        self._locks: dict[int, asyncio.Lock] = {}
        self._next_id: int | None = None

    def lock(self, session_id: int) -> asyncio.Lock:
        """
        Lock guarding read-compute-write on one session.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        if session_id not in self._locks:
            self._require(session_id)
            self._locks[session_id] = asyncio.Lock()
        return self._locks[session_id]

    # Session records

    async def create_session(self, account_id: str, pattern_id: str) -> WorkSession:
        """
        Create and persist a new session without a cursor.

        Args:
            account_id: Owning account
            pattern_id: Pattern being worked

        Returns:
            The created WorkSession
        """
        session = WorkSession(id=self._allocate_id(), account_id=account_id, pattern_id=pattern_id)
        self._write(session, None)
        logger.info(f"Created work session {session.id} for {account_id} on {pattern_id}")
        return session

    async def get_session(self, session_id: int) -> WorkSession | None:
        """Get a session by id, or None if it does not exist."""
        data = self._read(session_id)
        if data is None:
            return None
        return WorkSession.from_yaml_dict(data["session"])

    async def find_active_session(self, account_id: str, pattern_id: str) -> WorkSession | None:
        """Get the active session for (account, pattern), if any."""
        for session in await self.list_sessions(account_id):
            if session.pattern_id == pattern_id and not session.is_completed:
                return session
        return None

    async def list_sessions(self, account_id: str | None = None) -> list[WorkSession]:
        """
        List sessions, most recently active first.

        Args:
            account_id: Optional filter by owning account
        """
        if not self.sessions_dir.exists():
            return []

        result = []
        for path in self.sessions_dir.glob(f"*{SESSION_FILE_SUFFIX}"):
            with open(path) as f:
                data = yaml.safe_load(f)
            session = WorkSession.from_yaml_dict(data["session"])
            if account_id is None or session.account_id == account_id:
                result.append(session)

        return sorted(result, key=lambda s: s.last_active_at, reverse=True)

    async def delete_session(self, session_id: int) -> bool:
        """
        Delete a session and its cursor.

        Returns True if deleted, False if not found.
        """
        path = self._get_path(session_id)
        if path.exists():
            path.unlink()
            self._locks.pop(session_id, None)
            return True
        return False

    # Cursor

    async def initialize(
        self,
        session_id: int,
        sections: Sequence[PatternSection],
        pattern_id: str = "",
    ) -> WorkProgress:
        """
        Create the session's cursor at the first stitch of the pattern.

        Raises:
            NoInstructionsError: If the pattern has no stitch-units; nothing is written
            SessionNotFoundError: If the session does not exist
        """
        progress = initial_progress(session_id, sections, pattern_id)
        return await self.save(progress)

    async def load(self, session_id: int) -> WorkProgress:
        """
        Load the session's cursor.

        Raises:
            SessionNotFoundError: If the session does not exist
            ProgressIntegrityError: If the session has no cursor
        """
        data = self._require(session_id)
        if not data.get("progress"):
            raise ProgressIntegrityError(session_id, f"Session {session_id} has no cursor.")
        return WorkProgress.from_yaml_dict(session_id, data["progress"])

    async def save(self, progress: WorkProgress) -> WorkProgress:
        """
        Overwrite the session's cursor.

        Returns:
            The cursor as stored (with a fresh `updated_at`)
        """
        data = self._require(progress.session_id)
        session = WorkSession.from_yaml_dict(data["session"])
        progress = _stamped(progress)
        self._write(session, progress)
        return progress

    async def save_state(self, session: WorkSession, progress: WorkProgress) -> WorkProgress:
        """
        Overwrite session record and cursor in a single write.

        Returns:
            The cursor as stored
        """
        self._require(session.id)
        progress = _stamped(progress)
        self._write(session, progress)
        return progress

    # File handling

    def _allocate_id(self) -> int:
        if self._next_id is None:
            existing = [self._id_from_path(p) for p in self._session_files()]
            self._next_id = max(existing, default=0) + 1
        session_id = self._next_id
        self._next_id += 1
        return session_id

    def _session_files(self) -> list[Path]:
        if not self.sessions_dir.exists():
            return []
        return list(self.sessions_dir.glob(f"*{SESSION_FILE_SUFFIX}"))

    def _id_from_path(self, path: Path) -> int:
        return int(path.name.removesuffix(SESSION_FILE_SUFFIX))

    def _get_path(self, session_id: int) -> Path:
        """Get the file path for a session."""
        return self.sessions_dir / f"{session_id}{SESSION_FILE_SUFFIX}"

    def _read(self, session_id: int) -> dict[str, Any] | None:
        path = self._get_path(session_id)
        if not path.exists():
            return None
        with open(path) as f:
            return yaml.safe_load(f)

    def _require(self, session_id: int) -> dict[str, Any]:
        data = self._read(session_id)
        if data is None:
            raise SessionNotFoundError(session_id)
        return data

    def _write(self, session: WorkSession, progress: WorkProgress | None) -> None:
        """Atomically replace a session file."""
        self.sessions_dir.mkdir(parents=True, exist_ok=True)

        yaml_dict = {
            "session": session.to_yaml_dict(),
            "progress": progress.to_yaml_dict() if progress else None,
        }

        fd, tmp_name = tempfile.mkstemp(dir=self.sessions_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                yaml.safe_dump(yaml_dict, f, default_flow_style=False, sort_keys=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._get_path(session.id))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def _stamped(progress: WorkProgress) -> WorkProgress:
    return progress.model_copy(update={"updated_at": datetime.now(UTC)})
