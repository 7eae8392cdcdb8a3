"""
Error taxonomy for the work engine.

Boundary no-ops (undo at the first stitch, advance on a completed session)
are not errors and never raise.
"""

from __future__ import annotations

from chuk_mcp_stitch.constants import ErrorCode, ErrorMessages


class StitchError(Exception):
    """Base class for work engine errors."""

    code: ErrorCode = ErrorCode.INTERNAL


class NoInstructionsError(StitchError):
    """The pattern has no stitch-units anywhere; retry once it has content."""

    code = ErrorCode.NO_INSTRUCTIONS

    def __init__(self, pattern_id: str):
        self.pattern_id = pattern_id
        super().__init__(ErrorMessages.NO_INSTRUCTIONS.format(pattern_id=pattern_id))


class ProgressIntegrityError(StitchError):
    """
    The cursor no longer matches the pattern tree.

    Raised when the section, row or stitch-unit a cursor points at is gone,
    usually because the pattern was edited under an in-progress session.
    """

    code = ErrorCode.INTEGRITY_ERROR

    def __init__(self, session_id: int, message: str):
        self.session_id = session_id
        super().__init__(message)


class SessionNotFoundError(StitchError):
    """No session with the given id."""

    code = ErrorCode.SESSION_NOT_FOUND

    def __init__(self, session_id: int):
        self.session_id = session_id
        super().__init__(ErrorMessages.SESSION_NOT_FOUND.format(session_id=session_id))


class PatternNotFoundError(StitchError):
    """No pattern with the given id."""

    code = ErrorCode.PATTERN_NOT_FOUND

    def __init__(self, pattern_id: str):
        self.pattern_id = pattern_id
        super().__init__(ErrorMessages.PATTERN_NOT_FOUND.format(pattern_id=pattern_id))
