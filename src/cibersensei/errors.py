"""Domain error taxonomy.

Each error carries a stable `code` and the HTTP status the global handler
renders it with. Services raise these; routers let them propagate.
"""

from __future__ import annotations


class CoreError(Exception):
    """Base class for all domain errors."""

    code = "error"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class Unauthenticated(CoreError):
    """No current identity. The client must sign in again."""

    code = "unauthenticated"
    status_code = 401
    default_message = "Not authenticated"


class NotFound(CoreError):
    """Referenced mission, attempt, learner or friendship does not exist."""

    code = "not_found"
    status_code = 404
    default_message = "Content not found"


class LevelLocked(CoreError):
    """Mission level is above the learner's unlocked level."""

    code = "level_locked"
    status_code = 403
    default_message = "This mission is locked"

    def __init__(self, level: int, unlocked_level: int) -> None:
        super().__init__(f"Level {level} is locked (unlocked up to level {unlocked_level})")
        self.level = level
        self.unlocked_level = unlocked_level


class Duplicate(CoreError):
    """Unique-constraint violation, e.g. a second friend request for the same pair."""

    code = "duplicate"
    status_code = 409
    default_message = "Already exists"


class InvalidRequest(CoreError):
    """Well-formed but semantically invalid request."""

    code = "invalid_request"
    status_code = 400
    default_message = "Invalid request"


class Transient(CoreError):
    """Network or timeout failure talking to a collaborator. Safe for the caller to retry."""

    code = "transient"
    status_code = 503
    default_message = "Service temporarily unavailable, please retry"
