"""Domain errors raised by the lifecycle and ranking services.

Every error carries a stable ``code`` for programmatic handling and a
human-readable ``message``. The HTTP layer maps codes to status codes; the
services themselves never raise HTTP exceptions.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    ALREADY_DECIDED = "ALREADY_DECIDED"
    MISSING_REASON = "MISSING_REASON"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    ID_GENERATION_EXHAUSTED = "ID_GENERATION_EXHAUSTED"
    DUPLICATE_ENROLLMENT = "DUPLICATE_ENROLLMENT"
    DUPLICATE_SLUG = "DUPLICATE_SLUG"
    INVALID_INPUT = "INVALID_INPUT"
    STORAGE_ERROR = "STORAGE_ERROR"


class ArenaError(Exception):
    code: ErrorCode = ErrorCode.INVALID_TRANSITION

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "detail": self.message,
            "details": self.details,
        }


class NotFound(ArenaError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} not found: {entity_id}", {"entity": entity, "id": entity_id})


class InvalidTransition(ArenaError):
    """A state machine precondition does not hold."""
    code = ErrorCode.INVALID_TRANSITION


class AlreadyDecided(InvalidTransition):
    """Approve/reject attempted on an enrollment that is no longer pending."""
    code = ErrorCode.ALREADY_DECIDED


class MissingReason(ArenaError):
    code = ErrorCode.MISSING_REASON

    def __init__(self, message: str = "A reason is required when disqualifying an entry"):
        super().__init__(message)


class InvalidAmount(ArenaError):
    code = ErrorCode.INVALID_AMOUNT


class ConcurrentModification(ArenaError):
    """The record changed between the read and the guarded write."""
    code = ErrorCode.CONCURRENT_MODIFICATION


class IdGenerationExhausted(ArenaError):
    code = ErrorCode.ID_GENERATION_EXHAUSTED


class DuplicateEnrollment(ArenaError):
    code = ErrorCode.DUPLICATE_ENROLLMENT


class DuplicateSlug(ArenaError):
    code = ErrorCode.DUPLICATE_SLUG


class InvalidInput(ArenaError):
    """Rejected by a database constraint that retrying cannot satisfy (NOT NULL, foreign key)."""
    code = ErrorCode.INVALID_INPUT


class StorageError(ArenaError):
    code = ErrorCode.STORAGE_ERROR
