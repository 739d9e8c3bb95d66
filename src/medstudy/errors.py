"""
Error taxonomy for the study store.

Exceptions are raised inside the core and converted to StoreResult at the
boundary of each StudyStore operation; callers only ever see results.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Why an operation did not succeed."""

    VALIDATION = "validation"  # Input failed a precondition
    DUPLICATE = "duplicate"  # Discipline name already taken
    PERSISTENCE = "persistence"  # Key-value store write failed
    MALFORMED = "malformed"  # Stored/imported text could not be decoded


class MedStudyError(Exception):
    """Base class for study store errors."""

    kind: ErrorKind = ErrorKind.VALIDATION


class ValidationError(MedStudyError):
    """Raised when user input fails a precondition."""

    kind = ErrorKind.VALIDATION


class DuplicateError(MedStudyError):
    """Raised when a discipline name collides (case-insensitive)."""

    kind = ErrorKind.DUPLICATE


class PersistenceError(MedStudyError):
    """Raised when the key-value store rejects a write."""

    kind = ErrorKind.PERSISTENCE


class MalformedStateError(MedStudyError):
    """Raised when stored data does not decode into a valid state."""

    kind = ErrorKind.MALFORMED


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a StudyStore operation. Truthy on success."""

    ok: bool
    error: ErrorKind | None = None
    message: str = ""
    value: Any = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> StoreResult:
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(cls, error: MedStudyError) -> StoreResult:
        return cls(ok=False, error=error.kind, message=str(error))
