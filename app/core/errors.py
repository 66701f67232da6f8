# app/core/errors.py
from typing import Any, Dict, Iterable, List


class RecordsError(Exception):
    """Base class for every error the records engine raises on purpose."""

    kind = "records_error"

    def detail(self) -> Dict[str, Any]:
        return {"message": str(self)}


class ValidationError(RecordsError):
    """
    Input that can never be written: bad marks, unknown ids in a payload,
    or a subject whose target classes are all taken.
    Nothing is persisted when this is raised.
    """

    kind = "validation_error"

    def __init__(self, reason: str, offending: Iterable[str] = ()):
        self.reason = reason
        self.offending: List[str] = list(offending)
        super().__init__(reason if not self.offending else f"{reason}: {', '.join(self.offending)}")

    def detail(self) -> Dict[str, Any]:
        return {"reason": self.reason, "offending": self.offending}


class ConflictWarning(RecordsError):
    """Some target classes already carry a subject with this name; the rest may be written after confirmation."""

    kind = "conflict_warning"

    def __init__(self, subject_name: str, allowed: List[str], conflicting: List[str]):
        self.subject_name = subject_name
        self.allowed = allowed
        self.conflicting = conflicting
        super().__init__(
            f"'{subject_name}' already exists in {', '.join(conflicting)}; "
            f"confirm to save only {', '.join(allowed)}"
        )

    def detail(self) -> Dict[str, Any]:
        return {
            "subject": self.subject_name,
            "allowed_classes": self.allowed,
            "conflicting_classes": self.conflicting,
        }


class NotFound(RecordsError):
    kind = "not_found"

    def __init__(self, what: str, ident: str):
        self.what = what
        self.ident = ident
        super().__init__(f"{what} not found: {ident}")

    def detail(self) -> Dict[str, Any]:
        return {"message": str(self), self.what.lower(): self.ident}


class PersistenceFailure(RecordsError):
    """The store rejected a write or could not be reached."""

    kind = "persistence_failure"


class StaleWrite(PersistenceFailure):
    """The record changed since the caller read it."""

    kind = "stale_write"

    def __init__(self, subject_id: str, expected_version: int):
        self.subject_id = subject_id
        self.expected_version = expected_version
        super().__init__(
            f"Subject {subject_id} was modified by someone else (expected version {expected_version})"
        )

    def detail(self) -> Dict[str, Any]:
        return {
            "message": str(self),
            "subject_id": self.subject_id,
            "expected_version": self.expected_version,
        }
