# app/models/__init__.py

from .records import MarkEntry, StudentRecord, SubjectConfig, SubjectDraft
from .report_schemas import ClassStat, FacultyGroup, FlattenedAssignment, Resolution

__all__ = [
    "MarkEntry",
    "StudentRecord",
    "SubjectConfig",
    "SubjectDraft",
    "ClassStat",
    "FacultyGroup",
    "FlattenedAssignment",
    "Resolution",
]
