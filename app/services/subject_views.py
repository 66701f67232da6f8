# app/services/subject_views.py
"""
Read-time views over the stored subject catalog.

Storage keeps one record per (subject, faculty, scheme) and electives are often
saved as several per-class records. Management screens want one row per class
for general subjects and one merged row per elective, so both views below are
built from the same row builder and always agree on the elective merge.
"""
from typing import Dict, Iterable, List, Tuple

from app.core.config import CONFIG
from app.models.records import SubjectConfig
from app.models.report_schemas import FacultyGroup, FlattenedAssignment
from app.services.subject_resolver import normalize_name


def faculty_label(subject: SubjectConfig) -> str:
    return (subject.faculty_name or "").strip() or CONFIG.UNASSIGNED_FACULTY


def _elective_key(subject: SubjectConfig) -> Tuple[str, str]:
    return normalize_name(subject.name), normalize_name(faculty_label(subject))


def _row(subject: SubjectConfig, specific_class, enrolled: List[str], related: List[str]) -> FlattenedAssignment:
    return FlattenedAssignment(
        id=subject.id,
        name=subject.name,
        arabic_name=subject.arabic_name,
        max_ta=subject.max_ta,
        max_ce=subject.max_ce,
        passing_total=subject.passing_total,
        faculty_name=subject.faculty_name,
        subject_type=subject.subject_type,
        specific_class=specific_class,
        enrolled_students=enrolled,
        related_ids=related,
    )


def _merge_electives(records: List[SubjectConfig]) -> FlattenedAssignment:
    classes = sorted({c for r in records for c in r.target_classes})
    enrolled = sorted({sid for r in records for sid in r.enrolled_students})
    return _row(
        records[0],
        classes if classes else CONFIG.NO_CLASS_MARKER,
        enrolled,
        [r.id for r in records],
    )


def _build_rows(subjects: Iterable[SubjectConfig]) -> List[FlattenedAssignment]:
    rows: List[FlattenedAssignment] = []
    electives: Dict[Tuple[str, str], List[SubjectConfig]] = {}

    for subject in subjects:
        if subject.is_elective:
            electives.setdefault(_elective_key(subject), []).append(subject)
            continue
        if not subject.target_classes:
            rows.append(_row(subject, CONFIG.NO_CLASS_MARKER, [], [subject.id]))
            continue
        for cls in subject.target_classes:
            rows.append(_row(subject, cls, [], [subject.id]))

    rows.extend(_merge_electives(group) for group in electives.values())
    return sorted(rows, key=lambda r: (r.name, r.class_label()))


def flatten(subjects: Iterable[SubjectConfig]) -> List[FlattenedAssignment]:
    """One row per general subject x class, one merged row per elective (name, faculty)."""
    return _build_rows(subjects)


def group_by_faculty(subjects: Iterable[SubjectConfig]) -> List[FacultyGroup]:
    """
    Same rows as flatten(), bucketed by faculty. Blank faculty goes to
    "Unassigned". Buckets are sorted by faculty name.
    """
    buckets: Dict[str, List[SubjectConfig]] = {}
    labels: Dict[str, str] = {}
    for subject in subjects:
        label = faculty_label(subject)
        key = normalize_name(label)
        labels.setdefault(key, label)
        buckets.setdefault(key, []).append(subject)

    groups = [
        FacultyGroup(faculty_name=labels[key], assignments=_build_rows(members))
        for key, members in buckets.items()
    ]
    return sorted(groups, key=lambda g: g.faculty_name)


def related_ids(rows: Iterable[FlattenedAssignment], row_id: str) -> List[str]:
    """Every stored record behind the row with this id (just the id itself if not found)."""
    for row in rows:
        if row.id == row_id:
            return list(row.related_ids)
    return [row_id]
