# app/services/subject_resolver.py
import re
from typing import Dict, Iterable, List, Optional

from app.core.config import CONFIG
from app.models.records import SubjectConfig, SubjectDraft
from app.models.report_schemas import Resolution
from app.services.marks_evaluator import is_single_component


def normalize_name(name: str | None) -> str:
    """
    Trim, collapse inner whitespace, sentence case.
    "  islamic   HISTORY " -> "Islamic history"
    """
    if not name:
        return ""
    cleaned = re.sub(r"\s+", " ", name.strip())
    if not cleaned:
        return ""
    return cleaned[0].upper() + cleaned[1:].lower()


def resolve(
    existing: Iterable[SubjectConfig],
    proposed: SubjectDraft,
    editing_id: Optional[str] = None,
) -> Resolution:
    """
    Split the proposed target classes into those free to write and those where a
    subject with the same normalized name already sits. The record being edited
    never conflicts with itself. Electives follow the same rule.

    Both lists keep the order of proposed.target_classes.
    """
    key = normalize_name(proposed.name)
    taken = set()
    for subject in existing:
        if subject.id == editing_id:
            continue
        if normalize_name(subject.name) != key:
            continue
        taken.update(subject.target_classes)

    conflicting = [c for c in proposed.target_classes if c in taken]
    allowed = [c for c in proposed.target_classes if c not in taken]
    return Resolution(allowed_classes=allowed, conflicting_classes=conflicting)


def prepare(draft: SubjectDraft, target_classes: List[str]) -> SubjectDraft:
    """
    The draft as it will be written: normalized names, single-component
    subjects lose their CE maximum, general subjects carry no enrollment list.
    """
    max_ce = 0 if is_single_component(draft.max_ta) else draft.max_ce
    enrolled = draft.enrolled_students if draft.subject_type == "elective" else []
    return draft.model_copy(
        update={
            "name": normalize_name(draft.name),
            "arabic_name": (draft.arabic_name or "").strip() or None,
            "faculty_name": (draft.faculty_name or "").strip() or None,
            "max_ce": max_ce,
            "target_classes": list(target_classes),
            "enrolled_students": list(enrolled),
        }
    )


def subjects_by_class(subjects: Iterable[SubjectConfig], classes: Iterable[str] | None = None) -> Dict[str, List[SubjectConfig]]:
    """
    class -> subjects targeting it. Subjects without classes go under the
    unassigned label. With `classes` given, only those keys (in that order).
    """
    subjects = list(subjects)
    if classes is None:
        classes = sorted({c for s in subjects for c in s.target_classes})

    mapping: Dict[str, List[SubjectConfig]] = {}
    for cls in classes:
        class_subs = [s for s in subjects if s.applies_to_class(cls)]
        if class_subs:
            mapping[cls] = class_subs

    unassigned = [s for s in subjects if not s.target_classes]
    if unassigned:
        mapping[CONFIG.UNASSIGNED_FACULTY] = unassigned
    return mapping
