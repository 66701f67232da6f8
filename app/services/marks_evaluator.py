# app/services/marks_evaluator.py
"""
Turns raw TA/CE component marks into stored MarkEntry values, and derives the
student-level fields (grand total, average, performance level) from them.

Everything here is pure: same inputs, same outputs, no store access.
"""
import math
from typing import Dict, Iterable, List, Mapping, Tuple

from app.core.config import CONFIG
from app.core.errors import ValidationError
from app.models.records import ABSENT, MarkEntry, StudentRecord, SubjectConfig


def is_single_component(max_ta: int) -> bool:
    return max_ta == CONFIG.SINGLE_COMPONENT_MAX_TA


def minimum_ta(max_ta: int) -> int:
    return math.ceil(max_ta * CONFIG.TA_PASS_RATIO)


def minimum_ce(max_ce: int) -> int:
    return math.ceil(max_ce * CONFIG.CE_PASS_RATIO)


def _component(value, label: str, maximum: int, subject_name: str) -> float:
    """
    Numeric value of one component, or ValidationError.
    Absent ("A") counts as 0.
    """
    if value == ABSENT:
        return 0
    # bool is an int subclass; a checkbox value is not a mark
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{label} for {subject_name} must be a number or 'A'", [repr(value)])
    if math.isnan(value) or value < 0 or value > maximum:
        raise ValidationError(
            f"{label} for {subject_name} must be between 0 and {maximum}", [str(value)]
        )
    return value


def evaluate(ta, ce, subject: SubjectConfig) -> MarkEntry:
    """
    Evaluate one student's marks in one subject.

    Passing needs BOTH ta >= ceil(max_ta * 0.4) and ce >= ceil(max_ce * 0.5);
    a strong TA never makes up for a failed CE. passing_total is not consulted.
    Subjects without a CE component (max_ce == 0) store ce as 0.
    """
    ta_val = _component(ta, "TA", subject.max_ta, subject.name)

    has_ce = subject.max_ce > 0 and not is_single_component(subject.max_ta)
    if has_ce:
        ce_val = _component(ce, "CE", subject.max_ce, subject.name)
    else:
        ce, ce_val = 0, 0

    passed_ta = ta != ABSENT and ta_val >= minimum_ta(subject.max_ta)
    passed_ce = not has_ce or (ce != ABSENT and ce_val >= minimum_ce(subject.max_ce))

    return MarkEntry(
        ta=ta,
        ce=ce,
        total=ta_val + ce_val,
        status="Passed" if passed_ta and passed_ce else "Failed",
    )


def reevaluate(entry: MarkEntry, subject: SubjectConfig) -> MarkEntry:
    return evaluate(entry.ta, entry.ce, subject)


def round_half_up(value: float, digits: int = 0) -> float:
    """Halves go up (62.5 -> 63), unlike round() which goes to even."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def percentage(entry: MarkEntry, subject: SubjectConfig) -> int:
    if subject.max_total <= 0:
        return 0
    return int(round_half_up(entry.total / subject.max_total * 100))


_GRADES: Tuple[Tuple[int, str], ...] = (
    (90, "A+"),
    (80, "A"),
    (70, "B+"),
    (60, "B"),
    (50, "C+"),
    (40, "C"),
    (35, "D"),
)


def letter_grade(pct: float) -> str:
    for floor, grade in _GRADES:
        if pct >= floor:
            return grade
    return "F"


def classify(
    average: float,
    any_failed: bool,
    levels: Iterable[Tuple[str, float]] | None = None,
    failed_label: str | None = None,
) -> str:
    """
    Performance level. A single failed subject means the failed level,
    whatever the average; otherwise the first level whose minimum is met.
    """
    failed_label = failed_label or CONFIG.FAILED_LEVEL
    if any_failed:
        return failed_label
    levels = list(levels if levels is not None else CONFIG.PERFORMANCE_LEVELS)
    for label, floor in levels:
        if average >= floor:
            return label
    # below every floor but nothing failed: lowest level, never the failed one
    return levels[-1][0] if levels else failed_label


def counted_subjects(mark_ids: Iterable[str], subjects: Mapping[str, SubjectConfig]) -> int:
    # All elective marks together count as one subject; marks for a deleted subject count as general
    general = 0
    has_elective = False
    for sid in mark_ids:
        subject = subjects.get(sid)
        if subject is not None and subject.is_elective:
            has_elective = True
        else:
            general += 1
    return general + (1 if has_elective else 0)


def derive_student(student: StudentRecord, subjects: Mapping[str, SubjectConfig]) -> StudentRecord:
    """
    Recompute grand_total, average and performance_level from the marks map.
    Rank is left alone; see ranking.assign_ranks.
    """
    grand_total = sum(m.total for m in student.marks.values())
    count = counted_subjects(student.marks.keys(), subjects)
    average = round_half_up(grand_total / count, 2) if count else 0

    level = classify(average, not student.has_passed_all_subjects())

    return student.model_copy(
        update={"grand_total": grand_total, "average": average, "performance_level": level}
    )


def derive_all(students: List[StudentRecord], subjects: Iterable[SubjectConfig]) -> List[StudentRecord]:
    by_id: Dict[str, SubjectConfig] = {s.id: s for s in subjects}
    return [derive_student(s, by_id) for s in students]
