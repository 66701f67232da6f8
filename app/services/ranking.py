# app/services/ranking.py
import re
from typing import Dict, Iterable, List, Tuple

from app.models.records import StudentRecord


def admission_key(ad_no: str) -> Tuple:
    """Numeric-aware sort key: "9" < "10" < "10a"."""
    parts = re.split(r"(\d+)", (ad_no or "").strip())
    return tuple(int(p) if p.isdigit() else p.lower() for p in parts)


def merit_order(students: Iterable[StudentRecord]) -> List[StudentRecord]:
    """Highest grand total first; equal totals by admission number."""
    return sorted(students, key=lambda s: (-s.grand_total, admission_key(s.ad_no)))


def assign_ranks(students_in_class: Iterable[StudentRecord]) -> List[StudentRecord]:
    """
    Standard competition ranking over one class: equal totals share a rank and
    the next distinct total skips the tie (80, 80, 60 -> 1, 1, 3).
    Always recomputed for the whole class.
    """
    ranked: List[StudentRecord] = []
    previous_total = None
    rank = 0
    for position, student in enumerate(merit_order(students_in_class), start=1):
        if student.grand_total != previous_total:
            rank = position
            previous_total = student.grand_total
        ranked.append(student.model_copy(update={"rank": rank}))
    return ranked


def rank_by_class(students: Iterable[StudentRecord]) -> List[StudentRecord]:
    classes: Dict[str, List[StudentRecord]] = {}
    for s in students:
        classes.setdefault(s.class_name, []).append(s)

    out: List[StudentRecord] = []
    for members in classes.values():
        out.extend(assign_ranks(members))
    return out
