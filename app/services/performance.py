# app/services/performance.py
"""
Class and cohort statistics over students whose derived fields are current
(see marks_evaluator.derive_all and ranking.rank_by_class).
"""
from typing import Dict, Iterable, List, Optional

from app.core.config import level_labels
from app.core.errors import NotFound
from app.models.records import StudentRecord, SubjectConfig
from app.models.report_schemas import (
    ClassReport,
    ClassStat,
    CohortStats,
    PromotionStatus,
    Scorecard,
    ScorecardRow,
    SubjectStat,
    TopPerformer,
)
from app.services.marks_evaluator import letter_grade, percentage, round_half_up
from app.services.ranking import assign_ranks


def class_stats(students: Iterable[StudentRecord], class_name: str) -> ClassStat:
    members = [s for s in students if s.class_name == class_name]
    if not members:
        return ClassStat(class_name=class_name, student_count=0, average=0, top_student=None)

    passed = sum(1 for s in members if s.has_passed_all_subjects())
    totals = [s.grand_total for s in members]
    return ClassStat(
        class_name=class_name,
        student_count=len(members),
        average=int(round_half_up(sum(s.average for s in members) / len(members))),
        top_student=next((s for s in members if s.rank == 1), None),
        passed_students=passed,
        pass_rate=round_half_up(passed / len(members) * 100, 1),
        highest_score=max(totals),
        lowest_score=min(totals),
    )


def grade_distribution(students: Iterable[StudentRecord], labels: Optional[List[str]] = None) -> Dict[str, int]:
    """
    Students per performance level. Configured labels always appear (possibly 0);
    any other label found in the data is counted as-is.
    """
    dist: Dict[str, int] = {label: 0 for label in (labels if labels is not None else level_labels())}
    for s in students:
        dist[s.performance_level] = dist.get(s.performance_level, 0) + 1
    return dist


def top_performers(students: Iterable[StudentRecord], n: int) -> List[TopPerformer]:
    """
    Best n by grand total across whatever set is passed in. Ties share a rank
    and are listed by admission number.
    """
    if n <= 0:
        return []
    return [
        TopPerformer(
            rank=s.rank,
            student_name=s.name,
            ad_no=s.ad_no,
            class_name=s.class_name,
            grand_total=s.grand_total,
            average=s.average,
        )
        for s in assign_ranks(students)[:n]
    ]


def subject_stats(students: Iterable[StudentRecord], subject: SubjectConfig) -> SubjectStat:
    entries = [s.marks[subject.id] for s in students if subject.id in s.marks]
    passed = sum(1 for m in entries if m.status == "Passed")
    scores = [m.total for m in entries]
    return SubjectStat(
        subject_id=subject.id,
        subject_name=subject.name,
        total_students=len(entries),
        passed_students=passed,
        failed_students=len(entries) - passed,
        average_score=round_half_up(sum(scores) / len(scores), 2) if scores else 0,
        highest_score=max(scores) if scores else 0,
        lowest_score=min(scores) if scores else 0,
    )


def cohort_stats(
    students: List[StudentRecord],
    top_n: int,
    classes: Optional[Iterable[str]] = None,
) -> CohortStats:
    if classes is None:
        classes = sorted({s.class_name for s in students})
    return CohortStats(
        total_students=len(students),
        grade_distribution=grade_distribution(students),
        top_performers=top_performers(students, top_n),
        class_stats=[class_stats(students, c) for c in classes],
    )


def class_report(
    class_name: str,
    students: Iterable[StudentRecord],
    subjects: Iterable[SubjectConfig],
    top_n: int,
) -> ClassReport:
    members = [s for s in students if s.class_name == class_name]
    if not members:
        raise NotFound("Class", class_name)

    class_subjects = [s for s in subjects if s.applies_to_class(class_name)]
    return ClassReport(
        class_name=class_name,
        semester=members[0].semester,
        statistics=class_stats(members, class_name),
        grade_distribution=grade_distribution(members),
        subject_statistics=[subject_stats(members, sub) for sub in class_subjects],
        top_performers=top_performers([s for s in members if s.grand_total > 0], top_n),
    )


def applicable_subjects(student: StudentRecord, subjects: Iterable[SubjectConfig]) -> List[SubjectConfig]:
    return [s for s in subjects if s.applies_to_class(student.class_name) and s.is_enrolled(student.id)]


def promotion_status(student: StudentRecord, subjects: Iterable[SubjectConfig]) -> PromotionStatus:
    failed: List[str] = []
    supplementary: List[str] = []
    for subject in applicable_subjects(student, subjects):
        entry = student.marks.get(subject.id)
        if entry is None:
            supplementary.append(subject.id)
        elif entry.status == "Failed":
            failed.append(subject.id)
            supplementary.append(subject.id)

    eligible = not failed and not supplementary
    if eligible:
        remarks = "Eligible for promotion to next level"
    else:
        remarks = f"Supplementary examination required in {len(supplementary)} subject(s)"
    return PromotionStatus(
        eligible=eligible,
        failed_subjects=failed,
        supplementary_required=supplementary,
        remarks=remarks,
    )


def scorecard(student: StudentRecord, subjects: Iterable[SubjectConfig]) -> Scorecard:
    subjects = list(subjects)
    rows = []
    for subject in applicable_subjects(student, subjects):
        entry = student.marks.get(subject.id)
        pct = percentage(entry, subject) if entry else 0
        rows.append(
            ScorecardRow(
                subject_id=subject.id,
                subject_name=subject.name,
                arabic_name=subject.arabic_name,
                ta=entry.ta if entry else 0,
                ce=entry.ce if entry else 0,
                total=entry.total if entry else 0,
                max_total=subject.max_total,
                percentage=pct,
                status=entry.status if entry else "Pending",
                grade=letter_grade(pct) if entry else "-",
            )
        )

    return Scorecard(
        student_id=student.id,
        name=student.name,
        ad_no=student.ad_no,
        class_name=student.class_name,
        semester=student.semester,
        grand_total=student.grand_total,
        average=student.average,
        rank=student.rank,
        performance_level=student.performance_level,
        subjects=rows,
        promotion=promotion_status(student, subjects),
    )
