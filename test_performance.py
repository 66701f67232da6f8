import pytest

from app.core.errors import NotFound
from app.services.marks_evaluator import evaluate
from app.services.performance import (
    class_report,
    class_stats,
    cohort_stats,
    grade_distribution,
    promotion_status,
    scorecard,
    subject_stats,
    top_performers,
)
from conftest import make_student, make_subject


def test_class_stats_empty_class():
    stat = class_stats([], "S1")
    assert stat.student_count == 0
    assert stat.average == 0
    assert stat.top_student is None


def test_class_stats_values():
    english = make_subject("g1", "English", ["S1"])
    students = [
        make_student("a", "1", "S1", grand_total=90, average=90, rank=1,
                     marks={"g1": evaluate(60, 30, english)}),
        make_student("b", "2", "S1", grand_total=45, average=45.5, rank=2,
                     marks={"g1": evaluate(40, 5, english)}),
        make_student("c", "3", "S2", grand_total=99, average=99, rank=1),
    ]
    stat = class_stats(students, "S1")
    assert stat.student_count == 2
    # (90 + 45.5) / 2 = 67.75
    assert stat.average == 68
    assert stat.top_student.id == "a"
    assert stat.passed_students == 1
    assert stat.pass_rate == 50.0
    assert stat.highest_score == 90
    assert stat.lowest_score == 45


def test_grade_distribution_keeps_unknown_labels():
    students = [
        make_student("a", "1", "S1", performance_level="Excellent"),
        make_student("b", "2", "S1", performance_level="Failed"),
        make_student("c", "3", "S1", performance_level="Outstanding"),
    ]
    dist = grade_distribution(students)
    assert dist["Excellent"] == 1
    assert dist["Failed"] == 1
    assert dist["Good"] == 0
    assert dist["Outstanding"] == 1


def test_top_performers_tiebreak_by_admission_number():
    students = [
        make_student("a", "12", "S1", grand_total=300),
        make_student("b", "2", "S2", grand_total=300),
        make_student("c", "5", "S1", grand_total=400),
        make_student("d", "7", "S1", grand_total=100),
    ]
    top = top_performers(students, 3)
    assert [t.ad_no for t in top] == ["5", "2", "12"]
    assert [t.rank for t in top] == [1, 2, 2]
    assert top_performers(students, 0) == []


def test_subject_stats():
    english = make_subject("g1", "English", ["S1"])
    students = [
        make_student("a", "1", "S1", marks={"g1": evaluate(60, 30, english)}),
        make_student("b", "2", "S1", marks={"g1": evaluate(20, 20, english)}),
        make_student("c", "3", "S1"),
    ]
    stat = subject_stats(students, english)
    assert stat.total_students == 2
    assert stat.passed_students == 1
    assert stat.failed_students == 1
    assert stat.average_score == 65
    assert stat.highest_score == 90
    assert stat.lowest_score == 40


def test_promotion_needs_every_applicable_subject():
    english = make_subject("g1", "English", ["S1"])
    maths = make_subject("g2", "Maths", ["S1"])
    french = make_subject("e1", "French", ["S1"], subject_type="elective", enrolled=["other"])
    student = make_student("a", "1", "S1", marks={"g1": evaluate(20, 20, english)})
    status = promotion_status(student, [english, maths, french])
    assert status.failed_subjects == ["g1"]
    assert status.supplementary_required == ["g1", "g2"]
    assert not status.eligible
    assert "2 subject(s)" in status.remarks


def test_scorecard_rows():
    english = make_subject("g1", "English", ["S1"])
    maths = make_subject("g2", "Maths", ["S1"])
    student = make_student("a", "1", "S1", marks={"g1": evaluate(60, 25, english)})
    card = scorecard(student, [english, maths])
    rows = {r.subject_id: r for r in card.subjects}
    assert rows["g1"].percentage == 85
    assert rows["g1"].grade == "A"
    assert rows["g2"].status == "Pending"
    assert not card.promotion.eligible


def test_class_report_unknown_class():
    with pytest.raises(NotFound):
        class_report("S9", [], [], 5)


def test_cohort_stats():
    students = [
        make_student("a", "1", "S1", grand_total=10, performance_level="Good", rank=1),
        make_student("b", "2", "S2", grand_total=20, performance_level="Good", rank=1),
    ]
    stats = cohort_stats(students, 5)
    assert stats.total_students == 2
    assert stats.grade_distribution["Good"] == 2
    assert [c.class_name for c in stats.class_stats] == ["S1", "S2"]
    assert stats.top_performers[0].ad_no == "2"
