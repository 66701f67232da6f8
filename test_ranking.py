from app.services.ranking import admission_key, assign_ranks, rank_by_class
from conftest import make_student


def test_ties_share_rank_and_skip():
    students = [
        make_student("a", "3", "S1", grand_total=80),
        make_student("b", "1", "S1", grand_total=60),
        make_student("c", "2", "S1", grand_total=80),
    ]
    ranked = assign_ranks(students)
    assert [s.rank for s in ranked] == [1, 1, 3]
    # equal totals listed by admission number
    assert [s.id for s in ranked] == ["c", "a", "b"]


def test_admission_numbers_sort_numerically():
    assert admission_key("9") < admission_key("10")
    assert admission_key("10") < admission_key("10a")


def test_empty_class():
    assert assign_ranks([]) == []


def test_rank_by_class_keeps_classes_separate():
    students = [
        make_student("a", "1", "S1", grand_total=50),
        make_student("b", "2", "S2", grand_total=90),
        make_student("c", "3", "S1", grand_total=70),
    ]
    ranks = {s.id: s.rank for s in rank_by_class(students)}
    assert ranks == {"a": 2, "b": 1, "c": 1}
