import pytest
from pydantic import ValidationError as PydanticValidationError

from app.models.records import SubjectDraft
from app.services.subject_resolver import normalize_name, prepare, resolve, subjects_by_class
from conftest import make_subject


def _draft(name, classes, **kw):
    return SubjectDraft(name=name, max_ta=70, max_ce=30, target_classes=classes, **kw)


def test_normalize_name():
    assert normalize_name("  islamic   HISTORY ") == "Islamic history"
    assert normalize_name("fiqh") == "Fiqh"
    assert normalize_name(None) == ""
    assert normalize_name("   ") == ""


def test_conflicts_across_several_existing_records():
    existing = [make_subject("a", "Fiqh", ["S1"]), make_subject("b", "Fiqh", ["S2"])]
    res = resolve(existing, _draft("fiqh", ["S1", "S2", "S3"]))
    assert res.conflicting_classes == ["S1", "S2"]
    assert res.allowed_classes == ["S3"]


def test_resolve_is_idempotent():
    existing = [make_subject("a", "Fiqh", ["S1"])]
    proposal = _draft("Fiqh", ["S1", "S2"])
    assert resolve(existing, proposal) == resolve(existing, proposal)


def test_editing_record_does_not_conflict_with_itself():
    existing = [make_subject("a", "Fiqh", ["S1", "S2"])]
    res = resolve(existing, _draft("Fiqh", ["S1", "S2", "S3"]), editing_id="a")
    assert res.conflicting_classes == []
    assert res.allowed_classes == ["S1", "S2", "S3"]


def test_other_names_do_not_conflict():
    existing = [make_subject("a", "Hadees", ["S1"])]
    res = resolve(existing, _draft("Fiqh", ["S1"]))
    assert res.allowed_classes == ["S1"]


def test_electives_follow_the_same_rule():
    existing = [make_subject("a", "French", ["S1"], subject_type="elective", faculty="Ms. Rose")]
    res = resolve(existing, _draft("French", ["S1", "S2"], subject_type="elective", faculty_name="Mr. Paul"))
    assert res.conflicting_classes == ["S1"]
    assert res.allowed_classes == ["S2"]


def test_prepare_forces_single_component_and_normalizes():
    draft = SubjectDraft(
        name=" quran  recitation",
        max_ta=100,
        max_ce=20,
        faculty_name="  ",
        target_classes=["S1", "S2"],
        enrolled_students=["st1"],
    )
    prepared = prepare(draft, ["S2"])
    assert prepared.name == "Quran recitation"
    assert prepared.max_ce == 0
    assert prepared.faculty_name is None
    assert prepared.target_classes == ["S2"]
    # general subjects carry no explicit enrollment
    assert prepared.enrolled_students == []


def test_target_classes_are_deduplicated():
    draft = _draft("Fiqh", ["S1", "S1", " S2 ", ""])
    assert draft.target_classes == ["S1", "S2"]


def test_subjects_by_class_includes_unassigned():
    subjects = [make_subject("a", "Fiqh", ["S1", "S2"]), make_subject("b", "Art", [])]
    mapping = subjects_by_class(subjects)
    assert [s.id for s in mapping["S1"]] == ["a"]
    assert [s.id for s in mapping["Unassigned"]] == ["b"]


@pytest.mark.parametrize("name", ["", "   ", "\t"])
def test_blank_subject_name_rejected(name):
    with pytest.raises(PydanticValidationError):
        _draft(name, ["S1"])
