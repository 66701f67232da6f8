# app/services/registry.py
"""
Write paths and class loads. This is the only place that talks to the store,
and it guarantees two things: no mark is saved without going through
marks_evaluator.evaluate, and no subject is saved without going through
subject_resolver.resolve. Every write returns the slice of state it changed.
"""
from typing import Dict, List, Optional, Tuple

from app.core.config import CONFIG
from app.core.errors import ConflictWarning, NotFound, ValidationError
from app.core.logger import get_logger
from app.models.records import MarkEntry, StudentRecord, SubjectConfig, SubjectDraft
from app.models.report_schemas import (
    ClassReport,
    ClassStat,
    CohortStats,
    MarksWriteResponse,
    Resolution,
    Scorecard,
    SubjectWriteResponse,
)
from app.services import performance
from app.services.marks_evaluator import derive_all, evaluate, reevaluate
from app.services.ranking import assign_ranks, rank_by_class
from app.services.subject_resolver import prepare, resolve
from app.services.subject_views import flatten, related_ids

log = get_logger("registry")


def _check_resolution(name: str, proposed: List[str], res: Resolution, confirm: bool) -> None:
    # A subject proposed with no classes at all is a standalone unit and is allowed
    if proposed and not res.allowed_classes:
        raise ValidationError(
            f"'{name}' already exists in every selected class", res.conflicting_classes
        )
    if res.conflicting_classes and not confirm:
        log.warning(
            "Subject %s conflicts in %s; waiting for confirmation", name, res.conflicting_classes
        )
        raise ConflictWarning(name, res.allowed_classes, res.conflicting_classes)


class RecordsRegistry:
    def __init__(self, store):
        self.store = store

    # ---- subjects ----

    async def list_subjects(self) -> List[SubjectConfig]:
        return await self.store.get_all_subjects()

    async def _require_subject(self, subject_id: str) -> SubjectConfig:
        subject = await self.store.get_subject(subject_id)
        if subject is None:
            raise NotFound("Subject", subject_id)
        return subject

    async def _require_student(self, student_id: str) -> StudentRecord:
        student = await self.store.get_student(student_id)
        if student is None:
            raise NotFound("Student", student_id)
        return student

    async def create_subject(self, draft: SubjectDraft, confirm: bool = False) -> SubjectWriteResponse:
        existing = await self.store.get_all_subjects()
        res = resolve(existing, draft)
        _check_resolution(draft.name, draft.target_classes, res, confirm)

        subject = await self.store.add_subject(prepare(draft, res.allowed_classes))
        log.info("Created subject %s (%s) for %s", subject.name, subject.id, subject.target_classes)
        return SubjectWriteResponse(
            subject=subject, resolution=res, assignments=flatten(existing + [subject])
        )

    async def update_subject(
        self,
        subject_id: str,
        draft: SubjectDraft,
        expected_version: int,
        confirm: bool = False,
    ) -> SubjectWriteResponse:
        existing = await self.store.get_all_subjects()
        current = next((s for s in existing if s.id == subject_id), None)
        if current is None:
            raise NotFound("Subject", subject_id)

        res = resolve(existing, draft, editing_id=subject_id)
        _check_resolution(draft.name, draft.target_classes, res, confirm)
        prepared = prepare(draft, res.allowed_classes)

        # New maxima: every stored entry must still be valid before anything is written
        rescored: Dict[str, MarkEntry] = {}
        touched_classes: List[str] = []
        if (prepared.max_ta, prepared.max_ce) != (current.max_ta, current.max_ce):
            rescored, touched_classes = await self._rescore(subject_id, prepared)

        subject = await self.store.update_subject(subject_id, prepared, expected_version)
        if rescored:
            await self.store.save_subject_marks(subject_id, rescored)
            await self._refresh_classes(touched_classes)
            log.info("Re-evaluated %d mark entries for subject %s", len(rescored), subject_id)

        log.info("Updated subject %s (%s) to version %d", subject.name, subject_id, subject.version)
        catalog = [subject if s.id == subject_id else s for s in existing]
        return SubjectWriteResponse(subject=subject, resolution=res, assignments=flatten(catalog))

    async def _rescore(self, subject_id: str, prepared: SubjectDraft) -> Tuple[Dict[str, MarkEntry], List[str]]:
        candidate = SubjectConfig(id=subject_id, **prepared.model_dump())
        students = await self.store.get_all_students()
        rescored: Dict[str, MarkEntry] = {}
        classes = set()
        offending: List[str] = []
        for student in students:
            entry = student.marks.get(subject_id)
            if entry is None:
                continue
            try:
                rescored[student.id] = reevaluate(entry, candidate)
                classes.add(student.class_name)
            except ValidationError:
                offending.append(student.ad_no)
        if offending:
            raise ValidationError(
                f"Stored marks exceed the new maximum for {candidate.name}; students", offending
            )
        return rescored, sorted(classes)

    async def delete_subject(self, subject_id: str) -> SubjectWriteResponse:
        await self._require_subject(subject_id)
        await self.store.delete_subject(subject_id)
        log.info("Deleted subject %s", subject_id)
        remaining = await self.store.get_all_subjects()
        return SubjectWriteResponse(deleted_ids=[subject_id], assignments=flatten(remaining))

    async def delete_assignments(self, row_ids: List[str]) -> SubjectWriteResponse:
        """
        Delete display rows. A merged elective row takes every stored record
        behind it with it.
        """
        catalog = await self.store.get_all_subjects()
        known = {s.id for s in catalog}
        rows = flatten(catalog)

        targets: List[str] = []
        for row_id in row_ids:
            for sid in related_ids(rows, row_id):
                if sid not in targets:
                    targets.append(sid)

        missing = [sid for sid in targets if sid not in known]
        if missing:
            raise ValidationError("Unknown subject ids", missing)

        for sid in targets:
            await self.store.delete_subject(sid)
        log.info("Deleted %d subject records for rows %s", len(targets), row_ids)
        remaining = [s for s in catalog if s.id not in targets]
        return SubjectWriteResponse(deleted_ids=targets, assignments=flatten(remaining))

    async def enroll(self, subject_id: str, student_id: str) -> SubjectWriteResponse:
        subject = await self._require_subject(subject_id)
        await self._require_student(student_id)
        if not subject.is_elective:
            raise ValidationError("Cannot enroll students in general subject", [subject.name])
        updated = await self.store.enroll_student_in_subject(subject_id, student_id)
        log.info("Enrolled %s in %s", student_id, subject.name)
        return await self._subject_slice(updated)

    async def unenroll(self, subject_id: str, student_id: str) -> SubjectWriteResponse:
        subject = await self._require_subject(subject_id)
        updated = await self.store.unenroll_student_from_subject(subject_id, student_id)
        log.info("Unenrolled %s from %s", student_id, subject.name)
        return await self._subject_slice(updated)

    async def _subject_slice(self, subject: SubjectConfig) -> SubjectWriteResponse:
        catalog = await self.store.get_all_subjects()
        return SubjectWriteResponse(subject=subject, assignments=flatten(catalog))

    # ---- marks ----

    async def record_marks(self, student_id: str, subject_id: str, ta, ce) -> MarksWriteResponse:
        student = await self._require_student(student_id)
        subject = await self._require_subject(subject_id)

        if subject.is_elective:
            if student_id not in subject.enrolled_students:
                raise ValidationError(f"{student.name} is not enrolled in {subject.name}", [student.ad_no])
        elif not subject.applies_to_class(student.class_name):
            raise ValidationError(f"{subject.name} is not taught in", [student.class_name])

        entry = evaluate(ta, ce, subject)
        await self.store.save_mark(student_id, subject_id, entry)
        log.info("Marks for %s in %s: %s (%s)", student.ad_no, subject.name, entry.total, entry.status)

        class_students = await self._refresh_class(student.class_name)
        return MarksWriteResponse(
            student_id=student_id, subject_id=subject_id, entry=entry, class_students=class_students
        )

    async def clear_marks(self, student_id: str, subject_id: str) -> MarksWriteResponse:
        student = await self._require_student(student_id)
        await self.store.clear_mark(student_id, subject_id)
        log.info("Cleared marks for %s in %s", student.ad_no, subject_id)
        class_students = await self._refresh_class(student.class_name)
        return MarksWriteResponse(
            student_id=student_id, subject_id=subject_id, entry=None, class_students=class_students
        )

    async def _refresh_class(self, class_name: str) -> List[StudentRecord]:
        ranked = await self.load_class(class_name)
        await self.store.save_derived(ranked)
        log.info("Ranks recomputed for class %s (%d students)", class_name, len(ranked))
        return ranked

    async def _refresh_classes(self, class_names: List[str]) -> None:
        for class_name in class_names:
            await self._refresh_class(class_name)

    # ---- reads ----

    async def load_class(self, class_name: str) -> List[StudentRecord]:
        """Students of one class with every derived field recomputed from marks."""
        students = await self.store.get_all_students(class_name)
        subjects = await self.store.get_all_subjects()
        return assign_ranks(derive_all(students, subjects))

    async def load_cohort(self) -> List[StudentRecord]:
        students = await self.store.get_all_students()
        subjects = await self.store.get_all_subjects()
        return rank_by_class(derive_all(students, subjects))

    async def class_stats(self, class_name: str) -> ClassStat:
        return performance.class_stats(await self.load_class(class_name), class_name)

    async def class_report(self, class_name: str, top_n: Optional[int] = None) -> ClassReport:
        students = await self.load_class(class_name)
        subjects = await self.store.get_all_subjects()
        return performance.class_report(
            class_name, students, subjects, top_n or CONFIG.DEFAULT_TOP_PERFORMERS
        )

    async def overview(self, top_n: Optional[int] = None) -> CohortStats:
        students = await self.load_cohort()
        return performance.cohort_stats(students, top_n or CONFIG.DEFAULT_TOP_PERFORMERS)

    async def scorecard(self, student_id: str) -> Scorecard:
        student = await self._require_student(student_id)
        ranked = await self.load_class(student.class_name)
        current = next(s for s in ranked if s.id == student_id)
        subjects = await self.store.get_all_subjects()
        return performance.scorecard(current, subjects)
