# app/services/record_store.py
import uuid
from contextlib import contextmanager
from typing import Iterable, List, Optional

from pymongo import ReturnDocument, UpdateOne
from pymongo.errors import PyMongoError

from app.core.database import get_collections
from app.core.errors import NotFound, PersistenceFailure, StaleWrite
from app.core.logger import get_logger
from app.models.records import MarkEntry, StudentRecord, SubjectConfig, SubjectDraft

log = get_logger("store")


@contextmanager
def _guard(operation: str):
    try:
        yield
    except PyMongoError as exc:
        log.error("Store %s failed: %s", operation, exc)
        raise PersistenceFailure(f"{operation} failed: {exc}") from exc


def _subject_from_doc(doc: dict) -> SubjectConfig:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return SubjectConfig(**data)


def _student_from_doc(doc: dict) -> StudentRecord:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return StudentRecord(**data)


class MongoRecordStore:
    """
    Subjects and students in MongoDB. Every method is one call against one
    collection, except the bulk writes which are one bulk_write each.
    """

    def __init__(self, subjects=None, students=None):
        if subjects is None or students is None:
            subjects, students = get_collections()
        self.subjects = subjects
        self.students = students

    # ---- subjects ----

    async def get_all_subjects(self) -> List[SubjectConfig]:
        with _guard("get_all_subjects"):
            docs = await self.subjects.find({}).to_list(None)
        return [_subject_from_doc(d) for d in docs]

    async def get_subject(self, subject_id: str) -> Optional[SubjectConfig]:
        with _guard("get_subject"):
            doc = await self.subjects.find_one({"_id": subject_id})
        return _subject_from_doc(doc) if doc else None

    async def add_subject(self, draft: SubjectDraft) -> SubjectConfig:
        subject_id = uuid.uuid4().hex
        doc = {"_id": subject_id, "version": 0, **draft.model_dump()}
        with _guard("add_subject"):
            await self.subjects.insert_one(doc)
        return _subject_from_doc(doc)

    async def update_subject(self, subject_id: str, draft: SubjectDraft, expected_version: int) -> SubjectConfig:
        with _guard("update_subject"):
            doc = await self.subjects.find_one_and_update(
                {"_id": subject_id, "version": expected_version},
                {"$set": draft.model_dump(), "$inc": {"version": 1}},
                return_document=ReturnDocument.AFTER,
            )
            if doc is None:
                exists = await self.subjects.count_documents({"_id": subject_id}, limit=1)
        if doc is None:
            if not exists:
                raise NotFound("Subject", subject_id)
            raise StaleWrite(subject_id, expected_version)
        return _subject_from_doc(doc)

    async def delete_subject(self, subject_id: str) -> bool:
        with _guard("delete_subject"):
            result = await self.subjects.delete_one({"_id": subject_id})
        return result.deleted_count > 0

    async def enroll_student_in_subject(self, subject_id: str, student_id: str) -> SubjectConfig:
        return await self._change_enrollment(subject_id, {"$addToSet": {"enrolled_students": student_id}})

    async def unenroll_student_from_subject(self, subject_id: str, student_id: str) -> SubjectConfig:
        return await self._change_enrollment(subject_id, {"$pull": {"enrolled_students": student_id}})

    async def _change_enrollment(self, subject_id: str, change: dict) -> SubjectConfig:
        change = {**change, "$inc": {"version": 1}}
        with _guard("change_enrollment"):
            doc = await self.subjects.find_one_and_update(
                {"_id": subject_id}, change, return_document=ReturnDocument.AFTER
            )
        if doc is None:
            raise NotFound("Subject", subject_id)
        return _subject_from_doc(doc)

    # ---- students ----

    async def get_all_students(self, class_name: str | None = None) -> List[StudentRecord]:
        query = {"class_name": class_name} if class_name else {}
        with _guard("get_all_students"):
            docs = await self.students.find(query).to_list(None)
        return [_student_from_doc(d) for d in docs]

    async def get_student(self, student_id: str) -> Optional[StudentRecord]:
        with _guard("get_student"):
            doc = await self.students.find_one({"_id": student_id})
        return _student_from_doc(doc) if doc else None

    async def add_student(self, student: StudentRecord) -> StudentRecord:
        doc = student.model_dump()
        doc["_id"] = doc.pop("id") or uuid.uuid4().hex
        with _guard("add_student"):
            await self.students.replace_one({"_id": doc["_id"]}, doc, upsert=True)
        return _student_from_doc(doc)

    async def save_mark(self, student_id: str, subject_id: str, entry: MarkEntry) -> None:
        with _guard("save_mark"):
            result = await self.students.update_one(
                {"_id": student_id}, {"$set": {f"marks.{subject_id}": entry.model_dump()}}
            )
        if result.matched_count == 0:
            raise NotFound("Student", student_id)

    async def clear_mark(self, student_id: str, subject_id: str) -> None:
        with _guard("clear_mark"):
            result = await self.students.update_one(
                {"_id": student_id}, {"$unset": {f"marks.{subject_id}": ""}}
            )
        if result.matched_count == 0:
            raise NotFound("Student", student_id)

    async def save_subject_marks(self, subject_id: str, entries: dict) -> None:
        """entries: student_id -> MarkEntry, all for one subject."""
        if not entries:
            return
        ops = [
            UpdateOne({"_id": sid}, {"$set": {f"marks.{subject_id}": e.model_dump()}})
            for sid, e in entries.items()
        ]
        with _guard("save_subject_marks"):
            await self.students.bulk_write(ops, ordered=False)

    async def save_derived(self, students: Iterable[StudentRecord]) -> None:
        ops = [
            UpdateOne(
                {"_id": s.id},
                {"$set": {
                    "grand_total": s.grand_total,
                    "average": s.average,
                    "rank": s.rank,
                    "performance_level": s.performance_level,
                }},
            )
            for s in students
        ]
        if not ops:
            return
        with _guard("save_derived"):
            await self.students.bulk_write(ops, ordered=False)
