import asyncio
import uuid

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_registry
from app.core.errors import NotFound, StaleWrite
from app.main import app
from app.models.records import MarkEntry, StudentRecord, SubjectConfig
from app.services.registry import RecordsRegistry


class MemoryStore:
    """Same coroutine interface as MongoRecordStore, kept in dicts."""

    def __init__(self):
        self.subjects = {}
        self.students = {}

    async def get_all_subjects(self):
        return [s.model_copy(deep=True) for s in self.subjects.values()]

    async def get_subject(self, subject_id):
        s = self.subjects.get(subject_id)
        return s.model_copy(deep=True) if s else None

    async def add_subject(self, draft):
        subject = SubjectConfig(id=uuid.uuid4().hex, version=0, **draft.model_dump())
        self.subjects[subject.id] = subject
        return subject.model_copy(deep=True)

    async def update_subject(self, subject_id, draft, expected_version):
        current = self.subjects.get(subject_id)
        if current is None:
            raise NotFound("Subject", subject_id)
        if current.version != expected_version:
            raise StaleWrite(subject_id, expected_version)
        updated = SubjectConfig(id=subject_id, version=current.version + 1, **draft.model_dump())
        self.subjects[subject_id] = updated
        return updated.model_copy(deep=True)

    async def delete_subject(self, subject_id):
        return self.subjects.pop(subject_id, None) is not None

    async def enroll_student_in_subject(self, subject_id, student_id):
        s = self.subjects[subject_id]
        if student_id not in s.enrolled_students:
            s.enrolled_students.append(student_id)
        s.version += 1
        return s.model_copy(deep=True)

    async def unenroll_student_from_subject(self, subject_id, student_id):
        s = self.subjects[subject_id]
        s.enrolled_students = [x for x in s.enrolled_students if x != student_id]
        s.version += 1
        return s.model_copy(deep=True)

    async def get_all_students(self, class_name=None):
        return [
            s.model_copy(deep=True)
            for s in self.students.values()
            if class_name is None or s.class_name == class_name
        ]

    async def get_student(self, student_id):
        s = self.students.get(student_id)
        return s.model_copy(deep=True) if s else None

    async def add_student(self, student):
        self.students[student.id] = student.model_copy(deep=True)
        return student

    async def save_mark(self, student_id, subject_id, entry: MarkEntry):
        if student_id not in self.students:
            raise NotFound("Student", student_id)
        self.students[student_id].marks[subject_id] = entry.model_copy()

    async def clear_mark(self, student_id, subject_id):
        if student_id not in self.students:
            raise NotFound("Student", student_id)
        self.students[student_id].marks.pop(subject_id, None)

    async def save_subject_marks(self, subject_id, entries):
        for sid, entry in entries.items():
            self.students[sid].marks[subject_id] = entry.model_copy()

    async def save_derived(self, students):
        for s in students:
            stored = self.students[s.id]
            stored.grand_total = s.grand_total
            stored.average = s.average
            stored.rank = s.rank
            stored.performance_level = s.performance_level


def make_subject(sid, name, classes, subject_type="general", faculty=None, enrolled=None, max_ta=70, max_ce=30):
    return SubjectConfig(
        id=sid,
        name=name,
        max_ta=max_ta,
        max_ce=max_ce,
        passing_total=40,
        faculty_name=faculty,
        target_classes=classes,
        subject_type=subject_type,
        enrolled_students=enrolled or [],
    )


def make_student(sid, ad_no, class_name, grand_total=0, name=None, **extra):
    return StudentRecord(
        id=sid,
        ad_no=ad_no,
        name=name or f"Student {ad_no}",
        class_name=class_name,
        grand_total=grand_total,
        **extra,
    )


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def registry(store):
    return RecordsRegistry(store)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_registry] = lambda: RecordsRegistry(store)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
