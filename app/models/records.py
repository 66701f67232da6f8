# app/models/records.py
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

ABSENT = "A"

# A component mark is a number, or "A" when the student was absent
Mark = Union[float, Literal["A"]]

SubjectType = Literal["general", "elective"]
MarkStatus = Literal["Passed", "Failed"]


def _unique(values: List[str]) -> List[str]:
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


class SubjectDraft(BaseModel):
    """Subject fields as an operator submits them (no store-owned fields)."""

    name: str = Field(min_length=1)
    arabic_name: Optional[str] = None
    max_ta: int = Field(ge=0)
    max_ce: int = Field(ge=0)
    passing_total: int = 0
    faculty_name: Optional[str] = None
    target_classes: List[str] = Field(default_factory=list)
    subject_type: SubjectType = "general"
    enrolled_students: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _named(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("subject name must not be blank")
        return v

    # target_classes / enrolled_students are sets; order carries no meaning
    @field_validator("target_classes", "enrolled_students")
    @classmethod
    def _dedupe(cls, v: List[str]) -> List[str]:
        return _unique([s.strip() for s in v if s and s.strip()])


class SubjectConfig(SubjectDraft):
    id: str
    version: int = 0

    @property
    def max_total(self) -> int:
        return self.max_ta + self.max_ce

    @property
    def is_elective(self) -> bool:
        return self.subject_type == "elective"

    def applies_to_class(self, class_name: str) -> bool:
        return class_name in self.target_classes

    def is_enrolled(self, student_id: str) -> bool:
        return not self.is_elective or student_id in self.enrolled_students


class MarkEntry(BaseModel):
    ta: Mark
    ce: Mark
    total: float
    status: MarkStatus


class StudentRecord(BaseModel):
    id: str
    ad_no: str
    name: str
    class_name: str
    semester: Literal["Odd", "Even"] = "Odd"
    marks: Dict[str, MarkEntry] = Field(default_factory=dict)
    supplementary_exams: List[str] = Field(default_factory=list)

    # Derived; recomputed on every class load
    grand_total: float = 0
    average: float = 0
    rank: int = 0
    performance_level: str = "Needs Improvement"

    def has_passed_all_subjects(self) -> bool:
        return all(m.status == "Passed" for m in self.marks.values())

    def failed_subjects(self) -> List[str]:
        return [sid for sid, m in self.marks.items() if m.status == "Failed"]
