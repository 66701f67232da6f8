# app/models/report_schemas.py
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from app.models.records import Mark, MarkEntry, StudentRecord, SubjectConfig, SubjectDraft


class Resolution(BaseModel):
    allowed_classes: List[str]
    conflicting_classes: List[str]


class FlattenedAssignment(BaseModel):
    """One display row: a general subject in one class, or a merged elective."""

    id: str
    name: str
    arabic_name: Optional[str] = None
    max_ta: int
    max_ce: int
    passing_total: int
    faculty_name: Optional[str] = None
    subject_type: str
    specific_class: Union[str, List[str]]
    enrolled_students: List[str] = Field(default_factory=list)
    related_ids: List[str] = Field(default_factory=list)

    def class_label(self) -> str:
        if isinstance(self.specific_class, list):
            return ", ".join(self.specific_class)
        return self.specific_class


class FacultyGroup(BaseModel):
    faculty_name: str
    assignments: List[FlattenedAssignment]


class ClassStat(BaseModel):
    class_name: str
    student_count: int
    average: float
    top_student: Optional[StudentRecord] = None
    passed_students: int = 0
    pass_rate: float = 0
    highest_score: float = 0
    lowest_score: float = 0


class SubjectStat(BaseModel):
    subject_id: str
    subject_name: str
    total_students: int
    passed_students: int
    failed_students: int
    average_score: float
    highest_score: float
    lowest_score: float


class TopPerformer(BaseModel):
    rank: int
    student_name: str
    ad_no: str
    class_name: str
    grand_total: float
    average: float


class CohortStats(BaseModel):
    total_students: int
    grade_distribution: Dict[str, int]
    top_performers: List[TopPerformer]
    class_stats: List[ClassStat]


class ClassReport(BaseModel):
    class_name: str
    semester: str
    statistics: ClassStat
    grade_distribution: Dict[str, int]
    subject_statistics: List[SubjectStat]
    top_performers: List[TopPerformer]


class PromotionStatus(BaseModel):
    eligible: bool
    failed_subjects: List[str]
    supplementary_required: List[str]
    remarks: str = ""


class ScorecardRow(BaseModel):
    subject_id: str
    subject_name: str
    arabic_name: Optional[str] = None
    ta: Mark = 0
    ce: Mark = 0
    total: float = 0
    max_total: int
    percentage: int
    status: str
    grade: str


class Scorecard(BaseModel):
    student_id: str
    name: str
    ad_no: str
    class_name: str
    semester: str
    grand_total: float
    average: float
    rank: int
    performance_level: str
    subjects: List[ScorecardRow]
    promotion: PromotionStatus


# ---- request / response bodies ----

class SubjectUpdateRequest(SubjectDraft):
    # Version the caller read; the write is rejected if it moved
    version: int


class MarksRequest(BaseModel):
    ta: Mark
    ce: Mark = 0


class BulkDeleteRequest(BaseModel):
    ids: List[str]


class SubjectWriteResponse(BaseModel):
    """A subject write plus the catalog views it changed."""

    subject: Optional[SubjectConfig] = None
    resolution: Optional[Resolution] = None
    deleted_ids: List[str] = Field(default_factory=list)
    assignments: List[FlattenedAssignment]


class MarksWriteResponse(BaseModel):
    """The written entry plus the re-ranked class it belongs to."""

    student_id: str
    subject_id: str
    entry: Optional[MarkEntry] = None
    class_students: List[StudentRecord]
