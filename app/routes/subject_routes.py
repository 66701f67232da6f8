from typing import Dict, List

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_registry
from app.models.records import SubjectConfig, SubjectDraft
from app.models.report_schemas import (
    BulkDeleteRequest,
    FacultyGroup,
    FlattenedAssignment,
    SubjectUpdateRequest,
    SubjectWriteResponse,
)
from app.services.registry import RecordsRegistry
from app.services.subject_resolver import subjects_by_class
from app.services.subject_views import flatten, group_by_faculty

router = APIRouter(prefix="/subjects", tags=["Subjects"])


@router.get("", response_model=List[SubjectConfig])
async def list_subjects(registry: RecordsRegistry = Depends(get_registry)):
    return await registry.list_subjects()


@router.get("/assignments", response_model=List[FlattenedAssignment])
async def list_assignments(registry: RecordsRegistry = Depends(get_registry)):
    """One row per general subject per class; electives merged across classes."""
    return flatten(await registry.list_subjects())


@router.get("/by-faculty", response_model=List[FacultyGroup])
async def list_by_faculty(registry: RecordsRegistry = Depends(get_registry)):
    return group_by_faculty(await registry.list_subjects())


@router.get("/by-class", response_model=Dict[str, List[SubjectConfig]])
async def list_by_class(registry: RecordsRegistry = Depends(get_registry)):
    return subjects_by_class(await registry.list_subjects())


@router.post("", response_model=SubjectWriteResponse, status_code=201)
async def create_subject(
    draft: SubjectDraft,
    confirm: bool = Query(False, description="Save the non-conflicting classes when some conflict"),
    registry: RecordsRegistry = Depends(get_registry),
):
    return await registry.create_subject(draft, confirm=confirm)


@router.put("/{subject_id}", response_model=SubjectWriteResponse)
async def update_subject(
    subject_id: str,
    req: SubjectUpdateRequest,
    confirm: bool = Query(False),
    registry: RecordsRegistry = Depends(get_registry),
):
    draft = SubjectDraft(**req.model_dump(exclude={"version"}))
    return await registry.update_subject(subject_id, draft, req.version, confirm=confirm)


@router.delete("/{subject_id}", response_model=SubjectWriteResponse)
async def delete_subject(subject_id: str, registry: RecordsRegistry = Depends(get_registry)):
    return await registry.delete_subject(subject_id)


@router.post("/bulk-delete", response_model=SubjectWriteResponse)
async def bulk_delete(req: BulkDeleteRequest, registry: RecordsRegistry = Depends(get_registry)):
    """
    Delete assignment rows by id. A merged elective row removes every
    per-class record behind it.
    """
    return await registry.delete_assignments(req.ids)


@router.post("/{subject_id}/enrollments/{student_id}", response_model=SubjectWriteResponse)
async def enroll_student(subject_id: str, student_id: str, registry: RecordsRegistry = Depends(get_registry)):
    return await registry.enroll(subject_id, student_id)


@router.delete("/{subject_id}/enrollments/{student_id}", response_model=SubjectWriteResponse)
async def unenroll_student(subject_id: str, student_id: str, registry: RecordsRegistry = Depends(get_registry)):
    return await registry.unenroll(subject_id, student_id)
