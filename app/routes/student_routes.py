from typing import List

from fastapi import APIRouter, Depends

from app.api.deps import get_registry
from app.models.records import StudentRecord
from app.models.report_schemas import MarksRequest, MarksWriteResponse
from app.services.registry import RecordsRegistry

router = APIRouter(prefix="/students", tags=["Student Marks"])


@router.get("/class/{class_name}", response_model=List[StudentRecord])
async def class_students(class_name: str, registry: RecordsRegistry = Depends(get_registry)):
    """Students of a class, ranked, with totals recomputed from their marks."""
    return await registry.load_class(class_name)


@router.put("/{student_id}/marks/{subject_id}", response_model=MarksWriteResponse)
async def enter_marks(
    student_id: str,
    subject_id: str,
    req: MarksRequest,
    registry: RecordsRegistry = Depends(get_registry),
):
    """
    Faculty marks entry. The stored entry is the evaluated one (total and
    pass/fail), and the whole class is re-ranked before returning.
    """
    return await registry.record_marks(student_id, subject_id, req.ta, req.ce)


@router.delete("/{student_id}/marks/{subject_id}", response_model=MarksWriteResponse)
async def clear_marks(student_id: str, subject_id: str, registry: RecordsRegistry = Depends(get_registry)):
    return await registry.clear_marks(student_id, subject_id)
