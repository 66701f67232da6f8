from fastapi import APIRouter, Depends, Query

from app.api.deps import get_registry
from app.core.config import CONFIG
from app.models.report_schemas import ClassReport, ClassStat, CohortStats, Scorecard
from app.services.registry import RecordsRegistry

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/overview", response_model=CohortStats)
async def overview(
    top: int = Query(CONFIG.DEFAULT_TOP_PERFORMERS, ge=1, le=CONFIG.MAX_TOP_PERFORMERS),
    registry: RecordsRegistry = Depends(get_registry),
):
    return await registry.overview(top)


@router.get("/classes/{class_name}", response_model=ClassReport)
async def class_report(
    class_name: str,
    top: int = Query(CONFIG.DEFAULT_TOP_PERFORMERS, ge=1, le=CONFIG.MAX_TOP_PERFORMERS),
    registry: RecordsRegistry = Depends(get_registry),
):
    return await registry.class_report(class_name, top)


@router.get("/classes/{class_name}/stats", response_model=ClassStat)
async def class_stats(class_name: str, registry: RecordsRegistry = Depends(get_registry)):
    return await registry.class_stats(class_name)


@router.get("/students/{student_id}/scorecard", response_model=Scorecard)
async def student_scorecard(student_id: str, registry: RecordsRegistry = Depends(get_registry)):
    return await registry.scorecard(student_id)
