# app/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.errors import (
    ConflictWarning,
    NotFound,
    PersistenceFailure,
    RecordsError,
    StaleWrite,
    ValidationError,
)
from app.core.logger import get_logger
from app.routes.report_routes import router as report_router
from app.routes.student_routes import router as student_router
from app.routes.subject_routes import router as subject_router

log = get_logger("api")

app = FastAPI(
    title="Academic Records – Marks & Reports",
    version="0.1.0",
)

# CORS (relaxed; tighten if needed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS = [
    (ValidationError, 422),
    (ConflictWarning, 409),
    (StaleWrite, 409),
    (NotFound, 404),
    (PersistenceFailure, 503),
]


@app.exception_handler(RecordsError)
async def records_error_handler(request: Request, exc: RecordsError):
    status = next((code for cls, code in _STATUS if isinstance(exc, cls)), 400)
    if status >= 500:
        log.error("%s %s -> %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"error": exc.kind, "detail": exc.detail()})


@app.get("/")
def root_index():
    return {"message": "Academic records service is running", "docs": "/docs"}


app.include_router(subject_router)
app.include_router(student_router)
app.include_router(report_router)
