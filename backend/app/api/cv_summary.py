import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings
from ..database import get_db
from ..models.cv_summary import CVSummary
from ..models.user import User
from ..services import cv_summarizer
from ..utils.dependencies import get_current_user, get_settings
from ..utils.error_handlers import (
    AuthForbidden,
    UpstreamError,
    ValidationError,
    get_error_message,
    handle_database_error,
)
from ..utils.validation import parse_id, sanitize_filename, validate_string_field
from .serializers import cv_summary_to_public

logger = logging.getLogger(__name__)

router = APIRouter(tags=["CV Summaries"])

ALLOWED_CV_EXTENSIONS = {".pdf", ".docx", ".doc"}
MAX_CV_BYTES = 5 * 1024 * 1024  # 5MB


class SummaryCreate(BaseModel):
    name: str | None = None
    role: str | None = None
    summary: str | None = None


def _save(db: Session, entry: CVSummary, operation: str) -> CVSummary:
    try:
        db.add(entry)
        db.commit()
        db.refresh(entry)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, operation)
    return entry


def latest_summary_for(db: Session, user_id: int) -> CVSummary | None:
    return (
        db.query(CVSummary)
        .filter(CVSummary.user_id == user_id, CVSummary.status == "completed")
        .order_by(CVSummary.created_at.desc(), CVSummary.id.desc())
        .first()
    )


@router.post("/cv-summaries/upload")
async def upload_cv(
    file: UploadFile = File(...),
    name: str | None = Form(default=None),
    role: str | None = Form(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    filename = sanitize_filename(file.filename or "")
    if Path(filename).suffix.lower() not in ALLOWED_CV_EXTENSIONS:
        raise ValidationError("Invalid file type. Please upload a PDF or DOCX file.")

    content = await file.read()
    if not content:
        raise ValidationError("Uploaded file is empty")
    if len(content) > MAX_CV_BYTES:
        raise ValidationError("File is too large. Maximum size is 5MB.")

    entry = _save(
        db,
        CVSummary(
            user_id=user.id,
            name=validate_string_field(name or user.name, "Name", max_length=100),
            role=validate_string_field(role or user.role, "Role", max_length=100),
            summary="",
            file_path=filename,
            status="processing",
        ),
        "creating CV summary",
    )

    try:
        summary = await cv_summarizer.summarize_cv(
            url=settings.cv_summarizer_url,
            filename=filename,
            content=content,
            content_type=file.content_type,
            timeout_s=settings.upstream_timeout_s,
        )
    except UpstreamError as e:
        entry.status = "failed"
        entry.error = e.message
        _save(db, entry, "recording CV summary failure")
        raise

    entry.summary = summary
    entry.status = "completed"
    _save(db, entry, "storing CV summary")
    logger.info("Stored CV summary %s for user %s", entry.id, user.id)
    return {"summary": entry.summary, "id": entry.id}


@router.post("/upload")
def store_summary(
    payload: SummaryCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not payload.name or not payload.role or not payload.summary:
        raise ValidationError(get_error_message("summary_fields_required"))

    entry = _save(
        db,
        CVSummary(
            user_id=user.id,
            name=validate_string_field(payload.name, "Name", max_length=100),
            role=validate_string_field(payload.role, "Role", max_length=100),
            summary=payload.summary.strip(),
            file_path="N/A",
            status="completed",
        ),
        "storing CV summary",
    )
    return {"summary": entry.summary}


@router.get("/my-summary")
def my_summary(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    entry = latest_summary_for(db, user.id)
    return {"summary": entry.summary if entry else None}


@router.get("/cv-summaries")
def list_cv_summaries(
    candidate_id: str | None = Query(default=None, alias="candidateId"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    target_id = parse_id(candidate_id) if candidate_id else user.id
    if target_id is None:
        raise ValidationError("Invalid candidateId")
    if user.role != "hr" and target_id != user.id:
        raise AuthForbidden(get_error_message("forbidden"))

    entries = (
        db.query(CVSummary)
        .filter(CVSummary.user_id == target_id)
        .order_by(CVSummary.created_at.desc(), CVSummary.id.desc())
        .all()
    )
    return [cv_summary_to_public(e) for e in entries]
