import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.application import APPLICATION_STATUSES, Application
from ..models.job import Job
from ..models.user import User
from ..utils.dependencies import get_current_user
from ..utils.error_handlers import (
    AuthForbidden,
    NotFoundError,
    ValidationError,
    get_error_message,
    handle_database_error,
)
from ..utils.roles import candidate_only, hr_only
from ..utils.validation import (
    isoformat,
    parse_datetime,
    parse_id,
    validate_choice,
    validate_integer_field,
    validate_string_field,
)
from .serializers import application_to_public

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


class ApplicationCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    job_id: int | str | None = None
    # Defaults to the signed-in candidate; anything else is rejected.
    candidate_id: int | str | None = None


class ApplicationUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: str | None = None
    interview_date: str | None = None
    interview_time: str | None = None
    interview_score: int | None = None
    feedback: str | None = None
    notes: str | None = None


def _find_existing(db: Session, *, job_id: int, candidate_id: int) -> Application | None:
    return (
        db.query(Application)
        .filter(Application.job_id == job_id, Application.candidate_id == candidate_id)
        .first()
    )


def _already_applied(existing: Application) -> ValidationError:
    return ValidationError(
        get_error_message("already_applied"),
        details={"applicationId": existing.id},
    )


@router.post("", status_code=201)
def submit_application(
    payload: ApplicationCreate,
    db: Session = Depends(get_db),
    user: User = Depends(candidate_only),
):
    job_id = parse_id(payload.job_id)
    if job_id is None:
        raise ValidationError(get_error_message("application_ids_required"))

    candidate_id = user.id
    if payload.candidate_id is not None and str(payload.candidate_id).strip():
        if parse_id(payload.candidate_id) != user.id:
            raise AuthForbidden("You can only apply on your own behalf")

    job = db.get(Job, job_id)
    if not job:
        raise NotFoundError(get_error_message("job_not_found"))

    if job.status != "active":
        raise ValidationError(get_error_message("job_closed"))

    existing = _find_existing(db, job_id=job.id, candidate_id=candidate_id)
    if existing:
        raise _already_applied(existing)

    application = Application(
        job_id=job.id,
        candidate_id=candidate_id,
        status="applied",
        applied_date=datetime.now(timezone.utc),
    )
    try:
        db.add(application)
        db.flush()
        # Read-modify-write on the counter: concurrent submissions can undercount.
        job.applicants = (job.applicants or 0) + 1
        db.commit()
        db.refresh(application)
    except IntegrityError as e:
        db.rollback()
        # Lost a race with a concurrent submission for the same (job, candidate).
        existing = _find_existing(db, job_id=job_id, candidate_id=candidate_id)
        if existing:
            raise _already_applied(existing)
        raise handle_database_error(e, "submitting application")
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "submitting application")

    logger.info("Candidate %s applied to job %s", candidate_id, job.id)
    return {
        "message": "Application submitted successfully",
        "applicationId": application.id,
        "jobTitle": job.title,
        "company": job.company_name,
        "appliedDate": isoformat(application.applied_date),
    }


@router.get("")
def list_applications(
    job_id: int | None = Query(default=None, alias="jobId"),
    status: str | None = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    query = db.query(Application)
    if user.role != "hr":
        query = query.filter(Application.candidate_id == user.id)
    if job_id is not None:
        query = query.filter(Application.job_id == job_id)
    if status:
        query = query.filter(Application.status == validate_choice(status, "status", APPLICATION_STATUSES))
    applications = query.order_by(Application.id.desc()).all()
    return [application_to_public(a, populate=True) for a in applications]


def _get_application_or_404(db: Session, application_id: int) -> Application:
    application = db.get(Application, application_id)
    if not application:
        raise NotFoundError(get_error_message("application_not_found"))
    return application


@router.get("/{application_id}")
def get_application(
    application_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(hr_only),
):
    return application_to_public(_get_application_or_404(db, application_id), populate=True)


@router.put("/{application_id}")
def update_application(
    application_id: int,
    payload: ApplicationUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(hr_only),
):
    application = _get_application_or_404(db, application_id)
    data = payload.model_dump(exclude_unset=True)

    if "status" in data:
        application.status = validate_choice(data["status"], "status", APPLICATION_STATUSES)
    if "interview_date" in data:
        application.interview_date = parse_datetime(data["interview_date"], "Interview date", required=False)
    if "interview_time" in data:
        application.interview_time = validate_string_field(
            data["interview_time"], "Interview time", max_length=20, required=False
        )
    if "interview_score" in data:
        application.interview_score = validate_integer_field(
            data["interview_score"], "Interview score", min_value=0, max_value=100, required=False
        )
    if "feedback" in data:
        application.feedback = validate_string_field(data["feedback"], "Feedback", max_length=5000, required=False)
    if "notes" in data:
        application.notes = validate_string_field(data["notes"], "Notes", max_length=5000, required=False)

    try:
        db.commit()
        db.refresh(application)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "updating application")

    logger.info("Application %s updated by user %s", application.id, user.id)
    return application_to_public(application, populate=True)
