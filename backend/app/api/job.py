import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.application import Application
from ..models.job import DEPARTMENTS, JOB_STATUSES, JOB_TYPES, Job
from ..models.user import User
from ..utils.dependencies import get_current_user
from ..utils.error_handlers import NotFoundError, ValidationError, get_error_message, handle_database_error
from ..utils.roles import hr_only
from ..utils.validation import validate_choice, validate_string_field
from .serializers import application_to_public, job_to_public

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


class JobPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    department: str | None = None
    location: str | None = None
    type: str | None = None
    description: str | None = None
    requirements: str | None = None
    company_name: str | None = None
    posted_by_name: str | None = None
    posted_by_designation: str | None = None
    status: str | None = None


def _required(value, message: str):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(message)
    return value


def _clean_job_fields(payload: JobPayload, *, partial: bool) -> dict:
    """
    Validate incoming job fields and map them onto column names.

    With partial=True only the fields present in the body are checked and returned.
    """
    data = payload.model_dump(exclude_unset=partial)
    cleaned: dict = {}

    def present(key: str) -> bool:
        return not partial or key in data

    if present("title"):
        title = _required(data.get("title"), "Job title is required")
        cleaned["title"] = validate_string_field(title, "Job title", min_length=3, max_length=150)
    if present("department"):
        cleaned["department"] = validate_choice(
            _required(data.get("department"), "Department is required"), "department", DEPARTMENTS
        )
    if present("location"):
        location = _required(data.get("location"), "Location is required")
        cleaned["location"] = validate_string_field(location, "Location", max_length=100)
    if present("type"):
        cleaned["type"] = validate_choice(_required(data.get("type"), "Job type is required"), "job type", JOB_TYPES)
    if present("description"):
        description = _required(data.get("description"), "Description is required")
        cleaned["description"] = validate_string_field(description, "Description", min_length=50, max_length=10000)
    if present("requirements"):
        requirements = _required(data.get("requirements"), "Requirements are required")
        cleaned["requirements"] = validate_string_field(requirements, "Requirements", min_length=50, max_length=10000)
    if present("company_name"):
        company = _required(data.get("company_name"), "Company name is required")
        cleaned["company_name"] = validate_string_field(company, "Company name", max_length=255)
    if present("posted_by_name"):
        posted_by = _required(data.get("posted_by_name"), "Posted by name is required")
        cleaned["posted_by_name"] = validate_string_field(posted_by, "Posted by name", max_length=100)
    if present("posted_by_designation"):
        designation = _required(data.get("posted_by_designation"), "Posted by designation is required")
        cleaned["posted_by_designation"] = validate_string_field(designation, "Posted by designation", max_length=100)

    status = data.get("status")
    if status is not None or not partial:
        cleaned["status"] = validate_choice(status or "active", "status", JOB_STATUSES)

    return cleaned


def _get_job_or_404(db: Session, job_id: int) -> Job:
    job = db.get(Job, job_id)
    if not job:
        raise NotFoundError(get_error_message("job_not_found"))
    return job


@router.get("")
def list_jobs(
    status: str | None = Query(default=None),
    department: str | None = Query(default=None),
    search: str | None = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    query = db.query(Job)
    if status:
        query = query.filter(Job.status == status)
    if department:
        query = query.filter(Job.department == department)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Job.title.ilike(term),
                Job.company_name.ilike(term),
                Job.description.ilike(term),
            )
        )
    jobs = query.order_by(Job.created_at.desc(), Job.id.desc()).all()
    return [job_to_public(j) for j in jobs]


@router.post("", status_code=201)
def create_job(
    payload: JobPayload,
    db: Session = Depends(get_db),
    user: User = Depends(hr_only),
):
    # Company and poster default to the HR account creating the posting.
    if not payload.company_name and user.company:
        payload.company_name = user.company
    if not payload.posted_by_name:
        payload.posted_by_name = user.name

    fields = _clean_job_fields(payload, partial=False)
    job = Job(**fields, posted_by_id=user.id, applicants=0)
    try:
        db.add(job)
        db.commit()
        db.refresh(job)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating job")

    logger.info("Job %s created by user %s", job.id, user.id)
    return job_to_public(job)


@router.get("/{job_id}")
def get_job(
    job_id: int,
    include_applicants: bool = Query(default=False, alias="includeApplicants"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    job = _get_job_or_404(db, job_id)
    payload = job_to_public(job)
    if include_applicants and user.role == "hr":
        applications = (
            db.query(Application)
            .filter(Application.job_id == job.id)
            .order_by(Application.id.asc())
            .all()
        )
        payload["applicantDetails"] = [application_to_public(a, populate=True) for a in applications]
    return payload


@router.put("/{job_id}")
def update_job(
    job_id: int,
    payload: JobPayload,
    db: Session = Depends(get_db),
    user: User = Depends(hr_only),
):
    job = _get_job_or_404(db, job_id)
    fields = _clean_job_fields(payload, partial=True)
    for key, value in fields.items():
        setattr(job, key, value)
    try:
        db.commit()
        db.refresh(job)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "updating job")
    return job_to_public(job)


@router.delete("/{job_id}")
def delete_job(
    job_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(hr_only),
):
    job = _get_job_or_404(db, job_id)
    try:
        db.delete(job)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "deleting job")
    logger.info("Job %s deleted by user %s", job_id, user.id)
    return {"message": "Job deleted successfully"}
