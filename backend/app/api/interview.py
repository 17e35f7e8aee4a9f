import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.application import Application
from ..models.user import User
from ..utils.dependencies import get_current_user
from ..utils.error_handlers import NotFoundError, ValidationError, get_error_message, handle_database_error
from ..utils.roles import hr_only
from ..utils.validation import parse_datetime, parse_id, validate_string_field
from .serializers import interview_from_application

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interviews", tags=["Interviews"])


class InterviewSchedule(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    application_id: int | str | None = None
    interview_date: str | None = None
    interview_time: str | None = None


def scheduled_interviews(db: Session, user: User) -> list[Application]:
    """Applications in the interview stage with a date set; hr sees all, candidates their own."""
    query = db.query(Application).filter(
        Application.status == "interview",
        Application.interview_date.isnot(None),
    )
    if user.role != "hr":
        query = query.filter(Application.candidate_id == user.id)
    return query.order_by(Application.interview_date.asc(), Application.id.asc()).all()


@router.get("")
def list_interviews(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {
        "interviews": [
            interview_from_application(a, viewer_role=user.role)
            for a in scheduled_interviews(db, user)
        ]
    }


@router.post("", status_code=201)
def schedule_interview(
    payload: InterviewSchedule,
    db: Session = Depends(get_db),
    user: User = Depends(hr_only),
):
    application_id = parse_id(payload.application_id)
    if application_id is None:
        raise ValidationError("Application ID is required")

    application = db.get(Application, application_id)
    if not application:
        raise NotFoundError(get_error_message("application_not_found"))
    if application.status in ("rejected", "accepted"):
        raise ValidationError(f"Cannot schedule an interview for a {application.status} application")

    application.interview_date = parse_datetime(payload.interview_date, "Interview date")
    application.interview_time = validate_string_field(
        payload.interview_time, "Interview time", max_length=20, required=False
    )
    application.status = "interview"
    try:
        db.commit()
        db.refresh(application)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "scheduling interview")

    logger.info("Interview scheduled for application %s by user %s", application.id, user.id)
    return {"success": True, "interview": interview_from_application(application, viewer_role=user.role)}
