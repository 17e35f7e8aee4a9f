import json
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.mock_interview import MOCK_INTERVIEW_CATEGORIES, MOCK_INTERVIEW_STATUSES, MockInterview
from ..models.user import User
from ..utils.error_handlers import NotFoundError, get_error_message, handle_database_error
from ..utils.roles import candidate_only
from ..utils.validation import (
    parse_datetime,
    validate_choice,
    validate_integer_field,
    validate_string_field,
)
from .serializers import mock_interview_to_public

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mock-interviews", tags=["Mock Interviews"])


class MockQuestion(BaseModel):
    question: str
    answer: str | None = None
    feedback: str | None = None
    score: int | None = Field(default=None, ge=0, le=100)


class MockInterviewCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    job_title: str | None = None
    category: str | None = None
    date: str | None = None
    duration: int | None = 30
    questions: list[MockQuestion] = Field(default_factory=list)


class MockInterviewUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    score: int | None = None
    feedback: str | None = None
    status: str | None = None
    questions: list[MockQuestion] | None = None


def _dump_questions(questions: list[MockQuestion]) -> str:
    return json.dumps([q.model_dump(exclude_none=True) for q in questions], ensure_ascii=False)


def _get_own_mock(db: Session, mock_id: int, user: User) -> MockInterview:
    mock = db.get(MockInterview, mock_id)
    # Someone else's session is reported as missing.
    if not mock or mock.candidate_id != user.id:
        raise NotFoundError(get_error_message("mock_interview_not_found"))
    return mock


@router.get("")
def list_mock_interviews(
    db: Session = Depends(get_db),
    user: User = Depends(candidate_only),
):
    mocks = (
        db.query(MockInterview)
        .filter(MockInterview.candidate_id == user.id)
        .order_by(MockInterview.date.desc(), MockInterview.id.desc())
        .all()
    )
    return [mock_interview_to_public(m) for m in mocks]


@router.post("", status_code=201)
def create_mock_interview(
    payload: MockInterviewCreate,
    db: Session = Depends(get_db),
    user: User = Depends(candidate_only),
):
    mock = MockInterview(
        candidate_id=user.id,
        job_title=validate_string_field(payload.job_title, "Job title", max_length=150),
        category=validate_choice(payload.category, "category", MOCK_INTERVIEW_CATEGORIES),
        date=parse_datetime(payload.date, "Interview date"),
        duration=validate_integer_field(payload.duration, "Duration", min_value=1, max_value=480),
        questions=_dump_questions(payload.questions),
        status="scheduled",
    )
    try:
        db.add(mock)
        db.commit()
        db.refresh(mock)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating mock interview")
    return mock_interview_to_public(mock)


@router.get("/{mock_id}")
def get_mock_interview(
    mock_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(candidate_only),
):
    return mock_interview_to_public(_get_own_mock(db, mock_id, user))


@router.put("/{mock_id}")
def update_mock_interview(
    mock_id: int,
    payload: MockInterviewUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(candidate_only),
):
    mock = _get_own_mock(db, mock_id, user)
    data = payload.model_dump(exclude_unset=True)

    if "score" in data:
        mock.score = validate_integer_field(data["score"], "Score", min_value=0, max_value=100, required=False)
    if "feedback" in data:
        mock.feedback = validate_string_field(data["feedback"], "Feedback", max_length=5000, required=False)
    if "status" in data:
        mock.status = validate_choice(data["status"], "status", MOCK_INTERVIEW_STATUSES)
    if payload.questions is not None:
        mock.questions = _dump_questions(payload.questions)

    try:
        db.commit()
        db.refresh(mock)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "updating mock interview")
    return mock_interview_to_public(mock)
