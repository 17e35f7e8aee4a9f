import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings
from ..database import get_db
from ..models.quiz_result import QuizResult
from ..models.user import User
from ..services import quiz_client
from ..utils.dependencies import get_current_user, get_settings
from ..utils.error_handlers import AuthForbidden, ValidationError, get_error_message, handle_database_error
from ..utils.roles import candidate_only
from ..utils.validation import parse_id
from .serializers import quiz_result_to_public

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Quiz"])

DEFAULT_NUM_QUESTIONS = 20


class QuizStart(BaseModel):
    num_questions: int = Field(default=DEFAULT_NUM_QUESTIONS, ge=1, le=100)


class QuizAnswer(BaseModel):
    question_id: int | str
    selected_answer: str


class QuizSubmission(BaseModel):
    quiz_id: str = Field(min_length=1)
    answers: list[QuizAnswer] = Field(default_factory=list)


@router.post("/quiz")
async def start_quiz(
    payload: QuizStart | None = None,
    user: User = Depends(candidate_only),
    settings: Settings = Depends(get_settings),
):
    num_questions = payload.num_questions if payload else DEFAULT_NUM_QUESTIONS
    data = await quiz_client.create_quiz(
        base_url=settings.quiz_service_url,
        num_questions=num_questions,
        timeout_s=settings.upstream_timeout_s,
    )
    logger.info("Quiz %s started for user %s", data.get("quiz_id"), user.id)
    return data


@router.get("/quiz/{quiz_id}")
async def fetch_quiz(
    quiz_id: str,
    user: User = Depends(candidate_only),
    settings: Settings = Depends(get_settings),
):
    return await quiz_client.get_quiz(
        base_url=settings.quiz_service_url,
        quiz_id=quiz_id,
        timeout_s=settings.upstream_timeout_s,
    )


@router.post("/submit")
async def submit_quiz(
    payload: QuizSubmission,
    db: Session = Depends(get_db),
    user: User = Depends(candidate_only),
    settings: Settings = Depends(get_settings),
):
    if not payload.answers:
        raise ValidationError("Please answer at least one question")

    result = await quiz_client.submit_answers(
        base_url=settings.quiz_service_url,
        quiz_id=payload.quiz_id,
        answers=[a.model_dump() for a in payload.answers],
        timeout_s=settings.upstream_timeout_s,
    )

    record = QuizResult(
        candidate_id=user.id,
        quiz_id=payload.quiz_id,
        correct_answers=int(result["correct_answers"]),
        total_questions=int(result["total_questions"]),
        score_percentage=float(result["score_percentage"]),
    )
    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "storing quiz result")

    return {
        "correct_answers": record.correct_answers,
        "total_questions": record.total_questions,
        "score_percentage": record.score_percentage,
    }


@router.get("/quizzes")
def list_quiz_results(
    candidate_id: str | None = Query(default=None, alias="candidateId"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    target_id = parse_id(candidate_id) if candidate_id else user.id
    if target_id is None:
        raise ValidationError("Invalid candidateId")
    if user.role != "hr" and target_id != user.id:
        raise AuthForbidden(get_error_message("forbidden"))

    results = (
        db.query(QuizResult)
        .filter(QuizResult.candidate_id == target_id)
        .order_by(QuizResult.created_at.desc(), QuizResult.id.desc())
        .all()
    )
    return [quiz_result_to_public(r) for r in results]
