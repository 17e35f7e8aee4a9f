"""
Browser-facing areas.

The route gate has already redirected anonymous or wrong-role visitors before these
run; each handler still resolves the caller itself.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.application import Application
from ..models.job import Job
from ..models.mock_interview import MockInterview
from ..models.quiz_result import QuizResult
from ..models.user import User
from ..services.dashboard import compute_candidate_stats, compute_hr_stats
from ..utils.dependencies import get_current_user
from ..utils.error_handlers import NotFoundError, get_error_message
from ..utils.roles import candidate_only, hr_only
from .cv_summary import latest_summary_for
from .interview import scheduled_interviews
from .serializers import (
    application_to_public,
    cv_summary_to_public,
    interview_from_application,
    job_to_public,
    mock_interview_to_public,
    quiz_result_to_public,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"])

@router.get("/")
def home_page():
    return {"page": "home"}


@router.get("/login")
def login_page():
    return {"page": "login"}


@router.get("/signup")
def signup_page():
    return {"page": "signup"}


@router.get("/features")
def features_page():
    return {"page": "features"}


@router.get("/how-it-works")
def how_it_works_page():
    return {"page": "how-it-works"}


@router.get("/contact")
def contact_page():
    return {"page": "contact"}


@router.get("/hr-dashboard")
def hr_dashboard(
    db: Session = Depends(get_db),
    user: User = Depends(hr_only),
):
    jobs = [job_to_public(j) for j in db.query(Job).order_by(Job.created_at.desc(), Job.id.desc()).all()]
    applications = [
        application_to_public(a, populate=True)
        for a in db.query(Application).order_by(Application.id.desc()).all()
    ]
    return {
        "user": user.to_public(),
        "stats": compute_hr_stats(jobs, applications),
        "jobs": jobs,
        "applications": applications,
    }


@router.get("/hr-dashboard/jobs/{job_id}/applicants")
def job_applicants(
    job_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(hr_only),
):
    job = db.get(Job, job_id)
    if not job:
        raise NotFoundError(get_error_message("job_not_found"))

    applicants = []
    for application in db.query(Application).filter(Application.job_id == job.id).order_by(Application.id.asc()):
        summary = latest_summary_for(db, application.candidate_id)
        quizzes = (
            db.query(QuizResult)
            .filter(QuizResult.candidate_id == application.candidate_id)
            .order_by(QuizResult.created_at.desc(), QuizResult.id.desc())
            .all()
        )
        entry = application_to_public(application, populate=True)
        entry["cvSummary"] = cv_summary_to_public(summary) if summary else None
        entry["quizzes"] = [quiz_result_to_public(q) for q in quizzes]
        applicants.append(entry)

    return {"job": job_to_public(job), "applicants": applicants}


@router.get("/candidate-dashboard")
def candidate_dashboard(
    db: Session = Depends(get_db),
    user: User = Depends(candidate_only),
):
    applications = [
        application_to_public(a, populate=True)
        for a in db.query(Application)
        .filter(Application.candidate_id == user.id)
        .order_by(Application.id.desc())
        .all()
    ]
    interviews = [interview_from_application(a, viewer_role=user.role) for a in scheduled_interviews(db, user)]
    mock_interviews = [
        mock_interview_to_public(m)
        for m in db.query(MockInterview)
        .filter(MockInterview.candidate_id == user.id)
        .order_by(MockInterview.date.desc(), MockInterview.id.desc())
        .all()
    ]
    jobs = [
        job_to_public(j)
        for j in db.query(Job).filter(Job.status == "active").order_by(Job.created_at.desc(), Job.id.desc()).all()
    ]
    return {
        "user": user.to_public(),
        "stats": compute_candidate_stats(applications, interviews, mock_interviews),
        "applications": applications,
        "interviews": interviews,
        "mockInterviews": mock_interviews,
        "jobs": jobs,
    }


@router.get("/profile")
def profile(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    summary = latest_summary_for(db, user.id)
    return {"user": user.to_public(), "summary": summary.summary if summary else None}
