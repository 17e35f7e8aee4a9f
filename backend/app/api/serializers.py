import json
import logging

from ..models.application import Application
from ..models.cv_summary import CVSummary
from ..models.job import Job
from ..models.mock_interview import MockInterview
from ..models.quiz_result import QuizResult
from ..models.user import User
from ..utils.validation import isoformat

logger = logging.getLogger(__name__)


def user_brief(user: User | None) -> dict | None:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def job_to_public(job: Job) -> dict:
    return {
        "id": job.id,
        "title": job.title,
        "department": job.department,
        "location": job.location,
        "type": job.type,
        "description": job.description,
        "requirements": job.requirements,
        "companyName": job.company_name,
        "postedByName": job.posted_by_name,
        "postedByDesignation": job.posted_by_designation,
        "postedById": job.posted_by_id,
        "status": job.status or "active",
        "applicants": job.applicants or 0,
        "createdAt": isoformat(job.created_at),
        "updatedAt": isoformat(job.updated_at),
    }


def job_brief(job: Job | None) -> dict | None:
    if job is None:
        return None
    return {
        "id": job.id,
        "title": job.title,
        "department": job.department,
        "location": job.location,
        "type": job.type,
        "companyName": job.company_name,
    }


def application_to_public(application: Application, *, populate: bool = False) -> dict:
    payload = {
        "id": application.id,
        "jobId": application.job_id,
        "candidateId": application.candidate_id,
        "status": application.status,
        "appliedDate": isoformat(application.applied_date),
        "interviewDate": isoformat(application.interview_date),
        "interviewTime": application.interview_time,
        "interviewScore": application.interview_score,
        "feedback": application.feedback,
        "notes": application.notes,
        "createdAt": isoformat(application.created_at),
        "updatedAt": isoformat(application.updated_at),
    }
    if populate:
        payload["candidate"] = user_brief(application.candidate)
        payload["job"] = job_brief(application.job)
    return payload


def interview_from_application(application: Application, *, viewer_role: str) -> dict:
    """An interview is an application in the interview stage; a recorded score means it happened."""
    job = application.job
    payload = {
        "id": application.id,
        "applicationId": application.id,
        "position": job.title if job else None,
        "date": isoformat(application.interview_date),
        "time": application.interview_time,
        "status": "completed" if application.interview_score is not None else "scheduled",
        "score": application.interview_score,
    }
    if viewer_role == "hr":
        payload["candidate"] = application.candidate.name if application.candidate else None
    else:
        payload["company"] = job.company_name if job else None
    return payload


def _load_questions(raw: str | None) -> list[dict]:
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Stored mock interview questions are not valid JSON")
        return []
    return data if isinstance(data, list) else []


def mock_interview_to_public(mock: MockInterview) -> dict:
    return {
        "id": mock.id,
        "candidateId": mock.candidate_id,
        "jobTitle": mock.job_title,
        "category": mock.category,
        "date": isoformat(mock.date),
        "duration": mock.duration,
        "score": mock.score,
        "feedback": mock.feedback,
        "questions": _load_questions(mock.questions),
        "status": mock.status,
        "createdAt": isoformat(mock.created_at),
    }


def cv_summary_to_public(entry: CVSummary) -> dict:
    return {
        "id": entry.id,
        "userId": entry.user_id,
        "name": entry.name,
        "role": entry.role,
        "summary": entry.summary,
        "filePath": entry.file_path,
        "status": entry.status,
        "error": entry.error,
        "createdAt": isoformat(entry.created_at),
    }


def quiz_result_to_public(result: QuizResult) -> dict:
    return {
        "id": result.id,
        "candidateId": result.candidate_id,
        "quizId": result.quiz_id,
        "correctAnswers": result.correct_answers,
        "totalQuestions": result.total_questions,
        "scorePercentage": result.score_percentage,
        "createdAt": isoformat(result.created_at),
    }
