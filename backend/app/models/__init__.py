from .application import Application
from .cv_summary import CVSummary
from .job import Job
from .mock_interview import MockInterview
from .quiz_result import QuizResult
from .user import User

__all__ = ["Application", "CVSummary", "Job", "MockInterview", "QuizResult", "User"]
