from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base

MOCK_INTERVIEW_CATEGORIES = ("Technical", "Behavioral", "Case Study", "General")
MOCK_INTERVIEW_STATUSES = ("scheduled", "completed", "cancelled")


class MockInterview(Base):
    __tablename__ = "mock_interviews"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    job_title = Column(String(150), nullable=False)
    category = Column(String(30), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    duration = Column(Integer, nullable=False, default=30)  # minutes
    score = Column(Integer, nullable=True)  # 0-100
    feedback = Column(Text, nullable=True)
    questions = Column(Text, nullable=True)  # JSON list of {question, answer, feedback, score}
    status = Column(String(20), nullable=False, default="scheduled")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
