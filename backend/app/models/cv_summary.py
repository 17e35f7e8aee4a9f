from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base

CV_SUMMARY_STATUSES = ("processing", "completed", "failed")


class CVSummary(Base):
    __tablename__ = "cv_summaries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    role = Column(String(100), nullable=False)  # role the CV targets, not the account role
    summary = Column(Text, nullable=False, default="")
    file_path = Column(String(255), nullable=False, default="N/A")
    status = Column(String(20), nullable=False, default="processing")
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
