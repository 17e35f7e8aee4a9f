from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base

DEPARTMENTS = ("Engineering", "Design", "Product", "Marketing", "Sales", "HR", "Finance")
JOB_TYPES = ("Full-time", "Part-time", "Contract", "Internship", "Temporary")
JOB_STATUSES = ("active", "closed", "draft")


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(150), nullable=False)
    department = Column(String(30), nullable=False)
    location = Column(String(100), nullable=False)
    type = Column(String(20), nullable=False)
    description = Column(Text, nullable=False)
    requirements = Column(Text, nullable=False)
    company_name = Column(String(255), nullable=False)
    posted_by_name = Column(String(100), nullable=False)
    posted_by_designation = Column(String(100), nullable=False)
    posted_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    status = Column(String(20), nullable=False, default="active")
    # Denormalized counter, bumped on each new application (read-modify-write, not atomic).
    applicants = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    posted_by = relationship("User", back_populates="jobs")
    # Deleting a job also removes its applications at ORM level.
    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan")
