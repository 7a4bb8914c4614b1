"""
Job Model - SQLAlchemy ORM model for company job postings

Status values: open/active (listed), draft, paused, closed.
Application counts are derived from the applications table, not stored.
"""

from sqlalchemy import Column, String, Float, Text, DateTime, JSON
from sqlalchemy.sql import func
from simhire.database import Base, utcnow
import uuid


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(String, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    department = Column(String(200), nullable=False)
    employment_type = Column(String(20), nullable=False)
    experience_level = Column(String(20), nullable=False)
    location_mode = Column(String(20), nullable=False)
    location = Column(String(500), nullable=False)
    description = Column(Text, nullable=False)
    requirements = Column(JSON, nullable=False, default=list)
    skills = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=list)
    currency = Column(String(3), nullable=False, default="IDR")
    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    status = Column(String(20), nullable=False, default="open", index=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)
    closed_at = Column(DateTime, nullable=True)
