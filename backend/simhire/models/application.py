"""
Application Models - job and internship applications

One row per (candidate, posting). The stage column holds a value from
ApplicationStage (jobs) or InternshipStage (internships); the two
vocabularies are enforced at the API boundary, not by the database.

Reviewer notes are appended, one line per status change that carried a note.
"""

from sqlalchemy import Column, String, Integer, Float, Text, DateTime, JSON, UniqueConstraint
from sqlalchemy.sql import func
from simhire.database import Base, utcnow
import uuid


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("candidate_id", "job_id", name="uq_application_candidate_job"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    job_id = Column(String, nullable=False, index=True)
    company_id = Column(String, nullable=False, index=True)
    candidate_id = Column(String, nullable=False, index=True)
    candidate_name = Column(String(100), nullable=False)
    candidate_email = Column(String(320), nullable=False)
    candidate_phone = Column(String(50), nullable=True)
    candidate_skills = Column(JSON, nullable=False, default=list)
    cover_letter = Column(Text, nullable=True)
    years_of_experience = Column(Float, nullable=True)
    expected_salary = Column(Float, nullable=True)
    available_start_date = Column(String(50), nullable=True)
    stage = Column(String(20), nullable=False, default="applied", index=True)
    notes = Column(Text, nullable=True)
    score = Column(Float, nullable=True)
    score_overall = Column(Float, nullable=True)
    applied_at = Column(DateTime, default=utcnow, server_default=func.now())
    last_stage_change = Column(DateTime, default=utcnow, server_default=func.now())


class InternshipApplication(Base):
    __tablename__ = "internship_applications"
    __table_args__ = (
        UniqueConstraint("candidate_id", "internship_id", name="uq_internship_application_candidate"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    internship_id = Column(String, nullable=False, index=True)
    candidate_id = Column(String, nullable=False, index=True)
    candidate_name = Column(String(100), nullable=False)
    candidate_email = Column(String(320), nullable=False)
    candidate_phone = Column(String(50), nullable=True)
    candidate_skills = Column(JSON, nullable=False, default=list)
    university = Column(String(200), nullable=False)
    major = Column(String(200), nullable=False)
    semester = Column(Integer, nullable=False)
    gpa = Column(Float, nullable=False)
    portfolio = Column(String(2000), nullable=True)
    cover_letter = Column(Text, nullable=True)
    motivation = Column(Text, nullable=True)
    availability = Column(String(20), nullable=False, default="full-time")
    stage = Column(String(20), nullable=False, default="applied", index=True)
    notes = Column(Text, nullable=True)
    applied_at = Column(DateTime, default=utcnow, server_default=func.now())
    reviewed_at = Column(DateTime, nullable=True)
    interview_schedule = Column(DateTime, nullable=True)
