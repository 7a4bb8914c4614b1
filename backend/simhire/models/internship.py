from sqlalchemy import Column, String, Boolean, Text, DateTime, JSON
from sqlalchemy.sql import func
from simhire.database import Base, utcnow
import uuid


class Internship(Base):
    """Internship posting. Status: active, draft or closed."""

    __tablename__ = "internships"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(String, nullable=False, index=True)
    position = Column(String(200), nullable=False)
    duration = Column(String(100), nullable=False)
    is_paid = Column(Boolean, nullable=False, default=False)
    salary = Column(String(100), nullable=True)
    description = Column(Text, nullable=False)
    learning_objectives = Column(JSON, nullable=False, default=list)
    requirements = Column(JSON, nullable=False, default=list)
    responsibilities = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    location = Column(String(500), nullable=False)
    remote = Column(Boolean, nullable=False, default=False)
    mentorship_provided = Column(Boolean, nullable=False, default=False)
    certificate_provided = Column(Boolean, nullable=False, default=False)
    application_deadline = Column(DateTime, nullable=True)
    start_date = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="active", index=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)
