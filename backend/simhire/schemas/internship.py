from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Literal, Optional

from simhire.schemas.common import PHONE_PATTERN
from simhire.services.pipeline import InternshipStage

InternshipStatus = Literal["active", "draft", "closed"]
Availability = Literal["full-time", "part-time"]


class InternshipCreate(BaseModel):
    position: str = Field(min_length=3, max_length=200)
    duration: str = Field(min_length=1)
    is_paid: bool = False
    salary: Optional[str] = None
    description: str = Field(min_length=50)
    learning_objectives: list[str] = []
    requirements: list[str] = Field(min_length=1)
    responsibilities: list[str] = []
    benefits: list[str] = []
    tags: list[str] = []
    location: str = Field(min_length=1)
    remote: bool = False
    mentorship_provided: bool = False
    certificate_provided: bool = False
    application_deadline: Optional[datetime] = None
    start_date: Optional[datetime] = None
    status: InternshipStatus = "active"

    class Config:
        str_strip_whitespace = True


class InternshipUpdate(BaseModel):
    position: Optional[str] = Field(None, min_length=3, max_length=200)
    duration: Optional[str] = Field(None, min_length=1)
    is_paid: Optional[bool] = None
    salary: Optional[str] = None
    description: Optional[str] = Field(None, min_length=50)
    learning_objectives: Optional[list[str]] = None
    requirements: Optional[list[str]] = Field(None, min_length=1)
    responsibilities: Optional[list[str]] = None
    benefits: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    location: Optional[str] = Field(None, min_length=1)
    remote: Optional[bool] = None
    mentorship_provided: Optional[bool] = None
    certificate_provided: Optional[bool] = None
    application_deadline: Optional[datetime] = None
    start_date: Optional[datetime] = None
    status: Optional[InternshipStatus] = None

    class Config:
        str_strip_whitespace = True


class InternshipResponse(BaseModel):
    id: str
    company_id: str
    position: str
    duration: str
    is_paid: bool
    salary: Optional[str] = None
    description: str
    learning_objectives: list[str] = []
    requirements: list[str] = []
    responsibilities: list[str] = []
    benefits: list[str] = []
    tags: list[str] = []
    location: str
    remote: bool = False
    mentorship_provided: bool = False
    certificate_provided: bool = False
    application_deadline: Optional[datetime] = None
    start_date: Optional[datetime] = None
    status: InternshipStatus
    application_count: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InternshipApplicationCreate(BaseModel):
    internship_id: str
    candidate_name: str = Field(min_length=2, max_length=100)
    candidate_email: EmailStr
    candidate_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    candidate_skills: list[str] = []
    university: str = Field(min_length=1)
    major: str = Field(min_length=1)
    semester: int = Field(ge=1)
    gpa: float = Field(ge=0, le=4)
    portfolio: Optional[str] = None
    cover_letter: Optional[str] = Field(None, max_length=2000)
    motivation: str = Field(min_length=1)
    availability: Availability = "full-time"

    class Config:
        str_strip_whitespace = True

    @field_validator("candidate_email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class InternshipStatusUpdate(BaseModel):
    status: InternshipStage
    notes: Optional[str] = Field(None, max_length=1000)
    interview_schedule: Optional[datetime] = None


class InternshipApplicationResponse(BaseModel):
    id: str
    internship_id: str
    candidate_id: Optional[str] = None
    candidate_name: str
    candidate_email: str
    candidate_phone: Optional[str] = None
    candidate_skills: list[str] = []
    university: str
    major: str
    semester: int = Field(ge=1)
    gpa: float = Field(ge=0, le=4)
    portfolio: Optional[str] = None
    cover_letter: Optional[str] = None
    motivation: Optional[str] = None
    availability: Availability = "full-time"
    stage: InternshipStage
    notes: Optional[str] = None
    applied_at: datetime
    reviewed_at: Optional[datetime] = None
    interview_schedule: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def posting_id(self) -> str:
        return self.internship_id
