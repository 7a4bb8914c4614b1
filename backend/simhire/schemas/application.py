from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional

from simhire.schemas.common import PHONE_PATTERN
from simhire.services.pipeline import ApplicationStage


class ApplicationCreate(BaseModel):
    job_id: str
    candidate_name: str = Field(min_length=2, max_length=100)
    candidate_email: EmailStr
    candidate_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    candidate_skills: list[str] = []
    cover_letter: Optional[str] = Field(None, max_length=2000)
    years_of_experience: Optional[float] = Field(None, ge=0)
    expected_salary: Optional[float] = Field(None, ge=0)
    available_start_date: Optional[str] = None

    class Config:
        str_strip_whitespace = True

    @field_validator("candidate_email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStage
    notes: Optional[str] = Field(None, max_length=1000)


class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    company_id: Optional[str] = None
    candidate_id: Optional[str] = None
    candidate_name: str
    candidate_email: str
    candidate_phone: Optional[str] = None
    candidate_skills: list[str] = []
    cover_letter: Optional[str] = None
    years_of_experience: Optional[float] = None
    expected_salary: Optional[float] = None
    available_start_date: Optional[str] = None
    stage: ApplicationStage
    notes: Optional[str] = None
    score: Optional[float] = Field(None, ge=0, le=10)
    score_overall: Optional[float] = Field(None, ge=0, le=10)
    applied_at: datetime
    last_stage_change: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def posting_id(self) -> str:
        return self.job_id


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationResponse]
    total: int
    page: Optional[int] = None
    limit: Optional[int] = None
