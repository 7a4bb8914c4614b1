from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Literal, Optional

Currency = Literal["IDR", "USD"]
EmploymentType = Literal["full-time", "part-time", "contract", "internship"]
ExperienceLevel = Literal["entry", "mid", "senior"]
LocationMode = Literal["remote", "hybrid", "on-site"]
JobStatus = Literal["open", "active", "draft", "paused", "closed"]


class SalaryRange(BaseModel):
    min: float = Field(ge=0)
    max: float = Field(ge=0)
    currency: Currency

    @model_validator(mode="after")
    def check_bounds(self):
        if self.max < self.min:
            raise ValueError("Maximum salary must be greater than or equal to minimum salary")
        return self


class JobCreate(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    department: str = Field(min_length=1)
    employment_type: EmploymentType
    experience_level: ExperienceLevel
    location_mode: LocationMode
    location: str = Field(min_length=1)
    description: str = Field(min_length=50)
    requirements: list[str] = Field(min_length=1)
    skills: list[str] = Field(min_length=1)
    benefits: list[str] = []
    currency: Currency = "IDR"
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    salary_range: Optional[SalaryRange] = None
    status: JobStatus = "open"

    class Config:
        str_strip_whitespace = True

    @model_validator(mode="after")
    def check_salary(self):
        if self.salary_range is not None:
            # The nested range wins over the flat fields
            self.salary_min = self.salary_range.min
            self.salary_max = self.salary_range.max
            self.currency = self.salary_range.currency
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_max < self.salary_min
        ):
            raise ValueError("Maximum salary must be greater than or equal to minimum salary")
        return self


class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    department: Optional[str] = Field(None, min_length=1)
    employment_type: Optional[EmploymentType] = None
    experience_level: Optional[ExperienceLevel] = None
    location_mode: Optional[LocationMode] = None
    location: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=50)
    requirements: Optional[list[str]] = Field(None, min_length=1)
    skills: Optional[list[str]] = Field(None, min_length=1)
    benefits: Optional[list[str]] = None
    currency: Optional[Currency] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    status: Optional[JobStatus] = None

    class Config:
        str_strip_whitespace = True

    @model_validator(mode="after")
    def check_salary(self):
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_max < self.salary_min
        ):
            raise ValueError("Maximum salary must be greater than or equal to minimum salary")
        return self


class JobResponse(BaseModel):
    id: str
    company_id: str
    title: str
    department: str
    employment_type: EmploymentType
    experience_level: ExperienceLevel
    location_mode: LocationMode
    location: str
    description: str
    requirements: list[str]
    skills: list[str]
    benefits: list[str] = []
    currency: Currency = "IDR"
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    status: JobStatus
    application_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
