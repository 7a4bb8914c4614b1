from simhire.schemas.envelope import Envelope, success_response, error_response
from simhire.schemas.common import Pagination
from simhire.schemas.job import JobCreate, JobUpdate, JobResponse, SalaryRange
from simhire.schemas.application import (
    ApplicationCreate,
    ApplicationStatusUpdate,
    ApplicationResponse,
    ApplicationListResponse,
)
from simhire.schemas.internship import (
    InternshipCreate,
    InternshipUpdate,
    InternshipResponse,
    InternshipApplicationCreate,
    InternshipStatusUpdate,
    InternshipApplicationResponse,
)
from simhire.schemas.simulasi import (
    Breakdown,
    TaskSubmission,
    SimulasiSubmit,
    SimulasiCategory,
    SimulasiResultResponse,
    LeaderboardEntry,
    Leaderboard,
    SimulasiStats,
)

__all__ = [
    "Envelope",
    "success_response",
    "error_response",
    "Pagination",
    "JobCreate",
    "JobUpdate",
    "JobResponse",
    "SalaryRange",
    "ApplicationCreate",
    "ApplicationStatusUpdate",
    "ApplicationResponse",
    "ApplicationListResponse",
    "InternshipCreate",
    "InternshipUpdate",
    "InternshipResponse",
    "InternshipApplicationCreate",
    "InternshipStatusUpdate",
    "InternshipApplicationResponse",
    "Breakdown",
    "TaskSubmission",
    "SimulasiSubmit",
    "SimulasiCategory",
    "SimulasiResultResponse",
    "LeaderboardEntry",
    "Leaderboard",
    "SimulasiStats",
]
