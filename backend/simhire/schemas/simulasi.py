from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, Union


class Breakdown(BaseModel):
    technical: float = Field(ge=0, le=100)
    creativity: float = Field(ge=0, le=100)
    efficiency: float = Field(ge=0, le=100)
    communication: float = Field(ge=0, le=100)


class TaskAnswer(BaseModel):
    text: Optional[str] = None
    code: Optional[str] = None
    files: list[str] = []


class TaskSubmission(BaseModel):
    task_id: str
    answer: Union[TaskAnswer, str, None] = None
    time_spent: int = Field(0, ge=0)  # seconds


class SimulasiSubmit(BaseModel):
    category_id: str
    task_results: list[TaskSubmission] = Field(min_length=1)
    breakdown: Breakdown


class TaskOutcome(BaseModel):
    task_id: str
    completed: bool
    time_spent: int = 0


class SimulasiCategory(BaseModel):
    id: str
    name: str
    difficulty: str


class SimulasiResultResponse(BaseModel):
    id: str
    user_id: str
    category_id: str
    category_name: str
    total_score: float
    max_score: float = 100
    percentage: int = Field(ge=0, le=100)
    rank: str
    badge: Optional[str] = None
    breakdown: Breakdown
    total_time: int = 0
    task_results: list[TaskOutcome] = []
    completed_at: datetime

    class Config:
        from_attributes = True


class LeaderboardEntry(SimulasiResultResponse):
    position: int = Field(ge=1)


class Leaderboard(BaseModel):
    category: SimulasiCategory
    entries: list[LeaderboardEntry]


class SimulasiStats(BaseModel):
    total_completed: int
    average_score: int
    badges: list[str]
    rank_counts: dict[str, int]
    category_scores: dict[str, float]
    strongest_category: Optional[str] = None
