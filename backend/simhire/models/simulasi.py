from sqlalchemy import Column, String, Integer, Float, DateTime, JSON
from sqlalchemy.sql import func
from simhire.database import Base, utcnow
import uuid


class SimulasiResult(Base):
    """
    Outcome of one simulasi (work simulation) attempt.

    Attributes:
        percentage: Final 0-100 score, half-up rounded
        rank: Display letter derived from percentage (S .. C)
        badge: "<category>-expert" when percentage reached the badge threshold
        breakdown: {technical, creativity, efficiency, communication}
        task_results: [{task_id, completed, time_spent}]
    """

    __tablename__ = "simulasi_results"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    category_id = Column(String(50), nullable=False, index=True)
    category_name = Column(String(100), nullable=False)
    total_score = Column(Float, nullable=False, default=0.0)
    max_score = Column(Float, nullable=False, default=100.0)
    percentage = Column(Integer, nullable=False, default=0)
    rank = Column(String(2), nullable=False)
    badge = Column(String(100), nullable=True)
    breakdown = Column(JSON, nullable=False, default=dict)
    total_time = Column(Integer, nullable=False, default=0)
    task_results = Column(JSON, nullable=False, default=list)
    completed_at = Column(DateTime, default=utcnow, server_default=func.now())
