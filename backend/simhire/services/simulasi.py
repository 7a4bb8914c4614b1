"""
Simulasi Kerja - assessment catalog and result evaluation

Turns a submission (task answers + reviewer breakdown) into the stored
result fields: percentage, rank letter, badge and per-task outcomes.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from simhire.services.stats import badge_for, rank_letter, score_submission, has_answer

CATEGORIES: Dict[str, Dict[str, str]] = {
    "ui-ux-design": {"name": "UI/UX Design", "difficulty": "intermediate"},
    "frontend-dev": {"name": "Frontend Development", "difficulty": "intermediate"},
    "backend-dev": {"name": "Backend Development", "difficulty": "advanced"},
    "data-analysis": {"name": "Data Analysis", "difficulty": "intermediate"},
    "digital-marketing": {"name": "Digital Marketing", "difficulty": "beginner"},
    "project-management": {"name": "Project Management", "difficulty": "intermediate"},
    "customer-service": {"name": "Customer Service", "difficulty": "beginner"},
    "sales": {"name": "Sales & Business Development", "difficulty": "intermediate"},
}


class UnknownCategoryError(ValueError):
    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Invalid category ID '{category_id}'")


def get_category(category_id: str) -> Dict[str, str]:
    if category_id not in CATEGORIES:
        raise UnknownCategoryError(category_id)
    return {"id": category_id, **CATEGORIES[category_id]}


@dataclass(frozen=True)
class Evaluation:
    category_name: str
    total_score: float
    max_score: int
    percentage: int
    rank: str
    badge: Optional[str]
    total_time: int
    task_results: List[Dict[str, Any]]


def evaluate_submission(
    category_id: str,
    task_results: List[Any],
    breakdown: Dict[str, float],
    badge_threshold: int = 80,
) -> Evaluation:
    """
    Score a submission for `category_id`.

    Raises:
        UnknownCategoryError: category is not in the catalog
    """
    category = get_category(category_id)
    score = score_submission(task_results, breakdown)

    outcomes = []
    total_time = 0
    for task in task_results:
        time_spent = getattr(task, "time_spent", 0) or 0
        total_time += time_spent
        outcomes.append({
            "task_id": task.task_id,
            "completed": has_answer(task.answer),
            "time_spent": time_spent,
        })

    return Evaluation(
        category_name=category["name"],
        total_score=score.total_score,
        max_score=score.max_score,
        percentage=score.percentage,
        rank=rank_letter(score.percentage),
        badge=badge_for(category_id, score.percentage, badge_threshold),
        total_time=total_time,
        task_results=outcomes,
    )
