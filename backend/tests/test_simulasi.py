"""Tests for the simulasi catalog and submission evaluation."""

import pytest

from simhire.schemas import TaskSubmission
from simhire.services.simulasi import (
    CATEGORIES,
    UnknownCategoryError,
    evaluate_submission,
    get_category,
)

BREAKDOWN = {"technical": 90, "creativity": 85, "efficiency": 80, "communication": 85}


class TestCatalog:
    def test_eight_categories(self):
        assert len(CATEGORIES) == 8
        assert "backend-dev" in CATEGORIES

    def test_get_category(self):
        assert get_category("sales") == {
            "id": "sales",
            "name": "Sales & Business Development",
            "difficulty": "intermediate",
        }

    def test_unknown_category(self):
        with pytest.raises(UnknownCategoryError) as exc_info:
            get_category("astronaut")
        assert exc_info.value.category_id == "astronaut"


class TestEvaluateSubmission:
    def test_complete_submission(self):
        tasks = [
            TaskSubmission(task_id="t1", answer="Wireframe attached", time_spent=300),
            TaskSubmission(task_id="t2", answer={"code": "SELECT 1"}, time_spent=120),
        ]
        evaluation = evaluate_submission("data-analysis", tasks, BREAKDOWN)

        # 100 * 0.6 + 85 * 0.4
        assert evaluation.percentage == 94
        assert evaluation.rank == "A+"
        assert evaluation.badge == "data-analysis-expert"
        assert evaluation.category_name == "Data Analysis"
        assert evaluation.total_time == 420
        assert evaluation.task_results == [
            {"task_id": "t1", "completed": True, "time_spent": 300},
            {"task_id": "t2", "completed": True, "time_spent": 120},
        ]

    def test_unanswered_task_counts_against_score(self):
        tasks = [
            TaskSubmission(task_id="t1", answer="done"),
            TaskSubmission(task_id="t2", answer={"text": "  "}),
        ]
        evaluation = evaluate_submission("sales", tasks, BREAKDOWN)

        # 50 * 0.6 + 85 * 0.4
        assert evaluation.percentage == 64
        assert evaluation.rank == "C"
        assert evaluation.badge is None
        assert evaluation.task_results[1]["completed"] is False

    def test_custom_badge_threshold(self):
        tasks = [TaskSubmission(task_id="t1", answer="done")]
        evaluation = evaluate_submission("sales", tasks, BREAKDOWN, badge_threshold=95)
        assert evaluation.badge is None

    def test_unknown_category(self):
        with pytest.raises(UnknownCategoryError):
            evaluate_submission("nope", [TaskSubmission(task_id="t1", answer="x")], BREAKDOWN)
