"""
Tests for pipeline and assessment statistics

Tests cover:
- Stage histograms with every stage present
- Half-up averages with a defined zero
- Leaderboard ranking and tie-breaks
- Rank letters and the high-rank threshold
- Simulasi scoring, badges and the personal summary
- Company and candidate dashboard metrics
"""

from datetime import datetime, timedelta, timezone

import pytest

from simhire.services.pipeline import ApplicationStage, InternshipStage
from simhire.services.stats import (
    application_summary,
    average,
    badge_for,
    candidate_metrics,
    company_metrics,
    compute_percentage,
    count_by_stage,
    format_average,
    has_answer,
    internship_summary,
    is_high_rank,
    rank,
    rank_letter,
    round_half_up,
    score_submission,
    simulasi_summary,
    top_n,
)

BREAKDOWN = {"technical": 80, "creativity": 70, "efficiency": 90, "communication": 60}


class TestCountByStage:
    """Stage histogram."""

    def test_mixed_pipeline(self):
        apps = [{"stage": s} for s in ["applied", "applied", "interview", "offer", "hired"]]
        assert count_by_stage(apps) == {
            "applied": 2,
            "screening": 0,
            "interview": 1,
            "offer": 1,
            "accepted": 0,
            "hired": 1,
            "rejected": 0,
        }

    def test_empty_collection_has_every_stage(self):
        counts = count_by_stage([])
        assert set(counts) == {s.value for s in ApplicationStage}
        assert sum(counts.values()) == 0

    def test_sum_equals_length(self):
        apps = [{"stage": s.value} for s in ApplicationStage] * 3
        assert sum(count_by_stage(apps).values()) == len(apps)

    def test_internship_vocabulary(self):
        apps = [{"stage": "reviewed"}, {"stage": InternshipStage.ACCEPTED}]
        counts = count_by_stage(apps, InternshipStage)
        assert counts == {"applied": 0, "reviewed": 1, "interview": 0, "accepted": 1, "rejected": 0}

    def test_application_summary_adds_total(self):
        summary = application_summary([{"stage": "offer"}, {"stage": "offer"}])
        assert summary["total"] == 2
        assert summary["offer"] == 2


class TestAverage:
    """Display-precision means."""

    def test_gpa_average(self):
        assert average("gpa", [3.0, 4.0]) == 3.5
        assert format_average(average("gpa", [3.0, 4.0])) == "3.50"

    def test_empty_returns_zero(self):
        assert average("gpa", []) == 0.0
        assert format_average(average("gpa", [])) == "0.00"
        assert average("percentage", [], places=0) == 0

    def test_reads_field_from_records(self):
        records = [{"gpa": 3.25}, {"gpa": 3.5}, {"gpa": None}]
        assert average("gpa", records) == 3.38

    def test_rounds_half_up(self):
        assert average("percentage", [72, 73], places=0) == 73
        assert round_half_up(2.5) == 3
        assert round_half_up(0.125, 2) == 0.13

    def test_integer_places_return_int(self):
        assert isinstance(average("percentage", [70, 81], places=0), int)


class TestRank:
    """Leaderboard ordering."""

    def test_descending_by_percentage(self):
        results = [{"id": "a", "percentage": 70}, {"id": "b", "percentage": 90}, {"id": "c", "percentage": 80}]
        ranked = rank(results)
        assert [r.result["id"] for r in ranked] == ["b", "c", "a"]
        assert [r.position for r in ranked] == [1, 2, 3]

    def test_tie_goes_to_earlier_completion(self):
        results = [
            {"id": "late", "percentage": 85, "completed_at": "2026-02-02T10:00:00Z"},
            {"id": "early", "percentage": 85, "completed_at": "2026-02-01T10:00:00Z"},
        ]
        assert [r.result["id"] for r in rank(results)] == ["early", "late"]

    def test_missing_completion_sorts_last_among_ties(self):
        results = [
            {"id": "unknown", "percentage": 85},
            {"id": "known", "percentage": 85, "completed_at": datetime(2026, 2, 1)},
        ]
        assert [r.result["id"] for r in rank(results)] == ["known", "unknown"]

    def test_full_tie_keeps_input_order(self):
        results = [{"id": str(i), "percentage": 60} for i in range(5)]
        assert [r.result["id"] for r in rank(results)] == ["0", "1", "2", "3", "4"]

    def test_ignores_existing_rank_field(self):
        results = [{"id": "a", "percentage": 50, "position": 1}, {"id": "b", "percentage": 99, "position": 2}]
        ranked = rank(results)
        assert ranked[0].result["id"] == "b"
        assert ranked[0].position == 1

    def test_reranking_is_stable(self):
        results = [
            {"id": "a", "percentage": 80, "completed_at": "2026-01-01T00:00:00Z"},
            {"id": "b", "percentage": 80, "completed_at": "2026-01-01T00:00:00Z"},
            {"id": "c", "percentage": 95},
        ]
        first = rank(results)
        second = rank([r.result for r in first])
        assert [(r.position, r.result["id"]) for r in first] == [
            (r.position, r.result["id"]) for r in second
        ]

    def test_top_n_truncates(self):
        results = [{"percentage": p} for p in (10, 20, 30, 40)]
        top = top_n(results, 2)
        assert [r.percentage for r in top] == [40, 30]

    def test_top_n_with_fewer_results(self):
        assert len(top_n([{"percentage": 50}], 10)) == 1
        assert top_n([], 5) == []


class TestRankLetter:
    """Display bands with inclusive lower bounds."""

    @pytest.mark.parametrize(
        "percentage,letter",
        [
            (100, "S"), (95, "S"), (94.9, "A+"), (90, "A+"), (85, "A"), (84, "B+"),
            (80, "B+"), (79.9, "B"), (75, "B"), (70, "C+"), (69.9, "C"), (0, "C"),
        ],
    )
    def test_bands(self, percentage, letter):
        assert rank_letter(percentage) == letter

    def test_high_rank_threshold(self):
        assert is_high_rank(80)
        assert not is_high_rank(79)


class TestScoring:
    """Simulasi submission scoring."""

    def test_compute_percentage(self):
        assert compute_percentage(45, 60) == 75
        assert compute_percentage(10, 0) == 0

    def test_has_answer(self):
        assert has_answer("my answer")
        assert not has_answer("   ")
        assert not has_answer(None)
        assert has_answer({"code": "print(1)"})
        assert has_answer({"files": ["design.fig"]})
        assert not has_answer({"text": "", "code": "", "files": []})

    def test_all_tasks_answered(self):
        tasks = [{"answer": "a"}, {"answer": {"text": "b"}}]
        score = score_submission(tasks, BREAKDOWN)
        # 100 * 0.6 + 75 * 0.4
        assert score.percentage == 90
        assert score.total_score == 100
        assert score.max_score == 100

    def test_partial_completion(self):
        tasks = [{"answer": "a"}, {"answer": None}, {"answer": ""}]
        score = score_submission(tasks, BREAKDOWN)
        # 33.33 * 0.6 + 75 * 0.4 = 50
        assert score.percentage == 50
        assert score.total_score == 33.33

    def test_no_tasks(self):
        score = score_submission([], {"technical": 0, "creativity": 0, "efficiency": 0, "communication": 0})
        assert score.percentage == 0

    def test_percentage_is_bounded(self):
        perfect = {name: 100 for name in BREAKDOWN}
        assert score_submission([{"answer": "x"}], perfect).percentage == 100

    def test_badge_threshold(self):
        assert badge_for("backend-dev", 80) == "backend-dev-expert"
        assert badge_for("backend-dev", 79) is None
        assert badge_for("sales", 85, threshold=90) is None


class TestSimulasiSummary:
    """Personal simulasi dashboard."""

    @pytest.fixture
    def results(self):
        return [
            {"category_id": "frontend-dev", "percentage": 70, "rank": "C+", "badge": None,
             "completed_at": "2026-01-01T08:00:00Z"},
            {"category_id": "backend-dev", "percentage": 92, "rank": "A+", "badge": "backend-dev-expert",
             "completed_at": "2026-01-02T08:00:00Z"},
            {"category_id": "frontend-dev", "percentage": 85, "rank": "A", "badge": "frontend-dev-expert",
             "completed_at": "2026-01-03T08:00:00Z"},
            {"category_id": "backend-dev", "percentage": 88, "rank": "A", "badge": "backend-dev-expert",
             "completed_at": "2026-01-04T08:00:00Z"},
        ]

    def test_summary(self, results):
        summary = simulasi_summary(results)
        assert summary["total_completed"] == 4
        assert summary["average_score"] == 84  # 83.75 rounds half-up
        assert summary["badges"] == ["backend-dev-expert", "frontend-dev-expert"]
        assert summary["rank_counts"] == {"C+": 1, "A+": 1, "A": 2}

    def test_latest_score_per_category(self, results):
        summary = simulasi_summary(results)
        assert summary["category_scores"] == {"frontend-dev": 85, "backend-dev": 88}
        assert summary["strongest_category"] == "backend-dev"

    def test_empty(self):
        summary = simulasi_summary([])
        assert summary["total_completed"] == 0
        assert summary["average_score"] == 0
        assert summary["badges"] == []
        assert summary["strongest_category"] is None


class TestInternshipSummary:
    def test_counts_and_gpa(self):
        apps = [{"stage": "applied", "gpa": 3.0}, {"stage": "accepted", "gpa": 4.0}]
        summary = internship_summary(apps)
        assert summary["total"] == 2
        assert summary["applied"] == 1
        assert summary["reviewed"] == 0
        assert summary["average_gpa"] == "3.50"

    def test_empty_gpa(self):
        assert internship_summary([])["average_gpa"] == "0.00"


class TestCompanyMetrics:
    """Company overview numbers."""

    @pytest.fixture
    def now(self):
        return datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)

    def test_metrics(self, now):
        jobs = [
            {"status": "open", "skills": ["Python", "SQL"]},
            {"status": "closed", "skills": ["Python"]},
            {"status": "active", "skills": ["Figma"]},
        ]
        applications = [
            {"stage": "hired", "applied_at": now - timedelta(days=20), "last_stage_change": now - timedelta(days=10)},
            {"stage": "accepted", "applied_at": now - timedelta(days=9), "last_stage_change": now - timedelta(days=5)},
            {"stage": "applied", "applied_at": now - timedelta(days=2)},
            {"stage": "rejected", "applied_at": now - timedelta(days=1)},
        ]
        metrics = company_metrics(jobs, applications, now=now)

        assert metrics["total_jobs"] == 3
        assert metrics["active_jobs"] == 2
        assert metrics["total_applications"] == 4
        assert metrics["new_applications_this_week"] == 2
        assert metrics["conversion_rate"] == 50.0
        assert metrics["avg_time_to_hire_days"] == 7.0
        assert metrics["applications_by_stage"]["hired"] == 1
        assert metrics["top_skills_in_demand"][0] == {"skill": "Python", "count": 2}
        assert len(metrics["applications_over_time"]) == 30
        assert metrics["applications_over_time"][-1]["date"] == "2026-03-31"

    def test_empty(self, now):
        metrics = company_metrics([], [], now=now)
        assert metrics["conversion_rate"] == 0
        assert metrics["avg_time_to_hire_days"] == 0.0
        assert sum(day["count"] for day in metrics["applications_over_time"]) == 0


class TestCandidateMetrics:
    """Candidate dashboard view."""

    def test_counts_and_average(self):
        applications = [{"stage": "applied"}, {"stage": "interview"}, {"stage": "offer"}]
        results = [{"percentage": 72}, {"percentage": 85}, {"percentage": 90}]

        metrics = candidate_metrics(applications, results)

        assert metrics["total_applications"] == 3
        assert metrics["active_applications"] == 2
        assert metrics["simulasi_completed"] == 3
        assert metrics["average_score"] == 82
        assert sum(metrics["applications_by_stage"].values()) == 3

    def test_empty(self):
        metrics = candidate_metrics([], [])
        assert metrics["average_score"] == 0
        assert metrics["active_applications"] == 0
