"""
Pipeline & Assessment Statistics

Pure aggregation over fetched collections. Nothing here performs I/O or
mutates its input; every function is safe to call on an empty collection.

Functions:
    count_by_stage   - stage histogram with every stage present
    average          - half-up rounded mean with a defined zero
    rank / top_n     - leaderboard positions by percentage
    rank_letter      - S / A+ / A / B+ / B / C+ / C display band
    score_submission - simulasi task + breakdown scoring
    simulasi_summary, internship_summary, company_metrics,
    candidate_metrics - dashboard views

Rounding follows the product's display rules (half-up, like the web UI),
not Python's banker's rounding: 72.5% displays as 73%.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type, Union

from simhire.services.pipeline import ApplicationStage, InternshipStage
from simhire.services.records import field_value, stage_value, to_timestamp

Number = Union[int, float]

# Inclusive lower bounds, highest first
RANK_BANDS = [
    (95, "S"),
    (90, "A+"),
    (85, "A"),
    (80, "B+"),
    (75, "B"),
    (70, "C+"),
]
LOWEST_RANK = "C"

HIGH_RANK_THRESHOLD = 80

BREAKDOWN_FIELDS = ("technical", "creativity", "efficiency", "communication")

# Final simulasi score = task completion * 0.6 + breakdown mean * 0.4
TASK_WEIGHT = Decimal("0.6")
BREAKDOWN_WEIGHT = Decimal("0.4")

HIRED_STAGES = (ApplicationStage.ACCEPTED.value, ApplicationStage.HIRED.value)


def round_half_up(value: Number, places: int = 0) -> Number:
    """Round like the web UI does; returns an int when places == 0."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


# ==================== Counting ====================

def count_by_stage(
    collection: Iterable[Any],
    stages: Type[Enum] = ApplicationStage,
) -> Dict[str, int]:
    """
    Count records per stage.

    Every member of `stages` is present in the result, with 0 when no
    record is in that stage.
    """
    counts = {stage.value: 0 for stage in stages}
    for record in collection:
        value = stage_value(record)
        if value in counts:
            counts[value] += 1
    return counts


# ==================== Averages ====================

def _numeric(item: Any, field: str) -> Optional[Number]:
    if isinstance(item, (int, float)) and not isinstance(item, bool):
        return item
    value = field_value(item, field)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def average(field: str, collection: Iterable[Any], places: int = 2) -> Number:
    """
    Arithmetic mean of `field` across the collection.

    Items may be records (field is read from them) or bare numbers.
    Records without a numeric value are skipped. Returns 0 (int when
    places == 0, otherwise 0.0) for an empty collection.
    """
    values = [v for v in (_numeric(item, field) for item in collection) if v is not None]
    if not values:
        return 0 if places == 0 else 0.0
    total = sum(Decimal(str(v)) for v in values)
    return round_half_up(total / len(values), places)


def format_average(value: Number, places: int = 2) -> str:
    """Render an average with fixed decimals, e.g. 3.5 -> "3.50"."""
    return f"{value:.{places}f}"


# ==================== Ranking ====================

@dataclass(frozen=True)
class RankedResult:
    position: int
    result: Any

    @property
    def percentage(self) -> Number:
        return field_value(self.result, "percentage", 0)


def _rank_key(indexed: tuple) -> tuple:
    index, result = indexed
    completed = to_timestamp(field_value(result, "completed_at"))
    # Higher percentage first, then earlier completion, then input order
    return (
        -field_value(result, "percentage", 0),
        completed if completed is not None else float("inf"),
        index,
    )


def rank(results: Iterable[Any]) -> List[RankedResult]:
    """
    Order results by percentage (descending) and assign positions 1..N.

    Ties go to the earlier `completed_at`; results without a completion
    time sort after those with one; remaining ties keep input order.
    Any rank or position already present on the results is ignored.
    """
    ordered = sorted(enumerate(results), key=_rank_key)
    return [RankedResult(position=i, result=r) for i, (_, r) in enumerate(ordered, start=1)]


def top_n(results: Iterable[Any], n: int) -> List[RankedResult]:
    """Rank, then keep the first n (all of them when fewer exist)."""
    return rank(results)[: max(n, 0)]


def rank_letter(percentage: Number) -> str:
    for lower_bound, letter in RANK_BANDS:
        if percentage >= lower_bound:
            return letter
    return LOWEST_RANK


def is_high_rank(percentage: Number) -> bool:
    """Display-only: B+ and above get the highlighted treatment."""
    return percentage >= HIGH_RANK_THRESHOLD


# ==================== Simulasi scoring ====================

@dataclass(frozen=True)
class SubmissionScore:
    total_score: Number
    max_score: int
    percentage: int


def compute_percentage(total_score: Number, max_score: Number) -> int:
    if not max_score or max_score <= 0:
        return 0
    return round_half_up(Decimal(str(total_score)) / Decimal(str(max_score)) * 100)


def has_answer(answer: Any) -> bool:
    """A task counts as answered with non-blank text or code, or any file."""
    if answer is None:
        return False
    if isinstance(answer, str):
        return bool(answer.strip())
    text = field_value(answer, "text", "")
    code = field_value(answer, "code", "")
    files = field_value(answer, "files", [])
    return bool(str(text).strip() or str(code).strip() or files)


def score_submission(
    task_results: Sequence[Any],
    breakdown: Mapping[str, Number],
) -> SubmissionScore:
    """
    Score a simulasi submission.

    Each answered task is worth 100 / len(task_results) points. The final
    percentage blends task completion (60%) with the breakdown mean (40%).
    """
    if task_results:
        answered = sum(1 for task in task_results if has_answer(field_value(task, "answer")))
        task_score = Decimal(100) * answered / len(task_results)
    else:
        task_score = Decimal(0)

    values = [Decimal(str(breakdown.get(name, 0))) for name in BREAKDOWN_FIELDS]
    breakdown_mean = sum(values) / len(values)

    percentage = round_half_up(task_score * TASK_WEIGHT + breakdown_mean * BREAKDOWN_WEIGHT)
    return SubmissionScore(
        total_score=round_half_up(task_score, 2),
        max_score=100,
        percentage=min(max(percentage, 0), 100),
    )


def badge_for(category_id: str, percentage: Number, threshold: int = HIGH_RANK_THRESHOLD) -> Optional[str]:
    if percentage >= threshold:
        return f"{category_id}-expert"
    return None


def simulasi_summary(results: Iterable[Any]) -> Dict[str, Any]:
    """
    Personal simulasi dashboard: completions, average, badges, rank counts,
    latest score per category and the strongest category.
    """
    items = list(results)
    chronological = sorted(
        items, key=lambda r: to_timestamp(field_value(r, "completed_at")) or 0.0
    )

    badges: List[str] = []
    for result in chronological:
        badge = field_value(result, "badge")
        if badge and badge not in badges:
            badges.append(badge)

    rank_counts = Counter(
        field_value(r, "rank") or rank_letter(field_value(r, "percentage", 0)) for r in items
    )

    category_scores: Dict[str, Number] = {}
    for result in chronological:
        category_scores[field_value(result, "category_id")] = field_value(result, "percentage", 0)

    strongest = None
    for category, score in category_scores.items():
        if strongest is None or score > category_scores[strongest]:
            strongest = category

    return {
        "total_completed": len(items),
        "average_score": average("percentage", items, places=0),
        "badges": badges,
        "rank_counts": dict(rank_counts),
        "category_scores": category_scores,
        "strongest_category": strongest,
    }


# ==================== Pipeline summaries ====================

def internship_summary(applications: Iterable[Any]) -> Dict[str, Any]:
    items = list(applications)
    summary: Dict[str, Any] = {"total": len(items)}
    summary.update(count_by_stage(items, InternshipStage))
    summary["average_gpa"] = format_average(average("gpa", items))
    return summary


def application_summary(applications: Iterable[Any]) -> Dict[str, int]:
    items = list(applications)
    summary = {"total": len(items)}
    summary.update(count_by_stage(items, ApplicationStage))
    return summary


def _as_datetime(value: Any) -> Optional[datetime]:
    ts = to_timestamp(value)
    return datetime.fromtimestamp(ts, tz=timezone.utc) if ts is not None else None


def company_metrics(
    jobs: Iterable[Any],
    applications: Iterable[Any],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Company overview numbers.

    Hires are applications in the accepted or hired stage; time to hire is
    measured from `applied_at` to `last_stage_change` in whole days.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    job_list = list(jobs)
    app_list = list(applications)

    applied_dates = [_as_datetime(field_value(a, "applied_at")) for a in app_list]
    applied_dates = [d for d in applied_dates if d is not None]

    week_ago = now - timedelta(days=7)
    new_this_week = sum(1 for d in applied_dates if d >= week_ago)

    hired = [a for a in app_list if stage_value(a) in HIRED_STAGES]
    days_to_hire = []
    for application in hired:
        applied = _as_datetime(field_value(application, "applied_at"))
        changed = _as_datetime(field_value(application, "last_stage_change"))
        if applied and changed:
            days_to_hire.append((changed - applied).days)

    conversion = (len(hired) / len(app_list) * 100) if app_list else 0

    skill_counts = Counter(
        skill for job in job_list for skill in field_value(job, "skills", [])
    )

    over_time = []
    for offset in range(29, -1, -1):
        day = (now - timedelta(days=offset)).date()
        count = sum(1 for d in applied_dates if d.date() == day)
        over_time.append({"date": day.isoformat(), "count": count})

    return {
        "total_jobs": len(job_list),
        "active_jobs": sum(1 for j in job_list if field_value(j, "status") in ("open", "active")),
        "total_applications": len(app_list),
        "new_applications_this_week": new_this_week,
        "avg_time_to_hire_days": average("days", days_to_hire, places=1),
        "conversion_rate": round_half_up(conversion, 1),
        "applications_by_stage": count_by_stage(app_list, ApplicationStage),
        "top_skills_in_demand": [
            {"skill": skill, "count": count} for skill, count in skill_counts.most_common(10)
        ],
        "applications_over_time": over_time,
    }


# Stages in which a candidate is still waiting on the company
OPEN_STAGES = (
    ApplicationStage.APPLIED.value,
    ApplicationStage.SCREENING.value,
    ApplicationStage.INTERVIEW.value,
)


def candidate_metrics(applications: Iterable[Any], results: Iterable[Any]) -> Dict[str, Any]:
    """Candidate overview: application pipeline plus simulasi progress."""
    app_list = list(applications)
    result_list = list(results)
    return {
        "total_applications": len(app_list),
        "active_applications": sum(1 for a in app_list if stage_value(a) in OPEN_STAGES),
        "simulasi_completed": len(result_list),
        "average_score": average("percentage", result_list, places=0),
        "applications_by_stage": count_by_stage(app_list, ApplicationStage),
    }
