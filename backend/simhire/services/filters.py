"""
Applicant Filtering - pure narrowing of fetched application collections

Filters never reorder and never mutate their input: the output is always
the subsequence of the input that matches every active criterion. An
unset criterion accepts everything, so `ApplicationFilter()` is the
identity filter.

Criteria (AND-ed together):
    - stage: exact stage match ("all" and "" mean no filter)
    - job_id: posting id (job id or internship id)
    - text_query: case-insensitive substring of name, email, any skill,
      university or major
    - min_gpa: gpa >= min_gpa (values <= 0 mean no filter)
    - university: case-insensitive substring of the university name

Ordering for display lives in `sort_applications`, separate from filtering.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, TypeVar, Union

from simhire.services.records import field_value, posting_id, stage_value, to_timestamp

T = TypeVar("T")

Predicate = Callable[[Any], bool]

TEXT_FIELDS = ("candidate_name", "candidate_email", "university", "major")

SORT_ORDERS = ("newest", "oldest", "name")


@dataclass(frozen=True)
class ApplicationFilter:
    stage: Optional[Union[str, Enum]] = None
    job_id: Optional[str] = None
    text_query: Optional[str] = None
    min_gpa: Optional[float] = None
    university: Optional[str] = None

    def predicates(self) -> List[Predicate]:
        """Build one predicate per active criterion."""
        active: List[Predicate] = []

        stage = self.stage.value if isinstance(self.stage, Enum) else self.stage
        if stage and stage != "all":
            active.append(lambda r: stage_value(r) == stage)

        if self.job_id:
            job_id = self.job_id
            active.append(lambda r: posting_id(r) == job_id)

        query = (self.text_query or "").strip().lower()
        if query:
            active.append(lambda r: _matches_text(r, query))

        if self.min_gpa is not None and self.min_gpa > 0:
            min_gpa = self.min_gpa
            active.append(
                lambda r: field_value(r, "gpa") is not None and field_value(r, "gpa") >= min_gpa
            )

        university = (self.university or "").strip().lower()
        if university:
            active.append(lambda r: university in str(field_value(r, "university", "")).lower())

        return active

    def matches(self, record: Any) -> bool:
        return all(predicate(record) for predicate in self.predicates())

    def is_empty(self) -> bool:
        return not self.predicates()

    def merge(self, other: "ApplicationFilter") -> "ApplicationFilter":
        """Combine two filters; criteria set on `other` win on conflict."""
        updates = {
            f.name: getattr(other, f.name)
            for f in fields(other)
            if getattr(other, f.name) is not None
        }
        return replace(self, **updates)


def _matches_text(record: Any, query: str) -> bool:
    for name in TEXT_FIELDS:
        value = field_value(record, name)
        if value and query in str(value).lower():
            return True
    skills = field_value(record, "candidate_skills", [])
    return any(query in str(skill).lower() for skill in skills)


def filter_applications(
    records: Iterable[T],
    criteria: Optional[ApplicationFilter] = None,
) -> List[T]:
    """
    Return the records matching `criteria`, in their original order.

    Args:
        records: Latest fetched snapshot (left untouched)
        criteria: Criteria to apply; None accepts everything

    Returns:
        New list containing the matching records
    """
    items = list(records)
    if criteria is None:
        return items
    active = criteria.predicates()
    if not active:
        return items
    return [r for r in items if all(predicate(r) for predicate in active)]


def sort_applications(records: Iterable[T], order: str = "newest") -> List[T]:
    """Sort applicants for display by application date or candidate name."""
    if order not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order '{order}'. Expected one of {SORT_ORDERS}")

    items = list(records)
    if order == "name":
        return sorted(items, key=lambda r: str(field_value(r, "candidate_name", "")).casefold())

    def applied(record: Any) -> float:
        return to_timestamp(field_value(record, "applied_at")) or 0.0

    return sorted(items, key=applied, reverse=(order == "newest"))
