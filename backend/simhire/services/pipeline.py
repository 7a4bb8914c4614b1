"""
Application Pipeline - stage vocabularies and presentation policy

Job applications and internship applications move through two separate,
closed stage vocabularies:

    Job:        applied → screening → interview → offer → accepted/hired | rejected
    Internship: applied → reviewed → interview → accepted | rejected

A StagePolicy wraps one vocabulary with its labels and badge colors. The two
policies are never interchangeable: a job stage is not a legal internship
stage even when the strings coincide ("interview", "accepted"), because
each policy only accepts members of its own enum.

Usage:
    JOB_POLICY.label_of("offer")        # "Ditawarkan"
    JOB_POLICY.color_of("unknown")      # "unknown" (raw fallback)
    INTERNSHIP_POLICY.parse("screening")  # raises InvalidStageError
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Type, Union


class ApplicationStage(str, Enum):
    """Stages of a job application."""

    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEW = "interview"
    OFFER = "offer"
    ACCEPTED = "accepted"
    HIRED = "hired"
    REJECTED = "rejected"


class InternshipStage(str, Enum):
    """Stages of an internship application."""

    APPLIED = "applied"
    REVIEWED = "reviewed"
    INTERVIEW = "interview"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ApplicationKind(str, Enum):
    JOB = "job"
    INTERNSHIP = "internship"


StageLike = Union[str, Enum]


class InvalidStageError(ValueError):
    """Raised when a stage is not part of a policy's vocabulary."""

    def __init__(self, stage: str, kind: ApplicationKind, allowed: List[str]):
        self.stage = stage
        self.kind = kind
        self.allowed = allowed
        super().__init__(
            f"Invalid {kind.value} application status '{stage}'. "
            f"Allowed: {', '.join(allowed)}"
        )


def _raw(stage: StageLike) -> str:
    return stage.value if isinstance(stage, Enum) else str(stage)


@dataclass(frozen=True)
class StagePolicy:
    """
    Vocabulary, labels and colors for one application kind.

    Attributes:
        kind: Which application type this policy governs
        stages: Enum class holding the legal stages, in pipeline order
        labels: Human-readable label per stage value
        colors: Presentation tag per stage value
        messages: Default timeline message recorded on a change to the stage
        terminal: Stages after which a candidate can no longer withdraw
    """

    kind: ApplicationKind
    stages: Type[Enum]
    labels: Dict[str, str]
    colors: Dict[str, str]
    messages: Dict[str, str] = field(default_factory=dict)
    terminal: frozenset = frozenset()

    @property
    def values(self) -> List[str]:
        return [s.value for s in self.stages]

    def is_valid(self, stage: StageLike) -> bool:
        if isinstance(stage, Enum) and not isinstance(stage, self.stages):
            return False
        return _raw(stage) in self.values

    def parse(self, stage: StageLike) -> Enum:
        """Return the enum member for `stage` or raise InvalidStageError."""
        if not self.is_valid(stage):
            raise InvalidStageError(_raw(stage), self.kind, self.values)
        return self.stages(_raw(stage))

    def label_of(self, stage: StageLike) -> str:
        raw = _raw(stage)
        return self.labels.get(raw, raw)

    def color_of(self, stage: StageLike) -> str:
        raw = _raw(stage)
        return self.colors.get(raw, raw)

    def message_for(self, stage: StageLike) -> str:
        raw = _raw(stage)
        return self.messages.get(raw, self.label_of(raw))

    def is_terminal(self, stage: StageLike) -> bool:
        return _raw(stage) in self.terminal


JOB_POLICY = StagePolicy(
    kind=ApplicationKind.JOB,
    stages=ApplicationStage,
    labels={
        "applied": "Baru Melamar",
        "screening": "Dalam Seleksi",
        "interview": "Interview",
        "offer": "Ditawarkan",
        "accepted": "Diterima",
        "hired": "Direkrut",
        "rejected": "Ditolak",
    },
    colors={
        "applied": "blue",
        "screening": "yellow",
        "interview": "purple",
        "offer": "green",
        "accepted": "emerald",
        "hired": "teal",
        "rejected": "red",
    },
    messages={
        "applied": "Lamaran diterima",
        "screening": "Lamaran sedang di-review oleh tim HRD",
        "interview": "Selamat! Anda diundang untuk interview",
        "offer": "Selamat! Anda mendapat penawaran kerja",
        "accepted": "Selamat! Anda diterima di posisi ini",
        "hired": "Selamat! Anda resmi bergabung",
        "rejected": "Mohon maaf, lamaran Anda belum berhasil kali ini",
    },
    terminal=frozenset({"accepted", "hired", "rejected"}),
)

INTERNSHIP_POLICY = StagePolicy(
    kind=ApplicationKind.INTERNSHIP,
    stages=InternshipStage,
    labels={
        "applied": "Baru Daftar",
        "reviewed": "Direview",
        "interview": "Interview",
        "accepted": "Diterima",
        "rejected": "Ditolak",
    },
    colors={
        "applied": "blue",
        "reviewed": "yellow",
        "interview": "purple",
        "accepted": "green",
        "rejected": "red",
    },
    terminal=frozenset({"accepted", "rejected"}),
)


def policy_for(kind: ApplicationKind) -> StagePolicy:
    if kind == ApplicationKind.INTERNSHIP:
        return INTERNSHIP_POLICY
    return JOB_POLICY
