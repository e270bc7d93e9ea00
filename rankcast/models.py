"""
Data models for the prediction engine and the schedule optimizer.

Input records are read-only snapshots handed over by the data-access layer.
Result objects are created fresh per request and never mutated; `to_dict()`
renders them with the external (camelCase) field names.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


class CyclePhase(str, Enum):
    """Physiological cycle phase. UNDETERMINED marks invalid cycle parameters."""

    MENSTRUAL = "menstrual"
    FOLLICULAR = "follicular"
    OVULATION = "ovulation"
    LUTEAL = "luteal"
    UNDETERMINED = "undetermined"


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StudyRecord:
    """One day of logged practice questions."""
    date: date
    total: int
    subject_counts: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class TestRecord:
    """A mock or practice test result on the 0-720 scale."""
    date: date
    score: float
    test_type: str = ""


@dataclass(frozen=True)
class CycleRecord:
    """
    A logged menstrual cycle.

    `energy_level` doubles as the mood proxy and `study_capacity` as the
    sleep proxy in feature extraction; either may be missing.
    """
    cycle_start_date: date
    cycle_length: int
    period_length: int
    energy_level: Optional[float] = None
    study_capacity: Optional[float] = None
    symptoms: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SessionRecord:
    """A timed study session."""
    start_time: datetime
    end_time: datetime
    focus_score: float = 0.0


@dataclass(frozen=True)
class SubjectProgress:
    """Syllabus snapshot for one subject."""
    name: str
    chapters_total: int
    chapters_completed: int


@dataclass(frozen=True)
class HistorySnapshot:
    """Everything the engine reads for one prediction request."""
    study: Tuple[StudyRecord, ...] = ()
    tests: Tuple[TestRecord, ...] = ()
    cycles: Tuple[CycleRecord, ...] = ()
    sessions: Tuple[SessionRecord, ...] = ()
    subjects: Tuple[SubjectProgress, ...] = ()

    def is_empty(self) -> bool:
        return not (self.study or self.tests or self.cycles
                    or self.sessions or self.subjects)

    def latest_cycle(self) -> Optional[CycleRecord]:
        """The authoritative cycle record: latest by start date."""
        if not self.cycles:
            return None
        return max(self.cycles, key=lambda c: c.cycle_start_date)


# ---------------------------------------------------------------------------
# Feature vector
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FeatureVector:
    """Fixed-schema numeric summary of a user's history. Every field is defined."""

    # Academic
    total_questions: float = 0.0
    chapters_completed: int = 0
    total_chapters: int = 0
    avg_test_score: float = 0.0
    test_trend: float = 0.0
    test_volatility: float = 0.0
    syllabus_completion: float = 0.0
    question_velocity: float = 0.0
    test_frequency: int = 0
    score_improvement: float = 0.0
    subject_balance: float = 0.0
    weakness_index: float = 0.0

    # Behavioral
    study_hours: float = 0.0
    consistency: float = 0.0
    momentum: float = 50.0
    efficiency: float = 0.0
    focus_score: float = 0.0
    procrastination: float = 0.0
    adaptability: float = 0.0
    resilience: float = 0.0

    # Biological
    avg_mood: float = 5.0
    avg_sleep: float = 7.0
    energy_level: float = 0.0
    stress_level: float = 0.0
    cycle_impact: float = 0.0
    recovery_rate: float = 0.0
    health_optimization: float = 0.0
    cycle_day: int = 0
    cycle_phase: CyclePhase = CyclePhase.UNDETERMINED

    # Temporal
    time_remaining: int = 0
    urgency_factor: float = 0.0
    seasonality: float = 0.0
    weekday_performance: float = 0.0
    time_of_day_optimal: float = 0.0
    burnout_risk: float = 0.0

    # Meta
    data_quality: float = 0.0
    learning_rate: float = 0.0
    retention_rate: float = 0.0
    error_pattern: float = 0.0
    strength_index: float = 0.0
    motivation_level: float = 0.0
    discipline_score: float = 0.0
    strategic_thinking: float = 0.0
    time_management: float = 0.0
    pressure_handling: float = 0.0
    goal_alignment: float = 0.0
    progress_acceleration: float = 0.0
    competitive_edge: float = 0.0
    peak_performance: float = 0.0

    def as_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["cycle_phase"] = self.cycle_phase.value
        return data


# ---------------------------------------------------------------------------
# Prediction result
# ---------------------------------------------------------------------------

FACTOR_NAMES = (
    "progressScore",
    "testTrend",
    "consistency",
    "biologicalFactor",
    "externalFactor",
)


def _freeze(value):
    """Read-only view of a nested dict / list payload."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value):
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class PredictionResult:
    """
    Forecasted rank, confidence, factor breakdown, and guidance.

    `factors` and `comprehensive_data` are stored as read-only mappings;
    `to_dict()` returns fresh plain copies.
    """

    predicted_rank: int
    confidence: float
    factors: Mapping[str, int]
    recommendations: Tuple[str, ...]
    risk_level: str
    comprehensive_data: Optional[Mapping[str, object]] = None
    is_fallback: bool = False

    def __post_init__(self):
        object.__setattr__(self, "factors", _freeze(self.factors))
        object.__setattr__(self, "recommendations", tuple(self.recommendations))
        if self.comprehensive_data is not None:
            object.__setattr__(self, "comprehensive_data", _freeze(self.comprehensive_data))

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {
            "predictedRank": self.predicted_rank,
            "confidence": self.confidence,
            "factors": _thaw(self.factors),
            "recommendations": list(self.recommendations),
            "riskLevel": self.risk_level,
        }
        if self.comprehensive_data is not None:
            out["comprehensiveData"] = _thaw(self.comprehensive_data)
        return out


# ---------------------------------------------------------------------------
# Schedule models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScheduleBlock:
    """One time-boxed study segment."""
    start_time: str
    end_time: str
    subject: str
    topic: str
    intensity: str
    block_type: str
    duration_minutes: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "subject": self.subject,
            "topic": self.topic,
            "intensity": self.intensity,
            "type": self.block_type,
            "durationMinutes": self.duration_minutes,
        }


@dataclass(frozen=True)
class Schedule:
    """A phase-optimized study day."""
    date: date
    phase: CyclePhase
    cycle_day: int
    energy_level: float
    study_blocks: Tuple[ScheduleBlock, ...]
    difficulty_focus: str
    total_study_hours: float
    mock_test_slot: Optional[datetime] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "phase": self.phase.value,
            "cycleDay": self.cycle_day,
            "energyLevel": self.energy_level,
            "studyBlocks": [b.to_dict() for b in self.study_blocks],
            "difficultyFocus": self.difficulty_focus,
            "totalStudyHours": self.total_study_hours,
            "mockTestSlot": (
                self.mock_test_slot.isoformat() if self.mock_test_slot else None
            ),
        }


@dataclass(frozen=True)
class DayForecast:
    """Predicted energy, mood, and focus for one calendar day."""
    date: date
    predicted_energy: float
    predicted_mood: float
    predicted_focus: float
    cycle_day: int
    cycle_phase: CyclePhase
    confidence: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "predictedEnergy": self.predicted_energy,
            "predictedMood": self.predicted_mood,
            "predictedFocus": self.predicted_focus,
            "cycleDay": self.cycle_day,
            "cyclePhase": self.cycle_phase.value,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class StudyTechnique:
    """A phase-appropriate study technique for one subject."""
    technique: str
    description: str
    duration_minutes: int
    difficulty: str
