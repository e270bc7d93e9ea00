"""
Centralized configuration for all thresholds, weights, tables, and constants.

Every tunable constant lives here. When real models replace the placeholder
scores, this module becomes the parameter store they override.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Tuple

from rankcast.models import FACTOR_NAMES


# ---------------------------------------------------------------------------
# Exam calendar
# ---------------------------------------------------------------------------

EXAM_DATE = date(2026, 5, 3)


# ---------------------------------------------------------------------------
# Feature extraction parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FeatureParams:
    """Window sizes and neutral defaults used by the feature extractor."""

    # Momentum compares the most recent window against the next-older one
    goal_window: int = 7
    test_window: int = 3

    # Velocity needs a full window of daily records
    velocity_window: int = 7

    # test_trend = newest score - score of the Nth most recent test
    trend_window: int = 5

    # Consistency = active_ratio * w1 + min(avg / target, 1) * w2 - std / norm * w3
    consistency_active_weight: float = 60.0
    consistency_volume_weight: float = 30.0
    consistency_volume_target: float = 300.0
    consistency_volatility_norm: float = 50.0
    consistency_volatility_weight: float = 10.0

    # Neutral per-record values when a cycle record is missing a reading
    default_mood: float = 5.0
    default_sleep: float = 7.0

    # Urgency saturates when this many days remain
    urgency_horizon_days: float = 500.0

    # data_quality = min(1, records / saturation)
    data_quality_saturation: float = 50.0


# ---------------------------------------------------------------------------
# Placeholder scores
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PlaceholderScores:
    """
    PLACEHOLDER constants standing in for sub-models that do not exist yet.

    Each value is returned as-is regardless of the user's history. They are
    kept in one place so a real model can replace any of them without
    touching the pipeline.
    """

    # Academic
    subject_balance: float = 75.0
    weakness_index: float = 25.0

    # Behavioral
    procrastination: float = 20.0
    adaptability: float = 70.0
    resilience: float = 75.0

    # Biological
    stress_level: float = 30.0
    cycle_impact: float = 15.0
    recovery_rate: float = 80.0
    health_optimization: float = 75.0

    # Temporal
    seasonality: float = 50.0
    weekday_performance: float = 70.0
    time_of_day_optimal: float = 60.0
    burnout_risk: float = 25.0

    # Meta
    retention_rate: float = 80.0
    error_pattern: float = 20.0
    strength_index: float = 75.0
    motivation_level: float = 80.0
    discipline_score: float = 75.0
    strategic_thinking: float = 70.0
    time_management: float = 65.0
    pressure_handling: float = 70.0
    goal_alignment: float = 80.0
    progress_acceleration: float = 60.0
    competitive_edge: float = 70.0
    peak_performance: float = 75.0

    # Stage 2 (trend layer) outputs
    growth_trajectory: float = 70.0
    stability_index: float = 75.0
    optimization_potential: float = 80.0
    competitive_position: float = 70.0
    risk_assessment: float = 30.0

    # Comprehensive-data extras
    study_streak: int = 15
    risk_factors: Tuple[str, ...] = ("Time pressure", "Consistency gaps")


# ---------------------------------------------------------------------------
# Stage 1 weights
# ---------------------------------------------------------------------------

def _check_sum(name: str, *weights: float) -> None:
    total = sum(weights)
    if abs(total - 1.0) > 1e-9:
        raise ValueError(f"{name} weights must sum to 1.0, got {total}")


@dataclass(frozen=True)
class PatternWeights:
    """Weights composing the five stage-1 sub-scores."""

    # academic_strength = test * w + syllabus * w + efficiency * w
    academic_test: float = 0.4
    academic_syllabus: float = 0.3
    academic_efficiency: float = 0.3

    # behavioral_stability = consistency * w + momentum * w + discipline * w
    behavioral_consistency: float = 0.5
    behavioral_momentum: float = 0.3
    behavioral_discipline: float = 0.2

    # biological_optimization = mood * w + sleep * w + energy * w
    biological_mood: float = 0.4
    biological_sleep: float = 0.3
    biological_energy: float = 0.3

    # temporal_advantage = headroom * w + time_management * w
    temporal_headroom: float = 0.6
    temporal_time_management: float = 0.4

    # meta_cognition = learning * w + strategy * w + adaptability * w
    meta_learning: float = 0.3
    meta_strategy: float = 0.4
    meta_adaptability: float = 0.3

    def __post_init__(self):
        _check_sum("Academic", self.academic_test, self.academic_syllabus,
                   self.academic_efficiency)
        _check_sum("Behavioral", self.behavioral_consistency,
                   self.behavioral_momentum, self.behavioral_discipline)
        _check_sum("Biological", self.biological_mood, self.biological_sleep,
                   self.biological_energy)
        _check_sum("Temporal", self.temporal_headroom,
                   self.temporal_time_management)
        _check_sum("Meta", self.meta_learning, self.meta_strategy,
                   self.meta_adaptability)


# ---------------------------------------------------------------------------
# Stage 3 / 4 projection parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProjectionParams:
    """Constants for score projection, scenarios, and confidence."""

    max_score: float = 720.0

    # growth_factor = min(growth_cap, (100 - syllabus) * growth_per_point)
    growth_cap: float = 50.0
    growth_per_point: float = 1.2

    # time_factor = max(time_floor, days_remaining / days_per_year)
    time_floor: float = 0.5
    days_per_year: float = 365.0

    # Scenario: pessimistic = projected - pessimistic_drop
    pessimistic_drop: float = 30.0

    # confidence_interval = (stability + quality * q_w + tests * t_w) / divisor
    interval_quality_weight: float = 100.0
    interval_test_weight: float = 5.0
    interval_divisor: float = 200.0
    confidence_cap: float = 0.95

    # final = projected + (adaptive - 50) * a_w + (peak - 50) * p_w
    neutral_level: float = 50.0
    adaptive_weight: float = 0.5
    peak_weight: float = 0.3


# ---------------------------------------------------------------------------
# Rank mapping
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RankBand:
    """rank = base + (anchor - score) * slope for floor <= score."""

    floor: float
    anchor: float
    base: float
    slope: float


DEFAULT_RANK_BANDS: Tuple[RankBand, ...] = (
    RankBand(floor=715.0, anchor=720.0, base=1.0, slope=10.0),
    RankBand(floor=700.0, anchor=715.0, base=50.0, slope=30.0),
    RankBand(floor=680.0, anchor=700.0, base=500.0, slope=100.0),
    RankBand(floor=650.0, anchor=680.0, base=2500.0, slope=250.0),
    RankBand(floor=600.0, anchor=650.0, base=10000.0, slope=600.0),
    RankBand(floor=550.0, anchor=600.0, base=40000.0, slope=1200.0),
    RankBand(floor=500.0, anchor=550.0, base=100000.0, slope=2000.0),
    RankBand(floor=450.0, anchor=500.0, base=200000.0, slope=4000.0),
    RankBand(floor=400.0, anchor=450.0, base=400000.0, slope=6000.0),
    RankBand(floor=float("-inf"), anchor=400.0, base=700000.0, slope=1000.0),
)


@dataclass(frozen=True)
class RankParams:
    """Piecewise score-to-rank table and scenario adjustment."""

    bands: Tuple[RankBand, ...] = DEFAULT_RANK_BANDS
    scenario_weight: float = 0.1
    min_rank: int = 1
    max_rank: int = 1_000_000

    def __post_init__(self):
        floors = [b.floor for b in self.bands]
        if floors != sorted(floors, reverse=True):
            raise ValueError("Rank bands must be ordered by descending floor")
        if self.bands[-1].floor != float("-inf"):
            raise ValueError("Last rank band must be open-ended")


# ---------------------------------------------------------------------------
# Recommendations and risk
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RecommendationRule:
    """Emit `message` when `metric` compares against `threshold` via `op`."""

    metric: str
    op: str            # "gt" or "lt"
    threshold: float
    message: str


DEFAULT_RECOMMENDATION_RULES: Tuple[RecommendationRule, ...] = (
    RecommendationRule(
        metric="predicted_rank", op="gt", threshold=50000,
        message="🚨 CRITICAL: Projected rank indicates high risk. "
                "Immediate strategy overhaul required!",
    ),
    RecommendationRule(
        metric="consistency", op="lt", threshold=60,
        message="⚡ CONSISTENCY ALERT: Irregular study pattern detected. "
                "Establish daily 300+ question routine!",
    ),
    RecommendationRule(
        metric="avg_test_score", op="lt", threshold=500,
        message="📈 SCORE BOOST: Current test average below threshold. "
                "Focus on concept clarity and practice!",
    ),
    RecommendationRule(
        metric="syllabus_completion", op="lt", threshold=70,
        message="📚 SYLLABUS SPRINT: Complete remaining chapters ASAP. "
                "Each 1% = significant rank improvement!",
    ),
    RecommendationRule(
        metric="burnout_risk", op="gt", threshold=70,
        message="🛡️ BURNOUT WARNING: High stress detected. "
                "Optimize study-rest balance immediately!",
    ),
    RecommendationRule(
        metric="projected_score", op="gt", threshold=650,
        message="🎯 EXCELLENCE TRACK: You're on target for top medical "
                "colleges. Maintain momentum!",
    ),
)


@dataclass(frozen=True)
class RiskThresholds:
    """Rank and confidence cut-offs for the three risk levels."""

    low_rank: int = 15000
    low_confidence: float = 0.8
    medium_rank: int = 50000
    medium_confidence: float = 0.6


@dataclass(frozen=True)
class FallbackParams:
    """Fixed result returned when the history fetch or pipeline fails."""

    predicted_rank: int = 950000
    confidence: float = 0.02
    factors: Tuple[Tuple[str, int], ...] = (
        ("progressScore", 2),
        ("testTrend", 2),
        ("consistency", 2),
        ("biologicalFactor", 50),
        ("externalFactor", 50),
    )
    recommendations: Tuple[str, ...] = (
        "🚨 START NOW: Begin comprehensive tracking",
        "📚 URGENT: Take diagnostic tests",
        "⚡ CRITICAL: Set daily study goals",
    )
    risk_level: str = "high"

    def __post_init__(self):
        names = tuple(name for name, _ in self.factors)
        if names != FACTOR_NAMES:
            raise ValueError(f"Fallback factors must be {FACTOR_NAMES}, got {names}")


# ---------------------------------------------------------------------------
# Schedule templates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PhaseTemplate:
    """Study-day template for one cycle phase."""

    total_hours: float
    intensity: str
    subjects: Tuple[str, ...]
    block_type: str = "lecture"


DEFAULT_PHASE_TEMPLATES: Dict[str, PhaseTemplate] = {
    "menstrual": PhaseTemplate(4.0, "light", ("Botany", "Zoology")),
    "follicular": PhaseTemplate(8.0, "intense", ("Physics", "Chemistry")),
    "ovulation": PhaseTemplate(
        10.0, "intense", ("Physics", "Chemistry", "Botany", "Zoology"),
        block_type="mock_test",
    ),
    "luteal": PhaseTemplate(6.0, "moderate", ("Botany", "Zoology", "Physics")),
}


@dataclass(frozen=True)
class LevelCurve:
    """
    level = clip(base + slope * (cycle_day - anchor_day), floor, ceiling)

    Evaluated against the absolute cycle day, so a curve's values do not
    shift with period length. Flat curves use the slope default of 0.
    """

    base: float
    slope: float = 0.0
    anchor_day: int = 0
    floor: float = 1.0
    ceiling: float = 10.0


DEFAULT_ENERGY_CURVES: Dict[str, LevelCurve] = {
    "menstrual": LevelCurve(base=5.0, slope=-1.0, anchor_day=0, floor=2.0, ceiling=5.0),
    "follicular": LevelCurve(base=5.0, slope=1.0, anchor_day=5, floor=1.0, ceiling=9.0),
    "ovulation": LevelCurve(base=10.0),
    "luteal": LevelCurve(base=9.0, slope=-1.0, anchor_day=16, floor=5.0, ceiling=9.0),
}

DEFAULT_MOOD_CURVES: Dict[str, LevelCurve] = {
    "menstrual": LevelCurve(base=4.0),
    "follicular": LevelCurve(base=8.0),
    "ovulation": LevelCurve(base=9.0),
    "luteal": LevelCurve(base=5.0),
}

DEFAULT_FOCUS_CURVES: Dict[str, LevelCurve] = {
    "menstrual": LevelCurve(base=4.0),
    "follicular": LevelCurve(base=9.0),
    "ovulation": LevelCurve(base=10.0),
    "luteal": LevelCurve(base=7.0),
}


@dataclass(frozen=True)
class ScheduleParams:
    """Day layout, neutral levels, and forecast confidence per phase."""

    templates: Dict[str, PhaseTemplate] = field(
        default_factory=lambda: dict(DEFAULT_PHASE_TEMPLATES)
    )
    energy_curves: Dict[str, LevelCurve] = field(
        default_factory=lambda: dict(DEFAULT_ENERGY_CURVES)
    )
    mood_curves: Dict[str, LevelCurve] = field(
        default_factory=lambda: dict(DEFAULT_MOOD_CURVES)
    )
    focus_curves: Dict[str, LevelCurve] = field(
        default_factory=lambda: dict(DEFAULT_FOCUS_CURVES)
    )

    day_start_hour: float = 9.0
    break_minutes: float = 15.0
    mock_test_hour: int = 10
    forecast_days: int = 7

    # Levels used when the phase cannot be determined
    neutral_level: float = 5.0

    forecast_confidence: Dict[str, float] = field(
        default_factory=lambda: {
            "ovulation": 0.95,
            "menstrual": 0.90,
            "follicular": 0.85,
            "luteal": 0.85,
            "undetermined": 0.0,
        }
    )

    # Default schedule (no cycle data on file)
    default_phase: str = "follicular"
    default_energy: float = 7.0
    default_total_hours: float = 6.0
    default_intensity: str = "moderate"


# ---------------------------------------------------------------------------
# Top-level config aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RankcastConfig:
    """Complete engine configuration. Pass to the pipeline to override defaults."""

    exam_date: date = EXAM_DATE
    features: FeatureParams = field(default_factory=FeatureParams)
    placeholders: PlaceholderScores = field(default_factory=PlaceholderScores)
    pattern_weights: PatternWeights = field(default_factory=PatternWeights)
    projection: ProjectionParams = field(default_factory=ProjectionParams)
    ranking: RankParams = field(default_factory=RankParams)
    risk: RiskThresholds = field(default_factory=RiskThresholds)
    fallback: FallbackParams = field(default_factory=FallbackParams)
    schedule: ScheduleParams = field(default_factory=ScheduleParams)
    recommendation_rules: tuple = DEFAULT_RECOMMENDATION_RULES
    max_recommendations: int = 4
