"""
Layered scorer: four sequential pure stages over the feature vector.

    Stage 1  pattern     — five normalized sub-scores in [0, 1]
    Stage 2  trend       — trajectory, stability, potential, position, risk
    Stage 3  predictive  — projected score, confidence interval, scenarios
    Stage 4  output      — final adjusted score and final confidence

Each stage takes the previous stage's output plus the raw features.
"""

from dataclasses import dataclass

import numpy as np

from rankcast.config import RankcastConfig
from rankcast.models import FeatureVector


# ---------------------------------------------------------------------------
# Stage outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PatternLayer:
    academic_strength: float
    behavioral_stability: float
    biological_optimization: float
    temporal_advantage: float
    meta_cognition: float


@dataclass(frozen=True)
class TrendLayer:
    growth_trajectory: float
    stability_index: float
    optimization_potential: float
    competitive_position: float
    risk_assessment: float


@dataclass(frozen=True)
class Scenario:
    """Pessimistic / realistic / optimistic projected scores."""
    pessimistic: float
    realistic: float
    optimistic: float

    @property
    def spread(self) -> float:
        return self.optimistic - self.pessimistic


@dataclass(frozen=True)
class PredictiveLayer:
    projected_score: float
    confidence_interval: float
    scenario: Scenario
    adaptive_factor: float


@dataclass(frozen=True)
class OutputLayer:
    final_score: float
    confidence: float


def _unit(x: float) -> float:
    return float(np.clip(x, 0.0, 1.0))


# ---------------------------------------------------------------------------
# Stage 1: pattern recognition
# ---------------------------------------------------------------------------

def pattern_layer(f: FeatureVector, cfg: RankcastConfig) -> PatternLayer:
    """Combine raw features into five weighted sub-scores, each clipped to [0, 1]."""
    w = cfg.pattern_weights
    max_score = cfg.projection.max_score

    academic = (
        f.avg_test_score / max_score * w.academic_test
        + f.syllabus_completion / 100 * w.academic_syllabus
        + f.efficiency / 100 * w.academic_efficiency
    )

    behavioral = (
        f.consistency / 100 * w.behavioral_consistency
        + f.momentum / 100 * w.behavioral_momentum
        + f.discipline_score / 100 * w.behavioral_discipline
    )

    biological = (
        f.avg_mood / 10 * w.biological_mood
        + f.avg_sleep / 10 * w.biological_sleep
        + f.energy_level / 10 * w.biological_energy
    )

    temporal = (
        max(0.0, 1 - f.urgency_factor) * w.temporal_headroom
        + f.time_management / 100 * w.temporal_time_management
    )

    meta = (
        f.learning_rate / 100 * w.meta_learning
        + f.strategic_thinking / 100 * w.meta_strategy
        + f.adaptability / 100 * w.meta_adaptability
    )

    return PatternLayer(
        academic_strength=_unit(academic),
        behavioral_stability=_unit(behavioral),
        biological_optimization=_unit(biological),
        temporal_advantage=_unit(temporal),
        meta_cognition=_unit(meta),
    )


# ---------------------------------------------------------------------------
# Stage 2: trend analysis
# ---------------------------------------------------------------------------

def trend_layer(layer1: PatternLayer, f: FeatureVector, cfg: RankcastConfig) -> TrendLayer:
    """
    PLACEHOLDER stage: every output is a fixed constant from config.

    The inputs each output would be derived from are listed beside it so a
    real model can be dropped in:

        growth_trajectory      <- test_trend, progress_acceleration, learning_rate
        stability_index        <- behavioral_stability, test_volatility, burnout_risk
        optimization_potential <- biological_optimization, peak_performance,
                                  health_optimization
        competitive_position   <- academic_strength, competitive_edge, time_remaining
        risk_assessment        <- burnout_risk, stress_level, procrastination
    """
    ph = cfg.placeholders
    return TrendLayer(
        growth_trajectory=ph.growth_trajectory,
        stability_index=ph.stability_index,
        optimization_potential=ph.optimization_potential,
        competitive_position=ph.competitive_position,
        risk_assessment=ph.risk_assessment,
    )


# ---------------------------------------------------------------------------
# Stage 3: predictive modeling
# ---------------------------------------------------------------------------

def project_score(
    current_avg: float,
    syllabus_completion: float,
    days_remaining: float,
    cfg: RankcastConfig,
) -> float:
    """
    projected = min(720, current + growth_factor * time_factor)

        growth_factor = min(50, (100 - syllabus) * 1.2)
        time_factor   = max(0.5, days_remaining / 365)
    """
    p = cfg.projection
    growth_factor = min(p.growth_cap, (100 - syllabus_completion) * p.growth_per_point)
    time_factor = max(p.time_floor, days_remaining / p.days_per_year)
    return min(p.max_score, current_avg + growth_factor * time_factor)


def confidence_interval(
    stability: float,
    data_quality: float,
    test_count: int,
    cfg: RankcastConfig,
) -> float:
    p = cfg.projection
    raw = (
        stability
        + data_quality * p.interval_quality_weight
        + test_count * p.interval_test_weight
    ) / p.interval_divisor
    return float(np.clip(raw, 0.0, p.confidence_cap))


def scenario_analysis(
    projected: float,
    optimization: float,
    risk: float,
    cfg: RankcastConfig,
) -> Scenario:
    return Scenario(
        pessimistic=projected - cfg.projection.pessimistic_drop,
        realistic=projected,
        optimistic=projected + optimization - risk,
    )


def predictive_layer(layer2: TrendLayer, f: FeatureVector, cfg: RankcastConfig) -> PredictiveLayer:
    projected = project_score(
        f.avg_test_score, f.syllabus_completion, f.time_remaining, cfg
    )
    return PredictiveLayer(
        projected_score=projected,
        confidence_interval=confidence_interval(
            layer2.stability_index, f.data_quality, f.test_frequency, cfg
        ),
        scenario=scenario_analysis(
            projected, layer2.optimization_potential, layer2.risk_assessment, cfg
        ),
        adaptive_factor=(f.adaptability + f.resilience + f.pressure_handling) / 3,
    )


# ---------------------------------------------------------------------------
# Stage 4: output generation
# ---------------------------------------------------------------------------

def output_layer(layer3: PredictiveLayer, f: FeatureVector, cfg: RankcastConfig) -> OutputLayer:
    """
    final = projected + (adaptive - 50) * 0.5 + (peak - 50) * 0.3
    confidence = clip(interval * data_quality, 0, 0.95)
    """
    p = cfg.projection
    final_score = (
        layer3.projected_score
        + (layer3.adaptive_factor - p.neutral_level) * p.adaptive_weight
        + (f.peak_performance - p.neutral_level) * p.peak_weight
    )
    confidence = float(
        np.clip(layer3.confidence_interval * f.data_quality, 0.0, p.confidence_cap)
    )
    return OutputLayer(final_score=final_score, confidence=confidence)
