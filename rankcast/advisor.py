"""
Recommendations, risk classification, and the factor breakdown.

Each function is a pure function of the final-stage outputs and returns
structured values. No side effects.
"""

import operator
from typing import Dict, List, Mapping

import numpy as np

from rankcast.config import RankcastConfig
from rankcast.layers import OutputLayer, PredictiveLayer
from rankcast.models import FeatureVector, PredictionResult


_OPS = {"gt": operator.gt, "lt": operator.lt}


# ---------------------------------------------------------------------------
# Factor breakdown
# ---------------------------------------------------------------------------

def _score_100(x: float) -> int:
    """Round half-up and clip to [0, 100]."""
    return int(np.clip(np.floor(x + 0.5), 0, 100))


def factor_scores(f: FeatureVector, cfg: RankcastConfig) -> Dict[str, int]:
    """The five headline factors, each an integer in [0, 100]."""
    max_score = cfg.projection.max_score
    return {
        "progressScore": _score_100(f.syllabus_completion),
        "testTrend": _score_100(f.avg_test_score / max_score * 100),
        "consistency": _score_100(f.consistency),
        "biologicalFactor": _score_100(
            (f.avg_mood + f.avg_sleep + f.energy_level) / 3 * 10
        ),
        "externalFactor": _score_100(100 - f.urgency_factor * 100),
    }


def strongest_factor(factors: Mapping[str, float]) -> str:
    """Name of the highest factor; the last one listed wins ties."""
    return max(reversed(list(factors)), key=lambda k: factors[k])


def weakest_factor(factors: Mapping[str, float]) -> str:
    """Name of the lowest factor; the last one listed wins ties."""
    return min(reversed(list(factors)), key=lambda k: factors[k])


# ---------------------------------------------------------------------------
# Recommendations (declarative rule engine)
# ---------------------------------------------------------------------------

def generate_recommendations(
    f: FeatureVector,
    layer3: PredictiveLayer,
    predicted_rank: int,
    cfg: RankcastConfig,
) -> List[str]:
    """
    Evaluate the configured rules in order and keep the first four matches.

    Rule metrics resolve against the predicted rank, the stage-3 projected
    score, and any FeatureVector field.
    """
    metrics = {
        "predicted_rank": predicted_rank,
        "projected_score": layer3.projected_score,
    }

    messages: List[str] = []
    for rule in cfg.recommendation_rules:
        value = metrics[rule.metric] if rule.metric in metrics else getattr(f, rule.metric)
        if _OPS[rule.op](value, rule.threshold):
            messages.append(rule.message)

    return messages[: cfg.max_recommendations]


# ---------------------------------------------------------------------------
# Risk level
# ---------------------------------------------------------------------------

def assess_risk(predicted_rank: int, confidence: float, cfg: RankcastConfig) -> str:
    """
    low    — rank <= 15,000 and confidence > 0.8
    medium — rank <= 50,000 and confidence > 0.6
    high   — everything else
    """
    r = cfg.risk
    if predicted_rank <= r.low_rank and confidence > r.low_confidence:
        return "low"
    if predicted_rank <= r.medium_rank and confidence > r.medium_confidence:
        return "medium"
    return "high"


# ---------------------------------------------------------------------------
# Comprehensive data
# ---------------------------------------------------------------------------

def comprehensive_data(
    f: FeatureVector,
    layer3: PredictiveLayer,
    output: OutputLayer,
    factors: Mapping[str, int],
    cfg: RankcastConfig,
) -> Dict[str, object]:
    """Supporting detail for dashboards. study_streak and risk_factors are placeholders."""
    ph = cfg.placeholders
    scenario = layer3.scenario
    return {
        "totalQuestionsLifetime": f.total_questions,
        "consistencyScore": round(f.consistency, 3),
        "averageTestScore": round(f.avg_test_score, 3),
        "studyStreak": ph.study_streak,
        "chaptersCompleted": f.chapters_completed,
        "totalChapters": f.total_chapters,
        "projectedScore": round(output.final_score, 3),
        "growthRate": round(scenario.spread, 3),
        "peakPerformanceIndicator": f.peak_performance,
        "cycleDay": f.cycle_day,
        "cyclePhase": f.cycle_phase.value,
        "aiInsights": {
            "strongestFactor": strongest_factor(factors),
            "weakestFactor": weakest_factor(factors),
            "improvementPotential": round(scenario.optimistic - output.final_score, 3),
            "riskFactors": list(ph.risk_factors),
        },
    }


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------

def fallback_prediction(cfg: RankcastConfig) -> PredictionResult:
    """Fixed neutral result used when history cannot be fetched or scored."""
    fb = cfg.fallback
    return PredictionResult(
        predicted_rank=fb.predicted_rank,
        confidence=fb.confidence,
        factors=dict(fb.factors),
        recommendations=tuple(fb.recommendations),
        risk_level=fb.risk_level,
        is_fallback=True,
    )
