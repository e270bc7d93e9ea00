"""Recommendations, risk, factor breakdown, and the fallback result."""

from dataclasses import replace

import pytest

from rankcast.advisor import (
    assess_risk,
    comprehensive_data,
    factor_scores,
    fallback_prediction,
    generate_recommendations,
    strongest_factor,
    weakest_factor,
)
from rankcast.config import RecommendationRule
from rankcast.features import extract_features
from rankcast.layers import (
    PredictiveLayer,
    Scenario,
    output_layer,
    pattern_layer,
    predictive_layer,
    trend_layer,
)
from rankcast.models import FACTOR_NAMES, FeatureVector


def _layer3(projected=500.0):
    return PredictiveLayer(
        projected_score=projected,
        confidence_interval=0.5,
        scenario=Scenario(projected - 30, projected, projected + 50),
        adaptive_factor=71.0,
    )


# -- Recommendations -------------------------------------------------------------

def test_recommendations_follow_rule_order(cfg):
    f = FeatureVector(consistency=40, avg_test_score=450, syllabus_completion=50)
    recs = generate_recommendations(f, _layer3(), 80000, cfg)

    assert len(recs) == 4
    assert recs[0].startswith("🚨 CRITICAL")
    assert recs[1].startswith("⚡ CONSISTENCY")
    assert recs[2].startswith("📈 SCORE BOOST")
    assert recs[3].startswith("📚 SYLLABUS")


def test_recommendations_capped_at_four(cfg):
    # Extra always-true rules push the match count past the cap
    rules = cfg.recommendation_rules + (
        RecommendationRule("momentum", "gt", -1, "extra one"),
        RecommendationRule("momentum", "gt", -1, "extra two"),
    )
    f = FeatureVector(consistency=0, avg_test_score=0, syllabus_completion=0)
    recs = generate_recommendations(f, _layer3(), 900000, replace(cfg, recommendation_rules=rules))
    assert len(recs) == 4


def test_recommendations_excellence_track(cfg):
    f = FeatureVector(consistency=85, avg_test_score=660, syllabus_completion=95)
    recs = generate_recommendations(f, _layer3(projected=680), 4000, cfg)
    assert recs == [cfg.recommendation_rules[5].message]


def test_recommendations_burnout_rule(cfg):
    f = FeatureVector(consistency=85, avg_test_score=600, syllabus_completion=95,
                      burnout_risk=80)
    recs = generate_recommendations(f, _layer3(), 20000, cfg)
    assert len(recs) == 1
    assert recs[0].startswith("🛡️ BURNOUT")


def test_no_recommendations_for_mid_profile(cfg):
    f = FeatureVector(consistency=70, avg_test_score=550, syllabus_completion=80)
    assert generate_recommendations(f, _layer3(600), 30000, cfg) == []


def test_rule_boundaries_are_strict(cfg):
    f = FeatureVector(consistency=60, avg_test_score=500, syllabus_completion=70)
    assert generate_recommendations(f, _layer3(650), 50000, cfg) == []


# -- Risk -----------------------------------------------------------------------

@pytest.mark.parametrize("rank, confidence, expected", [
    (10000, 0.9, "low"),
    (15000, 0.81, "low"),
    (10000, 0.8, "medium"),
    (40000, 0.7, "medium"),
    (50000, 0.61, "medium"),
    (50001, 0.9, "high"),
    (10000, 0.6, "high"),
    (950000, 0.02, "high"),
])
def test_assess_risk(cfg, rank, confidence, expected):
    assert assess_risk(rank, confidence, cfg) == expected


# -- Factors ----------------------------------------------------------------------

def test_factor_scores_minimal(minimal_history, now, cfg):
    f = extract_features(minimal_history, now, cfg)
    assert factor_scores(f, cfg) == {
        "progressScore": 75,
        "testTrend": 67,
        "consistency": 0,
        "biologicalFactor": 40,
        "externalFactor": 4,
    }


def test_factor_scores_are_clipped_integers(cfg):
    f = FeatureVector(syllabus_completion=140, avg_test_score=800, consistency=-5,
                      avg_mood=10, avg_sleep=12, energy_level=10, urgency_factor=1.5)
    factors = factor_scores(f, cfg)
    assert tuple(factors) == FACTOR_NAMES
    assert all(isinstance(v, int) and 0 <= v <= 100 for v in factors.values())
    assert factors["progressScore"] == 100
    assert factors["externalFactor"] == 0


def test_factor_rounding_is_half_up(cfg):
    f = FeatureVector(syllabus_completion=62.5, consistency=0.5)
    factors = factor_scores(f, cfg)
    assert factors["progressScore"] == 63
    assert factors["consistency"] == 1


def test_strongest_and_weakest(cfg):
    factors = {"progressScore": 75, "testTrend": 67, "consistency": 0,
               "biologicalFactor": 40, "externalFactor": 4}
    assert strongest_factor(factors) == "progressScore"
    assert weakest_factor(factors) == "consistency"


def test_factor_ties_resolve_to_last():
    factors = {"progressScore": 50, "testTrend": 50, "consistency": 10,
               "biologicalFactor": 10, "externalFactor": 50}
    assert strongest_factor(factors) == "externalFactor"
    assert weakest_factor(factors) == "biologicalFactor"


# -- Comprehensive data ----------------------------------------------------------

def test_comprehensive_data_sample(sample_history, now, cfg):
    f = extract_features(sample_history, now, cfg)
    l1 = pattern_layer(f, cfg)
    l3 = predictive_layer(trend_layer(l1, f, cfg), f, cfg)
    out = output_layer(l3, f, cfg)
    factors = factor_scores(f, cfg)

    data = comprehensive_data(f, l3, out, factors, cfg)

    assert data["totalQuestionsLifetime"] == 3180
    assert data["chaptersCompleted"] == 94
    assert data["totalChapters"] == 134
    assert data["studyStreak"] == 15
    assert data["growthRate"] == pytest.approx(80.0)
    assert data["cycleDay"] == 9
    assert data["cyclePhase"] == "follicular"
    assert data["aiInsights"]["riskFactors"] == ["Time pressure", "Consistency gaps"]
    assert data["aiInsights"]["improvementPotential"] == pytest.approx(
        l3.scenario.optimistic - out.final_score, abs=1e-3
    )


# -- Fallback -------------------------------------------------------------------

def test_fallback_prediction(cfg):
    result = fallback_prediction(cfg)
    assert result.is_fallback
    assert result.predicted_rank == 950000
    assert result.confidence == 0.02
    assert result.risk_level == "high"
    assert dict(result.factors) == {
        "progressScore": 2, "testTrend": 2, "consistency": 2,
        "biologicalFactor": 50, "externalFactor": 50,
    }
    assert len(result.recommendations) == 3
    assert result.comprehensive_data is None
