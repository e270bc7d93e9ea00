"""Rankcast v1.0 — Standalone test suite (no pytest dependency)."""
import sys
import traceback
from datetime import date, datetime
from pathlib import Path

import numpy as np
import pandas as pd

sys.path.insert(0, str(Path(__file__).parent))

from rankcast.config import RankcastConfig, PatternWeights, RankParams, RankBand
from rankcast.models import CyclePhase, CycleRecord, HistorySnapshot, SubjectProgress, TestRecord
from rankcast.phase import determine_phase, cycle_day_for
from rankcast.features import extract_features, compute_consistency, compute_momentum
from rankcast.layers import Scenario
from rankcast.ranking import base_rank, map_score_to_rank
from rankcast.advisor import assess_risk, factor_scores, fallback_prediction
from rankcast.schedule import generate_schedule, forecast_energy
from rankcast.pipeline import (
    load_history, predict, predict_history, predict_from_source,
    schedule_request, generate_report, generate_schedule_report,
)

CFG = RankcastConfig()
TEST_DATA = Path(__file__).parent / "test_data.json"
NOW = datetime(2026, 4, 15, 9, 0)

passed = 0
failed = 0


def test(name, fn):
    global passed, failed
    try:
        fn()
        print(f"  ✓ {name}")
        passed += 1
    except Exception as e:
        print(f"  ✗ {name}: {e}")
        traceback.print_exc()
        failed += 1


def approx(a, b, tol=0.01):
    assert abs(a - b) < tol, f"{a} != {b} (tol={tol})"


def minimal_history():
    return HistorySnapshot(
        tests=(TestRecord(date=date(2026, 4, 10), score=480.0),),
        subjects=(SubjectProgress("Physics", chapters_total=4, chapters_completed=3),),
    )


STANDARD_CYCLE = CycleRecord(cycle_start_date=date(2026, 4, 1), cycle_length=28, period_length=5)


# ═══════════════════════════════════════════════════════════════════════
# CONFIG
# ═══════════════════════════════════════════════════════════════════════
print("\n[Config]")

def t_bad_weights():
    try:
        PatternWeights(academic_test=0.9)
        raise RuntimeError("Should have raised ValueError")
    except ValueError:
        pass
test("invalid pattern weights raises ValueError", t_bad_weights)

def t_bad_bands():
    try:
        RankParams(bands=(RankBand(floor=0.0, anchor=720.0, base=1.0, slope=1.0),))
        raise RuntimeError("Should have raised ValueError")
    except ValueError:
        pass
test("closed-ended rank table raises ValueError", t_bad_bands)


# ═══════════════════════════════════════════════════════════════════════
# PHASE
# ═══════════════════════════════════════════════════════════════════════
print("\n[Phase]")

def t_phases():
    assert determine_phase(1, 5, 28) == CyclePhase.MENSTRUAL
    assert determine_phase(13, 5, 28) == CyclePhase.FOLLICULAR
    assert determine_phase(14, 5, 28) == CyclePhase.OVULATION
    assert determine_phase(17, 5, 28) == CyclePhase.LUTEAL
test("phase boundaries at period / 13 / 16", t_phases)

def t_undetermined():
    assert determine_phase(3, 5, 0) == CyclePhase.UNDETERMINED
    assert cycle_day_for(date(2026, 4, 1), 0, date(2026, 4, 5)) == 0
test("non-positive cycle length is undetermined", t_undetermined)

def t_wrap():
    assert cycle_day_for(date(2026, 4, 1), 28, date(2026, 4, 29)) == 1
test("cycle day wraps after cycle length", t_wrap)


# ═══════════════════════════════════════════════════════════════════════
# FEATURES
# ═══════════════════════════════════════════════════════════════════════
print("\n[Features]")

def t_consistency():
    approx(compute_consistency(pd.Series([300.0] * 5), CFG.features), 90.0, 1e-9)
    approx(compute_consistency(pd.Series([], dtype=float), CFG.features), 0.0, 1e-9)
test("consistency saturates at 90, empty is 0", t_consistency)

def t_momentum():
    totals = pd.Series([150.0] * 7 + [100.0] * 7)
    scores = pd.Series([600.0, 600.0, 600.0, 500.0, 500.0, 500.0])
    approx(compute_momentum(totals, scores, CFG.features), 85.0, 1e-9)
test("momentum = 50 + mean of goal/test deltas", t_momentum)

def t_empty_features():
    f = extract_features(HistorySnapshot(), NOW, CFG)
    for name, value in f.as_dict().items():
        if isinstance(value, float):
            assert not np.isnan(value), name
    assert f.momentum == 50.0
test("empty history yields defaults, no NaN", t_empty_features)

def t_sample_features():
    f = extract_features(load_history(TEST_DATA), NOW, CFG)
    assert f.total_questions == 3180
    approx(f.test_trend, 80.0, 1e-9)
    approx(f.momentum, 72.28)
    assert f.cycle_day == 9
    assert f.time_remaining == 18
test("parity: sample history features", t_sample_features)


# ═══════════════════════════════════════════════════════════════════════
# RANKING
# ═══════════════════════════════════════════════════════════════════════
print("\n[Ranking]")

def t_rank_edges():
    approx(base_rank(715, CFG.ranking), 50, 1e-9)
    approx(base_rank(400, CFG.ranking), 700000, 1e-6)
test("base rank at band edges", t_rank_edges)

def t_rank_monotonic():
    ranks = np.array([base_rank(s, CFG.ranking) for s in np.linspace(0, 720, 7201)])
    assert np.all(np.diff(ranks) <= 0)
test("rank is non-increasing in score", t_rank_monotonic)

def t_rank_scenarios():
    assert map_score_to_rank(720, Scenario(700, 720, 740), CFG.ranking) == 1
    assert map_score_to_rank(400, Scenario(370, 400, 450), CFG.ranking) == 686000
    assert map_score_to_rank(0, Scenario(0, 0, 0), CFG.ranking) == 1_000_000
test("rank adjusted by scenario spread and clamped", t_rank_scenarios)


# ═══════════════════════════════════════════════════════════════════════
# ADVISOR
# ═══════════════════════════════════════════════════════════════════════
print("\n[Advisor]")

def t_risk():
    assert assess_risk(10000, 0.9, CFG) == "low"
    assert assess_risk(40000, 0.7, CFG) == "medium"
    assert assess_risk(10000, 0.5, CFG) == "high"
test("risk classification", t_risk)

def t_factors():
    f = extract_features(minimal_history(), NOW, CFG)
    assert factor_scores(f, CFG)["testTrend"] == 67
test("factor scores rounded to integers", t_factors)

def t_fallback():
    result = fallback_prediction(CFG)
    assert result.predicted_rank == 950000
    assert result.is_fallback
test("fallback prediction", t_fallback)


# ═══════════════════════════════════════════════════════════════════════
# SCHEDULE
# ═══════════════════════════════════════════════════════════════════════
print("\n[Schedule]")

def t_ovulation_schedule():
    s = generate_schedule(STANDARD_CYCLE, date(2026, 4, 14), CFG)
    assert s.phase == CyclePhase.OVULATION
    assert len(s.study_blocks) == 4
    assert s.mock_test_slot == datetime(2026, 4, 14, 10, 0)
test("ovulation day has mock-test slot", t_ovulation_schedule)

def t_default_schedule():
    s = generate_schedule(None, date(2026, 4, 14), CFG)
    assert s.phase == CyclePhase.FOLLICULAR
    assert s.total_study_hours == 6
test("missing cycle gives default schedule", t_default_schedule)

def t_forecast():
    days = forecast_energy(STANDARD_CYCLE, date(2026, 4, 12), CFG)
    assert [d.cycle_day for d in days] == [12, 13, 14, 15, 16, 17, 18]
    assert days[2].predicted_energy == 10
test("seven-day energy forecast", t_forecast)


# ═══════════════════════════════════════════════════════════════════════
# PIPELINE
# ═══════════════════════════════════════════════════════════════════════
print("\n[Pipeline]")

def t_minimal_prediction():
    result = predict_history(minimal_history(), CFG, NOW)
    assert result.predicted_rank == 170532
    approx(result.confidence, 0.0168, 1e-9)
    assert result.risk_level == "high"
test("parity: minimal history rank 170532", t_minimal_prediction)

def t_idempotent():
    a = predict(TEST_DATA, CFG, NOW).to_dict()
    b = predict(TEST_DATA, CFG, NOW).to_dict()
    assert a == b
test("prediction is idempotent", t_idempotent)

def t_fetch_failure():
    def broken():
        raise ConnectionError("store unavailable")
    assert predict_from_source(broken, CFG, NOW).is_fallback
test("fetch failure returns fallback", t_fetch_failure)

def t_missing_file():
    assert predict("nonexistent.json", CFG, NOW).is_fallback
test("missing file returns fallback", t_missing_file)

def t_reports():
    report = generate_report(predict(TEST_DATA, CFG, NOW))
    assert "RANKCAST PREDICTION REPORT" in report
    schedule = schedule_request({
        "cycleStartDate": "2026-04-01", "cycleLength": 28,
        "periodLength": 5, "targetDate": "2026-04-14",
    })
    assert "Mock Test Slot" in generate_schedule_report(schedule)
test("prediction and schedule reports", t_reports)


# ═══════════════════════════════════════════════════════════════════════
# SUMMARY
# ═══════════════════════════════════════════════════════════════════════
print(f"\n{'=' * 58}")
print(f"  {passed} passed, {failed} failed")
print(f"{'=' * 58}")
sys.exit(1 if failed else 0)
