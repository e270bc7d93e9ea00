"""
Feature extraction: transforms raw history into a fixed-schema FeatureVector.

History collections are loaded into DataFrames ordered newest-first, so
every windowed statistic reads from the head of a frame. All functions are
pure transforms. Empty inputs resolve to documented defaults, never NaN.
"""

from datetime import date, datetime, time
from typing import Dict

import numpy as np
import pandas as pd

from rankcast.config import FeatureParams, RankcastConfig
from rankcast.models import CyclePhase, FeatureVector, HistorySnapshot
from rankcast.phase import phase_on


# ---------------------------------------------------------------------------
# Frames
# ---------------------------------------------------------------------------

def build_frames(history: HistorySnapshot) -> Dict[str, pd.DataFrame]:
    """Load each history collection into a newest-first DataFrame."""
    study = pd.DataFrame(
        [{"date": pd.Timestamp(r.date), "total": r.total} for r in history.study],
        columns=["date", "total"],
    )
    tests = pd.DataFrame(
        [{"date": pd.Timestamp(r.date), "score": r.score} for r in history.tests],
        columns=["date", "score"],
    )
    cycles = pd.DataFrame(
        [
            {
                "cycle_start_date": pd.Timestamp(r.cycle_start_date),
                "energy_level": r.energy_level,
                "study_capacity": r.study_capacity,
            }
            for r in history.cycles
        ],
        columns=["cycle_start_date", "energy_level", "study_capacity"],
    )
    sessions = pd.DataFrame(
        [
            {
                "start_time": pd.Timestamp(r.start_time),
                "end_time": pd.Timestamp(r.end_time),
                "focus_score": r.focus_score,
            }
            for r in history.sessions
        ],
        columns=["start_time", "end_time", "focus_score"],
    )

    # Stable sort keeps entry order for same-day records
    frames = {
        "study": study.sort_values("date", ascending=False, kind="mergesort"),
        "tests": tests.sort_values("date", ascending=False, kind="mergesort"),
        "cycles": cycles.sort_values(
            "cycle_start_date", ascending=False, kind="mergesort"
        ),
        "sessions": sessions.sort_values(
            "start_time", ascending=False, kind="mergesort"
        ),
    }
    for df in frames.values():
        df.reset_index(drop=True, inplace=True)

    frames["study"]["total"] = frames["study"]["total"].astype(np.float64)
    frames["tests"]["score"] = frames["tests"]["score"].astype(np.float64)
    return frames


# ---------------------------------------------------------------------------
# Statistical primitives
# ---------------------------------------------------------------------------

def population_std(values: np.ndarray) -> float:
    """Population standard deviation (ddof=0); 0.0 for fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=0))


def _window_mean(series: pd.Series, start: int, stop: int) -> float:
    """Mean of series[start:stop]; 0.0 for an empty window."""
    window = series.iloc[start:stop]
    if window.empty:
        return 0.0
    return float(window.sum() / len(window))


def _percent_change(recent: float, older: float) -> float:
    if older > 0:
        return (recent - older) / older * 100
    return 0.0


# ---------------------------------------------------------------------------
# Academic features
# ---------------------------------------------------------------------------

def compute_test_trend(scores: pd.Series, fp: FeatureParams) -> float:
    """Newest score minus the oldest score within the trend window."""
    recent = scores.head(fp.trend_window)
    if len(recent) < 2:
        return 0.0
    return float(recent.iloc[0] - recent.iloc[-1])


def compute_score_improvement(scores: pd.Series) -> float:
    """Non-negative gain from the oldest to the newest test."""
    if len(scores) < 2:
        return 0.0
    return float(max(0.0, scores.iloc[0] - scores.iloc[-1]))


def compute_syllabus_completion(completed: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return completed / total * 100


# ---------------------------------------------------------------------------
# Behavioral features
# ---------------------------------------------------------------------------

def compute_consistency(totals: pd.Series, fp: FeatureParams) -> float:
    """
    Daily study consistency score.

        max(0, active_ratio * 60 + min(avg / 300, 1) * 30 - std / 50 * 10)

    active_ratio is the share of recorded days with at least one question.
    """
    if totals.empty:
        return 0.0

    active_ratio = float((totals > 0).sum()) / len(totals)
    avg_questions = float(totals.sum()) / len(totals)
    variability = population_std(totals.values)

    raw = (
        active_ratio * fp.consistency_active_weight
        + min(avg_questions / fp.consistency_volume_target, 1.0)
        * fp.consistency_volume_weight
        - variability / fp.consistency_volatility_norm
        * fp.consistency_volatility_weight
    )
    return max(0.0, raw)


def compute_momentum(totals: pd.Series, scores: pd.Series, fp: FeatureParams) -> float:
    """
    50 + mean of the goal and test percentage deltas, clamped to [0, 100].

    Goal momentum compares the latest 7 days against the 7 before them;
    test momentum compares the latest 3 tests against the 3 before them.
    """
    gw = fp.goal_window
    goal_momentum = _percent_change(
        _window_mean(totals, 0, gw), _window_mean(totals, gw, 2 * gw)
    )

    tw = fp.test_window
    test_momentum = _percent_change(
        _window_mean(scores, 0, tw), _window_mean(scores, tw, 2 * tw)
    )

    return float(np.clip(50 + (goal_momentum + test_momentum) / 2, 0, 100))


def compute_velocity(totals: pd.Series, fp: FeatureParams) -> float:
    """Average daily questions over the latest full window; 0 without one."""
    w = fp.velocity_window
    if len(totals) < w:
        return 0.0
    return float(totals.head(w).sum() / w)


def compute_study_hours(sessions: pd.DataFrame) -> float:
    if sessions.empty:
        return 0.0
    durations = (sessions["end_time"] - sessions["start_time"]).dt.total_seconds()
    return float(durations.fillna(0.0).sum() / 3600)


# ---------------------------------------------------------------------------
# Biological features
# ---------------------------------------------------------------------------

def compute_mood_and_sleep(cycles: pd.DataFrame, fp: FeatureParams) -> tuple:
    """
    Average mood and sleep proxies from cycle records.

    Missing or zero readings count as the neutral default for that record;
    no records at all yields the defaults themselves.
    """
    if cycles.empty:
        return fp.default_mood, fp.default_sleep
    mood = (
        cycles["energy_level"].astype(np.float64).replace(0, np.nan).fillna(fp.default_mood)
    )
    sleep = (
        cycles["study_capacity"].astype(np.float64).replace(0, np.nan).fillna(fp.default_sleep)
    )
    return float(mood.mean()), float(sleep.mean())


def compute_energy_level(cycles: pd.DataFrame) -> float:
    energy = cycles["energy_level"].astype(np.float64).fillna(0.0)
    return float(energy.sum() / max(1, len(cycles)))


# ---------------------------------------------------------------------------
# Temporal features
# ---------------------------------------------------------------------------

def compute_time_remaining(exam_date: date, now: datetime) -> int:
    """Whole days until the exam, rounded up."""
    exam_start = datetime.combine(exam_date, time.min)
    if not isinstance(now, datetime):
        now = datetime.combine(now, time.min)
    if now.tzinfo is not None:
        now = now.replace(tzinfo=None)
    return int(np.ceil((exam_start - now).total_seconds() / 86400))


def compute_urgency(time_remaining: int, fp: FeatureParams) -> float:
    return max(0.0, 1 - time_remaining / fp.urgency_horizon_days)


# ---------------------------------------------------------------------------
# Feature vector assembly
# ---------------------------------------------------------------------------

def extract_features(
    history: HistorySnapshot,
    now: datetime,
    cfg: RankcastConfig,
) -> FeatureVector:
    """Compute every feature in one pass over the history snapshot."""
    fp = cfg.features
    ph = cfg.placeholders

    frames = build_frames(history)
    totals = frames["study"]["total"]
    scores = frames["tests"]["score"]
    cycles = frames["cycles"]
    sessions = frames["sessions"]

    # -- Academic --------------------------------------------------------------

    total_questions = float(totals.sum())
    chapters_completed = sum(s.chapters_completed for s in history.subjects)
    total_chapters = sum(s.chapters_total for s in history.subjects)
    avg_test_score = float(scores.mean()) if not scores.empty else 0.0

    # -- Behavioral ------------------------------------------------------------

    efficiency = (
        avg_test_score / total_questions * 1000 if total_questions > 0 else 0.0
    )
    focus_score = float(sessions["focus_score"].fillna(0.0).sum()) / max(
        1, len(sessions)
    )

    # -- Biological ------------------------------------------------------------

    avg_mood, avg_sleep = compute_mood_and_sleep(cycles, fp)

    latest = history.latest_cycle()
    if latest is not None:
        cycle_day, cycle_phase = phase_on(
            latest.cycle_start_date, latest.cycle_length,
            latest.period_length, now,
        )
    else:
        cycle_day, cycle_phase = 0, CyclePhase.UNDETERMINED

    # -- Temporal --------------------------------------------------------------

    time_remaining = compute_time_remaining(cfg.exam_date, now)

    # -- Meta ------------------------------------------------------------------

    record_count = len(history.subjects) + len(totals) + len(scores)
    data_quality = min(1.0, record_count / fp.data_quality_saturation)
    learning_rate = (
        min(100.0, float(scores.sum()) / total_questions * 10)
        if total_questions > 0 else 0.0
    )

    return FeatureVector(
        total_questions=total_questions,
        chapters_completed=chapters_completed,
        total_chapters=total_chapters,
        avg_test_score=avg_test_score,
        test_trend=compute_test_trend(scores, fp),
        test_volatility=population_std(scores.values),
        syllabus_completion=compute_syllabus_completion(
            chapters_completed, total_chapters
        ),
        question_velocity=compute_velocity(totals, fp),
        test_frequency=len(scores),
        score_improvement=compute_score_improvement(scores),
        subject_balance=ph.subject_balance,
        weakness_index=ph.weakness_index,
        study_hours=compute_study_hours(sessions),
        consistency=compute_consistency(totals, fp),
        momentum=compute_momentum(totals, scores, fp),
        efficiency=efficiency,
        focus_score=focus_score,
        procrastination=ph.procrastination,
        adaptability=ph.adaptability,
        resilience=ph.resilience,
        avg_mood=avg_mood,
        avg_sleep=avg_sleep,
        energy_level=compute_energy_level(cycles),
        stress_level=ph.stress_level,
        cycle_impact=ph.cycle_impact,
        recovery_rate=ph.recovery_rate,
        health_optimization=ph.health_optimization,
        cycle_day=cycle_day,
        cycle_phase=cycle_phase,
        time_remaining=time_remaining,
        urgency_factor=compute_urgency(time_remaining, fp),
        seasonality=ph.seasonality,
        weekday_performance=ph.weekday_performance,
        time_of_day_optimal=ph.time_of_day_optimal,
        burnout_risk=ph.burnout_risk,
        data_quality=data_quality,
        learning_rate=learning_rate,
        retention_rate=ph.retention_rate,
        error_pattern=ph.error_pattern,
        strength_index=ph.strength_index,
        motivation_level=ph.motivation_level,
        discipline_score=ph.discipline_score,
        strategic_thinking=ph.strategic_thinking,
        time_management=ph.time_management,
        pressure_handling=ph.pressure_handling,
        goal_alignment=ph.goal_alignment,
        progress_acceleration=ph.progress_acceleration,
        competitive_edge=ph.competitive_edge,
        peak_performance=ph.peak_performance,
    )
