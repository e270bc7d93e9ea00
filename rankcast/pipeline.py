"""
Pipeline orchestration: load → extract → layers 1-4 → rank → advise → report.

This is the only module with I/O (history loading, report formatting).
All analytical logic is delegated to features, layers, ranking, advisor,
and schedule.

Failure boundary: any error while fetching or scoring history is logged
and converted to the fixed fallback prediction. Callers never see an
exception from the predict_* entry points.
"""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Dict, List, Set, Union

import pandas as pd

from rankcast.advisor import (
    assess_risk,
    comprehensive_data,
    factor_scores,
    fallback_prediction,
    generate_recommendations,
)
from rankcast.config import RankcastConfig
from rankcast.features import extract_features
from rankcast.layers import output_layer, pattern_layer, predictive_layer, trend_layer
from rankcast.models import (
    CycleRecord,
    DayForecast,
    HistorySnapshot,
    PredictionResult,
    Schedule,
    SessionRecord,
    StudyRecord,
    SubjectProgress,
    TestRecord,
)
from rankcast.ranking import map_score_to_rank
from rankcast.schedule import default_schedule, forecast_energy, generate_schedule

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# History loading
# ---------------------------------------------------------------------------

REQUIRED_FIELDS: Dict[str, Set[str]] = {
    "study": {"date", "totalQuestions"},
    "tests": {"date", "score"},
    "cycles": {"cycleStartDate", "cycleLength", "periodLength"},
    "sessions": {"startTime", "endTime"},
    "subjects": {"name", "chaptersTotal", "chaptersCompleted"},
}


def _frame(data: Dict, key: str) -> pd.DataFrame:
    """Validate one collection of the payload and load it as a DataFrame."""
    rows = data.get(key) or []
    if not isinstance(rows, list):
        raise ValueError(f"'{key}' must be a list of records")

    df = pd.DataFrame(rows)
    if df.empty:
        return df

    missing = REQUIRED_FIELDS[key] - set(df.columns)
    if missing:
        raise ValueError(f"Missing required {key} fields: {sorted(missing)}")
    return df


def _optional(row: pd.Series, column: str, default=None):
    value = row.get(column, default)
    if value is None:
        return default
    if not isinstance(value, (list, tuple, dict)) and pd.isna(value):
        return default
    return value


def parse_history(data: Dict) -> HistorySnapshot:
    """Build a HistorySnapshot from a JSON-shaped payload (camelCase keys)."""
    if not isinstance(data, dict):
        raise ValueError("History payload must be an object")

    study_df = _frame(data, "study")
    tests_df = _frame(data, "tests")
    cycles_df = _frame(data, "cycles")
    sessions_df = _frame(data, "sessions")
    subjects_df = _frame(data, "subjects")

    study = tuple(
        StudyRecord(
            date=pd.to_datetime(row["date"]).date(),
            total=int(_optional(row, "totalQuestions", 0)),
            subject_counts=dict(_optional(row, "subjectCounts", {})),
        )
        for _, row in study_df.iterrows()
    )
    tests = tuple(
        TestRecord(
            date=pd.to_datetime(row["date"]).date(),
            score=float(row["score"]),
            test_type=str(_optional(row, "testType", "")),
        )
        for _, row in tests_df.iterrows()
    )
    cycles = tuple(
        CycleRecord(
            cycle_start_date=pd.to_datetime(row["cycleStartDate"]).date(),
            cycle_length=int(row["cycleLength"]),
            period_length=int(row["periodLength"]),
            energy_level=_optional(row, "energyLevel"),
            study_capacity=_optional(row, "studyCapacity"),
            symptoms=tuple(_optional(row, "symptoms", ())),
        )
        for _, row in cycles_df.iterrows()
    )
    sessions = tuple(
        SessionRecord(
            start_time=pd.to_datetime(row["startTime"]).to_pydatetime(),
            end_time=pd.to_datetime(row["endTime"]).to_pydatetime(),
            focus_score=float(_optional(row, "focusScore", 0.0)),
        )
        for _, row in sessions_df.iterrows()
    )
    subjects = tuple(
        SubjectProgress(
            name=str(row["name"]),
            chapters_total=int(row["chaptersTotal"]),
            chapters_completed=int(row["chaptersCompleted"]),
        )
        for _, row in subjects_df.iterrows()
    )

    return HistorySnapshot(
        study=study, tests=tests, cycles=cycles,
        sessions=sessions, subjects=subjects,
    )


def load_history(filepath: Union[str, Path]) -> HistorySnapshot:
    """Load and validate a history payload from a JSON file."""
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"History file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    return parse_history(data)


# ---------------------------------------------------------------------------
# Core prediction (pure, no file I/O)
# ---------------------------------------------------------------------------

def predict_history(
    history: HistorySnapshot,
    cfg: RankcastConfig | None = None,
    now: datetime | None = None,
) -> PredictionResult:
    """
    Run the full pipeline on an in-memory snapshot.

    Stateless. Deterministic for a fixed `now`. An entirely empty history
    yields the fallback result.
    """
    if cfg is None:
        cfg = RankcastConfig()
    if now is None:
        now = datetime.now()

    if history.is_empty():
        logger.info("No history on file; returning fallback prediction")
        return fallback_prediction(cfg)

    # Stage 0: Features
    features = extract_features(history, now, cfg)

    # Stages 1-4: Layered scorer
    layer1 = pattern_layer(features, cfg)
    layer2 = trend_layer(layer1, features, cfg)
    layer3 = predictive_layer(layer2, features, cfg)
    output = output_layer(layer3, features, cfg)

    logger.debug(
        "projected=%.2f final=%.2f confidence=%.3f",
        layer3.projected_score, output.final_score, output.confidence,
    )

    # Rank + guidance
    predicted_rank = map_score_to_rank(
        output.final_score, layer3.scenario, cfg.ranking, cfg.projection.max_score
    )
    factors = factor_scores(features, cfg)

    return PredictionResult(
        predicted_rank=predicted_rank,
        confidence=round(output.confidence, 4),
        factors=factors,
        recommendations=tuple(
            generate_recommendations(features, layer3, predicted_rank, cfg)
        ),
        risk_level=assess_risk(predicted_rank, output.confidence, cfg),
        comprehensive_data=comprehensive_data(features, layer3, output, factors, cfg),
    )


# ---------------------------------------------------------------------------
# Public Entry Points
# ---------------------------------------------------------------------------

def predict_from_source(
    fetch: Callable[[], HistorySnapshot],
    cfg: RankcastConfig | None = None,
    now: datetime | None = None,
) -> PredictionResult:
    """
    Fetch history through `fetch` and predict.

    Any exception from the fetch or the pipeline is logged and replaced by
    the fallback result.
    """
    if cfg is None:
        cfg = RankcastConfig()

    try:
        history = fetch()
        return predict_history(history, cfg, now)
    except Exception:
        logger.exception("Prediction failed; returning fallback prediction")
        return fallback_prediction(cfg)


def predict(
    filepath: Union[str, Path],
    cfg: RankcastConfig | None = None,
    now: datetime | None = None,
) -> PredictionResult:
    """CLI-compatible entry point. Reads a JSON history file."""
    return predict_from_source(lambda: load_history(filepath), cfg, now)


def predict_data(
    data: Dict,
    cfg: RankcastConfig | None = None,
    now: datetime | None = None,
) -> PredictionResult:
    """
    Backend / UI integration entry point.

    Accepts the JSON-shaped history payload directly.
    """
    return predict_from_source(lambda: parse_history(data), cfg, now)


def _cycle_from_request(request: Dict) -> CycleRecord:
    return CycleRecord(
        cycle_start_date=pd.to_datetime(request["cycleStartDate"]).date(),
        cycle_length=int(request["cycleLength"]),
        period_length=int(request["periodLength"]),
    )


def schedule_request(
    request: Dict,
    cfg: RankcastConfig | None = None,
) -> Schedule:
    """
    Schedule for {cycleStartDate, cycleLength, periodLength, targetDate}.

    A malformed request is logged and answered with the default schedule.
    """
    if cfg is None:
        cfg = RankcastConfig()

    try:
        target = pd.to_datetime(request["targetDate"]).date()
    except Exception:
        logger.exception("Invalid schedule target date; using today")
        target = date.today()

    try:
        cycle = _cycle_from_request(request)
    except Exception:
        logger.exception("Invalid cycle parameters; returning default schedule")
        return default_schedule(target, cfg)

    return generate_schedule(cycle, target, cfg)


def schedule_for_history(
    history: HistorySnapshot,
    target_date: date,
    cfg: RankcastConfig | None = None,
) -> Schedule:
    """Schedule for `target_date` from the latest cycle in the history."""
    if cfg is None:
        cfg = RankcastConfig()
    return generate_schedule(history.latest_cycle(), target_date, cfg)


def forecast_request(
    request: Dict,
    start_date: date,
    days: int | None = None,
    cfg: RankcastConfig | None = None,
) -> List[DayForecast]:
    """
    Energy / mood / focus for `days` days from `start_date`.

    A malformed request is logged and answered with an empty forecast.
    """
    if cfg is None:
        cfg = RankcastConfig()

    try:
        cycle = _cycle_from_request(request)
    except Exception:
        logger.exception("Invalid cycle parameters; returning empty forecast")
        return []

    return forecast_energy(cycle, start_date, cfg, days)


# ---------------------------------------------------------------------------
# Report generation
# ---------------------------------------------------------------------------

def generate_report(result: PredictionResult) -> str:
    """Format a prediction as a human-readable text report."""
    lines = [
        "RANKCAST PREDICTION REPORT",
        "=" * 58,
        "",
        f"  Predicted Rank      : {result.predicted_rank:,}",
        f"  Confidence          : {result.confidence:.2f}",
        f"  Risk Level          : {result.risk_level.upper()}",
    ]

    if result.is_fallback:
        lines.append("  Source              : fallback (insufficient data)")

    lines.append("")
    lines.append("  Factors:")
    for name, value in result.factors.items():
        lines.append(f"    {name:18s} : {value:3d} / 100")

    data = result.comprehensive_data
    if data:
        insights = data["aiInsights"]
        lines.append("")
        lines.append(f"  Projected Score     : {data['projectedScore']}")
        lines.append(f"  Scenario Spread     : {data['growthRate']}")
        lines.append(f"  Cycle Phase         : {data['cyclePhase']} (day {data['cycleDay']})")
        lines.append(f"  Strongest Factor    : {insights['strongestFactor']}")
        lines.append(f"  Weakest Factor      : {insights['weakestFactor']}")

    if result.recommendations:
        lines.append("")
        lines.append("  Recommendations:")
        for rec in result.recommendations:
            lines.append(f"    - {rec}")

    lines.append("")
    lines.append("=" * 58)
    return "\n".join(lines)


def generate_schedule_report(schedule: Schedule) -> str:
    """Format a study schedule as a human-readable text report."""
    lines = [
        "RANKCAST STUDY SCHEDULE",
        "=" * 58,
        "",
        f"  Date                : {schedule.date.isoformat()}",
        f"  Cycle Phase         : {schedule.phase.value} (day {schedule.cycle_day})",
        f"  Energy Level        : {schedule.energy_level}",
        f"  Difficulty Focus    : {schedule.difficulty_focus}",
        f"  Total Study Hours   : {schedule.total_study_hours:g}",
        "",
        "  Blocks:",
    ]

    for b in schedule.study_blocks:
        lines.append(
            f"    {b.start_time:>5s}-{b.end_time:<5s}  {b.subject:10s} "
            f"{b.intensity:8s} {b.block_type}"
        )

    if schedule.mock_test_slot:
        lines.append("")
        lines.append(f"  Mock Test Slot      : {schedule.mock_test_slot:%H:%M}")

    lines.append("")
    lines.append("=" * 58)
    return "\n".join(lines)
