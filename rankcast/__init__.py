"""
RANKCAST v1.0 — Deterministic Exam Rank Forecasting Engine

Turns a student's study, test, cycle, and session history into a projected
competitive rank with confidence, risk level, and recommendations, and
builds phase-aware study schedules from the same cycle data.

Architecture:
    config      — All thresholds, weights, tables, and placeholders (single source of truth)
    models      — Input records, feature vector, and result objects
    phase       — Cycle phase determination and cycle-day arithmetic
    features    — Feature extraction (history → FeatureVector)
    layers      — Four-stage layered scorer (pattern → trend → predictive → output)
    ranking     — Piecewise score → rank mapping with scenario adjustment
    advisor     — Recommendations, risk level, factor breakdown, fallback
    schedule    — Phase-based study blocks and energy / mood / focus forecasts
    pipeline    — Orchestration: load → extract → score → rank → advise → report

Core engine is fully stateless and safe for backend/API usage.

Public API:
    predict(filepath)            → CLI mode
    predict_data(data)           → UI / backend mode
    predict_from_source(fetch)   → custom data-access layer
    schedule_request(request)    → study schedule for one day
    forecast_request(request, d) → energy / mood / focus forecast
    generate_report(result)      → formatted report
"""

from rankcast.pipeline import (
    forecast_request,
    generate_report,
    generate_schedule_report,
    predict,
    predict_data,
    predict_from_source,
    predict_history,
    schedule_for_history,
    schedule_request,
)

__version__ = "1.0.0"

__all__ = [
    "predict",
    "predict_data",
    "predict_from_source",
    "predict_history",
    "schedule_request",
    "schedule_for_history",
    "forecast_request",
    "generate_report",
    "generate_schedule_report",
]
