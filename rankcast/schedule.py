"""
Phase-based schedule optimizer and energy / mood / focus forecasts.

Reuses the phase determinator: the latest cycle record fixes the phase of
any calendar day, and the phase selects a study-day template and a set of
level curves. All functions are pure.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple

import numpy as np

from rankcast.config import LevelCurve, RankcastConfig
from rankcast.models import (
    CyclePhase,
    CycleRecord,
    DayForecast,
    Schedule,
    ScheduleBlock,
    StudyTechnique,
)
from rankcast.phase import phase_on


# ---------------------------------------------------------------------------
# Study blocks
# ---------------------------------------------------------------------------

def format_clock(minutes: float) -> str:
    """Minutes after midnight → 'H:MM'."""
    total = int(round(minutes))
    return f"{total // 60}:{total % 60:02d}"


def generate_study_blocks(phase: CyclePhase, cfg: RankcastConfig) -> Tuple[ScheduleBlock, ...]:
    """
    Lay out the phase template from the day start.

    The template's hours are split evenly across its subjects, with a fixed
    break between consecutive blocks. UNDETERMINED yields no blocks.
    """
    sp = cfg.schedule
    template = sp.templates.get(phase.value)
    if template is None:
        return ()

    duration = template.total_hours * 60 / len(template.subjects)
    cursor = sp.day_start_hour * 60

    blocks = []
    for subject in template.subjects:
        blocks.append(ScheduleBlock(
            start_time=format_clock(cursor),
            end_time=format_clock(cursor + duration),
            subject=subject,
            topic=f"{subject} - {phase.value} phase focus",
            intensity=template.intensity,
            block_type=template.block_type,
            duration_minutes=duration,
        ))
        cursor += duration + sp.break_minutes

    return tuple(blocks)


def difficulty_focus(phase: CyclePhase, cfg: RankcastConfig) -> str:
    template = cfg.schedule.templates.get(phase.value)
    return template.intensity if template else cfg.schedule.default_intensity


# ---------------------------------------------------------------------------
# Level curves
# ---------------------------------------------------------------------------

def _curve_level(curve: LevelCurve, cycle_day: int) -> float:
    level = curve.base + curve.slope * (cycle_day - curve.anchor_day)
    return round(float(np.clip(level, curve.floor, curve.ceiling)), 2)


def _predict_level(
    curves: Dict[str, LevelCurve],
    phase: CyclePhase,
    cycle_day: int,
    cfg: RankcastConfig,
) -> float:
    curve = curves.get(phase.value)
    if curve is None:
        return cfg.schedule.neutral_level
    return _curve_level(curve, cycle_day)


def predict_energy_level(phase: CyclePhase, cycle_day: int, cfg: RankcastConfig) -> float:
    return _predict_level(cfg.schedule.energy_curves, phase, cycle_day, cfg)


def predict_mood_level(phase: CyclePhase, cycle_day: int, cfg: RankcastConfig) -> float:
    return _predict_level(cfg.schedule.mood_curves, phase, cycle_day, cfg)


def predict_focus_level(phase: CyclePhase, cycle_day: int, cfg: RankcastConfig) -> float:
    return _predict_level(cfg.schedule.focus_curves, phase, cycle_day, cfg)


def prediction_confidence(phase: CyclePhase, cfg: RankcastConfig) -> float:
    return cfg.schedule.forecast_confidence.get(phase.value, 0.0)


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------

def default_schedule(
    target_date: date,
    cfg: RankcastConfig,
    phase: Optional[CyclePhase] = None,
) -> Schedule:
    """Generic study day used when no usable cycle data is on file."""
    sp = cfg.schedule
    start = sp.day_start_hour * 60
    block = ScheduleBlock(
        start_time=format_clock(start),
        end_time=format_clock(start + 120),
        subject="Physics",
        topic="General Study",
        intensity=sp.default_intensity,
        block_type="lecture",
        duration_minutes=120.0,
    )
    return Schedule(
        date=target_date,
        phase=phase or CyclePhase(sp.default_phase),
        cycle_day=0,
        energy_level=sp.default_energy,
        study_blocks=(block,),
        difficulty_focus=sp.default_intensity,
        total_study_hours=sp.default_total_hours,
    )


def generate_schedule(
    cycle: Optional[CycleRecord],
    target_date: date,
    cfg: RankcastConfig,
) -> Schedule:
    """
    Build the study day for `target_date` from the latest cycle record.

    Ovulation days also get a mock-test slot in the morning.
    """
    if cycle is None:
        return default_schedule(target_date, cfg)

    cycle_day, phase = phase_on(
        cycle.cycle_start_date, cycle.cycle_length, cycle.period_length, target_date
    )
    if phase == CyclePhase.UNDETERMINED:
        return default_schedule(target_date, cfg, phase=phase)

    blocks = generate_study_blocks(phase, cfg)
    mock_test_slot = None
    if phase == CyclePhase.OVULATION:
        mock_test_slot = datetime.combine(target_date, time(cfg.schedule.mock_test_hour))

    return Schedule(
        date=target_date,
        phase=phase,
        cycle_day=cycle_day,
        energy_level=predict_energy_level(phase, cycle_day, cfg),
        study_blocks=blocks,
        difficulty_focus=difficulty_focus(phase, cfg),
        total_study_hours=sum(b.duration_minutes for b in blocks) / 60,
        mock_test_slot=mock_test_slot,
    )


def forecast_energy(
    cycle: Optional[CycleRecord],
    start_date: date,
    cfg: RankcastConfig,
    days: Optional[int] = None,
) -> List[DayForecast]:
    """Energy, mood, and focus for `days` consecutive days from `start_date`."""
    if cycle is None:
        return []
    if days is None:
        days = cfg.schedule.forecast_days

    forecasts = []
    for offset in range(days):
        day = start_date + timedelta(days=offset)
        cycle_day, phase = phase_on(
            cycle.cycle_start_date, cycle.cycle_length, cycle.period_length, day
        )
        forecasts.append(DayForecast(
            date=day,
            predicted_energy=predict_energy_level(phase, cycle_day, cfg),
            predicted_mood=predict_mood_level(phase, cycle_day, cfg),
            predicted_focus=predict_focus_level(phase, cycle_day, cfg),
            cycle_day=cycle_day,
            cycle_phase=phase,
            confidence=prediction_confidence(phase, cfg),
        ))
    return forecasts


# ---------------------------------------------------------------------------
# Study techniques
# ---------------------------------------------------------------------------

def _t(technique: str, description: str, minutes: int, difficulty: str) -> StudyTechnique:
    return StudyTechnique(technique, description, minutes, difficulty)


STUDY_TECHNIQUES: Dict[str, Dict[str, Tuple[StudyTechnique, ...]]] = {
    "menstrual": {
        "Physics": (
            _t("Formula Review", "Review and memorize key formulas", 30, "light"),
            _t("Previous Year MCQs", "Solve easy to moderate PYQs", 45, "light"),
        ),
        "Chemistry": (
            _t("Reaction Revision", "Review organic reactions", 30, "light"),
            _t("Periodic Table Practice", "Memorize trends and properties", 20, "light"),
        ),
        "Botany": (
            _t("Diagram Practice", "Draw and label plant structures", 40, "light"),
            _t("Classification Review", "Revise taxonomic classifications", 30, "light"),
        ),
        "Zoology": (
            _t("System Review", "Review body systems", 35, "light"),
            _t("Life Cycle Diagrams", "Practice drawing life cycles", 25, "light"),
        ),
    },
    "follicular": {
        "Physics": (
            _t("New Concept Learning", "Tackle new physics concepts", 90, "intense"),
            _t("Problem Solving", "Solve complex numerical problems", 120, "intense"),
        ),
        "Chemistry": (
            _t("Mechanism Learning", "Learn new reaction mechanisms", 75, "intense"),
            _t("Concept Building", "Build strong conceptual foundation", 90, "intense"),
        ),
        "Botany": (
            _t("New Chapter Study", "Start new botany chapters", 80, "moderate"),
            _t("Detailed Notes", "Make comprehensive notes", 60, "moderate"),
        ),
        "Zoology": (
            _t("System Study", "Deep dive into body systems", 85, "moderate"),
            _t("Comparative Study", "Compare different organisms", 70, "moderate"),
        ),
    },
    "ovulation": {
        "Physics": (
            _t("Mock Test Marathon", "Take full-length physics tests", 180, "intense"),
            _t("Toughest Problems", "Solve most challenging numericals", 150, "intense"),
        ),
        "Chemistry": (
            _t("Full Mock Tests", "Complete chemistry mock tests", 180, "intense"),
            _t("Speed Problem Solving", "Rapid-fire problem solving", 120, "intense"),
        ),
        "Botany": (
            _t("Comprehensive Tests", "Full botany mock tests", 120, "intense"),
            _t("Memory Palace", "Create memory palaces for facts", 90, "intense"),
        ),
        "Zoology": (
            _t("Full Section Tests", "Complete zoology sections", 120, "intense"),
            _t("Rapid Recall", "Speed-based fact recall", 60, "intense"),
        ),
    },
    "luteal": {
        "Physics": (
            _t("Formula Consolidation", "Organize and practice formulas", 60, "moderate"),
            _t("Error Analysis", "Analyze and correct mistakes", 45, "moderate"),
        ),
        "Chemistry": (
            _t("Reaction Summary", "Summarize all reactions", 70, "moderate"),
            _t("Concept Mapping", "Create concept maps", 50, "moderate"),
        ),
        "Botany": (
            _t("Flashcard Review", "Review using flashcards", 40, "moderate"),
            _t("Quick Revision", "Rapid chapter revision", 55, "moderate"),
        ),
        "Zoology": (
            _t("System Integration", "Integrate system knowledge", 65, "moderate"),
            _t("Fact Compilation", "Compile important facts", 45, "moderate"),
        ),
    },
}


def study_techniques(phase: CyclePhase, subject: str) -> Tuple[StudyTechnique, ...]:
    """Techniques suited to `subject` during `phase`; empty when none are listed."""
    return STUDY_TECHNIQUES.get(phase.value, {}).get(subject, ())
