"""
Cycle phase determination and cycle-day arithmetic.

Pure functions shared by the feature extractor and the schedule optimizer.

Phase boundaries use absolute day thresholds (13, 16) that do not scale
with cycle length. For cycles far from 28 days the ovulation window is
misplaced; the literal rule is kept for compatibility with existing data.
"""

from datetime import date, datetime
from typing import Tuple, Union

from rankcast.models import CyclePhase


FOLLICULAR_LAST_DAY = 13
OVULATION_LAST_DAY = 16


def determine_phase(cycle_day: int, period_length: int, cycle_length: int) -> CyclePhase:
    """
    Map a 1-based cycle day to its phase.

        day <= period_length -> menstrual
        day <= 13            -> follicular
        day <= 16            -> ovulation
        otherwise            -> luteal

    A non-positive cycle length yields UNDETERMINED.
    """
    if cycle_length <= 0:
        return CyclePhase.UNDETERMINED
    if cycle_day <= period_length:
        return CyclePhase.MENSTRUAL
    if cycle_day <= FOLLICULAR_LAST_DAY:
        return CyclePhase.FOLLICULAR
    if cycle_day <= OVULATION_LAST_DAY:
        return CyclePhase.OVULATION
    return CyclePhase.LUTEAL


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def cycle_day_for(
    cycle_start: Union[date, datetime],
    cycle_length: int,
    on_date: Union[date, datetime],
) -> int:
    """1-based day within the cycle on `on_date`; 0 when cycle_length <= 0."""
    if cycle_length <= 0:
        return 0
    days_since_start = (_as_date(on_date) - _as_date(cycle_start)).days
    return (days_since_start % cycle_length) + 1


def phase_on(
    cycle_start: Union[date, datetime],
    cycle_length: int,
    period_length: int,
    on_date: Union[date, datetime],
) -> Tuple[int, CyclePhase]:
    """Return (cycle_day, phase) for a calendar date."""
    day = cycle_day_for(cycle_start, cycle_length, on_date)
    return day, determine_phase(day, period_length, cycle_length)


def assess_cycle_health(cycle_length: int, period_length: int) -> str:
    """Classify cycle regularity: excellent, good, irregular, or concerning."""
    if 21 <= cycle_length <= 35 and 3 <= period_length <= 7:
        if 26 <= cycle_length <= 30 and 4 <= period_length <= 6:
            return "excellent"
        return "good"
    if cycle_length < 21 or cycle_length > 35 or period_length < 2 or period_length > 8:
        return "concerning"
    return "irregular"
