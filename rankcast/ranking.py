"""
Rank mapping: projected score (0-720) → competitive rank (1-1,000,000).

A piecewise-linear table, steep near the top of the score range and
flattening toward the bottom, followed by a scenario-spread adjustment.
"""

import numpy as np

from rankcast.config import RankParams
from rankcast.layers import Scenario


def base_rank(score: float, rp: RankParams, max_score: float = 720.0) -> float:
    """
    Unadjusted rank for a score clipped to [0, max_score], rounded half-up.

    Bands are scanned top-down; the first band whose floor the score reaches
    applies. The top band is capped at the next band's anchor value so the
    curve stays continuous and non-increasing at the shared boundary.
    """
    s = float(np.clip(score, 0.0, max_score))
    bands = rp.bands

    for i, band in enumerate(bands):
        if s >= band.floor:
            rank = band.base + (band.anchor - s) * band.slope
            if i == 0 and len(bands) > 1:
                rank = min(rank, bands[1].base)
            return float(np.floor(rank + 0.5))

    # Unreachable: the last band is open-ended
    raise ValueError(f"No rank band for score {score}")


def optimism_factor(scenario: Scenario) -> float:
    """(optimistic - pessimistic) / realistic; 0 when realistic <= 0."""
    if scenario.realistic <= 0:
        return 0.0
    return scenario.spread / scenario.realistic


def map_score_to_rank(
    score: float,
    scenario: Scenario,
    rp: RankParams,
    max_score: float = 720.0,
) -> int:
    """
    Final rank: base rank reduced by a share of the scenario spread.

        rank -= rank * optimism_factor * 0.1

    Rounded half-up to the nearest integer and clamped to [1, 1,000,000].
    """
    rank = base_rank(score, rp, max_score)
    rank -= rank * optimism_factor(scenario) * rp.scenario_weight
    return int(np.clip(np.floor(rank + 0.5), rp.min_rank, rp.max_rank))
