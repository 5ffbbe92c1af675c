"""
Scatter placement engine + cue placement.

Rejection sampling with bounded retries. Each accepted position is
pocket-free and at least one ball diameter from every ball placed before
it. When the retry budget runs out a fixed fallback point is used and
the returned ``Placement`` is flagged, so callers can tell nominal from
degraded layouts.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from rng import Mulberry32
from table import (
    Ball, CUE_NUMBER, TABLE_LENGTH, TABLE_WIDTH, BALL_RADIUS,
    EDGE_CLEARANCE, HEAD_STRING_X, CENTER_Y, is_non_overlapping,
)

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────
# Retry budgets
# ──────────────────────────────────────────────
SCATTER_ATTEMPTS: int = 600
CUE_ATTEMPTS: int = 400
CUE_KITCHEN_ATTEMPTS: int = 400

# ──────────────────────────────────────────────
# Break zones
# ──────────────────────────────────────────────
FOOT_ZONE_WEIGHT: float = 0.50
CENTRAL_ZONE_WEIGHT: float = 0.35  # remainder (0.15) samples the whole table
FOOT_ZONE_START_X: float = TABLE_LENGTH * 0.55
CENTRAL_INSET_X: float = 4.0
CENTRAL_INSET_Y: float = 3.0
CUE_OVERSHOOT: float = 8.0  # cue may drift this far past the head string

SCATTER_FALLBACK: Tuple[float, float] = (
    min(max(TABLE_LENGTH * 0.5, BALL_RADIUS + 0.3), TABLE_LENGTH - BALL_RADIUS - 0.3),
    min(max(TABLE_WIDTH * 0.5, BALL_RADIUS + 0.3), TABLE_WIDTH - BALL_RADIUS - 0.3),
)
CUE_FALLBACK: Tuple[float, float] = (HEAD_STRING_X * 0.8, CENTER_Y)

Sampler = Callable[[Mulberry32], Tuple[float, float]]


@dataclass(frozen=True)
class Placement:
    """Outcome of placing one ball.

    ``phase`` is ``"scatter"``, ``"drift"`` or ``"kitchen"`` for an accepted
    sample and ``"fallback"`` when every attempt was rejected.
    """
    ball: Ball
    attempts: int
    phase: str

    @property
    def fallback(self) -> bool:
        return self.phase == "fallback"


def sample_until_clear(rng: Mulberry32, sampler: Sampler, placed: Sequence[Ball],
                       max_attempts: int) -> Tuple[Optional[Tuple[float, float]], int]:
    """Draw up to ``max_attempts`` candidates; return the first accepted one."""
    for attempt in range(1, max_attempts + 1):
        x, y = sampler(rng)
        if is_non_overlapping(x, y, placed):
            return (x, y), attempt
    return None, max_attempts


# ──────────────────────────────────────────────
# Object-ball scatter
# ──────────────────────────────────────────────

def random_position_after_break(rng: Mulberry32) -> Tuple[float, float]:
    """One candidate from the three-tier break zone distribution."""
    r = rng.random()
    if r < FOOT_ZONE_WEIGHT:
        # foot half, full width
        x = rng.rand_float(max(EDGE_CLEARANCE, FOOT_ZONE_START_X), TABLE_LENGTH - EDGE_CLEARANCE)
        y = rng.rand_float(EDGE_CLEARANCE, TABLE_WIDTH - EDGE_CLEARANCE)
    elif r < FOOT_ZONE_WEIGHT + CENTRAL_ZONE_WEIGHT:
        # central zone
        x = rng.rand_float(EDGE_CLEARANCE + CENTRAL_INSET_X,
                           TABLE_LENGTH - EDGE_CLEARANCE - CENTRAL_INSET_X)
        y = rng.rand_float(EDGE_CLEARANCE + CENTRAL_INSET_Y,
                           TABLE_WIDTH - EDGE_CLEARANCE - CENTRAL_INSET_Y)
    else:
        # anywhere with rail clearance
        x = rng.rand_float(EDGE_CLEARANCE, TABLE_LENGTH - EDGE_CLEARANCE)
        y = rng.rand_float(EDGE_CLEARANCE, TABLE_WIDTH - EDGE_CLEARANCE)
    return x, y


def scatter_after_break(rng: Mulberry32, racked: Sequence[Ball],
                        obstacles: Sequence[Ball] = (),
                        max_attempts: int = SCATTER_ATTEMPTS) -> List[Placement]:
    """Move every racked ball to a post-break position, lowest number first.

    ``obstacles`` are balls already on the table (a kept cue ball) that
    scattered balls must also clear.
    """
    placed: List[Ball] = list(obstacles)
    results: List[Placement] = []
    for ball in sorted(racked, key=lambda b: b.number):
        pos, attempts = sample_until_clear(rng, random_position_after_break, placed, max_attempts)
        if pos is None:
            logger.warning("ball %d: no clear spot after %d attempts, using fallback %s",
                           ball.number, attempts, SCATTER_FALLBACK)
            placement = Placement(ball.moved_to(*SCATTER_FALLBACK), attempts, "fallback")
        else:
            placement = Placement(ball.moved_to(*pos), attempts, "scatter")
        placed.append(placement.ball)
        results.append(placement)
    return results


# ──────────────────────────────────────────────
# Cue ball
# ──────────────────────────────────────────────

def _drift_sample(rng: Mulberry32) -> Tuple[float, float]:
    x = rng.rand_float(EDGE_CLEARANCE, max(EDGE_CLEARANCE, HEAD_STRING_X + CUE_OVERSHOOT))
    y = rng.rand_float(EDGE_CLEARANCE, TABLE_WIDTH - EDGE_CLEARANCE)
    return x, y


def _kitchen_sample(rng: Mulberry32) -> Tuple[float, float]:
    x = rng.rand_float(EDGE_CLEARANCE, HEAD_STRING_X - EDGE_CLEARANCE)
    y = rng.rand_float(EDGE_CLEARANCE, TABLE_WIDTH - EDGE_CLEARANCE)
    return x, y


def place_cue_after_break(rng: Mulberry32, balls: Sequence[Ball],
                          max_attempts: int = CUE_ATTEMPTS,
                          kitchen_attempts: int = CUE_KITCHEN_ATTEMPTS) -> Placement:
    """Cue ball in the head half, drifting slightly past the head string.

    Falls back to a kitchen-only search, then to a fixed point near the
    head string.
    """
    pos, drift_tries = sample_until_clear(rng, _drift_sample, balls, max_attempts)
    if pos is not None:
        return Placement(Ball(CUE_NUMBER, *pos), drift_tries, "drift")

    pos, kitchen_tries = sample_until_clear(rng, _kitchen_sample, balls, kitchen_attempts)
    if pos is not None:
        return Placement(Ball(CUE_NUMBER, *pos), drift_tries + kitchen_tries, "kitchen")

    logger.warning("cue ball: no clear spot after %d attempts, using fallback %s",
                   drift_tries + kitchen_tries, CUE_FALLBACK)
    return Placement(Ball(CUE_NUMBER, *CUE_FALLBACK), drift_tries + kitchen_tries, "fallback")
