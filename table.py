"""
Pool table geometry, ball records and placement acceptance tests.

All coordinates are playing-surface inches: x runs along the long axis
from the head rail (x=0) to the foot rail (x=TABLE_LENGTH), y across the
short axis from 0 to TABLE_WIDTH.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

# ──────────────────────────────────────────────
# Constants (inches)
# ──────────────────────────────────────────────
TABLE_LENGTH: float = 100.0  # long axis
TABLE_WIDTH: float = 50.0  # short axis
BALL_DIAMETER: float = 2.25
BALL_RADIUS: float = BALL_DIAMETER / 2
ROW_SPACING: float = BALL_DIAMETER * math.sqrt(3) / 2  # triangle packing row pitch

HEAD_STRING_X: float = TABLE_LENGTH * 0.25
FOOT_RAIL_OFFSET: float = 22.0  # foot spot distance from the foot rail
FOOT_SPOT_X: float = TABLE_LENGTH - FOOT_RAIL_OFFSET
CENTER_Y: float = TABLE_WIDTH / 2

POCKET_RADIUS: float = 2.25
POCKET_CLEARANCE: float = POCKET_RADIUS + BALL_RADIUS  # ball edge stays outside the pocket circle
EDGE_CLEARANCE: float = BALL_RADIUS + 0.25  # close to the rail, never on it
SEPARATION_EPSILON: float = 0.02  # tight racks allowed, overlap never

# Corners + side midpoints
POCKETS: np.ndarray = np.array([
    [0.0, 0.0],
    [TABLE_LENGTH / 2, 0.0],
    [TABLE_LENGTH, 0.0],
    [0.0, TABLE_WIDTH],
    [TABLE_LENGTH / 2, TABLE_WIDTH],
    [TABLE_LENGTH, TABLE_WIDTH],
])

# ──────────────────────────────────────────────
# Ball numbering
# ──────────────────────────────────────────────
CUE_NUMBER: int = 0
EIGHT_BALL: int = 8
SOLIDS: Tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7)
STRIPES: Tuple[int, ...] = (9, 10, 11, 12, 13, 14, 15)

BALL_COLORS = {
    0: "#ffffff",
    1: "#f1c40f", 2: "#2980b9", 3: "#e74c3c", 4: "#8e44ad", 5: "#e67e22",
    6: "#27ae60", 7: "#8e2a2a", 8: "#111111",
    9: "#f1c40f", 10: "#2980b9", 11: "#e74c3c", 12: "#8e44ad", 13: "#e67e22",
    14: "#27ae60", 15: "#8e2a2a",
}


def ball_group(number: int) -> str:
    """8-ball group of a ball number: cue, solid, eight or stripe."""
    if number == CUE_NUMBER:
        return "cue"
    if number in SOLIDS:
        return "solid"
    if number == EIGHT_BALL:
        return "eight"
    if number in STRIPES:
        return "stripe"
    raise ValueError(f"ball number out of range 0-15: {number}")


def is_stripe(number: int) -> bool:
    return ball_group(number) == "stripe"


@dataclass(frozen=True)
class Ball:
    """One ball on the table surface."""
    number: int
    x: float
    y: float

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y])

    @property
    def is_cue(self) -> bool:
        return self.number == CUE_NUMBER

    @property
    def color(self) -> str:
        return BALL_COLORS[self.number]

    @property
    def striped(self) -> bool:
        return is_stripe(self.number)

    def distance_to(self, x: float, y: float) -> float:
        return math.hypot(self.x - x, self.y - y)

    def moved_to(self, x: float, y: float) -> "Ball":
        return Ball(self.number, x, y)

    def to_dict(self) -> dict:
        return {"number": self.number, "x": self.x, "y": self.y}


# ──────────────────────────────────────────────
# Acceptance tests
# ──────────────────────────────────────────────

def is_in_any_pocket(x: float, y: float) -> bool:
    """True when a ball centred at (x, y) would reach into a pocket circle."""
    d = np.hypot(POCKETS[:, 0] - x, POCKETS[:, 1] - y)
    return bool(np.any(d < POCKET_CLEARANCE))


def is_non_overlapping(x: float, y: float, placed: Sequence[Ball]) -> bool:
    """Pocket-free and at least one diameter (+ epsilon) from every placed ball."""
    if is_in_any_pocket(x, y):
        return False
    if not placed:
        return True
    xs = np.fromiter((b.x for b in placed), dtype=float, count=len(placed))
    ys = np.fromiter((b.y for b in placed), dtype=float, count=len(placed))
    d = np.hypot(xs - x, ys - y)
    return bool(np.all(d >= BALL_DIAMETER + SEPARATION_EPSILON))


def within_rails(x: float, y: float, clearance: float = EDGE_CLEARANCE) -> bool:
    return (clearance <= x <= TABLE_LENGTH - clearance and
            clearance <= y <= TABLE_WIDTH - clearance)


def min_pair_distance(balls: Iterable[Ball]) -> float:
    """Smallest centre-to-centre distance in a ball set (inf for < 2 balls)."""
    pts = np.array([[b.x, b.y] for b in balls], dtype=float)
    if len(pts) < 2:
        return math.inf
    diff = pts[:, None, :] - pts[None, :, :]
    d = np.hypot(diff[..., 0], diff[..., 1])
    np.fill_diagonal(d, np.inf)
    return float(d.min())


def geometry_dict() -> dict:
    """Table constants for a renderer."""
    return {
        "length": TABLE_LENGTH,
        "width": TABLE_WIDTH,
        "ball_radius": BALL_RADIUS,
        "pocket_radius": POCKET_RADIUS,
        "pockets": POCKETS.tolist(),
        "head_string_x": HEAD_STRING_X,
        "foot_spot": [FOOT_SPOT_X, CENTER_Y],
    }
