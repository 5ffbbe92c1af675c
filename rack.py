"""
Rack layout generator — 8-ball triangle and 9-ball diamond.

Slots are built apex-first from the foot spot toward the head rail, rows
centred on the table's long centreline. Numbers are then assigned under
the game's racking rules; the returned balls follow slot order.
"""

import logging
from dataclasses import dataclass
from typing import List, MutableSequence, Optional, Sequence

from rng import Mulberry32
from table import (
    Ball, BALL_DIAMETER, ROW_SPACING, FOOT_SPOT_X, CENTER_Y,
    EIGHT_BALL, SOLIDS, STRIPES,
)

logger = logging.getLogger(__name__)

MODES = ("8", "9")

TRIANGLE_ROWS = (1, 2, 3, 4, 5)
DIAMOND_ROWS = (1, 2, 3, 2, 1)


@dataclass(frozen=True)
class RackSlot:
    row: int
    col: int
    x: float
    y: float


def build_slots(row_counts: Sequence[int]) -> List[RackSlot]:
    slots = []
    for row, count in enumerate(row_counts):
        x = FOOT_SPOT_X - row * ROW_SPACING
        y_start = CENTER_Y - (count - 1) * BALL_DIAMETER / 2
        for col in range(count):
            slots.append(RackSlot(row, col, x, y_start + col * BALL_DIAMETER))
    return slots


def triangle_slots() -> List[RackSlot]:
    return build_slots(TRIANGLE_ROWS)


def diamond_slots() -> List[RackSlot]:
    return build_slots(DIAMOND_ROWS)


def slot_index(slots: Sequence[RackSlot], row: int, col: int) -> int:
    for idx, slot in enumerate(slots):
        if slot.row == row and slot.col == col:
            return idx
    raise KeyError(f"no rack slot at row={row} col={col}")


def shuffle(rng: Mulberry32, items: MutableSequence) -> MutableSequence:
    """In-place Fisher–Yates, one draw per swap."""
    for i in range(len(items) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        items[i], items[j] = items[j], items[i]
    return items


def _fill(slots: Sequence[RackSlot], fixed: dict, rest: List[int]) -> List[Ball]:
    """Place fixed numbers, then pop the shuffled rest into the open slots in order."""
    balls = []
    for idx, slot in enumerate(slots):
        number = fixed[idx] if idx in fixed else rest.pop()
        balls.append(Ball(number, slot.x, slot.y))
    return balls


def rack_8(rng: Mulberry32) -> List[Ball]:
    """Triangle rack: 8 in the centre, one solid and one stripe on the back corners."""
    slots = triangle_slots()
    centre = slot_index(slots, 2, 1)
    back_left = slot_index(slots, 4, 0)
    back_right = slot_index(slots, 4, 4)

    solids = list(SOLIDS)
    stripes = list(STRIPES)

    def pick(group: List[int]) -> int:
        return group.pop(rng.rand_int(0, len(group) - 1))

    fixed = {centre: EIGHT_BALL}
    stripe_left = rng.random() < 0.5
    if stripe_left:
        fixed[back_left] = pick(stripes)
        fixed[back_right] = pick(solids)
    else:
        fixed[back_left] = pick(solids)
        fixed[back_right] = pick(stripes)

    rest = shuffle(rng, solids + stripes)
    return _fill(slots, fixed, rest)


def rack_9(rng: Mulberry32) -> List[Ball]:
    """Diamond rack: 1 on the apex (foot spot), 9 in the centre."""
    slots = diamond_slots()
    fixed = {
        slot_index(slots, 0, 0): 1,
        slot_index(slots, 2, 1): 9,
    }
    rest = shuffle(rng, [2, 3, 4, 5, 6, 7, 8])
    return _fill(slots, fixed, rest)


def check_mode(mode) -> str:
    mode = str(mode).strip()
    if mode not in MODES:
        raise ValueError(f"unknown game mode {mode!r}; expected one of {MODES}")
    return mode


def rack_for_mode(mode: str, rng: Mulberry32) -> List[Ball]:
    mode = check_mode(mode)
    balls = rack_8(rng) if mode == "8" else rack_9(rng)
    logger.debug("racked %d balls for %s-ball", len(balls), mode)
    return balls


def slots_for_mode(mode: str) -> List[RackSlot]:
    return triangle_slots() if check_mode(mode) == "8" else diamond_slots()


def number_at(balls: Sequence[Ball], slots: Sequence[RackSlot],
              row: int, col: int) -> Optional[int]:
    """Ball number racked at (row, col); ``balls`` must be in slot order."""
    idx = slot_index(slots, row, col)
    return balls[idx].number if idx < len(balls) else None
