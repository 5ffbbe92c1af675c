"""
Scenario pipeline — rack → scatter → cue → target → break suggestion.

``build_scenario`` is the single entry point used by the controller, the
HTTP server and the CLI. One PRNG is seeded per build and threaded
through every stage in a fixed order, so ``(mode, seed)`` fully
determines the result.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import parse_qs, urlencode, urlsplit

from placement import place_cue_after_break, scatter_after_break
from rack import MODES, check_mode, rack_for_mode
from rng import MASK32, Mulberry32, SeedLike, normalize_seed, parse_seed, rng_for
from table import Ball, CUE_NUMBER, EIGHT_BALL

logger = logging.getLogger(__name__)

MPH_TO_MPS: float = 0.44704
BREAK_SPEED_MPH = (18, 27)


@dataclass(frozen=True)
class SpinOption:
    label: str
    dx: float
    dy: float


# Tip offsets favour top or slight side for a break
SPIN_OPTIONS: Tuple[SpinOption, ...] = (
    SpinOption("Top", 0.0, -1.0),
    SpinOption("Top-Right", 0.5, -0.8),
    SpinOption("Top-Left", -0.5, -0.8),
    SpinOption("Center", 0.0, 0.0),
    SpinOption("Right", 0.4, 0.0),
    SpinOption("Left", -0.4, 0.0),
    SpinOption("Bottom (rare)", 0.0, 0.6),
)


@dataclass(frozen=True)
class BreakSuggestion:
    speed_mph: int
    speed_mps: float
    spin: SpinOption

    def to_dict(self) -> dict:
        return {
            "speed_mph": self.speed_mph,
            "speed_mps": self.speed_mps,
            "spin": {"label": self.spin.label, "dx": self.spin.dx, "dy": self.spin.dy},
        }


def suggest_break(rng: Mulberry32) -> BreakSuggestion:
    mph = rng.rand_int(*BREAK_SPEED_MPH)
    spin = SPIN_OPTIONS[rng.rand_int(0, len(SPIN_OPTIONS) - 1)]
    return BreakSuggestion(mph, round(mph * MPH_TO_MPS, 1), spin)


@dataclass(frozen=True)
class Scenario:
    """A complete generated table state."""
    mode: str
    seed: int
    balls: Tuple[Ball, ...]  # object balls, ascending number
    cue: Ball
    target: Ball
    suggestion: BreakSuggestion
    fallback_numbers: Tuple[int, ...] = field(default=())
    partial: bool = False  # rack or cue kept from an earlier seed

    @property
    def all_balls(self) -> List[Ball]:
        return [self.cue, *self.balls]

    @property
    def aim_point(self) -> Tuple[float, float]:
        return self.target.x, self.target.y

    @property
    def degraded(self) -> bool:
        """True when any ball sits on a fallback point instead of a sampled one."""
        return bool(self.fallback_numbers)

    def ball(self, number: int) -> Ball:
        for b in self.all_balls:
            if b.number == number:
                return b
        raise KeyError(number)

    @property
    def shareable(self) -> bool:
        """Only full builds are reproduced by their (mode, seed) pair."""
        return not self.partial

    def to_params(self) -> Dict[str, str]:
        if self.partial:
            raise ValueError("layout keeps balls from an earlier seed; mode + seed cannot rebuild it")
        return {"mode": self.mode, "seed": str(self.seed & MASK32)}

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "seed": self.seed,
            "balls": [b.to_dict() for b in self.balls],
            "cue": self.cue.to_dict(),
            "target": self.target.number,
            "aim_point": list(self.aim_point),
            "suggestion": self.suggestion.to_dict(),
            "degraded": self.degraded,
            "fallback_numbers": list(self.fallback_numbers),
            "partial": self.partial,
            "share": share_query(self),
        }


# ──────────────────────────────────────────────
# Target selection
# ──────────────────────────────────────────────

def pick_next_target(mode: str, balls: Sequence[Ball], cue: Ball) -> Ball:
    """Suggested first object ball.

    9-ball: the lowest number on the table. 8-ball: groups are still open,
    so the nearest non-8 ball to the cue (the 8 only when it is alone).
    """
    objects = [b for b in balls if b.number != CUE_NUMBER]
    if not objects:
        raise ValueError("no object balls to target")

    if check_mode(mode) == "9":
        return min(objects, key=lambda b: b.number)

    candidates = [b for b in objects if b.number != EIGHT_BALL]
    if not candidates:
        return objects[0]
    # min() keeps the first of equal distances
    return min(candidates, key=lambda b: b.distance_to(cue.x, cue.y))


# ──────────────────────────────────────────────
# Build
# ──────────────────────────────────────────────

def build_scenario(mode: str = "8", seed: SeedLike = None, keep_rack: bool = False,
                   keep_cue: bool = False, previous: Optional[Scenario] = None,
                   text_seeds: bool = False) -> Scenario:
    """Generate a post-break layout for ``mode`` and ``seed``.

    ``keep_rack`` / ``keep_cue`` take the object balls / cue ball from
    ``previous`` and regenerate only the other part from a PRNG seeded by
    ``seed``. A kept rack only applies when ``previous`` has the same mode.
    A kept cue is treated as an obstacle while the new rack is scattered.
    Such a result is marked ``partial``: its seed alone no longer rebuilds
    it, so it has no share query.
    """
    mode = check_mode(mode)
    seed = normalize_seed(seed, text_seeds=text_seeds)
    rng = rng_for(seed)

    reuse_rack = keep_rack and previous is not None and previous.mode == mode
    reuse_cue = keep_cue and previous is not None
    fallbacks: List[int] = []

    if reuse_rack:
        balls = list(previous.balls)
        fallbacks.extend(n for n in previous.fallback_numbers if n != CUE_NUMBER)
    else:
        racked = rack_for_mode(mode, rng)
        obstacles = (previous.cue,) if reuse_cue else ()
        placements = scatter_after_break(rng, racked, obstacles=obstacles)
        balls = [p.ball for p in placements]
        fallbacks.extend(p.ball.number for p in placements if p.fallback)

    if reuse_cue:
        cue = previous.cue
        if CUE_NUMBER in previous.fallback_numbers:
            fallbacks.append(CUE_NUMBER)
    else:
        placement = place_cue_after_break(rng, balls)
        cue = placement.ball
        if placement.fallback:
            fallbacks.append(CUE_NUMBER)

    target = pick_next_target(mode, balls, cue)
    suggestion = suggest_break(rng)

    scenario = Scenario(
        mode=mode,
        seed=seed,
        balls=tuple(balls),
        cue=cue,
        target=target,
        suggestion=suggestion,
        fallback_numbers=tuple(sorted(fallbacks)),
        partial=reuse_rack or reuse_cue,
    )
    logger.debug("built %s-ball scenario seed=%d target=%d draws=%d degraded=%s",
                 mode, seed, target.number, rng.draws, scenario.degraded)
    return scenario


# ──────────────────────────────────────────────
# Share state (mode + seed)
# ──────────────────────────────────────────────

def share_query(scenario: Scenario) -> Optional[str]:
    """``mode=..&seed=..`` for a full build, ``None`` for a partial one."""
    if not scenario.shareable:
        return None
    return urlencode(scenario.to_params())


def parse_share_query(text: str) -> Tuple[Optional[str], Optional[int]]:
    """Read ``mode`` and ``seed`` from a query string or URL.

    Unknown modes and non-numeric seeds come back as ``None``.
    """
    text = (text or "").strip()
    if "?" in text or "://" in text:
        text = urlsplit(text).query
    params = parse_qs(text)

    mode = params.get("mode", [None])[0]
    if mode not in MODES:
        mode = None
    seed = parse_seed(params.get("seed", [None])[0])
    return mode, seed


def scenario_from_query(text: str, default_mode: str = "8") -> Scenario:
    mode, seed = parse_share_query(text)
    return build_scenario(mode or default_mode, seed)


if __name__ == "__main__":
    import json

    print(json.dumps(build_scenario("8", 42).to_dict(), indent=2))
