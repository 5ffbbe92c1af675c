"""
Deterministic PRNG + seed derivation

Mulberry32 stream over a 32-bit state. Every stochastic decision of a
scenario build (rack shuffle, scatter, cue, break suggestion) draws from
one instance, so a fixed seed reproduces the same layout on any platform.
"""

import logging
import math
import re
import secrets
import time
from typing import Optional, Union

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────
# Constants
# ──────────────────────────────────────────────
MASK32: int = 0xFFFFFFFF
MULBERRY_INCREMENT: int = 0x6D2B79F5
SEED_FALLBACK: int = 0x9E3779B9     # golden-ratio constant, replaces a zero state

FNV_OFFSET_BASIS: int = 2166136261
FNV_PRIME: int = 16777619

SeedLike = Union[int, str, None]

# Seed text grammar: plain decimals (optional sign, fraction, exponent),
# unsigned 0x/0o/0b literals, or a signed "Infinity". No digit separators.
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\Z")
_PREFIXED_RE = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)\Z")
_INFINITY_RE = re.compile(r"[+-]?Infinity\Z")


def _imul(a: int, b: int) -> int:
    """Low 32 bits of a 32x32 multiply."""
    return (a * b) & MASK32


class Mulberry32:
    """Seeded float stream in [0, 1)."""

    def __init__(self, seed: int):
        self.state = seed & MASK32
        self.draws = 0

    def random(self) -> float:
        self.state = (self.state + MULBERRY_INCREMENT) & MASK32
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        self.draws += 1
        return ((t ^ (t >> 14)) & MASK32) / 4294967296.0

    __call__ = random

    def rand_int(self, lo: int, hi: int) -> int:
        # inclusive lo..hi
        return int(math.floor(self.random() * (hi - lo + 1))) + lo

    def rand_float(self, lo: float, hi: float) -> float:
        return self.random() * (hi - lo) + lo


def rand_int(rng: Mulberry32, lo: int, hi: int) -> int:
    return rng.rand_int(lo, hi)


def rand_float(rng: Mulberry32, lo: float, hi: float) -> float:
    return rng.rand_float(lo, hi)


# ──────────────────────────────────────────────
# Seed derivation
# ──────────────────────────────────────────────

def hash_seed(value: Union[int, str]) -> int:
    """Map an integer or string to a non-zero 32-bit PRNG state.

    Integers are reduced mod 2**32. Strings are folded with FNV-1a over
    their UTF-8 bytes. A result of zero is replaced by ``SEED_FALLBACK``
    so the generator never starts from the all-zero state.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return (value & MASK32) or SEED_FALLBACK

    h = FNV_OFFSET_BASIS
    for byte in str(value).encode("utf-8"):
        h ^= byte
        h = _imul(h, FNV_PRIME)
    return h or SEED_FALLBACK


def random_seed() -> int:
    """Fresh 32-bit seed from the OS entropy source, clock as last resort."""
    try:
        return secrets.randbits(32)
    except NotImplementedError:
        return int(time.time() * 1000) & MASK32


def parse_seed(value: SeedLike) -> Optional[int]:
    """Interpret user seed input as a uint32, or ``None`` when not numeric.

    Accepts ints, decimal strings (fraction and exponent allowed, fraction
    truncated), ``0x``/``0o``/``0b`` literals and ``Infinity``. Negative
    values wrap like an unsigned 32-bit conversion; infinite values and
    overflowing exponents become 0. Digit separators (``1_000``) and
    spellings such as ``inf`` or ``nan`` are not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value & MASK32
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if math.isinf(value):
            return 0
        return int(value) & MASK32

    text = str(value).strip()
    if _PREFIXED_RE.match(text):
        return int(text, 0) & MASK32
    if _INFINITY_RE.match(text):
        return 0
    if not _DECIMAL_RE.match(text):
        return None
    number = float(text)
    if not math.isfinite(number):
        # "1e400" overflows to infinity, which wraps to 0
        return 0
    return int(number) & MASK32


def normalize_seed(value: SeedLike, text_seeds: bool = False) -> int:
    """Resolve seed input to the uint32 stored on a scenario.

    Numeric input is parsed. Non-numeric text is hashed when ``text_seeds``
    is set; otherwise it, like empty input, is replaced by a random seed.
    """
    parsed = parse_seed(value)
    if parsed is not None:
        return parsed

    if text_seeds and isinstance(value, str) and value.strip():
        seed = hash_seed(value.strip())
        logger.debug("hashed text seed %r -> %d", value, seed)
        return seed

    seed = random_seed()
    if value is not None and value != "":
        logger.info("invalid seed %r replaced by random seed %d", value, seed)
    return seed


def rng_for(seed: int) -> Mulberry32:
    """PRNG for a scenario seed (the single reseed point of a build)."""
    return Mulberry32(hash_seed(seed))
