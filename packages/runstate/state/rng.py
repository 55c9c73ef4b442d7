"""
Seeded RNG for run generation.

Implements Mulberry32 with unsigned 32-bit wraparound so that a given seed
produces the same float stream on every platform. Subsystems never share one
stream: each derives its own sub-seed with ``derive_seed(run_seed, context)`` so
that e.g. a shop's offers do not depend on how many draws happened elsewhere.

Usage:
    rng = make_rng(derive_seed(state.seed, f"shop:{node_id}:refresh:0"))
    roll = rng()          # float in [0, 1)
    n = rand_int(rng, 1, 6)
"""

from __future__ import annotations

import random
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

MASK_32 = 0xFFFFFFFF

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619

MULBERRY_INCREMENT = 0x6D2B79F5
TWO_POW_32 = 4294967296


def _imul(a: int, b: int) -> int:
    """Low 32 bits of a 32x32 multiply."""
    return (a * b) & MASK_32


# ============================================================================
# GENERATOR
# ============================================================================

class Mulberry32:
    """
    Mulberry32 PRNG.

    Instances are callable and return the next float in [0, 1). The internal
    state is a single unsigned 32-bit integer.
    """

    __slots__ = ("_state",)

    def __init__(self, seed: int):
        self._state = seed & MASK_32

    def __call__(self) -> float:
        self._state = (self._state + MULBERRY_INCREMENT) & MASK_32
        t = self._state
        x = _imul(t ^ (t >> 15), 1 | t)
        x ^= (x + _imul(x ^ (x >> 7), 61 | x)) & MASK_32
        return ((x ^ (x >> 14)) & MASK_32) / TWO_POW_32

    @property
    def state(self) -> int:
        return self._state

    def copy(self) -> "Mulberry32":
        clone = Mulberry32(0)
        clone._state = self._state
        return clone

    def __repr__(self) -> str:
        return f"Mulberry32(state={self._state:#010x})"


RNG = Callable[[], float]


def make_rng(seed: int) -> Mulberry32:
    return Mulberry32(seed)


# ============================================================================
# HASHING / RESEEDING
# ============================================================================

def hash_string_to_int(s: str) -> int:
    """FNV-1a over UTF-16 code units, unsigned 32-bit."""
    h = FNV_OFFSET_BASIS
    data = s.encode("utf-16-le")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * FNV_PRIME) & MASK_32
    return h


def derive_seed(seed: int, context: str, salt: int = 0) -> int:
    """Sub-seed for a scoped stream: ``(seed ^ hash(context)) ^ salt``."""
    return ((seed ^ hash_string_to_int(context)) ^ salt) & MASK_32


def make_scoped_rng(seed: int, context: str, salt: int = 0) -> Mulberry32:
    return Mulberry32(derive_seed(seed, context, salt))


# ============================================================================
# HELPERS
# ============================================================================

def rand_int(rng: RNG, lo: int, hi: int) -> int:
    """Uniform integer in [lo, hi] inclusive."""
    return int(rng() * (hi - lo + 1)) + lo


def pick(rng: RNG, items: Sequence[T]) -> T:
    """Uniform pick. Raises IndexError on an empty sequence."""
    if not items:
        raise IndexError("pick from empty sequence")
    return items[int(rng() * len(items))]


def shuffle(rng: RNG, items: Sequence[T]) -> List[T]:
    """Fisher-Yates from the end, returning a shuffled copy."""
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = int(rng() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out


def pick_unique(rng: RNG, items: Sequence[T], count: int) -> List[T]:
    """Draw up to ``count`` distinct positions from ``items``."""
    target = min(count, len(items))
    used = set()
    out: List[T] = []
    while len(out) < target:
        idx = int(rng() * len(items))
        if idx in used:
            continue
        used.add(idx)
        out.append(items[idx])
    return out


def random_seed(limit: int = 1_000_000, rng: Optional[RNG] = None) -> int:
    """A fresh run seed in [0, limit)."""
    if rng is None:
        return random.randrange(limit)
    return int(rng() * limit)
