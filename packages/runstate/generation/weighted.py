"""
Weighted selection helpers for loot, offers and encounters.

Weights are clamped at zero. When every weight is zero the draw degrades to a
uniform pick so that an all-zero pool still yields something.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, TypeVar

from ..state.rng import RNG

T = TypeVar("T")

RARITY_WEIGHTS = {
    "Common": 70,
    "Uncommon": 25,
    "Rare": 5,
    "Ultra Rare": 1,
}
DEFAULT_RARITY_WEIGHT = 30


def weight_by_rarity(rarity) -> int:
    """Map a rarity (enum or display string) to its draw weight."""
    key = getattr(rarity, "value", rarity)
    return RARITY_WEIGHTS.get(key, DEFAULT_RARITY_WEIGHT)


def pick_weighted(rng: RNG, items: Sequence[T], get_weight: Callable[[T], float]) -> Optional[T]:
    """Single weighted draw. Returns None for an empty sequence."""
    if not items:
        return None

    weights = [max(0, get_weight(it) or 0) for it in items]
    total = sum(weights)

    if total <= 0:
        return items[int(rng() * len(items))]

    roll = rng() * total
    for item, w in zip(items, weights):
        roll -= w
        if roll <= 0:
            return item
    return items[-1]


def pick_weighted_unique(
    rng: RNG,
    items: Sequence[T],
    n: int,
    get_weight: Callable[[T], float],
) -> List[T]:
    """Weighted draw of up to ``n`` items without replacement."""
    pool = list(items)
    out: List[T] = []
    take = max(0, min(n, len(pool)))

    for _ in range(take):
        picked = pick_weighted(rng, pool, get_weight)
        if picked is None:
            break
        out.append(picked)

        # Remove by identity first so equal-but-distinct items stay in the pool
        for idx, candidate in enumerate(pool):
            if candidate is picked:
                del pool[idx]
                break
        else:
            pool.pop()

    return out
