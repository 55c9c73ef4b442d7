"""
Encounter selection with anti-repeat tracking.

Standard and challenge fights avoid encounters already in ``used_encounter_ids``
until every encounter of the relevant pool has been seen; at that point the
pool's ids are dropped from the used set and repeats are allowed again. The
boss is never tracked.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from ..content.catalog import ContentCatalog
from ..content.encounters import Encounter
from ..state.battle import EnemyState
from ..state.rng import RNG, pick, rand_int

DEFAULT_REPICK_ATTEMPTS = 12


def pick_encounter_for_depth(
    rng: RNG,
    catalog: ContentCatalog,
    depth: int,
    is_boss: bool = False,
    is_challenge: bool = False,
) -> Encounter:
    if is_boss:
        return catalog.boss
    return pick(rng, catalog.encounter_pool(depth, is_challenge=is_challenge))


def effective_used_ids(used_encounter_ids: Sequence[str], pool: Sequence[Encounter]) -> Tuple[str, ...]:
    """Used ids with ``pool`` forgotten when every encounter in it was already seen."""
    used = tuple(used_encounter_ids)
    pool_ids = [enc.id for enc in pool]
    if pool_ids and all(pid in used for pid in pool_ids):
        return tuple(uid for uid in used if uid not in pool_ids)
    return used


def select_encounter(
    rng: RNG,
    catalog: ContentCatalog,
    depth: int,
    used_encounter_ids: Sequence[str] = (),
    is_boss: bool = False,
    is_challenge: bool = False,
    attempts: int = DEFAULT_REPICK_ATTEMPTS,
) -> Tuple[Encounter, Tuple[str, ...]]:
    """Pick an encounter and return it with the updated used-id list.

    Re-picks up to ``attempts`` times while the pick is already used; after
    that the last pick stands.
    """
    pool = catalog.encounter_pool(depth, is_boss=is_boss, is_challenge=is_challenge)
    used = effective_used_ids(used_encounter_ids, pool)

    encounter = pick_encounter_for_depth(rng, catalog, depth, is_boss, is_challenge)
    if is_boss:
        return encounter, tuple(used_encounter_ids)

    for _ in range(attempts):
        if encounter.id not in used:
            break
        encounter = pick_encounter_for_depth(rng, catalog, depth, is_boss, is_challenge)

    if encounter.id not in used:
        used = used + (encounter.id,)
    return encounter, used


def encounter_to_enemy_states(encounter: Encounter, rng: RNG) -> List[EnemyState]:
    """Fresh enemy states with a rolled opening intent."""
    enemies = []
    for enemy in encounter.enemies:
        intent = rand_int(rng, max(0, enemy.attack - 1), enemy.attack + 1)
        enemies.append(EnemyState(
            id=enemy.id,
            name=enemy.name,
            hp=enemy.hp,
            max_hp=enemy.hp,
            intent_damage=intent,
        ))
    return enemies
