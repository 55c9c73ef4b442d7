"""
Encounter Definitions.

Encounters are grouped into pools by depth tier (easy/medium/hard), a parallel
set of challenge pools, and a single boss. ``attack`` is the enemy's base intent
damage; the battle module owns everything beyond that.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


@dataclass(frozen=True)
class EnemyDef:
    id: str
    name: str
    hp: int
    attack: int = 8


@dataclass(frozen=True)
class Encounter:
    id: str
    name: str
    enemies: Tuple[EnemyDef, ...]


class EncounterTier(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


def _solo(encounter_id: str, name: str, enemy_id: str, hp: int, attack: int) -> Encounter:
    return Encounter(encounter_id, name, (EnemyDef(enemy_id, name, hp, attack),))


# ============================================================================
# STANDARD POOLS
# ============================================================================

ENCOUNTER_POOL_EASY: Tuple[Encounter, ...] = (
    _solo("easy_demented_blue_jay", "Demented Blue Jay", "blue_jay", 40, 7),
    _solo("easy_locker_goblin", "Locker Goblin", "locker_goblin", 40, 6),
    _solo("easy_demonic_dust_bunny", "Demonic Dust Bunny", "dust_bunny", 40, 6),
    _solo("easy_toxic_lab_spill", "Toxic Lab Spill", "toxic_spill", 35, 5),
    Encounter("easy_possessed_trio", "Possessed Supplies", (
        EnemyDef("possessed_pencil", "Possessed Pencil", 25, 5),
        EnemyDef("possessed_eraser", "Possessed Eraser", 22, 4),
        EnemyDef("possessed_sharpener", "Possessed Sharpener", 10, 3),
    )),
)

ENCOUNTER_POOL_MEDIUM: Tuple[Encounter, ...] = (
    _solo("med_zombie_athlete", "Zombie Athlete", "zombie_athlete", 55, 10),
    _solo("med_possessed_scissors", "Possessed Scissors", "possessed_scissors", 56, 9),
    Encounter("med_office_gremlins", "Office Gremlins", (
        EnemyDef("gremlin_a", "Office Gremlin", 40, 6),
        EnemyDef("gremlin_b", "Office Gremlin", 44, 6),
    )),
    _solo("med_substitute_teacher", "Substitute Teacher", "substitute_teacher", 58, 9),
    Encounter("med_twin_chromebooks", "Twin Casters", (
        EnemyDef("chromebook_a", "Chromebook", 44, 6),
        EnemyDef("chromebook_b", "Chromebook", 44, 6),
    )),
    _solo("med_possessed_binder", "Possessed Binder", "possessed_binder", 44, 8),
)

ENCOUNTER_POOL_HARD: Tuple[Encounter, ...] = (
    _solo("hard_bathroom_bully", "Bathroom Bully", "bathroom_bully", 65, 12),
    _solo("hard_toilet_dragon", "Toilet Dragon", "toilet_dragon", 50, 14),
    _solo("hard_alien_scientist", "Alien Scientist", "alien_scientist", 60, 12),
    Encounter("hard_defensive_desk_phones", "Defensive Desk & Smart Phones", (
        EnemyDef("defensive_desk", "Defensive Desk", 90, 8),
        EnemyDef("smart_phone_a", "Smart Phone", 13, 4),
        EnemyDef("smart_phone_b", "Smart Phone", 14, 4),
        EnemyDef("smart_phone_c", "Smart Phone", 15, 4),
    )),
    _solo("hard_animated_trophy", "Animated Trophy", "animated_trophy", 64, 12),
    _solo("hard_toxic_dumpster", "Toxic Dumpster", "toxic_dumpster", 74, 11),
    _solo("hard_cursed_detention_slip", "Cursed Detention Slip", "detention_slip", 70, 11),
)


# ============================================================================
# CHALLENGE POOLS
# ============================================================================

ENCOUNTER_POOL_CHALLENGE_EASY: Tuple[Encounter, ...] = (
    _solo("ch_toxic_dumpster", "Toxic Dumpster", "toxic_dumpster", 50, 9),
    _solo("ch_cursed_detention", "Cursed Detention Slip", "detention_slip", 42, 9),
)

ENCOUNTER_POOL_CHALLENGE_MEDIUM: Tuple[Encounter, ...] = (
    Encounter("ch_six_seven", "Six & Seven", (
        EnemyDef("six", "Six", 67, 9),
        EnemyDef("seven", "Seven", 67, 9),
    )),
    _solo("ch_lab_accident", "Lab Accident (Charged)", "lab_accident", 55, 12),
)

ENCOUNTER_POOL_CHALLENGE_HARD: Tuple[Encounter, ...] = (
    _solo("ch_mecha_pencil", "Mecha Pencil", "mecha_pencil", 72, 15),
    Encounter("ch_six_seven_plus", "Six & Seven (Mean)", (
        EnemyDef("six", "Six", 42, 11),
        EnemyDef("seven", "Seven", 44, 11),
    )),
)

BOSS_ENCOUNTER = _solo("boss_mrs_pain", "Mrs. Pain", "mrs_pain", 200, 14)


STANDARD_POOLS: Dict[EncounterTier, Tuple[Encounter, ...]] = {
    EncounterTier.EASY: ENCOUNTER_POOL_EASY,
    EncounterTier.MEDIUM: ENCOUNTER_POOL_MEDIUM,
    EncounterTier.HARD: ENCOUNTER_POOL_HARD,
}

CHALLENGE_POOLS: Dict[EncounterTier, Tuple[Encounter, ...]] = {
    EncounterTier.EASY: ENCOUNTER_POOL_CHALLENGE_EASY,
    EncounterTier.MEDIUM: ENCOUNTER_POOL_CHALLENGE_MEDIUM,
    EncounterTier.HARD: ENCOUNTER_POOL_CHALLENGE_HARD,
}


def tier_for_depth(depth: int) -> EncounterTier:
    """1-4 easy, 5-9 medium, 10+ hard."""
    if depth <= 4:
        return EncounterTier.EASY
    if depth <= 9:
        return EncounterTier.MEDIUM
    return EncounterTier.HARD
