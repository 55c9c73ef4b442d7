"""
Card Definitions.

Base cards come in three types (ATTACK, BLOCK, SKILL). Every base card has an
upgraded variant with the ``_u`` suffix and a ``+`` name. Negative cards have no
upgrade. ``event_only`` cards never appear in regular shops or battle rewards.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple


class CardType(Enum):
    ATTACK = "ATTACK"
    BLOCK = "BLOCK"
    SKILL = "SKILL"
    NEGATIVE = "NEGATIVE"


class Rarity(Enum):
    """Shared rarity scale for cards, supplies and consumables."""
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    ULTRA_RARE = "Ultra Rare"


UPGRADE_SUFFIX = "_u"


@dataclass(frozen=True)
class Card:
    """A single card definition."""
    id: str
    name: str
    type: CardType
    cost: int
    rarity: Rarity
    desc: str
    event_only: bool = False
    exhaust: bool = False
    upgrade_of: Optional[str] = None

    @property
    def is_upgraded(self) -> bool:
        return self.upgrade_of is not None

    @property
    def is_negative(self) -> bool:
        return self.type == CardType.NEGATIVE


C, U, R, UR = Rarity.COMMON, Rarity.UNCOMMON, Rarity.RARE, Rarity.ULTRA_RARE
ATK, BLK, SKL, NEG = CardType.ATTACK, CardType.BLOCK, CardType.SKILL, CardType.NEGATIVE


# ============================================================================
# BASE CARDS
# ============================================================================

BASE_CARDS: Tuple[Card, ...] = (
    Card("atk_strike", "Strike", ATK, 1, C, "Deal 6 damage."),
    Card("atk_heavy_hit", "Heavy Hit", ATK, 2, C, "Deal 10 damage."),
    Card("atk_rapid_fire", "Rapid Fire", ATK, 1, C, "Deal 4 damage twice."),
    Card("atk_piercing_shot", "Piercing Shot", ATK, 1, C, "Deal 5 damage (ignores Block)."),
    Card("atk_rain_fall", "Rain Fall", ATK, 1, C, "Deal 6 damage to ALL enemies."),
    Card("atk_acid_rain_fall", "Acid Rain Fall", ATK, 2, U, "Deal 12 damage to ALL enemies."),
    Card("atk_nothing_but_net", "Nothing But Net", ATK, 3, R, "Deal 21 damage to ALL enemies."),
    Card("atk_golden_strike", "Golden Strike", ATK, 3, UR, "Deal damage equal to your current gold.", event_only=True),
    Card("atk_shield_conversion", "Shield Conversion", ATK, 2, R, "Deal damage equal to your current Block.", event_only=True),
    Card("atk_unload", "Unload", ATK, 0, R, "Spend all your Energy. Deal 6 damage per Energy spent.", event_only=True),

    Card("blk_guard", "Guard", BLK, 1, C, "Gain 6 Block."),
    Card("blk_wall_up", "Wall Up", BLK, 2, C, "Gain 10 Block."),
    Card("blk_reflex", "Reflex", BLK, 1, C, "Gain 5 Block. Draw 1."),
    Card("blk_shield_bash", "Shield Bash", BLK, 1, C, "Gain 4 Block. Deal 4 damage."),
    Card("blk_fortitude", "Fortitude", BLK, 3, R, "Gain 30 Block.", exhaust=True),
    Card("blk_dig_in", "Dig In", BLK, 0, R, "Spend all your Energy. Gain 6 Block per Energy spent.", event_only=True),

    Card("skl_focus", "Focus", SKL, 1, C, "Gain 1 Strength."),
    Card("skl_workout", "Workout", SKL, 2, R, "Double your Strength.", exhaust=True),
    Card("skl_quick_thinking", "Quick Thinking", SKL, 1, C, "Draw 2 cards."),
    Card("skl_mulligan", "Mulligan", SKL, 1, C, "Discard 1 random card. Draw 1."),
    Card("skl_confidence", "Confidence", SKL, 2, R, "Your next attack this turn deals double damage."),
    Card("skl_clean_notes", "Clean Notes", SKL, 1, U, "Remove a random debuff from yourself."),
    Card("skl_prank", "Prank", SKL, 1, U, "Apply 5 Poison to a target."),
    Card("skl_science_lab", "Science Experiment", SKL, 2, R, "Double a target's Poison."),
    Card("skl_elearning", "E-Learning", SKL, 2, R, "Double your Block."),
    Card("skl_disruptive", "Disruptive", SKL, 1, U, "Apply 3 Vulnerable to a target.", exhaust=True),
    Card("skl_calm_down", "Calm Down", SKL, 1, U, "Apply 3 Weak to a target."),
    Card("skl_bandaid", "Bandaid", SKL, 0, C, "Heal 4 HP.", exhaust=True),
    Card("skl_detox_extract", "Detox Extract", SKL, 2, R, "Recover HP equal to half the Poison on the targeted enemy.", event_only=True),
    Card("skl_overclock", "Overclock", SKL, 3, UR, "Gain +1 Energy each turn.", event_only=True),
)

# Upgraded numbers where they differ from the base card
UPGRADE_OVERRIDES: Dict[str, Dict[str, object]] = {
    "atk_strike": {"desc": "Deal 9 damage."},
    "atk_heavy_hit": {"desc": "Deal 14 damage."},
    "atk_rapid_fire": {"desc": "Deal 8 damage twice."},
    "atk_piercing_shot": {"desc": "Deal 8 damage (ignores Block)."},
    "atk_rain_fall": {"desc": "Deal 9 damage to ALL enemies."},
    "atk_acid_rain_fall": {"desc": "Deal 19 damage to ALL enemies."},
    "atk_nothing_but_net": {"desc": "Deal 28 damage to ALL enemies."},
    "atk_unload": {"desc": "Spend all your Energy. Deal 6 damage per Energy spent, plus 1 additional hit."},
    "blk_guard": {"desc": "Gain 9 Block."},
    "blk_wall_up": {"desc": "Gain 14 Block."},
    "blk_reflex": {"desc": "Gain 7 Block. Draw 2."},
    "blk_shield_bash": {"desc": "Gain 7 Block. Deal 7 damage."},
    "blk_fortitude": {"cost": 2, "desc": "Gain 40 Block."},
    "blk_dig_in": {"desc": "Spend all your Energy. Gain 6 Block per Energy spent, plus 1 additional stack."},
    "skl_focus": {"desc": "Gain 3 Strength."},
    "skl_workout": {"cost": 1},
    "skl_quick_thinking": {"desc": "Draw 3 cards."},
    "skl_mulligan": {"cost": 0},
    "skl_confidence": {"cost": 1},
    "skl_clean_notes": {"cost": 0},
    "skl_prank": {"desc": "Apply 8 Poison to a target."},
    "skl_science_lab": {"cost": 1},
    "skl_elearning": {"cost": 1},
    "skl_disruptive": {"cost": 0},
    "skl_calm_down": {"cost": 0},
    "skl_bandaid": {"desc": "Heal 7 HP."},
}


def _upgraded(card: Card) -> Card:
    overrides = UPGRADE_OVERRIDES.get(card.id, {})
    return replace(
        card,
        id=card.id + UPGRADE_SUFFIX,
        name=card.name + "+",
        upgrade_of=card.id,
        **overrides,
    )


UPGRADED_CARDS: Tuple[Card, ...] = tuple(_upgraded(c) for c in BASE_CARDS)


# ============================================================================
# NEGATIVE CARDS
# ============================================================================

NEGATIVE_CARDS: Tuple[Card, ...] = (
    Card("neg_curse", "Curse", NEG, 0, C, "Unplayable."),
    Card("neg_temp_curse", "Curse", NEG, 0, C, "Unplayable. Removed after battle."),
    Card("neg_infestation", "Infestation", NEG, 0, C, "Unplayable. When drawn, discard 1 random card. Exhaust. Removed after battle."),
    Card("neg_infestation_perm", "Infestation", NEG, 0, C, "Unplayable. When drawn, discard 1 random card. Does not Exhaust."),
    Card("neg_radiation", "Radiation", NEG, 0, C, "Unplayable. When drawn, lose 1 Energy. Exhaust. Removed after battle."),
    Card("neg_radiation_perm", "Radiation", NEG, 0, C, "Unplayable. When drawn, lose 1 Energy. Does not Exhaust."),
    Card("neg_pop_quiz", "Pop Quiz", NEG, 0, C, "Must be played before any other cards. Exhaust.", exhaust=True),
)

NEGATIVE_CARD_IDS = frozenset(c.id for c in NEGATIVE_CARDS)

ALL_CARDS: Tuple[Card, ...] = BASE_CARDS + UPGRADED_CARDS + NEGATIVE_CARDS

# Starting deck handed to setup when the caller does not provide one
STARTER_DECK: Tuple[str, ...] = (
    "atk_strike", "atk_strike", "atk_strike",
    "blk_guard", "blk_guard", "blk_guard",
    "skl_focus", "skl_quick_thinking",
)


def is_negative_card_id(card_id: str) -> bool:
    return card_id.startswith("neg_") or card_id in NEGATIVE_CARD_IDS


def build_upgrade_map(cards: Tuple[Card, ...] = ALL_CARDS) -> Dict[str, str]:
    return {c.upgrade_of: c.id for c in cards if c.upgrade_of is not None}
