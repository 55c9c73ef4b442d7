"""
Supply Definitions.

Supplies are passive run modifiers (relic-style). A run can hold any number of
them. Some fire a one-time on-gain effect; the rest are read by battle, shop,
rest and reward code while owned.
"""

from dataclasses import dataclass
from typing import Tuple

from .cards import Rarity


@dataclass(frozen=True)
class Supply:
    id: str
    name: str
    rarity: Rarity
    desc: str
    event_only: bool = False


C, U, R, UR = Rarity.COMMON, Rarity.UNCOMMON, Rarity.RARE, Rarity.ULTRA_RARE


# Supply ids referenced by engine logic
SUP_START_STRENGTH = "sup_start_strength"
SUP_GOLD_BOOST = "sup_gold_boost"
SUP_DOUBLE_OFFERS = "sup_double_offers"
SUP_POST_BATTLE_HEAL = "sup_post_battle_heal"
SUP_APPLY_POISON = "sup_apply_poison"
SUP_UPGRADE_REST = "sup_upgrade_rest"
SUP_SHOP_DISCOUNT = "sup_shop_discount"
SUP_UPGRADED_REWARDS = "sup_upgraded_rewards"
SUP_BICYCLE = "sup_bicycle"
SUP_BLOCK_GAIN = "sup_block_gain"
SUP_INCREASE_MAX_HEALTH = "sup_increase_max_health"
SUP_BLOCK_PERSIST = "sup_block_persist"
SUP_ENERGY_CARRYOVER = "sup_energy_carryover"
SUP_POISON_SPREADS = "sup_poison_spreads"
SUP_POISON_DOUBLE_DAMAGE = "sup_poison_double_damage"
SUP_MULTI_ATTACK_PLUS = "sup_multi_attack_plus"
SUP_NO_NEGATIVE_CARDS = "sup_no_negative_cards"
SUP_NEGATIVE_DRAW_BURST = "sup_negative_draw_burst"
SUP_STRENGTH_TO_BLOCK = "sup_strength_to_block"


SUPPLIES: Tuple[Supply, ...] = (
    Supply(SUP_START_STRENGTH, "Protein Bar", C, "Start every battle with Strength 2."),
    Supply(SUP_GOLD_BOOST, "Golden Pencil", C, "Gain +50% gold whenever you gain gold (rounded up)."),
    Supply(SUP_DOUBLE_OFFERS, "Photocopier", C, "After battles, card rewards offer 6 cards instead of 3."),
    Supply(SUP_POST_BATTLE_HEAL, "Ice Pack", C, "Heal 10 HP after every battle you win."),
    Supply("sup_reflect_block", "Bathroom Mirror", C, "Whenever you block damage, deal 50% of the blocked amount back to an enemy."),
    Supply(SUP_APPLY_POISON, "Deodorant", C, "At the start of every turn, apply 2 Poison to all enemies."),
    Supply("sup_no_debuffs", "Headphones", U, "Debuffs can no longer be applied to you."),
    Supply(SUP_UPGRADE_REST, "Comfy Pillow", U, "At rest sites you can both Upgrade a card and Rest."),
    Supply(SUP_SHOP_DISCOUNT, "Student Discount", R, "Shop prices are 50% off."),
    Supply(SUP_UPGRADED_REWARDS, "Note Taker", R, "All card rewards are upgraded."),
    Supply(SUP_BICYCLE, "Bicycle", R, "Gain 2 additional energy every turn."),
    Supply(SUP_BLOCK_GAIN, "Winter Coat", U, "Gain 5 Block at the start of every turn."),
    Supply("sup_no_questions", "4+ Test", UR, "You no longer have to answer questions for ATTACK cards."),
    Supply(SUP_INCREASE_MAX_HEALTH, "Hefty Lunch", U, "Increase your maximum health by 20."),

    Supply(SUP_BLOCK_PERSIST, "Locker Door", R, "Your leftover Block does not reset at the start of your turn.", event_only=True),
    Supply(SUP_ENERGY_CARRYOVER, "Battery Pack", UR, "Unspent Energy carries over to your next turn.", event_only=True),
    Supply(SUP_POISON_SPREADS, "Contagion", R, "Whenever you apply Poison to an enemy, apply it to ALL enemies.", event_only=True),
    Supply(SUP_POISON_DOUBLE_DAMAGE, "Toxic Booster", UR, "Poison deals damage twice each turn (enemies only).", event_only=True),
    Supply(SUP_MULTI_ATTACK_PLUS, "Extra Swing", R, "Your Multi-Attack cards hit 1 additional time.", event_only=True),
    Supply(SUP_NO_NEGATIVE_CARDS, "Perfect Record", UR, "You can no longer gain negative cards.", event_only=True),
    Supply(SUP_NEGATIVE_DRAW_BURST, "Red Pen", R, "Whenever you draw a negative card, deal 5 damage to ALL enemies.", event_only=True),
    Supply(SUP_STRENGTH_TO_BLOCK, "Weight Belt", R, "Whenever you gain Block from a BLOCK card, also gain Block equal to your Strength.", event_only=True),
)
