"""
Consumable Definitions.

At most three consumables are held at once. Only Water works outside battle;
everything else is resolved by the battle module.
"""

from dataclasses import dataclass
from typing import Tuple

from .cards import Rarity


@dataclass(frozen=True)
class Consumable:
    id: str
    name: str
    rarity: Rarity
    desc: str
    event_only: bool = False


C, U, R = Rarity.COMMON, Rarity.UNCOMMON, Rarity.RARE

CON_APPLE = "con_apple"
CON_SANDWICH = "con_sandwich"
CON_RAIN_COAT = "con_rain_coat"
CON_COOKIE = "con_cookie"
CON_SHAKE = "con_shake"
CON_TRAILMIX = "con_trailmix"
CON_WATER = "con_water"
CON_ERASER = "con_eraser"
CON_CHIPS = "con_chips"
CON_ANSWER_KEY = "con_answer_key"
CON_MOLDY_FOOD = "con_moldy_food"
CON_ABSENCE_NOTE = "con_absence_note"
CON_CHEAT_SHEET = "con_cheat_sheet"
CON_TRASH_BIN = "con_trash_bin"


CONSUMABLES: Tuple[Consumable, ...] = (
    Consumable(CON_APPLE, "Apple", C, "Gain 5 Regen."),
    Consumable(CON_SANDWICH, "Sandwich", C, "Heal 12 HP."),
    Consumable(CON_RAIN_COAT, "Rain Coat", C, "Gain 8 Block."),
    Consumable(CON_COOKIE, "Cookie", C, "Draw 3 cards."),
    Consumable(CON_SHAKE, "Protein Shake", U, "Gain 2 Strength."),
    Consumable(CON_TRAILMIX, "Trail Mix", U, "Gain +2 Energy (this turn) and apply 3 Vulnerable to a target."),
    Consumable(CON_WATER, "Water", U, "Permanently increase your Max HP by 7."),
    Consumable(CON_ERASER, "Eraser", C, "Remove Poison, Weak, and Vulnerable from yourself."),
    Consumable(CON_CHIPS, "Chips", C, "Deal 10 damage to the targeted enemy."),
    Consumable(CON_ANSWER_KEY, "Answer Key", R, "If a question is open, auto-solve it.", event_only=True),
    Consumable(CON_MOLDY_FOOD, "Moldy Food", U, "Apply 5 Poison to the targeted enemy."),
    Consumable(CON_ABSENCE_NOTE, "Absence Note", R, "Skip this fight and collect no rewards.", event_only=True),
    Consumable(CON_CHEAT_SHEET, "Cheat Sheet", R, "Upgrade all cards in your hand for the rest of this battle.", event_only=True),
    Consumable(CON_TRASH_BIN, "Trash Bin", R, "Permanently remove a card from your deck.", event_only=True),
)
