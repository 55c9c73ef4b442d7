"""
Supply hooks.

Battle-time supply effects are registered per hook with ``@supply_trigger`` and
run in the order the player owns the supplies. Run-level effects (gold boost,
offers, post-battle heal, on-gain bonuses) are plain functions read by the
reducer.

Usage:
    @supply_trigger(SupplyHook.BATTLE_START, supply="sup_start_strength")
    def protein_bar(battle: BattleState) -> BattleState:
        return battle.with_status("strength", 2)
"""

from __future__ import annotations

import math
from dataclasses import replace
from enum import Enum
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from ..content.catalog import ContentCatalog
from ..content.supplies import (
    SUP_APPLY_POISON,
    SUP_BICYCLE,
    SUP_BLOCK_GAIN,
    SUP_DOUBLE_OFFERS,
    SUP_GOLD_BOOST,
    SUP_INCREASE_MAX_HEALTH,
    SUP_POST_BATTLE_HEAL,
    SUP_SHOP_DISCOUNT,
    SUP_START_STRENGTH,
    SUP_UPGRADED_REWARDS,
)
from ..state.battle import BattleState
from ..state.run import GameState


class SupplyHook(Enum):
    BATTLE_START = "battleStart"
    TURN_START = "turnStart"


SupplyEffect = Callable[[BattleState], BattleState]

_TRIGGERS: Dict[SupplyHook, Dict[str, SupplyEffect]] = {hook: {} for hook in SupplyHook}


def supply_trigger(hook: SupplyHook, supply: str) -> Callable[[SupplyEffect], SupplyEffect]:
    """Register ``fn`` as the ``hook`` effect for ``supply``."""
    def decorator(fn: SupplyEffect) -> SupplyEffect:
        _TRIGGERS[hook][supply] = fn
        return fn
    return decorator


def registered_supplies(hook: SupplyHook) -> List[str]:
    return list(_TRIGGERS[hook])


def execute_supply_hook(hook: SupplyHook, battle: BattleState, supply_ids: Iterable[str]) -> BattleState:
    for sid in supply_ids:
        effect = _TRIGGERS[hook].get(sid)
        if effect is not None:
            battle = effect(battle)
    return battle


def mark_supply_proc(battle: BattleState, supply_id: str) -> BattleState:
    """Record a supply activation so the reducer can flash it."""
    procs = battle.meta.proc_supply_ids
    if supply_id not in procs:
        procs = procs + (supply_id,)
    return battle.with_meta(proc_supply_ids=procs, supply_id=supply_id)


# =============================================================================
# BATTLE_START
# =============================================================================

@supply_trigger(SupplyHook.BATTLE_START, supply=SUP_START_STRENGTH)
def protein_bar_start(battle: BattleState) -> BattleState:
    """Protein Bar: start with Strength 2."""
    return mark_supply_proc(battle.with_status("strength", 2), SUP_START_STRENGTH)


@supply_trigger(SupplyHook.BATTLE_START, supply=SUP_BICYCLE)
def bicycle_start(battle: BattleState) -> BattleState:
    """Bicycle: +2 max energy, refilled now."""
    max_energy = battle.max_energy + 2
    battle = replace(battle, max_energy=max_energy, energy=max_energy)
    return mark_supply_proc(battle, SUP_BICYCLE)


# =============================================================================
# TURN_START
# =============================================================================

@supply_trigger(SupplyHook.TURN_START, supply=SUP_BLOCK_GAIN)
def winter_coat_turn(battle: BattleState) -> BattleState:
    """Winter Coat: 5 Block every turn."""
    battle = replace(battle, player_block=battle.player_block + 5)
    return mark_supply_proc(battle, SUP_BLOCK_GAIN)


@supply_trigger(SupplyHook.TURN_START, supply=SUP_APPLY_POISON)
def deodorant_turn(battle: BattleState) -> BattleState:
    """Deodorant: 2 Poison to every living enemy."""
    enemies = []
    for enemy in battle.enemies:
        if enemy.is_alive:
            statuses = dict(enemy.statuses)
            statuses["poison"] = statuses.get("poison", 0) + 2
            enemy = replace(enemy, statuses=statuses)
        enemies.append(enemy)
    battle = replace(battle, enemies=tuple(enemies))
    return mark_supply_proc(battle, SUP_APPLY_POISON)


def apply_supplies_to_new_battle(battle: BattleState, supply_ids: Sequence[str]) -> BattleState:
    """Per supply: its battle-start effect, then its turn-1 start-of-turn effect."""
    for sid in supply_ids:
        battle = execute_supply_hook(SupplyHook.BATTLE_START, battle, (sid,))
        battle = execute_supply_hook(SupplyHook.TURN_START, battle, (sid,))
    return battle


# =============================================================================
# RUN-LEVEL EFFECTS
# =============================================================================

GOLD_BOOST_MULTIPLIER = 1.5
POST_BATTLE_HEAL = 10
BASE_CARD_OFFERS = 3
DOUBLE_CARD_OFFERS = 6
MAX_HP_BONUS = 20
SHOP_DISCOUNT = 0.5


def apply_gold_gain(amount: int, supply_ids: Iterable[str]) -> int:
    """Golden Pencil rounds the boosted amount up."""
    amount = max(0, int(amount))
    if SUP_GOLD_BOOST in supply_ids and amount > 0:
        return int(math.ceil(amount * GOLD_BOOST_MULTIPLIER))
    return amount


def card_offer_count(supply_ids: Iterable[str]) -> int:
    return DOUBLE_CARD_OFFERS if SUP_DOUBLE_OFFERS in supply_ids else BASE_CARD_OFFERS


def maybe_upgrade_reward_cards(card_ids: Sequence[str], supply_ids: Iterable[str], catalog: ContentCatalog) -> Tuple[str, ...]:
    if SUP_UPGRADED_REWARDS not in supply_ids:
        return tuple(card_ids)
    return tuple(catalog.upgraded_id(cid) for cid in card_ids)


def post_battle_heal_amount(supply_ids: Iterable[str]) -> int:
    return POST_BATTLE_HEAL if SUP_POST_BATTLE_HEAL in supply_ids else 0


def apply_discount(price: int, supply_ids: Iterable[str]) -> int:
    """Student Discount halves prices, floored, minimum 1."""
    if SUP_SHOP_DISCOUNT in supply_ids:
        return max(1, int(math.floor(price * SHOP_DISCOUNT)))
    return price


# =============================================================================
# FLASH / ON-GAIN
# =============================================================================

def flash_supplies(state: GameState, supply_ids: Sequence[str]) -> GameState:
    """Emit a one-shot UI flash for ``supply_ids``."""
    if not supply_ids:
        return state
    return replace(
        state,
        supply_flash_nonce=state.supply_flash_nonce + 1,
        supply_flash_ids=tuple(supply_ids),
    )


def apply_supply_on_gain(state: GameState, supply_id: str) -> GameState:
    """Fire a supply's one-time gain effect exactly once per run."""
    if supply_id in state.applied_supply_ids:
        return state

    state = replace(state, applied_supply_ids=state.applied_supply_ids + (supply_id,))
    state = flash_supplies(state, [supply_id])

    if supply_id == SUP_INCREASE_MAX_HEALTH:
        max_hp = state.max_hp + MAX_HP_BONUS
        state = replace(state, max_hp=max_hp, hp=min(max_hp, state.hp + MAX_HP_BONUS))

    return state
