"""
Inventory Handler - consumables outside the reward and shop flows.

In battle a consumable is resolved by the battle module and only leaves the
inventory when the module reports it was used. Out of battle only Water works.
The Trash Bin is spent to remove a deck card outside battle.
"""

from __future__ import annotations

from dataclasses import replace

from ..actions import DiscardConsumable, TrashBinRemoveCard, UseConsumable
from ..content.consumables import CON_TRASH_BIN, CON_WATER
from ..state.rng import make_scoped_rng
from ..state.run import GameState, Screen
from .common import ReducerContext, handles, remove_card_from_deck, remove_consumable


@handles(UseConsumable)
def use_consumable(state: GameState, action: UseConsumable, ctx: ReducerContext) -> GameState:
    cid = action.consumable_id
    if cid not in state.consumables:
        return state

    if state.screen == Screen.BATTLE and state.battle is not None:
        battle = state.battle
        rng = make_scoped_rng(state.seed, f"use-consumable:{state.current_node_id}:{battle.turn}:{cid}")
        battle, used = ctx.battle.use_consumable(rng, battle, cid, action.target_index)
        if not used:
            return state
        state = remove_consumable(state, cid)
        return replace(state, battle=battle, hp=battle.player_hp, max_hp=battle.player_max_hp)

    if cid != CON_WATER:
        return state
    gain = ctx.config.water_max_hp_gain
    state = remove_consumable(state, cid)
    return replace(state, max_hp=state.max_hp + gain, hp=state.hp + gain)


@handles(DiscardConsumable)
def discard_consumable(state: GameState, action: DiscardConsumable, ctx: ReducerContext) -> GameState:
    if action.consumable_id not in state.consumables:
        return state
    return remove_consumable(state, action.consumable_id)


@handles(TrashBinRemoveCard)
def trash_bin_remove_card(state: GameState, action: TrashBinRemoveCard, ctx: ReducerContext) -> GameState:
    if state.screen == Screen.BATTLE or CON_TRASH_BIN not in state.consumables:
        return state
    if action.card_id not in state.deck or len(state.deck) <= 1:
        return state
    state = remove_card_from_deck(state, action.card_id)
    return remove_consumable(state, CON_TRASH_BIN)
