"""
Reward Handler - post-battle loot.

Every claim is guarded by its own flag so repeating an action is a no-op:
the card pick (confirm or skip), the gold, the consumable and the supply offer
are claimed independently. The consumable claim respects the inventory cap and
refuses silently when it is full.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..actions import (
    ClaimReward,
    OpenReward,
    RewardClaimConsumable,
    RewardClaimGold,
    RewardClaimSupply,
    RewardConfirmCard,
    RewardSelectCard,
    RewardSkipAll,
    RewardSkipCards,
    RewardSkipExtras,
)
from ..content.supplies import SUP_GOLD_BOOST
from ..effects.supplies import flash_supplies
from ..state.run import GameState, RewardState, Screen
from .common import ReducerContext, add_card_to_deck, add_supply, gain_gold, handles, has_consumable_room


def _active_reward(state: GameState) -> Optional[RewardState]:
    if state.screen != Screen.REWARD:
        return None
    return state.reward


def _with_reward(state: GameState, reward: RewardState, **changes) -> GameState:
    return replace(state, reward=replace(reward, **changes))


@handles(OpenReward)
def open_reward(state: GameState, action: OpenReward, ctx: ReducerContext) -> GameState:
    if state.reward is None or state.reward_node_id != state.current_node_id:
        return state
    return replace(state, screen=Screen.REWARD)


@handles(ClaimReward)
def claim_reward(state: GameState, action: ClaimReward, ctx: ReducerContext) -> GameState:
    """Leave the reward screen; unclaimed loot stays until the player moves on."""
    if state.screen != Screen.REWARD:
        return state
    return replace(state, screen=Screen.OVERWORLD)


# ============================================================================
# CARDS
# ============================================================================

@handles(RewardSelectCard)
def reward_select_card(state: GameState, action: RewardSelectCard, ctx: ReducerContext) -> GameState:
    reward = _active_reward(state)
    if reward is None or reward.card_confirmed or action.card_id not in reward.card_offer_ids:
        return state
    return _with_reward(state, reward, selected_card_id=action.card_id)


@handles(RewardConfirmCard)
def reward_confirm_card(state: GameState, action: RewardConfirmCard, ctx: ReducerContext) -> GameState:
    reward = _active_reward(state)
    if reward is None or reward.card_confirmed or reward.selected_card_id is None:
        return state
    state = add_card_to_deck(state, reward.selected_card_id)
    return _with_reward(state, reward, card_confirmed=True)


@handles(RewardSkipCards)
def reward_skip_cards(state: GameState, action: RewardSkipCards, ctx: ReducerContext) -> GameState:
    reward = _active_reward(state)
    if reward is None or reward.card_confirmed:
        return state
    return _with_reward(state, reward, selected_card_id=None, card_confirmed=True)


# ============================================================================
# GOLD / CONSUMABLE / SUPPLY
# ============================================================================

@handles(RewardClaimGold)
def reward_claim_gold(state: GameState, action: RewardClaimGold, ctx: ReducerContext) -> GameState:
    reward = _active_reward(state)
    if reward is None or reward.gold_claimed:
        return state
    state = gain_gold(state, reward.gold)
    if reward.gold > 0 and state.has_supply(SUP_GOLD_BOOST):
        state = flash_supplies(state, [SUP_GOLD_BOOST])
    return _with_reward(state, reward, gold_claimed=True)


@handles(RewardClaimConsumable)
def reward_claim_consumable(state: GameState, action: RewardClaimConsumable, ctx: ReducerContext) -> GameState:
    reward = _active_reward(state)
    if reward is None or reward.consumable_claimed or reward.consumable_offer_id is None:
        return state
    if not has_consumable_room(state, ctx):
        return state
    state = replace(state, consumables=state.consumables + (reward.consumable_offer_id,))
    return _with_reward(state, reward, consumable_claimed=True)


@handles(RewardClaimSupply)
def reward_claim_supply(state: GameState, action: RewardClaimSupply, ctx: ReducerContext) -> GameState:
    reward = _active_reward(state)
    if reward is None or reward.supply_offer_id is None or state.has_supply(reward.supply_offer_id):
        return state
    supply_id = reward.supply_offer_id
    state = _with_reward(state, reward, supply_offer_id=None)
    return add_supply(state, supply_id)


@handles(RewardSkipExtras)
def reward_skip_extras(state: GameState, action: RewardSkipExtras, ctx: ReducerContext) -> GameState:
    reward = _active_reward(state)
    if reward is None or (reward.gold_claimed and reward.consumable_claimed):
        return state
    return _with_reward(state, reward, gold_claimed=True, consumable_claimed=True)


@handles(RewardSkipAll)
def reward_skip_all(state: GameState, action: RewardSkipAll, ctx: ReducerContext) -> GameState:
    reward = _active_reward(state)
    if reward is None:
        return state
    return _with_reward(
        state,
        reward,
        selected_card_id=None,
        card_confirmed=True,
        gold_claimed=True,
        consumable_claimed=True,
        supply_offer_id=None,
    )
