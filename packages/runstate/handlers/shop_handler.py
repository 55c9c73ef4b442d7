"""
Shop Handler - purchases and services at an open shop screen.

Handles both regular shops and the Pop-Up Vendor's event shop:
- ShopBuy: card -> deck, consumable -> inventory (cap 3), supply -> owned
- ShopRemoveCard: escalating removal cost, never removes the last deck card
- ShopRefresh: regular shops only, rebuilds the offers at the next refresh
  generation and keeps the bought log

Removal counters: event shops count removals on the screen itself; regular
shops share the run-wide ``shop_removals_used`` counter.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..actions import ShopBuy, ShopRefresh, ShopRemoveCard
from ..generation.shop import build_shop_node_state, refresh_cost, shop_removal_cost
from ..state.run import GameState, Screen
from ..state.screens import OfferKind, ShopNodeScreen
from .common import ReducerContext, add_card_to_deck, add_supply, handles, has_consumable_room, remove_card_from_deck

logger = logging.getLogger(__name__)


def _open_shop(state: GameState) -> Optional[ShopNodeScreen]:
    if state.screen != Screen.NODE or not isinstance(state.node_screen, ShopNodeScreen):
        return None
    return state.node_screen


def current_removal_cost(state: GameState, shop: ShopNodeScreen, ctx: ReducerContext) -> int:
    return shop_removal_cost(
        shop,
        state.shop_removals_used,
        state.current_supply_ids,
        base=ctx.config.removal_base_cost,
        step=ctx.config.removal_cost_step,
    )


def current_refresh_cost(shop: ShopNodeScreen, ctx: ReducerContext) -> int:
    return refresh_cost(shop.refreshes_used, base=ctx.config.refresh_base_cost, step=ctx.config.refresh_cost_step)


# ============================================================================
# PURCHASES
# ============================================================================

@handles(ShopBuy)
def shop_buy(state: GameState, action: ShopBuy, ctx: ReducerContext) -> GameState:
    shop = _open_shop(state)
    if shop is None:
        return state
    if action.kind == OfferKind.CONSUMABLE and not has_consumable_room(state, ctx):
        return state

    offer = shop.find_offer(action.kind, action.item_id)
    if offer is None or state.gold < offer.price or shop.is_bought(action.kind, action.item_id):
        return state

    shop = replace(shop, bought=shop.bought + ((action.kind, action.item_id),))
    state = replace(state, gold=state.gold - offer.price, node_screen=shop)

    if action.kind == OfferKind.CARD:
        state = add_card_to_deck(state, offer.item_id)
    elif action.kind == OfferKind.CONSUMABLE:
        state = replace(state, consumables=state.consumables + (offer.item_id,))
    else:
        state = add_supply(state, offer.item_id)

    logger.debug(f"Bought {action.kind.value} {offer.item_id} for {offer.price}")
    return state


# ============================================================================
# SERVICES
# ============================================================================

@handles(ShopRemoveCard)
def shop_remove_card(state: GameState, action: ShopRemoveCard, ctx: ReducerContext) -> GameState:
    shop = _open_shop(state)
    if shop is None:
        return state

    cost = current_removal_cost(state, shop, ctx)
    if state.gold < cost or action.card_id not in state.deck or len(state.deck) <= 1:
        return state

    state = remove_card_from_deck(state, action.card_id)
    state = replace(state, gold=state.gold - cost)

    if shop.event_shop:
        shop = replace(shop, removals_used=shop.removals_used + 1)
    else:
        used = state.shop_removals_used + 1
        state = replace(state, shop_removals_used=used)
        shop = replace(shop, removals_used=used)
    return replace(state, node_screen=shop)


@handles(ShopRefresh)
def shop_refresh(state: GameState, action: ShopRefresh, ctx: ReducerContext) -> GameState:
    shop = _open_shop(state)
    if shop is None or shop.event_shop:
        return state

    cost = current_refresh_cost(shop, ctx)
    if state.gold < cost:
        return state

    refreshed = build_shop_node_state(
        state.seed,
        shop.node_id,
        ctx.catalog,
        owned_supply_ids=state.current_supply_ids,
        refresh_gen=shop.refreshes_used + 1,
        removals_used=shop.removals_used,
    )
    refreshed = replace(refreshed, bought=shop.bought)
    return replace(state, gold=state.gold - cost, node_screen=refreshed)
