"""
Rest Handler - heal or upgrade once per rest node.

The two options are mutually exclusive per visit unless Comfy Pillow is owned,
in which case both can be taken in either order.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..actions import RestHeal, RestUpgrade
from ..content.supplies import SUP_UPGRADE_REST
from ..generation.shop import rest_heal_amount
from ..state.run import GameState, Screen
from ..state.screens import RestNodeScreen
from .common import ReducerContext, handles, heal, upgrade_card_in_deck


def _open_rest(state: GameState) -> Optional[RestNodeScreen]:
    if state.screen != Screen.NODE or not isinstance(state.node_screen, RestNodeScreen):
        return None
    return state.node_screen


@handles(RestHeal)
def rest_heal(state: GameState, action: RestHeal, ctx: ReducerContext) -> GameState:
    rest = _open_rest(state)
    if rest is None or rest.did_heal:
        return state
    if rest.did_upgrade and not state.has_supply(SUP_UPGRADE_REST):
        return state

    state, _ = heal(state, rest_heal_amount(state.max_hp, ctx.config.rest_heal_fraction))
    return replace(state, node_screen=replace(rest, did_heal=True))


@handles(RestUpgrade)
def rest_upgrade(state: GameState, action: RestUpgrade, ctx: ReducerContext) -> GameState:
    rest = _open_rest(state)
    if rest is None or rest.did_upgrade:
        return state
    if rest.did_heal and not state.has_supply(SUP_UPGRADE_REST):
        return state
    if action.card_id not in state.deck or not ctx.catalog.is_upgradable(action.card_id):
        return state

    state = upgrade_card_in_deck(state, action.card_id, ctx)
    return replace(state, node_screen=replace(rest, did_upgrade=True))
