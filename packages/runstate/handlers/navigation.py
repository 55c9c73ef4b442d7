"""
Navigation Handler - run lifecycle and moving between nodes.

Actions:
- NewRun / LoadState: build or accept a whole snapshot
- OpenSetup / CompleteSetup: the one-time loadout gate
- OpenNode: restore a cached node screen or build a fresh one by node type
- SetCurrentNode / CloseNode: cache the open screen before leaving it

Opening or moving to any node other than a pending reward's node forfeits the
reward and locks that node.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..actions import CloseNode, CompleteSetup, LoadState, NewRun, OpenNode, OpenSetup, SetCurrentNode
from ..content.cards import STARTER_DECK
from ..generation.map import NodeType, generate_map
from ..generation.shop import build_rest_node_state, build_shop_node_state
from ..state.rng import make_rng, make_scoped_rng, random_seed
from ..state.run import GameState, Screen
from ..state.screens import EventNodeScreen, NodeScreen, PlainNodeScreen, is_valid_event_screen
from .common import ReducerContext, add_supply, cache_current_screen, handles, lock_reward_on_move

logger = logging.getLogger(__name__)


# ============================================================================
# RUN LIFECYCLE
# ============================================================================

@handles(NewRun)
def new_run(state: GameState, action: NewRun, ctx: ReducerContext) -> GameState:
    config = ctx.config
    seed = action.seed if action.seed is not None else random_seed(config.random_seed_limit)
    run_map = generate_map(seed, make_rng(seed))
    logger.info(f"New run: seed={seed}")
    return GameState(
        screen=Screen.OVERWORLD,
        seed=seed,
        gold=config.starting_gold,
        hp=config.starting_hp,
        max_hp=config.starting_hp,
        map=run_map,
        current_node_id=run_map.start_id,
        run_start_ms=ctx.now_ms(),
    )


@handles(LoadState)
def load_state(state: GameState, action: LoadState, ctx: ReducerContext) -> GameState:
    loaded = replace(
        action.state,
        teacher_unlocked=False,
        debug_skip_questions=False,
        debug_forced_event_id=None,
    )
    if loaded.screen != Screen.TITLE and loaded.run_start_ms is None:
        loaded = replace(loaded, run_start_ms=ctx.now_ms())
    logger.info(f"Loaded run: seed={loaded.seed} screen={loaded.screen.value}")
    return loaded


@handles(OpenSetup)
def open_setup(state: GameState, action: OpenSetup, ctx: ReducerContext) -> GameState:
    if state.screen != Screen.OVERWORLD or state.setup_done:
        return state
    return replace(state, screen=Screen.SETUP)


@handles(CompleteSetup)
def complete_setup(state: GameState, action: CompleteSetup, ctx: ReducerContext) -> GameState:
    if state.setup_done:
        return state

    setup = action.setup
    if not setup.deck_card_ids:
        setup = replace(setup, deck_card_ids=STARTER_DECK)
    supplies = tuple(dict.fromkeys(setup.supply_ids))
    setup = replace(setup, supply_ids=supplies)

    state = replace(
        state,
        screen=Screen.OVERWORLD,
        setup_done=True,
        setup=setup,
        consumables=(setup.lunch_item_id,) if setup.lunch_item_id else (),
        reward=None,
        reward_node_id=None,
        current_supply_ids=(),
    )
    for supply_id in supplies:
        state = add_supply(state, supply_id)
    return state


# ============================================================================
# NODE SCREENS
# ============================================================================

def choose_event_id(state: GameState, node_id: str, ctx: ReducerContext) -> str:
    """Event for a fresh EVENT node: forced id if set, else seeded by node."""
    forced = state.debug_forced_event_id
    if forced and ctx.catalog.event(forced) is not None:
        return forced
    events = ctx.catalog.events
    rng = make_scoped_rng(state.seed, node_id)
    return events[int(rng() * len(events))].id


def build_event_screen(node_id: str, event_id: str) -> EventNodeScreen:
    return EventNodeScreen(node_id=node_id, event_id=event_id)


def build_node_screen(state: GameState, node_id: str, node_type: NodeType, ctx: ReducerContext) -> NodeScreen:
    if node_type == NodeType.SHOP:
        return build_shop_node_state(
            state.seed,
            node_id,
            ctx.catalog,
            owned_supply_ids=state.current_supply_ids,
            refresh_gen=0,
            removals_used=state.shop_removals_used,
        )
    if node_type == NodeType.REST:
        return build_rest_node_state(node_id)
    if node_type == NodeType.EVENT:
        return build_event_screen(node_id, choose_event_id(state, node_id, ctx))
    return PlainNodeScreen(node_id=node_id, node_type=node_type)


def resolve_node_screen(state: GameState, node_id: str, node_type: NodeType, ctx: ReducerContext) -> NodeScreen:
    cached: Optional[NodeScreen] = state.node_screen_cache.get(node_id)
    if cached is None:
        return build_node_screen(state, node_id, node_type, ctx)

    if node_type == NodeType.EVENT:
        forced = state.debug_forced_event_id
        if forced and ctx.catalog.event(forced) is not None:
            return build_event_screen(node_id, forced)
        if not is_valid_event_screen(cached):
            logger.warning(f"Rebuilding malformed cached event screen for {node_id}")
            return build_node_screen(state, node_id, node_type, ctx)
    return cached


@handles(OpenNode)
def open_node(state: GameState, action: OpenNode, ctx: ReducerContext) -> GameState:
    if state.map is None:
        return state
    node = state.map.get(action.node_id)
    if node is None:
        return state

    state = lock_reward_on_move(state, node.id)
    screen = resolve_node_screen(state, node.id, node.type, ctx)
    state = replace(state, screen=Screen.NODE, current_node_id=node.id, node_screen=screen)
    if node.type == NodeType.EVENT and state.debug_forced_event_id is not None:
        state = replace(state, debug_forced_event_id=None)
    logger.debug(f"Opened node {node.id} ({node.type.value})")
    return state


@handles(SetCurrentNode)
def set_current_node(state: GameState, action: SetCurrentNode, ctx: ReducerContext) -> GameState:
    state = lock_reward_on_move(state, action.node_id)
    state = cache_current_screen(state)
    return replace(
        state,
        current_node_id=action.node_id,
        screen=Screen.OVERWORLD,
        node_screen=None,
        battle=None,
    )


@handles(CloseNode)
def close_node(state: GameState, action: CloseNode, ctx: ReducerContext) -> GameState:
    if state.screen != Screen.NODE:
        return state
    state = cache_current_screen(state)
    return replace(state, screen=Screen.OVERWORLD, node_screen=None)
