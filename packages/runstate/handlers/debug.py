"""
Debug Handler - teacher-mode tools for exercising a run by hand.

None of these actions touch the RNG streams of normal play except
FORCE_BATTLE, which uses a fixed seed so forced fights are repeatable.
TEACHER_UNLOCK only succeeds when the engine config enables teacher mode.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..actions import (
    DebugAddAllConsumables,
    DebugAddCardToDeck,
    DebugAddCardToHand,
    DebugClearConsumables,
    DebugForceBattle,
    DebugForceEvent,
    DebugGiveGold,
    DebugHealFull,
    DebugSetForcedEvent,
    DebugSetSupply,
    DebugToggleSkipQuestions,
    TeacherLock,
    TeacherUnlock,
)
from ..generation.map import NodeType
from ..state.rng import make_rng
from ..state.run import GameState, Screen
from ..state.screens import EventNodeScreen
from .combat import launch_battle
from .common import ReducerContext, add_card_to_deck, add_supply, handles, lock_reward_on_move

logger = logging.getLogger(__name__)

FORCED_BATTLE_SEED = 12345
CHALLENGE_PREFIX = "ch_"


# ============================================================================
# TEACHER MODE
# ============================================================================

@handles(TeacherUnlock)
def teacher_unlock(state: GameState, action: TeacherUnlock, ctx: ReducerContext) -> GameState:
    if not ctx.config.teacher_mode_enabled:
        logger.warning("Teacher mode is disabled in this build")
        return state
    return replace(state, teacher_unlocked=True)


@handles(TeacherLock)
def teacher_lock(state: GameState, action: TeacherLock, ctx: ReducerContext) -> GameState:
    return replace(state, teacher_unlocked=False)


# ============================================================================
# INVENTORY / DECK / STATS
# ============================================================================

@handles(DebugAddAllConsumables)
def add_all_consumables(state: GameState, action: DebugAddAllConsumables, ctx: ReducerContext) -> GameState:
    # Ignores the inventory cap on purpose; every consumable once
    owned = list(state.consumables)
    for cid in ctx.catalog.consumables:
        if cid not in owned:
            owned.append(cid)
    return replace(state, consumables=tuple(owned))


@handles(DebugClearConsumables)
def clear_consumables(state: GameState, action: DebugClearConsumables, ctx: ReducerContext) -> GameState:
    return replace(state, consumables=())


@handles(DebugSetSupply)
def set_supply(state: GameState, action: DebugSetSupply, ctx: ReducerContext) -> GameState:
    if state.setup is None or action.supply_id not in ctx.catalog.supplies:
        return state
    return add_supply(state, action.supply_id)


@handles(DebugAddCardToDeck)
def add_card_to_deck_debug(state: GameState, action: DebugAddCardToDeck, ctx: ReducerContext) -> GameState:
    if state.setup is None or action.card_id not in ctx.catalog.cards:
        return state
    return add_card_to_deck(state, action.card_id)


@handles(DebugAddCardToHand)
def add_card_to_hand(state: GameState, action: DebugAddCardToHand, ctx: ReducerContext) -> GameState:
    if state.battle is None or action.card_id not in ctx.catalog.cards:
        return state
    battle = replace(state.battle, hand=state.battle.hand + (action.card_id,))
    return replace(state, battle=battle)


@handles(DebugGiveGold)
def give_gold(state: GameState, action: DebugGiveGold, ctx: ReducerContext) -> GameState:
    return replace(state, gold=max(0, state.gold + action.amount))


@handles(DebugHealFull)
def heal_full(state: GameState, action: DebugHealFull, ctx: ReducerContext) -> GameState:
    state = replace(state, hp=state.max_hp)
    if state.battle is not None:
        state = replace(state, battle=replace(state.battle, player_hp=state.battle.player_max_hp))
    return state


@handles(DebugToggleSkipQuestions)
def toggle_skip_questions(state: GameState, action: DebugToggleSkipQuestions, ctx: ReducerContext) -> GameState:
    return replace(state, debug_skip_questions=not state.debug_skip_questions)


# ============================================================================
# FORCED CONTENT
# ============================================================================

@handles(DebugForceBattle)
def force_battle(state: GameState, action: DebugForceBattle, ctx: ReducerContext) -> GameState:
    if state.screen != Screen.OVERWORLD or state.setup is None:
        return state
    encounter = ctx.catalog.find_encounter(action.encounter_id)
    if encounter is None:
        logger.warning(f"Unknown encounter {action.encounter_id!r}")
        return state

    is_boss = encounter.id == ctx.catalog.boss.id
    if action.is_challenge is not None:
        is_challenge = action.is_challenge
    else:
        is_challenge = encounter.id.startswith(CHALLENGE_PREFIX)
    if action.difficulty is not None:
        difficulty = action.difficulty
    else:
        difficulty = 3 if is_boss else 2 if is_challenge else 1

    return launch_battle(
        state,
        ctx,
        make_rng(FORCED_BATTLE_SEED),
        encounter,
        difficulty=difficulty,
        is_boss=is_boss,
        is_challenge=is_challenge,
    )


@handles(DebugSetForcedEvent)
def set_forced_event(state: GameState, action: DebugSetForcedEvent, ctx: ReducerContext) -> GameState:
    return replace(state, debug_forced_event_id=action.event_id or None)


@handles(DebugForceEvent)
def force_event(state: GameState, action: DebugForceEvent, ctx: ReducerContext) -> GameState:
    """Jump straight into ``event_id`` on the nearest EVENT node at or past the current depth."""
    if state.map is None or ctx.catalog.event(action.event_id) is None:
        return state
    event_nodes = sorted(
        (n for n in state.map.nodes.values() if n.type == NodeType.EVENT),
        key=lambda n: (n.depth, n.id),
    )
    if not event_nodes:
        return state

    depth = state.current_depth(default=0)
    node = next((n for n in event_nodes if n.depth >= depth), event_nodes[0])

    state = lock_reward_on_move(state, node.id)
    screen = EventNodeScreen(node_id=node.id, event_id=action.event_id)
    logger.info(f"Forced event {action.event_id} at {node.id}")
    return replace(
        state,
        screen=Screen.NODE,
        current_node_id=node.id,
        node_screen=screen,
        debug_forced_event_id=None,
    )
