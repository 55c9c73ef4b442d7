"""
Hallway Shortcut - press-your-luck lockers.

Entering shuffles six lockers with a play-counter-salted seed, so every attempt
in the same run reshuffles. Lockers are opened (revealed) one at a time and then
collected:

- gold / heal / event_supply apply immediately
- lose_gold / damage first ask a question; a correct answer negates the penalty
- ambush launches a real battle with rewards skipped; anything already
  collected stays applied whatever the battle's outcome

Leaving is refused while an opened ambush is still uncollected.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

from ..content.supplies import SUP_BLOCK_PERSIST
from ..generation.encounters import select_encounter
from ..generation.questions import difficulty_for_depth, get_question
from ..state.rng import make_scoped_rng, shuffle
from ..state.run import AnswerSource, GameState
from ..state.screens import (
    EventNodeScreen,
    EventStep,
    HallwayLocker,
    HallwayQuiz,
    HallwayState,
    LockerKind,
)
from .combat import launch_battle
from .common import ReducerContext, add_supply, gain_gold, heal, log_wrong_answer, lose_gold, take_damage

logger = logging.getLogger(__name__)

HALLWAY_LOCKERS = (
    HallwayLocker(LockerKind.GOLD, amount=40),
    HallwayLocker(LockerKind.HEAL, amount=15),
    HallwayLocker(LockerKind.EVENT_SUPPLY, supply_id=SUP_BLOCK_PERSIST),
    HallwayLocker(LockerKind.LOSE_GOLD, amount=40),
    HallwayLocker(LockerKind.DAMAGE, amount=15),
    HallwayLocker(LockerKind.AMBUSH),
)

# Gold handed out instead of a supply the player already owns
DUPLICATE_SUPPLY_GOLD = 40

LOCKER_CHOICE_PREFIX = "locker_"


def _show(state: GameState, screen: EventNodeScreen, hallway: Optional[HallwayState] = None, text: str = "") -> GameState:
    if hallway is not None:
        screen = replace(screen, hallway=hallway)
    return replace(state, node_screen=replace(screen, result_text=text))


# ============================================================================
# ENTRY
# ============================================================================

def handle_intro(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Hallway Shortcut: enter (press your luck) or leave."""
    if choice_id == "leave":
        return replace(state, node_screen=screen.to_result("You decide not to risk it and stick to the main path."))

    if choice_id == "enter":
        plays = state.hallway_plays + 1
        rng = make_scoped_rng(state.seed, f"event:hallway:{screen.node_id}:{plays}")
        hallway = HallwayState(lockers=tuple(shuffle(rng, HALLWAY_LOCKERS)))
        entered = screen.to_step(
            EventStep.HALLWAY,
            None,
            hallway=hallway,
            result_text="Six lockers. Open one, then decide whether to take what's inside.",
        )
        return replace(state, hallway_plays=plays, node_screen=entered)

    return state


# ============================================================================
# HALLWAY STEP
# ============================================================================

def handle_hallway_choice(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    hallway = screen.hallway
    if hallway is None:
        return state

    if choice_id in ("clear", "hallway_clear"):
        return _show(state, screen, replace(hallway, pending_index=None, quiz=None))

    if choice_id == "exit":
        if hallway.has_uncollected_ambush:
            return _show(state, screen, text="Something is still stirring in an open locker. Deal with it first.")
        summary = hallway.tally.summary()
        return replace(state, node_screen=screen.to_result(f"You slip back to the main hallway with {summary}."))

    if choice_id in ("collect", "hallway_collect"):
        return _collect_pending(state, screen, hallway, ctx)

    if choice_id.startswith(LOCKER_CHOICE_PREFIX):
        try:
            index = int(choice_id[len(LOCKER_CHOICE_PREFIX):])
        except ValueError:
            return state
        return _open_locker(state, screen, hallway, index)

    return state


def _open_locker(state: GameState, screen: EventNodeScreen, hallway: HallwayState, index: int) -> GameState:
    if not 0 <= index < len(hallway.lockers):
        return state
    locker = hallway.lockers[index]
    if locker.collected:
        return state

    if not locker.opened:
        hallway = hallway.with_locker(index, opened=True)
    quiz = hallway.quiz if hallway.quiz is not None and hallway.quiz.locker_index == index else None
    hallway = replace(hallway, pending_index=index, quiz=quiz)
    return _show(state, screen, hallway, text=f"Locker {index + 1}: {locker.kind.value.replace('_', ' ')}.")


def _collect_pending(state: GameState, screen: EventNodeScreen, hallway: HallwayState, ctx: ReducerContext) -> GameState:
    index = hallway.pending_index
    locker = hallway.pending
    if locker is None or locker.collected:
        return state
    tally = hallway.tally

    if locker.kind.is_penalty:
        if hallway.quiz is not None and hallway.quiz.locker_index == index:
            return state
        rng = make_scoped_rng(state.seed, f"event:hallway:quiz:{screen.node_id}:{index}:{locker.kind.value}")
        question = get_question(rng, difficulty_for_depth(state.current_depth()))
        quiz = HallwayQuiz(locker_index=index, kind=locker.kind, amount=locker.amount, question=question)
        return _show(state, screen, replace(hallway, quiz=quiz), text="Answer the question to negate the penalty.")

    if locker.kind == LockerKind.GOLD:
        state = gain_gold(state, locker.amount)
        tally = replace(tally, gold_gained=tally.gold_gained + locker.amount)
        text = f"+{locker.amount} gold."

    elif locker.kind == LockerKind.HEAL:
        state, healed = heal(state, locker.amount)
        tally = replace(tally, healed=tally.healed + healed)
        text = f"Healed {healed} HP."

    elif locker.kind == LockerKind.EVENT_SUPPLY:
        if state.has_supply(locker.supply_id):
            state = gain_gold(state, DUPLICATE_SUPPLY_GOLD)
            tally = replace(tally, gold_gained=tally.gold_gained + DUPLICATE_SUPPLY_GOLD)
            text = f"You already have one. +{DUPLICATE_SUPPLY_GOLD} gold instead."
        else:
            state = add_supply(state, locker.supply_id)
            tally = replace(tally, supply_ids=tally.supply_ids + (locker.supply_id,))
            text = f"Gained {ctx.catalog.supply_name(locker.supply_id)}."

    else:
        return _spring_ambush(state, screen, hallway, index, ctx)

    hallway = replace(hallway.with_locker(index, collected=True), pending_index=None, quiz=None, tally=tally)
    return _show(state, screen, hallway, text=text)


def _spring_ambush(
    state: GameState, screen: EventNodeScreen, hallway: HallwayState, index: int, ctx: ReducerContext
) -> GameState:
    hallway = replace(hallway.with_locker(index, collected=True), pending_index=None, quiz=None)
    node_id = screen.node_id
    try:
        rng = make_scoped_rng(state.seed, f"event:hallway:ambush:{node_id}:{index}")
        depth = state.current_depth()
        encounter, used = select_encounter(
            rng,
            ctx.catalog,
            depth,
            state.used_encounter_ids,
            attempts=ctx.config.encounter_repick_attempts,
        )
        battled = launch_battle(
            state,
            ctx,
            rng,
            encounter,
            difficulty=difficulty_for_depth(depth),
            skip_rewards=True,
        )
    except Exception:
        logger.exception(f"Hallway ambush at {node_id} failed to start")
        return _show(state, screen, hallway, text="The shadows stir... but nothing happens.")
    return replace(battled, used_encounter_ids=used, current_node_id=node_id)


# ============================================================================
# QUIZ ANSWER
# ============================================================================

def handle_answer(state: GameState, screen: EventNodeScreen, answer: Any, ctx: ReducerContext) -> GameState:
    hallway = screen.hallway
    if screen.step != EventStep.HALLWAY or hallway is None:
        return state
    index = hallway.pending_index
    locker = hallway.pending
    if locker is None or locker.collected:
        return state

    quiz = hallway.quiz
    if quiz is None or quiz.locker_index != index:
        return _show(state, screen, replace(hallway, pending_index=None, quiz=None))

    tally = hallway.tally
    if quiz.question.check(answer):
        hallway = hallway.with_locker(index, collected=True, negated=True)
        text = "✅ Negated. The penalty fizzles out."
    else:
        state = log_wrong_answer(
            state,
            ctx,
            AnswerSource.HALLWAY,
            location=f"Floor {state.current_depth(default=0)} • Hallway Shortcut",
            prompt=quiz.question.prompt,
            expected=quiz.question.display_answer,
            given=answer,
        )
        if quiz.kind == LockerKind.LOSE_GOLD:
            state, lost = lose_gold(state, quiz.amount)
            tally = replace(tally, gold_lost=tally.gold_lost + lost)
            text = f"❌ Incorrect. You lose {lost} gold."
        else:
            state, taken = take_damage(state, quiz.amount)
            tally = replace(tally, damage_taken=tally.damage_taken + taken)
            text = f"❌ Incorrect. You take {taken} damage."
        hallway = hallway.with_locker(index, collected=True)

    hallway = replace(hallway, pending_index=None, quiz=None, tally=tally)
    return _show(state, screen, hallway, text=text)
