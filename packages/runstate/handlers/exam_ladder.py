"""
Exam Week Ladder - a five-question gauntlet.

Each correct answer climbs one rung and stops at a feedback step: continue to
the next rung's question or cash out. One wrong answer ends the climb at the
current tier. Rung questions are seeded per (node, rung) so a cached ladder
always asks the same thing.

Reward tiers by correct answers:
    0: nothing
    1: 30 gold
    2: 60 gold
    3: choose 1 of 2 event-only consumables (60 gold if the inventory is full)
    4: choose 1 of 3 event-only cards
    5: Perfect Record (100 gold if already owned)
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from ..content.supplies import SUP_NO_NEGATIVE_CARDS
from ..generation.questions import Question, difficulty_for_depth, get_question
from ..state.rng import make_scoped_rng, pick_unique
from ..state.run import AnswerSource, GameState
from ..state.screens import (
    CardPrompt,
    ConsumablePrompt,
    EventNodeScreen,
    EventStep,
    GatePrompt,
    LadderFeedbackPrompt,
    LadderState,
    SupplyPrompt,
)
from .common import ReducerContext, gain_gold, has_consumable_room, log_wrong_answer

LADDER_RUNGS = 5
RUNG_SALT = 0xE6A7D3
CONSUMABLE_TIER_SALT = 0xC0A51A
CARD_TIER_SALT = 0xC4A4D

TIER_GOLD = {1: 30, 2: 60}
FALLBACK_GOLD = 60
DUPLICATE_SUPPLY_GOLD = 100


def rung_question(state: GameState, node_id: str, rung: int, difficulty: int) -> Question:
    rng = make_scoped_rng(state.seed, f"event:exam_ladder:{node_id}:r{rung}", RUNG_SALT)
    return get_question(rng, difficulty)


def _rung_gate(question: Question, rung: int) -> GatePrompt:
    return GatePrompt(
        question=question,
        text=f"Rung {rung}/{LADDER_RUNGS}. Answer correctly to climb.",
        wrong_damage=0,
    )


def _result(state: GameState, screen: EventNodeScreen, text: str) -> GameState:
    return replace(state, node_screen=screen.to_result(text))


# ============================================================================
# CHOICES
# ============================================================================

def handle_intro(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Exam Week Ladder: start climbing or leave."""
    if choice_id == "leave":
        return _result(state, screen, "You back away from the chart. Maybe next semester.")

    if choice_id == "start":
        difficulty = difficulty_for_depth(state.current_depth())
        question = rung_question(state, screen.node_id, 1, difficulty)
        ladder = LadderState(correct=0, rung=1, difficulty=difficulty)
        return replace(state, node_screen=screen.to_step(EventStep.QUESTION_GATE, _rung_gate(question, 1), ladder=ladder))

    return state


def handle_feedback_choice(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    ladder = screen.ladder
    prompt = screen.prompt
    if ladder is None or not isinstance(prompt, LadderFeedbackPrompt):
        return state

    if choice_id == "ladder_cashout":
        return end_with_reward(state, screen, ladder.correct, "🛑 You decide to cash out.", ctx)

    if choice_id == "ladder_continue":
        rung = ladder.correct + 1
        return replace(
            state,
            node_screen=screen.to_step(
                EventStep.QUESTION_GATE,
                _rung_gate(prompt.next_question, rung),
                ladder=replace(ladder, rung=rung),
            ),
        )

    return state


def handle_answer(state: GameState, screen: EventNodeScreen, answer: Any, ctx: ReducerContext) -> GameState:
    ladder = screen.ladder
    prompt = screen.prompt
    if ladder is None or not isinstance(prompt, GatePrompt):
        return state

    question = prompt.question
    if not question.check(answer):
        event = ctx.catalog.event(screen.event_id)
        title = event.title if event is not None else screen.event_id
        state = log_wrong_answer(
            state,
            ctx,
            AnswerSource.EVENT,
            location=f"Floor {state.current_depth(default=0)} • {title} • Rung {ladder.rung}",
            prompt=question.prompt,
            expected=question.display_answer,
            given=answer,
        )
        headline = f"❌ Incorrect. The answer was {question.display_answer}. Your climb ends on rung {ladder.correct}."
        return end_with_reward(state, screen, ladder.correct, headline, ctx)

    correct = ladder.correct + 1
    if correct >= LADDER_RUNGS:
        return end_with_reward(state, screen, LADDER_RUNGS, "🏆 You reach the top of the ladder!", ctx)

    next_question = rung_question(state, screen.node_id, correct + 1, ladder.difficulty)
    feedback = LadderFeedbackPrompt(
        next_question=next_question,
        text=f"✅ Correct! Rung {correct}/{LADDER_RUNGS} cleared. Keep climbing or cash out?",
    )
    return replace(
        state,
        node_screen=screen.to_step(EventStep.EXAM_LADDER_FEEDBACK, feedback, ladder=replace(ladder, correct=correct)),
    )


# ============================================================================
# REWARDS
# ============================================================================

def end_with_reward(state: GameState, screen: EventNodeScreen, correct: int, headline: str, ctx: ReducerContext) -> GameState:
    node_id = screen.node_id
    screen = replace(screen, ladder=replace(screen.ladder, correct=correct) if screen.ladder else None)

    if correct <= 0:
        return _result(state, screen, f"{headline}\n\nNo reward this time.")

    if correct in TIER_GOLD:
        gold = TIER_GOLD[correct]
        return _result(gain_gold(state, gold), screen, f"{headline}\n\nGained {gold} gold.")

    if correct == 3:
        pool = [c.id for c in ctx.catalog.consumable_pool(event_only=True)]
        if has_consumable_room(state, ctx) and pool:
            rng = make_scoped_rng(state.seed, f"event:exam_ladder:{node_id}:reward:c3", CONSUMABLE_TIER_SALT)
            offer = ConsumablePrompt(
                consumable_ids=tuple(pick_unique(rng, pool, 2)),
                text=f"{headline}\n\nChoose a consumable.",
            )
            return replace(state, node_screen=screen.to_step(EventStep.CONSUMABLE_PICK, offer))
        return _result(gain_gold(state, FALLBACK_GOLD), screen, f"{headline}\n\nNo room for a consumable. Gained {FALLBACK_GOLD} gold.")

    if correct == 4:
        pool = [c.id for c in ctx.catalog.card_pool(event_only=True)]
        if pool:
            rng = make_scoped_rng(state.seed, f"event:exam_ladder:{node_id}:reward:c4", CARD_TIER_SALT)
            offer = CardPrompt(card_ids=tuple(pick_unique(rng, pool, 3)), text=f"{headline}\n\nChoose a card.")
            return replace(state, node_screen=screen.to_step(EventStep.CARD_PICK, offer))
        return _result(gain_gold(state, FALLBACK_GOLD), screen, f"{headline}\n\nGained {FALLBACK_GOLD} gold.")

    if state.has_supply(SUP_NO_NEGATIVE_CARDS):
        state = gain_gold(state, DUPLICATE_SUPPLY_GOLD)
        return _result(state, screen, f"{headline}\n\nYou already have a Perfect Record. Gained {DUPLICATE_SUPPLY_GOLD} gold.")
    offer = SupplyPrompt(supply_ids=(SUP_NO_NEGATIVE_CARDS,), text=f"{headline}\n\nClaim your prize.")
    return replace(state, node_screen=screen.to_step(EventStep.SUPPLY_PICK, offer))
