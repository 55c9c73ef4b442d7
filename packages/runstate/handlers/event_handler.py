"""
Event Handler - narrative events and their branching protocols.

Each event is a small state machine on an EventNodeScreen. INTRO choices are
dispatched through EVENT_HANDLERS by event id; shared follow-up steps are
handled generically:

- UPGRADE_PICK: upgrade one deck card
- CARD_PICK: confirm a card (negatives are blocked by Perfect Record), with
  queued extra cards and an optional consumable claim afterwards
- CONSUMABLE_PICK: take one of the offered consumables
- CONSUMABLE_CLAIM: take any of the offered consumables, then ``claim_done``
- SUPPLY_PICK: take one supply
- QUESTION_GATE: the "answer or take damage" leave gate

Every choice re-checks its preconditions when it is dispatched. Choices that
add a permanent negative card always go through CARD_PICK so the deck never
changes without a confirmation. Events without a protocol resolve to an
explicit "unconfigured" RESULT.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Sequence

from ..actions import (
    EventChoose,
    EventGateAnswer,
    EventHallwayAnswer,
    EventPickCard,
    EventPickConsumable,
    EventPickSupply,
    EventPickUpgrade,
)
from ..content.consumables import CON_ABSENCE_NOTE, CON_ANSWER_KEY, CON_CHEAT_SHEET, CON_TRASH_BIN
from ..content.events import (
    EVENT_ATTENDANCE,
    EVENT_CHARGING_STATION,
    EVENT_CHEM_LAB,
    EVENT_DETENTION,
    EVENT_EXAM_LADDER,
    EVENT_HALLWAY_SHORTCUT,
    EVENT_HIDDEN_ENCOUNTER,
    EVENT_LIBRARY,
    EVENT_POISON_EXTRACTION,
    EVENT_POP_UP_VENDOR,
    EVENT_PRACTICE,
    EVENT_SUBSTITUTE,
    EVENT_VAULT,
    EVENT_VENDING_MACHINE,
    EVENT_WEIGHT_ROOM,
)
from ..content.supplies import (
    SUP_APPLY_POISON,
    SUP_ENERGY_CARRYOVER,
    SUP_GOLD_BOOST,
    SUP_MULTI_ATTACK_PLUS,
    SUP_NEGATIVE_DRAW_BURST,
    SUP_NO_NEGATIVE_CARDS,
    SUP_POISON_DOUBLE_DAMAGE,
    SUP_POISON_SPREADS,
    SUP_STRENGTH_TO_BLOCK,
)
from ..effects.supplies import flash_supplies
from ..generation.encounters import select_encounter
from ..generation.questions import difficulty_for_depth, get_question
from ..generation.shop import build_event_shop_node_state
from ..generation.weighted import pick_weighted, weight_by_rarity
from ..state.rng import make_scoped_rng, pick, pick_unique
from ..state.run import AnswerSource, GameState
from ..state.screens import (
    CardPrompt,
    ConsumableClaimPrompt,
    ConsumablePrompt,
    EventNodeScreen,
    EventStep,
    GatePrompt,
    SupplyPrompt,
    UpgradePrompt,
)
from . import exam_ladder, hallway
from .combat import launch_battle
from .common import (
    ReducerContext,
    add_card_to_deck,
    add_consumable,
    add_supply,
    current_event_screen,
    floor_label,
    gain_gold,
    handles,
    has_consumable_room,
    heal,
    is_dead,
    log_wrong_answer,
    lose_gold,
    remove_supply,
    take_damage,
    upgrade_card_in_deck,
)

logger = logging.getLogger(__name__)

EventProtocol = Callable[[GameState, EventNodeScreen, str, ReducerContext], GameState]


# ============================================================================
# CONSTANTS
# ============================================================================

UNCONFIGURED_TEXT = "Nothing happens... (unconfigured event)"
GATE_FALLBACK_TEXT = "You slip away, confused but unharmed."
GATE_WRONG_DAMAGE = 5
GATE_CORRECT_TEXT = "Correct. You slip out without a fuss."
GATE_WRONG_TEXT = "Wrong answer. You get out, but not cleanly."

VAULT_HEAL = 15
VAULT_LEAVE_DAMAGE = 15

VENDING_PRICE = 50
VENDING_SHAKE_DAMAGE = 10
VENDING_SHAKE_ITEMS = 2

LIBRARY_NAP_COST = 30
LIBRARY_NAP_HEAL = 10

DETENTION_BRIBE = 75

SUBSTITUTE_CHAOS_GOLD = 75

CHEM_LEAVE_DAMAGE = 5

CHARGING_PRICE = 150
CHARGING_RIP_DAMAGE = 15

PRACTICE_REPS_DAMAGE = 10
PRACTICE_STRATEGY_COST = 30
PRACTICE_SKIP_GOLD = 50

WEIGHT_BELT_PRICE = 75
WEIGHT_ROOM_DAMAGE = 20

POISON_ANTIDOTE_DAMAGE = 12

ATTENDANCE_NOTE_PRICE = 60
ATTENDANCE_APOLOGY_COST = 30
ATTENDANCE_APOLOGY_HEAL = 15
ATTENDANCE_FORGE_GOLD = 100
ATTENDANCE_LEAVE_DAMAGE = 5

VENDOR_MYSTERY_PRICE = 30

CHAOS_NEGATIVES = ("neg_curse", "neg_infestation_perm", "neg_radiation_perm", "neg_pop_quiz")
FORGE_NEGATIVES = ("neg_curse", "neg_pop_quiz", "neg_infestation_perm", "neg_radiation_perm")


# ============================================================================
# SCREEN HELPERS
# ============================================================================

def _join(*parts: str) -> str:
    return "\n\n".join(p for p in parts if p)


def _show(state: GameState, screen: EventNodeScreen) -> GameState:
    return replace(state, node_screen=screen)


def _result(state: GameState, screen: EventNodeScreen, text: str, **changes) -> GameState:
    return _show(state, screen.to_result(text, **changes))


def _card_pick(
    state: GameState,
    screen: EventNodeScreen,
    card_ids: Sequence[str],
    text: str = "",
    extra_card_ids: Sequence[str] = (),
    gold_gain: int = 0,
    result_text: str = "",
    then_claim: Sequence[str] = (),
) -> GameState:
    prompt = CardPrompt(
        card_ids=tuple(card_ids),
        text=text,
        result_text=result_text,
        extra_card_ids=tuple(extra_card_ids),
        gold_gain=gold_gain,
        then_claim_consumable_ids=tuple(then_claim),
    )
    return _show(state, screen.to_step(EventStep.CARD_PICK, prompt))


def _supply_pick(state: GameState, screen: EventNodeScreen, supply_id: str, text: str = "") -> GameState:
    return _show(state, screen.to_step(EventStep.SUPPLY_PICK, SupplyPrompt(supply_ids=(supply_id,), text=text)))


def _upgrade_pick(state: GameState, screen: EventNodeScreen, text: str = "") -> GameState:
    return _show(state, screen.to_step(EventStep.UPGRADE_PICK, UpgradePrompt(text=text)))


def _consumable_claim(state: GameState, screen: EventNodeScreen, ids: Iterable[str], text: str = "") -> GameState:
    prompt = ConsumableClaimPrompt(remaining_ids=tuple(ids), text=text)
    return _show(state, screen.to_step(EventStep.CONSUMABLE_CLAIM, prompt))


def _names(ctx: ReducerContext, consumable_ids: Iterable[str]) -> str:
    return ", ".join(ctx.catalog.consumable_name(cid) for cid in consumable_ids)


def _event_title(ctx: ReducerContext, event_id: str) -> str:
    event = ctx.catalog.event(event_id)
    return event.title if event is not None else event_id


def _bump_nonce(state: GameState) -> GameState:
    return replace(state, event_roll_nonce=state.event_roll_nonce + 1)


def _open_gate(
    state: GameState,
    screen: EventNodeScreen,
    ctx: ReducerContext,
    key: str,
    salt: int,
    text: str,
    on_correct_text: str = GATE_CORRECT_TEXT,
    on_wrong_text: str = GATE_WRONG_TEXT,
) -> GameState:
    """Put a seeded question between the player and the exit."""
    if state.debug_skip_questions:
        return _result(state, screen, on_correct_text)
    rng = make_scoped_rng(state.seed, f"event:gate:{key}:{screen.node_id}", salt)
    question = get_question(rng, difficulty_for_depth(state.current_depth()))
    prompt = GatePrompt(
        question=question,
        text=text,
        on_correct_text=on_correct_text,
        on_wrong_text=on_wrong_text,
        wrong_damage=GATE_WRONG_DAMAGE,
    )
    return _show(state, screen.to_step(EventStep.QUESTION_GATE, prompt))


def _damage_then(state: GameState, screen: EventNodeScreen, amount: int, death_text: str):
    """Apply event damage. Returns (state, finished) where finished means the player died."""
    state, _ = take_damage(state, amount)
    if is_dead(state):
        return _result(state, screen, death_text), True
    return state, False


# ============================================================================
# VAULT
# ============================================================================

def _handle_vault(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Gold Vault: offer gold for a heal, trade the Golden Pencil, or pay on the way out."""
    has_pencil = state.has_supply(SUP_GOLD_BOOST)

    if choice_id == "offer_all_gold":
        if state.gold <= 0:
            return state
        state = replace(state, gold=0)
        state, healed = heal(state, VAULT_HEAL)
        return _result(state, screen, f"The vault accepts your offering.\n\nLose all gold. Heal {healed} HP.")

    if choice_id == "trade_golden_pencil":
        if not has_pencil or not ctx.catalog.has_upgradable(state.deck):
            return state
        state = remove_supply(state, SUP_GOLD_BOOST)
        return _upgrade_pick(state, screen, "The Golden Pencil melts into the vault door.")

    if choice_id == "ultimate_offering":
        if state.gold <= 0 or not has_pencil:
            return state
        state = remove_supply(replace(state, gold=0), SUP_GOLD_BOOST)
        return _card_pick(state, screen, ("atk_golden_strike",), text="The vault rumbles open. Something gleams inside.")

    if choice_id == "leave":
        state, taken = take_damage(state, VAULT_LEAVE_DAMAGE)
        return _result(state, screen, f"The voice is not pleased.\n\nTake {taken} damage.")

    return state


# ============================================================================
# VENDING MACHINE
# ============================================================================

def _consumable_weight(con) -> int:
    return weight_by_rarity(con.rarity)


def _handle_vending_machine(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Vending Machine Glitch: buy one item, shake for two, or talk past the hall monitor."""
    node_id = screen.node_id
    nonce = state.event_roll_nonce

    if choice_id == "buy":
        if state.gold < VENDING_PRICE:
            return _result(state, screen, "Not enough gold. The machine blinks at you mockingly.")
        rng = make_scoped_rng(state.seed, f"event:vending:{node_id}:buy:{nonce}", 0xA11CE)
        pool = ctx.catalog.consumable_pool(event_only=True) or ctx.catalog.consumable_pool(event_only=False)
        item = pick_weighted(rng, pool, _consumable_weight)
        state = _bump_nonce(replace(state, gold=state.gold - VENDING_PRICE))
        return _consumable_claim(state, screen, (item.id,), "Something drops into the tray with a heavy clunk.")

    if choice_id == "shake":
        rng = make_scoped_rng(state.seed, f"event:vending:{node_id}:shake:{nonce}", 0xBADC0DE)
        success = rng() < 0.5
        state = _bump_nonce(state)
        if not success:
            state, taken = take_damage(state, VENDING_SHAKE_DAMAGE)
            return _result(state, screen, f"The machine tips and pins your arm.\n\nTake {taken} damage.")

        event_pool = list(ctx.catalog.consumable_pool(event_only=True))
        base_pool = list(ctx.catalog.consumable_pool(event_only=False))
        items: List[str] = []
        for _ in range(VENDING_SHAKE_ITEMS):
            pool = event_pool if event_pool else base_pool
            if not pool:
                break
            item = pick_weighted(rng, pool, _consumable_weight)
            pool.remove(item)
            items.append(item.id)
        return _consumable_claim(state, screen, items, "Two items rattle loose!")

    if choice_id == "leave":
        return _open_gate(state, screen, ctx, "vending", 0xC0FFEE, "A hall monitor blocks the way. Answer to slip out.")

    return state


# ============================================================================
# LIBRARY
# ============================================================================

def _handle_library(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Library Study Session: study, steal notes, nap, or leave past the librarian."""
    if choice_id == "study":
        if not ctx.catalog.has_upgradable(state.deck):
            return _result(state, screen, "You skim your notes, but nothing in your deck can be improved right now.")
        return _upgrade_pick(state, screen, "You study until the words stop swimming.")

    if choice_id == "steal_notes":
        if state.has_supply(SUP_NO_NEGATIVE_CARDS):
            state = flash_supplies(state, [SUP_NO_NEGATIVE_CARDS])
            text = f"Perfect Record prevented {ctx.catalog.card_name('neg_pop_quiz')} from being added to your deck."
            return _consumable_claim(state, screen, (CON_CHEAT_SHEET,), text)
        return _card_pick(
            state,
            screen,
            ("neg_pop_quiz",),
            text="The notes are yours, but a Pop Quiz comes with them.",
            then_claim=(CON_CHEAT_SHEET,),
        )

    if choice_id == "nap":
        if state.gold < LIBRARY_NAP_COST:
            return _result(state, screen, "The librarian charges for the comfy chair. You can't afford it.")
        state, healed = heal(replace(state, gold=state.gold - LIBRARY_NAP_COST), LIBRARY_NAP_HEAL)
        return _result(state, screen, f"You wake up refreshed and a little poorer.\n\nHeal {healed} HP. Lose {LIBRARY_NAP_COST} gold.")

    if choice_id == "leave":
        return _open_gate(state, screen, ctx, "library", 0xABCD, "The librarian stops you. Answer a question to leave.")

    return state


# ============================================================================
# DETENTION / SUBSTITUTE
# ============================================================================

def _handle_detention(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Detention Notice: serve it, bribe your way out, or dodge it and take a Curse."""
    if choice_id == "serve_detention":
        if not has_consumable_room(state, ctx):
            return _result(state, screen, "Your bag is too full to carry anything out of detention.")
        state = add_consumable(state, CON_TRASH_BIN, ctx)
        return _result(state, screen, f"An hour of staring at the clock.\n\nGained {ctx.catalog.consumable_name(CON_TRASH_BIN)}.")

    if choice_id == "bribe_staff":
        if state.gold < DETENTION_BRIBE:
            return _result(state, screen, "You don't have enough gold to make this go away.")
        if not ctx.catalog.has_upgradable(state.deck):
            return _result(state, screen, "The bribe would be wasted. Nothing in your deck can be improved.")
        state = replace(state, gold=state.gold - DETENTION_BRIBE)
        return _upgrade_pick(state, screen, f"The slip disappears. Lose {DETENTION_BRIBE} gold.")

    if choice_id == "skip_gain_curse":
        return _card_pick(state, screen, ("neg_curse",), text="You dodge the room, but it follows you.")

    return state


def _handle_substitute(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Substitute Teacher: help for an Answer Key, cause chaos for gold, or leave."""
    if choice_id == "help_them":
        if not has_consumable_room(state, ctx):
            return _result(state, screen, "They try to hand you something, but your bag is full.")
        state = add_consumable(state, CON_ANSWER_KEY, ctx)
        return _result(state, screen, f"The sub is grateful.\n\nGained {ctx.catalog.consumable_name(CON_ANSWER_KEY)}.")

    if choice_id == "cause_chaos":
        rng = make_scoped_rng(state.seed, f"event:sub:{screen.node_id}:chaos:{state.event_roll_nonce}", 0x5AB57)
        negative = pick(rng, CHAOS_NEGATIVES)
        state = _bump_nonce(state)
        return _card_pick(
            state,
            screen,
            (negative,),
            text="Chaos pays, but it leaves a mark.",
            gold_gain=SUBSTITUTE_CHAOS_GOLD,
            result_text=f"Gained {SUBSTITUTE_CHAOS_GOLD} gold.",
        )

    if choice_id == "leave":
        return _open_gate(state, screen, ctx, "sub", 0x5151, "Slip out quietly, if you can answer a question.")

    return state


# ============================================================================
# HIDDEN ENCOUNTER
# ============================================================================

def _handle_hidden_encounter(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Hidden Encounter: investigate (a normal fight with rewards) or walk away."""
    if choice_id == "walk_away":
        return _result(state, screen, "You keep walking. Whatever it was stays hidden.")

    if choice_id == "investigate":
        node_id = screen.node_id
        if state.is_locked(node_id):
            return state
        depth = state.current_depth()
        rng = make_scoped_rng(state.seed, node_id)
        encounter, used = select_encounter(
            rng, ctx.catalog, depth, state.used_encounter_ids, attempts=ctx.config.encounter_repick_attempts
        )
        state = launch_battle(state, ctx, rng, encounter, difficulty=difficulty_for_depth(depth))
        return replace(state, used_encounter_ids=used, current_node_id=node_id)

    return state


# ============================================================================
# RESOURCE TRADES
# ============================================================================

def _handle_chem_lab(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Chem Lab Spill: trade Deodorant for a full heal or take a toxic supply with a negative card."""
    if choice_id == "trade_deodorant":
        if not state.has_supply(SUP_APPLY_POISON):
            return _result(state, screen, "You don't have any Deodorant to trade.")
        state = remove_supply(state, SUP_APPLY_POISON)
        state, healed = heal(state, state.max_hp)
        return _result(state, screen, f"The fumes clear.\n\nLose Deodorant. Heal {healed} HP.")

    if choice_id == "take_contagion":
        if state.has_supply(SUP_POISON_SPREADS):
            return state
        state = add_supply(state, SUP_POISON_SPREADS)
        name = ctx.catalog.supply_name(SUP_POISON_SPREADS)
        return _card_pick(state, screen, ("neg_infestation_perm",), text=f"Gained {name}. Something crawls into your bag.",
                          result_text=f"Gained {name}.")

    if choice_id == "take_toxic_booster":
        if state.has_supply(SUP_POISON_DOUBLE_DAMAGE):
            return state
        state = add_supply(state, SUP_POISON_DOUBLE_DAMAGE)
        name = ctx.catalog.supply_name(SUP_POISON_DOUBLE_DAMAGE)
        return _card_pick(state, screen, ("neg_radiation_perm",), text=f"Gained {name}. Your hands are glowing.",
                          result_text=f"Gained {name}.")

    if choice_id == "leave":
        state, taken = take_damage(state, CHEM_LEAVE_DAMAGE)
        return _result(state, screen, f"The fumes sting your eyes on the way out.\n\nTake {taken} damage.")

    return state


def _handle_charging_station(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Charging Station: buy, rip out or overclock the Battery Pack."""
    battery = SUP_ENERGY_CARRYOVER
    name = ctx.catalog.supply_name(battery)

    if choice_id == "pay_150":
        if state.gold < CHARGING_PRICE or state.has_supply(battery):
            return state
        state = add_supply(replace(state, gold=state.gold - CHARGING_PRICE), battery)
        return _result(state, screen, f"The cabinet unlocks with a click.\n\nLose {CHARGING_PRICE} gold. Gained {name}.")

    if choice_id == "rip_it_out":
        if state.has_supply(battery):
            return state
        state, died = _damage_then(state, screen, CHARGING_RIP_DAMAGE, "The outlet bites back. Hard.")
        if died:
            return state
        state = add_supply(state, battery)
        return _card_pick(state, screen, ("neg_radiation_perm",), text=f"Gained {name}. It hums against your ribs.",
                          result_text=f"Take {CHARGING_RIP_DAMAGE} damage. Gained {name}.")

    if choice_id == "overclock_it":
        return _card_pick(state, screen, ("skl_overclock",), text="The station whines and spits out something new.",
                          extra_card_ids=("neg_radiation_perm",))

    if choice_id == "leave":
        return _open_gate(state, screen, ctx, "charging", 0xC0FFEE, "The station flashes a prompt. Answer a question to leave.")

    return state


def _handle_practice(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """After School Practice: extra reps, a defensive drill, or skip it for gold and a Curse."""
    if choice_id == "extra_reps":
        if state.has_supply(SUP_MULTI_ATTACK_PLUS):
            return state
        state, died = _damage_then(state, screen, PRACTICE_REPS_DAMAGE, "You push too hard and collapse on the court.")
        if died:
            return state
        return _supply_pick(state, screen, SUP_MULTI_ATTACK_PLUS, f"Coach nods. Take {PRACTICE_REPS_DAMAGE} damage.")

    if choice_id == "defensive_strategy":
        state, paid = lose_gold(state, PRACTICE_STRATEGY_COST)
        return _card_pick(state, screen, ("blk_dig_in",), text=f"You pay for the playbook. Lose {paid} gold.")

    if choice_id == "skip":
        state = gain_gold(state, PRACTICE_SKIP_GOLD)
        return _card_pick(state, screen, ("neg_curse",), text="Skipping has a cost.",
                          result_text=f"Gained {PRACTICE_SKIP_GOLD} gold.")

    if choice_id == "leave":
        return _open_gate(state, screen, ctx, "practice", 0xC0FFEE, "Coach calls your name. Answer a question to slip out.")

    return state


def _handle_weight_room(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Weight Room: buy the belt or train for an event-only card."""
    if choice_id == "belt_up":
        if state.gold < WEIGHT_BELT_PRICE or state.has_supply(SUP_STRENGTH_TO_BLOCK):
            return state
        state = replace(state, gold=state.gold - WEIGHT_BELT_PRICE)
        return _supply_pick(state, screen, SUP_STRENGTH_TO_BLOCK, f"Lose {WEIGHT_BELT_PRICE} gold.")

    if choice_id in ("sparring_partner", "punching_bag"):
        card_id = "atk_shield_conversion" if choice_id == "sparring_partner" else "atk_unload"
        state, died = _damage_then(state, screen, WEIGHT_ROOM_DAMAGE, "You drop the weights. The weights do not drop you gently.")
        if died:
            return state
        return _card_pick(state, screen, (card_id,), text=f"Take {WEIGHT_ROOM_DAMAGE} damage. You learned something.")

    if choice_id == "leave":
        return _open_gate(state, screen, ctx, "weight", 0xC0FFEE, "Answer a question to leave.")

    return state


def _handle_poison_extraction(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Poison Extraction: antidote for hp, or the Red Pen supply."""
    if choice_id == "extract_antidote":
        state, died = _damage_then(state, screen, POISON_ANTIDOTE_DAMAGE, "The centrifuge sprays you. Everything goes dark.")
        if died:
            return state
        return _card_pick(state, screen, ("skl_detox_extract",), text=f"Take {POISON_ANTIDOTE_DAMAGE} damage.")

    if choice_id == "extract_poison":
        if state.has_supply(SUP_NEGATIVE_DRAW_BURST):
            return _result(state, screen, "You already carry what this vial would give you.")
        return _supply_pick(state, screen, SUP_NEGATIVE_DRAW_BURST, "The dark vial hardens into something useful.")

    if choice_id == "leave":
        return _open_gate(state, screen, ctx, "poison", 0xC0FFEE, "The door clicks behind you. Answer a question to get out.")

    return state


def _handle_attendance(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Attendance Office: buy a note, apologize, or forge a signature."""
    if choice_id == "absence_note":
        if state.gold < ATTENDANCE_NOTE_PRICE or not has_consumable_room(state, ctx):
            return state
        state = replace(state, gold=state.gold - ATTENDANCE_NOTE_PRICE)
        return _consumable_claim(state, screen, (CON_ABSENCE_NOTE,), f"Lose {ATTENDANCE_NOTE_PRICE} gold.")

    if choice_id == "apologize":
        state, paid = lose_gold(state, ATTENDANCE_APOLOGY_COST)
        state, healed = heal(state, ATTENDANCE_APOLOGY_HEAL)
        return _result(state, screen, f"The clerk softens.\n\nLose {paid} gold. Heal {healed} HP.")

    if choice_id == "forge_signature":
        if state.has_supply(SUP_NO_NEGATIVE_CARDS):
            state = flash_supplies(gain_gold(state, ATTENDANCE_FORGE_GOLD), [SUP_NO_NEGATIVE_CARDS])
            return _result(
                state,
                screen,
                f"Nobody questions a Perfect Record.\n\nGained {ATTENDANCE_FORGE_GOLD} gold. "
                f"Perfect Record prevented the negative cards from being added to your deck.",
            )
        rng = make_scoped_rng(state.seed, f"event:attendance:forge:{screen.node_id}", 0xBADA55)
        first, second = pick_unique(rng, FORGE_NEGATIVES, 2)
        return _card_pick(
            state,
            screen,
            (first,),
            text="The forgery works, but it leaves a paper trail.",
            extra_card_ids=(second,),
            gold_gain=ATTENDANCE_FORGE_GOLD,
            result_text=f"Gained {ATTENDANCE_FORGE_GOLD} gold.",
        )

    if choice_id == "leave":
        state, taken = take_damage(state, ATTENDANCE_LEAVE_DAMAGE)
        return _result(state, screen, f"The hallway feels colder.\n\nTake {taken} damage.")

    return state


# ============================================================================
# POP-UP VENDOR
# ============================================================================

def _handle_pop_up_vendor(state: GameState, screen: EventNodeScreen, choice_id: str, ctx: ReducerContext) -> GameState:
    """Pop-Up Vendor: event shop, a one-time mystery bag, or leave."""
    if choice_id == "browse_wares":
        shop = build_event_shop_node_state(state.seed, screen.node_id, ctx.catalog, state.current_supply_ids)
        return replace(state, node_screen=shop)

    if choice_id == "mystery_bag":
        if screen.vendor_mystery_used or state.gold < VENDOR_MYSTERY_PRICE or not has_consumable_room(state, ctx):
            return state
        rng = make_scoped_rng(state.seed, f"event:vendor:mystery:{screen.node_id}", 0xFACEFEED)
        item = pick_weighted(rng, ctx.catalog.consumable_pool(event_only=False), _consumable_weight)
        if item is None:
            return state
        state = replace(state, gold=state.gold - VENDOR_MYSTERY_PRICE)
        prompt = ConsumablePrompt(
            consumable_ids=(item.id,),
            text=f"Lose {VENDOR_MYSTERY_PRICE} gold. The bag holds one item.",
            after_step=EventStep.INTRO,
        )
        return _show(state, screen.to_step(EventStep.CONSUMABLE_PICK, prompt, vendor_mystery_used=True))

    if choice_id == "leave":
        return _result(state, screen, "The vendor waves you off. \"Today only!\"")

    return state


EVENT_HANDLERS: Dict[str, EventProtocol] = {
    EVENT_HALLWAY_SHORTCUT: hallway.handle_intro,
    EVENT_VENDING_MACHINE: _handle_vending_machine,
    EVENT_LIBRARY: _handle_library,
    EVENT_DETENTION: _handle_detention,
    EVENT_SUBSTITUTE: _handle_substitute,
    EVENT_HIDDEN_ENCOUNTER: _handle_hidden_encounter,
    EVENT_CHEM_LAB: _handle_chem_lab,
    EVENT_CHARGING_STATION: _handle_charging_station,
    EVENT_PRACTICE: _handle_practice,
    EVENT_WEIGHT_ROOM: _handle_weight_room,
    EVENT_POISON_EXTRACTION: _handle_poison_extraction,
    EVENT_ATTENDANCE: _handle_attendance,
    EVENT_POP_UP_VENDOR: _handle_pop_up_vendor,
    EVENT_EXAM_LADDER: exam_ladder.handle_intro,
    EVENT_VAULT: _handle_vault,
}


# ============================================================================
# EVENT_CHOOSE
# ============================================================================

@handles(EventChoose)
def event_choose(state: GameState, action: EventChoose, ctx: ReducerContext) -> GameState:
    screen = current_event_screen(state)
    if screen is None:
        return state
    choice_id = action.choice_id

    if screen.step == EventStep.CONSUMABLE_CLAIM and choice_id == "claim_done":
        return _claim_done(state, screen, ctx)
    if screen.step == EventStep.HALLWAY and screen.event_id == EVENT_HALLWAY_SHORTCUT:
        return hallway.handle_hallway_choice(state, screen, choice_id, ctx)
    if screen.step == EventStep.EXAM_LADDER_FEEDBACK and screen.event_id == EVENT_EXAM_LADDER:
        return exam_ladder.handle_feedback_choice(state, screen, choice_id, ctx)
    if screen.step != EventStep.INTRO:
        return state

    protocol = EVENT_HANDLERS.get(screen.event_id)
    if protocol is None or ctx.catalog.event(screen.event_id) is None:
        logger.warning(f"No protocol for event {screen.event_id!r}")
        return _result(state, screen, UNCONFIGURED_TEXT)
    return protocol(state, screen, choice_id, ctx)


def _claim_done(state: GameState, screen: EventNodeScreen, ctx: ReducerContext) -> GameState:
    prompt = screen.prompt
    if not isinstance(prompt, ConsumableClaimPrompt):
        return state
    gained = f"Gained: {_names(ctx, prompt.claimed_ids)}." if prompt.claimed_ids else "You leave empty-handed."
    left = f"Left behind: {_names(ctx, prompt.remaining_ids)}." if prompt.remaining_ids else ""
    return _result(state, screen, _join(prompt.text, f"You step away. {gained}", left))


# ============================================================================
# PICKS
# ============================================================================

@handles(EventPickUpgrade)
def event_pick_upgrade(state: GameState, action: EventPickUpgrade, ctx: ReducerContext) -> GameState:
    screen = current_event_screen(state)
    if screen is None or screen.step != EventStep.UPGRADE_PICK:
        return state
    if action.card_id not in state.deck or not ctx.catalog.is_upgradable(action.card_id):
        return state

    state = upgrade_card_in_deck(state, action.card_id, ctx)
    text = screen.prompt.text if isinstance(screen.prompt, UpgradePrompt) else ""
    return _result(state, screen, _join(text, "You feel your deck shift.\nUpgraded a card."))


@handles(EventPickCard)
def event_pick_card(state: GameState, action: EventPickCard, ctx: ReducerContext) -> GameState:
    screen = current_event_screen(state)
    if screen is None or screen.step != EventStep.CARD_PICK:
        return state
    prompt = screen.prompt
    if not isinstance(prompt, CardPrompt) or action.card_id not in prompt.card_ids:
        return state

    name = ctx.catalog.card_name(action.card_id)
    if ctx.catalog.is_negative(action.card_id) and state.has_supply(SUP_NO_NEGATIVE_CARDS):
        state = flash_supplies(state, [SUP_NO_NEGATIVE_CARDS])
        note = f"Perfect Record prevented {name} from being added to your deck."
    else:
        state = add_card_to_deck(state, action.card_id)
        note = f"Gained {name}."

    state = gain_gold(state, prompt.gold_gain)
    result_text = _join(prompt.result_text, note)

    if prompt.extra_card_ids:
        following = CardPrompt(
            card_ids=prompt.extra_card_ids[:1],
            text="Another card is waiting. Confirm it.",
            result_text=result_text,
            extra_card_ids=prompt.extra_card_ids[1:],
            then_claim_consumable_ids=prompt.then_claim_consumable_ids,
        )
        return _show(state, screen.to_step(EventStep.CARD_PICK, following))

    if prompt.then_claim_consumable_ids:
        return _consumable_claim(state, screen, prompt.then_claim_consumable_ids, result_text)
    return _result(state, screen, result_text)


@handles(EventPickConsumable)
def event_pick_consumable(state: GameState, action: EventPickConsumable, ctx: ReducerContext) -> GameState:
    screen = current_event_screen(state)
    if screen is None or not has_consumable_room(state, ctx):
        return state
    prompt = screen.prompt
    cid = action.consumable_id
    name = ctx.catalog.consumable_name(cid)

    if screen.step == EventStep.CONSUMABLE_PICK and isinstance(prompt, ConsumablePrompt):
        if cid not in prompt.consumable_ids:
            return state
        state = add_consumable(state, cid, ctx)
        if prompt.after_step is not None:
            return _show(state, screen.to_step(prompt.after_step, None, result_text=f"Gained {name}."))
        return _result(state, screen, _join(prompt.text, f"Gained {name}."))

    if screen.step == EventStep.CONSUMABLE_CLAIM and isinstance(prompt, ConsumableClaimPrompt):
        if cid not in prompt.remaining_ids:
            return state
        remaining = list(prompt.remaining_ids)
        remaining.remove(cid)
        claimed = prompt.claimed_ids + (cid,)
        state = add_consumable(state, cid, ctx)
        if not remaining:
            return _result(state, screen, _join(prompt.text, f"Gained: {_names(ctx, claimed)}."))
        claim = replace(prompt, remaining_ids=tuple(remaining), claimed_ids=claimed)
        return _show(state, replace(screen, prompt=claim))

    return state


@handles(EventPickSupply)
def event_pick_supply(state: GameState, action: EventPickSupply, ctx: ReducerContext) -> GameState:
    screen = current_event_screen(state)
    if screen is None or screen.step != EventStep.SUPPLY_PICK:
        return state
    prompt = screen.prompt
    if not isinstance(prompt, SupplyPrompt) or action.supply_id not in prompt.supply_ids:
        return state
    if state.has_supply(action.supply_id):
        return state

    state = add_supply(state, action.supply_id)
    return _result(state, screen, _join(prompt.text, f"Gained {ctx.catalog.supply_name(action.supply_id)}."))


# ============================================================================
# ANSWERS
# ============================================================================

@handles(EventGateAnswer)
def event_gate_answer(state: GameState, action: EventGateAnswer, ctx: ReducerContext) -> GameState:
    screen = current_event_screen(state)
    if screen is None or screen.step != EventStep.QUESTION_GATE:
        return state
    if screen.event_id == EVENT_EXAM_LADDER and screen.ladder is not None:
        return exam_ladder.handle_answer(state, screen, action.answer, ctx)

    prompt = screen.prompt
    if not isinstance(prompt, GatePrompt):
        return _result(state, screen, GATE_FALLBACK_TEXT)

    question = prompt.question
    if question.check(action.answer):
        return _result(state, screen, prompt.on_correct_text)

    state = log_wrong_answer(
        state,
        ctx,
        AnswerSource.EVENT,
        location=f"{floor_label(state)} • {_event_title(ctx, screen.event_id)} • Question Gate",
        prompt=question.prompt,
        expected=question.display_answer,
        given=action.answer,
    )
    state, taken = take_damage(state, prompt.wrong_damage)
    return _result(state, screen, f"{prompt.on_wrong_text}\n\nTake {taken} damage.")


@handles(EventHallwayAnswer)
def event_hallway_answer(state: GameState, action: EventHallwayAnswer, ctx: ReducerContext) -> GameState:
    screen = current_event_screen(state)
    if screen is None or screen.event_id != EVENT_HALLWAY_SHORTCUT:
        return state
    return hallway.handle_answer(state, screen, action.answer, ctx)
