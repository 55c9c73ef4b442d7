"""
Shared reducer plumbing.

- ReducerContext: the collaborators a handler may use (catalog, battle module,
  config, clock). Handlers never reach for module globals.
- handles(): decorator registry mapping action types to handler functions.
- HP / gold / inventory helpers that every handler routes through, plus the
  single post-action invariant check ``clamp_and_maybe_defeat``.

Handler signature:
    @handles(RestHeal)
    def rest_heal(state: GameState, action: RestHeal, ctx: ReducerContext) -> GameState:
        ...

A handler returns the same ``state`` object for a rejected action so callers can
detect a no-op by identity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

from ..config import EngineConfig
from ..content.catalog import ContentCatalog
from ..effects.supplies import apply_supply_on_gain
from ..state.run import DEFEAT_EXEMPT_SCREENS, AnswerSource, GameState, RunOutcome, Screen, WrongAnswerEntry
from ..state.screens import EventNodeScreen

if TYPE_CHECKING:
    from .combat import BattleModule

logger = logging.getLogger(__name__)


# ============================================================================
# CONTEXT / REGISTRY
# ============================================================================

@dataclass(frozen=True)
class ReducerContext:
    """Collaborators injected into every handler."""
    catalog: ContentCatalog
    battle: "BattleModule"
    config: EngineConfig
    clock: Callable[[], int]

    def now_ms(self) -> int:
        return int(self.clock())


Handler = Callable[[GameState, Any, ReducerContext], GameState]

_HANDLERS: Dict[type, Handler] = {}


def handles(*action_types: type) -> Callable[[Handler], Handler]:
    """Register the decorated function as the handler for ``action_types``."""
    def decorator(fn: Handler) -> Handler:
        for action_type in action_types:
            if action_type in _HANDLERS:
                raise ValueError(f"duplicate handler for {action_type.__name__}")
            _HANDLERS[action_type] = fn
        return fn
    return decorator


def registered_handlers() -> Dict[type, Handler]:
    return dict(_HANDLERS)


# ============================================================================
# HP / DEFEAT
# ============================================================================

def enter_defeat(state: GameState, ctx: ReducerContext) -> GameState:
    if state.screen == Screen.DEFEAT:
        return state
    logger.info(f"Run {state.seed} ended in defeat at node {state.current_node_id}")
    return replace(
        state,
        screen=Screen.DEFEAT,
        last_outcome=RunOutcome.DEFEAT,
        run_end_ms=state.run_end_ms if state.run_end_ms is not None else ctx.now_ms(),
    )


def clamp_and_maybe_defeat(state: GameState, ctx: ReducerContext) -> GameState:
    """Clamp hp into [0, max_hp] and enter DEFEAT when it hits 0."""
    max_hp = max(1, state.max_hp)
    hp = max(0, min(state.hp, max_hp))
    if hp != state.hp or max_hp != state.max_hp:
        state = replace(state, hp=hp, max_hp=max_hp)
    if hp <= 0 and state.screen not in DEFEAT_EXEMPT_SCREENS:
        state = enter_defeat(state, ctx)
    return state


def take_damage(state: GameState, amount: int) -> Tuple[GameState, int]:
    """Lose up to ``amount`` hp. Returns (state, damage actually taken)."""
    taken = min(state.hp, max(0, amount))
    if taken == 0:
        return state, 0
    return replace(state, hp=state.hp - taken), taken


def heal(state: GameState, amount: int) -> Tuple[GameState, int]:
    """Heal up to ``amount``, clamped to max hp. Returns (state, amount healed)."""
    healed = max(0, min(amount, state.max_hp - state.hp))
    if healed == 0:
        return state, 0
    return replace(state, hp=state.hp + healed), healed


def is_dead(state: GameState) -> bool:
    return state.hp <= 0


# ============================================================================
# GOLD / SUPPLIES / CONSUMABLES / DECK
# ============================================================================

def gain_gold(state: GameState, amount: int) -> GameState:
    if amount <= 0:
        return state
    return replace(state, gold=state.gold + amount)


def lose_gold(state: GameState, amount: int) -> Tuple[GameState, int]:
    lost = min(state.gold, max(0, amount))
    if lost == 0:
        return state, 0
    return replace(state, gold=state.gold - lost), lost


def add_supply(state: GameState, supply_id: str) -> GameState:
    """Own ``supply_id`` (no duplicates) and fire its on-gain effect once."""
    if not state.has_supply(supply_id):
        state = replace(state, current_supply_ids=state.current_supply_ids + (supply_id,))
    return apply_supply_on_gain(state, supply_id)


def remove_supply(state: GameState, supply_id: str) -> GameState:
    if not state.has_supply(supply_id):
        return state
    return replace(state, current_supply_ids=tuple(s for s in state.current_supply_ids if s != supply_id))


def has_consumable_room(state: GameState, ctx: ReducerContext) -> bool:
    return len(state.consumables) < ctx.config.max_consumables


def add_consumable(state: GameState, consumable_id: str, ctx: ReducerContext) -> GameState:
    """Add to the inventory; a full inventory leaves the state unchanged."""
    if not has_consumable_room(state, ctx):
        return state
    return replace(state, consumables=state.consumables + (consumable_id,))


def remove_first(items: Tuple[str, ...], item: str) -> Tuple[str, ...]:
    out = list(items)
    if item in out:
        out.remove(item)
    return tuple(out)


def remove_consumable(state: GameState, consumable_id: str) -> GameState:
    return replace(state, consumables=remove_first(state.consumables, consumable_id))


def add_card_to_deck(state: GameState, card_id: str) -> GameState:
    return state.with_deck(state.deck + (card_id,))


def remove_card_from_deck(state: GameState, card_id: str) -> GameState:
    return state.with_deck(remove_first(state.deck, card_id))


def upgrade_card_in_deck(state: GameState, card_id: str, ctx: ReducerContext) -> GameState:
    """Replace the first copy of ``card_id`` with its upgraded variant."""
    deck = list(state.deck)
    if card_id not in deck:
        return state
    deck[deck.index(card_id)] = ctx.catalog.upgraded_id(card_id)
    return state.with_deck(tuple(deck))


# ============================================================================
# NAVIGATION HELPERS
# ============================================================================

def lock_reward_on_move(state: GameState, target_node_id: Optional[str]) -> GameState:
    """Moving away from a pending reward's node forfeits the reward and locks the node."""
    if state.reward_node_id is None or state.reward_node_id == target_node_id:
        return state
    state = state.with_locked(state.reward_node_id)
    return replace(state, reward=None, reward_node_id=None)


def cache_current_screen(state: GameState) -> GameState:
    return state.with_cached_screen(state.current_node_id, state.node_screen)


def current_event_screen(state: GameState) -> Optional[EventNodeScreen]:
    if state.screen != Screen.NODE or not isinstance(state.node_screen, EventNodeScreen):
        return None
    return state.node_screen


def floor_label(state: GameState, node_id: Optional[str] = None) -> str:
    depth = state.depth_of(node_id if node_id is not None else state.current_node_id, default=0)
    return f"Floor {depth}"


# ============================================================================
# WRONG-ANSWER LOG
# ============================================================================

def log_wrong_answer(
    state: GameState,
    ctx: ReducerContext,
    source: AnswerSource,
    location: str,
    prompt: str,
    expected: Any,
    given: Any,
) -> GameState:
    """Append a wrong answer, dropping the oldest entries past the cap."""
    at_ms = ctx.now_ms()
    entry = WrongAnswerEntry(
        id=f"wa:{at_ms}:{len(state.wrong_answer_log)}",
        at_ms=at_ms,
        source=source,
        location=location,
        prompt=prompt,
        expected=str(expected),
        given="" if given is None else str(given),
    )
    log = state.wrong_answer_log + (entry,)
    cap = ctx.config.wrong_answer_log_cap
    if len(log) > cap:
        log = log[len(log) - cap:]
    logger.debug(f"Wrong answer logged ({source.value}) at {location}")
    return replace(state, wrong_answer_log=log)
