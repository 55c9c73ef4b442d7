"""
Run State - the full snapshot of one run.

GameState is immutable. Every reducer step builds a new value with
``dataclasses.replace``; tuples hold sequences and dicts are copied on write so
an older snapshot never observes a later change.

Contains:
- Screen enum and terminal-screen helpers
- SetupSelection (loadout chosen once per run, holds the deck)
- RewardState (pending post-battle loot)
- WrongAnswerEntry (capped wrong-answer log)
- GameState and initial_state()
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from ..config import DEFAULT_CONFIG, EngineConfig
from ..generation.map import RunMap
from .battle import BattleState
from .screens import NodeScreen


class Screen(Enum):
    TITLE = "TITLE"
    OVERWORLD = "OVERWORLD"
    SETUP = "SETUP"
    NODE = "NODE"
    BATTLE = "BATTLE"
    REWARD = "REWARD"
    VICTORY = "VICTORY"
    DEFEAT = "DEFEAT"


# Screens where hp <= 0 does not trigger DEFEAT
DEFEAT_EXEMPT_SCREENS = frozenset({Screen.TITLE, Screen.VICTORY, Screen.DEFEAT})
TERMINAL_SCREENS = frozenset({Screen.VICTORY, Screen.DEFEAT})


class RunOutcome(Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"


class AnswerSource(Enum):
    BATTLE = "BATTLE"
    EVENT = "EVENT"
    HALLWAY = "HALLWAY"


@dataclass(frozen=True)
class SetupSelection:
    """Loadout chosen at setup. The run deck lives here."""
    character_id: str = "student"
    player_name: str = "Player"
    deck_card_ids: Tuple[str, ...] = ()
    supply_ids: Tuple[str, ...] = ()
    lunch_item_id: Optional[str] = None


@dataclass(frozen=True)
class RewardState:
    """Loot offered after a normal victory."""
    node_id: str
    gold: int
    card_offer_ids: Tuple[str, ...]
    selected_card_id: Optional[str] = None
    card_confirmed: bool = False
    gold_claimed: bool = False
    consumable_offer_id: Optional[str] = None
    consumable_claimed: bool = False
    supply_offer_id: Optional[str] = None
    is_challenge: bool = False


@dataclass(frozen=True)
class WrongAnswerEntry:
    id: str
    at_ms: int
    source: AnswerSource
    location: str
    prompt: str
    expected: str
    given: str


@dataclass(frozen=True)
class GameState:
    screen: Screen = Screen.TITLE
    seed: int = DEFAULT_CONFIG.default_seed
    gold: int = DEFAULT_CONFIG.title_gold
    hp: int = DEFAULT_CONFIG.title_hp
    max_hp: int = DEFAULT_CONFIG.title_hp

    map: Optional[RunMap] = None
    current_node_id: Optional[str] = None
    locked_node_ids: Tuple[str, ...] = ()

    setup_done: bool = False
    setup: Optional[SetupSelection] = None

    consumables: Tuple[str, ...] = ()
    current_supply_ids: Tuple[str, ...] = ()
    applied_supply_ids: Tuple[str, ...] = ()

    node_screen: Optional[NodeScreen] = None
    node_screen_cache: Dict[str, NodeScreen] = field(default_factory=dict)

    reward: Optional[RewardState] = None
    reward_node_id: Optional[str] = None

    wrong_answer_log: Tuple[WrongAnswerEntry, ...] = ()

    battle: Optional[BattleState] = None
    used_encounter_ids: Tuple[str, ...] = ()
    shop_removals_used: int = 0

    run_start_ms: Optional[int] = None
    run_end_ms: Optional[int] = None
    last_outcome: Optional[RunOutcome] = None

    supply_flash_nonce: int = 0
    supply_flash_ids: Tuple[str, ...] = ()

    teacher_unlocked: bool = False
    debug_skip_questions: bool = False
    debug_forced_event_id: Optional[str] = None

    hallway_plays: int = 0
    event_roll_nonce: int = 0

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    @property
    def deck(self) -> Tuple[str, ...]:
        return self.setup.deck_card_ids if self.setup else ()

    def has_supply(self, supply_id: str) -> bool:
        return supply_id in self.current_supply_ids

    def is_locked(self, node_id: Optional[str]) -> bool:
        return node_id is not None and node_id in self.locked_node_ids

    def current_depth(self, default: int = 1) -> int:
        if self.map is None:
            return default
        return self.map.depth_of(self.current_node_id, default)

    def depth_of(self, node_id: Optional[str], default: int = 1) -> int:
        if self.map is None:
            return default
        return self.map.depth_of(node_id, default)

    # ------------------------------------------------------------------
    # Write helpers (all return new states)
    # ------------------------------------------------------------------

    def with_deck(self, deck: Tuple[str, ...]) -> "GameState":
        if self.setup is None:
            return self
        return replace(self, setup=replace(self.setup, deck_card_ids=tuple(deck)))

    def with_cached_screen(self, node_id: Optional[str], screen: Optional[NodeScreen]) -> "GameState":
        if node_id is None or screen is None:
            return self
        cache = dict(self.node_screen_cache)
        cache[node_id] = screen
        return replace(self, node_screen_cache=cache)

    def with_locked(self, node_id: Optional[str]) -> "GameState":
        if node_id is None or node_id in self.locked_node_ids:
            return self
        return replace(self, locked_node_ids=self.locked_node_ids + (node_id,))


def initial_state(config: EngineConfig = DEFAULT_CONFIG) -> GameState:
    """The TITLE screen state before any run starts."""
    return GameState(
        screen=Screen.TITLE,
        seed=config.default_seed,
        gold=config.title_gold,
        hp=config.title_hp,
        max_hp=config.title_hp,
    )
