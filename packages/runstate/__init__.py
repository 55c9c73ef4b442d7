"""
Run State Engine

The deterministic core of a classroom roguelike run: a branching map, shops,
rest sites, narrative events, battle hand-off and post-battle rewards, driven
by one pure reducer ``(state, action) -> state``.

Core subsystems:
- state: Mulberry32 RNG, GameState, node screens, battle snapshot
- content: cards, supplies, consumables, encounters, events
- generation: map, encounters, shops, rewards, questions
- effects: passive supply modifiers
- handlers: per-action reducer logic, registered by action type

Usage:
    from packages.runstate import RunReducer, actions, initial_state

    reducer = RunReducer()
    state = reducer.reduce(initial_state(), actions.NewRun(seed=42))
    state = reducer.reduce(state, actions.CompleteSetup(actions.SetupSelection()))
    state = reducer.reduce(state, actions.OpenNode(state.map.start_id))
"""

__version__ = "0.1.0"

# Configuration and errors
from .config import DEFAULT_CONFIG, EngineConfig, RunStateError, UnknownContentError

# RNG
from .state.rng import (
    Mulberry32,
    make_rng,
    make_scoped_rng,
    derive_seed,
    hash_string_to_int,
    rand_int,
    pick,
    pick_unique,
    shuffle,
    random_seed,
)

# Run state
from .state.run import (
    GameState,
    Screen,
    RunOutcome,
    AnswerSource,
    SetupSelection,
    RewardState,
    WrongAnswerEntry,
    initial_state,
)
from .state.screens import (
    EventNodeScreen,
    EventStep,
    OfferKind,
    PlainNodeScreen,
    RestNodeScreen,
    ShopNodeScreen,
)
from .state.battle import BattleState, BattleMeta, EnemyState

# Content
from .content.catalog import ContentCatalog, default_catalog

# Generation
from .generation.map import MapNode, NodeType, RunMap, generate_map, validate_map, count_node_types, map_to_string
from .generation.questions import Question, difficulty_for_depth, get_question
from .generation.weighted import pick_weighted, pick_weighted_unique, weight_by_rarity

# Actions and reducer
from . import actions
from .handlers import BattleModule, BattleStartRequest, ReducerContext, SimpleBattleModule
from .reducer import RunReducer, get_default_reducer, reduce
