"""
Shared pytest fixtures for the run-state engine test suite.

This module provides reusable fixtures for:
- Seeded RNGs
- A reducer with a fixed clock
- Fresh runs (after NEW_RUN and setup)
- Helpers that put a run on a specific event, shop or rest node
"""

import pytest
import sys

# Ensure project root is in path
import os
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)

from dataclasses import replace

from packages.runstate import actions
from packages.runstate.generation.map import NodeType
from packages.runstate.generation.shop import build_shop_node_state
from packages.runstate.reducer import RunReducer
from packages.runstate.state.rng import make_rng
from packages.runstate.state.run import GameState, Screen, SetupSelection
from packages.runstate.state.screens import EventNodeScreen, EventStep, RestNodeScreen


FIXED_NOW_MS = 1_700_000_000_000
TEST_SEED = 42


# =============================================================================
# RNG Fixtures
# =============================================================================


@pytest.fixture
def rng_seed_42():
    """Mulberry32 seeded with 42 for deterministic tests."""
    return make_rng(42)


@pytest.fixture
def rng_seed_12345():
    """Mulberry32 seeded with 12345 for deterministic tests."""
    return make_rng(12345)


# =============================================================================
# Reducer / Run Fixtures
# =============================================================================


@pytest.fixture
def reducer():
    """Reducer with the default catalog and a frozen clock."""
    return RunReducer(clock=lambda: FIXED_NOW_MS)


@pytest.fixture
def new_run(reducer):
    """Run right after NEW_RUN(seed=42), setup not yet done."""
    return reducer.reduce(reducer.initial_state(), actions.NewRun(seed=TEST_SEED))


@pytest.fixture
def run(reducer, new_run):
    """Run after NEW_RUN and setup with the starter deck."""
    return reducer.reduce(new_run, actions.CompleteSetup(SetupSelection(player_name="Tester")))


def node_at_depth(state: GameState, depth: int, node_type: NodeType = None) -> str:
    """Id of the first node at ``depth`` (optionally of ``node_type``)."""
    for node in state.map.nodes_at_depth(depth):
        if node_type is None or node.type == node_type:
            return node.id
    raise LookupError(f"no node at depth {depth}")


def find_node(state: GameState, node_type: NodeType, min_depth: int = 0) -> str:
    """Id of the shallowest node of ``node_type`` at or below ``min_depth``."""
    nodes = sorted(state.map.nodes.values(), key=lambda n: (n.depth, n.id))
    for node in nodes:
        if node.type == node_type and node.depth >= min_depth:
            return node.id
    pytest.skip(f"seed {state.seed} has no {node_type.value} node")


def put_on_event(state: GameState, event_id: str, depth: int = 3, **state_changes) -> GameState:
    """Open ``event_id`` at INTRO on a node at ``depth``."""
    node_id = node_at_depth(state, depth)
    screen = EventNodeScreen(node_id=node_id, event_id=event_id, step=EventStep.INTRO)
    return replace(
        state,
        screen=Screen.NODE,
        current_node_id=node_id,
        node_screen=screen,
        **state_changes,
    )


def put_on_shop(state: GameState, reducer: RunReducer, depth: int = 5, **state_changes) -> GameState:
    node_id = node_at_depth(state, depth)
    state = replace(state, **state_changes)
    shop = build_shop_node_state(
        state.seed,
        node_id,
        reducer.catalog,
        owned_supply_ids=state.current_supply_ids,
        removals_used=state.shop_removals_used,
    )
    return replace(state, screen=Screen.NODE, current_node_id=node_id, node_screen=shop)


def put_on_rest(state: GameState, depth: int = 5, **state_changes) -> GameState:
    node_id = node_at_depth(state, depth)
    return replace(
        state,
        screen=Screen.NODE,
        current_node_id=node_id,
        node_screen=RestNodeScreen(node_id=node_id),
        **state_changes,
    )


@pytest.fixture
def on_event(run):
    """Factory: ``on_event(event_id, **changes)`` -> run on that event's INTRO."""
    def _factory(event_id: str, depth: int = 3, **changes) -> GameState:
        return put_on_event(run, event_id, depth=depth, **changes)
    return _factory


@pytest.fixture
def dispatch(reducer):
    """Fold a list of actions over a state."""
    def _dispatch(state: GameState, *action_list) -> GameState:
        for action in action_list:
            state = reducer.reduce(state, action)
        return state
    return _dispatch
