"""
Reducer Tests

Dispatch rules of RunReducer: fresh runs, the identity no-op contract, the
exception boundary, terminal screens, the hp invariant, setup and node
re-entry through the screen cache.
"""

import pytest
from dataclasses import replace

from conftest import FIXED_NOW_MS, TEST_SEED, find_node

from packages.runstate import actions
from packages.runstate.config import EngineConfig
from packages.runstate.content.cards import STARTER_DECK
from packages.runstate.generation.map import NodeType, generate_map
from packages.runstate.handlers import SimpleBattleModule, registered_handlers
from packages.runstate.handlers.common import handles
from packages.runstate.reducer import RunReducer, get_default_reducer, reduce
from packages.runstate.state.run import GameState, RunOutcome, Screen, SetupSelection
from packages.runstate.state.screens import (
    EventNodeScreen,
    EventStep,
    PlainNodeScreen,
    RestNodeScreen,
    ShopNodeScreen,
)


class ExplodingBattleModule(SimpleBattleModule):
    """Battle module whose battles never start."""

    def start_battle(self, request):
        raise RuntimeError("battle module offline")


# =============================================================================
# NEW_RUN
# =============================================================================


class TestNewRun:
    """A fresh run from any prior state."""

    def test_fresh_run_values(self, new_run):
        assert new_run.screen == Screen.OVERWORLD
        assert new_run.seed == TEST_SEED
        assert new_run.gold == 100
        assert new_run.hp == 40
        assert new_run.max_hp == 40
        assert new_run.current_node_id == new_run.map.start_id
        assert new_run.run_start_ms == FIXED_NOW_MS
        assert new_run.setup_done is False
        assert new_run.deck == ()

    def test_map_matches_seed(self, new_run):
        assert new_run.map == generate_map(TEST_SEED)

    def test_new_run_discards_everything(self, reducer, run):
        """Gold, supplies, logs and debug flags never leak into the next run."""
        messy = replace(
            run,
            gold=999,
            hp=3,
            consumables=("con_apple",),
            current_supply_ids=("sup_gold_boost",),
            locked_node_ids=("d1_n0",),
            teacher_unlocked=True,
            debug_skip_questions=True,
            hallway_plays=4,
            screen=Screen.DEFEAT,
        )
        fresh = reducer.reduce(messy, actions.NewRun(seed=7))
        assert fresh.screen == Screen.OVERWORLD
        assert fresh.seed == 7
        assert fresh.gold == 100
        assert fresh.hp == 40
        assert fresh.consumables == ()
        assert fresh.current_supply_ids == ()
        assert fresh.locked_node_ids == ()
        assert fresh.teacher_unlocked is False
        assert fresh.debug_skip_questions is False
        assert fresh.hallway_plays == 0
        assert fresh.node_screen_cache == {}

    def test_random_seed_when_omitted(self, reducer):
        state = reducer.reduce(reducer.initial_state(), actions.NewRun())
        assert 0 <= state.seed < 1_000_000
        assert state.map.seed == state.seed

    def test_same_seed_same_run(self, reducer):
        a = reducer.reduce(reducer.initial_state(), actions.NewRun(seed=555))
        b = reducer.reduce(reducer.initial_state(), actions.NewRun(seed=555))
        assert a == b


# =============================================================================
# DISPATCH CONTRACT
# =============================================================================


class TestDispatch:
    """Rejected and unknown actions return the same object."""

    def test_unknown_action_type(self, reducer, run):
        assert reducer.reduce(run, object()) is run

    def test_rejected_action_is_identity(self, reducer, run):
        """RestHeal on the overworld has nothing to act on."""
        assert reducer.reduce(run, actions.RestHeal()) is run

    def test_handler_exception_keeps_state(self, run):
        reducer = RunReducer(battle_module=ExplodingBattleModule(), clock=lambda: FIXED_NOW_MS)
        node_id = find_node(run, NodeType.FIGHT)
        assert reducer.reduce(run, actions.StartBattle(node_id)) is run

    def test_every_action_has_a_handler(self):
        handlers = registered_handlers()
        action_types = [
            obj for obj in vars(actions).values()
            if isinstance(obj, type) and obj.__module__ == actions.__name__
        ]
        missing = [t.__name__ for t in action_types if t not in handlers]
        assert missing == []

    def test_duplicate_registration_rejected(self):
        with pytest.raises(ValueError):
            @handles(actions.RestHeal)
            def again(state, action, ctx):
                return state

    def test_callable_and_replay(self, reducer):
        state = reducer.replay([actions.NewRun(seed=TEST_SEED), actions.CompleteSetup(SetupSelection())])
        assert state.setup_done
        assert reducer(state, object()) is state

    def test_module_level_reduce(self):
        state = reduce(get_default_reducer().initial_state(), actions.NewRun(seed=3))
        assert state.screen == Screen.OVERWORLD
        assert state.seed == 3


# =============================================================================
# TERMINAL SCREENS / HP INVARIANT
# =============================================================================


class TestTerminalScreens:
    """DEFEAT and VICTORY only accept NEW_RUN and LOAD_STATE."""

    @pytest.mark.parametrize("screen", [Screen.DEFEAT, Screen.VICTORY])
    def test_other_actions_ignored(self, reducer, run, screen):
        ended = replace(run, screen=screen)
        for action in (
            actions.DebugGiveGold(50),
            actions.OpenNode(run.map.start_id),
            actions.DebugHealFull(),
            actions.CloseNode(),
        ):
            assert reducer.reduce(ended, action) is ended

    def test_new_run_leaves_defeat(self, reducer, run):
        ended = replace(run, screen=Screen.DEFEAT, hp=0)
        assert reducer.reduce(ended, actions.NewRun(seed=1)).screen == Screen.OVERWORLD

    def test_load_state_leaves_victory(self, reducer, run):
        ended = replace(run, screen=Screen.VICTORY)
        loaded = reducer.reduce(ended, actions.LoadState(run))
        assert loaded.screen == Screen.OVERWORLD


class TestHpInvariant:
    """hp is clamped to [0, max_hp] and 0 hp means DEFEAT."""

    def test_hp_clamped_to_max(self, reducer, run):
        loaded = reducer.reduce(run, actions.LoadState(replace(run, hp=999)))
        assert loaded.hp == loaded.max_hp

    def test_negative_hp_clamped_and_defeated(self, reducer, run):
        loaded = reducer.reduce(run, actions.LoadState(replace(run, hp=-5)))
        assert loaded.hp == 0
        assert loaded.screen == Screen.DEFEAT
        assert loaded.last_outcome == RunOutcome.DEFEAT
        assert loaded.run_end_ms == FIXED_NOW_MS

    def test_max_hp_at_least_one(self, reducer, run):
        loaded = reducer.reduce(run, actions.LoadState(replace(run, max_hp=0, hp=1)))
        assert loaded.max_hp == 1
        assert loaded.hp == 1

    def test_title_screen_exempt(self, reducer):
        title = reducer.initial_state()
        loaded = reducer.reduce(title, actions.LoadState(replace(title, hp=0)))
        assert loaded.screen == Screen.TITLE

    def test_defeat_persists(self, reducer, run):
        dead = reducer.reduce(run, actions.LoadState(replace(run, hp=0)))
        assert dead.screen == Screen.DEFEAT
        assert reducer.reduce(dead, actions.DebugHealFull()) is dead
        assert reducer.reduce(dead, actions.DebugGiveGold(10)) is dead

    def test_bounds_hold_across_a_run(self, reducer, run):
        """Battles, events, rest and max-hp supplies never push hp out of range."""
        rest_id = find_node(run, NodeType.REST)
        script = [
            actions.DebugSetSupply("sup_increase_max_health"),
            actions.DebugForceBattle("easy_possessed_trio"),
            actions.BattleEnded(victory=True, player_hp_after=999),
            actions.RewardClaimGold(),
            actions.ClaimReward(),
            actions.DebugForceEvent("vault"),
            actions.EventChoose("leave"),
            actions.CloseNode(),
            actions.OpenNode(rest_id),
            actions.RestHeal(),
            actions.CloseNode(),
            actions.DebugForceBattle("med_office_gremlins"),
            actions.BattleEnded(victory=False, player_hp_after=7),
            actions.DebugForceEvent("library_study_session"),
            actions.EventChoose("leave"),
            actions.EventGateAnswer("wrong"),
            actions.CloseNode(),
            actions.DebugForceBattle("easy_possessed_trio"),
            actions.BattleEnded(victory=True, player_hp_after=-3),
            actions.DebugHealFull(),
        ]

        state = run
        for action in script:
            state = reducer.reduce(state, action)
            assert 0 <= state.hp <= state.max_hp, type(action).__name__
            if state.hp == 0:
                assert state.screen == Screen.DEFEAT

        assert state.screen == Screen.DEFEAT
        assert state.hp == 0
        assert reducer.replay(script, run) == state


# =============================================================================
# LOAD_STATE / SETUP
# =============================================================================


class TestLoadState:

    def test_debug_flags_reset(self, reducer, run):
        snapshot = replace(run, teacher_unlocked=True, debug_skip_questions=True, debug_forced_event_id="vault")
        loaded = reducer.reduce(run, actions.LoadState(snapshot))
        assert loaded.teacher_unlocked is False
        assert loaded.debug_skip_questions is False
        assert loaded.debug_forced_event_id is None

    def test_missing_start_time_filled(self, reducer, run):
        loaded = reducer.reduce(run, actions.LoadState(replace(run, run_start_ms=None)))
        assert loaded.run_start_ms == FIXED_NOW_MS

    def test_loaded_run_keeps_progress(self, reducer, run):
        snapshot = replace(run, gold=321, consumables=("con_water",))
        loaded = reducer.reduce(run, actions.LoadState(snapshot))
        assert loaded.gold == 321
        assert loaded.consumables == ("con_water",)


class TestSetup:
    """The one-time loadout gate."""

    def test_open_setup(self, reducer, new_run):
        assert reducer.reduce(new_run, actions.OpenSetup()).screen == Screen.SETUP

    def test_open_setup_after_done_rejected(self, reducer, run):
        assert reducer.reduce(run, actions.OpenSetup()) is run

    def test_starter_deck_by_default(self, run):
        assert run.setup_done
        assert run.deck == STARTER_DECK
        assert len(run.deck) == 8
        assert run.screen == Screen.OVERWORLD

    def test_lunch_item_becomes_consumable(self, reducer, new_run):
        state = reducer.reduce(new_run, actions.CompleteSetup(SetupSelection(lunch_item_id="con_sandwich")))
        assert state.consumables == ("con_sandwich",)

    def test_supplies_deduplicated_and_applied(self, reducer, new_run):
        setup = SetupSelection(supply_ids=("sup_increase_max_health", "sup_increase_max_health", "sup_gold_boost"))
        state = reducer.reduce(new_run, actions.CompleteSetup(setup))
        assert state.current_supply_ids == ("sup_increase_max_health", "sup_gold_boost")
        assert state.max_hp == 60
        assert state.hp == 60

    def test_custom_deck_kept(self, reducer, new_run):
        setup = SetupSelection(deck_card_ids=("atk_strike", "blk_guard"))
        state = reducer.reduce(new_run, actions.CompleteSetup(setup))
        assert state.deck == ("atk_strike", "blk_guard")

    def test_setup_only_once(self, reducer, run):
        assert reducer.reduce(run, actions.CompleteSetup(SetupSelection(player_name="Again"))) is run


# =============================================================================
# NODE SCREENS AND RE-ENTRY
# =============================================================================


class TestOpenNode:
    """Fresh node screens by node type."""

    def test_unknown_node_rejected(self, reducer, run):
        assert reducer.reduce(run, actions.OpenNode("nowhere")) is run

    def test_fight_node_plain_screen(self, reducer, run):
        node_id = find_node(run, NodeType.FIGHT)
        state = reducer.reduce(run, actions.OpenNode(node_id))
        assert state.screen == Screen.NODE
        assert state.current_node_id == node_id
        assert state.node_screen == PlainNodeScreen(node_id=node_id, node_type=NodeType.FIGHT)

    def test_shop_node(self, reducer, run):
        node_id = find_node(run, NodeType.SHOP)
        state = reducer.reduce(run, actions.OpenNode(node_id))
        assert isinstance(state.node_screen, ShopNodeScreen)
        assert len(state.node_screen.cards) == 4
        assert not state.node_screen.event_shop

    def test_rest_node(self, reducer, run):
        node_id = find_node(run, NodeType.REST)
        state = reducer.reduce(run, actions.OpenNode(node_id))
        assert state.node_screen == RestNodeScreen(node_id=node_id)

    def test_event_node_is_seeded(self, reducer, run):
        node_id = find_node(run, NodeType.EVENT)
        a = reducer.reduce(run, actions.OpenNode(node_id))
        b = reducer.reduce(run, actions.OpenNode(node_id))
        assert isinstance(a.node_screen, EventNodeScreen)
        assert a.node_screen.step == EventStep.INTRO
        assert a.node_screen.event_id == b.node_screen.event_id
        assert reducer.catalog.event(a.node_screen.event_id) is not None

    def test_forced_event_used_once(self, dispatch, run):
        node_id = find_node(run, NodeType.EVENT)
        state = dispatch(run, actions.DebugSetForcedEvent("vault"), actions.OpenNode(node_id))
        assert state.node_screen.event_id == "vault"
        assert state.debug_forced_event_id is None


class TestNodeReentry:
    """Backing out of a node and returning resumes the exact screen."""

    def test_event_progress_survives_close(self, dispatch, run):
        node_id = find_node(run, NodeType.EVENT)
        state = dispatch(
            run,
            actions.DebugSetForcedEvent("exam_week_ladder"),
            actions.OpenNode(node_id),
            actions.EventChoose("start"),
        )
        in_progress = state.node_screen
        assert in_progress.step == EventStep.QUESTION_GATE

        state = dispatch(state, actions.CloseNode())
        assert state.screen == Screen.OVERWORLD
        assert state.node_screen is None
        assert state.node_screen_cache[node_id] == in_progress

        state = dispatch(state, actions.OpenNode(node_id))
        assert state.node_screen == in_progress

    def test_shop_purchases_survive_close(self, dispatch, run):
        node_id = find_node(run, NodeType.SHOP)
        state = dispatch(run, actions.DebugGiveGold(1000), actions.OpenNode(node_id))
        offer = state.node_screen.cards[0]
        state = dispatch(state, actions.ShopBuy(offer.kind, offer.item_id))
        state = dispatch(state, actions.CloseNode(), actions.OpenNode(node_id))
        assert state.node_screen.is_bought(offer.kind, offer.item_id)

    def test_set_current_node_caches(self, dispatch, run):
        node_id = find_node(run, NodeType.REST)
        state = dispatch(run, actions.OpenNode(node_id), actions.RestHeal(), actions.SetCurrentNode("elsewhere"))
        assert state.screen == Screen.OVERWORLD
        assert state.current_node_id == "elsewhere"
        assert state.node_screen_cache[node_id].did_heal

    def test_forced_event_overrides_cache(self, dispatch, run):
        node_id = find_node(run, NodeType.EVENT)
        state = dispatch(
            run,
            actions.DebugSetForcedEvent("exam_week_ladder"),
            actions.OpenNode(node_id),
            actions.EventChoose("start"),
            actions.CloseNode(),
            actions.DebugSetForcedEvent("vault"),
            actions.OpenNode(node_id),
        )
        assert state.node_screen.event_id == "vault"
        assert state.node_screen.step == EventStep.INTRO

    def test_malformed_cached_event_rebuilt(self, dispatch, run):
        node_id = find_node(run, NodeType.EVENT)
        bogus = PlainNodeScreen(node_id=node_id, node_type=NodeType.FIGHT)
        state = replace(run, node_screen_cache={node_id: bogus})
        state = dispatch(state, actions.OpenNode(node_id))
        assert isinstance(state.node_screen, EventNodeScreen)
        assert state.node_screen.step == EventStep.INTRO

    def test_close_node_outside_node_rejected(self, reducer, run):
        assert reducer.reduce(run, actions.CloseNode()) is run


class TestConfig:

    def test_custom_starting_values(self):
        reducer = RunReducer(config=EngineConfig(starting_gold=5, starting_hp=10), clock=lambda: 0)
        state = reducer.reduce(reducer.initial_state(), actions.NewRun(seed=1))
        assert state.gold == 5
        assert state.hp == 10
        assert state.max_hp == 10

    def test_initial_state_is_title(self, reducer):
        state = reducer.initial_state()
        assert isinstance(state, GameState)
        assert state.screen == Screen.TITLE
        assert state.map is None
