"""
Rest Site and Inventory Tests

Heal-or-upgrade at rest nodes (both with Comfy Pillow), consumables outside
battle, discards, the Trash Bin and in-battle consumable use.
"""

import pytest
from dataclasses import replace

from conftest import find_node, put_on_rest

from packages.runstate import actions
from packages.runstate.content.cards import BASE_CARDS, NEGATIVE_CARDS, build_upgrade_map
from packages.runstate.generation.map import NodeType
from packages.runstate.state.run import Screen


# =============================================================================
# REST
# =============================================================================


class TestRestHeal:

    def test_heals_thirty_percent(self, reducer, run):
        state = put_on_rest(run, hp=10)
        state = reducer.reduce(state, actions.RestHeal())
        assert state.hp == 22
        assert state.node_screen.did_heal

    def test_heal_capped_at_max(self, reducer, run):
        state = reducer.reduce(put_on_rest(run, hp=39), actions.RestHeal())
        assert state.hp == 40

    def test_heal_once(self, dispatch, reducer, run):
        state = dispatch(put_on_rest(run, hp=10), actions.RestHeal())
        assert reducer.reduce(state, actions.RestHeal()) is state

    def test_outside_rest(self, reducer, run):
        assert reducer.reduce(run, actions.RestHeal()) is run


class TestRestUpgrade:

    def test_upgrade(self, reducer, run):
        state = reducer.reduce(put_on_rest(run), actions.RestUpgrade("atk_strike"))
        assert state.deck.count("atk_strike_u") == 1
        assert state.deck.count("atk_strike") == 2
        assert state.node_screen.did_upgrade

    def test_already_upgraded_card_rejected(self, reducer, run):
        state = put_on_rest(run).with_deck(("atk_strike_u",))
        assert reducer.reduce(state, actions.RestUpgrade("atk_strike_u")) is state

    def test_upgrade_map_covers_base_cards(self):
        upgrades = build_upgrade_map()
        assert {c.id: c.id + "_u" for c in BASE_CARDS} == upgrades
        assert not any(c.id in upgrades for c in NEGATIVE_CARDS)

    def test_card_must_be_in_deck(self, reducer, run):
        state = put_on_rest(run)
        assert reducer.reduce(state, actions.RestUpgrade("atk_nothing_but_net")) is state

    def test_heal_and_upgrade_exclusive(self, dispatch, reducer, run):
        state = dispatch(put_on_rest(run, hp=10), actions.RestHeal())
        assert reducer.reduce(state, actions.RestUpgrade("atk_strike")) is state

        state = dispatch(put_on_rest(run, hp=10), actions.RestUpgrade("atk_strike"))
        assert reducer.reduce(state, actions.RestHeal()) is state

    @pytest.mark.parametrize("order", ["heal_first", "upgrade_first"])
    def test_comfy_pillow_allows_both(self, dispatch, run, order):
        state = put_on_rest(run, hp=10, current_supply_ids=("sup_upgrade_rest",))
        steps = [actions.RestHeal(), actions.RestUpgrade("blk_guard")]
        if order == "upgrade_first":
            steps.reverse()
        state = dispatch(state, *steps)
        assert state.hp == 22
        assert "blk_guard_u" in state.deck
        assert state.node_screen.did_heal and state.node_screen.did_upgrade


# =============================================================================
# CONSUMABLES
# =============================================================================


class TestConsumablesOutOfBattle:

    def test_water_raises_max_hp(self, reducer, run):
        state = replace(run, consumables=("con_water",), hp=30)
        state = reducer.reduce(state, actions.UseConsumable("con_water"))
        assert state.max_hp == 47
        assert state.hp == 37
        assert state.consumables == ()

    def test_other_consumables_wait_for_battle(self, reducer, run):
        state = replace(run, consumables=("con_sandwich",))
        assert reducer.reduce(state, actions.UseConsumable("con_sandwich")) is state

    def test_must_own_it(self, reducer, run):
        assert reducer.reduce(run, actions.UseConsumable("con_water")) is run

    def test_discard(self, reducer, run):
        state = replace(run, consumables=("con_apple", "con_chips", "con_apple"))
        state = reducer.reduce(state, actions.DiscardConsumable("con_apple"))
        assert state.consumables == ("con_chips", "con_apple")

    def test_discard_missing(self, reducer, run):
        assert reducer.reduce(run, actions.DiscardConsumable("con_apple")) is run


class TestTrashBin:

    def test_removes_card_and_bin(self, reducer, run):
        state = replace(run, consumables=("con_trash_bin",))
        state = reducer.reduce(state, actions.TrashBinRemoveCard("skl_focus"))
        assert "skl_focus" not in state.deck
        assert state.consumables == ()

    def test_needs_bin(self, reducer, run):
        assert reducer.reduce(run, actions.TrashBinRemoveCard("skl_focus")) is run

    def test_keeps_last_card(self, reducer, run):
        state = replace(run, consumables=("con_trash_bin",)).with_deck(("skl_focus",))
        assert reducer.reduce(state, actions.TrashBinRemoveCard("skl_focus")) is state

    def test_not_in_battle(self, reducer, run):
        state = replace(run, consumables=("con_trash_bin",), screen=Screen.BATTLE)
        assert reducer.reduce(state, actions.TrashBinRemoveCard("skl_focus")) is state


class TestConsumablesInBattle:

    @pytest.fixture
    def fighting(self, dispatch, run):
        node_id = find_node(run, NodeType.FIGHT)
        state = replace(run, consumables=("con_sandwich", "con_water", "con_answer_key"), hp=20)
        return dispatch(state, actions.StartBattle(node_id))

    def test_sandwich_heals_run_hp(self, reducer, fighting):
        state = reducer.reduce(fighting, actions.UseConsumable("con_sandwich"))
        assert state.battle.player_hp == 32
        assert state.hp == 32
        assert state.consumables == ("con_water", "con_answer_key")

    def test_water_in_battle(self, reducer, fighting):
        state = reducer.reduce(fighting, actions.UseConsumable("con_water"))
        assert state.max_hp == 47
        assert state.battle.player_max_hp == 47
        assert state.hp == 27

    def test_unused_item_stays(self, reducer, fighting):
        """Answer Key with no open question does nothing."""
        assert reducer.reduce(fighting, actions.UseConsumable("con_answer_key")) is fighting
