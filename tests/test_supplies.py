"""
Supply Effect Tests

Battle hooks registered with ``@supply_trigger`` plus the run-level helpers the
reducer reads (gold boost, offers, heal, discount, on-gain bonuses).
"""

import pytest
from dataclasses import replace

from packages.runstate import actions
from packages.runstate.effects.supplies import (
    SupplyHook,
    apply_discount,
    apply_gold_gain,
    apply_supplies_to_new_battle,
    apply_supply_on_gain,
    card_offer_count,
    post_battle_heal_amount,
    registered_supplies,
)


@pytest.fixture
def battle(dispatch, run):
    """A fresh battle with no supplies applied."""
    return dispatch(run, actions.DebugForceBattle("easy_possessed_trio")).battle


# =============================================================================
# BATTLE HOOKS
# =============================================================================


class TestBattleHooks:

    def test_registered(self):
        assert set(registered_supplies(SupplyHook.BATTLE_START)) == {"sup_start_strength", "sup_bicycle"}
        assert set(registered_supplies(SupplyHook.TURN_START)) == {"sup_block_gain", "sup_apply_poison"}

    def test_protein_bar(self, battle):
        out = apply_supplies_to_new_battle(battle, ("sup_start_strength",))
        assert out.player_statuses.get("strength") == 2
        assert out.meta.proc_supply_ids == ("sup_start_strength",)

    def test_bicycle_refills(self, battle):
        out = apply_supplies_to_new_battle(battle, ("sup_bicycle",))
        assert out.max_energy == battle.max_energy + 2
        assert out.energy == out.max_energy

    def test_winter_coat(self, battle):
        out = apply_supplies_to_new_battle(battle, ("sup_block_gain",))
        assert out.player_block == battle.player_block + 5

    def test_deodorant_poisons_living(self, battle):
        out = apply_supplies_to_new_battle(battle, ("sup_apply_poison",))
        for enemy in out.enemies:
            assert enemy.statuses.get("poison") == 2

    def test_owned_order_kept(self, battle):
        out = apply_supplies_to_new_battle(battle, ("sup_block_gain", "sup_start_strength"))
        assert out.meta.proc_supply_ids == ("sup_block_gain", "sup_start_strength")

    def test_passive_supplies_do_nothing(self, battle):
        assert apply_supplies_to_new_battle(battle, ("sup_gold_boost",)) == battle

    def test_start_procs_flash_on_launch(self, dispatch, run):
        state = replace(run, current_supply_ids=("sup_start_strength",))
        nonce = state.supply_flash_nonce
        state = dispatch(state, actions.DebugForceBattle("easy_possessed_trio"))
        assert state.supply_flash_ids == ("sup_start_strength",)
        assert state.supply_flash_nonce == nonce + 1
        assert state.battle.meta.proc_supply_ids == ()


# =============================================================================
# RUN-LEVEL EFFECTS
# =============================================================================


class TestRunLevelEffects:

    @pytest.mark.parametrize("amount,boosted", [(10, 15), (11, 17), (1, 2), (0, 0), (-5, 0)])
    def test_gold_boost_rounds_up(self, amount, boosted):
        assert apply_gold_gain(amount, ("sup_gold_boost",)) == boosted

    def test_gold_without_boost(self):
        assert apply_gold_gain(11, ()) == 11

    def test_card_offer_count(self):
        assert card_offer_count(()) == 3
        assert card_offer_count(("sup_double_offers",)) == 6

    def test_post_battle_heal(self):
        assert post_battle_heal_amount(("sup_post_battle_heal",)) == 10
        assert post_battle_heal_amount(()) == 0

    @pytest.mark.parametrize("price,discounted", [(100, 50), (75, 37), (1, 1)])
    def test_discount(self, price, discounted):
        assert apply_discount(price, ("sup_shop_discount",)) == discounted
        assert apply_discount(price, ()) == price


class TestOnGain:

    def test_max_health_bonus_once(self, run):
        state = replace(run, hp=30)
        state = apply_supply_on_gain(state, "sup_increase_max_health")
        assert state.max_hp == 60
        assert state.hp == 50
        again = apply_supply_on_gain(state, "sup_increase_max_health")
        assert again is state

    def test_gain_flashes(self, run):
        state = apply_supply_on_gain(run, "sup_bicycle")
        assert state.supply_flash_ids == ("sup_bicycle",)
        assert "sup_bicycle" in state.applied_supply_ids
