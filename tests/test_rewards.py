"""
Reward Tests

Post-battle loot generation (seeded per node, supply modifiers, challenge
bonuses) and the claim-once reward screen.
"""

import pytest
from dataclasses import replace

from conftest import find_node

from packages.runstate import actions
from packages.runstate.content.cards import Rarity
from packages.runstate.generation.map import NodeType
from packages.runstate.generation.rewards import MAX_CARD_OFFERS, _force_rare, build_battle_rewards
from packages.runstate.state.rng import make_rng
from packages.runstate.state.run import Screen


@pytest.fixture
def on_reward(dispatch, run):
    """Run on the reward screen after winning the first FIGHT."""
    node_id = find_node(run, NodeType.FIGHT)
    return dispatch(
        run,
        actions.OpenNode(node_id),
        actions.StartBattle(node_id, difficulty=1),
        actions.BattleEnded(victory=True, player_hp_after=30),
    )


# =============================================================================
# GENERATION
# =============================================================================


class TestBuildRewards:
    """build_battle_rewards is a pure function of seed and node."""

    def test_deterministic(self, reducer):
        a = build_battle_rewards(42, "d3_n0", 1, (), reducer.catalog)
        b = build_battle_rewards(42, "d3_n0", 1, (), reducer.catalog)
        assert a == b

    def test_nodes_differ(self, reducer):
        offers = {
            build_battle_rewards(42, f"d{d}_n0", 1, (), reducer.catalog).card_offer_ids
            for d in range(1, 10)
        }
        assert len(offers) > 1

    def test_default_offers(self, reducer):
        reward = build_battle_rewards(42, "d3_n0", 1, (), reducer.catalog)
        assert len(reward.card_offer_ids) == 3
        assert len(set(reward.card_offer_ids)) == 3
        for cid in reward.card_offer_ids:
            card = reducer.catalog.card(cid)
            assert not card.event_only
            assert not card.is_upgraded
        assert reward.gold == 10
        assert reward.consumable_offer_id is not None
        assert not reducer.catalog.consumable(reward.consumable_offer_id).event_only
        assert reward.supply_offer_id is None
        assert not reward.is_challenge

    @pytest.mark.parametrize("difficulty,gold", [(1, 10), (2, 14), (3, 18), (9, 10)])
    def test_gold_by_difficulty(self, reducer, difficulty, gold):
        assert build_battle_rewards(1, "d5_n1", difficulty, (), reducer.catalog).gold == gold

    def test_golden_pencil_rounds_up(self, reducer):
        reward = build_battle_rewards(1, "d5_n1", 1, ("sup_gold_boost",), reducer.catalog)
        assert reward.gold == 15

    def test_photocopier_six_capped(self, reducer):
        reward = build_battle_rewards(1, "d5_n1", 1, ("sup_double_offers",), reducer.catalog)
        assert len(reward.card_offer_ids) == MAX_CARD_OFFERS

    def test_note_taker_upgrades(self, reducer):
        reward = build_battle_rewards(1, "d5_n1", 1, ("sup_upgraded_rewards",), reducer.catalog)
        for cid in reward.card_offer_ids:
            assert reducer.catalog.card(cid).is_upgraded

    @pytest.mark.parametrize("seed", range(1, 30))
    def test_challenge_bonuses(self, reducer, seed):
        reward = build_battle_rewards(seed, "d6_n0", 2, (), reducer.catalog, is_challenge=True)
        assert reward.is_challenge
        assert len(reward.card_offer_ids) == 4
        assert reward.gold == 14 + 8
        rarities = {reducer.catalog.card(cid).rarity for cid in reward.card_offer_ids}
        assert rarities & {Rarity.RARE, Rarity.ULTRA_RARE}
        assert reward.supply_offer_id is not None
        assert not reducer.catalog.supply(reward.supply_offer_id).event_only

    def test_force_rare_leaves_empty_offer(self, reducer):
        assert _force_rare(make_rng(1), [], reducer.catalog.card_pool()) == []

    def test_force_rare_swaps_one_common(self, reducer):
        pool = reducer.catalog.card_pool()
        commons = [c for c in pool if c.rarity == Rarity.COMMON][:3]
        out = _force_rare(make_rng(1), commons, pool)
        assert len(out) == 3
        assert sum(c.rarity in (Rarity.RARE, Rarity.ULTRA_RARE) for c in out) == 1

    def test_challenge_supply_excludes_owned(self, reducer):
        owned = tuple(s.id for s in reducer.catalog.supply_pool()[:-1])
        reward = build_battle_rewards(3, "d6_n0", 2, owned, reducer.catalog, is_challenge=True)
        assert reward.supply_offer_id == reducer.catalog.supply_pool()[-1].id


# =============================================================================
# CLAIMS
# =============================================================================


class TestRewardClaims:
    """Each part of the reward is claimed at most once."""

    def test_claim_gold_once(self, reducer, on_reward):
        state = reducer.reduce(on_reward, actions.RewardClaimGold())
        assert state.gold == on_reward.gold + on_reward.reward.gold
        assert state.reward.gold_claimed
        assert reducer.reduce(state, actions.RewardClaimGold()) is state

    def test_select_must_be_offered(self, reducer, on_reward):
        assert reducer.reduce(on_reward, actions.RewardSelectCard("not_offered")) is on_reward

    def test_confirm_needs_selection(self, reducer, on_reward):
        assert reducer.reduce(on_reward, actions.RewardConfirmCard()) is on_reward

    def test_select_and_confirm(self, dispatch, reducer, on_reward):
        card_id = on_reward.reward.card_offer_ids[1]
        state = dispatch(on_reward, actions.RewardSelectCard(card_id), actions.RewardConfirmCard())
        assert state.deck == on_reward.deck + (card_id,)
        assert state.reward.card_confirmed
        assert reducer.reduce(state, actions.RewardConfirmCard()) is state
        assert reducer.reduce(state, actions.RewardSkipCards()) is state
        assert reducer.reduce(state, actions.RewardSelectCard(card_id)) is state

    def test_reselect_before_confirm(self, dispatch, on_reward):
        first, second = on_reward.reward.card_offer_ids[:2]
        state = dispatch(on_reward, actions.RewardSelectCard(first), actions.RewardSelectCard(second))
        assert state.reward.selected_card_id == second

    def test_skip_cards(self, dispatch, on_reward):
        state = dispatch(on_reward, actions.RewardSkipCards())
        assert state.reward.card_confirmed
        assert state.deck == on_reward.deck

    def test_claim_consumable(self, reducer, on_reward):
        state = reducer.reduce(on_reward, actions.RewardClaimConsumable())
        assert state.consumables == (on_reward.reward.consumable_offer_id,)
        assert reducer.reduce(state, actions.RewardClaimConsumable()) is state

    def test_claim_consumable_full_inventory(self, reducer, on_reward):
        full = replace(on_reward, consumables=("con_apple", "con_apple", "con_apple"))
        assert reducer.reduce(full, actions.RewardClaimConsumable()) is full

    def test_no_supply_on_normal_fight(self, reducer, on_reward):
        assert reducer.reduce(on_reward, actions.RewardClaimSupply()) is on_reward

    def test_claim_challenge_supply(self, dispatch, reducer, on_reward):
        reward = build_battle_rewards(
            on_reward.seed, on_reward.current_node_id, 2, (), reducer.catalog, is_challenge=True
        )
        state = replace(on_reward, reward=reward)
        state = dispatch(state, actions.RewardClaimSupply())
        assert state.has_supply(reward.supply_offer_id)
        assert state.reward.supply_offer_id is None
        assert reducer.reduce(state, actions.RewardClaimSupply()) is state

    def test_skip_extras(self, dispatch, reducer, on_reward):
        state = dispatch(on_reward, actions.RewardSkipExtras())
        assert state.reward.gold_claimed and state.reward.consumable_claimed
        assert state.gold == on_reward.gold
        assert reducer.reduce(state, actions.RewardSkipExtras()) is state

    def test_skip_all(self, dispatch, on_reward):
        state = dispatch(on_reward, actions.RewardSkipAll())
        reward = state.reward
        assert reward.card_confirmed and reward.gold_claimed and reward.consumable_claimed
        assert reward.supply_offer_id is None

    def test_claims_need_reward_screen(self, reducer, on_reward):
        away = replace(on_reward, screen=Screen.OVERWORLD)
        assert reducer.reduce(away, actions.RewardClaimGold()) is away


class TestRewardNavigation:
    """Leaving the reward screen and moving on."""

    def test_claim_reward_returns_to_overworld(self, dispatch, on_reward):
        state = dispatch(on_reward, actions.ClaimReward())
        assert state.screen == Screen.OVERWORLD
        assert state.reward == on_reward.reward

    def test_reopen_pending_reward(self, dispatch, on_reward):
        state = dispatch(on_reward, actions.ClaimReward(), actions.OpenReward())
        assert state.screen == Screen.REWARD

    def test_moving_on_forfeits_and_locks(self, dispatch, reducer, on_reward):
        node_id = on_reward.current_node_id
        target = on_reward.map.get(node_id).next[0]
        state = dispatch(on_reward, actions.ClaimReward(), actions.OpenNode(target))
        assert state.reward is None
        assert state.reward_node_id is None
        assert state.is_locked(node_id)
        assert reducer.reduce(state, actions.StartBattle(node_id)) is state

    def test_reopening_reward_node_keeps_reward(self, dispatch, on_reward):
        node_id = on_reward.current_node_id
        state = dispatch(on_reward, actions.ClaimReward(), actions.OpenNode(node_id))
        assert state.reward is not None
        assert not state.is_locked(node_id)
