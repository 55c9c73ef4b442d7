"""
Combat Handler - the run side of a battle.

The reducer never resolves card play itself. It hands a BattleStartRequest to
the injected BattleModule, stores the returned BattleState, merges later
BattleUpdate snapshots and resolves BattleEnded into DEFEAT / VICTORY / REWARD /
OVERWORLD.

Actions:
- StartBattle: seeded encounter selection with anti-repeat, supply start hooks
- BattleUpdate: hp sync, supply proc flashes, battle wrong-answer logging
- BattleEnded: ordered resolution (fatal hp, boss, skip-rewards, rewards, loss)

SimpleBattleModule is the default module: it deals the opening hand and
resolves consumables, nothing more.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from ..actions import BattleEnded, BattleUpdate, StartBattle
from ..content.catalog import ContentCatalog, default_catalog
from ..content.consumables import (
    CON_ABSENCE_NOTE,
    CON_ANSWER_KEY,
    CON_APPLE,
    CON_CHEAT_SHEET,
    CON_CHIPS,
    CON_COOKIE,
    CON_ERASER,
    CON_MOLDY_FOOD,
    CON_RAIN_COAT,
    CON_SANDWICH,
    CON_SHAKE,
    CON_TRAILMIX,
    CON_WATER,
)
from ..content.encounters import Encounter
from ..content.supplies import (
    SUP_DOUBLE_OFFERS,
    SUP_GOLD_BOOST,
    SUP_NO_NEGATIVE_CARDS,
    SUP_POST_BATTLE_HEAL,
    SUP_UPGRADED_REWARDS,
)
from ..effects.supplies import (
    apply_gold_gain,
    apply_supplies_to_new_battle,
    flash_supplies,
    post_battle_heal_amount,
)
from ..generation.encounters import encounter_to_enemy_states, select_encounter
from ..generation.map import NodeType
from ..generation.rewards import build_battle_rewards
from ..state.battle import AnswerResult, BattleMeta, BattleState, EnemyState
from ..state.rng import RNG, make_scoped_rng, shuffle
from ..state.run import AnswerSource, GameState, RunOutcome, Screen
from ..state.screens import NodeScreen
from .common import ReducerContext, enter_defeat, gain_gold, handles, log_wrong_answer

logger = logging.getLogger(__name__)


# ============================================================================
# BATTLE MODULE CONTRACT
# ============================================================================

@dataclass(frozen=True)
class BattleStartRequest:
    """Everything the battle module needs to build a fresh battle."""
    rng: RNG
    difficulty: int
    is_boss: bool
    player_hp_start: int
    player_max_hp: int
    deck_card_ids: Tuple[str, ...]
    enemies: Tuple[EnemyState, ...]
    player_name: str = "Player"
    player_sprite: Optional[str] = None


class BattleModule(Protocol):
    def start_battle(self, request: BattleStartRequest) -> BattleState:
        ...

    def use_consumable(
        self, rng: RNG, battle: BattleState, consumable_id: str, target_index: int = 0
    ) -> Tuple[BattleState, bool]:
        ...


# ============================================================================
# DEFAULT BATTLE MODULE
# ============================================================================

HAND_SIZE = 5
STARTING_ENERGY = 3

APPLE_REGEN = 5
SANDWICH_HEAL = 12
RAIN_COAT_BLOCK = 8
COOKIE_DRAW = 3
SHAKE_STRENGTH = 2
TRAILMIX_ENERGY = 2
TRAILMIX_VULNERABLE = 3
WATER_MAX_HP = 7
CHIPS_DAMAGE = 10
MOLDY_FOOD_POISON = 5

ERASABLE_DEBUFFS = ("poison", "weak", "vulnerable")


def _bump(statuses: Dict[str, int], key: str, delta: int) -> Dict[str, int]:
    out = dict(statuses)
    out[key] = out.get(key, 0) + delta
    return out


class SimpleBattleModule:
    """Minimal battle module: opening hand plus consumable effects."""

    def __init__(self, catalog: Optional[ContentCatalog] = None):
        self.catalog = catalog or default_catalog()

    def start_battle(self, request: BattleStartRequest) -> BattleState:
        draw_pile = shuffle(request.rng, request.deck_card_ids)
        hand, draw_pile = draw_pile[:HAND_SIZE], draw_pile[HAND_SIZE:]
        return BattleState(
            turn=1,
            difficulty=request.difficulty,
            is_boss=request.is_boss,
            player_hp=request.player_hp_start,
            player_max_hp=request.player_max_hp,
            energy=STARTING_ENERGY,
            max_energy=STARTING_ENERGY,
            enemies=tuple(request.enemies),
            draw_pile=tuple(draw_pile),
            hand=tuple(hand),
        )

    def _target(self, battle: BattleState, target_index: int) -> Optional[int]:
        """Requested enemy if alive, else the first living one."""
        if 0 <= target_index < len(battle.enemies) and battle.enemies[target_index].is_alive:
            return target_index
        for i, enemy in enumerate(battle.enemies):
            if enemy.is_alive:
                return i
        return None

    def _with_enemy(self, battle: BattleState, index: int, enemy: EnemyState) -> BattleState:
        enemies = list(battle.enemies)
        enemies[index] = enemy
        return replace(battle, enemies=tuple(enemies))

    def use_consumable(
        self, rng: RNG, battle: BattleState, consumable_id: str, target_index: int = 0
    ) -> Tuple[BattleState, bool]:
        """Apply a consumable. Returns (battle, used); unused items stay in the inventory."""
        if battle.all_enemies_defeated or battle.player_hp <= 0:
            return battle, False

        if consumable_id == CON_ANSWER_KEY:
            if battle.awaiting is None:
                return battle, False
            return replace(battle, awaiting=None, last_result=AnswerResult(True, "Answer Key used.")), True

        if consumable_id == CON_APPLE:
            return replace(battle, player_statuses=_bump(battle.player_statuses, "regen", APPLE_REGEN)), True

        if consumable_id == CON_SANDWICH:
            hp = min(battle.player_max_hp, battle.player_hp + SANDWICH_HEAL)
            return replace(battle, player_hp=hp), True

        if consumable_id == CON_RAIN_COAT:
            return replace(battle, player_block=battle.player_block + RAIN_COAT_BLOCK), True

        if consumable_id == CON_COOKIE:
            drawn = battle.draw_pile[:COOKIE_DRAW]
            return replace(battle, hand=battle.hand + drawn, draw_pile=battle.draw_pile[COOKIE_DRAW:]), True

        if consumable_id == CON_SHAKE:
            return battle.with_status("strength", SHAKE_STRENGTH), True

        if consumable_id == CON_TRAILMIX:
            battle = replace(battle, energy=battle.energy + TRAILMIX_ENERGY)
            idx = self._target(battle, 0)
            if idx is not None:
                enemy = battle.enemies[idx]
                battle = self._with_enemy(
                    battle, idx, replace(enemy, statuses=_bump(enemy.statuses, "vulnerable", TRAILMIX_VULNERABLE))
                )
            return battle, True

        if consumable_id == CON_WATER:
            return replace(
                battle,
                player_max_hp=battle.player_max_hp + WATER_MAX_HP,
                player_hp=battle.player_hp + WATER_MAX_HP,
            ), True

        if consumable_id == CON_ERASER:
            if not any(battle.player_statuses.get(k, 0) > 0 for k in ERASABLE_DEBUFFS):
                return battle, False
            statuses = {k: v for k, v in battle.player_statuses.items() if k not in ERASABLE_DEBUFFS}
            return replace(battle, player_statuses=statuses), True

        if consumable_id == CON_CHIPS:
            idx = self._target(battle, target_index)
            if idx is None:
                return battle, False
            enemy = battle.enemies[idx]
            return self._with_enemy(battle, idx, replace(enemy, hp=max(0, enemy.hp - CHIPS_DAMAGE))), True

        if consumable_id == CON_MOLDY_FOOD:
            idx = self._target(battle, target_index)
            if idx is None:
                return battle, False
            enemy = battle.enemies[idx]
            return self._with_enemy(
                battle, idx, replace(enemy, statuses=_bump(enemy.statuses, "poison", MOLDY_FOOD_POISON))
            ), True

        if consumable_id == CON_ABSENCE_NOTE:
            enemies = tuple(replace(e, hp=0) for e in battle.enemies)
            return replace(battle, enemies=enemies).with_meta(skip_rewards=True), True

        if consumable_id == CON_CHEAT_SHEET:
            hand = tuple(self.catalog.upgraded_id(cid) for cid in battle.hand)
            return replace(battle, hand=hand), True

        return battle, False


# ============================================================================
# LAUNCH
# ============================================================================

def launch_battle(
    state: GameState,
    ctx: ReducerContext,
    rng: RNG,
    encounter: Encounter,
    difficulty: int,
    is_boss: bool = False,
    is_challenge: bool = False,
    deck_card_ids: Sequence[str] = (),
    skip_rewards: bool = False,
    return_node_screen: Optional[NodeScreen] = None,
) -> GameState:
    """Start a battle against ``encounter`` and switch to the BATTLE screen.

    Enemy intents are rolled from ``rng`` before the battle module sees it.
    Callers set ``current_node_id`` and ``used_encounter_ids`` themselves.
    """
    deck = tuple(deck_card_ids) or state.deck
    enemies = encounter_to_enemy_states(encounter, rng)
    setup = state.setup
    request = BattleStartRequest(
        rng=rng,
        difficulty=difficulty,
        is_boss=is_boss,
        player_hp_start=state.hp,
        player_max_hp=state.max_hp,
        deck_card_ids=deck,
        enemies=tuple(enemies),
        player_name=setup.player_name if setup else "Player",
        player_sprite=setup.character_id if setup else None,
    )
    battle = ctx.battle.start_battle(request)

    supplies = state.current_supply_ids
    battle = battle.with_meta(
        supply_id=supplies[0] if supplies else None,
        supply_ids=supplies,
        is_challenge=is_challenge,
        run_gold=state.gold,
        skip_rewards=skip_rewards,
        return_node_screen=return_node_screen,
    )
    battle = apply_supplies_to_new_battle(battle, supplies)

    # Start-of-battle procs flash right away instead of on the first update
    procs = [sid for sid in battle.meta.proc_supply_ids if sid in supplies]
    battle = battle.with_meta(proc_supply_ids=())

    state = replace(state, battle=battle, screen=Screen.BATTLE, node_screen=None)
    state = flash_supplies(state, procs)
    logger.info(
        f"Battle started: {encounter.id} (difficulty={difficulty}, boss={is_boss}, challenge={is_challenge})"
    )
    return state


# ============================================================================
# ACTIONS
# ============================================================================

@handles(StartBattle)
def start_battle(state: GameState, action: StartBattle, ctx: ReducerContext) -> GameState:
    node_id = action.node_id
    if state.is_locked(node_id):
        return state

    node = state.map.get(node_id) if state.map else None
    is_boss = action.is_boss or (node is not None and node.type == NodeType.BOSS)
    is_challenge = action.is_challenge or (node is not None and node.type == NodeType.CHALLENGE)
    depth = state.depth_of(node_id)

    rng = make_scoped_rng(state.seed, node_id)
    encounter, used = select_encounter(
        rng,
        ctx.catalog,
        depth,
        state.used_encounter_ids,
        is_boss=is_boss,
        is_challenge=is_challenge,
        attempts=ctx.config.encounter_repick_attempts,
    )

    state = launch_battle(
        state,
        ctx,
        rng,
        encounter,
        difficulty=action.difficulty,
        is_boss=is_boss,
        is_challenge=is_challenge,
        deck_card_ids=action.deck_card_ids,
    )
    return replace(state, used_encounter_ids=used, current_node_id=node_id)


@handles(BattleUpdate)
def battle_update(state: GameState, action: BattleUpdate, ctx: ReducerContext) -> GameState:
    if state.screen != Screen.BATTLE:
        return state

    prev = state.battle
    battle = action.battle

    procs = [sid for sid in battle.meta.proc_supply_ids if state.has_supply(sid)]
    if battle.meta.proc_supply_ids:
        battle = battle.with_meta(proc_supply_ids=())

    state = replace(state, battle=battle, hp=battle.player_hp)
    if procs:
        # Perfect Record's block notice takes the whole flash
        state = flash_supplies(state, [SUP_NO_NEGATIVE_CARDS] if SUP_NO_NEGATIVE_CARDS in procs else procs)

    just_failed = (
        prev is not None
        and prev.awaiting is not None
        and battle.last_result is not None
        and battle.last_result is not prev.last_result
        and battle.last_result.correct is False
    )
    if just_failed:
        question = prev.awaiting.question
        card_name = ctx.catalog.card_name(prev.awaiting.card_id)
        depth = state.current_depth(default=0)
        state = log_wrong_answer(
            state,
            ctx,
            AnswerSource.BATTLE,
            location=f"Floor {depth} • Battle • {card_name}",
            prompt=question.prompt,
            expected=question.display_answer,
            given=battle.meta.last_answer_input,
        )
    return state


@handles(BattleEnded)
def battle_ended(state: GameState, action: BattleEnded, ctx: ReducerContext) -> GameState:
    if state.screen != Screen.BATTLE:
        return state

    battle = state.battle
    meta = battle.meta if battle is not None else BattleMeta()
    supplies = state.current_supply_ids
    node_id = state.current_node_id

    skip = action.skip_rewards or meta.skip_rewards
    is_boss = action.is_boss or (battle is not None and battle.is_boss)
    hp_after = action.player_hp_after if action.player_hp_after is not None else state.hp
    hp_after = max(0, min(state.max_hp, hp_after))
    gold = apply_gold_gain(0 if skip else action.gold_gained, supplies)

    flashes: List[str] = []
    if action.victory and hp_after > 0:
        heal_amount = post_battle_heal_amount(supplies)
        if heal_amount:
            hp_after = min(state.max_hp, hp_after + heal_amount)
            flashes.append(SUP_POST_BATTLE_HEAL)
    if gold > 0 and SUP_GOLD_BOOST in supplies:
        flashes.append(SUP_GOLD_BOOST)

    state = replace(state, hp=hp_after, battle=None)
    if meta.deck_additions:
        state = state.with_deck(state.deck + tuple(meta.deck_additions))

    # (1) fatal hp wins over everything, including a victory flag
    if hp_after <= 0:
        state = gain_gold(state, gold)
        state = flash_supplies(state, [SUP_GOLD_BOOST] if SUP_GOLD_BOOST in flashes else [])
        return enter_defeat(state, ctx)

    # (2) boss
    if action.victory and is_boss:
        state = gain_gold(state, gold)
        state = flash_supplies(state, flashes)
        logger.info(f"Run {state.seed} won")
        return replace(
            state,
            screen=Screen.VICTORY,
            last_outcome=RunOutcome.VICTORY,
            run_end_ms=ctx.now_ms(),
        )

    # (3) skip-rewards victory: back to the caller's screen, no loot
    if action.victory and skip:
        state = flash_supplies(state, flashes)
        state = replace(state, reward=None, reward_node_id=None)
        if meta.return_node_screen is not None:
            return replace(state, screen=Screen.NODE, node_screen=meta.return_node_screen)
        return replace(state.with_locked(node_id), screen=Screen.OVERWORLD, node_screen=None)

    # (4) normal victory: gold waits on the reward screen
    if action.victory:
        flashes = [sid for sid in flashes if sid != SUP_GOLD_BOOST]
        if SUP_DOUBLE_OFFERS in supplies:
            flashes.append(SUP_DOUBLE_OFFERS)
        if SUP_UPGRADED_REWARDS in supplies:
            flashes.append(SUP_UPGRADED_REWARDS)
        state = flash_supplies(state, flashes)
        reward = build_battle_rewards(
            state.seed,
            node_id or "",
            battle.difficulty if battle is not None else 1,
            supplies,
            ctx.catalog,
            is_challenge=meta.is_challenge,
        )
        return replace(state, screen=Screen.REWARD, reward=reward, reward_node_id=node_id)

    # (5) non-fatal loss
    state = gain_gold(state, gold)
    state = flash_supplies(state, [SUP_GOLD_BOOST] if SUP_GOLD_BOOST in flashes else [])
    return replace(state, screen=Screen.OVERWORLD)
