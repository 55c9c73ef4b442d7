#!/usr/bin/env python3
"""
Run State Engine - Command Line Interface

CLI for inspecting seeded runs without a UI: map dumps, RNG streams, a
scripted playthrough and node-quota surveys across many seeds.

Usage:
    python cli.py map --seed 42
    python cli.py map --seed 42 --check --json
    python cli.py rng --seed 42 --count 10 --context "shop:n3_1" --salt 0x5A0F
    python cli.py play --seed 42 --steps 200
    python cli.py survey --seeds 500
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

import numpy as np

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from packages.runstate import actions
from packages.runstate.generation.map import (
    NodeType,
    RunMap,
    count_node_types,
    generate_map,
    map_to_string,
    validate_map,
)
from packages.runstate.generation.questions import difficulty_for_depth
from packages.runstate.reducer import RunReducer
from packages.runstate.state.rng import make_rng, make_scoped_rng
from packages.runstate.state.run import GameState, Screen, SetupSelection
from packages.runstate.state.screens import (
    EventNodeScreen,
    EventStep,
    GatePrompt,
    PlainNodeScreen,
    RestNodeScreen,
    ShopNodeScreen,
)

logger = logging.getLogger("cli")

BATTLE_NODE_TYPES = (NodeType.FIGHT, NodeType.CHALLENGE, NodeType.BOSS)


def parse_int(value: str) -> int:
    """Accept decimal or 0x-prefixed integers (salts are usually hex)."""
    return int(value, 0)


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_counts(counts: Dict[NodeType, int]) -> List[str]:
    return [f"  [{t.name[0]}] {t.name}: {counts[t]}" for t in NodeType if counts.get(t)]


def map_to_json(run_map: RunMap) -> Dict[str, Any]:
    return {
        "seed": run_map.seed,
        "sets": run_map.sets,
        "start_id": run_map.start_id,
        "boss_id": run_map.boss_id,
        "nodes": [
            {"id": n.id, "depth": n.depth, "type": n.type.value, "next": list(n.next)}
            for n in sorted(run_map.nodes.values(), key=lambda n: (n.depth, n.id))
        ],
    }


def format_status(step: int, state: GameState) -> str:
    node = state.map.get(state.current_node_id) if state.map else None
    where = f"{node.id} ({node.type.value})" if node else "-"
    return (
        f"{str(step).rjust(4)}  {state.screen.value.ljust(9)} node={where.ljust(16)} "
        f"hp={state.hp}/{state.max_hp} gold={state.gold} deck={len(state.deck)}"
    )


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_map(args) -> int:
    """Generate and display a map."""
    run_map = generate_map(args.seed)
    problems = validate_map(run_map) if args.check else []

    if args.json:
        data = map_to_json(run_map)
        if args.check:
            data["problems"] = problems
        print(json.dumps(data, indent=2))
    else:
        print(f"Seed: {args.seed}")
        print()
        print(map_to_string(run_map))
        print("\nNode Distribution:")
        print("\n".join(format_counts(count_node_types(run_map, exclude_final_layer=False))))
        if args.check:
            print()
            if problems:
                print(f"INVALID ({len(problems)} problems):")
                for problem in problems:
                    print(f"  - {problem}")
            else:
                print("Map is valid.")

    return 1 if problems else 0


def cmd_rng(args) -> int:
    """Display the float stream for a seed, optionally scoped by context."""
    if args.context:
        rng = make_scoped_rng(args.seed, args.context, args.salt)
        label = f"scoped({args.seed}, {args.context!r}, salt={args.salt:#x})"
    else:
        rng = make_rng(args.seed)
        label = f"make_rng({args.seed})"

    values = [rng() for _ in range(args.count)]
    if args.json:
        print(json.dumps({"rng": label, "values": values}, indent=2))
        return 0

    print(label)
    for i, value in enumerate(values):
        print(f"  {i}: {value:.10f}")
    return 0


# -----------------------------------------------------------------------------
# Scripted play
# -----------------------------------------------------------------------------

def next_node_id(state: GameState) -> Optional[str]:
    """First unlocked successor of the current node."""
    node = state.map.get(state.current_node_id)
    if node is None:
        return state.map.start_id
    for target in node.next:
        if not state.is_locked(target):
            return target
    return node.next[0] if node.next else None


def choose_action(state: GameState, reducer: RunReducer) -> Optional[object]:
    """Greedy-safe policy: fight everything, heal at rests, leave events."""
    screen = state.screen

    if screen == Screen.OVERWORLD:
        if not state.setup_done:
            return actions.CompleteSetup(SetupSelection())
        target = next_node_id(state)
        return actions.OpenNode(target) if target else None

    if screen == Screen.BATTLE:
        battle = state.battle
        incoming = sum(e.intent_damage for e in battle.living_enemies)
        return actions.BattleEnded(
            victory=True,
            gold_gained=10 * battle.difficulty if battle.is_boss else 0,
            is_boss=battle.is_boss,
            player_hp_after=max(1, battle.player_hp - incoming),
        )

    if screen == Screen.REWARD:
        reward = state.reward
        if reward is not None and not reward.gold_claimed:
            return actions.RewardClaimGold()
        if reward is not None and not reward.card_confirmed and reward.card_offer_ids:
            if reward.selected_card_id is None:
                return actions.RewardSelectCard(reward.card_offer_ids[0])
            return actions.RewardConfirmCard()
        return actions.ClaimReward()

    if screen != Screen.NODE:
        return None

    node_screen = state.node_screen
    if isinstance(node_screen, PlainNodeScreen) and node_screen.node_type in BATTLE_NODE_TYPES:
        depth = state.depth_of(node_screen.node_id)
        return actions.StartBattle(node_screen.node_id, difficulty=difficulty_for_depth(depth))
    if isinstance(node_screen, RestNodeScreen) and not node_screen.did_heal and not node_screen.did_upgrade:
        return actions.RestHeal()
    if isinstance(node_screen, EventNodeScreen):
        if node_screen.step == EventStep.INTRO:
            event = reducer.catalog.event(node_screen.event_id)
            choice_ids = [c.id for c in event.choices] if event else []
            if not choice_ids:
                return actions.CloseNode()
            return actions.EventChoose("leave" if "leave" in choice_ids else choice_ids[-1])
        if node_screen.step == EventStep.QUESTION_GATE and isinstance(node_screen.prompt, GatePrompt):
            return actions.EventGateAnswer(node_screen.prompt.question.answer)
    return actions.CloseNode()


def cmd_play(args) -> int:
    """Walk a seeded run with a scripted policy and print every step."""
    reducer = RunReducer()
    state = reducer.reduce(reducer.initial_state(), actions.NewRun(seed=args.seed))
    print(format_status(0, state))

    for step in range(1, args.steps + 1):
        action = choose_action(state, reducer)
        if action is None:
            break
        next_state = reducer.reduce(state, action)
        if next_state is state:
            logger.warning(f"Policy stuck on {type(action).__name__} at step {step}")
            break
        state = next_state
        logger.debug(f"{type(action).__name__} -> {state.screen.value}")
        print(format_status(step, state))
        if state.screen in (Screen.VICTORY, Screen.DEFEAT):
            break

    outcome = state.last_outcome.value if state.last_outcome else "unfinished"
    print(f"\nOutcome: {outcome}")
    return 0


# -----------------------------------------------------------------------------
# Survey
# -----------------------------------------------------------------------------

def survey_counts(seeds: List[int]) -> Dict[str, Any]:
    """Node-type statistics (final REST layer excluded) across ``seeds``."""
    types = list(NodeType)
    matrix = np.zeros((len(seeds), len(types)), dtype=np.int64)
    invalid = 0
    for row, seed in enumerate(seeds):
        run_map = generate_map(seed)
        if validate_map(run_map):
            invalid += 1
        counts = count_node_types(run_map)
        matrix[row] = [counts[t] for t in types]

    stats = {}
    for col, node_type in enumerate(types):
        column = matrix[:, col]
        stats[node_type.name] = {
            "mean": float(column.mean()),
            "std": float(column.std()),
            "min": int(column.min()),
            "max": int(column.max()),
        }
    return {"seeds": len(seeds), "invalid": invalid, "types": stats}


def cmd_survey(args) -> int:
    """Node quota statistics across many seeds."""
    seeds = list(range(args.start, args.start + args.seeds))
    result = survey_counts(seeds)

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        print(f"Surveyed {result['seeds']} seeds ({result['invalid']} invalid)")
        print(f"{'type'.ljust(10)} {'mean':>7} {'std':>7} {'min':>4} {'max':>4}")
        for name, s in result["types"].items():
            print(f"{name.ljust(10)} {s['mean']:7.2f} {s['std']:7.2f} {s['min']:4d} {s['max']:4d}")
    return 1 if result["invalid"] else 0


# =============================================================================
# MAIN
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run State Engine - CLI for inspecting seeded runs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s map --seed 42 --check
  %(prog)s rng --seed 42 --context shop:n3_1 --salt 0x5A0F
  %(prog)s play --seed 42 --steps 200
  %(prog)s survey --seeds 500 --json
        """
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Map command
    map_parser = subparsers.add_parser("map", help="Generate and display a map")
    map_parser.add_argument("--seed", "-s", type=parse_int, required=True, help="Run seed")
    map_parser.add_argument("--check", action="store_true", help="Validate map rules (exit 1 when invalid)")
    map_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # RNG command
    rng_parser = subparsers.add_parser("rng", help="Print an RNG float stream")
    rng_parser.add_argument("--seed", "-s", type=parse_int, required=True, help="Run seed")
    rng_parser.add_argument("--count", "-n", type=int, default=10, help="Number of values to show")
    rng_parser.add_argument("--context", "-c", type=str, default=None, help="Scope string for a scoped stream")
    rng_parser.add_argument("--salt", type=parse_int, default=0, help="Salt for the scoped stream")
    rng_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Play command
    play_parser = subparsers.add_parser("play", help="Walk a run with a scripted policy")
    play_parser.add_argument("--seed", "-s", type=parse_int, required=True, help="Run seed")
    play_parser.add_argument("--steps", type=int, default=300, help="Maximum actions to dispatch")

    # Survey command
    survey_parser = subparsers.add_parser("survey", help="Node quota statistics across seeds")
    survey_parser.add_argument("--seeds", "-n", type=int, default=200, help="Number of seeds")
    survey_parser.add_argument("--start", type=int, default=1, help="First seed")
    survey_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    # Dispatch to command handler
    commands = {
        "map": cmd_map,
        "rng": cmd_rng,
        "play": cmd_play,
        "survey": cmd_survey,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
