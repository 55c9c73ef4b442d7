"""
Map Generation - layered node graph for a run.

A run map is START at depth 0, ``sets`` content layers of 1-3 nodes each, and a
single BOSS at ``sets + 1``. Edges only go from depth d to d + 1.

Guarantees:
- every content node has at least one outgoing edge (no dead ends)
- every non-START node has at least one incoming edge (no orphans)
- the last content layer is all REST and points only at the boss
- layers 1-2 hold no REST/SHOP/CHALLENGE
- at least one SHOP exists in the late-game shop window (depths 11-13)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..state.rng import RNG, make_rng, pick, shuffle

logger = logging.getLogger(__name__)


class NodeType(Enum):
    """Room types on the run map."""
    START = "START"
    FIGHT = "FIGHT"
    CHALLENGE = "CHALLENGE"
    EVENT = "EVENT"
    REST = "REST"
    SHOP = "SHOP"
    BOSS = "BOSS"


NODE_SYMBOLS = {
    NodeType.START: "S",
    NodeType.FIGHT: "M",
    NodeType.CHALLENGE: "E",
    NodeType.EVENT: "?",
    NodeType.REST: "R",
    NodeType.SHOP: "$",
    NodeType.BOSS: "B",
}


@dataclass(frozen=True)
class MapNode:
    """A single node on the run map."""
    id: str
    depth: int
    type: NodeType
    next: Tuple[str, ...] = ()

    def get_symbol(self) -> str:
        return NODE_SYMBOLS[self.type]


@dataclass(frozen=True)
class RunMap:
    """Immutable map for one run seed."""
    seed: int
    nodes: Dict[str, MapNode]
    start_id: str
    boss_id: str
    sets: int
    boss_depth: int

    def get(self, node_id: Optional[str]) -> Optional[MapNode]:
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def nodes_at_depth(self, depth: int) -> List[MapNode]:
        return sorted((n for n in self.nodes.values() if n.depth == depth), key=lambda n: n.id)

    def depth_of(self, node_id: Optional[str], default: int = 1) -> int:
        node = self.get(node_id)
        return node.depth if node is not None else default

    def parents_of(self, node_id: str) -> List[str]:
        return [n.id for n in self.nodes.values() if node_id in n.next]


@dataclass(frozen=True)
class MapConfig:
    """Configuration for map generation."""
    sets: int = 14
    node_count_choices: Tuple[int, ...] = (1, 2, 2, 2, 3)
    early_depths: Tuple[int, ...] = (1, 2)
    early_types: Tuple[NodeType, ...] = (NodeType.FIGHT, NodeType.FIGHT, NodeType.EVENT)
    base_types: Tuple[NodeType, ...] = (NodeType.FIGHT, NodeType.FIGHT, NodeType.EVENT)

    max_shops: int = 2
    max_rests: int = 3
    max_challenges: int = 2

    shop_window: Tuple[int, ...] = (11, 12, 13)

    extra_edge_chance: float = 0.55
    second_extra_edge_chance: float = 0.12

    @property
    def boss_depth(self) -> int:
        return self.sets + 1


def node_id(depth: int, index: int) -> str:
    return f"d{depth}_n{index}"


@dataclass
class _WorkNode:
    """Mutable node used while the graph is being wired."""
    id: str
    depth: int
    type: NodeType
    next: List[str] = field(default_factory=list)


# ============================================================================
# GENERATOR
# ============================================================================

class MapGenerator:
    """
    Generates run maps.

    Usage:
        rng = make_rng(seed)
        run_map = MapGenerator(rng).generate(seed)
    """

    def __init__(self, rng: RNG, config: Optional[MapConfig] = None):
        self.rng = rng
        self.config = config or MapConfig()

    def generate(self, seed: int) -> RunMap:
        cfg = self.config
        nodes: Dict[str, _WorkNode] = {}
        counts = {NodeType.SHOP: 0, NodeType.REST: 0, NodeType.CHALLENGE: 0}

        start_id = node_id(0, 0)
        nodes[start_id] = _WorkNode(start_id, 0, NodeType.START)

        for depth in range(1, cfg.sets + 1):
            count = pick(self.rng, cfg.node_count_choices)
            for index in range(count):
                nid = node_id(depth, index)
                # The final layer is forced REST and does not count toward the cap
                node_type = NodeType.REST if depth == cfg.sets else self._random_node_type(depth, counts)
                nodes[nid] = _WorkNode(nid, depth, node_type)

        try:
            self._ensure_late_shop(nodes)
        except Exception:
            logger.exception("Shop post-pass failed; keeping map as generated")

        boss_id = node_id(cfg.boss_depth, 0)
        nodes[boss_id] = _WorkNode(boss_id, cfg.boss_depth, NodeType.BOSS)

        self._wire_edges(nodes, start_id, boss_id)

        frozen = {
            nid: MapNode(n.id, n.depth, n.type, tuple(n.next))
            for nid, n in nodes.items()
        }
        return RunMap(
            seed=seed,
            nodes=frozen,
            start_id=start_id,
            boss_id=boss_id,
            sets=cfg.sets,
            boss_depth=cfg.boss_depth,
        )

    def _random_node_type(self, depth: int, counts: Dict[NodeType, int]) -> NodeType:
        cfg = self.config
        if depth in cfg.early_depths:
            return pick(self.rng, cfg.early_types)

        pool = list(cfg.base_types)
        if counts[NodeType.CHALLENGE] < cfg.max_challenges:
            pool.append(NodeType.CHALLENGE)
        if counts[NodeType.REST] < cfg.max_rests:
            pool.append(NodeType.REST)
        if counts[NodeType.SHOP] < cfg.max_shops:
            pool.append(NodeType.SHOP)

        chosen = pick(self.rng, pool)
        if chosen in counts:
            counts[chosen] += 1
        return chosen

    def _ensure_late_shop(self, nodes: Dict[str, _WorkNode]) -> None:
        """Convert a node in the shop window to SHOP if the window has none."""
        cfg = self.config
        window = set(cfg.shop_window)
        all_mid = [n for n in nodes.values() if 1 <= n.depth <= cfg.sets]
        window_nodes = [n for n in all_mid if n.depth in window]

        if not window_nodes or any(n.type == NodeType.SHOP for n in window_nodes):
            return

        existing_shops = [n for n in all_mid if n.type == NodeType.SHOP]
        if len(existing_shops) >= cfg.max_shops:
            outside = [n for n in existing_shops if n.depth not in window]
            demote = pick(self.rng, outside) if outside else existing_shops[0]
            demote.type = NodeType.FIGHT

        candidates = [n for n in window_nodes if n.type != NodeType.REST]
        chosen = pick(self.rng, candidates) if candidates else window_nodes[0]
        chosen.type = NodeType.SHOP

    def _wire_edges(self, nodes: Dict[str, _WorkNode], start_id: str, boss_id: str) -> None:
        cfg = self.config

        def by_depth(depth: int) -> List[_WorkNode]:
            return sorted((n for n in nodes.values() if n.depth == depth), key=lambda n: n.id)

        nodes[start_id].next = [n.id for n in by_depth(1)]

        for depth in range(1, cfg.sets):
            curr = by_depth(depth)
            nxt = by_depth(depth + 1)

            for n in curr:
                n.next = []

            # Every node gets at least one child
            for n in curr:
                n.next.append(pick(self.rng, nxt).id)

            # Every child gets at least one parent
            parents = shuffle(self.rng, curr)
            for idx, child in enumerate(nxt):
                parent = parents[idx % len(parents)]
                if child.id not in parent.next:
                    parent.next.append(child.id)

            # Extra branching
            for n in curr:
                if self.rng() < cfg.extra_edge_chance:
                    target = pick(self.rng, nxt).id
                    if target not in n.next:
                        n.next.append(target)
                if self.rng() < cfg.second_extra_edge_chance:
                    target = pick(self.rng, nxt).id
                    if target not in n.next:
                        n.next.append(target)

        for n in by_depth(cfg.sets):
            n.next = [boss_id]


def generate_map(seed: int, rng: Optional[RNG] = None, config: Optional[MapConfig] = None) -> RunMap:
    """Generate a run map. ``rng`` defaults to ``make_rng(seed)``."""
    if rng is None:
        rng = make_rng(seed)
    return MapGenerator(rng, config).generate(seed)


# ============================================================================
# VALIDATION / DISPLAY
# ============================================================================

def validate_map(run_map: RunMap, config: Optional[MapConfig] = None) -> List[str]:
    """Return a list of violated map rules (empty when the map is valid)."""
    cfg = config or MapConfig(sets=run_map.sets)
    problems: List[str] = []

    incoming: Dict[str, int] = {nid: 0 for nid in run_map.nodes}
    for node in run_map.nodes.values():
        for target in node.next:
            if target not in run_map.nodes:
                problems.append(f"{node.id} points at missing node {target}")
                continue
            if run_map.nodes[target].depth != node.depth + 1:
                problems.append(f"{node.id} skips a layer to {target}")
            incoming[target] += 1

    for node in run_map.nodes.values():
        if node.type != NodeType.START and incoming[node.id] == 0:
            problems.append(f"{node.id} is an orphan")
        if node.depth < run_map.boss_depth and not node.next:
            problems.append(f"{node.id} is a dead end")
        if node.depth == run_map.sets:
            if node.type != NodeType.REST:
                problems.append(f"{node.id} in the final layer is not REST")
            if node.next != (run_map.boss_id,):
                problems.append(f"{node.id} does not converge on the boss")
        if node.depth in cfg.early_depths and node.type not in (NodeType.FIGHT, NodeType.EVENT):
            problems.append(f"{node.id} has {node.type.value} in an early layer")

    window = [n for n in run_map.nodes.values() if n.depth in cfg.shop_window]
    if window and not any(n.type == NodeType.SHOP for n in window):
        problems.append("no SHOP in the late shop window")

    return problems


def count_node_types(run_map: RunMap, exclude_final_layer: bool = True) -> Dict[NodeType, int]:
    counts = {t: 0 for t in NodeType}
    for node in run_map.nodes.values():
        if exclude_final_layer and node.depth == run_map.sets:
            continue
        counts[node.type] += 1
    return counts


def map_to_string(run_map: RunMap) -> str:
    """
    ASCII view of the map, boss at the top.

    Each row lists ``symbol:id -> targets`` for one depth.
    """
    lines = []
    for depth in range(run_map.boss_depth, -1, -1):
        row = []
        for node in run_map.nodes_at_depth(depth):
            targets = ",".join(t.split("_")[1] for t in node.next)
            row.append(f"{node.get_symbol()}:{node.id}" + (f"->{targets}" if targets else ""))
        lines.append(f"{str(depth).rjust(2)}  " + "   ".join(row))
    return "\n".join(lines)
