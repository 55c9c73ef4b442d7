"""
Battle state shared between the run reducer and the battle module.

The reducer treats most of this as opaque: it reads ``player_hp``,
``player_max_hp``, ``awaiting``/``last_result`` for wrong-answer logging and the
``meta`` bag, and writes ``meta`` plus the start-of-battle supply effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from ..generation.questions import Question


@dataclass(frozen=True)
class EnemyState:
    """One enemy in battle."""
    id: str
    name: str
    hp: int
    max_hp: int
    block: int = 0
    intent_damage: int = 0
    statuses: Dict[str, int] = field(default_factory=dict)

    @property
    def is_alive(self) -> bool:
        return self.hp > 0


@dataclass(frozen=True)
class AwaitingQuestion:
    """A card play blocked on a question."""
    card_id: str
    question: Question


@dataclass(frozen=True)
class AnswerResult:
    correct: bool
    message: str = ""


@dataclass(frozen=True)
class BattleMeta:
    """Run metadata the reducer writes into a battle and reads back out."""
    supply_id: Optional[str] = None
    supply_ids: Tuple[str, ...] = ()
    is_challenge: bool = False
    run_gold: int = 0
    skip_rewards: bool = False
    # Node screen to return to after a skip-rewards victory (e.g. an event)
    return_node_screen: Any = None
    deck_additions: Tuple[str, ...] = ()
    proc_supply_ids: Tuple[str, ...] = ()
    last_answer_input: str = ""


@dataclass(frozen=True)
class BattleState:
    turn: int
    difficulty: int
    is_boss: bool
    player_hp: int
    player_max_hp: int
    player_block: int = 0
    player_statuses: Dict[str, int] = field(default_factory=dict)
    energy: int = 3
    max_energy: int = 3
    enemies: Tuple[EnemyState, ...] = ()
    draw_pile: Tuple[str, ...] = ()
    hand: Tuple[str, ...] = ()
    discard_pile: Tuple[str, ...] = ()
    awaiting: Optional[AwaitingQuestion] = None
    last_result: Optional[AnswerResult] = None
    meta: BattleMeta = field(default_factory=BattleMeta)

    @property
    def living_enemies(self) -> Tuple[EnemyState, ...]:
        return tuple(e for e in self.enemies if e.is_alive)

    @property
    def all_enemies_defeated(self) -> bool:
        return not self.living_enemies

    def with_meta(self, **changes) -> "BattleState":
        return replace(self, meta=replace(self.meta, **changes))

    def with_status(self, status: str, delta: int) -> "BattleState":
        statuses = dict(self.player_statuses)
        statuses[status] = statuses.get(status, 0) + delta
        return replace(self, player_statuses=statuses)
