"""
Reducer actions.

Every player or system intent is a small frozen dataclass. The reducer
dispatches on the action's type; unknown types are a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .state.battle import BattleState
from .state.run import GameState, SetupSelection
from .state.screens import OfferKind


# ============================================================================
# RUN LIFECYCLE / NAVIGATION
# ============================================================================

@dataclass(frozen=True)
class NewRun:
    seed: Optional[int] = None


@dataclass(frozen=True)
class LoadState:
    state: GameState


@dataclass(frozen=True)
class OpenSetup:
    pass


@dataclass(frozen=True)
class CompleteSetup:
    setup: SetupSelection


@dataclass(frozen=True)
class OpenNode:
    node_id: str


@dataclass(frozen=True)
class SetCurrentNode:
    node_id: str


@dataclass(frozen=True)
class CloseNode:
    pass


# ============================================================================
# BATTLE
# ============================================================================

@dataclass(frozen=True)
class StartBattle:
    node_id: str
    difficulty: int = 1
    is_boss: bool = False
    is_challenge: bool = False
    deck_card_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BattleUpdate:
    battle: BattleState


@dataclass(frozen=True)
class BattleEnded:
    victory: bool
    gold_gained: int = 0
    is_boss: bool = False
    player_hp_after: Optional[int] = None
    skip_rewards: bool = False


# ============================================================================
# REWARDS
# ============================================================================

@dataclass(frozen=True)
class OpenReward:
    pass


@dataclass(frozen=True)
class ClaimReward:
    pass


@dataclass(frozen=True)
class RewardSelectCard:
    card_id: str


@dataclass(frozen=True)
class RewardConfirmCard:
    pass


@dataclass(frozen=True)
class RewardSkipCards:
    pass


@dataclass(frozen=True)
class RewardClaimGold:
    pass


@dataclass(frozen=True)
class RewardClaimConsumable:
    pass


@dataclass(frozen=True)
class RewardClaimSupply:
    pass


@dataclass(frozen=True)
class RewardSkipExtras:
    pass


@dataclass(frozen=True)
class RewardSkipAll:
    pass


# ============================================================================
# SHOP / REST
# ============================================================================

@dataclass(frozen=True)
class ShopBuy:
    kind: OfferKind
    item_id: str


@dataclass(frozen=True)
class ShopRemoveCard:
    card_id: str


@dataclass(frozen=True)
class ShopRefresh:
    pass


@dataclass(frozen=True)
class RestHeal:
    pass


@dataclass(frozen=True)
class RestUpgrade:
    card_id: str


# ============================================================================
# INVENTORY
# ============================================================================

@dataclass(frozen=True)
class UseConsumable:
    consumable_id: str
    target_index: int = 0


@dataclass(frozen=True)
class DiscardConsumable:
    consumable_id: str


@dataclass(frozen=True)
class TrashBinRemoveCard:
    card_id: str


# ============================================================================
# EVENTS
# ============================================================================

@dataclass(frozen=True)
class EventChoose:
    choice_id: str


@dataclass(frozen=True)
class EventPickUpgrade:
    card_id: str


@dataclass(frozen=True)
class EventPickCard:
    card_id: str


@dataclass(frozen=True)
class EventPickConsumable:
    consumable_id: str


@dataclass(frozen=True)
class EventPickSupply:
    supply_id: str


@dataclass(frozen=True)
class EventHallwayAnswer:
    answer: Any


@dataclass(frozen=True)
class EventGateAnswer:
    answer: Any


# ============================================================================
# TEACHER / DEBUG
# ============================================================================

@dataclass(frozen=True)
class TeacherUnlock:
    pass


@dataclass(frozen=True)
class TeacherLock:
    pass


@dataclass(frozen=True)
class DebugAddAllConsumables:
    pass


@dataclass(frozen=True)
class DebugClearConsumables:
    pass


@dataclass(frozen=True)
class DebugSetSupply:
    supply_id: str


@dataclass(frozen=True)
class DebugAddCardToDeck:
    card_id: str


@dataclass(frozen=True)
class DebugAddCardToHand:
    card_id: str


@dataclass(frozen=True)
class DebugGiveGold:
    amount: int


@dataclass(frozen=True)
class DebugHealFull:
    pass


@dataclass(frozen=True)
class DebugToggleSkipQuestions:
    pass


@dataclass(frozen=True)
class DebugForceBattle:
    encounter_id: str
    is_challenge: Optional[bool] = None
    difficulty: Optional[int] = None


@dataclass(frozen=True)
class DebugSetForcedEvent:
    event_id: Optional[str]


@dataclass(frozen=True)
class DebugForceEvent:
    event_id: str
