"""
Node screen state.

Each open node carries one of four screen variants (plain, rest, shop, event).
Event screens carry a ``step`` plus exactly one step payload (``prompt``) that
matches it, so moving to a new step always replaces the previous payload.

Multi-step events keep their own persistent fields (hallway lockers, ladder
progress, vendor flag) alongside the step payload so the whole screen can be
cached and restored when the player backs out and returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple, Union

from ..generation.map import NodeType
from ..generation.questions import Question


# ============================================================================
# SIMPLE SCREENS
# ============================================================================

@dataclass(frozen=True)
class PlainNodeScreen:
    """FIGHT / CHALLENGE / BOSS / START nodes before a battle starts."""
    node_id: str
    node_type: NodeType


@dataclass(frozen=True)
class RestNodeScreen:
    node_id: str
    did_heal: bool = False
    did_upgrade: bool = False


class OfferKind(Enum):
    CARD = "card"
    CONSUMABLE = "consumable"
    SUPPLY = "supply"


@dataclass(frozen=True)
class ShopOffer:
    kind: OfferKind
    item_id: str
    price: int


@dataclass(frozen=True)
class ShopNodeScreen:
    node_id: str
    cards: Tuple[ShopOffer, ...] = ()
    consumables: Tuple[ShopOffer, ...] = ()
    supplies: Tuple[ShopOffer, ...] = ()
    bought: Tuple[Tuple[OfferKind, str], ...] = ()
    removals_used: int = 0
    refreshes_used: int = 0
    event_shop: bool = False
    title: str = "Shop"
    subtitle: str = ""

    def offers(self, kind: OfferKind) -> Tuple[ShopOffer, ...]:
        if kind == OfferKind.CARD:
            return self.cards
        if kind == OfferKind.CONSUMABLE:
            return self.consumables
        return self.supplies

    def find_offer(self, kind: OfferKind, item_id: str) -> Optional[ShopOffer]:
        for offer in self.offers(kind):
            if offer.item_id == item_id:
                return offer
        return None

    def is_bought(self, kind: OfferKind, item_id: str) -> bool:
        return (kind, item_id) in self.bought


# ============================================================================
# EVENT STEPS AND PAYLOADS
# ============================================================================

class EventStep(Enum):
    INTRO = "INTRO"
    HALLWAY = "HALLWAY"
    QUESTION_GATE = "QUESTION_GATE"
    EXAM_LADDER_FEEDBACK = "EXAM_LADDER_FEEDBACK"
    UPGRADE_PICK = "UPGRADE_PICK"
    CARD_PICK = "CARD_PICK"
    CONSUMABLE_PICK = "CONSUMABLE_PICK"
    CONSUMABLE_CLAIM = "CONSUMABLE_CLAIM"
    SUPPLY_PICK = "SUPPLY_PICK"
    RESULT = "RESULT"


@dataclass(frozen=True)
class UpgradePrompt:
    text: str = ""


@dataclass(frozen=True)
class CardPrompt:
    """Pick one of ``card_ids``; ``extra_card_ids`` queue up after it."""
    card_ids: Tuple[str, ...]
    text: str = ""
    # RESULT text once the last card is confirmed
    result_text: str = ""
    extra_card_ids: Tuple[str, ...] = ()
    gold_gain: int = 0
    # Consumable to hand over once the card is confirmed
    then_claim_consumable_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ConsumablePrompt:
    """Pick one of ``consumable_ids``."""
    consumable_ids: Tuple[str, ...]
    text: str = ""
    after_step: Optional[EventStep] = None


@dataclass(frozen=True)
class ConsumableClaimPrompt:
    """Claim any number of ``remaining_ids`` one by one."""
    remaining_ids: Tuple[str, ...]
    claimed_ids: Tuple[str, ...] = ()
    text: str = ""


@dataclass(frozen=True)
class SupplyPrompt:
    supply_ids: Tuple[str, ...]
    text: str = ""


@dataclass(frozen=True)
class GatePrompt:
    question: Question
    text: str = ""
    on_correct_text: str = "Correct."
    on_wrong_text: str = "Incorrect."
    wrong_damage: int = 0


@dataclass(frozen=True)
class LadderFeedbackPrompt:
    next_question: Question
    text: str = ""


StepPrompt = Union[
    UpgradePrompt,
    CardPrompt,
    ConsumablePrompt,
    ConsumableClaimPrompt,
    SupplyPrompt,
    GatePrompt,
    LadderFeedbackPrompt,
]

STEP_PROMPT_TYPES = {
    EventStep.UPGRADE_PICK: UpgradePrompt,
    EventStep.CARD_PICK: CardPrompt,
    EventStep.CONSUMABLE_PICK: ConsumablePrompt,
    EventStep.CONSUMABLE_CLAIM: ConsumableClaimPrompt,
    EventStep.SUPPLY_PICK: SupplyPrompt,
    EventStep.EXAM_LADDER_FEEDBACK: LadderFeedbackPrompt,
}


# ============================================================================
# HALLWAY (press-your-luck)
# ============================================================================

class LockerKind(Enum):
    GOLD = "gold"
    HEAL = "heal"
    EVENT_SUPPLY = "event_supply"
    LOSE_GOLD = "lose_gold"
    DAMAGE = "damage"
    AMBUSH = "ambush"

    @property
    def is_penalty(self) -> bool:
        return self in (LockerKind.LOSE_GOLD, LockerKind.DAMAGE)


@dataclass(frozen=True)
class HallwayLocker:
    kind: LockerKind
    amount: int = 0
    supply_id: Optional[str] = None
    opened: bool = False
    collected: bool = False
    negated: bool = False


@dataclass(frozen=True)
class HallwayQuiz:
    locker_index: int
    kind: LockerKind
    amount: int
    question: Question


@dataclass(frozen=True)
class HallwayTally:
    gold_gained: int = 0
    gold_lost: int = 0
    healed: int = 0
    damage_taken: int = 0
    supply_ids: Tuple[str, ...] = ()

    def summary(self) -> str:
        parts = []
        if self.gold_gained:
            parts.append(f"+{self.gold_gained} gold")
        if self.gold_lost:
            parts.append(f"-{self.gold_lost} gold")
        if self.healed:
            parts.append(f"heal {self.healed}")
        if self.damage_taken:
            parts.append(f"take {self.damage_taken} damage")
        if self.supply_ids:
            n = len(self.supply_ids)
            parts.append(f"{n} {'supply' if n == 1 else 'supplies'}")
        return ", ".join(parts) if parts else "nothing"


@dataclass(frozen=True)
class HallwayState:
    lockers: Tuple[HallwayLocker, ...]
    pending_index: Optional[int] = None
    quiz: Optional[HallwayQuiz] = None
    tally: HallwayTally = field(default_factory=HallwayTally)

    def with_locker(self, index: int, **changes) -> "HallwayState":
        lockers = list(self.lockers)
        lockers[index] = replace(lockers[index], **changes)
        return replace(self, lockers=tuple(lockers))

    @property
    def pending(self) -> Optional[HallwayLocker]:
        if self.pending_index is None or not 0 <= self.pending_index < len(self.lockers):
            return None
        return self.lockers[self.pending_index]

    @property
    def has_uncollected_ambush(self) -> bool:
        return any(l.kind == LockerKind.AMBUSH and l.opened and not l.collected for l in self.lockers)


# ============================================================================
# EXAM LADDER
# ============================================================================

@dataclass(frozen=True)
class LadderState:
    correct: int = 0
    rung: int = 1
    difficulty: int = 1


# ============================================================================
# EVENT SCREEN
# ============================================================================

@dataclass(frozen=True)
class EventNodeScreen:
    node_id: str
    event_id: str
    step: EventStep = EventStep.INTRO
    prompt: Optional[StepPrompt] = None
    result_text: str = ""
    hallway: Optional[HallwayState] = None
    ladder: Optional[LadderState] = None
    vendor_mystery_used: bool = False

    def to_step(self, step: EventStep, prompt: Optional[StepPrompt] = None, **changes) -> "EventNodeScreen":
        """Move to ``step`` with a fresh payload; stale payloads never survive."""
        return replace(self, step=step, prompt=prompt, result_text=changes.pop("result_text", ""), **changes)

    def to_result(self, text: str, **changes) -> "EventNodeScreen":
        return self.to_step(EventStep.RESULT, None, result_text=text, **changes)


NodeScreen = Union[PlainNodeScreen, RestNodeScreen, ShopNodeScreen, EventNodeScreen]


def is_valid_event_screen(screen) -> bool:
    """Cached event-node screens: an event with an id and a known step, or the event shop it opened."""
    if isinstance(screen, ShopNodeScreen):
        return screen.event_shop
    return (
        isinstance(screen, EventNodeScreen)
        and bool(screen.event_id)
        and isinstance(screen.step, EventStep)
    )
