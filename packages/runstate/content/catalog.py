"""
Content catalog.

Immutable lookup tables over the static content, built once and passed into the
reducer. Handlers never reach for module-level content directly; they go through
the catalog they were given so tests can inject a smaller one.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Tuple

from ..config import UnknownContentError
from .cards import ALL_CARDS, BASE_CARDS, Card, build_upgrade_map, is_negative_card_id
from .consumables import CONSUMABLES, Consumable
from .encounters import (
    BOSS_ENCOUNTER,
    CHALLENGE_POOLS,
    STANDARD_POOLS,
    Encounter,
    EncounterTier,
    tier_for_depth,
)
from .events import EVENTS, EventDef
from .supplies import SUPPLIES, Supply


@dataclass(frozen=True)
class ContentCatalog:
    """Read-only content lookups."""
    cards: Dict[str, Card]
    base_cards: Tuple[Card, ...]
    supplies: Dict[str, Supply]
    consumables: Dict[str, Consumable]
    events: Tuple[EventDef, ...]
    events_by_id: Dict[str, EventDef]
    standard_pools: Dict[EncounterTier, Tuple[Encounter, ...]]
    challenge_pools: Dict[EncounterTier, Tuple[Encounter, ...]]
    boss: Encounter
    upgrade_map: Dict[str, str]

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def card(self, card_id: str) -> Card:
        try:
            return self.cards[card_id]
        except KeyError:
            raise UnknownContentError("card", card_id) from None

    def supply(self, supply_id: str) -> Supply:
        try:
            return self.supplies[supply_id]
        except KeyError:
            raise UnknownContentError("supply", supply_id) from None

    def consumable(self, consumable_id: str) -> Consumable:
        try:
            return self.consumables[consumable_id]
        except KeyError:
            raise UnknownContentError("consumable", consumable_id) from None

    def event(self, event_id: str) -> Optional[EventDef]:
        return self.events_by_id.get(event_id)

    def card_name(self, card_id: str) -> str:
        card = self.cards.get(card_id)
        return card.name if card else card_id

    def supply_name(self, supply_id: str) -> str:
        supply = self.supplies.get(supply_id)
        return supply.name if supply else supply_id

    def consumable_name(self, consumable_id: str) -> str:
        con = self.consumables.get(consumable_id)
        return con.name if con else consumable_id

    # ------------------------------------------------------------------
    # Upgrades
    # ------------------------------------------------------------------

    def upgraded_id(self, card_id: str) -> str:
        """Upgraded variant, or the same id when the card cannot be upgraded."""
        return self.upgrade_map.get(card_id, card_id)

    def is_upgradable(self, card_id: str) -> bool:
        return card_id in self.upgrade_map

    def has_upgradable(self, deck: Iterable[str]) -> bool:
        return any(self.is_upgradable(cid) for cid in deck)

    def is_negative(self, card_id: str) -> bool:
        card = self.cards.get(card_id)
        return is_negative_card_id(card_id) or (card is not None and card.is_negative)

    # ------------------------------------------------------------------
    # Pools
    # ------------------------------------------------------------------

    def card_pool(self, event_only: bool = False) -> List[Card]:
        return [c for c in self.base_cards if c.event_only == event_only]

    def consumable_pool(self, event_only: bool = False) -> List[Consumable]:
        return [c for c in self.consumables.values() if c.event_only == event_only]

    def supply_pool(self, event_only: bool = False, exclude: Iterable[str] = ()) -> List[Supply]:
        owned = set(exclude)
        return [s for s in self.supplies.values() if s.event_only == event_only and s.id not in owned]

    def encounter_pool(self, depth: int, is_boss: bool = False, is_challenge: bool = False) -> Tuple[Encounter, ...]:
        if is_boss:
            return (self.boss,)
        tier = tier_for_depth(depth)
        pools = self.challenge_pools if is_challenge else self.standard_pools
        return pools[tier]

    def all_encounters(self) -> List[Encounter]:
        out: List[Encounter] = []
        for pool in list(self.standard_pools.values()) + list(self.challenge_pools.values()):
            out.extend(pool)
        out.append(self.boss)
        return out

    def find_encounter(self, encounter_id: str) -> Optional[Encounter]:
        for enc in self.all_encounters():
            if enc.id == encounter_id:
                return enc
        return None


def build_catalog(
    cards: Tuple[Card, ...] = ALL_CARDS,
    supplies: Tuple[Supply, ...] = SUPPLIES,
    consumables: Tuple[Consumable, ...] = CONSUMABLES,
    events: Tuple[EventDef, ...] = EVENTS,
) -> ContentCatalog:
    base_ids = {c.id for c in BASE_CARDS}
    return ContentCatalog(
        cards={c.id: c for c in cards},
        base_cards=tuple(c for c in cards if c.id in base_ids),
        supplies={s.id: s for s in supplies},
        consumables={c.id: c for c in consumables},
        events=tuple(events),
        events_by_id={e.id: e for e in events},
        standard_pools=dict(STANDARD_POOLS),
        challenge_pools=dict(CHALLENGE_POOLS),
        boss=BOSS_ENCOUNTER,
        upgrade_map=build_upgrade_map(cards),
    )


@lru_cache(maxsize=1)
def default_catalog() -> ContentCatalog:
    """The shared catalog over the shipped content, built on first use."""
    return build_catalog()
