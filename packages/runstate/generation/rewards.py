"""
Post-battle reward builder.

Rewards for a node are reproducible from (run seed, node id): card offers are
drawn by rarity weight from base content, then gold and a consumable are rolled
from the same stream. Challenge fights add +1 card offer, bonus gold, a
guaranteed Rare-or-better card and a supply offer.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from ..content.cards import Card, Rarity
from ..content.catalog import ContentCatalog
from ..effects.supplies import apply_gold_gain, card_offer_count, maybe_upgrade_reward_cards
from ..state.rng import make_scoped_rng, pick
from ..state.run import RewardState
from .weighted import pick_weighted, pick_weighted_unique, weight_by_rarity

REWARD_SALT = 0xA5A5A5A5
MAX_CARD_OFFERS = 5

BASE_GOLD_BY_DIFFICULTY = {1: 10, 2: 14, 3: 18}
CHALLENGE_BONUS_GOLD = 8

RARE_OR_BETTER = (Rarity.RARE, Rarity.ULTRA_RARE)


def _weight(item) -> int:
    return weight_by_rarity(item.rarity)


def _force_rare(rng, picked: List[Card], pool: Sequence[Card]) -> List[Card]:
    """Swap one offer for a Rare/Ultra Rare card when none was rolled."""
    if not picked or any(c.rarity in RARE_OR_BETTER for c in picked):
        return picked

    picked_ids = {c.id for c in picked}
    rare_pool = [c for c in pool if c.rarity in RARE_OR_BETTER and c.id not in picked_ids]
    if not rare_pool:
        return picked

    forced = pick_weighted(rng, rare_pool, _weight) or pick(rng, rare_pool)
    out = list(picked)
    out[int(rng() * len(out))] = forced
    return out


def build_battle_rewards(
    seed: int,
    node_id: str,
    difficulty: int,
    supply_ids: Iterable[str],
    catalog: ContentCatalog,
    is_challenge: bool = False,
) -> RewardState:
    owned = tuple(supply_ids)
    rng = make_scoped_rng(seed, node_id, REWARD_SALT)

    offer_count = min(MAX_CARD_OFFERS, card_offer_count(owned) + (1 if is_challenge else 0))
    card_pool = catalog.card_pool(event_only=False)
    cards = pick_weighted_unique(rng, card_pool, offer_count, _weight)
    if is_challenge:
        cards = _force_rare(rng, cards, card_pool)

    card_ids = maybe_upgrade_reward_cards([c.id for c in cards], owned, catalog)

    base_gold = BASE_GOLD_BY_DIFFICULTY.get(difficulty, BASE_GOLD_BY_DIFFICULTY[1])
    if is_challenge:
        base_gold += CHALLENGE_BONUS_GOLD
    gold = apply_gold_gain(base_gold, owned)

    consumable = pick_weighted(rng, catalog.consumable_pool(event_only=False), _weight)

    supply_offer_id: Optional[str] = None
    if is_challenge:
        supply = pick_weighted(rng, catalog.supply_pool(event_only=False, exclude=owned), _weight)
        supply_offer_id = supply.id if supply else None

    return RewardState(
        node_id=node_id,
        gold=gold,
        card_offer_ids=tuple(card_ids),
        consumable_offer_id=consumable.id if consumable else None,
        supply_offer_id=supply_offer_id,
        is_challenge=is_challenge,
    )
