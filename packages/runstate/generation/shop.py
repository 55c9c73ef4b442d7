"""
Shop and rest builders.

Shop inventories are reproducible from (run seed, node id, refresh generation):
the builder reseeds a private RNG, draws 4 cards, 2 consumables and 2 supplies
by rarity weight, then rolls a price for each offer in that order.

Two variants:
- regular shop: base content only, Student Discount applies
- event shop (Pop-Up Vendor): event-only content, own price table, no discount
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from ..content.cards import Rarity
from ..content.catalog import ContentCatalog
from ..effects.supplies import apply_discount
from ..state.rng import RNG, make_scoped_rng, rand_int
from ..state.screens import OfferKind, RestNodeScreen, ShopNodeScreen, ShopOffer
from .weighted import pick_weighted_unique, weight_by_rarity


# ============================================================================
# CONSTANTS
# ============================================================================

SHOP_CARD_COUNT = 4
SHOP_CONSUMABLE_COUNT = 2
SHOP_SUPPLY_COUNT = 2

SHOP_SALT = 0x5F3759DF
EVENT_SHOP_SALT = 0xC0FFEE

SHOP_CARD_PRICES: Dict[Rarity, Tuple[int, int]] = {
    Rarity.COMMON: (20, 50),
    Rarity.UNCOMMON: (60, 90),
    Rarity.RARE: (90, 110),
    Rarity.ULTRA_RARE: (110, 150),
}
SHOP_CONSUMABLE_PRICE = (40, 80)
SHOP_SUPPLY_PRICES: Dict[Rarity, Tuple[int, int]] = {
    Rarity.COMMON: (70, 100),
    Rarity.UNCOMMON: (90, 120),
    Rarity.RARE: (120, 150),
    Rarity.ULTRA_RARE: (160, 200),
}

EVENT_SHOP_CARD_PRICES: Dict[Rarity, Tuple[int, int]] = {
    Rarity.COMMON: (25, 55),
    Rarity.UNCOMMON: (45, 75),
    Rarity.RARE: (60, 100),
    Rarity.ULTRA_RARE: (120, 180),
}
EVENT_SHOP_CONSUMABLE_PRICE = (30, 90)
EVENT_SHOP_SUPPLY_PRICES: Dict[Rarity, Tuple[int, int]] = {
    Rarity.COMMON: (70, 110),
    Rarity.UNCOMMON: (90, 120),
    Rarity.RARE: (120, 140),
    Rarity.ULTRA_RARE: (160, 220),
}

EVENT_SHOP_TITLE = "Pop-Up Vendor"
EVENT_SHOP_SUBTITLE = "Event Shop"

REMOVAL_BASE_COST = 50
REMOVAL_COST_STEP = 25
REFRESH_BASE_COST = 75
REFRESH_COST_STEP = 25

REST_HEAL_FRACTION = 0.3


# ============================================================================
# SHOP BUILDERS
# ============================================================================

def _roll_prices(rng: RNG, items: Sequence, table, default_range) -> List[int]:
    prices = []
    for item in items:
        lo, hi = table.get(item.rarity, default_range) if isinstance(table, dict) else table
        prices.append(rand_int(rng, lo, hi))
    return prices


def _draw_offers(
    rng: RNG,
    catalog: ContentCatalog,
    owned_supply_ids: Iterable[str],
    event_only: bool,
):
    cards = pick_weighted_unique(
        rng, catalog.card_pool(event_only=event_only), SHOP_CARD_COUNT, lambda c: weight_by_rarity(c.rarity)
    )
    consumables = pick_weighted_unique(
        rng, catalog.consumable_pool(event_only=event_only), SHOP_CONSUMABLE_COUNT, lambda c: weight_by_rarity(c.rarity)
    )
    supplies = pick_weighted_unique(
        rng,
        catalog.supply_pool(event_only=event_only, exclude=owned_supply_ids),
        SHOP_SUPPLY_COUNT,
        lambda s: weight_by_rarity(s.rarity),
    )
    return cards, consumables, supplies


def build_shop_node_state(
    seed: int,
    node_id: str,
    catalog: ContentCatalog,
    owned_supply_ids: Sequence[str] = (),
    refresh_gen: int = 0,
    removals_used: int = 0,
) -> ShopNodeScreen:
    """Regular shop inventory for ``node_id`` at refresh generation ``refresh_gen``."""
    owned = tuple(owned_supply_ids)
    rng = make_scoped_rng(seed, f"shop:{node_id}:refresh:{refresh_gen}", SHOP_SALT)

    cards, consumables, supplies = _draw_offers(rng, catalog, owned, event_only=False)

    card_prices = [
        apply_discount(p, owned)
        for p in _roll_prices(rng, cards, SHOP_CARD_PRICES, SHOP_CARD_PRICES[Rarity.COMMON])
    ]
    consumable_prices = [
        apply_discount(p, owned)
        for p in _roll_prices(rng, consumables, SHOP_CONSUMABLE_PRICE, SHOP_CONSUMABLE_PRICE)
    ]
    supply_prices = [
        apply_discount(p, owned)
        for p in _roll_prices(rng, supplies, SHOP_SUPPLY_PRICES, SHOP_SUPPLY_PRICES[Rarity.COMMON])
    ]

    return ShopNodeScreen(
        node_id=node_id,
        cards=tuple(ShopOffer(OfferKind.CARD, c.id, p) for c, p in zip(cards, card_prices)),
        consumables=tuple(ShopOffer(OfferKind.CONSUMABLE, c.id, p) for c, p in zip(consumables, consumable_prices)),
        supplies=tuple(ShopOffer(OfferKind.SUPPLY, s.id, p) for s, p in zip(supplies, supply_prices)),
        bought=(),
        removals_used=removals_used,
        refreshes_used=refresh_gen,
    )


def build_event_shop_node_state(
    seed: int,
    node_id: str,
    catalog: ContentCatalog,
    owned_supply_ids: Sequence[str] = (),
) -> ShopNodeScreen:
    """Pop-Up Vendor stock: event-only content, no discount, no refresh."""
    owned = tuple(owned_supply_ids)
    rng = make_scoped_rng(seed, f"eventshop:{node_id}", EVENT_SHOP_SALT)

    cards, consumables, supplies = _draw_offers(rng, catalog, owned, event_only=True)

    card_prices = _roll_prices(rng, cards, EVENT_SHOP_CARD_PRICES, EVENT_SHOP_CARD_PRICES[Rarity.COMMON])
    consumable_prices = _roll_prices(rng, consumables, EVENT_SHOP_CONSUMABLE_PRICE, EVENT_SHOP_CONSUMABLE_PRICE)
    supply_prices = _roll_prices(rng, supplies, EVENT_SHOP_SUPPLY_PRICES, EVENT_SHOP_SUPPLY_PRICES[Rarity.COMMON])

    return ShopNodeScreen(
        node_id=node_id,
        cards=tuple(ShopOffer(OfferKind.CARD, c.id, p) for c, p in zip(cards, card_prices)),
        consumables=tuple(ShopOffer(OfferKind.CONSUMABLE, c.id, p) for c, p in zip(consumables, consumable_prices)),
        supplies=tuple(ShopOffer(OfferKind.SUPPLY, s.id, p) for s, p in zip(supplies, supply_prices)),
        bought=(),
        removals_used=0,
        refreshes_used=0,
        event_shop=True,
        title=EVENT_SHOP_TITLE,
        subtitle=EVENT_SHOP_SUBTITLE,
    )


# ============================================================================
# SERVICES
# ============================================================================

def removal_cost(
    removals_used: int,
    owned_supply_ids: Iterable[str] = (),
    base: int = REMOVAL_BASE_COST,
    step: int = REMOVAL_COST_STEP,
) -> int:
    """Card removal: 50, 75, 100, ... before discount."""
    return apply_discount(base + step * max(0, removals_used), tuple(owned_supply_ids))


def refresh_cost(refreshes_used: int, base: int = REFRESH_BASE_COST, step: int = REFRESH_COST_STEP) -> int:
    return base + step * max(0, refreshes_used)


def shop_removal_cost(
    shop: ShopNodeScreen,
    global_removals_used: int,
    owned_supply_ids: Iterable[str] = (),
    base: int = REMOVAL_BASE_COST,
    step: int = REMOVAL_COST_STEP,
) -> int:
    """Event shops count removals locally; regular shops share the run counter."""
    used = shop.removals_used if shop.event_shop else global_removals_used
    return removal_cost(used, owned_supply_ids, base, step)


# ============================================================================
# REST
# ============================================================================

def build_rest_node_state(node_id: str) -> RestNodeScreen:
    return RestNodeScreen(node_id=node_id, did_heal=False, did_upgrade=False)


def rest_heal_amount(max_hp: int, fraction: float = REST_HEAL_FRACTION) -> int:
    return max(1, int(max_hp * fraction))
