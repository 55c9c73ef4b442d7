"""
Content module - static game data.

Contains cards, supplies, consumables, encounters and events, plus the
ContentCatalog that indexes them for the reducer.
"""

from .cards import Card, CardType, Rarity, STARTER_DECK, ALL_CARDS, BASE_CARDS
from .supplies import Supply, SUPPLIES
from .consumables import Consumable, CONSUMABLES
from .encounters import Encounter
from .events import EventDef, EventChoice, EVENTS
from .catalog import ContentCatalog, build_catalog, default_catalog
