"""
Handlers for the run reducer.

Each module registers its action handlers with ``@handles`` on import:

- navigation: NewRun, LoadState, setup, opening and leaving nodes
- combat: StartBattle, BattleUpdate, BattleEnded (plus SimpleBattleModule)
- reward_handler: the post-battle loot screen
- shop_handler / rest_handler: shop purchases, removals, refreshes, rest
- inventory: consumables outside rewards and shops
- event_handler: every event protocol (hallway and exam ladder included)
- debug: teacher-mode tools
"""

from . import navigation, combat, reward_handler, shop_handler, rest_handler, inventory, event_handler, debug
from .common import ReducerContext, registered_handlers, clamp_and_maybe_defeat
from .combat import BattleModule, BattleStartRequest, SimpleBattleModule, launch_battle
from .event_handler import EVENT_HANDLERS
