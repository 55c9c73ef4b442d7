"""
Run Reducer - the single entry point for advancing a run.

    reducer = RunReducer()
    state = reducer.reduce(initial_state(), NewRun(seed=42))
    state = reducer.reduce(state, CompleteSetup(SetupSelection()))

``reduce`` is total: it never raises for an action object. Guards that reject
an action return the same state object, so ``new is old`` means "nothing
happened". A handler that raises is logged and treated as a rejected action.

After every accepted action the invariant pass clamps hp into range and moves
the run to DEFEAT when hp reaches 0, whichever handler caused it.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional

from .actions import LoadState, NewRun
from .config import DEFAULT_CONFIG, EngineConfig
from .content.catalog import ContentCatalog, default_catalog
from .handlers import ReducerContext, SimpleBattleModule, clamp_and_maybe_defeat, registered_handlers
from .handlers.combat import BattleModule
from .state.run import TERMINAL_SCREENS, GameState, initial_state

logger = logging.getLogger(__name__)

# Actions still accepted once the run has ended
TERMINAL_ACTIONS = (NewRun, LoadState)


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class RunReducer:
    """Dispatches actions to the registered handlers with injected collaborators."""

    def __init__(
        self,
        catalog: Optional[ContentCatalog] = None,
        battle_module: Optional[BattleModule] = None,
        clock: Optional[Callable[[], int]] = None,
        config: Optional[EngineConfig] = None,
    ):
        catalog = catalog or default_catalog()
        self.ctx = ReducerContext(
            catalog=catalog,
            battle=battle_module or SimpleBattleModule(catalog),
            config=config or DEFAULT_CONFIG,
            clock=clock or wall_clock_ms,
        )
        self._handlers = registered_handlers()

    @property
    def catalog(self) -> ContentCatalog:
        return self.ctx.catalog

    @property
    def config(self) -> EngineConfig:
        return self.ctx.config

    def initial_state(self) -> GameState:
        return initial_state(self.ctx.config)

    def reduce(self, state: GameState, action: object) -> GameState:
        if state.screen in TERMINAL_SCREENS and not isinstance(action, TERMINAL_ACTIONS):
            return state

        handler = self._handlers.get(type(action))
        if handler is None:
            logger.debug(f"No handler for {type(action).__name__}")
            return state

        try:
            next_state = handler(state, action, self.ctx)
        except Exception:
            logger.exception(f"Handler for {type(action).__name__} failed; keeping previous state")
            return state

        if next_state is state:
            return state
        return clamp_and_maybe_defeat(next_state, self.ctx)

    def replay(self, actions: Iterable[object], state: Optional[GameState] = None) -> GameState:
        """Fold ``actions`` over ``state`` (the title state by default)."""
        if state is None:
            state = self.initial_state()
        for action in actions:
            state = self.reduce(state, action)
        return state

    __call__ = reduce


_default_reducer: Optional[RunReducer] = None


def get_default_reducer() -> RunReducer:
    global _default_reducer
    if _default_reducer is None:
        _default_reducer = RunReducer()
    return _default_reducer


def reduce(state: GameState, action: object) -> GameState:
    """Reduce with the default catalog, battle module, config and wall clock."""
    return get_default_reducer().reduce(state, action)
