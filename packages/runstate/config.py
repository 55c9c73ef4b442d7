"""
Engine configuration and error types.

Tunable numbers used by the reducer live here so tests and tools can build a
reducer with different economy settings without touching handler code.
"""

from __future__ import annotations

from dataclasses import dataclass


# ============================================================================
# ERRORS
# ============================================================================

class RunStateError(Exception):
    """Base class for programmer errors raised inside the engine.

    Reachable player input never raises; these are caught and logged at the
    reducer dispatch boundary.
    """


class UnknownContentError(RunStateError, KeyError):
    """A content id was not found in the catalog."""

    def __init__(self, kind: str, content_id: str):
        super().__init__(f"unknown {kind}: {content_id!r}")
        self.kind = kind
        self.content_id = content_id


# ============================================================================
# ENGINE CONFIG
# ============================================================================

@dataclass(frozen=True)
class EngineConfig:
    """Economy and bookkeeping constants for a run."""

    # Title screen placeholder values
    default_seed: int = 12345
    title_gold: int = 100
    title_hp: int = 50

    # NEW_RUN
    starting_gold: int = 100
    starting_hp: int = 40
    random_seed_limit: int = 1_000_000

    # Inventory / logs
    max_consumables: int = 3
    wrong_answer_log_cap: int = 200

    # Rest sites
    rest_heal_fraction: float = 0.3

    # Shop services
    removal_base_cost: int = 50
    removal_cost_step: int = 25
    refresh_base_cost: int = 75
    refresh_cost_step: int = 25

    # Anti-repeat encounter selection
    encounter_repick_attempts: int = 12

    # Out-of-battle Water
    water_max_hp_gain: int = 7

    # TEACHER_UNLOCK only takes effect when enabled
    teacher_mode_enabled: bool = False


DEFAULT_CONFIG = EngineConfig()
