"""
Engine Core - Deterministic vision state simulation.

The engine is the runtime that:
1. Holds a VisionState (bubbles, capacity, fundamental)
2. Simulates lotus effects on copies of it
3. Re-applies the fundamental upon entering a nightmare
4. Guards the one-fundamental-per-run rule at commit time
"""

from .state import Bubble, VisionState, BubbleIdFactory, reserve_ids, uuid_id_factory, DEFAULT_CAPACITY
from .simulator import Simulator, simulate_lotus_effect, handled_effect_types
from .fundamental import FundamentalApplier, apply_fundamental
from .commit import CommitResult, try_set_fundamental, commit_choice, FUNDAMENTAL_ALREADY_SET

__all__ = [
    "Bubble",
    "VisionState",
    "BubbleIdFactory",
    "reserve_ids",
    "uuid_id_factory",
    "DEFAULT_CAPACITY",
    "Simulator",
    "simulate_lotus_effect",
    "handled_effect_types",
    "FundamentalApplier",
    "apply_fundamental",
    "CommitResult",
    "try_set_fundamental",
    "commit_choice",
    "FUNDAMENTAL_ALREADY_SET",
]
