"""
Commit - Guarded state transitions at the point a choice is taken.

A run has at most one fundamental lotus: the first one chosen sticks.
Every attempt to attach a fundamental goes through try_set_fundamental(),
which refuses to overwrite an existing one.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .state import VisionState

if TYPE_CHECKING:
    from ..lotus_schema.effect_dsl import LotusDefinition
    from .simulator import Simulator


FUNDAMENTAL_ALREADY_SET = "FUNDAMENTAL_ALREADY_SET"


@dataclass
class CommitResult:
    """
    Result of committing a lotus choice.

    Contains:
    - Whether the commit succeeded
    - New state (if succeeded)
    - Error and error code (if rejected)
    """
    success: bool
    new_state: VisionState | None = None
    error: str | None = None
    error_code: str | None = None
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> CommitResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: VisionState,
        changes: list[str] | None = None,
    ) -> CommitResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, state_changes=changes or [])


def try_set_fundamental(state: VisionState, lotus: LotusDefinition) -> CommitResult:
    """
    Attach `lotus` as the run's fundamental if none is attached yet.

    Returns a failure result with FUNDAMENTAL_ALREADY_SET otherwise;
    `state` is never modified.
    """
    if state.fundamental is not None:
        return CommitResult.failure(
            f"Fundamental already set to '{state.fundamental.id}'",
            error_code=FUNDAMENTAL_ALREADY_SET,
        )
    return CommitResult.success_with_state(
        state.with_fundamental(lotus),
        changes=[f"Fundamental set: {lotus.name}"],
    )


def commit_choice(
    state: VisionState,
    lotus: LotusDefinition,
    simulator: Simulator | None = None,
) -> CommitResult:
    """
    Commit the player's pick of `lotus` against `state`.

    A second fundamental is rejected outright. Otherwise the result
    holds the simulated state, which becomes the new held state.
    """
    from .simulator import Simulator

    if lotus.is_fundamental and state.fundamental is not None:
        return try_set_fundamental(state, lotus)

    simulator = simulator or Simulator()
    new_state = simulator.simulate(state, lotus)

    changes = [f"Selected: {lotus.name}"]
    if new_state.count != state.count:
        changes.append(f"Bubbles: {state.count} -> {new_state.count}")
    if new_state.fundamental is not None and state.fundamental is None:
        changes.append(f"Fundamental set: {new_state.fundamental.name}")

    return CommitResult.success_with_state(new_state, changes=changes)
