"""
Vision State - The player's bubble collection at a point in time.

Design principles:
- Copy-on-write: engine code never mutates a state it was given,
  it clones first and mutates the clone
- Clones never share Bubble instances with their source
- Bubble identities come from an injectable id factory, never the clock
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable, TYPE_CHECKING
import itertools
import uuid

from ..lotus_schema.taxonomy import Quality, BubbleType

if TYPE_CHECKING:
    from ..lotus_schema.effect_dsl import LotusDefinition


DEFAULT_CAPACITY = 10

IdFactory = Callable[[], str]


class BubbleIdFactory:
    """
    Monotonic per-session bubble id source.

    Produces "bubble-1", "bubble-2", ... Safe under rapid creation,
    unlike timestamp-based ids. Ids passed to reserve() are skipped,
    so states handed back by a client never receive a duplicate.
    """

    def __init__(self, prefix: str = "bubble", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)
        self._reserved: set[str] = set()

    def __call__(self) -> str:
        while True:
            bubble_id = f"{self.prefix}-{next(self._counter)}"
            if bubble_id not in self._reserved:
                return bubble_id

    def reserve(self, ids: Iterable[str]):
        """Never hand out any of `ids`."""
        self._reserved.update(ids)


def reserve_ids(id_factory: IdFactory, ids: Iterable[str]):
    """
    Keep `id_factory` from minting any of `ids`.

    Random UUID factories need no bookkeeping and are left alone.
    """
    if isinstance(id_factory, BubbleIdFactory):
        id_factory.reserve(ids)


def uuid_id_factory() -> IdFactory:
    """Id factory producing random UUID4 strings."""
    return lambda: str(uuid.uuid4())


@dataclass
class Bubble:
    """
    A single bubble in the vision.

    `locked` is carried through every simulation but no rule reads it.
    """
    bubble_id: str
    bubble_type: BubbleType
    quality: Quality
    locked: bool = False

    def copy(self, bubble_id: str | None = None) -> Bubble:
        """Return an independent copy, optionally under a new id."""
        return Bubble(
            bubble_id=bubble_id or self.bubble_id,
            bubble_type=self.bubble_type,
            quality=self.quality,
            locked=self.locked,
        )


@dataclass
class VisionState:
    """
    Complete collection state.

    The order of `bubbles` matters for display and for the positional
    effects (remove/upgrade/replicate/change type act on the front),
    never for valuation.
    """
    bubbles: list[Bubble] = field(default_factory=list)
    capacity: int = DEFAULT_CAPACITY
    fundamental: LotusDefinition | None = None

    @property
    def count(self) -> int:
        return len(self.bubbles)

    @property
    def free_slots(self) -> int:
        """Remaining capacity, never negative."""
        return max(0, self.capacity - len(self.bubbles))

    @property
    def is_empty(self) -> bool:
        return len(self.bubbles) == 0

    @property
    def has_fundamental(self) -> bool:
        return self.fundamental is not None

    def highest_quality(self) -> Quality:
        """Best quality owned, White when the vision is empty."""
        if not self.bubbles:
            return Quality.lowest()
        return max((b.quality for b in self.bubbles), key=lambda q: q.rank)

    def type_counts(self) -> Counter[BubbleType]:
        return Counter(b.bubble_type for b in self.bubbles)

    def quality_counts(self) -> Counter[Quality]:
        return Counter(b.quality for b in self.bubbles)

    def get_bubble(self, bubble_id: str) -> Bubble | None:
        for b in self.bubbles:
            if b.bubble_id == bubble_id:
                return b
        return None

    def with_bubbles(self, bubbles: list[Bubble]) -> VisionState:
        """Return new state with the given bubble list (copied)."""
        return self._copy_with(bubbles=[b.copy() for b in bubbles])

    def with_fundamental(self, lotus: LotusDefinition | None) -> VisionState:
        """
        Return new state with the fundamental reference replaced.

        Unguarded. Use engine_core.commit.try_set_fundamental() to
        enforce that the first fundamental wins.
        """
        return self._copy_with(fundamental=lotus)

    def _copy_with(self, **kwargs) -> VisionState:
        """Create a copy with some fields replaced."""
        bubbles = kwargs.get("bubbles")
        return VisionState(
            bubbles=bubbles if bubbles is not None else [b.copy() for b in self.bubbles],
            capacity=kwargs.get("capacity", self.capacity),
            fundamental=kwargs.get("fundamental", self.fundamental),
        )

    def clone(self) -> VisionState:
        """Structurally independent copy (bubble list and every bubble)."""
        return self._copy_with()

