"""
Session Manager - Creates and manages advisor sessions.

LIFECYCLE:
1. Player starts a session -> empty vision, default weights
2. During a run:
   - Player edits bubbles and weights at any time
   - Player enters the lotuses on offer (the choice subset)
   - Advisor ranks the choices
   - Player selects a lotus -> committed through commit_choice()
3. Session ends -> removed from memory

PERSISTENCE RULES:
- Sessions are in-memory only
- Import/export of vision state is the client's concern
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random
import time
import uuid

from ..advisor.scorer import LotusScorer
from ..advisor.weights import UserWeights
from ..engine_core.commit import CommitResult, commit_choice
from ..engine_core.state import BubbleIdFactory, IdFactory, VisionState
from ..lotus_schema.effect_dsl import LotusDefinition

logger = logging.getLogger(__name__)


DEFAULT_MAX_IDLE_SECONDS = 3600


@dataclass
class Session:
    """
    An ephemeral advisor session.

    Contains:
    - The held vision state and user weights
    - The lotus ids currently on offer (empty means the whole catalog)
    - The id factory and random source every simulation in the
      session shares
    - History of selected lotus ids
    """
    session_id: str
    created_at: float
    vision: VisionState = field(default_factory=VisionState)
    weights: UserWeights = field(default_factory=UserWeights)
    choices: list[str] = field(default_factory=list)
    history: list[str] = field(default_factory=list)
    id_factory: IdFactory = field(default_factory=BubbleIdFactory)
    rng: random.Random = field(default_factory=random.Random)
    last_active: float = 0.0

    def __post_init__(self):
        self.scorer = LotusScorer(rng=self.rng, id_factory=self.id_factory)
        if not self.last_active:
            self.last_active = self.created_at

    def touch(self):
        self.last_active = time.time()

    def select(self, lotus: LotusDefinition) -> CommitResult:
        """
        Commit a lotus pick.

        On success the held vision is replaced and the pick recorded;
        on rejection nothing changes.
        """
        result = commit_choice(self.vision, lotus, simulator=self.scorer.simulator)
        if result.success:
            self.vision = result.new_state
            self.history.append(lotus.id)
        self.touch()
        return result


class SessionManager:
    """
    Manages advisor sessions.

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        vision: VisionState | None = None,
        weights: UserWeights | None = None,
        seed: int | None = None,
    ) -> Session:
        """
        Create a new session.

        Args:
            vision: Starting vision (empty if omitted)
            weights: Starting weights (defaults if omitted)
            seed: Seed for the session's random source

        Returns:
            New Session
        """
        session = Session(
            session_id=str(uuid.uuid4()),
            created_at=time.time(),
            vision=vision or VisionState(),
            weights=weights or UserWeights(),
            rng=random.Random(seed),
        )
        self._sessions[session.session_id] = session
        logger.info("Created session %s", session.session_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """End a session. Returns False if it did not exist."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info("Ended session %s after %d selections", session_id, len(session.history))
        return True

    def list_sessions(self) -> list[str]:
        """List IDs of live sessions."""
        return list(self._sessions)

    def cleanup_stale_sessions(self, max_idle_seconds: float = DEFAULT_MAX_IDLE_SECONDS) -> int:
        """
        End sessions idle for longer than max_idle_seconds.

        Returns the number of sessions removed.
        """
        now = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.last_active > max_idle_seconds
        ]
        for session_id in stale:
            self.end_session(session_id)
        return len(stale)
