"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions
3. Ranks and explains lotus choices
4. Formats responses for the UI

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from .schemas import (
    # Requests
    RecommendOptions,
    RecommendRequest,
    CreateSessionRequest,
    # Responses
    RecommendResponse,
    RecommendationInfo,
    LotusListResponse,
    SessionResponse,
    SelectLotusResponse,
    ErrorResponse,
    # Shared
    LotusModel,
    ReasonInfo,
    RiskInfo,
    SynergyInfo,
    UserWeightsModel,
    VisionStateModel,
    # Enums
    ErrorCode,
)
from ..advisor import (
    LotusRanker,
    LotusScorer,
    RankedChoice,
    UserWeights,
    assess_nightmare_risk,
    calculate_state_value,
    detect_synergies,
    explain,
)
from ..catalog import LOTUSES, search_lotuses
from ..engine_core.commit import FUNDAMENTAL_ALREADY_SET, try_set_fundamental
from ..engine_core.state import BubbleIdFactory, VisionState
from ..lotus_schema.effect_dsl import LotusDefinition
from ..session import Session, SessionManager

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # One-off ranking
        response = service.recommend(RecommendRequest(lotus_ids=[...]))

        # Session flow
        session = service.create_session(CreateSessionRequest())
        service.set_choices(session.session_id, [...])
        service.session_recommendations(session.session_id, RecommendOptions())
        service.select_lotus(session.session_id, lotus_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    catalog: list[LotusDefinition] = field(default_factory=lambda: list(LOTUSES))

    def __post_init__(self):
        self._by_id = {lotus.id: lotus for lotus in self.catalog}

    # =========================================================================
    # Catalog
    # =========================================================================

    def list_lotuses(self, query: str | None = None, limit: int | None = None) -> LotusListResponse:
        """List the catalog, or search it when `query` is given."""
        if query:
            lotuses = search_lotuses(query, self.catalog, limit=limit or 10)
        else:
            lotuses = self.catalog[:limit] if limit else self.catalog
        return LotusListResponse(
            lotuses=[LotusModel.from_lotus(lotus) for lotus in lotuses],
            count=len(lotuses),
        )

    def get_lotus(self, lotus_id: str) -> LotusDefinition | None:
        return self._by_id.get(lotus_id)

    # =========================================================================
    # Recommendations
    # =========================================================================

    def recommend(self, request: RecommendRequest) -> RecommendResponse | ErrorResponse:
        """
        Rank lotuses for a vision supplied in the request.

        Nothing is stored; the request's seed makes Monte Carlo scores
        reproducible.
        """
        lotuses = self._resolve_choices(request.lotus_ids)
        if isinstance(lotuses, ErrorResponse):
            return lotuses

        id_factory = BubbleIdFactory(prefix="sim")
        state = request.vision.to_state(id_factory)
        scorer = LotusScorer(rng=random.Random(request.seed), id_factory=id_factory)
        return self._rank(state, lotuses, request.weights.to_weights(), request, scorer)

    def session_recommendations(
        self,
        session_id: str,
        options: RecommendOptions,
    ) -> RecommendResponse | ErrorResponse:
        """Rank the session's current choices against its held vision."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)

        lotuses = self._resolve_choices(session.choices)
        if isinstance(lotuses, ErrorResponse):
            return lotuses

        session.touch()
        return self._rank(session.vision, lotuses, session.weights, options, session.scorer)

    def _rank(
        self,
        state: VisionState,
        lotuses: list[LotusDefinition],
        weights: UserWeights,
        options: RecommendOptions,
        scorer: LotusScorer,
    ) -> RecommendResponse:
        ranker = LotusRanker(scorer=scorer, trials=options.trials)
        if options.lookahead:
            ranked = ranker.rank_with_lookahead(
                state, lotuses, weights,
                top_n=options.top_n,
                depth=options.depth,
                stochastic=options.stochastic,
                goal_type=options.goal_type,
            )
        else:
            ranked = ranker.rank(
                state, lotuses, weights,
                top_n=options.top_n,
                stochastic=options.stochastic,
                goal_type=options.goal_type,
            )

        return RecommendResponse(
            recommendations=[
                self._recommendation_info(rank, state, choice, options)
                for rank, choice in enumerate(ranked, start=1)
            ],
            current_value=calculate_state_value(state, weights),
        )

    def _recommendation_info(
        self,
        rank: int,
        state: VisionState,
        choice: RankedChoice,
        options: RecommendOptions,
    ) -> RecommendationInfo:
        reasons = explain(state, choice.lotus, choice.simulated_state, goal_type=options.goal_type)
        return RecommendationInfo(
            rank=rank,
            lotus=LotusModel.from_lotus(choice.lotus),
            score=choice.score,
            lookahead_score=choice.lookahead_score,
            reasons=[ReasonInfo(tag=r.tag.value, message=r.message) for r in reasons],
            simulated_state=VisionStateModel.from_state(choice.simulated_state),
        )

    def _resolve_choices(self, lotus_ids: list[str]) -> list[LotusDefinition] | ErrorResponse:
        """Map ids to catalog entries; an empty list means the whole catalog."""
        if not lotus_ids:
            return list(self.catalog)
        missing = [lotus_id for lotus_id in lotus_ids if lotus_id not in self._by_id]
        if missing:
            return ErrorResponse(
                error=f"Unknown lotus id(s): {', '.join(missing)}",
                error_code=ErrorCode.LOTUS_NOT_FOUND,
                details={"lotus_ids": missing},
            )
        return [self._by_id[lotus_id] for lotus_id in lotus_ids]

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """Create a new advisor session."""
        session = self.session_manager.create_session(
            weights=request.weights.to_weights() if request.weights else None,
            seed=request.seed,
        )
        if request.vision:
            session.vision = request.vision.to_state(session.id_factory)
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str) -> bool:
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_sessions()

    def update_vision(self, session_id: str, vision: VisionStateModel) -> SessionResponse | ErrorResponse:
        """
        Replace the session's held vision (bubble edits from the UI).

        Once a fundamental is held it stays: an omitted or identical one
        keeps it, a different one is rejected with FUNDAMENTAL_ALREADY_SET
        and the session is left unchanged.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)

        state = vision.to_state(session.id_factory)
        held = session.vision.fundamental
        if held is not None:
            if state.fundamental is not None and state.fundamental.id != held.id:
                result = try_set_fundamental(session.vision, state.fundamental)
                logger.warning("Session %s rejected vision update: %s", session_id, result.error)
                return ErrorResponse(
                    error=result.error or "Fundamental already set",
                    error_code=ErrorCode.FUNDAMENTAL_ALREADY_SET,
                    details={"fundamental": held.id},
                )
            state = state.with_fundamental(held)

        session.vision = state
        session.touch()
        return self._session_to_response(session)

    def update_weights(self, session_id: str, weights: UserWeightsModel) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        session.weights = weights.to_weights()
        session.touch()
        return self._session_to_response(session)

    def set_choices(self, session_id: str, lotus_ids: list[str]) -> SessionResponse | ErrorResponse:
        """Set the lotuses currently on offer."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        resolved = self._resolve_choices(lotus_ids)
        if isinstance(resolved, ErrorResponse):
            return resolved
        session.choices = list(lotus_ids)
        session.touch()
        return self._session_to_response(session)

    def select_lotus(self, session_id: str, lotus_id: str) -> SelectLotusResponse | ErrorResponse:
        """
        Commit the player's pick.

        A second fundamental is rejected with FUNDAMENTAL_ALREADY_SET and
        leaves the session unchanged. A successful pick clears the
        choices on offer.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        lotus = self.get_lotus(lotus_id)
        if lotus is None:
            return ErrorResponse(
                error=f"Unknown lotus id: {lotus_id}",
                error_code=ErrorCode.LOTUS_NOT_FOUND,
                details={"lotus_ids": [lotus_id]},
            )

        result = session.select(lotus)
        if not result.success:
            logger.warning("Session %s rejected %s: %s", session_id, lotus_id, result.error)
            code = (
                ErrorCode.FUNDAMENTAL_ALREADY_SET
                if result.error_code == FUNDAMENTAL_ALREADY_SET
                else ErrorCode.VALIDATION_ERROR
            )
            return ErrorResponse(error=result.error or "Selection rejected", error_code=code)

        logger.info("Session %s selected %s", session_id, lotus_id)
        session.choices = []
        return SelectLotusResponse(
            session_id=session_id,
            success=True,
            state_changes=result.state_changes,
            session=self._session_to_response(session),
        )

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _session_to_response(self, session: Session) -> SessionResponse:
        """Convert Session to SessionResponse."""
        return SessionResponse(
            session_id=session.session_id,
            created_at=session.created_at,
            vision=VisionStateModel.from_state(session.vision),
            weights=UserWeightsModel.from_weights(session.weights),
            choices=list(session.choices),
            history=list(session.history),
            current_value=calculate_state_value(session.vision, session.weights),
            risk=RiskInfo.from_assessment(assess_nightmare_risk(session.vision, session.weights)),
            synergies=[SynergyInfo.from_synergy(s) for s in detect_synergies(session.vision)],
        )


def _session_not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error="Session not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
        details={"session_id": session_id},
    )
