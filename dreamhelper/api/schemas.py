"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between the UI and the engine. They
accept the UI's camelCase keys (`visionCapacity`, `typeWeights`, ...)
as well as the snake_case field names, and serialize with camelCase.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- LOTUS_NOT_FOUND: A lotus id is not in the catalog
- FUNDAMENTAL_ALREADY_SET: A second fundamental lotus was selected
- VALIDATION_ERROR: Request data is invalid
- INTERNAL_ERROR: Unexpected failure
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from ..advisor.risk import RiskAssessment
from ..advisor.synergy import Synergy
from ..advisor.weights import UserWeights
from ..engine_core.state import Bubble, IdFactory, VisionState, DEFAULT_CAPACITY, reserve_ids
from ..lotus_schema.effect_dsl import LotusDefinition, lotus_from_dict, lotus_to_dict
from ..lotus_schema.taxonomy import BubbleType, Quality


API_VERSION = "v1"


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    LOTUS_NOT_FOUND = "LOTUS_NOT_FOUND"
    FUNDAMENTAL_ALREADY_SET = "FUNDAMENTAL_ALREADY_SET"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class CamelModel(BaseModel):
    """Base model accepting both camelCase aliases and field names."""
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


# =============================================================================
# Shared Models
# =============================================================================

class BubbleModel(CamelModel):
    """A bubble as the UI stores it. `id` may be omitted on input."""
    id: Optional[str] = None
    type: BubbleType
    quality: Quality
    locked: bool = False

    def to_bubble(self, id_factory: IdFactory) -> Bubble:
        return Bubble(
            bubble_id=self.id or id_factory(),
            bubble_type=self.type,
            quality=self.quality,
            locked=self.locked,
        )

    @classmethod
    def from_bubble(cls, bubble: Bubble) -> BubbleModel:
        return cls(id=bubble.bubble_id, type=bubble.bubble_type, quality=bubble.quality, locked=bubble.locked)


class LotusModel(CamelModel):
    """A lotus definition. `effect` is the tagged effect dict."""
    id: str
    name: str
    description: str = ""
    effect: dict[str, Any] = Field(default_factory=lambda: {"type": "complex", "customLogic": ""})
    nightmare_omen: Optional[str] = None
    is_fundamental: bool = False

    def to_lotus(self) -> LotusDefinition:
        return lotus_from_dict(self.model_dump(by_alias=True))

    @classmethod
    def from_lotus(cls, lotus: LotusDefinition) -> LotusModel:
        return cls.model_validate(lotus_to_dict(lotus))


class VisionStateModel(CamelModel):
    """Plain-data vision state for import/export."""
    bubbles: list[BubbleModel] = Field(default_factory=list)
    vision_capacity: int = Field(DEFAULT_CAPACITY, ge=0)
    fundamental: Optional[LotusModel] = None

    def to_state(self, id_factory: IdFactory) -> VisionState:
        """
        Build an engine state.

        Supplied ids are reserved with `id_factory` so later simulations
        never mint them again. Bubbles without an id, or repeating an id
        seen earlier in the list, get a fresh one.
        """
        reserve_ids(id_factory, (b.id for b in self.bubbles if b.id))
        seen: set[str] = set()
        bubbles = []
        for model in self.bubbles:
            bubble = model.to_bubble(id_factory)
            if bubble.bubble_id in seen:
                bubble.bubble_id = id_factory()
            seen.add(bubble.bubble_id)
            bubbles.append(bubble)
        return VisionState(
            bubbles=bubbles,
            capacity=self.vision_capacity,
            fundamental=self.fundamental.to_lotus() if self.fundamental else None,
        )

    @classmethod
    def from_state(cls, state: VisionState) -> VisionStateModel:
        return cls(
            bubbles=[BubbleModel.from_bubble(b) for b in state.bubbles],
            vision_capacity=state.capacity,
            fundamental=LotusModel.from_lotus(state.fundamental) if state.fundamental else None,
        )


class UserWeightsModel(CamelModel):
    """User weights. Missing entries fall back to the defaults."""
    quality_multipliers: dict[Quality, float] = Field(default_factory=dict)
    type_weights: dict[BubbleType, float] = Field(default_factory=dict)
    risk_tolerance: float = Field(0.5, ge=0.0, le=1.0)

    def to_weights(self) -> UserWeights:
        return UserWeights(
            quality_multipliers=dict(self.quality_multipliers),
            type_weights=dict(self.type_weights),
            risk_tolerance=self.risk_tolerance,
        )

    @classmethod
    def from_weights(cls, weights: UserWeights) -> UserWeightsModel:
        return cls(
            quality_multipliers=dict(weights.quality_multipliers),
            type_weights=dict(weights.type_weights),
            risk_tolerance=weights.risk_tolerance,
        )


class SavedVisionModel(VisionStateModel):
    """A vision file as the CLI reads it, optionally with the player's weights."""
    weights: Optional[UserWeightsModel] = None


class ReasonInfo(CamelModel):
    tag: str
    message: str


class RiskInfo(CamelModel):
    """Nightmare risk for the current vision."""
    bubbles_at_risk: int
    value_at_risk: float
    risk_level: str

    @classmethod
    def from_assessment(cls, risk: RiskAssessment) -> RiskInfo:
        return cls(
            bubbles_at_risk=risk.bubbles_at_risk,
            value_at_risk=risk.value_at_risk,
            risk_level=risk.risk_level.value,
        )


class SynergyInfo(CamelModel):
    id: str
    title: str
    description: str
    strength: str

    @classmethod
    def from_synergy(cls, synergy: Synergy) -> SynergyInfo:
        return cls(
            id=synergy.synergy_id,
            title=synergy.title,
            description=synergy.description,
            strength=synergy.strength.value,
        )


# =============================================================================
# Request Models
# =============================================================================

class RecommendOptions(CamelModel):
    """Ranking mode flags."""
    top_n: int = Field(3, ge=1, description="Number of recommendations to return")
    stochastic: bool = Field(False, description="Monte Carlo averaging over the fundamental")
    trials: int = Field(100, ge=1, description="Monte Carlo trials per lotus")
    lookahead: bool = Field(False, description="Add discounted follow-up value")
    depth: int = Field(2, ge=1, description="Lookahead depth gate (> 1 searches one extra pick)")
    goal_type: Optional[BubbleType] = Field(None, description="Bubble type to bias toward")


class RecommendRequest(RecommendOptions):
    """Stateless recommendation request."""
    vision: VisionStateModel = Field(default_factory=VisionStateModel)
    weights: UserWeightsModel = Field(default_factory=UserWeightsModel)
    lotus_ids: list[str] = Field(
        default_factory=list, description="Lotuses on offer; empty means the whole catalog"
    )
    seed: Optional[int] = Field(None, description="Seed for reproducible Monte Carlo scores")


class CreateSessionRequest(CamelModel):
    vision: Optional[VisionStateModel] = None
    weights: Optional[UserWeightsModel] = None
    seed: Optional[int] = Field(None, description="Seed for the session's random source")


class ChoicesRequest(CamelModel):
    lotus_ids: list[str] = Field(default_factory=list)


class SelectLotusRequest(CamelModel):
    lotus_id: str


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(CamelModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = API_VERSION


class RecommendationInfo(CamelModel):
    rank: int
    lotus: LotusModel
    score: float
    lookahead_score: Optional[float] = None
    reasons: list[ReasonInfo] = Field(default_factory=list)
    simulated_state: VisionStateModel


class RecommendResponse(CamelModel):
    recommendations: list[RecommendationInfo]
    current_value: float
    api_version: str = API_VERSION


class LotusListResponse(CamelModel):
    lotuses: list[LotusModel]
    count: int


class SessionResponse(CamelModel):
    """Response containing session information."""
    session_id: str
    created_at: float
    vision: VisionStateModel
    weights: UserWeightsModel
    choices: list[str] = Field(default_factory=list)
    history: list[str] = Field(default_factory=list)
    current_value: float = 0.0
    risk: RiskInfo
    synergies: list[SynergyInfo] = Field(default_factory=list)
    api_version: str = API_VERSION


class SelectLotusResponse(CamelModel):
    session_id: str
    success: bool
    state_changes: list[str] = Field(default_factory=list)
    session: SessionResponse


class EndSessionResponse(CamelModel):
    success: bool
    session_id: str


class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    service: str
    version: str
    environment: str
    lotus_count: int
