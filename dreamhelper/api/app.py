"""
FastAPI Application - REST API for the advisor UI.

Endpoints:
    GET    /api/v1/health                          Health check
    GET    /api/v1/lotuses                         List or search the catalog
    POST   /api/v1/recommend                       Rank lotuses for a given vision
    POST   /api/v1/sessions                        Create session
    GET    /api/v1/sessions                        List sessions
    GET    /api/v1/sessions/{id}                   Get session
    DELETE /api/v1/sessions/{id}                   End session
    PUT    /api/v1/sessions/{id}/bubbles           Replace the held vision
    PUT    /api/v1/sessions/{id}/weights           Replace the weights
    PUT    /api/v1/sessions/{id}/choices           Set the lotuses on offer
    GET    /api/v1/sessions/{id}/recommendations   Rank the lotuses on offer
    POST   /api/v1/sessions/{id}/select            Commit a pick

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional, Union
import logging
import os

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..catalog import load_catalog
from ..lotus_schema.taxonomy import BubbleType
from .service import APIService
from .schemas import (
    # Request models
    RecommendOptions,
    RecommendRequest,
    CreateSessionRequest,
    ChoicesRequest,
    SelectLotusRequest,
    # Response models
    RecommendResponse,
    LotusListResponse,
    SessionResponse,
    SelectLotusResponse,
    EndSessionResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    UserWeightsModel,
    VisionStateModel,
    # Enums
    ErrorCode,
)

logger = logging.getLogger(__name__)

# Environment configuration
DREAMHELPER_ENV = os.getenv("DREAMHELPER_ENV", "development")
DREAMHELPER_CATALOG_PATH = os.getenv("DREAMHELPER_CATALOG_PATH", None)
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

_STATUS_BY_CODE = {
    ErrorCode.SESSION_NOT_FOUND: 404,
    ErrorCode.LOTUS_NOT_FOUND: 404,
    ErrorCode.FUNDAMENTAL_ALREADY_SET: 409,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Dream Helper API",
        description="""
Lotus recommendations for building a bubble vision.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `LOTUS_NOT_FOUND` | Lotus id is not in the catalog |
| `FUNDAMENTAL_ALREADY_SET` | A fundamental lotus was already chosen this run |
| `VALIDATION_ERROR` | Request data is invalid |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if service is None:
        if DREAMHELPER_CATALOG_PATH:
            service = APIService(catalog=load_catalog(DREAMHELPER_CATALOG_PATH))
        else:
            service = APIService()
    api_service = service
    logger.info("API ready (%s) with %d lotuses", DREAMHELPER_ENV, len(api_service.catalog))

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=_STATUS_BY_CODE.get(error.error_code, 400),
            content=error.model_dump(mode="json", by_alias=True),
        )

    def respond(response):
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # Catalog and stateless recommendations
    # =========================================================================

    @app.get(
        "/api/v1/lotuses",
        response_model=LotusListResponse,
        tags=["Catalog"],
        summary="List or search lotuses",
    )
    async def list_lotuses(
        q: Optional[str] = Query(None, description="Case-insensitive description search"),
        limit: Optional[int] = Query(None, ge=1),
    ) -> LotusListResponse:
        return api_service.list_lotuses(query=q, limit=limit)

    @app.post(
        "/api/v1/recommend",
        response_model=RecommendResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Recommendations"],
        summary="Rank lotuses for a vision",
    )
    async def recommend(request: RecommendRequest) -> Union[RecommendResponse, JSONResponse]:
        """
        Rank the lotuses on offer (or the whole catalog) for the given vision.

        Nothing is stored. Pass `seed` for reproducible Monte Carlo scores.
        """
        return respond(api_service.recommend(request))

    # =========================================================================
    # Sessions
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new session",
    )
    async def create_session(request: Optional[CreateSessionRequest] = None) -> SessionResponse:
        return api_service.create_session(request or CreateSessionRequest())

    @app.get(
        "/api/v1/sessions",
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> dict:
        sessions = api_service.list_sessions()
        return {"sessions": sessions, "count": len(sessions)}

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Vision, weights, risk and synergies for a session."""
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    @app.put(
        "/api/v1/sessions/{session_id}/bubbles",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Replace the held vision",
    )
    async def update_bubbles(
        session_id: str, vision: VisionStateModel
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Replace bubbles and capacity. A fundamental already held is kept;
        sending a different one returns 409.
        """
        return respond(api_service.update_vision(session_id, vision))

    @app.put(
        "/api/v1/sessions/{session_id}/weights",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Replace the user weights",
    )
    async def update_weights(
        session_id: str, weights: UserWeightsModel
    ) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.update_weights(session_id, weights))

    @app.put(
        "/api/v1/sessions/{session_id}/choices",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Set the lotuses on offer",
    )
    async def set_choices(
        session_id: str, request: ChoicesRequest
    ) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.set_choices(session_id, request.lotus_ids))

    @app.get(
        "/api/v1/sessions/{session_id}/recommendations",
        response_model=RecommendResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Recommendations"],
        summary="Rank the lotuses on offer",
    )
    async def session_recommendations(
        session_id: str,
        top_n: int = Query(3, ge=1),
        stochastic: bool = Query(False),
        trials: int = Query(100, ge=1),
        lookahead: bool = Query(False),
        depth: int = Query(2, ge=1),
        goal_type: Optional[BubbleType] = Query(None),
    ) -> Union[RecommendResponse, JSONResponse]:
        options = RecommendOptions(
            top_n=top_n,
            stochastic=stochastic,
            trials=trials,
            lookahead=lookahead,
            depth=depth,
            goal_type=goal_type,
        )
        return respond(api_service.session_recommendations(session_id, options))

    @app.post(
        "/api/v1/sessions/{session_id}/select",
        response_model=SelectLotusResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Commit a lotus pick",
    )
    async def select_lotus(
        session_id: str, request: SelectLotusRequest
    ) -> Union[SelectLotusResponse, JSONResponse]:
        """
        Commit the pick. Selecting a second fundamental lotus returns 409
        and leaves the session unchanged.
        """
        return respond(api_service.select_lotus(session_id, request.lotus_id))

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="dreamhelper",
            version=__version__,
            environment=DREAMHELPER_ENV,
            lotus_count=len(api_service.catalog),
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Dream Helper API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app
