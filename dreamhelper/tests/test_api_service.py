"""
Tests for the API service layer and app wiring.

Tests:
- Stateless recommendations
- Session lifecycle via the service
- Bubble identity across round trips
- Error handling and HTTP status mapping
"""

import pytest
from fastapi.testclient import TestClient

from ..api import APIService, create_app
from ..api.schemas import (
    CreateSessionRequest,
    ErrorCode,
    ErrorResponse,
    LotusModel,
    RecommendOptions,
    RecommendRequest,
    UserWeightsModel,
    VisionStateModel,
)
from ..catalog import LOTUSES
from ..lotus_schema.effect_dsl import add
from ..lotus_schema.taxonomy import BubbleType, Quality
from .conftest import make_lotus


@pytest.fixture
def catalog(add_one_lotus, gear_multiply_lotus, certain_upgrade_lotus):
    return [
        add_one_lotus,
        make_lotus(add(2, Quality.PURPLE, BubbleType.GEAR), "add-purple-gears"),
        gear_multiply_lotus,
        certain_upgrade_lotus,
    ]


@pytest.fixture
def service(catalog):
    """Create a fresh API service over a small catalog."""
    return APIService(catalog=catalog)


class TestCatalogEndpoints:

    def test_default_catalog(self):
        assert len(APIService().catalog) == len(LOTUSES)

    def test_list_and_search(self, service):
        assert service.list_lotuses().count == 4
        assert [l.id for l in service.list_lotuses(query="gear").lotuses] == ["add-purple-gears", "gear-multiply"]


class TestRecommend:

    def test_ranks_choices(self, service):
        response = service.recommend(RecommendRequest(lotus_ids=["add-one", "add-purple-gears"]))
        assert [r.lotus.id for r in response.recommendations] == ["add-purple-gears", "add-one"]
        assert response.recommendations[0].rank == 1
        assert response.recommendations[0].score == pytest.approx(8)
        assert response.current_value == 0

    def test_empty_ids_rank_whole_catalog(self, service):
        response = service.recommend(RecommendRequest(top_n=10))
        assert len(response.recommendations) == 4

    def test_unknown_lotus(self, service):
        response = service.recommend(RecommendRequest(lotus_ids=["nope"]))
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.LOTUS_NOT_FOUND

    def test_reasons_included(self, service):
        vision = VisionStateModel.model_validate({"bubbles": [{"type": "Gear", "quality": "White"}]})
        response = service.recommend(RecommendRequest(vision=vision, lotus_ids=["add-purple-gears"]))
        tags = [r.tag for r in response.recommendations[0].reasons]
        assert "synergy_formed" in tags

    def test_lookahead_sets_score(self, service):
        response = service.recommend(RecommendRequest(lotus_ids=["add-one"], lookahead=True, depth=2))
        assert response.recommendations[0].lookahead_score is not None

    def test_seeded_monte_carlo_repeats(self, service):
        vision = VisionStateModel.model_validate({"bubbles": [{"type": "Gear", "quality": "White"}] * 4})
        request = RecommendRequest(vision=vision, stochastic=True, trials=20, seed=3, top_n=4)
        first = [r.score for r in service.recommend(request).recommendations]
        second = [r.score for r in service.recommend(request).recommendations]
        assert first == second


class TestSessions:

    def test_lifecycle(self, service):
        session = service.create_session(CreateSessionRequest(seed=1))
        assert service.get_session(session.session_id).session_id == session.session_id
        assert service.end_session(session.session_id)
        missing = service.get_session(session.session_id)
        assert isinstance(missing, ErrorResponse)
        assert missing.error_code == ErrorCode.SESSION_NOT_FOUND

    def test_update_vision_and_weights(self, service):
        session_id = service.create_session(CreateSessionRequest()).session_id
        vision = VisionStateModel.model_validate({"bubbles": [{"type": "Cube", "quality": "Blue"}] * 3})
        response = service.update_vision(session_id, vision)
        assert len(response.vision.bubbles) == 3
        assert any(s.id == "Cube-moderate" for s in response.synergies)
        assert response.risk.bubbles_at_risk == 1

        response = service.update_weights(session_id, UserWeightsModel(type_weights={BubbleType.CUBE: 2.0}))
        assert response.current_value == pytest.approx(3 * 2 * 2.0)

    def test_choices_and_select(self, service):
        session_id = service.create_session(CreateSessionRequest()).session_id
        service.set_choices(session_id, ["add-one", "add-purple-gears"])

        ranked = service.session_recommendations(session_id, RecommendOptions())
        assert ranked.recommendations[0].lotus.id == "add-purple-gears"

        selected = service.select_lotus(session_id, "add-purple-gears")
        assert selected.success
        assert selected.session.history == ["add-purple-gears"]
        assert selected.session.choices == []
        assert len(selected.session.vision.bubbles) == 2

    def test_invalid_choices_rejected(self, service):
        session_id = service.create_session(CreateSessionRequest()).session_id
        response = service.set_choices(session_id, ["add-one", "missing"])
        assert isinstance(response, ErrorResponse)
        assert service.get_session(session_id).choices == []

    def test_second_fundamental_rejected(self, service):
        session_id = service.create_session(CreateSessionRequest()).session_id
        assert service.select_lotus(session_id, "gear-multiply").success
        response = service.select_lotus(session_id, "certain-upgrade")
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.FUNDAMENTAL_ALREADY_SET
        assert service.get_session(session_id).history == ["gear-multiply"]

    def test_unknown_session(self, service):
        response = service.select_lotus("nope", "add-one")
        assert response.error_code == ErrorCode.SESSION_NOT_FOUND

    def test_update_vision_keeps_held_fundamental(self, service):
        """Bubble edits without a fundamental do not drop the one chosen."""
        session_id = service.create_session(CreateSessionRequest()).session_id
        service.select_lotus(session_id, "gear-multiply")
        vision = VisionStateModel.model_validate({"bubbles": [{"type": "Gear", "quality": "Blue"}]})
        response = service.update_vision(session_id, vision)
        assert response.vision.fundamental.id == "gear-multiply"
        assert len(response.vision.bubbles) == 1

    def test_update_vision_rejects_other_fundamental(self, service, certain_upgrade_lotus):
        session_id = service.create_session(CreateSessionRequest()).session_id
        service.select_lotus(session_id, "gear-multiply")
        vision = VisionStateModel(
            bubbles=[], fundamental=LotusModel.from_lotus(certain_upgrade_lotus)
        )
        response = service.update_vision(session_id, vision)
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.FUNDAMENTAL_ALREADY_SET
        assert service.get_session(session_id).vision.fundamental.id == "gear-multiply"

    def test_update_vision_sets_first_fundamental(self, service, certain_upgrade_lotus):
        session_id = service.create_session(CreateSessionRequest()).session_id
        vision = VisionStateModel(fundamental=LotusModel.from_lotus(certain_upgrade_lotus))
        response = service.update_vision(session_id, vision)
        assert response.vision.fundamental.id == "certain-upgrade"


class TestBubbleIdentity:

    def test_recommended_state_fed_back(self, service):
        """A returned simulated state can be sent again without id clashes."""
        first = service.recommend(RecommendRequest(lotus_ids=["add-purple-gears"]))
        vision = first.recommendations[0].simulated_state

        second = service.recommend(RecommendRequest(
            vision=vision, lotus_ids=["add-purple-gears"], goal_type=BubbleType.GEAR
        ))
        top = second.recommendations[0]
        ids = [b.id for b in top.simulated_state.bubbles]
        assert len(ids) == 4
        assert len(set(ids)) == 4
        assert "goal_progress" in [r.tag for r in top.reasons]

    def test_imported_session_ids_not_reminted(self, service):
        vision = VisionStateModel.model_validate(
            {"bubbles": [{"id": "bubble-1", "type": "Gear", "quality": "White"}]}
        )
        session_id = service.create_session(CreateSessionRequest(vision=vision)).session_id
        selected = service.select_lotus(session_id, "add-one")
        ids = [b.id for b in selected.session.vision.bubbles]
        assert ids[0] == "bubble-1"
        assert len(set(ids)) == 2

    def test_repeated_input_ids_replaced(self, service):
        session_id = service.create_session(CreateSessionRequest()).session_id
        vision = VisionStateModel.model_validate(
            {"bubbles": [{"id": "x", "type": "Cube", "quality": "Blue"}] * 3}
        )
        response = service.update_vision(session_id, vision)
        ids = [b.id for b in response.vision.bubbles]
        assert ids[0] == "x"
        assert len(set(ids)) == 3


class TestApp:

    def test_routes_registered(self, service):
        app = create_app(service)
        paths = {route.path for route in app.routes}
        for path in [
            "/api/v1/health",
            "/api/v1/lotuses",
            "/api/v1/recommend",
            "/api/v1/sessions",
            "/api/v1/sessions/{session_id}",
            "/api/v1/sessions/{session_id}/bubbles",
            "/api/v1/sessions/{session_id}/weights",
            "/api/v1/sessions/{session_id}/choices",
            "/api/v1/sessions/{session_id}/recommendations",
            "/api/v1/sessions/{session_id}/select",
        ]:
            assert path in paths

    def test_second_fundamental_returns_409(self, service):
        client = TestClient(create_app(service))
        session_id = client.post("/api/v1/sessions", json={}).json()["sessionId"]

        first = client.post(f"/api/v1/sessions/{session_id}/select", json={"lotusId": "gear-multiply"})
        assert first.status_code == 200

        second = client.post(f"/api/v1/sessions/{session_id}/select", json={"lotusId": "certain-upgrade"})
        assert second.status_code == 409
        assert second.json()["errorCode"] == "FUNDAMENTAL_ALREADY_SET"

    def test_fundamental_swap_on_bubbles_returns_409(self, service, certain_upgrade_lotus):
        client = TestClient(create_app(service))
        session_id = client.post("/api/v1/sessions", json={}).json()["sessionId"]
        client.post(f"/api/v1/sessions/{session_id}/select", json={"lotusId": "gear-multiply"})

        body = {
            "bubbles": [],
            "fundamental": LotusModel.from_lotus(certain_upgrade_lotus).model_dump(mode="json", by_alias=True),
        }
        response = client.put(f"/api/v1/sessions/{session_id}/bubbles", json=body)
        assert response.status_code == 409

    def test_unknown_session_returns_404(self, service):
        client = TestClient(create_app(service))
        response = client.get("/api/v1/sessions/missing")
        assert response.status_code == 404
        assert response.json()["errorCode"] == "SESSION_NOT_FOUND"
