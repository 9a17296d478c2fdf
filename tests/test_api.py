"""
HTTP API Tests

Drives the FastAPI app through TestClient with the orchestrator dependency
overridden by one wired to in-process fakes. The client is not used as a
context manager, so startup (and its real collaborators) never runs.
"""

import pytest
from fastapi.testclient import TestClient

from server.app import create_app
from server.state import get_orchestrator

from .conftest import INTENSE_ANSWERS


class TestSessionEndpoints:

    @pytest.fixture(autouse=True)
    def setup(self, make_orchestrator, clock):
        self.clock = clock
        self.orchestrator = make_orchestrator()
        app = create_app()
        app.dependency_overrides[get_orchestrator] = lambda: self.orchestrator
        self.client = TestClient(app)

    def _start(self, **body):
        body.setdefault("context", {"time_of_day": "evening", "day_type": "weekday"})
        resp = self.client.post("/api/sessions/start", json=body)
        assert resp.status_code == 200, resp.text
        return resp.json()

    def _answer_all(self, session_id):
        data = None
        for question_id, option_id in INTENSE_ANSWERS.items():
            resp = self.client.post(
                f"/api/sessions/{session_id}/answer",
                json={"question_id": question_id, "option_id": option_id},
            )
            assert resp.status_code == 200, resp.text
            data = resp.json()
        return data

    def test_start_returns_greeting_and_first_question(self):
        data = self._start()
        assert data["flow"] == "standard"
        assert data["greeting"] == "Good evening! Ready to unwind?"
        assert data["context_label"] == "evening weekday"
        assert data["first_question"]["id"] == "cognitive_load"
        assert data["progress"] == {"answered": 0, "total": 5, "percent": 0}

    def test_unknown_flow_falls_back_to_standard(self):
        data = self._start(flow="marathon")
        assert data["flow"] == "standard"

    def test_full_flow_returns_recommendations(self):
        started = self._start()
        data = self._answer_all(started["session_id"])

        assert data["type"] == "recommendations"
        assert data["progress"]["percent"] == 100
        assert len(data["recommendations"]) == 12
        assert data["moment"] is not None
        assert data["preference_text"]

        surprises = [r for r in data["recommendations"] if r["is_surprise"]]
        assert len(surprises) == 2

    def test_intermediate_answer_returns_next_question(self):
        started = self._start()
        resp = self.client.post(
            f"/api/sessions/{started['session_id']}/answer",
            json={"question_id": "cognitive_load", "option_id": "challenge"},
        )
        data = resp.json()
        assert data["type"] == "question"
        assert data["next_question"]["id"] == "emotional_tone"
        assert data["progress"]["answered"] == 1

    def test_get_session_reports_state(self):
        started = self._start()
        self._answer_all(started["session_id"])

        resp = self.client.get(f"/api/sessions/{started['session_id']}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["state"] == "recommended"
        assert data["answers"] == INTENSE_ANSWERS
        assert len(data["recommendations"]) == 12

    def test_adjust_keeps_refinement_count(self):
        started = self._start()
        self._answer_all(started["session_id"])

        resp = self.client.post(f"/api/sessions/{started['session_id']}/adjust", json={"adjustment": "lighter"})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["last_adjustment"] == "lighter"
        assert data["refinement_count"] == 0

    def test_refine_with_feedback(self):
        started = self._start()
        recs = self._answer_all(started["session_id"])["recommendations"]
        feedback = [{"item_id": r["item_id"], "reaction": "dislike"} for r in recs[:3]]

        resp = self.client.post(f"/api/sessions/{started['session_id']}/refine", json={"feedback": feedback})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["refinement_count"] == 1
        returned = {r["item_id"] for r in data["recommendations"]}
        assert not returned & {f["item_id"] for f in feedback}

    def test_moment_feedback_low_score_asks_follow_up(self):
        started = self._start()
        self._answer_all(started["session_id"])

        resp = self.client.post(f"/api/sessions/{started['session_id']}/moment-feedback", json={"score": 2})
        assert resp.status_code == 200
        assert resp.json()["needs_follow_up"] is True

    def test_delete_session(self):
        started = self._start()
        resp = self.client.delete(f"/api/sessions/{started['session_id']}")
        assert resp.status_code == 200
        assert resp.json() == {"session_id": started["session_id"], "deleted": True}

        resp = self.client.get(f"/api/sessions/{started['session_id']}")
        assert resp.status_code == 404


class TestErrorMapping:

    @pytest.fixture(autouse=True)
    def setup(self, make_orchestrator, clock):
        self.clock = clock
        self.orchestrator = make_orchestrator()
        app = create_app()
        app.dependency_overrides[get_orchestrator] = lambda: self.orchestrator
        self.client = TestClient(app)
        resp = self.client.post(
            "/api/sessions/start",
            json={"context": {"time_of_day": "evening", "day_type": "weekday"}},
        )
        self.session_id = resp.json()["session_id"]

    def _detail(self, resp):
        return resp.json()["detail"]

    def test_unknown_session_is_404(self):
        resp = self.client.get("/api/sessions/does-not-exist")
        assert resp.status_code == 404
        assert self._detail(resp)["code"] == "SESSION_NOT_FOUND"

    def test_expired_session_is_401(self):
        self.clock.advance(3601)
        resp = self.client.post(
            f"/api/sessions/{self.session_id}/answer",
            json={"question_id": "cognitive_load", "option_id": "easy"},
        )
        assert resp.status_code == 401
        detail = self._detail(resp)
        assert detail["code"] == "SESSION_EXPIRED"
        assert detail["session_id"] == self.session_id

    def test_unknown_question_is_400(self):
        resp = self.client.post(
            f"/api/sessions/{self.session_id}/answer",
            json={"question_id": "favorite_color", "option_id": "blue"},
        )
        assert resp.status_code == 400
        assert self._detail(resp)["code"] == "UNKNOWN_QUESTION"

    def test_unknown_option_is_400(self):
        resp = self.client.post(
            f"/api/sessions/{self.session_id}/answer",
            json={"question_id": "cognitive_load", "option_id": "nap"},
        )
        assert resp.status_code == 400
        assert self._detail(resp)["code"] == "UNKNOWN_OPTION"

    def test_adjust_before_recommendations_is_409(self):
        resp = self.client.post(f"/api/sessions/{self.session_id}/adjust", json={"adjustment": "lighter"})
        assert resp.status_code == 409
        assert self._detail(resp)["code"] == "INVALID_STATE"

    def test_answer_after_recommendations_is_409(self):
        for question_id, option_id in INTENSE_ANSWERS.items():
            self.client.post(
                f"/api/sessions/{self.session_id}/answer",
                json={"question_id": question_id, "option_id": option_id},
            )
        resp = self.client.post(
            f"/api/sessions/{self.session_id}/answer",
            json={"question_id": "cognitive_load", "option_id": "easy"},
        )
        assert resp.status_code == 409

    def test_unknown_adjustment_is_400(self):
        for question_id, option_id in INTENSE_ANSWERS.items():
            self.client.post(
                f"/api/sessions/{self.session_id}/answer",
                json={"question_id": question_id, "option_id": option_id},
            )
        resp = self.client.post(f"/api/sessions/{self.session_id}/adjust", json={"adjustment": "sideways"})
        assert resp.status_code == 400
        assert self._detail(resp)["code"] == "INVALID_FEEDBACK"

    def test_out_of_range_score_is_400(self):
        resp = self.client.post(f"/api/sessions/{self.session_id}/moment-feedback", json={"score": 9})
        assert resp.status_code == 400
        assert self._detail(resp)["code"] == "INVALID_FEEDBACK"


class TestCatalogEndpoints:

    @pytest.fixture(autouse=True)
    def setup(self):
        self.client = TestClient(create_app())

    def test_root_lists_endpoints(self):
        data = self.client.get("/").json()
        assert data["name"] == "whatnext API"
        assert "/api/sessions/start" in data["endpoints"]["sessions"]

    def test_adjustments_catalog(self):
        resp = self.client.get("/api/adjustments")
        assert resp.status_code == 200
        names = {a["name"] for a in resp.json()}
        assert names == {"lighter", "deeper", "weirder", "safer", "shorter", "longer"}
