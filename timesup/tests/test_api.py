"""
Tests for the REST API.

Drives the FastAPI app through the test client against a fresh service.
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.service import APIService


@pytest.fixture
def client():
    return TestClient(create_app(APIService()))


def create_game(client, **overrides):
    body = {
        "teams": ["Red", "Blue"],
        "categories": ["easy"],
        "turn_time_limit": 30,
        "word_count": 10,
        "random_seed": 5,
    }
    body.update(overrides)
    response = client.post("/api/v1/games", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def post_action(client, session_id, action, **fields):
    return client.post(f"/api/v1/games/{session_id}/actions", json={"action": action, **fields})


class TestSystemEndpoints:
    """Tests for health and content endpoints."""

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["service"] == "timesup-engine"

    def test_categories(self, client):
        data = client.get("/api/v1/categories").json()
        assert data["count"] == 4
        assert [c["category_id"] for c in data["categories"]] == ["very_easy", "easy", "medium", "hard"]

    def test_openapi_lists_schemas(self, client):
        schemas = client.get("/openapi.json").json()["components"]["schemas"]
        assert "GameStateResponse" in schemas
        assert "ErrorResponse" in schemas


class TestCreateGame:
    """Tests for game setup."""

    def test_create_starts_game(self, client):
        data = create_game(client)
        assert data["phase"] == "playing"
        assert data["loop_state"] == "waiting_turn"
        assert data["round_number"] == 1
        assert data["remaining_terms"] == 10
        assert [t["name"] for t in data["teams"]] == ["Red", "Blue"]
        assert data["teams"][0]["is_active"]

    def test_create_without_start(self, client):
        data = create_game(client, auto_start=False)
        assert data["phase"] == "setup"
        assert data["status"] == "created"

    def test_unknown_category(self, client):
        response = client.post("/api/v1/games", json={"teams": ["A", "B"], "categories": ["nope"]})
        assert response.status_code == 400
        assert response.json()["error_code"] == "UNKNOWN_CATEGORY"

    def test_small_custom_category_rejected(self, client):
        response = client.post("/api/v1/games", json={
            "teams": ["A", "B"],
            "categories": ["mine"],
            "custom_categories": [{"category_id": "mine", "name": "Mine", "terms": ["X", "Y", "Z"]}],
        })
        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "INVALID_SETTINGS"
        assert data["details"]["errors"]

    def test_word_count_shrinks_to_available(self, client):
        data = create_game(client, categories=["mine"], word_count=50, custom_categories=[
            {"category_id": "mine", "name": "Mine", "terms": [f"T{i}" for i in range(8)]},
        ])
        assert data["remaining_terms"] == 8

    def test_one_team_is_request_error(self, client):
        response = client.post("/api/v1/games", json={"teams": ["Solo"]})
        assert response.status_code == 422


class TestGameLoopEndpoints:
    """Tests for actions and ticks."""

    def test_start_turn_shows_term(self, client):
        game = create_game(client)
        response = post_action(client, game["session_id"], "start_turn")
        assert response.status_code == 200
        state = response.json()["state"]
        assert state["loop_state"] == "turn_running"
        assert state["current_term"]
        assert state["is_timer_running"]

    def test_correct_scores(self, client):
        game = create_game(client)
        post_action(client, game["session_id"], "start_turn")
        data = post_action(client, game["session_id"], "correct").json()
        assert data["state"]["teams"][0]["score"] == 1
        assert data["state"]["remaining_terms"] == 9

    def test_skip_in_first_round_conflicts(self, client):
        game = create_game(client)
        post_action(client, game["session_id"], "start_turn")
        response = post_action(client, game["session_id"], "skip")
        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "INVALID_ACTION"
        assert data["details"]["loop_state"] == "turn_running"

    def test_tick_ends_turn(self, client):
        game = create_game(client)
        sid = game["session_id"]
        post_action(client, sid, "start_turn")

        data = client.post(f"/api/v1/games/{sid}/tick", json={"seconds": 10}).json()
        assert not data["turn_ended"]
        assert data["state"]["turn_time_remaining"] == 20

        data = client.post(f"/api/v1/games/{sid}/tick", json={"seconds": 30}).json()
        assert data["turn_ended"]
        assert data["state"]["loop_state"] == "waiting_turn"
        assert data["state"]["active_team_id"] == "team_2"

    def test_paused_clock_does_not_run(self, client):
        game = create_game(client)
        sid = game["session_id"]
        post_action(client, sid, "start_turn")
        assert post_action(client, sid, "pause").json()["state"]["is_paused"]

        data = client.post(f"/api/v1/games/{sid}/tick", json={"seconds": 30}).json()
        assert not data["turn_ended"]
        assert data["state"]["turn_time_remaining"] == 30

    def test_unknown_game(self, client):
        response = post_action(client, "missing", "start_turn")
        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"


class TestSnapshotEndpoints:
    """Tests for snapshot export and restore."""

    def test_export_and_restore(self, client):
        game = create_game(client)
        sid = game["session_id"]
        post_action(client, sid, "start_turn")
        post_action(client, sid, "correct")

        snapshot = client.get(f"/api/v1/games/{sid}/snapshot").json()
        assert snapshot["snapshot_version"] == 1

        response = client.post("/api/v1/games/restore", json=snapshot)
        assert response.status_code == 200
        data = response.json()
        assert data["session_id"] == sid
        assert data["teams"][0]["score"] == 1
        assert data["remaining_terms"] == 9
        assert data["loop_state"] == "turn_running"

    def test_broken_snapshot(self, client):
        response = client.post("/api/v1/games/restore", json={"snapshot_version": 1})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_SNAPSHOT"

    def test_snapshot_without_teams_rejected(self, client):
        game = create_game(client)
        snapshot = client.get(f"/api/v1/games/{game['session_id']}/snapshot").json()
        snapshot["teams"] = []

        response = client.post("/api/v1/games/restore", json=snapshot)
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_SNAPSHOT"

    def test_end_game(self, client):
        game = create_game(client)
        sid = game["session_id"]
        data = client.delete(f"/api/v1/games/{sid}").json()
        assert data["success"]
        assert client.get(f"/api/v1/games/{sid}").status_code == 404
