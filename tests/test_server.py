"""Tests for the FastAPI match server."""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi.testclient import TestClient
from fastapi import WebSocketDisconnect

from server.config import Settings
from server.main import app, matches, settings, CLOSE_JOIN_REJECTED, CLOSE_MATCH_NOT_FOUND
from server.match_handler import CLOSE_MATCH_TERMINATED


@pytest.fixture(autouse=True)
def clear_matches(monkeypatch):
    """Clear matches before each test and disable the bot pacing delay."""
    monkeypatch.setattr(settings, "bot_delay_ms", 0)
    matches.clear()
    yield
    matches.clear()


@pytest.fixture
def client():
    """Create test client sharing one event loop across requests."""
    with TestClient(app) as client:
        yield client


def create(client, mode=None):
    body = {} if mode is None else {"mode": mode}
    return client.post("/matches", json=body).json()["match_id"]


class TestHealthEndpoint:
    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == "0.1.0"


class TestCreateMatch:
    def test_create_match_default(self, client):
        response = client.post("/matches")
        assert response.status_code == 200
        data = response.json()
        assert len(data["match_id"]) == 8
        assert data["mode"] == "pvp"

    def test_create_pvc(self, client):
        response = client.post("/matches", json={"mode": "pvc"})
        assert response.json()["mode"] == "pvc"

    def test_unknown_mode_falls_back(self, client):
        response = client.post("/matches", json={"mode": "blitz"})
        assert response.json()["mode"] == "pvp"

    def test_non_string_mode_falls_back(self, client):
        response = client.post("/matches", json={"mode": 5})
        assert response.json()["mode"] == "pvp"

    def test_create_multiple_matches(self, client):
        assert create(client) != create(client)

    def test_list_matches(self, client):
        match_id = create(client, "pvc")
        data = client.get("/matches").json()
        assert len(data["matches"]) == 1
        assert data["matches"][0]["match_id"] == match_id
        assert data["matches"][0]["phase"] == "awaiting_seats"


class TestGetMatch:
    def test_initial_snapshot(self, client):
        match_id = create(client, "pvc")
        data = client.get(f"/matches/{match_id}").json()
        assert data == {
            "board": [[0, 0, 0], [0, 0, 0], [0, 0, 0]],
            "turn": 1,
            "p1": "",
            "p2": "",
            "winner": 0,
            "mode": "pvc",
        }

    def test_get_nonexistent_match(self, client):
        response = client.get("/matches/nonexistent")
        assert response.status_code == 404

    def test_terminate_match(self, client):
        match_id = create(client)
        assert client.delete(f"/matches/{match_id}").status_code == 200
        assert client.get(f"/matches/{match_id}").status_code == 404

    def test_terminate_unknown_match(self, client):
        assert client.delete("/matches/nope").status_code == 404


class TestJoinAttempt:
    def test_accepted(self, client):
        match_id = create(client)
        data = client.post(f"/matches/{match_id}/join-attempt", json={"user_id": "alice"}).json()
        assert data == {"accepted": True, "reason": ""}

    def test_reserved_identity(self, client):
        match_id = create(client)
        data = client.post(f"/matches/{match_id}/join-attempt", json={"user_id": "BOT"}).json()
        assert not data["accepted"]
        assert data["reason"] == "participant id is reserved"

    def test_unknown_match(self, client):
        response = client.post("/matches/nope/join-attempt", json={"user_id": "alice"})
        assert response.status_code == 404


class TestWebSocket:
    def test_unknown_match_closed(self, client):
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect("/matches/nope/ws?user_id=alice") as ws:
                ws.receive_json()
        assert exc.value.code == CLOSE_MATCH_NOT_FOUND

    def test_pvc_join_and_bot_reply(self, client):
        match_id = create(client, "pvc")
        with client.websocket_connect(f"/matches/{match_id}/ws?user_id=alice") as ws:
            joined = ws.receive_json()
            assert joined["op_code"] == 0
            assert joined["data"]["p1"] == "alice"
            assert joined["data"]["p2"] == "BOT"

            ws.send_json({"op_code": 1, "data": {"row": 0, "col": 0}})
            human = ws.receive_json()["data"]
            assert human["board"][0][0] == 1
            assert human["turn"] == 2

            bot = ws.receive_json()["data"]
            assert bot["board"][1][1] == 2
            assert bot["turn"] == 1
            assert bot["winner"] == 0

    def test_delete_closes_sockets(self, client):
        match_id = create(client, "pvc")
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect(f"/matches/{match_id}/ws?user_id=alice") as ws:
                ws.receive_json()
                assert client.delete(f"/matches/{match_id}").status_code == 200
                ws.receive_json()
        assert exc.value.code == CLOSE_MATCH_TERMINATED
        assert match_id not in matches

    def test_pvc_second_human_rejected(self, client):
        match_id = create(client, "pvc")
        with client.websocket_connect(f"/matches/{match_id}/ws?user_id=alice") as ws:
            ws.receive_json()
            with pytest.raises(WebSocketDisconnect) as exc:
                with client.websocket_connect(f"/matches/{match_id}/ws?user_id=bob") as ws2:
                    ws2.receive_json()
            assert exc.value.code == CLOSE_JOIN_REJECTED

    def test_pvp_two_players(self, client):
        match_id = create(client, "pvp")
        with client.websocket_connect(f"/matches/{match_id}/ws?user_id=alice") as alice:
            assert alice.receive_json()["data"]["p1"] == "alice"
            with client.websocket_connect(f"/matches/{match_id}/ws?user_id=bob") as bob:
                assert alice.receive_json()["data"]["p2"] == "bob"
                assert bob.receive_json()["data"]["p2"] == "bob"

                alice.send_json({"op_code": 1, "data": {"row": 1, "col": 1}})
                assert alice.receive_json()["data"]["turn"] == 2
                assert bob.receive_json()["data"]["board"][1][1] == 1

                bob.send_json({"op_code": 1, "data": {"row": 2, "col": 2}})
                assert bob.receive_json()["data"]["turn"] == 1
                # Repeat is illegal: no further snapshot
                bob.send_json({"op_code": 1, "data": {"row": 2, "col": 2}})
                data = alice.receive_json()["data"]
                assert data["board"] == [[0, 0, 0], [0, 1, 0], [0, 0, 2]]
                assert data["turn"] == 1

    def test_malformed_frames_ignored(self, client):
        match_id = create(client, "pvp")
        with client.websocket_connect(f"/matches/{match_id}/ws?user_id=alice") as ws:
            ws.receive_json()
            ws.send_text("not json")
            ws.send_json({"op_code": 1, "data": {"row": 7, "col": 0}})
            ws.send_json({"op_code": 1, "data": {"row": "x"}})
            ws.send_json({"op_code": 5, "data": {"row": 0, "col": 0}})
            ws.send_json({"op_code": 1, "data": {"row": 2, "col": 2}})
            data = ws.receive_json()["data"]
            assert data["board"] == [[0, 0, 0], [0, 0, 0], [0, 0, 1]]


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ["TICTACTOE_BOT_DELAY_MS", "TICTACTOE_BOT_SEED", "TICTACTOE_LOG_LEVEL"]:
            monkeypatch.delenv(name, raising=False)
        s = Settings.from_env()
        assert s.bot_delay_ms == 500
        assert s.bot_delay_sec == 0.5
        assert s.bot_seed is None
        assert s.log_level == "INFO"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("TICTACTOE_BOT_DELAY_MS", "0")
        monkeypatch.setenv("TICTACTOE_BOT_SEED", "123")
        monkeypatch.setenv("TICTACTOE_LOG_LEVEL", "debug")
        s = Settings.from_env()
        assert s.bot_delay_sec == 0.0
        assert s.bot_seed == 123
        assert s.log_level == "DEBUG"

    def test_invalid_int(self, monkeypatch):
        monkeypatch.setenv("TICTACTOE_BOT_DELAY_MS", "soon")
        with pytest.raises(ValueError):
            Settings.from_env()
