"""
Web server tests — JSON endpoints and the WebSocket command channel.
"""

import json

import pytest
from fastapi.testclient import TestClient

from scenario import build_scenario
from server import MAX_BATCH, app
from table import TABLE_LENGTH, TABLE_WIDTH


@pytest.fixture
def client():
    return TestClient(app)


class TestEndpoints:

    def test_table(self, client):
        res = client.get("/api/table")
        assert res.status_code == 200
        body = res.json()
        assert body["length"] == TABLE_LENGTH
        assert body["width"] == TABLE_WIDTH
        assert len(body["pockets"]) == 6

    @pytest.mark.parametrize("mode, seed", [("8", 42), ("9", 7)])
    def test_scenario_matches_core(self, client, mode, seed):
        res = client.get("/api/scenario", params={"mode": mode, "seed": seed})
        assert res.status_code == 200
        assert res.json() == build_scenario(mode, seed).to_dict()

    def test_scenario_without_seed(self, client):
        body = client.get("/api/scenario").json()
        assert body["mode"] == "8"
        assert 0 <= body["seed"] <= 0xFFFFFFFF

    def test_unknown_mode_rejected(self, client):
        assert client.get("/api/scenario", params={"mode": "7"}).status_code == 422

    def test_batch(self, client):
        res = client.get("/api/scenarios", params={"mode": "9", "seed": 5, "count": 3})
        assert res.status_code == 200
        assert [s["seed"] for s in res.json()] == [5, 6, 7]

    def test_batch_wraps_seed(self, client):
        res = client.get("/api/scenarios", params={"seed": 0xFFFFFFFF, "count": 2})
        assert [s["seed"] for s in res.json()] == [0xFFFFFFFF, 0]

    @pytest.mark.parametrize("count", [0, MAX_BATCH + 1])
    def test_batch_limits(self, client, count):
        res = client.get("/api/scenarios", params={"count": count})
        assert res.status_code == 422


class TestWebSocket:

    def test_init_and_first_frame(self, client):
        with client.websocket_connect("/ws?mode=9&seed=3") as ws:
            init = ws.receive_json()
            assert init["type"] == "init"
            assert init["table"]["length"] == TABLE_LENGTH

            frame = ws.receive_json()
            assert frame["type"] == "scenario"
            assert frame["data"] == build_scenario("9", 3).to_dict()

    def test_commands(self, client):
        with client.websocket_connect("/ws?seed=1") as ws:
            ws.receive_json()
            ws.receive_json()

            ws.send_json({"cmd": "key_down", "key": "b"})
            assert ws.receive_json() == {"type": "redraw", "show_numbers": False}

            ws.send_json({"cmd": "execute", "text": json.dumps({"cmd": "set", "mode": "9", "seed": 11})})
            frame = ws.receive_json()
            assert frame["type"] == "scenario"
            assert frame["data"] == build_scenario("9", 11).to_dict()
            assert frame["show_numbers"] is False

            ws.send_json({"cmd": "execute", "text": '{"cmd": "warp"}'})
            status = ws.receive_json()
            assert status["type"] == "status"
            assert "Unknown cmd" in status["status"]

    def test_malformed_messages_ignored(self, client):
        with client.websocket_connect("/ws?seed=2") as ws:
            ws.receive_json()
            ws.receive_json()

            ws.send_text("not json")
            ws.send_json(["list"])
            ws.send_json({"cmd": "dance"})
            ws.send_json({"cmd": "get_state"})

            reply = ws.receive_json()
            assert reply["type"] == "state_json"
            assert json.loads(reply["data"])["seed"] == 2

    def test_next_key(self, client):
        with client.websocket_connect("/ws?seed=2") as ws:
            ws.receive_json()
            first = ws.receive_json()["data"]

            ws.send_json({"cmd": "key_down", "key": "n"})
            frame = ws.receive_json()
            assert frame["type"] == "scenario"
            assert frame["data"]["mode"] == first["mode"]
