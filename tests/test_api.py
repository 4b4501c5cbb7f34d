"""
Tests for the HTTP API.

The app runs against an in-memory store and the scripted partner from
conftest, so no network or database is touched.
"""

import pytest
from fastapi.testclient import TestClient

from api_server.context import build_context
from api_server.main import create_app
from api_server.middleware.rate_limit import (
    get_judge_rate_limit_string,
    get_rate_limit_string,
    limiter,
)
from debate_partner import APIKeyError, ProviderError
from practice_core import MemoryMedium, Store

from .conftest import FakePartner


@pytest.fixture
def partners():
    return []


@pytest.fixture
def client(partners):
    def partner_factory(api_key):
        partner = FakePartner()
        partners.append(partner)
        return partner

    context = build_context(
        store=Store(MemoryMedium(), latency=0),
        partner_factory=partner_factory,
        tick_interval=3600,
        session_timeout_minutes=30,
    )
    limiter.enabled = False
    with TestClient(create_app(context)) as c:
        yield c
    limiter.enabled = True


def sign_up(client, email="ada@example.com", username="ada"):
    response = client.post(
        "/auth/signup",
        json={"email": email, "password": "s3cret-pass", "username": username},
    )
    assert response.status_code == 201
    return response.json()


def new_session(client):
    response = client.post("/debate/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


class TestHealth:
    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["active_sessions"] == 0

    def test_personas(self, client):
        names = [p["name"] for p in client.get("/debate/personas").json()]
        assert names[0] == "Neutral"
        assert "Aggressive" in names


class TestAuth:
    """Tests for the account endpoints."""

    def test_signup_signs_in(self, client):
        data = sign_up(client)
        assert data["profile"]["username"] == "ada"
        assert "secret_hash" not in data["user"]

        session = client.get("/auth/session").json()
        assert session["user"]["email"] == "ada@example.com"

    def test_duplicate_email(self, client):
        sign_up(client)
        response = client.post(
            "/auth/signup",
            json={"email": "ADA@example.com", "password": "x", "username": "other"},
        )
        assert response.status_code == 409

    def test_signin_and_signout(self, client):
        sign_up(client)
        assert client.post("/auth/signout").status_code == 200
        assert client.get("/auth/session").json() == {"user": None, "profile": None}

        bad = client.post("/auth/signin", json={"email": "ada@example.com", "password": "wrong"})
        assert bad.status_code == 401

        good = client.post("/auth/signin", json={"email": "ada@example.com", "password": "s3cret-pass"})
        assert good.status_code == 200
        assert good.json()["profile"]["username"] == "ada"

    def test_invalid_signup(self, client):
        response = client.post(
            "/auth/signup",
            json={"email": "ada@example.com", "password": "x", "username": "  "},
        )
        assert response.status_code == 400
        assert response.json()["field"] == "username"

    def test_profile_update(self, client):
        sign_up(client)
        response = client.patch("/auth/profile", json={"username": "ada.l"})
        assert response.status_code == 200
        assert response.json()["username"] == "ada.l"

    def test_profile_update_requires_sign_in(self, client):
        response = client.patch("/auth/profile", json={"username": "x"})
        assert response.status_code == 401


class TestDebateFlow:
    """Tests for a full debate over HTTP."""

    def test_full_debate(self, client):
        user = sign_up(client)["user"]
        sid = new_session(client)

        started = client.post(f"/debate/sessions/{sid}/start", json={"topic": "X", "persona": "Aggressive"})
        assert started.status_code == 200
        assert started.json()["state"] == "debating"
        assert len(started.json()["messages"]) == 1

        turn = client.post(f"/debate/sessions/{sid}/turn", json={"message": "My argument."})
        assert turn.status_code == 200
        assert turn.json()["outcome"]["ai_message"]["sender"] == "ai"
        assert len(turn.json()["session"]["messages"]) == 3

        ended = client.post(f"/debate/sessions/{sid}/end").json()
        assert ended["result"]["winner"] == "user"
        assert ended["session"]["state"] == "results"

        board = client.post(f"/debate/sessions/{sid}/leaderboard").json()
        assert board["session"]["state"] == "leaderboard"
        assert board["standings"][0]["id"] == user["id"]
        assert board["standings"][0]["total_score"] == 80

        back = client.post(f"/debate/sessions/{sid}/back").json()
        assert back["state"] == "selecting"

        summary = client.get(f"/profiles/{user['id']}/summary").json()
        assert summary["win_rate"] == 100
        assert summary["recent_debates"][0]["status"] == "completed"

    def test_pending_input_turn(self, client):
        sign_up(client)
        sid = new_session(client)
        client.post(f"/debate/sessions/{sid}/start", json={"topic": "X"})

        client.post(f"/debate/sessions/{sid}/input", json={"text": "Spoken argument"})
        turn = client.post(f"/debate/sessions/{sid}/turn", json={})

        assert turn.json()["outcome"]["user_message"]["content"] == "Spoken argument"

    def test_start_requires_sign_in(self, client):
        sid = new_session(client)
        response = client.post(f"/debate/sessions/{sid}/start", json={"topic": "X"})
        assert response.status_code == 401

    def test_empty_topic(self, client):
        sign_up(client)
        sid = new_session(client)
        response = client.post(f"/debate/sessions/{sid}/start", json={"topic": " "})
        assert response.status_code == 400
        assert response.json()["field"] == "topic"

    def test_turn_before_start_conflicts(self, client):
        sid = new_session(client)
        response = client.post(f"/debate/sessions/{sid}/turn", json={"message": "hi"})
        assert response.status_code == 409

    def test_failed_judging_keeps_debating(self, client, partners):
        sign_up(client)
        sid = new_session(client)
        client.post(f"/debate/sessions/{sid}/start", json={"topic": "X"})
        partners[-1].score_error = ProviderError("judge down")

        ended = client.post(f"/debate/sessions/{sid}/end").json()

        assert ended["result"] is None
        assert ended["session"]["state"] == "debating"
        assert ended["session"]["last_error"] == "judge down"

    def test_restart(self, client):
        sign_up(client)
        sid = new_session(client)
        client.post(f"/debate/sessions/{sid}/start", json={"topic": "X"})

        data = client.post(f"/debate/sessions/{sid}/restart").json()

        assert data["state"] == "selecting"
        assert data["messages"] == []

    def test_unknown_session(self, client):
        assert client.get("/debate/sessions/missing").status_code == 404
        assert client.post("/debate/sessions/missing/end").status_code == 404

    def test_delete_session(self, client):
        sid = new_session(client)
        assert client.delete(f"/debate/sessions/{sid}").status_code == 204
        assert client.get(f"/debate/sessions/{sid}").status_code == 404


def test_missing_api_key_is_401():
    def partner_factory(api_key):
        raise APIKeyError()

    context = build_context(store=Store(MemoryMedium(), latency=0), partner_factory=partner_factory)
    with TestClient(create_app(context)) as client:
        response = client.post("/debate/sessions")
    assert response.status_code == 401


class TestLeaderboard:
    """Tests for the leaderboard endpoints."""

    def test_podium_and_entries(self, client):
        for i in range(4):
            sign_up(client, email=f"user{i}@example.com", username=f"user{i}")

        data = client.get("/leaderboard?limit=2").json()

        assert len(data["podium"]) == 3
        assert len(data["entries"]) == 2
        assert [e["position"] for e in data["entries"]] == [1, 2]

    def test_limit_validated(self, client):
        assert client.get("/leaderboard?limit=0").status_code == 422

    def test_unknown_profile_summary(self, client):
        assert client.get("/profiles/missing/summary").status_code == 404


class TestMedia:
    """Tests for saved analyses."""

    def test_add_and_list(self, client):
        sign_up(client)
        created = client.post(
            "/media/analyses",
            json={"topic": "Four-day week", "pros": ["rest"], "sentiment_score": 0.4},
        )
        assert created.status_code == 201

        analyses = client.get("/media/analyses").json()
        assert [a["topic"] for a in analyses] == ["Four-day week"]

    def test_requires_sign_in(self, client):
        assert client.get("/media/analyses").status_code == 401


class TestRateLimits:
    """Tests for the per-minute limits on partner calls."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("RATE_LIMIT_PER_MINUTE", raising=False)
        monkeypatch.delenv("RATE_LIMIT_JUDGE_PER_MINUTE", raising=False)
        assert get_rate_limit_string() == "30/minute"
        assert get_judge_rate_limit_string() == "10/minute"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "60")
        monkeypatch.setenv("RATE_LIMIT_JUDGE_PER_MINUTE", "5")
        assert get_rate_limit_string() == "60/minute"
        assert get_judge_rate_limit_string() == "5/minute"

    def test_invalid_value_falls_back(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_JUDGE_PER_MINUTE", "lots")
        assert get_judge_rate_limit_string() == "10/minute"
