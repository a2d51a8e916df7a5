"""HTTP tests for the ``/api/v1/auth`` routes."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from authcore.api.v1 import health
from authcore.factory import create_app
from authcore.services._shared.cache_keys import refresh_token_key
from tests.conftest import TestConfig
from tests.factories.user import DEFAULT_PASSWORD, UserFactory

BASE = "/api/v1/auth"


def _login(client, user):
    resp = client.post(f"{BASE}/login", json={"email": user.email, "password": DEFAULT_PASSWORD})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


def _bearer(tokens) -> dict[str, str]:
    return {"Authorization": f"Bearer {tokens['access_token']}"}


class TestAuthApi:
    def test_register_returns_tokens(self, client):
        resp = client.post(
            f"{BASE}/register",
            json={"email": "fresh@example.com", "password": "long-enough", "name": "Fresh"},
        )

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert set(data) == {"access_token", "refresh_token", "expires_in", "token_type"}
        assert data["expires_in"] == 900
        assert data["token_type"] == "Bearer"

    def test_register_duplicate_is_409(self, client):
        UserFactory(email="dup@example.com")

        resp = client.post(f"{BASE}/register", json={"email": "dup@example.com", "password": "long-enough"})

        assert resp.status_code == 409
        assert resp.mimetype == "application/problem+json"

    def test_register_validation_is_422(self, client):
        resp = client.post(f"{BASE}/register", json={"email": "not-an-email", "password": "short"})

        assert resp.status_code == 422
        errors = resp.get_json()["details"]["errors"]
        assert "email" in errors and "password" in errors

    @pytest.mark.parametrize("active", [True, False])
    def test_login_failures_share_one_body(self, client, active):
        user = UserFactory(is_active=active)
        password = "wrong-password" if active else DEFAULT_PASSWORD

        resp = client.post(f"{BASE}/login", json={"email": user.email, "password": password})

        assert resp.status_code == 401
        assert resp.get_json()["detail"] == "Invalid credentials"

    def test_refresh_rotates_and_rejects_replay(self, client):
        tokens = _login(client, UserFactory())

        first = client.post(f"{BASE}/refresh", json={"refresh_token": tokens["refresh_token"]})
        replay = client.post(f"{BASE}/refresh", json={"refresh_token": tokens["refresh_token"]})

        assert first.status_code == 200
        assert first.get_json()["data"]["refresh_token"] != tokens["refresh_token"]
        assert replay.status_code == 401
        assert replay.get_json()["detail"] == "Invalid or expired refresh token"
        assert "reason" not in replay.get_json()

    def test_logout_blacklists_token(self, client, fake_redis):
        tokens = _login(client, UserFactory())

        resp = client.post(
            f"{BASE}/logout",
            json={"refresh_token": tokens["refresh_token"]},
            headers=_bearer(tokens),
        )

        assert resp.status_code == 204
        assert fake_redis.get(refresh_token_key(tokens["refresh_token"])) == b"true"
        again = client.post(f"{BASE}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert again.status_code == 401

    def test_logout_requires_access_token(self, client):
        resp = client.post(f"{BASE}/logout", json={"refresh_token": "x"})
        assert resp.status_code == 401

    def test_logout_all(self, client):
        user = UserFactory()
        sessions = [_login(client, user) for _ in range(2)]

        resp = client.post(f"{BASE}/logout-all", headers=_bearer(sessions[0]))

        assert resp.status_code == 204
        for tokens in sessions:
            r = client.post(f"{BASE}/refresh", json={"refresh_token": tokens["refresh_token"]})
            assert r.status_code == 401

    def test_me_returns_profile(self, client):
        user = UserFactory(name="Me Myself")
        tokens = _login(client, user)

        resp = client.get(f"{BASE}/me", headers=_bearer(tokens))

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["id"] == user.id
        assert data["name"] == "Me Myself"
        assert "password_hash" not in data

    def test_responses_carry_request_id(self, client):
        resp = client.post(f"{BASE}/refresh", json={"refresh_token": "x"}, headers={"X-Request-ID": "rid-1"})

        assert resp.headers["X-Request-ID"] == "rid-1"
        assert resp.get_json()["request_id"] == "rid-1"


class TestHealth:
    def test_health_reports_db_and_cache(self, client):
        resp = client.get("/api/v1/health")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["db"] == "ok"
        assert body["status"] == "ok"
        assert body["cache"] == "ok"

    def test_health_with_cache_down(self, client, broken_redis):
        resp = client.get("/api/v1/health")

        assert resp.status_code == 200
        assert resp.get_json()["cache"] == "fail"

    def test_health_with_database_down_is_unhealthy(self, client, monkeypatch):
        def boom(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("db down"))

        monkeypatch.setattr(health, "db", SimpleNamespace(session=SimpleNamespace(execute=boom)))

        resp = client.get("/api/v1/health")

        body = resp.get_json()
        assert body["db"] == "fail"
        assert body["status"] == "unhealthy"


class TestRouting:
    def test_blueprints_mount_under_configured_prefix(self):
        class PrefixedConfig(TestConfig):
            API_BASE_PREFIX = "/svc/"

        app = create_app(PrefixedConfig, instance_relative_config=False)

        rules = {rule.rule for rule in app.url_map.iter_rules()}
        assert "/svc/v1/health" in rules
        assert "/svc/v1/auth/login" in rules
        assert "/svc/v1/auth/logout-all" in rules
        assert not any(r.startswith("/api/") for r in rules)
