"""Integration tests for the cookie preference API and consent middleware.

Tests the complete request/response handling, including the Set-Cookie
headers produced by the evaluator pass and by saving new consent.
"""

import json
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from cookie_manager.api.jar import RequestCookieJar
from cookie_manager.api.main import create_app


PREFS = "cm_user_preferences"


def _prefs_cookie(record):
    return f"{PREFS}={quote(json.dumps(record, separators=(',', ':')), safe='')}"


def _set_cookies(response, name):
    return [h for h in response.headers.get_list("set-cookie") if h.startswith(f"{name}=")]


class TestPreferencesAPI:
    """Test suite for cookie preference endpoints."""

    @pytest.fixture
    def client(self, sample_config):
        """Create a test client for the API."""
        return TestClient(create_app(sample_config), base_url="http://www.example.com")

    def test_health_check(self, client):
        response = client.get("/health", headers={"cookie": "random=1"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["manifest_categories"] == 3
        assert response.headers.get_list("set-cookie") == []

    def test_get_without_consent(self, client):
        response = client.get("/cookie-preferences")

        assert response.status_code == 200
        data = response.json()
        assert data["record"] is None
        assert data["banner_visible"] is True

    def test_get_with_consent(self, client):
        response = client.get(
            "/cookie-preferences",
            headers={"cookie": f"{_prefs_cookie({'analytics': 'on'})}; analytics-cookie=1"}
        )

        data = response.json()
        assert data["record"] == {"analytics": "on"}
        assert data["banner_visible"] is False
        decisions = {d["cookie"]["name"]: d for d in data["decisions"]}
        assert decisions["analytics-cookie"]["action"] == "keep"
        assert decisions[PREFS]["reason"] == "preference_cookie"

    def test_get_with_malformed_consent(self, client):
        response = client.get("/cookie-preferences", headers={"cookie": f"{PREFS}=notjson"})

        data = response.json()
        assert data["record"] is None
        assert data["banner_visible"] is True

    def test_middleware_expires_cookies_under_every_scope(self, client):
        response = client.get(
            "/cookie-preferences",
            headers={"cookie": "analytics-cookie=1; essential-cookie=1"}
        )

        deletions = _set_cookies(response, "analytics-cookie")
        assert len(deletions) == 4
        assert all("Max-Age=0" in h for h in deletions)
        assert sum("Domain=" not in h for h in deletions) == 1
        assert any("Domain=www.example.com" in h for h in deletions)
        assert any("Domain=.www.example.com" in h for h in deletions)
        assert any("Domain=.example.com" in h for h in deletions)
        assert _set_cookies(response, "essential-cookie") == []

        decisions = response.json()["decisions"]
        assert [d["cookie"]["name"] for d in decisions] == ["essential-cookie"]

    def test_accept_all(self, client):
        response = client.post("/cookie-preferences/accept-all")

        assert response.status_code == 200
        data = response.json()
        assert data["record"] == {"analytics": "on", "feedback": "on"}
        assert data["banner_visible"] is False

        stored = _set_cookies(response, PREFS)
        assert len(stored) == 1
        assert stored[0].startswith(_prefs_cookie({'analytics': 'on', 'feedback': 'on'}) + ';')
        assert "Max-Age=31536000" in stored[0]
        assert "Path=/" in stored[0]
        assert "Secure" not in stored[0]

    def test_reject_all_purges_previously_consented_cookies(self, client):
        response = client.post(
            "/cookie-preferences/reject-all",
            headers={"cookie": f"{_prefs_cookie({'analytics': 'on', 'feedback': 'on'})}; analytics-cookie=1"}
        )

        data = response.json()
        assert data["record"] == {"analytics": "off", "feedback": "off"}
        assert data["deleted"] == ["analytics-cookie"]
        assert len(_set_cookies(response, "analytics-cookie")) == 4

    def test_save_from_form(self, client):
        response = client.post("/cookie-preferences", json={"analytics": "on", "feedback": None})

        assert response.status_code == 200
        assert response.json()["record"] == {"analytics": "on"}

    def test_save_from_form_keeps_unknown_categories(self, client):
        response = client.post("/cookie-preferences", json={"marketing": "on"})

        assert response.json()["record"] == {"marketing": "on"}

    def test_save_from_form_rejects_non_object(self, client):
        response = client.post("/cookie-preferences", json=["analytics"])

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    def test_preference_page_banner_suppressed(self, sample_config):
        config = sample_config.model_copy(update={"cookie_banner_visible_on_page_with_preference_form": False})
        client = TestClient(create_app(config), base_url="http://www.example.com")

        assert client.get("/cookie-preferences", params={"preferences_page": "true"}).json()["banner_visible"] is False
        assert client.get("/cookie-preferences").json()["banner_visible"] is True

    def test_secure_preference_cookie(self, sample_config):
        config = sample_config.model_copy(update={"user_preference_cookie_secure": True})
        client = TestClient(create_app(config), base_url="https://www.example.com")

        response = client.post("/cookie-preferences/accept-all")

        assert "Secure" in _set_cookies(response, PREFS)[0]


class TestRequestCookieJar:
    """Test the request-scoped cookie store."""

    def test_reads_reflect_writes(self):
        jar = RequestCookieJar({"a": "1"}, "www.example.com")
        jar.set(PREFS, '{"analytics":"on"}', expiry_days=1)
        jar.delete("a")

        assert jar.get(PREFS) == '{"analytics":"on"}'
        assert jar.get("a") is None
        assert [c.name for c in jar.cookies()] == [PREFS]
        assert len(jar.pending) == 5

    def test_decodes_percent_encoded_values(self):
        jar = RequestCookieJar({PREFS: quote('{"analytics":"on"}', safe='')})

        assert jar.get(PREFS) == '{"analytics":"on"}'
