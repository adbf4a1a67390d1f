"""Tests for the REST client and the credential store."""

import os
import stat

import pytest
import requests

from growthtrack.services.api import ApiClient, ApiError, SessionExpired
from growthtrack.services.storage import TokenStore

from helpers import FakeHttp, FakeResponse


@pytest.fixture
def tokens(tmp_path):
    return TokenStore(tmp_path / "credentials.json")


def make_client(tokens, *responses, error=None):
    http = FakeHttp(*responses, error=error)
    return ApiClient("https://api.example.test/", tokens=tokens, http=http), http


class TestRequest:

    def test_json_body_and_url(self, tokens):
        client, http = make_client(tokens, FakeResponse(200, {"id": 1}))
        assert client.request("/api/workout", method="POST", body={"a": 1}) == {"id": 1}
        sent = http.requests[0]
        assert sent["method"] == "POST"
        assert sent["url"] == "https://api.example.test/api/workout"
        assert sent["json"] == {"a": 1}
        assert sent["headers"]["Content-Type"] == "application/json"

    def test_bearer_token_attached(self, tokens):
        tokens.set_token("abc")
        client, http = make_client(tokens)
        client.request("/api/auth/me")
        assert http.requests[0]["headers"]["Authorization"] == "Bearer abc"

    def test_no_token_when_auth_not_required(self, tokens):
        tokens.set_token("abc")
        client, http = make_client(tokens)
        client.request("/api/auth/login", requires_auth=False)
        assert "Authorization" not in http.requests[0]["headers"]

    def test_network_error(self, tokens):
        client, _ = make_client(tokens, error=requests.ConnectionError("refused"))
        with pytest.raises(ApiError, match="Network request failed"):
            client.request("/api/sleep")

    def test_401_clears_credentials(self, tokens):
        tokens.set_token("abc")
        client, _ = make_client(tokens, FakeResponse(401, {"error": "nope"}))
        with pytest.raises(SessionExpired):
            client.request("/api/profile")
        assert tokens.get_token() is None

    def test_error_message_from_body(self, tokens):
        client, _ = make_client(tokens, FakeResponse(422, {"message": "bad duration"}))
        with pytest.raises(ApiError, match="bad duration") as info:
            client.request("/api/workout", method="POST", body={})
        assert info.value.status_code == 422

    def test_error_without_json_body(self, tokens):
        client, _ = make_client(tokens, FakeResponse(500, text="<html>"))
        with pytest.raises(ApiError, match="Request failed"):
            client.request("/api/workout")

    def test_empty_success_body(self, tokens):
        client, _ = make_client(tokens, FakeResponse(204))
        assert client.request("/api/workout", method="POST", body={}) is None

    def test_non_json_success_body(self, tokens):
        client, _ = make_client(tokens, FakeResponse(200, text="<html>captive portal</html>"))
        with pytest.raises(ApiError, match="Invalid response") as info:
            client.request("/api/workout", method="POST", body={})
        assert info.value.status_code == 200

    @pytest.mark.parametrize("method, endpoint", [
        ("log_workout", "/api/workout"),
        ("log_mental_health", "/api/mental-health"),
        ("log_pt_adherence", "/api/pt-adherence"),
    ])
    def test_log_helpers(self, tokens, method, endpoint):
        client, http = make_client(tokens)
        getattr(client, method)({"completed": True})
        assert http.requests[0]["method"] == "POST"
        assert http.requests[0]["url"].endswith(endpoint)
        assert http.requests[0]["json"] == {"completed": True}


class TestAuth:

    def test_login_stores_token_and_user(self, tokens):
        client, _ = make_client(
            tokens, FakeResponse(200, {"token": "t0k", "user": {"id": 7}})
        )
        client.login("a@b.c", "pw")
        assert tokens.get_token() == "t0k"
        assert tokens.get_user() == {"id": 7}

    def test_logout_clears(self, tokens):
        tokens.set_token("t0k")
        client, _ = make_client(tokens)
        client.logout()
        assert tokens.get_token() is None


class TestTokenStore:

    def test_round_trip_and_remove(self, tokens):
        tokens.set_token("x")
        tokens.set_user({"name": "Sam"})
        assert TokenStore(tokens.path).get_token() == "x"
        tokens.remove_token()
        assert tokens.get_token() is None
        assert tokens.get_user() == {"name": "Sam"}

    def test_corrupt_file_reads_empty(self, tokens):
        tokens.path.write_text("{not json", encoding="utf-8")
        assert tokens.get_token() is None

    def test_clear_without_file(self, tokens):
        tokens.clear()
        assert not tokens.path.exists()

    def test_unreadable_file_reads_empty(self, tokens):
        tokens.path.mkdir()
        assert tokens.get_token() is None

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_file_is_owner_only(self, tokens):
        tokens.set_token("x")
        assert stat.S_IMODE(tokens.path.stat().st_mode) == 0o600
