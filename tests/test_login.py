"""
Tests for the OAuth login handshake.
"""

from unittest.mock import MagicMock

import pytest
import requests

from instance_reaper.cloudfoundry.login import get_oauth_token
from instance_reaper.core.exceptions import AuthenticationError

API_URL = "https://api.example.com"
AUTH_URL = "https://login.example.com"
UAA_URL = "https://uaa.example.com"


def json_response(document, status_code=200, reason="OK"):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.reason = reason
    response.json.return_value = document
    response.__enter__.return_value = response
    return response


@pytest.fixture
def session():
    """A session answering a successful handshake."""
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = [
        json_response({"authorization_endpoint": AUTH_URL}),
        json_response({"links": {"login": UAA_URL}}),
        json_response({"access_token": "tok", "token_type": "bearer"}),
    ]
    return session


class TestGetOAuthToken:
    """Tests for get_oauth_token function."""

    def test_successful_handshake(self, session):
        """Test that the three-step handshake yields the access token."""
        token = get_oauth_token(session, API_URL + "/", "admin", "secret")

        assert token == "tok"
        calls = session.request.call_args_list
        assert [c.args for c in calls] == [
            ("GET", f"{API_URL}/v2/info"),
            ("GET", f"{AUTH_URL}/login"),
            ("POST", f"{UAA_URL}/oauth/token"),
        ]

    def test_password_grant(self, session):
        """Test that the token request uses the password grant of the cf client."""
        get_oauth_token(session, API_URL, "admin", "secret")

        token_call = session.request.call_args_list[2]
        assert token_call.kwargs["data"] == {
            "grant_type": "password",
            "username": "admin",
            "password": "secret",
            "scope": "",
        }
        assert token_call.kwargs["auth"] == ("cf", "")

    def test_info_failure(self, session):
        """Test that a failing first step names /v2/info."""
        session.request.side_effect = [
            json_response({}, status_code=503, reason="Service Unavailable")
        ]

        with pytest.raises(AuthenticationError) as exc_info:
            get_oauth_token(session, API_URL, "admin", "secret")

        assert str(exc_info.value).startswith("/v2/info failure")
        assert "503" in str(exc_info.value)

    def test_missing_login_link(self, session):
        """Test that a login response without links.login fails."""
        session.request.side_effect = [
            json_response({"authorization_endpoint": AUTH_URL}),
            json_response({"links": {}}),
        ]

        with pytest.raises(AuthenticationError, match="^/login failure"):
            get_oauth_token(session, API_URL, "admin", "secret")

    def test_rejected_credentials(self, session):
        """Test that rejected credentials fail the token step."""
        session.request.side_effect = [
            json_response({"authorization_endpoint": AUTH_URL}),
            json_response({"links": {"login": UAA_URL}}),
            json_response({"error": "unauthorized"}, status_code=401, reason="Unauthorized"),
        ]

        with pytest.raises(AuthenticationError, match="^/oauth/token failure"):
            get_oauth_token(session, API_URL, "admin", "wrong")

    def test_connection_failure(self, session):
        """Test that a transport failure is an authentication failure."""
        session.request.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(AuthenticationError, match="connection refused"):
            get_oauth_token(session, API_URL, "admin", "secret")

    def test_invalid_json(self, session):
        """Test that a body that is not JSON fails."""
        response = json_response(None)
        response.json.side_effect = ValueError("Expecting value")
        session.request.side_effect = [response]

        with pytest.raises(AuthenticationError, match="Expecting value"):
            get_oauth_token(session, API_URL, "admin", "secret")
