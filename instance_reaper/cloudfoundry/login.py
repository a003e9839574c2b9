"""
OAuth Login
===========

Obtains an access token from the UAA server advertised by a Cloud
Foundry API, using the password grant of the ``cf`` client.

The handshake is three sequential requests:

1. ``GET <api>/v2/info`` for the ``authorization_endpoint``.
2. ``GET <authorization_endpoint>/login`` for ``links.login``.
3. ``POST <login>/oauth/token`` with the user's credentials.

Example
-------
>>> session = build_session()
>>> token = get_oauth_token(session, "https://api.example.com", "admin", "secret")
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from instance_reaper.core.exceptions import AuthenticationError

# Module logger
logger = logging.getLogger(__name__)

# The cf CLI's public OAuth client has an empty secret.
CF_CLIENT_ID = "cf"
CF_CLIENT_SECRET = ""


def _request_json(
    session: requests.Session,
    method: str,
    url: str,
    data: Optional[Dict[str, str]] = None,
    auth: Optional[tuple] = None,
) -> Dict[str, Any]:
    response = session.request(
        method,
        url,
        headers={"Accept": "application/json"},
        data=data,
        auth=auth,
    )
    with response:
        if response.status_code != 200:
            raise ValueError(
                f"request failed: {response.status_code} {response.reason}"
            )
        document = response.json()
    if not isinstance(document, dict):
        raise ValueError("response is not a JSON object")
    return document


def _step(
    description: str,
    session: requests.Session,
    method: str,
    url: str,
    key_path: tuple,
    **kwargs: Any,
) -> str:
    """Perform one request of the handshake and extract a string field."""
    try:
        value: Any = _request_json(session, method, url, **kwargs)
        for key in key_path:
            value = value.get(key) if isinstance(value, dict) else None
        if not isinstance(value, str) or not value:
            raise ValueError(f"response has no '{'.'.join(key_path)}'")
    except (requests.RequestException, ValueError) as e:
        raise AuthenticationError(f"{description} failure: {e}") from e
    return value


def get_oauth_token(
    session: requests.Session,
    api_url: str,
    username: str,
    password: str,
) -> str:
    """
    Obtain an OAuth access token for ``username``.

    Parameters
    ----------
    session : requests.Session
        Session used for the handshake.
    api_url : str
        Base URL of the Cloud Foundry API.
    username : str
        User to log in as.
    password : str
        The user's password.

    Returns
    -------
    str
        The access token.

    Raises
    ------
    AuthenticationError
        If any step of the handshake fails; the message names the step.
    """
    api_url = api_url.rstrip("/")

    authorization_endpoint = _step(
        "/v2/info", session, "GET", f"{api_url}/v2/info",
        ("authorization_endpoint",),
    )
    logger.debug(f"Authorization endpoint: {authorization_endpoint}")

    login_endpoint = _step(
        "/login", session, "GET", f"{authorization_endpoint}/login",
        ("links", "login"),
    )
    logger.debug(f"Login endpoint: {login_endpoint}")

    access_token = _step(
        "/oauth/token", session, "POST", f"{login_endpoint}/oauth/token",
        ("access_token",),
        data={
            "grant_type": "password",
            "username": username,
            "password": password,
            "scope": "",
        },
        auth=(CF_CLIENT_ID, CF_CLIENT_SECRET),
    )
    logger.info(f"Authenticated as {username}")
    return access_token
