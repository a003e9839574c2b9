"""
Authenticated HTTP Client Module
================================

Thin wrapper around a :class:`requests.Session` that sends bearer-token
authenticated GET and DELETE requests to the Cloud Foundry API.

The client reports what the server said (status code and, for GET, a
lazily read body) and leaves the interpretation of status codes to the
caller. Only failures to obtain a response at all are raised here.

Classes
-------
ResponseBody
    Lazily read body of a streamed GET response.
AuthenticatedClient
    Sends authenticated requests over a shared session.

Functions
---------
build_session
    Create the session shared by login and API calls.

Example
-------
>>> session = build_session(skip_ssl_validation=False)
>>> client = AuthenticatedClient(session)
>>> body, status = client.do_authenticated_get(
...     "https://api.example.com/v2/services", token
... )
>>> if status == 200 and body is not None:
...     payload = body.read()

Notes
-----
The session is used concurrently by several pipeline threads. Each call
is a self-contained request/response, so no extra locking is applied.
No timeout is configured: a stalled call blocks its caller.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import requests
import urllib3

from instance_reaper.core.exceptions import TransportError

# Module logger
logger = logging.getLogger(__name__)

ACCEPT_JSON = "application/json"


def build_session(skip_ssl_validation: bool = False) -> requests.Session:
    """
    Create the HTTP session shared by login and API calls.

    Parameters
    ----------
    skip_ssl_validation : bool, default=False
        Disable TLS certificate verification. Not recommended.

    Returns
    -------
    requests.Session
        Session with the requested verification mode.
    """
    session = requests.Session()
    session.verify = not skip_ssl_validation
    if skip_ssl_validation:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        logger.warning("TLS certificate verification is disabled")
    return session


class ResponseBody:
    """
    Body of a streamed response, read on demand.

    Reading consumes the body and releases the connection. A failure
    while reading is raised as :class:`OSError` so that callers can tell
    an unreadable body apart from a failed request.
    """

    def __init__(self, response: requests.Response) -> None:
        self._response = response

    def read(self) -> bytes:
        """Read the whole body."""
        try:
            return self._response.content
        except requests.RequestException as e:
            raise OSError(str(e)) from e
        finally:
            self._response.close()

    def close(self) -> None:
        """Release the connection without reading the body."""
        self._response.close()


class AuthenticatedClient:
    """
    Sends bearer-token authenticated requests.

    Parameters
    ----------
    session : requests.Session
        Session used for every request.

    Examples
    --------
    >>> client = AuthenticatedClient(build_session())
    >>> status = client.do_authenticated_delete(url, token)
    """

    def __init__(self, session: requests.Session) -> None:
        self.session = session

    @staticmethod
    def _headers(access_token: str) -> dict:
        return {
            "Accept": ACCEPT_JSON,
            "Authorization": f"bearer {access_token}",
        }

    def do_authenticated_get(
        self,
        url: str,
        access_token: str,
    ) -> Tuple[Optional[ResponseBody], int]:
        """
        Send an authenticated GET request.

        Parameters
        ----------
        url : str
            Absolute URL to fetch.
        access_token : str
            OAuth access token sent as a bearer token.

        Returns
        -------
        tuple
            (body or None, HTTP status code). The body is ``None`` when
            the response carries no payload stream.

        Raises
        ------
        TransportError
            If the request cannot be built or sent.
        """
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(
                url, headers=self._headers(access_token), stream=True
            )
        except requests.RequestException as e:
            raise TransportError(
                f"Authenticated get of '{url}' failed: {e}"
            ) from e

        body = ResponseBody(response) if response.raw is not None else None
        return body, response.status_code

    def do_authenticated_delete(self, url: str, access_token: str) -> int:
        """
        Send an authenticated DELETE request.

        Parameters
        ----------
        url : str
            Absolute URL of the resource to delete.
        access_token : str
            OAuth access token sent as a bearer token.

        Returns
        -------
        int
            HTTP status code of the response.

        Raises
        ------
        TransportError
            If the request cannot be built or sent.
        """
        logger.debug(f"DELETE {url}")
        try:
            response = self.session.delete(url, headers=self._headers(access_token))
        except requests.RequestException as e:
            raise TransportError(
                f"Authenticated delete of '{url}' failed: {e}"
            ) from e

        response.close()
        return response.status_code

    def __repr__(self) -> str:
        return f"AuthenticatedClient(verify={self.session.verify!r})"
