"""Base classes for device drivers.

A driver knows how one device family authenticates and which status
documents it serves. Drivers are stateless: the Session they return is owned
and stored by ModemClient, and handed back on every fetch.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..core.exceptions import AuthFailedError, AuthRejectedError, UpstreamError

if TYPE_CHECKING:
    import requests

    from ..core.types import DeviceFamily, PayloadKind, RawPayload

_LOGGER = logging.getLogger(__name__)

AUTH_STATUS_CODES = (401, 403)


def get_cookie_safe(http: requests.Session, name: str) -> str | None:
    """Safely get a cookie value by name, handling duplicate cookies.

    Some modems set the same cookie name with different paths (e.g. "/" and
    "/cmconnectionstatus.html"), and may set an empty value on the landing
    page before the real one on login. Non-empty values win, and a root path
    cookie is preferred over a page-specific one.

    Args:
        http: requests.Session with cookies
        name: Cookie name to look up

    Returns:
        Cookie value if found, None otherwise
    """
    matches = [(c.value, c.path) for c in http.cookies if c.name == name and c.value]
    if not matches:
        return None
    for value, path in matches:
        if path == "/":
            return value
    if len(matches) > 1:
        _LOGGER.debug("Multiple %s cookies with non-root paths %s, using first", name, [m[1] for m in matches])
    return matches[0][0]


@dataclass(frozen=True)
class Session:
    """Authenticated state for one device.

    Attributes:
        acquired_at: Monotonic clock reading when the session was obtained
        username: Username the session was obtained with (None if anonymous)
        token: Device token (CSRF token, URL token or bearer token)
        cookie: Raw Cookie header value, for devices that hand it out in a body
        expires_at: Monotonic deadline declared by the device, if any
    """

    acquired_at: float
    username: str | None = None
    token: str | None = None
    cookie: str | None = None
    expires_at: float | None = None

    def is_expired(self, now: float, max_age: float) -> bool:
        """Return True if the session is known to be expired at ``now``."""
        if self.expires_at is not None and now >= self.expires_at:
            return True
        return now - self.acquired_at >= max_age

    def __repr__(self) -> str:
        # Keep tokens out of logs and tracebacks
        return f"Session(acquired_at={self.acquired_at!r}, username={self.username!r})"


class ModemDriver(ABC):
    """Abstract base class for device family drivers.

    All drivers implement login() and fetch(). Network exceptions from
    requests propagate unchanged so ModemClient can apply its retry policy.
    """

    family: DeviceFamily
    payload_kind: PayloadKind
    # Most HTTP requests one login() and one fetch() make
    login_requests: int = 1
    fetch_requests: int = 1

    @abstractmethod
    def login(
        self,
        http: requests.Session,
        base_url: str,
        username: str | None,
        password: str | None,
        timeout: float,
        now: float,
    ) -> Session:
        """Authenticate with the modem.

        Args:
            http: requests.Session used for all modem traffic
            base_url: Modem base URL (e.g., "http://192.168.8.1")
            username: Username for authentication, None for anonymous access
            password: Password for authentication
            timeout: Per-request timeout in seconds
            now: Monotonic clock reading, recorded as the acquisition time

        Returns:
            A new Session.

        Raises:
            AuthFailedError: Credentials were rejected
            UpstreamError: The modem answered with an unexpected status
        """
        raise NotImplementedError

    @abstractmethod
    def fetch(self, http: requests.Session, base_url: str, session: Session, timeout: float) -> RawPayload:
        """Fetch every status document for one poll.

        Raises:
            AuthRejectedError: The modem no longer accepts the session
            UpstreamError: The modem answered with an HTTP or API error
        """
        raise NotImplementedError

    @staticmethod
    def check_login_response(response: requests.Response, url: str) -> None:
        """Map a login response status onto the client error taxonomy."""
        if response.status_code in AUTH_STATUS_CODES:
            raise AuthFailedError(f"Login rejected (HTTP {response.status_code})")
        if response.status_code >= 400:
            raise UpstreamError("Login request failed", response.status_code, url=url)

    @staticmethod
    def check_fetch_response(response: requests.Response, url: str) -> None:
        """Map a status fetch response onto the client error taxonomy."""
        if response.status_code in AUTH_STATUS_CODES:
            raise AuthRejectedError(f"Session rejected (HTTP {response.status_code})")
        if response.status_code >= 400:
            raise UpstreamError("Status request failed", response.status_code, url=url)
