"""Driver for ARRIS SURFboard cable modems.

Older firmware serves the status pages without authentication. Newer
firmware (SB8200 HTTPS variant and later) uses URL-token authentication:

1. Login: GET /cmconnectionstatus.html?login_<base64(user:pass)>
   - With Authorization: Basic <base64(user:pass)>
   - With X-Requested-With: XMLHttpRequest
2. The RESPONSE BODY is the session token (a "credential" cookie is set too)
3. Data pages: GET <page>?ct_<session token>

Important: the ct_ token comes from the login response body, not the cookie
value. The cookie is only used as a fallback when the body is empty.

An expired session is answered with HTTP 401 or with the login page itself.
"""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup

from ..core.exceptions import AuthFailedError, AuthRejectedError
from ..core.types import DeviceFamily, PayloadKind, RawPayload
from .base import ModemDriver, Session, get_cookie_safe

if TYPE_CHECKING:
    import requests

_LOGGER = logging.getLogger(__name__)

STATUS_PATH = "/cmconnectionstatus.html"
SOFTWARE_PATH = "/cmswinfo.html"
STATUS_PATHS = (STATUS_PATH, SOFTWARE_PATH)

LOGIN_PREFIX = "login_"
TOKEN_PREFIX = "ct_"
SESSION_COOKIE = "credential"
SUCCESS_INDICATOR = "Downstream Bonded Channels"


def is_login_page(html: str) -> bool:
    """Return True if ``html`` is a login form rather than a status page."""
    if SUCCESS_INDICATOR in html:
        return False
    soup = BeautifulSoup(html, "html.parser")
    return soup.find("input", attrs={"type": "password"}) is not None


class SurfboardDriver(ModemDriver):
    """URL-token session auth and HTML status fetch for SURFboard modems."""

    family = DeviceFamily.ARRIS_SURFBOARD
    payload_kind = PayloadKind.HTML
    fetch_requests = len(STATUS_PATHS)

    def login(
        self,
        http: requests.Session,
        base_url: str,
        username: str | None,
        password: str | None,
        timeout: float,
        now: float,
    ) -> Session:
        """Authenticate using the URL token flow, or start an anonymous session."""
        if not username or not password:
            _LOGGER.debug("SURFboard: no credentials configured, using anonymous access")
            return Session(acquired_at=now)

        auth_token = base64.b64encode(f"{username}:{password}".encode()).decode()
        url = f"{base_url}{STATUS_PATH}?{LOGIN_PREFIX}{auth_token}"

        # The modem rejects a login while an old session cookie is still sent
        if SESSION_COOKIE in http.cookies:
            del http.cookies[SESSION_COOKIE]

        headers = {
            "Authorization": f"Basic {auth_token}",
            "X-Requested-With": "XMLHttpRequest",
        }
        _LOGGER.debug("SURFboard: logging in to %s", base_url)
        response = http.get(url, headers=headers, timeout=timeout)
        self.check_login_response(response, f"{base_url}{STATUS_PATH}")

        body = response.text.strip() if response.text else ""
        session_token = body if body and "<" not in body else get_cookie_safe(http, SESSION_COOKIE)
        if not session_token:
            raise AuthFailedError("Login response carried no session token")

        _LOGGER.info("SURFboard: logged in as %s", username)
        return Session(acquired_at=now, username=username, token=session_token)

    def fetch(self, http: requests.Session, base_url: str, session: Session, timeout: float) -> RawPayload:
        """Fetch the connection status and software information pages."""
        suffix = f"?{TOKEN_PREFIX}{session.token}" if session.token else ""

        resources: dict[str, bytes] = {}
        for path in STATUS_PATHS:
            url = f"{base_url}{path}"
            response = http.get(f"{url}{suffix}", timeout=timeout)
            self.check_fetch_response(response, url)
            if is_login_page(response.text):
                raise AuthRejectedError("Modem returned the login page")
            resources[path] = response.content

        return RawPayload(self.payload_kind, resources)
