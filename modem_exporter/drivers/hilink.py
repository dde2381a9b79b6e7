"""Driver for Huawei HiLink modems.

HiLink devices expose an XML API under /api/. Every request must carry the
session cookie and a CSRF token, both obtained from /api/webserver/SesTokInfo:

    <response>
        <SesInfo>SessionID=...</SesInfo>
        <TokInfo>...</TokInfo>
    </response>

Devices with the admin password enabled also require POST /api/user/login.
The password is sent hashed (password_type 4):

    base64(sha256_hex(username + base64(sha256_hex(password)) + token))

The login response sets a new SessionID cookie and returns a fresh token in
the __RequestVerificationTokenone header.

API errors come back as HTTP 200 with an <error> document:

    <error><code>125002</code><message></message></error>
"""

from __future__ import annotations

import base64
import hashlib
import logging
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element, SubElement, tostring

from defusedxml import ElementTree

from ..core.exceptions import AuthFailedError, AuthRejectedError, UpstreamError
from ..core.types import DeviceFamily, PayloadKind, RawPayload
from .base import ModemDriver, Session

if TYPE_CHECKING:
    import requests

_LOGGER = logging.getLogger(__name__)

SESSION_PATH = "/api/webserver/SesTokInfo"
LOGIN_PATH = "/api/user/login"
TRAFFIC_PATH = "/api/monitoring/traffic-statistics"
SIGNAL_PATH = "/api/device/signal"
INFORMATION_PATH = "/api/device/information"
STATUS_PATHS = (TRAFFIC_PATH, SIGNAL_PATH, INFORMATION_PATH)

TOKEN_HEADER = "__RequestVerificationToken"
LOGIN_TOKEN_HEADERS = ("__RequestVerificationTokenone", "__RequestVerificationToken")
SESSION_COOKIE = "SessionID"

# Session or CSRF token no longer valid, or login required
SESSION_ERROR_CODES = frozenset({"125001", "125002", "125003", "100003"})
# Username/password wrong, account locked out
LOGIN_ERROR_CODES = frozenset({"108001", "108002", "108006", "108007"})


def hash_password(username: str, password: str, token: str) -> str:
    """Hash credentials the way the HiLink web UI does for password_type 4."""
    password_hash = base64.b64encode(hashlib.sha256(password.encode()).hexdigest().encode()).decode()
    digest = hashlib.sha256(f"{username}{password_hash}{token}".encode()).hexdigest()
    return base64.b64encode(digest.encode()).decode()


def api_error_code(body: bytes) -> str | None:
    """Return the API error code if ``body`` is an <error> document."""
    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError:
        return None
    if root.tag != "error":
        return None
    return (root.findtext("code") or "").strip() or "unknown"


class HiLinkDriver(ModemDriver):
    """Session/token authentication and XML status fetch for HiLink modems."""

    family = DeviceFamily.HUAWEI_HILINK
    payload_kind = PayloadKind.XML
    login_requests = 2
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
        """Obtain a session cookie and token, then log in if credentials are set."""
        url = f"{base_url}{SESSION_PATH}"
        response = http.get(url, timeout=timeout)
        self.check_login_response(response, url)

        try:
            root = ElementTree.fromstring(response.content)
        except ElementTree.ParseError as err:
            raise UpstreamError("Session response is not XML", response.status_code, url=url) from err

        if root.tag == "error":
            code = (root.findtext("code") or "").strip()
            raise UpstreamError("Session request returned an API error", response.status_code, code, url)

        cookie = (root.findtext("SesInfo") or "").strip()
        token = (root.findtext("TokInfo") or "").strip()
        if not cookie or not token:
            raise UpstreamError("Session response missing SesInfo/TokInfo", response.status_code, url=url)

        _LOGGER.debug("HiLink: obtained session token")

        if username and password:
            cookie, token = self._user_login(http, base_url, username, password, cookie, token, timeout)

        return Session(acquired_at=now, username=username, token=token, cookie=cookie)

    def _user_login(
        self,
        http: requests.Session,
        base_url: str,
        username: str,
        password: str,
        cookie: str,
        token: str,
        timeout: float,
    ) -> tuple[str, str]:
        """POST /api/user/login and return the refreshed (cookie, token)."""
        request = Element("request")
        SubElement(request, "Username").text = username
        SubElement(request, "Password").text = hash_password(username, password, token)
        SubElement(request, "password_type").text = "4"
        body = b'<?xml version="1.0" encoding="UTF-8"?>' + tostring(request)

        url = f"{base_url}{LOGIN_PATH}"
        headers = {
            "Cookie": cookie,
            TOKEN_HEADER: token,
            "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
        }
        _LOGGER.debug("HiLink: logging in as %s", username)
        response = http.post(url, data=body, headers=headers, timeout=timeout)
        self.check_login_response(response, url)

        code = api_error_code(response.content)
        if code in LOGIN_ERROR_CODES:
            raise AuthFailedError(f"Login rejected by modem (code {code})")
        if code is not None:
            raise UpstreamError("Login returned an API error", response.status_code, code, url)

        new_session_id = response.cookies.get(SESSION_COOKIE)
        if new_session_id:
            cookie = f"{SESSION_COOKIE}={new_session_id}"

        for header in LOGIN_TOKEN_HEADERS:
            value = response.headers.get(header)
            if value:
                # Some firmware returns several tokens separated by '#'
                token = value.split("#")[0]
                break

        _LOGGER.info("HiLink: logged in as %s", username)
        return cookie, token

    def fetch(self, http: requests.Session, base_url: str, session: Session, timeout: float) -> RawPayload:
        """Fetch traffic statistics, signal and device information."""
        headers = {}
        if session.cookie:
            headers["Cookie"] = session.cookie
        if session.token:
            headers[TOKEN_HEADER] = session.token

        resources: dict[str, bytes] = {}
        for path in STATUS_PATHS:
            url = f"{base_url}{path}"
            response = http.get(url, headers=headers, timeout=timeout)
            self.check_fetch_response(response, url)

            code = api_error_code(response.content)
            if code in SESSION_ERROR_CODES:
                raise AuthRejectedError(f"Session rejected by modem (code {code})")
            if code is not None:
                raise UpstreamError("Status request returned an API error", response.status_code, code, url)

            resources[path] = response.content

        return RawPayload(self.payload_kind, resources)
