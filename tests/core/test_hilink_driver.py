"""Tests for the Huawei HiLink driver.

Auth flow:
1. GET /api/webserver/SesTokInfo -> SesInfo (cookie) + TokInfo (CSRF token)
2. With credentials: POST /api/user/login with the hashed password; the
   response sets a new SessionID cookie and a fresh token header
3. Status: GET each document with Cookie + __RequestVerificationToken
"""

from __future__ import annotations

import pytest
import requests
from defusedxml import ElementTree

from modem_exporter.core.exceptions import AuthFailedError, AuthRejectedError, UpstreamError
from modem_exporter.core.types import DeviceFamily, PayloadKind
from modem_exporter.drivers.base import Session
from modem_exporter.drivers.hilink import (
    INFORMATION_PATH,
    LOGIN_PATH,
    SESSION_PATH,
    SIGNAL_PATH,
    STATUS_PATHS,
    TOKEN_HEADER,
    TRAFFIC_PATH,
    HiLinkDriver,
    api_error_code,
    hash_password,
)
from tests.fixtures import load_fixture

BASE_URL = "http://192.168.8.1"
FAMILY = DeviceFamily.HUAWEI_HILINK

SESSION_COOKIE = "SessionID=Wv0Ijx3rE9bq4XK1mNpGfT8cYzLd2uAhSs7oBnVkRe5iQwCj"
SESSION_TOKEN = "Qm7hYZc1dVnX8kLb3PrJt0sWfGuA9eTo"


@pytest.fixture
def driver():
    """HiLink driver instance."""
    return HiLinkDriver()


@pytest.fixture
def http():
    """Plain requests session (patched by requests_mock)."""
    with requests.Session() as session:
        yield session


@pytest.fixture
def mock_status_pages(requests_mock):
    """Register the three status documents."""
    for path, fixture in (
        (TRAFFIC_PATH, "traffic-statistics.xml"),
        (SIGNAL_PATH, "signal.xml"),
        (INFORMATION_PATH, "information.xml"),
    ):
        requests_mock.get(f"{BASE_URL}{path}", text=load_fixture(FAMILY, fixture))
    return requests_mock


class TestHashPassword:
    """Tests for the password_type 4 hash."""

    def test_known_vector(self):
        """Test against a digest computed independently."""
        assert hash_password("admin", "admin", "abc") == (
            "YTgyNGJmZWU2ODAyYmQ4ZmE2Nzc4ZWYxNzJhOTQ3YzIyZWRmYzQwZTJlNDUyODBhYWQxM2M3MDdkMmM3ODMzZQ=="
        )

    def test_token_changes_hash(self):
        """Test the hash is bound to the session token."""
        assert hash_password("admin", "admin", "abc") != hash_password("admin", "admin", "abd")


class TestApiErrorCode:
    """Tests for error envelope detection."""

    def test_error_document(self):
        """Test the code is extracted."""
        assert api_error_code(b"<error><code>125002</code><message></message></error>") == "125002"

    def test_response_document(self):
        """Test a normal response is not an error."""
        assert api_error_code(b"<response><x>1</x></response>") is None

    def test_not_xml(self):
        """Test non-XML bodies are left to the parser."""
        assert api_error_code(b"<html><body>") is None


class TestHiLinkLogin:
    """Tests for HiLinkDriver.login."""

    def test_anonymous_session(self, driver, http, requests_mock):
        """Test SesTokInfo alone is enough without credentials."""
        requests_mock.get(f"{BASE_URL}{SESSION_PATH}", text=load_fixture(FAMILY, "session.xml"))

        session = driver.login(http, BASE_URL, None, None, 10.0, now=5.0)

        assert session.cookie == SESSION_COOKIE
        assert session.token == SESSION_TOKEN
        assert session.acquired_at == 5.0
        assert not any(req.method == "POST" for req in requests_mock.request_history)

    def test_user_login(self, driver, http, requests_mock):
        """Test the login request and the refreshed cookie and token."""
        requests_mock.get(f"{BASE_URL}{SESSION_PATH}", text=load_fixture(FAMILY, "session.xml"))
        requests_mock.post(
            f"{BASE_URL}{LOGIN_PATH}",
            text=load_fixture(FAMILY, "login_ok.xml"),
            headers={"__RequestVerificationTokenone": "freshtoken#othertoken"},
            cookies={"SessionID": "newsession"},
        )

        session = driver.login(http, BASE_URL, "admin", "secret", 10.0, now=5.0)

        login_request = requests_mock.last_request
        assert login_request.headers["Cookie"] == SESSION_COOKIE
        assert login_request.headers[TOKEN_HEADER] == SESSION_TOKEN
        body = ElementTree.fromstring(login_request.body)
        assert body.findtext("Username") == "admin"
        assert body.findtext("password_type") == "4"
        assert body.findtext("Password") == hash_password("admin", "secret", SESSION_TOKEN)

        assert session.cookie == "SessionID=newsession"
        assert session.token == "freshtoken"
        assert session.username == "admin"

    def test_wrong_password(self, driver, http, requests_mock):
        """Test a login error code surfaces as AuthFailedError."""
        requests_mock.get(f"{BASE_URL}{SESSION_PATH}", text=load_fixture(FAMILY, "session.xml"))
        requests_mock.post(f"{BASE_URL}{LOGIN_PATH}", text=load_fixture(FAMILY, "error_login.xml"))

        with pytest.raises(AuthFailedError, match="108006"):
            driver.login(http, BASE_URL, "admin", "wrong", 10.0, now=0.0)

    def test_session_endpoint_http_error(self, driver, http, requests_mock):
        """Test a 5xx from SesTokInfo."""
        requests_mock.get(f"{BASE_URL}{SESSION_PATH}", status_code=503)

        with pytest.raises(UpstreamError) as exc_info:
            driver.login(http, BASE_URL, None, None, 10.0, now=0.0)
        assert exc_info.value.status_code == 503

    def test_session_endpoint_incomplete(self, driver, http, requests_mock):
        """Test a session document without a token."""
        requests_mock.get(f"{BASE_URL}{SESSION_PATH}", text="<response><SesInfo>SessionID=x</SesInfo></response>")

        with pytest.raises(UpstreamError, match="TokInfo"):
            driver.login(http, BASE_URL, None, None, 10.0, now=0.0)

    def test_session_endpoint_api_error(self, driver, http, requests_mock):
        """Test an error envelope from SesTokInfo keeps the API code."""
        requests_mock.get(f"{BASE_URL}{SESSION_PATH}", text="<error><code>100002</code></error>")

        with pytest.raises(UpstreamError) as exc_info:
            driver.login(http, BASE_URL, None, None, 10.0, now=0.0)
        assert exc_info.value.api_code == "100002"


class TestHiLinkFetch:
    """Tests for HiLinkDriver.fetch."""

    def test_fetches_all_documents(self, driver, http, mock_status_pages):
        """Test every status document is fetched with session headers."""
        session = Session(acquired_at=0.0, token=SESSION_TOKEN, cookie=SESSION_COOKIE)

        payload = driver.fetch(http, BASE_URL, session, 10.0)

        assert payload.kind == PayloadKind.XML
        assert set(payload.resources) == set(STATUS_PATHS)
        for request in mock_status_pages.request_history:
            assert request.headers["Cookie"] == SESSION_COOKIE
            assert request.headers[TOKEN_HEADER] == SESSION_TOKEN

    def test_session_error_code(self, driver, http, requests_mock):
        """Test token/session error codes mean the session was rejected."""
        requests_mock.get(f"{BASE_URL}{TRAFFIC_PATH}", text=load_fixture(FAMILY, "error_session.xml"))

        with pytest.raises(AuthRejectedError, match="125002"):
            driver.fetch(http, BASE_URL, Session(acquired_at=0.0), 10.0)

    def test_other_error_code(self, driver, http, requests_mock):
        """Test non-auth API errors carry the code."""
        requests_mock.get(f"{BASE_URL}{TRAFFIC_PATH}", text="<error><code>100002</code></error>")

        with pytest.raises(UpstreamError) as exc_info:
            driver.fetch(http, BASE_URL, Session(acquired_at=0.0), 10.0)
        assert exc_info.value.api_code == "100002"
        assert exc_info.value.status_code == 200

    def test_http_500(self, driver, http, requests_mock):
        """Test HTTP errors carry the status code."""
        requests_mock.get(f"{BASE_URL}{TRAFFIC_PATH}", status_code=500)

        with pytest.raises(UpstreamError) as exc_info:
            driver.fetch(http, BASE_URL, Session(acquired_at=0.0), 10.0)
        assert exc_info.value.status_code == 500
        assert exc_info.value.url == f"{BASE_URL}{TRAFFIC_PATH}"

    def test_http_401(self, driver, http, requests_mock):
        """Test HTTP 401 means the session was rejected."""
        requests_mock.get(f"{BASE_URL}{TRAFFIC_PATH}", status_code=401)

        with pytest.raises(AuthRejectedError):
            driver.fetch(http, BASE_URL, Session(acquired_at=0.0), 10.0)
