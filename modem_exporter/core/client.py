"""HTTP client for the modem's management interface.

ModemClient owns the requests.Session and the authenticated Session used to
talk to one modem. Callers only see fetch_status(); logging in, renewing an
expired session, re-authenticating after a rejection and retrying transient
network errors all happen behind it.

Retry policy:
    - Network errors (timeout, refused, reset): retried up to
      ``network_retries`` times, ``retry_delay`` seconds apart, then
      UnreachableError.
    - Session rejected mid-fetch: session dropped, login + fetch retried
      exactly once, then AuthFailedError.
    - HTTP/API errors (e.g. 5xx): UpstreamError immediately; the poller's
      backoff decides when to try again.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

import requests
import urllib3

from ..const import NETWORK_RETRIES, RETRY_DELAY
from ..drivers import DriverFactory
from .exceptions import AuthFailedError, AuthRejectedError, UnreachableError

if TYPE_CHECKING:
    from ..drivers import ModemDriver, Session
    from .types import DeviceFamily, RawPayload

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_SESSION_MAX_AGE = 300.0

NETWORK_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    requests.exceptions.ChunkedEncodingError,
)

T = TypeVar("T")


class ModemClient:
    """Fetch raw status documents from one modem."""

    def __init__(
        self,
        base_url: str,
        family: DeviceFamily,
        username: str | None = None,
        password: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session_max_age: float = DEFAULT_SESSION_MAX_AGE,
        network_retries: int = NETWORK_RETRIES,
        retry_delay: float = RETRY_DELAY,
        verify_ssl: bool = False,
        driver: ModemDriver | None = None,
        http: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the modem client.

        Args:
            base_url: Modem base URL (e.g., "http://192.168.8.1")
            family: Device family, selects the driver
            username: Optional login username
            password: Optional login password
            timeout: Per-request timeout in seconds
            session_max_age: Renew the session after this many seconds even if
                the device did not declare an expiry
            network_retries: Extra attempts after a network error
            retry_delay: Seconds between network retries
            verify_ssl: Verify TLS certificates (off by default, modems use
                self-signed certificates)
            driver: Driver override (default: DriverFactory by family)
            http: requests.Session override
            clock: Monotonic clock, injectable for tests
            sleep: Sleep function, injectable for tests
        """
        self.base_url = base_url.rstrip("/")
        self.family = family
        self.timeout = timeout
        self.session_max_age = session_max_age
        self.network_retries = network_retries
        self.retry_delay = retry_delay
        self._username = username
        self._password = password
        self._driver = driver or DriverFactory.get_driver(family)
        self._clock = clock
        self._sleep = sleep
        self._session: Session | None = None

        self._http = http or requests.Session()
        self._http.verify = verify_ssl
        if not verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            _LOGGER.debug("SSL certificate verification is disabled for the modem connection")

    @property
    def has_session(self) -> bool:
        """Return True if an authenticated session is currently held."""
        return self._session is not None

    def fetch_status(self) -> RawPayload:
        """Fetch the current status documents, logging in as needed.

        Raises:
            UnreachableError: Network errors persisted through all retries
            AuthFailedError: Credentials rejected, or a fresh session rejected
            UpstreamError: The modem answered with an HTTP or API error
        """
        try:
            return self._fetch_with_login()
        except AuthRejectedError as err:
            _LOGGER.info("Modem rejected the session (%s), logging in again", err)
            self.invalidate_session()

        try:
            return self._fetch_with_login()
        except AuthRejectedError as err:
            self.invalidate_session()
            raise AuthFailedError(f"Session rejected right after login: {err}") from err

    def invalidate_session(self) -> None:
        """Drop the current session and any cookies the modem has set."""
        self._session = None
        self._http.cookies.clear()

    def close(self) -> None:
        """Release the underlying connection pool."""
        self._http.close()

    def max_fetch_duration(self) -> float:
        """Return a best-effort bound on the duration of one fetch_status() call.

        Counts a login and a fetch on every network retry, twice over for the
        re-login after a rejected session. The request timeout bounds each
        socket wait rather than a whole response, so a modem trickling bytes
        can still exceed it.
        """
        attempts = max(0, self.network_retries) + 1
        requests_per_pass = (self._driver.login_requests + self._driver.fetch_requests) * attempts
        retry_sleeps_per_pass = 2 * (attempts - 1) * self.retry_delay
        return 2 * (requests_per_pass * self.timeout + retry_sleeps_per_pass)

    def _fetch_with_login(self) -> RawPayload:
        session = self._ensure_session()
        return self._with_network_retry(
            lambda: self._driver.fetch(self._http, self.base_url, session, self.timeout),
        )

    def _ensure_session(self) -> Session:
        now = self._clock()
        if self._session is not None and not self._session.is_expired(now, self.session_max_age):
            return self._session

        if self._session is not None:
            _LOGGER.debug("Session expired, renewing")
            self.invalidate_session()

        self._session = self._with_network_retry(
            lambda: self._driver.login(
                self._http, self.base_url, self._username, self._password, self.timeout, self._clock()
            ),
        )
        return self._session

    def _with_network_retry(self, operation: Callable[[], T]) -> T:
        attempts = max(0, self.network_retries) + 1
        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                return operation()
            except NETWORK_ERRORS as err:
                last_error = err
                if attempt < attempts:
                    _LOGGER.debug("Network error on attempt %d/%d: %s", attempt, attempts, err)
                    self._sleep(self.retry_delay)
        raise UnreachableError(f"Modem unreachable after {attempts} attempts: {last_error}", self.base_url) from last_error
