"""Driver for T-Mobile 5G home internet gateways (TMI API).

The gateway status endpoint answers anonymously on most firmware. When
credentials are configured, a bearer token is obtained first:

    POST /TMI/v1/auth/login {"username": ..., "password": ...}
    -> {"auth": {"token": "...", "expiration": 1700000000, ...}}

The expiration is a wall-clock epoch; it is converted to a deadline on the
client's monotonic clock so the session is renewed before the gateway
starts rejecting it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..core.exceptions import AuthFailedError, UpstreamError
from ..core.types import DeviceFamily, PayloadKind, RawPayload
from .base import ModemDriver, Session

if TYPE_CHECKING:
    import requests

_LOGGER = logging.getLogger(__name__)

LOGIN_PATH = "/TMI/v1/auth/login"
STATUS_PATH = "/TMI/v1/gateway?get=all"


class TMobileGatewayDriver(ModemDriver):
    """Bearer-token auth and JSON status fetch for TMI gateways."""

    family = DeviceFamily.TMOBILE_GATEWAY
    payload_kind = PayloadKind.JSON

    def __init__(self, wall_clock: Callable[[], float] = time.time):
        self._wall_clock = wall_clock

    def login(
        self,
        http: requests.Session,
        base_url: str,
        username: str | None,
        password: str | None,
        timeout: float,
        now: float,
    ) -> Session:
        """Request a bearer token, or start an anonymous session."""
        if not username or not password:
            return Session(acquired_at=now)

        url = f"{base_url}{LOGIN_PATH}"
        _LOGGER.debug("TMI: requesting token from %s", base_url)
        response = http.post(url, json={"username": username, "password": password}, timeout=timeout)
        self.check_login_response(response, url)

        try:
            data = response.json()
        except ValueError as err:
            raise UpstreamError("Login response is not JSON", response.status_code, url=url) from err

        auth = data.get("auth") if isinstance(data, dict) else None
        token = auth.get("token") if isinstance(auth, dict) else None
        if not token:
            raise AuthFailedError("Login response carried no token")

        expires_at = None
        expiration = auth.get("expiration")
        if isinstance(expiration, (int, float)):
            expires_at = now + max(0.0, float(expiration) - self._wall_clock())

        _LOGGER.info("TMI: logged in as %s", username)
        return Session(acquired_at=now, username=username, token=token, expires_at=expires_at)

    def fetch(self, http: requests.Session, base_url: str, session: Session, timeout: float) -> RawPayload:
        """Fetch the all-in-one gateway status document."""
        headers = {"Authorization": f"Bearer {session.token}"} if session.token else {}
        url = f"{base_url}{STATUS_PATH}"
        response = http.get(url, headers=headers, timeout=timeout)
        self.check_fetch_response(response, url)
        return RawPayload(self.payload_kind, {STATUS_PATH: response.content})
