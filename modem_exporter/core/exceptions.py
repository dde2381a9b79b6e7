"""Exceptions for the modem exporter.

Three families of errors are raised by the exporter:

    ClientError   - talking to the modem failed (network, auth, HTTP status)
    ParseError    - the modem answered, but the payload could not be mapped
                    onto the device family's metric schema
    StartupError  - the process cannot start (bad config, cannot bind)

ClientError and ParseError are always contained by the poller and recorded in
the registry's health state. StartupError aborts the process.
"""

from __future__ import annotations


class ClientError(Exception):
    """Base class for failures while fetching status from the modem."""


class UnreachableError(ClientError):
    """Error to indicate we cannot connect to the modem.

    Raised for timeouts, refused or reset connections once the network
    retries are exhausted.
    """

    def __init__(self, message: str | None = None, url: str | None = None):
        """Initialize error with optional message and URL."""
        super().__init__(message or "Cannot connect to modem")
        self.url = url

    def __str__(self) -> str:
        """Format error with context."""
        parts = [super().__str__()]
        if self.url:
            parts.append(f"url={self.url}")
        return " | ".join(parts)


class AuthFailedError(ClientError):
    """Error to indicate authentication failed.

    Raised when credentials are rejected by the modem, or when a fresh
    session is rejected again right after logging in.
    """


class AuthRejectedError(ClientError):
    """The modem rejected the current session during a status fetch.

    Only raised by device drivers. ModemClient catches it, drops the session
    and retries once; callers of ModemClient never see it.
    """


class UpstreamError(ClientError):
    """Error for HTTP or device API failures with status context.

    Attributes:
        status_code: HTTP status code returned by the modem
        api_code: Device-specific API error code, when the modem wraps errors
            in an HTTP 200 envelope
        url: The URL that failed
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        api_code: str | None = None,
        url: str | None = None,
    ):
        """Initialize upstream error with context.

        Args:
            message: Human-readable error description
            status_code: HTTP status code
            api_code: Device API error code, if any
            url: The URL that failed
        """
        super().__init__(message)
        self.status_code = status_code
        self.api_code = api_code
        self.url = url

    def __str__(self) -> str:
        """Format error with context."""
        parts = [super().__str__(), f"status={self.status_code}"]
        if self.api_code is not None:
            parts.append(f"api_code={self.api_code}")
        if self.url:
            parts.append(f"url={self.url}")
        return " | ".join(parts)


class ParseError(Exception):
    """Base class for failures mapping a payload onto a StatSnapshot."""


class MissingFieldError(ParseError):
    """A field required by the family schema is absent from the payload."""

    def __init__(self, field: str):
        """Initialize with the name of the missing field."""
        super().__init__(f"Missing required field: {field}")
        self.field = field


class MalformedValueError(ParseError):
    """Error wrapping value conversion failures with field context.

    Attributes:
        field: Name of the field being parsed (e.g., "CurrentUpload")
        raw_value: The raw value that failed to parse
    """

    def __init__(self, field: str, raw_value: str | None = None):
        """Initialize with the offending field and its raw text."""
        super().__init__(f"Malformed value for field: {field}")
        self.field = field
        self.raw_value = raw_value

    def __str__(self) -> str:
        """Format error with context."""
        parts = [super().__str__()]
        if self.raw_value is not None:
            # Truncate long values
            display_value = self.raw_value[:50] + "..." if len(self.raw_value) > 50 else self.raw_value
            parts.append(f"raw_value={display_value!r}")
        return " | ".join(parts)


class UnexpectedFormatError(ParseError):
    """The payload's overall shape does not match the device family template."""


class StartupError(Exception):
    """Base class for errors that prevent the exporter from starting."""


class InvalidConfigError(StartupError):
    """Configuration could not be loaded or failed validation."""


class BindFailedError(StartupError):
    """The exposition server could not bind its listen address."""

    def __init__(self, address: str, port: int, reason: str | None = None):
        """Initialize with the address that failed to bind."""
        message = f"Cannot bind {address}:{port}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.address = address
        self.port = port
