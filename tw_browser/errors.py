"""Error types raised by the server browser.

Retryable kinds (short reads, unrecognized or mismatched responses) are
caught inside the exchange loop; everything else propagates.
"""


class BrowserError(Exception):
    """Base class for all server browser errors."""


class NoDataToUnpackError(BrowserError):
    """The VarInt buffer holds no (complete) integer."""

    def __init__(self, message: str = "no data to unpack"):
        super().__init__(message)


class InvalidWriteError(BrowserError):
    """A request could not be written in full."""

    def __init__(self, message: str = "invalid write: payload was not sent completely"):
        super().__init__(message)


class InvalidResponseMessageError(BrowserError):
    """The response is empty or does not match any known response."""

    def __init__(self, message: str = "invalid response message"):
        super().__init__(message)


class InvalidHeaderLengthError(InvalidResponseMessageError):
    """The response is shorter than the minimal response header."""

    def __init__(self, message: str = "invalid header length"):
        super().__init__(message)


class RequestResponseMismatchError(InvalidResponseMessageError):
    """The response is valid but of a different type than requested."""

    def __init__(self, requested: str, received: str):
        self.requested = requested
        self.received = received
        super().__init__(
            f"request/response mismatch: requested {requested}, received {received}"
        )


class ExchangeTimeoutError(BrowserError, TimeoutError):
    """The time budget of an exchange ran out without a valid response."""

    def __init__(self, message: str = "timeout: no valid response received"):
        super().__init__(message)


class InvalidIPError(BrowserError, ValueError):
    """The target IP address could not be parsed."""


class InvalidPortError(BrowserError, ValueError):
    """The target port is outside of 0-65535."""


class MalformedPacketError(BrowserError, ValueError):
    """A response payload could not be parsed."""


class ConfigError(BrowserError, ValueError):
    """The browser configuration is invalid."""
