"""Transport module - UDP connections and retrying exchanges."""

from .connection import ReadWriteDeadliner, UDPConnection, split_address
from .exchange import (
    fetch,
    fetch_token,
    fetch_with_token,
    receive,
    receive_token,
    request,
    request_token,
)
from .retry_policy import (
    DEFAULT_MIN_TIMEOUT,
    RetryPolicy,
    request_retry_policy,
    token_retry_policy,
)
from .timeout_handler import TimeoutHandler

__all__ = [
    "ReadWriteDeadliner",
    "UDPConnection",
    "split_address",
    "fetch",
    "fetch_token",
    "fetch_with_token",
    "receive",
    "receive_token",
    "request",
    "request_token",
    "DEFAULT_MIN_TIMEOUT",
    "RetryPolicy",
    "request_retry_policy",
    "token_retry_policy",
    "TimeoutHandler",
]
