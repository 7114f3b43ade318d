"""Token handshake and token protected request/response exchanges.

A query consists of two exchanges over the same connection:

1. Token handshake: request a token until a token response arrives.
2. Typed exchange: send the token protected request until a response
   of the requested kind arrives.

Both exchanges are bounded only by a wall clock budget. Each attempt
sends a burst of identical requests to make up for lost datagrams and
waits for a single response.
"""

import logging
import time
from typing import Callable, Optional, Union

from ..errors import (
    ExchangeTimeoutError,
    InvalidResponseMessageError,
    InvalidWriteError,
    RequestResponseMismatchError,
)
from ..protocol.classifier import match_response
from ..protocol.constants import MAX_BUFFER_SIZE, TOKEN_RESPONSE_SIZE
from ..protocol.models import PacketType, Token
from ..protocol.packets import (
    new_client_token,
    new_request_packet,
    new_token_request_packet,
    parse_token,
)
from .connection import ReadWriteDeadliner
from .retry_policy import RetryPolicy, request_retry_policy, token_retry_policy
from .timeout_handler import TimeoutHandler

logger = logging.getLogger(__name__)

# Errors after which the current attempt is abandoned and the next one started
RETRYABLE_ERRORS = (OSError, InvalidResponseMessageError)


def _write(w: ReadWriteDeadliner, payload: bytes) -> None:
    written = w.write(payload)
    if written != len(payload):
        raise InvalidWriteError(
            f"invalid write: sent {written} of {len(payload)} bytes"
        )


def request_token(w: ReadWriteDeadliner, client_token: Optional[bytes] = None) -> None:
    """Write a token request to w."""
    _write(w, new_token_request_packet(client_token))


def receive_token(r: ReadWriteDeadliner) -> bytes:
    """Read one token response from r.

    Raises:
        InvalidResponseMessageError: If the datagram has the wrong size.
        OSError: If reading fails or the read deadline passes.
    """
    response = r.read(MAX_BUFFER_SIZE)
    if len(response) != TOKEN_RESPONSE_SIZE:
        raise InvalidResponseMessageError(
            f"invalid token response size: {len(response)}, expected {TOKEN_RESPONSE_SIZE}"
        )
    return response


def request(packet: Union[PacketType, str], token: Token, w: ReadWriteDeadliner) -> None:
    """Write a token protected request of the given kind to w."""
    _write(w, new_request_packet(PacketType(packet), token))


def receive(packet: Union[PacketType, str], r: ReadWriteDeadliner) -> bytes:
    """Read one response from r and check that it is of the given kind.

    Raises:
        InvalidResponseMessageError: If the response is empty or unknown.
        InvalidHeaderLengthError: If the response is too short.
        RequestResponseMismatchError: If the response is of another kind.
        OSError: If reading fails or the read deadline passes.
    """
    response = r.read(MAX_BUFFER_SIZE)
    if not response:
        raise InvalidResponseMessageError("empty response")

    match = match_response(response)
    if match != PacketType(packet):
        raise RequestResponseMismatchError(PacketType(packet).value, match.value)
    return response


def _exchange(
    rwd: ReadWriteDeadliner,
    timeout: float,
    policy: RetryPolicy,
    send: Callable[[ReadWriteDeadliner], None],
    recv: Callable[[ReadWriteDeadliner], bytes],
    kind: str,
) -> bytes:
    timeout = policy.floor_timeout(timeout)
    handler = TimeoutHandler(timeout).start()
    current_timeout = policy.min_timeout
    burst = policy.initial_burst
    attempt = 0

    while True:
        rwd.set_read_deadline(time.monotonic() + current_timeout)

        if handler.is_expired:
            raise ExchangeTimeoutError(
                f"timeout: no {kind} response within {timeout:.3f}s after {attempt} attempts"
            )

        attempt += 1
        count = policy.burst_count(burst)
        logger.debug(
            "%s attempt %d: burst=%d timeout=%.3fs remaining=%.3fs",
            kind, attempt, count, current_timeout, handler.remaining,
        )

        # write errors are not retried, a burst ends early once the budget is spent
        for _ in range(count):
            send(rwd)
            if handler.is_expired:
                break

        try:
            return recv(rwd)
        except RETRYABLE_ERRORS as e:
            logger.debug("%s attempt %d failed: %s", kind, attempt, e)

        current_timeout = policy.next_timeout(current_timeout, handler.remaining)
        burst = policy.next_burst(burst)


def fetch_token(
    rwd: ReadWriteDeadliner,
    timeout: float,
    policy: Optional[RetryPolicy] = None,
) -> bytes:
    """Request a token until a token response arrives or the budget runs out.

    Timeouts below the policy's minimum timeout are raised to it.

    Returns:
        The raw token response, see parse_token().

    Raises:
        ExchangeTimeoutError: If no token response arrived in time.
        InvalidWriteError: If a request could not be sent completely.
    """
    policy = policy or token_retry_policy()
    client_token = new_client_token()
    return _exchange(
        rwd,
        timeout,
        policy,
        send=lambda w: request_token(w, client_token),
        recv=receive_token,
        kind=PacketType.TOKEN.value,
    )


def fetch_with_token(
    packet: Union[PacketType, str],
    token: Token,
    rwd: ReadWriteDeadliner,
    timeout: float,
    policy: Optional[RetryPolicy] = None,
) -> bytes:
    """Send a token protected request until a matching response arrives.

    Responses of another kind are ignored, the exchange keeps going until
    the expected kind arrives or the budget runs out.

    Raises:
        ExchangeTimeoutError: If no matching response arrived in time.
        InvalidWriteError: If a request could not be sent completely.
        ValueError: If packet is not a request kind.
    """
    packet = PacketType(packet)
    policy = policy or request_retry_policy()
    new_request_packet(packet, token)  # reject unknown kinds before any io
    return _exchange(
        rwd,
        timeout,
        policy,
        send=lambda w: request(packet, token, w),
        recv=lambda r: receive(packet, r),
        kind=packet.value,
    )


def fetch(
    packet: Union[PacketType, str],
    rwd: ReadWriteDeadliner,
    timeout: float,
    token_policy: Optional[RetryPolicy] = None,
    request_policy: Optional[RetryPolicy] = None,
) -> bytes:
    """Fetch a token and then the requested response within one budget.

    The token handshake may use the whole budget, the request gets
    whatever is left of it.
    """
    handler = TimeoutHandler(timeout).start()

    response = fetch_token(rwd, timeout, token_policy)
    token = parse_token(response)

    return fetch_with_token(packet, token, rwd, handler.remaining, request_policy)
