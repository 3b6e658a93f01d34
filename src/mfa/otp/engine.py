"""HOTP (RFC 4226) and TOTP (RFC 6238) code derivation and validation.

Every function here is pure: the secret, the counter or Unix time, and the
parameters are all explicit arguments. Nothing reads the clock and nothing
is remembered between calls, so the functions are safe to call from any
thread. Replay protection lives in mfa.replay.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import struct

from mfa.otp.errors import InvalidParameters, UnsupportedAlgorithm
from mfa.otp.params import (
    DEFAULT_PARAMS,
    Algorithm,
    OtpParams,
    check_digits,
    check_drift_window,
    check_period,
    to_algorithm,
)

logger = logging.getLogger(__name__)

MAX_COUNTER = 2**64 - 1


def _check_counter(counter: int) -> int:
    if isinstance(counter, bool) or not isinstance(counter, int):
        raise InvalidParameters(f"counter must be an integer, got {counter!r}")
    if not 0 <= counter <= MAX_COUNTER:
        raise InvalidParameters(f"counter out of 64-bit range: {counter}")
    return counter


def time_counter(unix_time: int, period: int = 30) -> int:
    """floor(unix_time / period), refusing anything that does not fit in 64 bits."""
    check_period(period)
    if isinstance(unix_time, bool) or not isinstance(unix_time, int):
        raise InvalidParameters(f"unix_time must be an integer, got {unix_time!r}")
    if unix_time < 0:
        raise InvalidParameters(f"unix_time must not be negative, got {unix_time}")
    return _check_counter(unix_time // period)


def hotp(
    secret: bytes,
    counter: int,
    digits: int = 6,
    algorithm: Algorithm = Algorithm.SHA1,
) -> str:
    """Compute the HOTP code for ``counter``.

    HMAC over the 8-byte big-endian counter, then dynamic truncation: the
    low nibble of the last digest byte picks an offset, the four bytes there
    form a 31-bit integer, reduced modulo 10**digits and zero-padded.
    """
    check_digits(digits)
    _check_counter(counter)
    digest = hmac.new(secret, struct.pack(">Q", counter), to_algorithm(algorithm).hashlib_name).digest()

    offset = digest[-1] & 0x0F
    code = struct.unpack(">I", digest[offset : offset + 4])[0] & 0x7FFFFFFF
    return str(code % 10**digits).zfill(digits)


def totp(
    secret: bytes,
    unix_time: int,
    period: int = 30,
    digits: int = 6,
    algorithm: Algorithm = Algorithm.SHA1,
) -> str:
    """HOTP keyed by the time step containing ``unix_time``."""
    return hotp(secret, time_counter(unix_time, period), digits, algorithm)


def is_well_formed(candidate: object, digits: int) -> bool:
    """True if ``candidate`` is exactly ``digits`` ASCII decimal digits."""
    return (
        isinstance(candidate, str)
        and len(candidate) == digits
        and candidate.isascii()
        and candidate.isdigit()
    )


def match_counter(
    secret: bytes,
    candidate: str,
    unix_time: int,
    params: OtpParams = DEFAULT_PARAMS,
    drift_window: int = 1,
) -> int | None:
    """Return the counter at which ``candidate`` is valid, or None.

    Checks every counter within +-drift_window steps of the current one.
    All of them are computed and compared in constant time, whether or not
    an earlier one matched. Counters falling outside the 64-bit range at
    the window edges are skipped.
    """
    check_drift_window(drift_window)
    if not is_well_formed(candidate, params.digits):
        logger.debug("Rejected malformed candidate (expected %d digits)", params.digits)
        return None

    current = time_counter(unix_time, params.period)
    expected = candidate.encode("ascii")
    matched: int | None = None
    for step in range(-drift_window, drift_window + 1):
        counter = current + step
        if not 0 <= counter <= MAX_COUNTER:
            continue
        code = hotp(secret, counter, params.digits, params.algorithm)
        if hmac.compare_digest(code.encode("ascii"), expected) and matched is None:
            matched = counter

    if matched is not None:
        logger.debug("Code accepted at step offset %+d", matched - current)
    return matched


def validate(
    secret: bytes,
    candidate: str,
    unix_time: int,
    params: OtpParams = DEFAULT_PARAMS,
    drift_window: int = 1,
) -> bool:
    """True if ``candidate`` matches the TOTP code within the drift window.

    Malformed candidates return False without hashing anything. A wrong
    code is simply False; only structurally invalid parameters raise.
    """
    return match_counter(secret, candidate, unix_time, params, drift_window) is not None


class TotpEngine:
    """TOTP functions bound to one set of parameters.

    The hash algorithm is probed at construction so a missing digest fails
    here rather than on the first login.
    """

    def __init__(self, params: OtpParams = DEFAULT_PARAMS) -> None:
        try:
            hashlib.new(params.algorithm.hashlib_name)
        except ValueError as e:
            raise UnsupportedAlgorithm(f"hash algorithm unavailable: {params.algorithm}") from e
        self.params = params

    def code_at(self, secret: bytes, unix_time: int) -> str:
        p = self.params
        return totp(secret, unix_time, p.period, p.digits, p.algorithm)

    def verify(self, secret: bytes, candidate: str, unix_time: int, drift_window: int = 1) -> bool:
        return validate(secret, candidate, unix_time, self.params, drift_window)

    def matching_counter(
        self, secret: bytes, candidate: str, unix_time: int, drift_window: int = 1
    ) -> int | None:
        return match_counter(secret, candidate, unix_time, self.params, drift_window)

    def seconds_remaining(self, unix_time: int) -> int:
        """Seconds until the code valid at ``unix_time`` rolls over."""
        return self.params.period - unix_time % self.params.period

    def __repr__(self) -> str:
        p = self.params
        return f"TotpEngine(period={p.period}, digits={p.digits}, algorithm={p.algorithm})"
