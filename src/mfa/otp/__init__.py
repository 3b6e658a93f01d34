"""One-time password core: secrets, HOTP/TOTP, and enrollment URIs.

These six functions are the contract a host application binds to. They
are pure; the current time is always passed in.
"""

from __future__ import annotations

from mfa.otp import secret as _secret
from mfa.otp.engine import TotpEngine, hotp, match_counter, totp, validate
from mfa.otp.errors import (
    InvalidEnrollmentParameters,
    InvalidParameters,
    InvalidSecretEncoding,
    OtpError,
    UnsupportedAlgorithm,
)
from mfa.otp.params import DEFAULT_PARAMS, Algorithm, OtpParams
from mfa.otp.uri import Enrollment, build_uri, parse_uri

__all__ = [
    "DEFAULT_PARAMS",
    "Algorithm",
    "Enrollment",
    "InvalidEnrollmentParameters",
    "InvalidParameters",
    "InvalidSecretEncoding",
    "OtpError",
    "OtpParams",
    "TotpEngine",
    "UnsupportedAlgorithm",
    "build_enrollment_uri",
    "build_uri",
    "compute_code",
    "decode_secret",
    "encode_secret",
    "generate_secret",
    "hotp",
    "match_counter",
    "parse_uri",
    "totp",
    "validate",
    "validate_code",
]


def generate_secret() -> bytes:
    return _secret.generate()


def encode_secret(secret: bytes) -> str:
    return _secret.encode(secret)


def decode_secret(text: str) -> bytes:
    return _secret.decode(text)


def build_enrollment_uri(
    issuer: str, account: str, secret: bytes, params: OtpParams = DEFAULT_PARAMS
) -> str:
    return build_uri(issuer, account, secret, params)


def compute_code(secret: bytes, now: int, params: OtpParams = DEFAULT_PARAMS) -> str:
    return totp(secret, now, params.period, params.digits, params.algorithm)


def validate_code(
    secret: bytes,
    candidate: str,
    now: int,
    params: OtpParams = DEFAULT_PARAMS,
    drift_window: int = 1,
) -> bool:
    return validate(secret, candidate, now, params, drift_window)
