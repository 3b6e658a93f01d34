"""Errors raised by the OTP core.

Everything derives from ValueError: these are all rejections of bad input
or bad configuration, never transient failures.
"""

from __future__ import annotations


class OtpError(ValueError):
    """Base class for OTP core errors."""


class InvalidSecretEncoding(OtpError):
    """Secret text is not valid Base32."""


class InvalidParameters(OtpError):
    """Digits, period, drift window, secret length or counter out of range."""


class InvalidEnrollmentParameters(OtpError):
    """Issuer/account missing, or an otpauth:// URI that cannot be parsed."""


class UnsupportedAlgorithm(OtpError):
    """The requested hash algorithm is not available in hashlib."""
