"""Secret generation and the Base32 text form used by authenticator apps."""

from __future__ import annotations

import base64
import binascii
import secrets

from mfa.otp.errors import InvalidParameters, InvalidSecretEncoding

MIN_SECRET_BYTES = 20  # 160 bits, RFC 4226 recommendation

_ALPHABET = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ234567")

# Dangling symbols in the last 8-symbol group that cannot end on a byte boundary
_INVALID_REMAINDERS = frozenset({1, 3, 6})


def generate(length: int = MIN_SECRET_BYTES) -> bytes:
    """Generate a new random secret of ``length`` bytes (at least 20)."""
    if length < MIN_SECRET_BYTES:
        raise InvalidParameters(f"secret must be at least {MIN_SECRET_BYTES} bytes, got {length}")
    return secrets.token_bytes(length)


def encode(secret: bytes) -> str:
    """Encode raw secret bytes as uppercase, unpadded Base32."""
    return base64.b32encode(secret).decode("ascii").rstrip("=")


def decode(text: str) -> bytes:
    """Decode Base32 secret text.

    Accepts lowercase and trailing ``=`` padding. Raises
    InvalidSecretEncoding for empty input, characters outside the RFC 4648
    alphabet, or a length that cannot decode to whole bytes.
    """
    if not isinstance(text, str):
        raise InvalidSecretEncoding(f"secret must be text, got {type(text).__name__}")

    symbols = text.rstrip("=").upper()
    if not symbols:
        raise InvalidSecretEncoding("secret is empty")

    bad = sorted(set(symbols) - _ALPHABET)
    if bad:
        raise InvalidSecretEncoding(f"invalid Base32 characters: {''.join(bad)!r}")

    if len(symbols) % 8 in _INVALID_REMAINDERS:
        raise InvalidSecretEncoding(f"invalid Base32 length: {len(symbols)} symbols")

    padded = symbols + "=" * (-len(symbols) % 8)
    try:
        return base64.b32decode(padded)
    except binascii.Error as e:
        raise InvalidSecretEncoding(str(e)) from e
