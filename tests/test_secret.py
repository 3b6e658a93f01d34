"""Tests for secret generation and Base32 text form."""

from __future__ import annotations

import os

import pytest

from mfa.otp import secret as codec
from mfa.otp.errors import InvalidParameters, InvalidSecretEncoding

RFC_SECRET_SHA1 = b"12345678901234567890"
RFC_SECRET_BASE32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


def test_generate_length_and_uniqueness():
    a = codec.generate()
    b = codec.generate()
    assert len(a) == 20
    assert a != b
    assert len(codec.generate(32)) == 32


def test_generate_rejects_short_secret():
    with pytest.raises(InvalidParameters):
        codec.generate(10)


def test_encode_rfc_secret():
    assert codec.encode(RFC_SECRET_SHA1) == RFC_SECRET_BASE32


def test_encode_is_unpadded_uppercase():
    text = codec.encode(b"\xff" * 21)
    assert "=" not in text
    assert text == text.upper()


def test_round_trip_random_secrets():
    for length in (20, 21, 22, 23, 24, 32, 64):
        s = os.urandom(length)
        assert codec.decode(codec.encode(s)) == s


def test_decode_accepts_lowercase_and_padding():
    assert codec.decode(RFC_SECRET_BASE32.lower()) == RFC_SECRET_SHA1
    assert codec.decode("MZXW6===") == b"foo"
    assert codec.decode("mzxw6") == b"foo"


@pytest.mark.parametrize("text", ["not-base32!", "ABC1DEFG", "MZXW 6YQ", "MZ=XW6", ""])
def test_decode_rejects_bad_characters(text):
    with pytest.raises(InvalidSecretEncoding):
        codec.decode(text)


def test_decode_rejects_only_padding():
    with pytest.raises(InvalidSecretEncoding, match="empty"):
        codec.decode("========")


@pytest.mark.parametrize("text", ["A", "ABC", "ABCDEF", "MZXW6YTBA"])
def test_decode_rejects_dangling_group(text):
    with pytest.raises(InvalidSecretEncoding, match="length"):
        codec.decode(text)


def test_decode_rejects_non_text():
    with pytest.raises(InvalidSecretEncoding):
        codec.decode(b"MZXW6")  # type: ignore[arg-type]
