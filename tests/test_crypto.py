"""Tests for secret encryption and password hashing."""

from __future__ import annotations

import base64
import os

import pytest

from mfa.config import Settings


def _use_key(monkeypatch, key: str) -> None:
    monkeypatch.setattr("mfa.crypto.settings", Settings(_env_file=None, master_key=key))


def test_encrypt_decrypt(monkeypatch):
    _use_key(monkeypatch, base64.b64encode(os.urandom(32)).decode())
    from mfa.crypto import decrypt, encrypt, encryption_enabled

    assert encryption_enabled()
    plaintext = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
    token = encrypt(plaintext)
    assert token != plaintext
    assert decrypt(token) == plaintext


def test_encrypt_produces_different_ciphertexts(monkeypatch):
    _use_key(monkeypatch, base64.b64encode(os.urandom(32)).decode())
    from mfa.crypto import encrypt

    # Same plaintext should produce different ciphertexts (random nonce)
    assert encrypt("test") != encrypt("test")


def test_missing_key_raises(monkeypatch):
    _use_key(monkeypatch, "")
    from mfa.crypto import encrypt, encryption_enabled

    assert not encryption_enabled()
    with pytest.raises(RuntimeError, match="MFA_MASTER_KEY not set"):
        encrypt("test")


def test_short_key_raises(monkeypatch):
    _use_key(monkeypatch, base64.b64encode(os.urandom(16)).decode())
    from mfa.crypto import encrypt

    from mfa.crypto import SecretKeyError

    with pytest.raises(SecretKeyError, match="32 bytes"):
        encrypt("test")


def test_decrypt_with_other_key_raises(monkeypatch):
    _use_key(monkeypatch, base64.b64encode(os.urandom(32)).decode())
    from mfa.crypto import SecretKeyError, decrypt, encrypt

    token = encrypt("GEZDGNBVGY3TQOJQ")
    _use_key(monkeypatch, base64.b64encode(os.urandom(32)).decode())
    with pytest.raises(SecretKeyError, match="does not decrypt"):
        decrypt(token)


def test_decrypt_damaged_token_raises(monkeypatch):
    _use_key(monkeypatch, base64.b64encode(os.urandom(32)).decode())
    from mfa.crypto import SecretKeyError, decrypt, encrypt

    raw = bytearray(base64.b64decode(encrypt("GEZDGNBVGY3TQOJQ")))
    raw[-1] ^= 0x01
    with pytest.raises(SecretKeyError):
        decrypt(base64.b64encode(bytes(raw)).decode())


@pytest.mark.parametrize("token", ["not base64!", "", base64.b64encode(b"short").decode()])
def test_decrypt_malformed_token_raises(monkeypatch, token):
    _use_key(monkeypatch, base64.b64encode(os.urandom(32)).decode())
    from mfa.crypto import SecretKeyError, decrypt

    with pytest.raises(SecretKeyError):
        decrypt(token)


def test_decrypt_without_key_raises(monkeypatch):
    _use_key(monkeypatch, base64.b64encode(os.urandom(32)).decode())
    from mfa.crypto import SecretKeyError, decrypt, encrypt

    token = encrypt("GEZDGNBVGY3TQOJQ")
    _use_key(monkeypatch, "")
    with pytest.raises(SecretKeyError, match="MFA_MASTER_KEY not set"):
        decrypt(token)


def test_password_hash_round_trip():
    from mfa.crypto import hash_password, verify_password

    stored = hash_password("SecurePass123!")
    assert stored.startswith("scrypt$")
    assert "SecurePass123!" not in stored
    assert verify_password("SecurePass123!", stored)
    assert not verify_password("securepass123!", stored)


def test_password_hash_is_salted():
    from mfa.crypto import hash_password

    assert hash_password("same") != hash_password("same")


@pytest.mark.parametrize("stored", ["", "plain", "sha256$abc", "scrypt$", "scrypt$c2FsdA=="])
def test_verify_password_rejects_unknown_format(stored):
    from mfa.crypto import verify_password

    assert not verify_password("anything", stored)
