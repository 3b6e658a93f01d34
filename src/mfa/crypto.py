"""AES-256-GCM encryption of stored TOTP secrets, and scrypt password hashing."""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidKey, InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from mfa.config import settings

_NONCE_SIZE = 12  # 96-bit nonce for AES-GCM
_SALT_SIZE = 16

# scrypt cost: 2**14 iterations, 16 MiB of memory
_SCRYPT_N = 2**14
_SCRYPT_R = 8
_SCRYPT_P = 1
_HASH_LENGTH = 32


class SecretKeyError(RuntimeError):
    """A stored secret cannot be encrypted or decrypted with the configured master key.

    Covers a missing or malformed MFA_MASTER_KEY, a key that differs from
    the one the secret was sealed with, and damaged tokens.
    """


def encryption_enabled() -> bool:
    return bool(settings.master_key)


def _master_key() -> AESGCM:
    if not settings.master_key:
        raise SecretKeyError("MFA_MASTER_KEY not set")
    try:
        key = base64.b64decode(settings.master_key, validate=True)
    except binascii.Error as e:
        raise SecretKeyError("MFA_MASTER_KEY is not valid base64") from e
    if len(key) != 32:
        raise SecretKeyError("MFA_MASTER_KEY must be 32 bytes (base64-encoded)")
    return AESGCM(key)


def encrypt(plaintext: str) -> str:
    """Seal a stored secret. Returns base64(nonce + ciphertext)."""
    aead = _master_key()
    nonce = os.urandom(_NONCE_SIZE)
    return base64.b64encode(nonce + aead.encrypt(nonce, plaintext.encode(), None)).decode()


def decrypt(token: str) -> str:
    """Open an encrypt() token; any failure surfaces as SecretKeyError."""
    aead = _master_key()
    try:
        raw = base64.b64decode(token, validate=True)
    except binascii.Error as e:
        raise SecretKeyError("stored secret token is not valid base64") from e
    if len(raw) <= _NONCE_SIZE:
        raise SecretKeyError("stored secret token is truncated")
    try:
        return aead.decrypt(raw[:_NONCE_SIZE], raw[_NONCE_SIZE:], None).decode()
    except InvalidTag as e:
        raise SecretKeyError("stored secret does not decrypt with the configured MFA_MASTER_KEY") from e


def _scrypt(salt: bytes) -> Scrypt:
    return Scrypt(salt=salt, length=_HASH_LENGTH, n=_SCRYPT_N, r=_SCRYPT_R, p=_SCRYPT_P)


def hash_password(password: str) -> str:
    """Hash a password. Returns 'scrypt$<salt b64>$<hash b64>'."""
    salt = os.urandom(_SALT_SIZE)
    digest = _scrypt(salt).derive(password.encode())
    return "scrypt${}${}".format(
        base64.b64encode(salt).decode(), base64.b64encode(digest).decode()
    )


def verify_password(password: str, stored: str) -> bool:
    """Check a password against a hash_password() value."""
    scheme, _, rest = stored.partition("$")
    salt_b64, _, digest_b64 = rest.partition("$")
    if scheme != "scrypt" or not salt_b64 or not digest_b64:
        return False
    try:
        salt = base64.b64decode(salt_b64, validate=True)
        expected = base64.b64decode(digest_b64, validate=True)
    except binascii.Error:
        return False
    try:
        _scrypt(salt).verify(password.encode(), expected)
    except InvalidKey:
        return False
    return True
