"""Pydantic models for data persisted by the credential store."""

from __future__ import annotations

from pydantic import BaseModel


class User(BaseModel):
    """A registered user with MFA credentials.

    ``totp_secret`` holds the Base32 secret, or an AES-GCM token when
    ``secret_encrypted`` is set (see mfa.crypto).
    """

    email: str
    password_hash: str
    totp_secret: str
    secret_encrypted: bool = False
    mfa_enabled: bool = True

    def __repr__(self) -> str:
        return f"User(email={self.email!r}, mfa_enabled={self.mfa_enabled})"
