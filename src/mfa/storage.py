"""JSON-file credential store.

Holds users in memory and rewrites the whole file on every change. The OTP
core never touches this; the CLI reads a user's secret from here at login
and stores a fresh one at registration.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from mfa import crypto
from mfa.models import User
from mfa.otp import secret as secret_codec

logger = logging.getLogger(__name__)

_USER_LIST = TypeAdapter(list[User])


class JsonUserStorage:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._users: list[User] = self._load()

    def _load(self) -> list[User]:
        if not self.path.exists():
            return []
        try:
            return _USER_LIST.validate_json(self.path.read_bytes())
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.warning("Could not read users file %s: %s", self.path, e)
            return []

    def _persist(self, users: list[User]) -> None:
        """Write ``users`` to disk, then adopt them as the in-memory list."""
        self.path.write_bytes(_USER_LIST.dump_json(users, indent=2))
        self._users = users

    def find_by_email(self, email: str) -> User | None:
        wanted = email.casefold()
        for user in self._users:
            if user.email.casefold() == wanted:
                return user
        return None

    def exists(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def save(self, user: User) -> None:
        """Insert a user, replacing any existing one with the same email."""
        wanted = user.email.casefold()
        users = [u for u in self._users if u.email.casefold() != wanted]
        users.append(user)
        self._persist(users)
        logger.info("Saved user %s (%d total)", user.email, len(self._users))

    def delete(self, email: str) -> bool:
        existing = self.find_by_email(email)
        if existing is None:
            return False
        self._persist([u for u in self._users if u is not existing])
        logger.info("Deleted user %s", email)
        return True

    def find_all(self) -> list[User]:
        return list(self._users)

    def count(self) -> int:
        return len(self._users)


def new_user(email: str, password: str, secret: bytes) -> User:
    """Build a User, hashing the password and encrypting the secret if a master key is set."""
    text = secret_codec.encode(secret)
    encrypted = crypto.encryption_enabled()
    return User(
        email=email,
        password_hash=crypto.hash_password(password),
        totp_secret=crypto.encrypt(text) if encrypted else text,
        secret_encrypted=encrypted,
    )


def user_secret(user: User) -> bytes:
    """Recover the raw TOTP secret stored for ``user``."""
    text = crypto.decrypt(user.totp_secret) if user.secret_encrypted else user.totp_secret
    return secret_codec.decode(text)
