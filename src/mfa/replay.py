"""Per-account replay protection around code validation.

The OTP engine is stateless, so on its own it accepts the same code for
as long as the code stays inside the drift window. ReplayGuard remembers
the last accepted counter per account and only accepts strictly newer ones.
"""

from __future__ import annotations

import logging
import threading

from mfa.otp.engine import match_counter
from mfa.otp.params import DEFAULT_PARAMS, OtpParams

logger = logging.getLogger(__name__)


class ReplayGuard:
    """In-memory account -> last accepted counter map. Thread-safe."""

    def __init__(self) -> None:
        self._last: dict[str, int] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(account: str) -> str:
        return account.casefold()

    def last_counter(self, account: str) -> int | None:
        with self._lock:
            return self._last.get(self._key(account))

    def verify(
        self,
        account: str,
        secret: bytes,
        candidate: str,
        now: int,
        params: OtpParams = DEFAULT_PARAMS,
        drift_window: int = 1,
    ) -> bool:
        """Validate ``candidate`` and record its counter if it is fresh."""
        counter = match_counter(secret, candidate, now, params, drift_window)
        if counter is None:
            return False

        key = self._key(account)
        with self._lock:
            last = self._last.get(key)
            if last is not None and counter <= last:
                logger.warning("Replayed code rejected for %s", account)
                return False
            self._last[key] = counter
        return True

    def forget(self, account: str) -> None:
        with self._lock:
            self._last.pop(self._key(account), None)
