"""Helpers for tests and the demo command only.

current_code() hands out the verifier's own valid code. A real verifier
must never expose it, so nothing on the login path imports this module.
"""

from __future__ import annotations

import time

from mfa.otp.engine import totp
from mfa.otp.params import DEFAULT_PARAMS, OtpParams


def current_code(secret: bytes, params: OtpParams = DEFAULT_PARAMS) -> str:
    """The TOTP code for ``secret`` at the wall clock."""
    return totp(secret, int(time.time()), params.period, params.digits, params.algorithm)
