"""Time step parameters shared by the engine and the URI builder."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from mfa.otp.errors import InvalidParameters

MIN_DIGITS = 6
MAX_DIGITS = 8
MAX_DRIFT_WINDOW = 10


class Algorithm(StrEnum):
    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @property
    def hashlib_name(self) -> str:
        return self.value.lower()


def to_algorithm(value: str) -> Algorithm:
    """Accept "sha256", "SHA256" or Algorithm.SHA256."""
    try:
        return Algorithm(str(value).upper())
    except ValueError:
        raise InvalidParameters(f"unknown algorithm: {value!r}") from None


def check_digits(digits: int) -> int:
    if isinstance(digits, bool) or not isinstance(digits, int):
        raise InvalidParameters(f"digits must be an integer, got {digits!r}")
    if not MIN_DIGITS <= digits <= MAX_DIGITS:
        raise InvalidParameters(f"digits must be in [{MIN_DIGITS}, {MAX_DIGITS}], got {digits}")
    return digits


def check_period(period: int) -> int:
    if isinstance(period, bool) or not isinstance(period, int):
        raise InvalidParameters(f"period must be an integer, got {period!r}")
    if period <= 0:
        raise InvalidParameters(f"period must be positive, got {period}")
    return period


def check_drift_window(drift_window: int) -> int:
    if isinstance(drift_window, bool) or not isinstance(drift_window, int):
        raise InvalidParameters(f"drift_window must be an integer, got {drift_window!r}")
    if not 0 <= drift_window <= MAX_DRIFT_WINDOW:
        raise InvalidParameters(
            f"drift_window must be in [0, {MAX_DRIFT_WINDOW}], got {drift_window}"
        )
    return drift_window


@dataclass(frozen=True)
class OtpParams:
    """Step duration, code length and hash algorithm for one authenticator."""

    period: int = 30
    digits: int = 6
    algorithm: Algorithm = Algorithm.SHA1

    def __post_init__(self) -> None:
        check_period(self.period)
        check_digits(self.digits)
        # frozen dataclass: normalize "sha256" -> Algorithm.SHA256
        object.__setattr__(self, "algorithm", to_algorithm(self.algorithm))


DEFAULT_PARAMS = OtpParams()
