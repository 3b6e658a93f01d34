"""Central configuration loaded from environment variables and .env files."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from mfa.otp.params import Algorithm, OtpParams


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MFA_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Enrollment
    issuer: str = "DemoGoogleMFA"

    # Code parameters
    digits: int = 6
    period: int = 30
    algorithm: Algorithm = Algorithm.SHA1
    drift_window: int = 1

    # Storage
    users_file: Path = Path("users.json")
    qr_file: Path = Path("qrcode.png")

    # Encryption of stored TOTP secrets (base64, 32 bytes); empty stores plain Base32
    master_key: str = ""

    # Logging
    log_level: str = "WARNING"

    def otp_params(self) -> OtpParams:
        """Validated code parameters. Raises InvalidParameters on bad values."""
        return OtpParams(period=self.period, digits=self.digits, algorithm=self.algorithm)


settings = Settings()
