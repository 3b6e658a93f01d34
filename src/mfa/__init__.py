"""MFA — TOTP multi-factor authentication with a small credential-store demo."""

__version__ = "0.1.0"
