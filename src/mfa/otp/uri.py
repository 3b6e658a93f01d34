"""otpauth:// enrollment URIs (the Key URI Format read by authenticator apps)."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import parse_qs, quote, unquote, urlsplit

from mfa.otp import secret as secret_codec
from mfa.otp.errors import InvalidEnrollmentParameters, InvalidParameters
from mfa.otp.params import DEFAULT_PARAMS, OtpParams, to_algorithm


@dataclass(frozen=True)
class Enrollment:
    issuer: str
    account: str
    secret: bytes
    params: OtpParams = DEFAULT_PARAMS


def _encode(value: str) -> str:
    # quote() with safe="" leaves only the RFC 3986 unreserved set unescaped
    return quote(value, safe="")


def _require(name: str, value: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidEnrollmentParameters(f"{name} must not be empty")
    return value


def build_uri(issuer: str, account: str, secret: bytes, params: OtpParams = DEFAULT_PARAMS) -> str:
    """Compose the otpauth://totp/ URI for QR enrollment."""
    _require("issuer", issuer)
    _require("account", account)
    issuer_enc = _encode(issuer)
    return (
        f"otpauth://totp/{issuer_enc}:{_encode(account)}"
        f"?secret={secret_codec.encode(secret)}"
        f"&issuer={issuer_enc}"
        f"&algorithm={params.algorithm.value}"
        f"&digits={params.digits}"
        f"&period={params.period}"
    )


def parse_uri(uri: str) -> Enrollment:
    """Parse an otpauth://totp/ URI back into its parts.

    Missing algorithm/digits/period fall back to the defaults. The issuer
    query parameter wins over the label prefix when both are present.
    """
    parts = urlsplit(uri)
    if parts.scheme != "otpauth" or parts.netloc != "totp":
        raise InvalidEnrollmentParameters(f"not an otpauth://totp/ URI: {uri!r}")

    # split before unquoting so an encoded %3A stays inside its field
    label_issuer, sep, account = parts.path.lstrip("/").partition(":")
    if not sep:
        label_issuer, account = "", label_issuer
    label_issuer, account = unquote(label_issuer), unquote(account)

    query = {k: v[0] for k, v in parse_qs(parts.query, keep_blank_values=True).items()}
    if "secret" not in query:
        raise InvalidEnrollmentParameters("URI has no secret parameter")

    issuer = query.get("issuer", "").strip() or label_issuer
    try:
        params = OtpParams(
            period=int(query.get("period", DEFAULT_PARAMS.period)),
            digits=int(query.get("digits", DEFAULT_PARAMS.digits)),
            algorithm=to_algorithm(query.get("algorithm", DEFAULT_PARAMS.algorithm)),
        )
    except InvalidParameters:
        raise
    except ValueError as e:
        raise InvalidParameters(f"bad URI parameter: {e}") from e

    return Enrollment(
        issuer=_require("issuer", issuer),
        account=_require("account", account.strip()),
        secret=secret_codec.decode(query["secret"]),
        params=params,
    )
