"""CLI entry point for the MFA demo: registration with TOTP enrollment, and login."""

from __future__ import annotations

import logging
import sys
import time
from typing import TYPE_CHECKING, NoReturn

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mfa.config import settings
from mfa.otp import OtpError, build_enrollment_uri, decode_secret, encode_secret, generate_secret
from mfa.otp.engine import TotpEngine
from mfa.otp.params import OtpParams, check_drift_window
from mfa.replay import ReplayGuard

if TYPE_CHECKING:
    from mfa.storage import JsonUserStorage

console = Console()

# One guard per process; a multi-process host would back this with shared storage.
replay_guard = ReplayGuard()


def _now() -> int:
    return int(time.time())


def _fail(msg: str) -> NoReturn:
    console.print(f"\n[red]Error:[/red] {escape(msg)}")
    sys.exit(1)


def _otp_params() -> OtpParams:
    check_drift_window(settings.drift_window)
    return settings.otp_params()


def _storage() -> JsonUserStorage:
    from mfa.storage import JsonUserStorage

    return JsonUserStorage(settings.users_file)


def _show_enrollment(uri: str, secret_text: str, email: str) -> None:
    from mfa.qr import render_ascii, save_png

    console.print("\n[bold]=== MFA Setup ===[/bold]\n")
    console.print("Scan this QR code with your authenticator app")
    console.print("(Google Authenticator, Authy, etc.):\n")
    click.echo(render_ascii(uri))

    try:
        path = save_png(uri, settings.qr_file)
        console.print(f"QR code also saved to: {escape(str(path))}")
    except OSError as e:
        console.print(f"[yellow]Note:[/yellow] Could not save QR code image: {escape(str(e))}")

    console.print("\nOr enter this key manually:")
    console.print(f"  Secret:  {secret_text}")
    console.print(f"  Issuer:  {escape(settings.issuer)}")
    console.print(f"  Account: {escape(email)}")


@click.group()
def main() -> None:
    """MFA demo: TOTP enrollment and login."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )


@main.command()
def status() -> None:
    """Show effective configuration."""
    table = Table(title="MFA Configuration", show_header=False)
    table.add_row("Issuer", escape(settings.issuer))
    table.add_row("Algorithm", str(settings.algorithm))
    table.add_row("Digits", str(settings.digits))
    table.add_row("Period", f"{settings.period}s")
    table.add_row("Drift window", f"±{settings.drift_window} steps")
    table.add_row("Users file", escape(str(settings.users_file)))
    table.add_row("Secret encryption", "on" if settings.master_key else "off")
    console.print(table)


@main.command()
def register() -> None:
    """Register a new user with MFA onboarding."""
    console.print("\n[bold]=== User Registration ===[/bold]\n")
    storage = _storage()

    email = click.prompt("Enter email").strip()
    if not email:
        _fail("Email cannot be empty.")
    if storage.exists(email):
        _fail("A user with this email already exists.")

    password = click.prompt("Enter password", hide_input=True)
    if not password:
        _fail("Password cannot be empty.")
    if click.prompt("Confirm password", hide_input=True) != password:
        _fail("Passwords do not match.")

    try:
        params = _otp_params()
        engine = TotpEngine(params)
        secret = generate_secret()
        uri = build_enrollment_uri(settings.issuer, email, secret, params)
    except OtpError as e:
        _fail(str(e))

    _show_enrollment(uri, encode_secret(secret), email)

    console.print("\n[bold]=== Verify Setup ===[/bold]\n")
    code = click.prompt(f"Enter the {params.digits}-digit code from your authenticator app").strip()
    if not engine.verify(secret, code, _now(), settings.drift_window):
        console.print("Please try again and make sure your authenticator app is set up correctly.")
        _fail("Invalid code. Registration cancelled.")

    from mfa.crypto import SecretKeyError
    from mfa.storage import new_user

    try:
        storage.save(new_user(email, password, secret))
    except SecretKeyError as e:
        _fail(str(e))
    console.print("\n[green]✓ Registration successful![/green]")
    console.print("  MFA has been enabled for your account.")
    console.print("  You can now login with your credentials and authenticator code.")


@main.command()
def login() -> None:
    """Login with password and MFA challenge."""
    from mfa.crypto import SecretKeyError, verify_password
    from mfa.storage import user_secret

    console.print("\n[bold]=== User Login ===[/bold]\n")
    storage = _storage()

    email = click.prompt("Enter email").strip()
    if not email:
        _fail("Email cannot be empty.")
    user = storage.find_by_email(email)
    if user is None:
        _fail("User not found.")

    password = click.prompt("Enter password", hide_input=True)
    if not verify_password(password, user.password_hash):
        _fail("Invalid password.")

    if user.mfa_enabled:
        console.print("\n[bold]=== MFA Challenge ===[/bold]\n")
        try:
            params = _otp_params()
            secret = user_secret(user)
        except (OtpError, SecretKeyError) as e:
            _fail(str(e))
        code = click.prompt(f"Enter the {params.digits}-digit code from your authenticator app").strip()
        if not replay_guard.verify(user.email, secret, code, _now(), params, settings.drift_window):
            _fail("Invalid authentication code.")

    console.print("\n[green]✓ Login successful![/green]")
    console.print(f"  Welcome, {escape(user.email)}!")


@main.command()
@click.argument("email")
@click.option("--secret", "secret_text", default=None, help="Existing Base32 secret (default: generate one)")
def uri(email: str, secret_text: str | None) -> None:
    """Print an otpauth:// enrollment URI."""
    try:
        secret = decode_secret(secret_text) if secret_text else generate_secret()
        click.echo(build_enrollment_uri(settings.issuer, email, secret, _otp_params()))
    except OtpError as e:
        _fail(str(e))


@main.command()
@click.option("--email", default="demo@example.com", show_default=True)
@click.option("--password", default="SecurePass123!", show_default=True)
@click.option("--qr-file", default="demo-qrcode.png", show_default=True, type=click.Path())
def demo(email: str, password: str, qr_file: str) -> None:
    """Non-interactive walkthrough of enrollment and login.

    Prints the verifier's own current code, which only a demo may do.
    """
    from mfa.crypto import SecretKeyError, verify_password
    from mfa.otp.testing import current_code
    from mfa.qr import render_ascii, save_png
    from mfa.storage import new_user, user_secret

    try:
        params = _otp_params()
        engine = TotpEngine(params)
    except OtpError as e:
        _fail(str(e))
    storage = _storage()

    console.rule("PART 1: USER ONBOARDING")
    secret = generate_secret()
    console.print(f"[Step 1] Secret key: {encode_secret(secret)}", markup=False)
    link = build_enrollment_uri(settings.issuer, email, secret, params)
    console.print("[Step 2] OTP auth URI:", markup=False)
    click.echo(f"  {link}")
    console.print("[Step 3] QR code:\n", markup=False)
    click.echo(render_ascii(link))
    try:
        save_png(link, qr_file)
        console.print(f"  QR code also saved to: {escape(qr_file)}")
    except OSError as e:
        console.print(f"  [yellow]Could not save QR code image:[/yellow] {escape(str(e))}")
    console.print(f"[Step 4] Current valid code (demo only): {current_code(secret, params)}", markup=False)
    try:
        storage.save(new_user(email, password, secret))
    except SecretKeyError as e:
        _fail(str(e))
    console.print(f"[Step 5] User saved: {email}", markup=False)

    console.rule("PART 2: USER AUTHENTICATION")
    loaded = storage.find_by_email(email)
    password_ok = loaded is not None and verify_password(password, loaded.password_hash)
    console.print(f"  Password valid: {password_ok}")
    try:
        stored = user_secret(loaded) if loaded is not None else secret
    except (OtpError, SecretKeyError) as e:
        _fail(str(e))
    code = current_code(stored, params)
    code_ok = replay_guard.verify(email, stored, code, _now(), params, settings.drift_window)
    console.print(f"  Code {code} valid: {code_ok}")
    replayed = replay_guard.verify(email, stored, code, _now(), params, settings.drift_window)
    console.print(f"  Same code replayed: {'accepted' if replayed else 'rejected'}")
    if password_ok and code_ok:
        console.print("  [green]✓ LOGIN SUCCESSFUL![/green]")
    else:
        console.print("  [red]✗ LOGIN FAILED![/red]")

    console.rule("PART 3: TESTING INVALID CODE")
    wrong = "0" * params.digits if code != "0" * params.digits else "1" * params.digits
    wrong_ok = engine.verify(stored, wrong, _now(), settings.drift_window)
    console.print(f"  Code {wrong} valid: {wrong_ok}")
    console.print(f"  Result: {'✓ Access granted' if wrong_ok else '✗ Access denied'}")
    console.print(f"\n  Next code in {engine.seconds_remaining(_now())}s")

    if not (password_ok and code_ok) or wrong_ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
