"""Tests for QR rendering of enrollment URIs."""

from __future__ import annotations

from mfa.otp.uri import build_uri
from mfa.qr import render_ascii, save_png

URI = build_uri("DemoGoogleMFA", "demo@example.com", b"12345678901234567890")


def test_render_ascii_is_square():
    lines = render_ascii(URI).splitlines()
    assert lines
    assert all(len(line) == 2 * len(lines) for line in lines)
    assert any("██" in line for line in lines)


def test_render_ascii_border_is_light():
    lines = render_ascii(URI, border=1).splitlines()
    assert lines[0].strip() == ""
    assert lines[-1].strip() == ""


def test_render_ascii_grows_with_border():
    assert len(render_ascii(URI, border=4).splitlines()) == len(render_ascii(URI, border=1).splitlines()) + 6


def test_save_png(tmp_path):
    path = save_png(URI, tmp_path / "qr.png")
    assert path == tmp_path / "qr.png"
    assert path.read_bytes().startswith(b"\x89PNG\r\n\x1a\n")
