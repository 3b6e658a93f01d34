"""Tests for per-account replay protection."""

from __future__ import annotations

import threading

from mfa.otp.engine import totp
from mfa.replay import ReplayGuard

SECRET = b"12345678901234567890"
NOW = 1_700_000_015


def test_first_use_accepted_and_recorded():
    guard = ReplayGuard()
    assert guard.last_counter("a@x.com") is None
    assert guard.verify("a@x.com", SECRET, totp(SECRET, NOW), NOW)
    assert guard.last_counter("A@X.com") == NOW // 30


def test_same_code_rejected_on_reuse():
    guard = ReplayGuard()
    code = totp(SECRET, NOW)
    assert guard.verify("a@x.com", SECRET, code, NOW)
    assert not guard.verify("a@x.com", SECRET, code, NOW)
    # still inside the drift window one step later, but already used
    assert not guard.verify("a@x.com", SECRET, code, NOW + 30)


def test_older_code_rejected_after_newer_one():
    guard = ReplayGuard()
    assert guard.verify("a@x.com", SECRET, totp(SECRET, NOW), NOW)
    assert not guard.verify("a@x.com", SECRET, totp(SECRET, NOW - 30), NOW)


def test_next_step_accepted():
    guard = ReplayGuard()
    assert guard.verify("a@x.com", SECRET, totp(SECRET, NOW), NOW)
    assert guard.verify("a@x.com", SECRET, totp(SECRET, NOW + 30), NOW + 30)


def test_wrong_code_does_not_record():
    guard = ReplayGuard()
    assert not guard.verify("a@x.com", SECRET, "abcdef", NOW)
    assert guard.last_counter("a@x.com") is None


def test_accounts_are_independent():
    guard = ReplayGuard()
    code = totp(SECRET, NOW)
    assert guard.verify("a@x.com", SECRET, code, NOW)
    assert guard.verify("b@x.com", SECRET, code, NOW)


def test_forget():
    guard = ReplayGuard()
    code = totp(SECRET, NOW)
    assert guard.verify("a@x.com", SECRET, code, NOW)
    guard.forget("a@x.com")
    assert guard.verify("a@x.com", SECRET, code, NOW)


def test_concurrent_reuse_accepted_once():
    guard = ReplayGuard()
    code = totp(SECRET, NOW)
    results: list[bool] = []
    lock = threading.Lock()

    def attempt() -> None:
        ok = guard.verify("a@x.com", SECRET, code, NOW)
        with lock:
            results.append(ok)

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results.count(True) == 1
