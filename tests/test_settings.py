"""Environment parsing for security settings."""

from __future__ import annotations

import pytest

from app.config.settings import SecurityConfig


@pytest.mark.parametrize(
    "raw",
    [
        "root@example.com, ops@example.com",
        '["root@example.com", "ops@example.com"]',
    ],
)
def test_super_admin_emails_from_env(monkeypatch, raw):
    monkeypatch.setenv("SUPER_ADMIN_EMAILS", raw)

    config = SecurityConfig()

    assert config.super_admin_emails == ["root@example.com", "ops@example.com"]


def test_single_super_admin_email(monkeypatch):
    monkeypatch.setenv("SUPER_ADMIN_EMAILS", "root@example.com")

    assert SecurityConfig().super_admin_emails == ["root@example.com"]


def test_blank_super_admin_emails(monkeypatch):
    monkeypatch.setenv("SUPER_ADMIN_EMAILS", " ")

    assert SecurityConfig().super_admin_emails == []
