"""Helpers for showing other users' identities on public surfaces."""

from __future__ import annotations

DEFAULT_DISPLAY_NAME = "Climate Hero"


def mask_email(email: str) -> str:
    """'alice@example.com' -> 'al***@example.com'. At most two local-part characters survive."""
    local, at, domain = email.partition("@")
    return local[:2] + "***" + at + domain


def display_name(name: str | None) -> str:
    if name is None or not name.strip():
        return DEFAULT_DISPLAY_NAME
    return name.strip()
