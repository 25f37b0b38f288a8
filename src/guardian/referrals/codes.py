"""Referral code generation.

Codes are the configured prefix ("hero") followed by 6 lowercase alphanumeric
characters from a cryptographic random source.
"""

from __future__ import annotations

import secrets
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.config import get_settings
from guardian.db.models import User

REFERRAL_CHARSET = string.ascii_lowercase + string.digits  # a-z, 0-9
REFERRAL_SUFFIX_LENGTH = 6


def generate_referral_code(prefix: str | None = None) -> str:
    """Generate a referral code such as 'hero4k2x9a'."""
    if prefix is None:
        prefix = get_settings().referral_code_prefix
    return prefix + "".join(secrets.choice(REFERRAL_CHARSET) for _ in range(REFERRAL_SUFFIX_LENGTH))


def normalize_referral_code(code: str) -> str:
    """Normalize a referral code for case-insensitive lookup."""
    return code.strip().lower()


async def generate_unique_referral_code(db: AsyncSession) -> str:
    """Generate a referral code that no user has yet."""
    for _ in range(10):
        code = generate_referral_code()
        existing = await db.execute(select(User.id).where(User.referral_code == code))
        if existing.scalar_one_or_none() is None:
            return code
    raise RuntimeError("Failed to generate unique referral code after 10 attempts")


async def get_user_by_referral_code(db: AsyncSession, code: str) -> User | None:
    if not code or not code.strip():
        return None
    result = await db.execute(select(User).where(User.referral_code == normalize_referral_code(code)))
    return result.scalar_one_or_none()
