"""Referral counts shared by the badge evaluator and the referral service."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.db.models import Referral


async def count_completed_referrals(db: AsyncSession, referrer_id: int) -> int:
    result = await db.execute(
        select(func.count(Referral.id)).where(
            Referral.referrer_id == referrer_id,
            Referral.status == "completed",
        )
    )
    return int(result.scalar_one())
