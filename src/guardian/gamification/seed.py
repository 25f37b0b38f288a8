"""Badge seed data: the 17 default Climate Guardian badges."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.db.models import Badge

logger = logging.getLogger(__name__)

BADGE_SEED_DATA: list[dict] = [
    # Milestones
    {
        "slug": "first_step",
        "name": "First Step",
        "description": "Complete your first mission",
        "icon": "\U0001f331",
        "category": "milestone",
        "requirement_type": "missions_completed",
        "requirement_value": 1,
        "points": 10,
        "sort_order": 1,
    },
    # Streaks
    {
        "slug": "streak_7",
        "name": "7-Day Streak",
        "description": "Complete missions 7 days in a row",
        "icon": "\U0001f525",
        "category": "streak",
        "requirement_type": "streak",
        "requirement_value": 7,
        "points": 50,
        "sort_order": 2,
    },
    {
        "slug": "streak_30",
        "name": "30-Day Warrior",
        "description": "Complete missions 30 days in a row",
        "icon": "⚡",
        "category": "streak",
        "requirement_type": "streak",
        "requirement_value": 30,
        "points": 200,
        "sort_order": 3,
    },
    {
        "slug": "streak_100",
        "name": "Century Streak",
        "description": "Complete missions 100 days in a row",
        "icon": "\U0001f4af",
        "category": "streak",
        "requirement_type": "streak",
        "requirement_value": 100,
        "points": 500,
        "sort_order": 4,
    },
    # CO2 impact
    {
        "slug": "co2_10",
        "name": "Carbon Cutter",
        "description": "Save 10kg of CO2",
        "icon": "✂",
        "category": "impact",
        "requirement_type": "co2_saved",
        "requirement_value": 10,
        "points": 25,
        "sort_order": 5,
    },
    {
        "slug": "co2_50",
        "name": "Eco Warrior L1",
        "description": "Save 50kg of CO2",
        "icon": "\U0001f33f",
        "category": "impact",
        "requirement_type": "co2_saved",
        "requirement_value": 50,
        "points": 75,
        "sort_order": 6,
    },
    {
        "slug": "co2_100",
        "name": "Eco Warrior L2",
        "description": "Save 100kg of CO2",
        "icon": "\U0001f333",
        "category": "impact",
        "requirement_type": "co2_saved",
        "requirement_value": 100,
        "points": 150,
        "sort_order": 7,
    },
    {
        "slug": "co2_500",
        "name": "Climate Champion",
        "description": "Save 500kg of CO2",
        "icon": "\U0001f3c6",
        "category": "impact",
        "requirement_type": "co2_saved",
        "requirement_value": 500,
        "points": 500,
        "sort_order": 8,
    },
    {
        "slug": "co2_1000",
        "name": "Planet Protector",
        "description": "Save 1000kg of CO2",
        "icon": "\U0001f30d",
        "category": "impact",
        "requirement_type": "co2_saved",
        "requirement_value": 1000,
        "points": 1000,
        "sort_order": 9,
    },
    # Mission counts
    {
        "slug": "missions_10",
        "name": "Getting Started",
        "description": "Complete 10 missions",
        "icon": "\U0001f4cb",
        "category": "milestone",
        "requirement_type": "missions_completed",
        "requirement_value": 10,
        "points": 30,
        "sort_order": 10,
    },
    {
        "slug": "missions_50",
        "name": "Mission Master",
        "description": "Complete 50 missions",
        "icon": "\U0001f3af",
        "category": "milestone",
        "requirement_type": "missions_completed",
        "requirement_value": 50,
        "points": 100,
        "sort_order": 11,
    },
    {
        "slug": "missions_100",
        "name": "Mission Legend",
        "description": "Complete 100 missions",
        "icon": "⭐",
        "category": "milestone",
        "requirement_type": "missions_completed",
        "requirement_value": 100,
        "points": 250,
        "sort_order": 12,
    },
    # Referrals
    {
        "slug": "referrals_1",
        "name": "Tree Planter",
        "description": "Refer your first friend",
        "icon": "\U0001f332",
        "category": "social",
        "requirement_type": "referrals",
        "requirement_value": 1,
        "points": 50,
        "sort_order": 13,
    },
    {
        "slug": "referrals_5",
        "name": "Community Builder",
        "description": "Refer 5 friends",
        "icon": "\U0001f465",
        "category": "social",
        "requirement_type": "referrals",
        "requirement_value": 5,
        "points": 150,
        "sort_order": 14,
    },
    {
        "slug": "referrals_10",
        "name": "Influencer",
        "description": "Refer 10 friends",
        "icon": "\U0001f4e3",
        "category": "social",
        "requirement_type": "referrals",
        "requirement_value": 10,
        "points": 300,
        "sort_order": 15,
    },
    # Hook-granted
    {
        "slug": "early_adopter",
        "name": "Early Adopter",
        "description": "Join in the first month",
        "icon": "\U0001f680",
        "category": "special",
        "requirement_type": "special",
        "requirement_value": 1,
        "points": 100,
        "sort_order": 16,
    },
    {
        "slug": "premium_hero",
        "name": "Premium Hero",
        "description": "Subscribe to Premium",
        "icon": "\U0001f451",
        "category": "special",
        "requirement_type": "premium",
        "requirement_value": 1,
        "points": 50,
        "sort_order": 17,
    },
]


async def seed_badges(db: AsyncSession) -> int:
    """Insert badge definitions whose slug is missing. Idempotent; returns rows inserted."""
    result = await db.execute(select(Badge.slug))
    existing = set(result.scalars())

    inserted = 0
    for data in BADGE_SEED_DATA:
        if data["slug"] in existing:
            continue
        db.add(Badge(**data, is_active=True))
        inserted += 1

    if inserted:
        await db.commit()
        logger.info("Seeded %d badge definitions", inserted)
    return inserted
