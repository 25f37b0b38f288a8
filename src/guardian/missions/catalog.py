"""Mission catalog: the 20 default eco missions and catalog reads."""

from __future__ import annotations

import logging
from enum import Enum

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.db.models import Mission

logger = logging.getLogger(__name__)


class MissionCategory(str, Enum):
    TRANSPORTATION = "transportation"
    ENERGY = "energy"
    FOOD = "food"
    WATER = "water"
    CONSUMPTION = "consumption"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


MISSION_SEED_DATA: list[dict] = [
    # Transportation
    {
        "slug": "walk_or_bike",
        "title": "Walk or Bike Today",
        "description": "Skip the car for at least one trip and walk or bike instead.",
        "category": "transportation",
        "difficulty": "easy",
        "co2_impact": 2.5,
        "points": 15,
        "icon": "\U0001f6b6",
        "tips": "Start with short trips to the grocery store or coffee shop.",
    },
    {
        "slug": "carpool",
        "title": "Carpool to Work",
        "description": "Share your commute with a colleague or neighbor.",
        "category": "transportation",
        "difficulty": "medium",
        "co2_impact": 4.0,
        "points": 20,
        "icon": "\U0001f697",
        "tips": "Use a ride-sharing app to find carpool partners.",
    },
    {
        "slug": "public_transit",
        "title": "Take Public Transit",
        "description": "Use public transportation for your daily commute.",
        "category": "transportation",
        "difficulty": "easy",
        "co2_impact": 3.5,
        "points": 15,
        "icon": "\U0001f68c",
        "tips": "Check local transit apps for real-time schedules.",
    },
    {
        "slug": "work_from_home",
        "title": "Work From Home",
        "description": "Skip the commute entirely by working remotely today.",
        "category": "transportation",
        "difficulty": "easy",
        "co2_impact": 5.0,
        "points": 25,
        "icon": "\U0001f3e0",
        "tips": "Set up a dedicated workspace for productivity.",
    },
    # Energy
    {
        "slug": "unplug_vampires",
        "title": "Unplug Vampire Devices",
        "description": "Unplug electronics that drain power when not in use.",
        "category": "energy",
        "difficulty": "easy",
        "co2_impact": 0.5,
        "points": 10,
        "icon": "\U0001f50c",
        "tips": "Use power strips to easily disconnect multiple devices.",
    },
    {
        "slug": "air_dry_clothes",
        "title": "Air Dry Your Clothes",
        "description": "Skip the dryer and air dry your laundry.",
        "category": "energy",
        "difficulty": "easy",
        "co2_impact": 1.5,
        "points": 12,
        "icon": "\U0001f455",
        "tips": "Hang clothes on a drying rack or clothesline.",
    },
    {
        "slug": "thermostat_challenge",
        "title": "Thermostat Challenge",
        "description": "Adjust your thermostat 2°F (1°C) closer to the outdoor temperature.",
        "category": "energy",
        "difficulty": "medium",
        "co2_impact": 2.0,
        "points": 15,
        "icon": "\U0001f321",
        "tips": "Use a programmable thermostat for automatic adjustments.",
    },
    {
        "slug": "led_swap",
        "title": "LED Light Swap",
        "description": "Replace one traditional bulb with an LED.",
        "category": "energy",
        "difficulty": "easy",
        "co2_impact": 0.8,
        "points": 10,
        "icon": "\U0001f4a1",
        "tips": "LEDs use 75% less energy and last 25x longer.",
    },
    # Food
    {
        "slug": "meatless_meal",
        "title": "Meatless Meal",
        "description": "Enjoy a delicious plant-based meal for dinner.",
        "category": "food",
        "difficulty": "easy",
        "co2_impact": 3.0,
        "points": 15,
        "icon": "\U0001f957",
        "tips": "Try beans, lentils, or tofu as protein alternatives.",
    },
    {
        "slug": "zero_food_waste",
        "title": "Zero Food Waste Day",
        "description": "Plan meals to use up all ingredients with no waste.",
        "category": "food",
        "difficulty": "medium",
        "co2_impact": 2.5,
        "points": 20,
        "icon": "\U0001f37d",
        "tips": "Freeze leftovers and use vegetable scraps for stock.",
    },
    {
        "slug": "buy_local",
        "title": "Buy Local Produce",
        "description": "Shop at a farmers market or buy local products.",
        "category": "food",
        "difficulty": "easy",
        "co2_impact": 1.5,
        "points": 12,
        "icon": "\U0001f955",
        "tips": "Local food travels less and supports your community.",
    },
    {
        "slug": "cook_from_scratch",
        "title": "Cook From Scratch",
        "description": "Make a meal from whole ingredients, no processed foods.",
        "category": "food",
        "difficulty": "medium",
        "co2_impact": 1.0,
        "points": 15,
        "icon": "\U0001f373",
        "tips": "Batch cooking saves time and reduces packaging waste.",
    },
    # Water
    {
        "slug": "shorter_shower",
        "title": "Shorter Shower",
        "description": "Reduce your shower time by 2 minutes.",
        "category": "water",
        "difficulty": "easy",
        "co2_impact": 0.8,
        "points": 10,
        "icon": "\U0001f6bf",
        "tips": "Set a timer or play a short song to track time.",
    },
    {
        "slug": "full_loads_only",
        "title": "Full Loads Only",
        "description": "Only run the dishwasher or washer with full loads today.",
        "category": "water",
        "difficulty": "easy",
        "co2_impact": 1.2,
        "points": 10,
        "icon": "\U0001f9fa",
        "tips": "Wait until you have enough for a full load.",
    },
    {
        "slug": "fix_a_leak",
        "title": "Fix a Leak",
        "description": "Check for and fix any dripping faucets or leaks.",
        "category": "water",
        "difficulty": "medium",
        "co2_impact": 2.0,
        "points": 25,
        "icon": "\U0001f527",
        "tips": "A dripping faucet wastes 3,000 gallons per year.",
    },
    # Consumption
    {
        "slug": "refuse_single_use_plastic",
        "title": "Refuse Single-Use Plastic",
        "description": "Say no to plastic bags, straws, and disposable items.",
        "category": "consumption",
        "difficulty": "easy",
        "co2_impact": 0.5,
        "points": 10,
        "icon": "♻",
        "tips": "Carry reusable bags, bottles, and utensils.",
    },
    {
        "slug": "buy_nothing_day",
        "title": "Buy Nothing Day",
        "description": "Go 24 hours without making any purchases.",
        "category": "consumption",
        "difficulty": "medium",
        "co2_impact": 2.0,
        "points": 20,
        "icon": "\U0001f6d2",
        "tips": "Use what you already have and appreciate it.",
    },
    {
        "slug": "repair_not_replace",
        "title": "Repair Instead of Replace",
        "description": "Fix something instead of buying new.",
        "category": "consumption",
        "difficulty": "hard",
        "co2_impact": 5.0,
        "points": 30,
        "icon": "\U0001f528",
        "tips": "Video tutorials exist for almost any repair.",
    },
    {
        "slug": "digital_declutter",
        "title": "Digital Declutter",
        "description": "Delete unused apps, emails, and cloud files.",
        "category": "consumption",
        "difficulty": "easy",
        "co2_impact": 0.3,
        "points": 8,
        "icon": "\U0001f4f1",
        "tips": "Data centers use significant energy to store data.",
    },
    {
        "slug": "secondhand_find",
        "title": "Secondhand Find",
        "description": "Buy something used instead of new.",
        "category": "consumption",
        "difficulty": "easy",
        "co2_impact": 3.0,
        "points": 15,
        "icon": "\U0001f3ea",
        "tips": "Check thrift stores and online marketplaces.",
    },
]

_DIFFICULTY_ORDER = {d.value: i for i, d in enumerate(Difficulty)}


def validate_mission_data(data: dict) -> dict:
    """Check a catalog entry against the closed category and difficulty sets.

    Raises ValueError naming the slug on an unknown category or difficulty.
    """
    try:
        category = MissionCategory(data["category"])
        difficulty = Difficulty(data["difficulty"])
    except ValueError as e:
        msg = f"Mission {data.get('slug')!r}: {e}"
        raise ValueError(msg) from e
    return {**data, "category": category.value, "difficulty": difficulty.value}


async def seed_missions(db: AsyncSession) -> int:
    """Insert catalog missions whose slug is missing. Idempotent; returns rows inserted."""
    result = await db.execute(select(Mission.slug))
    existing = set(result.scalars())

    inserted = 0
    for data in MISSION_SEED_DATA:
        if data["slug"] in existing:
            continue
        db.add(Mission(**validate_mission_data(data), is_active=True))
        inserted += 1

    if inserted:
        await db.commit()
        logger.info("Seeded %d missions", inserted)
    return inserted


async def list_active_missions(db: AsyncSession) -> list[Mission]:
    """Active missions ordered by category, then easy -> hard."""
    result = await db.execute(select(Mission).where(Mission.is_active.is_(True)))
    missions = list(result.scalars())
    missions.sort(key=lambda m: (m.category, _DIFFICULTY_ORDER.get(m.difficulty, len(_DIFFICULTY_ORDER)), m.id))
    return missions
