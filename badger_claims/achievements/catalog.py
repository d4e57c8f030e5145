"""
Achievement Definitions for BadgerBadge

Each achievement has:
- id: Unique identifier (hashed to bytes32 by the EVM contract: keccak256(id))
- name / description / icon: Display data
- category: Type of achievement
- validation_rules: How the backend decides eligibility

Definitions are loaded once at import time and never mutated.
"""

from datetime import datetime, timezone

from badger_claims.models.achievement import (
    Achievement,
    AchievementCategory,
    BoundingBox,
    DateWindow,
    HourWindow,
    RadiusArea,
    ValidationRules,
    ValidationType,
)

# Madison, WI approximate boundaries
MADISON_AREA = BoundingBox(min_lat=43.0, max_lat=43.15, min_lng=-89.50, max_lng=-89.30)

MORGRIDGE_HALL = RadiusArea(lat=43.0722, lng=-89.4050, radius_meters=100)
COLLEGE_LIBRARY = RadiusArea(lat=43.0751, lng=-89.3993, radius_meters=100)

CAMPUS_TIMEZONE = "America/Chicago"

TEST_BADGE_MAX_SUPPLY = 10000


def _weather(condition: str, date_window: DateWindow | None = None) -> ValidationRules:
    return ValidationRules(
        type=ValidationType.WEATHER,
        condition=condition,
        area=MADISON_AREA,
        date_window=date_window,
    )


ACHIEVEMENTS: list[Achievement] = [
    Achievement(
        id="RAINY_DAY_2025",
        name="Madison Rainy Day",
        description="Experienced a rainy day on campus during 2025",
        category=AchievementCategory.ENVIRONMENT,
        icon="🌧️",
        validation_rules=_weather("rain"),
    ),
    Achievement(
        id="SNOW_DAY_2025",
        name="First Snow",
        description="Witnessed the first snowfall of 2025 in Madison",
        category=AchievementCategory.ENVIRONMENT,
        icon="❄️",
        validation_rules=_weather(
            "snow",
            DateWindow(
                start=datetime(2025, 1, 1, tzinfo=timezone.utc),
                end=datetime(2025, 3, 31, 23, 59, 59, tzinfo=timezone.utc),
            ),
        ),
    ),
    Achievement(
        id="MORGRIDGE_HACKER_2025",
        name="Morgridge Hackathon",
        description="Participated in a hackathon or build fest at Morgridge Hall",
        category=AchievementCategory.EVENT,
        icon="💻",
        validation_rules=ValidationRules(
            type=ValidationType.EVENT_CODE,
            radius=MORGRIDGE_HALL,
            requires_event_code=True,
        ),
    ),
    Achievement(
        id="CAMPUS_CONCERT",
        name="Campus Concert",
        description="Attended a concert or live performance on campus",
        category=AchievementCategory.EVENT,
        icon="🎵",
        validation_rules=ValidationRules(
            type=ValidationType.EVENT_CODE,
            area=MADISON_AREA,
            requires_event_code=True,
        ),
    ),
    Achievement(
        id="CAMPUS_CLEANUP",
        name="Campus Cleanup",
        description="Participated in a campus cleanup or environmental activity",
        category=AchievementCategory.EVENT,
        icon="🧹",
        validation_rules=ValidationRules(
            type=ValidationType.EVENT_CODE,
            area=MADISON_AREA,
            requires_event_code=True,
        ),
    ),
    Achievement(
        id="LATE_NIGHT_MORGRIDGE",
        name="Late Night Hacker",
        description="Coding in Morgridge Hall between 2 AM - 5 AM",
        category=AchievementCategory.TIME_LOCATION,
        icon="🌙",
        validation_rules=ValidationRules(
            type=ValidationType.TIME_LOCATION,
            radius=MORGRIDGE_HALL,
            hour_window=HourWindow(hour_start=2, hour_end=5, timezone=CAMPUS_TIMEZONE),
        ),
    ),
    Achievement(
        id="EARLY_BIRD",
        name="Early Bird",
        description="6-8am at College Library",
        category=AchievementCategory.TIME_LOCATION,
        icon="🌅",
        validation_rules=ValidationRules(
            type=ValidationType.TIME_LOCATION,
            radius=COLLEGE_LIBRARY,
            hour_window=HourWindow(hour_start=6, hour_end=8, timezone=CAMPUS_TIMEZONE),
        ),
    ),
    Achievement(
        id="PERFECT_SUNNY_DAY",
        name="Perfect Sunny Day",
        description="Experienced a perfect sunny day on campus",
        category=AchievementCategory.ENVIRONMENT,
        icon="☀️",
        validation_rules=_weather("clear"),
    ),
    Achievement(
        id="FOGGY_MORNING",
        name="Foggy Morning",
        description="Witnessed a foggy morning at UW-Madison",
        category=AchievementCategory.ENVIRONMENT,
        icon="🌫️",
        validation_rules=_weather("fog"),
    ),
    Achievement(
        id="SUN_SHOWER",
        name="Sun Shower",
        description="Caught in rain while the sun was shining",
        category=AchievementCategory.ENVIRONMENT,
        icon="🌦️",
        validation_rules=_weather("sun_shower"),
    ),
    Achievement(
        id="BLIZZARD",
        name="Blizzard",
        description="Survived a blizzard on campus",
        category=AchievementCategory.ENVIRONMENT,
        icon="🌨️",
        validation_rules=_weather("blizzard"),
    ),
    Achievement(
        id="AURORA",
        name="Aurora",
        description="Witnessed the aurora borealis in Madison",
        category=AchievementCategory.ENVIRONMENT,
        icon="🌌",
        validation_rules=_weather("aurora"),
    ),
    Achievement(
        id="STRAIGHT_A_BADGER",
        name="Straight-A Badger",
        description="Achieved a perfect 4.0 GPA for the semester",
        category=AchievementCategory.ACADEMIC,
        icon="📚",
        validation_rules=ValidationRules(type=ValidationType.ACADEMIC_RECORD),
    ),
    Achievement(
        id="FIRST_INTERNSHIP_UNLOCKED",
        name="First Internship",
        description="Secured your first internship or co-op position",
        category=AchievementCategory.ACADEMIC,
        icon="💼",
        validation_rules=ValidationRules(type=ValidationType.MANUAL_VERIFICATION),
    ),
    Achievement(
        id="RESEARCH_ROOKIE",
        name="Research Rookie",
        description="Joined a research lab for the first time",
        category=AchievementCategory.ACADEMIC,
        icon="🔬",
        validation_rules=ValidationRules(type=ValidationType.MANUAL_VERIFICATION),
    ),
    # Repeatable for testing/development: N claims per wallet, capped globally
    Achievement(
        id="TEST_BADGE",
        name="Test Badge",
        description="Repeatable test badge for development and testing purposes",
        category=AchievementCategory.TEST,
        icon="🧪",
        is_test_nft=True,
        max_supply=TEST_BADGE_MAX_SUPPLY,
        validation_rules=ValidationRules(type=ValidationType.TEST),
    ),
]
