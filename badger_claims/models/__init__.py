"""Data models for achievements and claims"""
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
from badger_claims.models.claim import ClaimAuthorization, ClaimContext, EligibilityResult

__all__ = [
    "Achievement",
    "AchievementCategory",
    "BoundingBox",
    "DateWindow",
    "HourWindow",
    "RadiusArea",
    "ValidationRules",
    "ValidationType",
    "ClaimAuthorization",
    "ClaimContext",
    "EligibilityResult",
]
