"""Static achievement catalog and read-only registry"""

from badger_claims.achievements.catalog import ACHIEVEMENTS
from badger_claims.achievements.registry import AchievementRegistry, load_default_registry

__all__ = [
    "ACHIEVEMENTS",
    "AchievementRegistry",
    "load_default_registry",
]
