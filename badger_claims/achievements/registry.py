"""
Achievement Registry

Read-only lookup over the static achievement catalog. Built once at process
start; there is no runtime admin path.
"""

import logging
from typing import Iterable, List, Optional

from badger_claims.exceptions import ConfigurationError, NotFoundError
from badger_claims.models.achievement import Achievement, AchievementCategory

logger = logging.getLogger(__name__)


class AchievementRegistry:
    """Index of achievement definitions by id and category"""

    def __init__(self, achievements: Iterable[Achievement]):
        self._by_id: dict[str, Achievement] = {}
        for achievement in achievements:
            if achievement.id in self._by_id:
                raise ConfigurationError(
                    f"Duplicate achievement id in catalog: {achievement.id}",
                    config_key="ACHIEVEMENTS"
                )
            self._by_id[achievement.id] = achievement
        logger.info(f"Achievement registry loaded with {len(self._by_id)} achievements")

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, achievement_id: str) -> bool:
        return achievement_id in self._by_id

    def find(self, achievement_id: str) -> Optional[Achievement]:
        return self._by_id.get(achievement_id)

    def get_by_id(self, achievement_id: str) -> Achievement:
        """
        Get achievement by ID

        Raises:
            NotFoundError: If no achievement has this id
        """
        achievement = self._by_id.get(achievement_id)
        if achievement is None:
            raise NotFoundError(
                message=f"Achievement not found: {achievement_id}",
                record_id=achievement_id,
                operation="get_achievement"
            )
        return achievement

    def list_by_category(self, category: AchievementCategory | str) -> List[Achievement]:
        category = AchievementCategory(category)
        return [a for a in self._by_id.values() if a.category == category]

    def list_ids(self) -> List[str]:
        return list(self._by_id)

    def list_all(self) -> List[Achievement]:
        return list(self._by_id.values())


def load_default_registry() -> AchievementRegistry:
    """Build the registry from the built-in catalog"""
    from badger_claims.achievements.catalog import ACHIEVEMENTS
    return AchievementRegistry(ACHIEVEMENTS)
