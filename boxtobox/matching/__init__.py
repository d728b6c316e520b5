"""Entity resolution, criterion matching and the local achievement index."""

from boxtobox.matching.local_index import LocalAchievementIndex, deduplicate_athletes
from boxtobox.matching.matcher import CriterionMatcher, format_period
from boxtobox.matching.resolver import EntityResolver, achievement_entity
from boxtobox.matching.similarity import get_best_match

__all__ = [
    "CriterionMatcher",
    "EntityResolver",
    "LocalAchievementIndex",
    "achievement_entity",
    "deduplicate_athletes",
    "format_period",
    "get_best_match",
]
