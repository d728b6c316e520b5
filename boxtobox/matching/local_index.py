"""
Local achievement index over the offline-built player database.

The table is loaded once, cached on the instance, and never mutated. One
instance is created by the composition root (boxtobox.main) and shared by
every request; tests inject their own instance or a prebuilt table.

Usage:
    index = LocalAchievementIndex("data/players.json")
    table = index.load_once()             # reads the file
    assert index.load_once() is table     # cached
    index.find(argentina, world_cup)      # AND of two criteria
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, Optional, Union

from boxtobox.exceptions import DatabaseUnavailableError
from boxtobox.matching.normalization import fold
from boxtobox.models import (
    BALLON_DOR,
    CHAMPIONS_LEAGUE,
    WORLD_CUP,
    AthleteRecord,
    AthleteRef,
    Entity,
)

logger = logging.getLogger(__name__)

AthleteTable = tuple[AthleteRecord, ...]

SEARCH_RESULT_LIMIT = 15
CAREER_START_FLOOR = 1950


def deduplicate_athletes(records: Iterable[AthleteRecord]) -> list[AthleteRecord]:
    """
    Keep one record per case-insensitive name.

    A manually curated record always wins. Among graph-derived duplicates the
    record with the most achievements wins; the first seen wins a tie.
    Output keeps first-seen name order.
    """
    groups: dict[str, list[AthleteRecord]] = {}
    for record in records:
        groups.setdefault(fold(record.name), []).append(record)

    kept = []
    for name, group in groups.items():
        manual = next((r for r in group if r.is_manual), None)
        if manual is not None:
            winner = manual
        else:
            winner = group[0]
            for candidate in group[1:]:
                if candidate.achievement_count > winner.achievement_count:
                    winner = candidate
        if len(group) > 1:
            logger.debug(f"[LOCAL_DB] Dedup '{name}': kept {winner.id} of {len(group)} entries")
        kept.append(winner)
    return kept


def _matches(record: AthleteRecord, criterion: Entity) -> bool:
    if criterion.id == WORLD_CUP:
        return record.world_cup_winner
    if criterion.id == CHAMPIONS_LEAGUE:
        return record.champions_league_winner
    if criterion.id == BALLON_DOR:
        return record.ballon_dor

    wanted = fold(criterion.label)
    if not wanted:
        return False

    if criterion.type == "country":
        return bool(record.country) and fold(record.country) == wanted

    if criterion.type == "club":
        # Substring either way tolerates "FC Barcelona" vs "Barcelona"
        return any(wanted in fold(club) or fold(club) in wanted for club in record.clubs if club)

    return False


def _career_years(record: AthleteRecord) -> Optional[str]:
    """Rough career span derived from achievement years."""
    years = []
    for values in (record.world_cup_years, record.champions_league_years, record.ballon_dor_years):
        for value in values:
            try:
                years.append(int(value))
            except (TypeError, ValueError):
                continue
    if not years:
        return None
    start = max(CAREER_START_FLOOR, min(years) - 5)
    end = min(date.today().year, max(years) + 3)
    return f"{start}-{end}"


class LocalAchievementIndex:
    """Read-only, lazily loaded athlete table."""

    def __init__(self, path: Union[str, Path], table: Optional[AthleteTable] = None):
        self.path = Path(path)
        self._table: Optional[AthleteTable] = table

    @classmethod
    def from_records(cls, records: Iterable[AthleteRecord]) -> "LocalAchievementIndex":
        """Build an index around an in-memory table (no file access)."""
        return cls(path="<memory>", table=tuple(deduplicate_athletes(records)))

    def _read(self) -> AthleteTable:
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, list):
                raise ValueError("expected a JSON array of player records")
            records = [AthleteRecord.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise DatabaseUnavailableError(
                "Local player database unreadable", details=f"{self.path}: {e}"
            ) from e
        return tuple(deduplicate_athletes(records))

    def load_once(self) -> AthleteTable:
        """
        Return the cached table, reading the file on first call only.

        A missing or corrupt file yields an empty table (logged); the empty
        table is cached too, so the file is never re-read.
        """
        if self._table is not None:
            return self._table

        if not self.path.exists():
            logger.warning(
                f"[LOCAL_DB] Player database not found at {self.path}. "
                "Run: python scripts/build_player_database.py"
            )
            self._table = ()
            return self._table

        try:
            self._table = self._read()
            logger.info(f"[LOCAL_DB] Loaded {len(self._table)} players from {self.path}")
        except DatabaseUnavailableError as e:
            logger.error(f"[LOCAL_DB] {e.message}: {e.details}")
            self._table = ()
        return self._table

    def find(self, criterion_a: Entity, criterion_b: Entity) -> list[AthleteRef]:
        """Athletes satisfying both criteria (AND)."""
        table = self.load_once()
        if not table:
            logger.debug("[LOCAL_DB] No local database available, returning empty")
            return []

        matches = [
            AthleteRef(id=r.id, label=r.name)
            for r in table
            if _matches(r, criterion_a) and _matches(r, criterion_b)
        ]
        logger.info(
            f"[LOCAL_DB] {criterion_a.label} ({criterion_a.type}) AND "
            f"{criterion_b.label} ({criterion_b.type}): {len(matches)} players"
        )
        return matches

    def search_by_name(self, query: str) -> list[dict]:
        """Substring name search: exact matches first, then most achievements."""
        wanted = fold(query)
        if not wanted:
            return []

        hits = [r for r in self.load_once() if wanted in fold(r.name)]
        hits.sort(key=lambda r: (fold(r.name) != wanted, -r.achievement_count))

        return [
            {
                "id": r.id,
                "label": r.name,
                "country": r.country,
                "years": _career_years(r),
                "clubs": list(r.clubs),
            }
            for r in hits[:SEARCH_RESULT_LIMIT]
        ]

    def stats(self) -> dict:
        table = self.load_once()
        by_country: dict[str, int] = {}
        for r in table:
            key = r.country or "Unknown"
            by_country[key] = by_country.get(key, 0) + 1

        return {
            "total_players": len(table),
            "with_clubs": sum(1 for r in table if r.clubs),
            "world_cup_winners": sum(1 for r in table if r.world_cup_winner),
            "champions_league_winners": sum(1 for r in table if r.champions_league_winner),
            "ballon_dor_winners": sum(1 for r in table if r.ballon_dor),
            "by_country": by_country,
        }
