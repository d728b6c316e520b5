"""
Board precomputation: 9 concurrent cell queries folded into one
athlete -> valid cells index.

Cells are independent. A failing cell degrades to an empty CellResult and
never cancels its siblings (asyncio.gather with return_exceptions=True).
"""

import asyncio
import logging
from typing import Optional, Sequence

from boxtobox.matching.local_index import LocalAchievementIndex
from boxtobox.matching.matcher import CriterionMatcher
from boxtobox.matching.normalization import fold
from boxtobox.matching.resolver import achievement_entity
from boxtobox.models import (
    AthleteRef,
    BoardPrecomputation,
    CellResult,
    Entity,
    IndexedAthlete,
)
from boxtobox.telemetry.metrics import record_cell_query

logger = logging.getLogger(__name__)

GRID_SIZE = 3


def cell_key(row: int, col: int) -> str:
    return f"{row}-{col}"


def grid_keys() -> list[tuple[int, int, str]]:
    """All (row, col, key) triples in row-major order."""
    return [(r, c, cell_key(r, c)) for r in range(GRID_SIZE) for c in range(GRID_SIZE)]


class CellQuery:
    """Routes a resolved cell to the local index or the live matcher."""

    def __init__(self, matcher: CriterionMatcher, local_index: LocalAchievementIndex):
        self.matcher = matcher
        self.local_index = local_index

    async def athletes_for(self, row_entity: Entity, col_entity: Entity) -> list[AthleteRef]:
        if row_entity.is_achievement or col_entity.is_achievement:
            return self.local_index.find(row_entity, col_entity)
        return await self.matcher.match_both(
            row_entity.id,
            col_entity.id,
            row_type=row_entity.type,
            col_type=col_entity.type,
        )


class BoardPrecomputer:
    """Computes every valid answer of a 3x3 board."""

    def __init__(self, matcher: CriterionMatcher, cell_query: CellQuery):
        self.matcher = matcher
        self.cell_query = cell_query

    async def _axis_entity(self, label: str, primary: str, fallback: str) -> Optional[Entity]:
        achievement = achievement_entity(label)
        if achievement is not None:
            return achievement
        return await self.matcher.resolve_best(label, primary, fallback)

    async def compute_cell(self, row_label: str, col_label: str) -> CellResult:
        """
        Resolve one cell and fetch its athletes (AND rule).

        Rows are nationality criteria and columns are club criteria; the
        opposite type is only tried when the primary one resolves nothing.
        """
        row_entity = await self._axis_entity(row_label, "country", "club")
        col_entity = await self._axis_entity(col_label, "club", "country")

        if row_entity is None or col_entity is None:
            logger.info(f"[PRECOMPUTE] Could not resolve both labels: {row_label} x {col_label}")
            return CellResult(
                row_entity=row_entity,
                col_entity=col_entity,
                athletes=[],
                message="Could not resolve both labels",
            )

        athletes = await self.cell_query.athletes_for(row_entity, col_entity)
        return CellResult(row_entity=row_entity, col_entity=col_entity, athletes=athletes)

    async def precompute_board(
        self,
        row_labels: Sequence[str],
        col_labels: Sequence[str],
    ) -> BoardPrecomputation:
        """
        Precompute all 9 cells concurrently and invert them into an index.

        Raises:
            ValueError: if either axis does not have exactly 3 labels.
        """
        if len(row_labels) != GRID_SIZE or len(col_labels) != GRID_SIZE:
            raise ValueError("rowLabels and colLabels must have 3 items each")

        logger.info(f"[PRECOMPUTE] Starting board: {list(row_labels)} x {list(col_labels)}")
        keys = grid_keys()
        outcomes = await asyncio.gather(
            *(self.compute_cell(row_labels[r], col_labels[c]) for r, c, _ in keys),
            return_exceptions=True,
        )

        cells: dict[str, CellResult] = {}
        for (_, _, key), outcome in zip(keys, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"[PRECOMPUTE] Cell {key} failed: {outcome}")
                record_cell_query("error")
                outcome = CellResult.empty()
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                record_cell_query("ok" if outcome.count else "empty")
            cells[key] = outcome

        all_athletes = build_validity_index(cells)
        logger.info(f"[PRECOMPUTE] Precomputed {len(all_athletes)} unique players across all cells")
        return BoardPrecomputation(cells=cells, all_athletes=all_athletes)


def build_validity_index(cells: dict[str, CellResult]) -> list[IndexedAthlete]:
    """
    Invert cell results into one entry per (case-folded) athlete name.

    valid_cells follows row-major order because cells are visited 0-0 .. 2-2.
    """
    by_name: dict[str, IndexedAthlete] = {}
    for _, _, key in grid_keys():
        cell = cells.get(key)
        if cell is None:
            continue
        for athlete in cell.athletes:
            entry = by_name.setdefault(
                fold(athlete.label),
                IndexedAthlete(id=athlete.id, label=athlete.label),
            )
            if key not in entry.valid_cells:
                entry.valid_cells.append(key)
    return list(by_name.values())


def find_player_cells(name: str, board: BoardPrecomputation) -> Optional[IndexedAthlete]:
    """Locate a typed name in the board index: exact match first, then partial."""
    wanted = fold(name)
    if not wanted:
        return None

    for athlete in board.all_athletes:
        if fold(athlete.label) == wanted:
            return athlete

    for athlete in board.all_athletes:
        label = fold(athlete.label)
        if wanted in label or label in wanted:
            return athlete
    return None


def validate_against_precomputed(name: str, cell: Optional[CellResult]) -> Optional[AthleteRef]:
    """Return the athlete of a precomputed cell matching the typed name, if any."""
    if cell is None:
        return None
    wanted = fold(name)
    if not wanted:
        return None
    return next(
        (a for a in cell.athletes if fold(a.label) == wanted or wanted in fold(a.label)),
        None,
    )
