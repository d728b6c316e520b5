"""
Random board generation with validation and a guaranteed fallback.

Loop (bounded by max_attempts):
    sample category counts -> sample labels -> lay out rows/cols
    -> validate all 9 cells -> accept if none is empty
On exhaustion the fixed FALLBACK_BOARD is returned so the UI always has a
playable board.

Countries are only ever placed in rows: a country x country cell would ask
for two nationalities at once, which the matching rule cannot answer.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Optional, Sequence

from boxtobox.board.precompute import GRID_SIZE, CellQuery, grid_keys
from boxtobox.exceptions import UpstreamQueryError
from boxtobox.matching.resolver import EntityResolver
from boxtobox.matching.similarity import get_best_match
from boxtobox.models import Entity, GeneratedBoard
from boxtobox.telemetry.metrics import record_board_generation, record_cell_query

logger = logging.getLogger(__name__)

COUNTRIES = [
    "Argentina", "Brazil", "Spain", "Germany", "France", "Italy", "England",
    "Portugal", "Netherlands", "Belgium", "Croatia", "Uruguay", "Mexico",
]

CLUBS = [
    "Barcelona", "Real Madrid", "Manchester United", "Liverpool", "Chelsea",
    "Manchester City", "Arsenal", "Bayern Munich", "Borussia Dortmund", "PSG",
    "Juventus", "AC Milan", "Inter Milan", "Atletico Madrid", "Tottenham",
]

ACHIEVEMENTS = [
    "World Cup Winner",
    "Champions League Winner",
    "Ballon d'Or Winner",
]

MAX_ACHIEVEMENTS = 2

FALLBACK_BOARD = GeneratedBoard(
    row_labels=["Argentina", "Brazil", "Spain"],
    col_labels=["Barcelona", "Real Madrid", "Manchester United"],
    is_valid=True,
    empty_cells=[],
)


@dataclass(frozen=True)
class Category:
    label: str
    type: str  # "country", "club" or "achievement"


@dataclass
class BoardValidation:
    is_valid: bool
    empty_cells: list[str]


def sample_layout(rng: random.Random) -> tuple[list[Category], list[Category]]:
    """
    Sample 6 categories and split them into 3 rows and 3 columns.

    achievements in [0, 2], countries in [1, min(3, remaining)], clubs fill
    the rest. All countries go to rows; clubs and achievements are shuffled
    and sliced to complete the rows, the remainder become columns.
    """
    slots = GRID_SIZE * 2
    num_achievements = rng.randint(0, MAX_ACHIEVEMENTS)
    num_countries = rng.randint(1, min(GRID_SIZE, slots - num_achievements))
    num_clubs = slots - num_achievements - num_countries

    countries = [Category(label, "country") for label in rng.sample(COUNTRIES, num_countries)]
    others = [Category(label, "club") for label in rng.sample(CLUBS, num_clubs)]
    others += [Category(label, "achievement") for label in rng.sample(ACHIEVEMENTS, num_achievements)]
    rng.shuffle(others)

    needed = GRID_SIZE - len(countries)
    rows = countries + others[:needed]
    cols = others[needed:]
    rng.shuffle(rows)
    return rows, cols


class BoardGenerator:
    """Generates random boards whose 9 cells all have at least one answer."""

    def __init__(
        self,
        resolver: EntityResolver,
        cell_query: CellQuery,
        rng: Optional[random.Random] = None,
    ):
        self.resolver = resolver
        self.cell_query = cell_query
        self.rng = rng or random.Random()

    async def _resolve_category(self, category: Category) -> Optional[Entity]:
        try:
            entities = await self.resolver.resolve(category.label, category.type)
        except UpstreamQueryError as e:
            logger.warning(f"[BOARD] Could not resolve '{category.label}': {e.details}")
            return None
        return get_best_match(category.label, entities)

    async def validate_board(
        self,
        rows: Sequence[Category],
        cols: Sequence[Category],
    ) -> BoardValidation:
        """Check that every cell has at least one athlete. Errors count as empty cells."""
        resolved = await asyncio.gather(*(self._resolve_category(c) for c in [*rows, *cols]))
        row_entities, col_entities = resolved[:GRID_SIZE], resolved[GRID_SIZE:]

        empty_cells: list[str] = []
        pending: list[tuple[str, Awaitable]] = []
        for r, c, key in grid_keys():
            row_entity, col_entity = row_entities[r], col_entities[c]
            if row_entity is None or col_entity is None:
                empty_cells.append(key)
                continue
            pending.append((key, self.cell_query.athletes_for(row_entity, col_entity)))

        outcomes = await asyncio.gather(*(coro for _, coro in pending), return_exceptions=True)
        for (key, _), outcome in zip(pending, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"[BOARD] Cell {key} error: {outcome}")
                record_cell_query("error")
                empty_cells.append(key)
            elif isinstance(outcome, BaseException):
                raise outcome
            elif not outcome:
                record_cell_query("empty")
                empty_cells.append(key)
            else:
                record_cell_query("ok")

        empty_cells.sort(key=lambda k: tuple(int(p) for p in k.split("-")))
        return BoardValidation(is_valid=not empty_cells, empty_cells=empty_cells)

    async def generate(self, max_attempts: int = 10) -> GeneratedBoard:
        """Generate a validated board, or the fallback board after max_attempts."""
        logger.info("[BOARD] Starting board generation...")

        for attempt in range(1, max_attempts + 1):
            rows, cols = sample_layout(self.rng)
            row_labels = [c.label for c in rows]
            col_labels = [c.label for c in cols]
            logger.info(f"[BOARD] Attempt {attempt}/{max_attempts}: rows={row_labels} cols={col_labels}")

            validation = await self.validate_board(rows, cols)
            if validation.is_valid:
                logger.info(f"[BOARD] Valid board generated on attempt {attempt}")
                record_board_generation("accepted", attempt)
                return GeneratedBoard(
                    row_labels=row_labels,
                    col_labels=col_labels,
                    is_valid=True,
                    empty_cells=[],
                )

            logger.info(
                f"[BOARD] Invalid board ({len(validation.empty_cells)} empty cells): "
                f"{validation.empty_cells}"
            )

        logger.warning(f"[BOARD] No valid board after {max_attempts} attempts, using fallback")
        record_board_generation("fallback", max_attempts)
        return GeneratedBoard(
            row_labels=list(FALLBACK_BOARD.row_labels),
            col_labels=list(FALLBACK_BOARD.col_labels),
            is_valid=FALLBACK_BOARD.is_valid,
            empty_cells=[],
        )
