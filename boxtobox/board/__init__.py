"""Board precomputation, random generation and generation tokens."""

from boxtobox.board.generator import FALLBACK_BOARD, BoardGenerator, sample_layout
from boxtobox.board.guard import GenerationGuard
from boxtobox.board.precompute import (
    BoardPrecomputer,
    CellQuery,
    build_validity_index,
    find_player_cells,
    validate_against_precomputed,
)

__all__ = [
    "BoardGenerator",
    "BoardPrecomputer",
    "CellQuery",
    "FALLBACK_BOARD",
    "GenerationGuard",
    "build_validity_index",
    "find_player_cells",
    "sample_layout",
    "validate_against_precomputed",
]
