"""Game API routes consumed by the frontend."""

import logging
import re
from contextlib import contextmanager
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from boxtobox.board.precompute import GRID_SIZE
from boxtobox.config import get_settings
from boxtobox.exceptions import MissingParameterError, UpstreamQueryError
from boxtobox.models import RESOLVE_TYPES
from boxtobox.schemas import (
    AthleteDetailsOut,
    AutocompleteItem,
    EntityOut,
    GeneratedBoardOut,
    LocalDbStatsOut,
    LocalPlayerOut,
    MatchResultOut,
    PlayerCandidateOut,
    PrecomputeRequest,
    PrecomputeResponse,
)
from boxtobox.security import limiter
from boxtobox.state import AppServices, get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["game"])
settings = get_settings()

_QID_RE = re.compile(r"^Q\d+$")
AUTOCOMPLETE_MIN_QUERY = 2
AUTOCOMPLETE_MAX_LIMIT = 50


@contextmanager
def upstream_errors(action: str):
    """Re-raise upstream failures with an endpoint-specific error message."""
    try:
        yield
    except UpstreamQueryError as e:
        logger.error(f"[API] {action}: {e.details}")
        raise UpstreamQueryError(action, details=e.details) from e


def _require(value: Optional[str], message: str) -> str:
    if value is None or not value.strip():
        raise MissingParameterError(message)
    return value.strip()


def _require_qid(value: Optional[str]) -> str:
    qid = _require(value, "playerQ parameter is required")
    if not _QID_RE.match(qid):
        raise MissingParameterError("playerQ must be a Wikidata id", details=f"Invalid id: {qid}")
    return qid


@router.get("/resolve-entity", response_model=list[EntityOut])
async def resolve_entity(
    label: Optional[str] = Query(None),
    type: str = Query("auto"),
    services: AppServices = Depends(get_services),
):
    """Resolve a grid label to candidate entities, most popular first."""
    label = _require(label, "Label parameter is required")
    if type not in RESOLVE_TYPES:
        raise MissingParameterError(
            "Invalid type parameter",
            details=f"type must be one of {', '.join(RESOLVE_TYPES)}",
        )

    with upstream_errors("Failed to resolve entity"):
        entities = await services.resolver.resolve(label, type)
    return [EntityOut.model_validate(e) for e in entities]


@router.get("/player-by-name", response_model=list[PlayerCandidateOut])
async def player_by_name(
    name: Optional[str] = Query(None),
    services: AppServices = Depends(get_services),
):
    name = _require(name, "Name parameter is required")
    with upstream_errors("Failed to find player"):
        candidates = await services.matcher.find_athletes_by_name(name)
    return [PlayerCandidateOut.model_validate(c) for c in candidates]


@router.get("/check-player", response_model=MatchResultOut)
async def check_player(
    playerQ: Optional[str] = Query(None),
    rowLabel: Optional[str] = Query(None),
    colLabel: Optional[str] = Query(None),
    services: AppServices = Depends(get_services),
):
    """Validate a guess for one cell: nationality (row) OR club (column)."""
    message = "playerQ, rowLabel, and colLabel parameters are required"
    _require(playerQ, message)
    row_label = _require(rowLabel, message)
    col_label = _require(colLabel, message)
    athlete_id = _require_qid(playerQ)

    with upstream_errors("Failed to check player"):
        result = await services.matcher.check_athlete_against_labels(athlete_id, row_label, col_label)

    logger.info(
        f"[API] check-player {athlete_id} vs {row_label} x {col_label}: valid={result.valid}"
    )
    return MatchResultOut.model_validate(result)


@router.get("/player-details", response_model=AthleteDetailsOut)
async def player_details(
    playerQ: Optional[str] = Query(None),
    services: AppServices = Depends(get_services),
):
    athlete_id = _require_qid(playerQ)
    with upstream_errors("Failed to get player details"):
        details = await services.matcher.get_athlete_details(athlete_id)
    return AthleteDetailsOut.model_validate(details)


@router.post("/precompute-board", response_model=PrecomputeResponse)
async def precompute_board(
    body: PrecomputeRequest,
    services: AppServices = Depends(get_services),
):
    """
    Precompute every valid answer of a board.

    When sessionId is sent, the response carries the generation token of
    this request and stale=True if a newer request for the same session
    started while this one was running.
    """
    if (
        not body.row_labels
        or not body.col_labels
        or len(body.row_labels) != GRID_SIZE
        or len(body.col_labels) != GRID_SIZE
    ):
        raise MissingParameterError("rowLabels and colLabels arrays with 3 items each are required")

    generation = services.guard.begin(body.session_id)
    with upstream_errors("Failed to precompute board"):
        board = await services.precomputer.precompute_board(body.row_labels, body.col_labels)

    stale = not services.guard.is_current(body.session_id, generation)
    if stale:
        logger.info(f"[API] Precompute generation {generation} superseded for session {body.session_id}")

    return PrecomputeResponse.model_validate(
        {
            "cells": board.cells,
            "all_athletes": board.all_athletes,
            "player_count": board.player_count,
            "generation": generation,
            "stale": stale,
        },
        from_attributes=True,
    )


@router.get("/autocomplete", response_model=list[AutocompleteItem])
async def autocomplete(
    query: Optional[str] = Query(None),
    limit: int = Query(10, ge=1, le=AUTOCOMPLETE_MAX_LIMIT),
    services: AppServices = Depends(get_services),
):
    """Player suggestions for the guess input. Short queries return []."""
    if not query or len(query.strip()) < AUTOCOMPLETE_MIN_QUERY:
        return []
    suggestions = await services.matcher.autocomplete(query.strip(), limit)
    return [AutocompleteItem.model_validate(s) for s in suggestions]


@router.get("/generate-board", response_model=GeneratedBoardOut)
@limiter.limit(settings.RATE_LIMIT_GENERATE_BOARD)
async def generate_board(request: Request, services: AppServices = Depends(get_services)):
    """Random board whose 9 cells all have an answer (or the fallback board)."""
    board = await services.generator.generate(max_attempts=services.settings.BOARD_MAX_ATTEMPTS)
    return GeneratedBoardOut.model_validate(board)


@router.get("/local-players", response_model=list[LocalPlayerOut])
async def local_players(
    query: Optional[str] = Query(None),
    services: AppServices = Depends(get_services),
):
    """Name search over the local player database."""
    query = _require(query, "Query parameter is required")
    return [LocalPlayerOut.model_validate(p) for p in services.local_index.search_by_name(query)]


@router.get("/local-db/stats", response_model=LocalDbStatsOut)
async def local_db_stats(services: AppServices = Depends(get_services)):
    return LocalDbStatsOut.model_validate(services.local_index.stats())

