"""Request/response models for the HTTP API.

Domain objects are plain dataclasses; these models only shape them into
camelCase JSON (model_validate reads attributes, including properties such
as CellResult.count).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class EntityOut(CamelModel):
    id: str
    label: str
    type: str
    popularity: int = 0
    source_country: Optional[str] = None


class AthleteRefOut(CamelModel):
    id: str
    label: str


class PlayerCandidateOut(CamelModel):
    id: str
    label: str
    birth_year: Optional[int] = None
    place_of_birth: Optional[str] = None
    description: str = ""


class ClubSpellOut(CamelModel):
    id: str
    label: str
    start_year: Optional[int] = None
    end_year: Optional[int] = None


class AthleteDetailsOut(CamelModel):
    countries: list[AthleteRefOut]
    clubs: list[ClubSpellOut]


class MatchDetailsOut(CamelModel):
    type: str
    property: str
    entity: str
    id: str
    period: Optional[str] = None


class MatchResultOut(CamelModel):
    valid: bool
    row_match: bool
    col_match: bool
    row_match_details: Optional[MatchDetailsOut] = None
    col_match_details: Optional[MatchDetailsOut] = None
    player_details: Optional[AthleteDetailsOut] = None


class CellResultOut(CamelModel):
    row_entity: Optional[EntityOut] = None
    col_entity: Optional[EntityOut] = None
    athletes: list[AthleteRefOut]
    count: int
    message: Optional[str] = None


class IndexedAthleteOut(CamelModel):
    id: str
    label: str
    valid_cells: list[str]


class PrecomputeRequest(CamelModel):
    # Optional so a missing array surfaces as a 400 with the error shape
    row_labels: Optional[list[str]] = None
    col_labels: Optional[list[str]] = None
    session_id: Optional[str] = None


class PrecomputeResponse(CamelModel):
    cells: dict[str, CellResultOut]
    all_athletes: list[IndexedAthleteOut]
    player_count: int
    generation: int
    stale: bool = False


class AutocompleteItem(CamelModel):
    id: str
    label: str
    description: str = ""


class GeneratedBoardOut(CamelModel):
    row_labels: list[str]
    col_labels: list[str]
    is_valid: bool
    empty_cells: list[str] = []


class LocalPlayerOut(CamelModel):
    id: str
    label: str
    country: Optional[str] = None
    years: Optional[str] = None
    clubs: list[str] = []


class LocalDbStatsOut(CamelModel):
    total_players: int
    with_clubs: int
    world_cup_winners: int
    champions_league_winners: int
    ballon_dor_winners: int
    by_country: dict[str, int]
