"""Domain data transfer objects."""

from dataclasses import dataclass, field
from typing import Optional

ENTITY_TYPES = ("country", "club", "achievement")
RESOLVE_TYPES = ("auto",) + ENTITY_TYPES

# Sentinel ids for facts served by the local achievement index
WORLD_CUP = "WORLD_CUP"
CHAMPIONS_LEAGUE = "CHAMPIONS_LEAGUE"
BALLON_DOR = "BALLON_DOR"
MANUAL_ID_PREFIX = "MANUAL_"


@dataclass(frozen=True)
class Entity:
    """A resolved country, club or achievement."""

    id: str
    label: str
    type: str  # "country", "club" or "achievement"
    popularity: int = 0  # Wikidata sitelinks count
    source_country: Optional[str] = None

    @property
    def is_achievement(self) -> bool:
        return self.type == "achievement"


@dataclass(frozen=True)
class AthleteRef:
    """Minimal athlete reference returned by cell queries."""

    id: str
    label: str


def _unique_strings(values) -> list[str]:
    """Stringify and drop repeats, keeping first-seen order."""
    return list(dict.fromkeys(str(v) for v in values or []))


@dataclass
class AthleteRecord:
    """Athlete row of the local player database."""

    name: str
    id: str
    country: Optional[str] = None
    clubs: list[str] = field(default_factory=list)
    world_cup_winner: bool = False
    world_cup_years: list[str] = field(default_factory=list)
    champions_league_winner: bool = False
    champions_league_years: list[str] = field(default_factory=list)
    ballon_dor: bool = False
    ballon_dor_years: list[str] = field(default_factory=list)

    @property
    def is_manual(self) -> bool:
        return self.id.startswith(MANUAL_ID_PREFIX)

    @property
    def achievement_count(self) -> int:
        return int(self.world_cup_winner) + int(self.champions_league_winner) + int(self.ballon_dor)

    @classmethod
    def from_dict(cls, data: dict) -> "AthleteRecord":
        return cls(
            name=data["name"],
            id=data["id"],
            country=data.get("country"),
            clubs=list(dict.fromkeys(data.get("clubs") or [])),
            world_cup_winner=bool(data.get("world_cup_winner")),
            world_cup_years=_unique_strings(data.get("world_cup_years")),
            champions_league_winner=bool(data.get("champions_league_winner")),
            champions_league_years=_unique_strings(data.get("champions_league_years")),
            ballon_dor=bool(data.get("ballon_dor")),
            ballon_dor_years=_unique_strings(data.get("ballon_dor_years")),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "id": self.id,
            "country": self.country,
            "clubs": self.clubs,
            "world_cup_winner": self.world_cup_winner,
            "world_cup_years": self.world_cup_years,
            "champions_league_winner": self.champions_league_winner,
            "champions_league_years": self.champions_league_years,
            "ballon_dor": self.ballon_dor,
            "ballon_dor_years": self.ballon_dor_years,
        }


@dataclass
class CellResult:
    """Athletes satisfying both criteria of one grid cell."""

    row_entity: Optional[Entity]
    col_entity: Optional[Entity]
    athletes: list[AthleteRef] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.athletes)

    @classmethod
    def empty(cls, message: Optional[str] = None) -> "CellResult":
        return cls(row_entity=None, col_entity=None, athletes=[], message=message)


@dataclass
class IndexedAthlete:
    """Entry of the board validity index."""

    id: str
    label: str
    valid_cells: list[str] = field(default_factory=list)  # row-major "row-col" keys


@dataclass
class BoardPrecomputation:
    cells: dict[str, CellResult]
    all_athletes: list[IndexedAthlete]

    @property
    def player_count(self) -> int:
        return len(self.all_athletes)


@dataclass
class ClubSpell:
    id: str
    label: str
    start_year: Optional[int] = None
    end_year: Optional[int] = None


@dataclass
class AthleteDetails:
    """Nationalities and club history of an athlete."""

    countries: list[AthleteRef] = field(default_factory=list)
    clubs: list[ClubSpell] = field(default_factory=list)


@dataclass
class MatchDetails:
    type: str  # "nationality" or "club"
    property: str
    entity: str
    id: str
    period: Optional[str] = None


@dataclass
class MatchResult:
    """Outcome of checking one guess against a cell (OR rule)."""

    valid: bool
    row_match: bool
    col_match: bool
    row_match_details: Optional[MatchDetails] = None
    col_match_details: Optional[MatchDetails] = None
    player_details: Optional[AthleteDetails] = None


@dataclass
class PlayerCandidate:
    """Athlete found by name search."""

    id: str
    label: str
    birth_year: Optional[int] = None
    place_of_birth: Optional[str] = None
    description: str = ""


@dataclass
class GeneratedBoard:
    row_labels: list[str]
    col_labels: list[str]
    is_valid: bool
    empty_cells: list[str] = field(default_factory=list)
