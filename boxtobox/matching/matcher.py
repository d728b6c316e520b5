"""
Criterion matching against Wikidata.

Two rules live here:
- AND (match_both): every athlete satisfying both criteria of a cell.
  Used to precompute valid answers. Failures degrade to [].
- OR (check_athlete_against_labels): the game rule for a single guess.
  A guess is valid if the row OR the column criterion holds.
"""

import logging
from typing import Optional

from boxtobox.exceptions import UpstreamQueryError
from boxtobox.matching.resolver import EntityResolver
from boxtobox.matching.similarity import get_best_match, rank_by_similarity
from boxtobox.models import (
    AthleteDetails,
    AthleteRef,
    ClubSpell,
    Entity,
    MatchDetails,
    MatchResult,
    PlayerCandidate,
)
from boxtobox.wikidata import queries
from boxtobox.wikidata.client import WikidataClient

logger = logging.getLogger(__name__)

NATIONALITY_PROPERTY = "P27 (country of citizenship)"
CLUB_PROPERTY = "P54 (member of sports team)"

# Autocomplete description/label filters
_FOOTBALL_KEYWORDS = ("football", "soccer")
_EXCLUDED_DESCRIPTION_KEYWORDS = (
    "video game", "game of", "film", "movie", "album", "song",
    "television", "manga", "book",
)
_EXCLUDED_LABEL_KEYWORDS = ("soccer 64", "trial", "career", " game ", "the game")
_SEARCH_API_MAX_LIMIT = 50


def format_period(start_year: Optional[int], end_year: Optional[int]) -> str:
    """Human readable club spell: "2014–2021", "2022–present", "unknown–2020"."""
    if not start_year and not end_year:
        return "unknown period"
    if start_year and not end_year:
        return f"{start_year}–present"
    if not start_year:
        return f"unknown–{end_year}"
    return f"{start_year}–{end_year}"


def is_football_search_hit(item: dict) -> bool:
    """Keep football-related search hits, drop games/films/albums and similar."""
    description = (item.get("description") or "").lower()
    label = (item.get("label") or "").lower()

    if any(k in description for k in _EXCLUDED_DESCRIPTION_KEYWORDS):
        return False
    if any(k in label for k in _EXCLUDED_LABEL_KEYWORDS):
        return False
    return any(k in description for k in _FOOTBALL_KEYWORDS)


class CriterionMatcher:
    """Live Wikidata queries for cells, guesses and athlete lookups."""

    def __init__(self, client: WikidataClient, resolver: EntityResolver):
        self.client = client
        self.resolver = resolver

    # ------------------------------------------------------------------
    # AND rule
    # ------------------------------------------------------------------

    async def match_both(
        self,
        row_id: Optional[str],
        col_id: Optional[str],
        row_type: str = "country",
        col_type: str = "club",
    ) -> list[AthleteRef]:
        """
        All athletes satisfying both criteria (no result limit).

        Returns [] when either id is missing or when the query fails.
        """
        if not row_id or not col_id:
            logger.debug("[MATCHER] Both criteria required for AND query")
            return []

        try:
            row_pattern = queries.CRITERION_PATTERNS[row_type].format(qid=row_id)
            col_pattern = queries.CRITERION_PATTERNS[col_type].format(qid=col_id)
        except KeyError:
            logger.warning(f"[MATCHER] Unsupported criterion types: {row_type} x {col_type}")
            return []

        query = queries.MATCH_BOTH_QUERY.format(
            row_pattern=row_pattern,
            col_pattern=col_pattern,
            lang=self.client.language,
        )

        try:
            bindings = await self.client.execute_sparql(query)
        except UpstreamQueryError as e:
            logger.warning(f"[MATCHER] AND query failed for {row_id} x {col_id}: {e.details}")
            return []

        athletes: dict[str, AthleteRef] = {}
        for binding in bindings:
            uri = queries.binding_value(binding, "player")
            if not uri:
                continue
            qid = queries.qid_from_uri(uri)
            athletes.setdefault(
                qid, AthleteRef(id=qid, label=queries.binding_value(binding, "playerLabel") or qid)
            )

        logger.info(f"[MATCHER] {row_id} x {col_id}: {len(athletes)} athletes")
        return list(athletes.values())

    # ------------------------------------------------------------------
    # OR rule
    # ------------------------------------------------------------------

    async def resolve_best(self, label: str, primary: str, fallback: str) -> Optional[Entity]:
        """Resolve with the primary type, trying the opposite type if nothing matched."""
        entities = await self.resolver.resolve(label, primary)
        if not entities:
            entities = await self.resolver.resolve(label, fallback)
        return get_best_match(label, entities)

    @staticmethod
    def _criterion_details(entity: Optional[Entity], details: AthleteDetails) -> Optional[MatchDetails]:
        if entity is None:
            return None

        if entity.type == "country":
            if any(c.id == entity.id for c in details.countries):
                return MatchDetails(
                    type="nationality",
                    property=NATIONALITY_PROPERTY,
                    entity=entity.label,
                    id=entity.id,
                )
            return None

        if entity.type == "club":
            spell = next((c for c in details.clubs if c.id == entity.id), None)
            if spell is not None:
                return MatchDetails(
                    type="club",
                    property=CLUB_PROPERTY,
                    entity=entity.label,
                    id=entity.id,
                    period=format_period(spell.start_year, spell.end_year),
                )
        return None

    async def check_athlete_against_labels(
        self,
        athlete_id: str,
        row_label: str,
        col_label: str,
    ) -> MatchResult:
        """
        Validate a guess with the game rule: row OR column must hold.

        Rows are resolved as countries (clubs as fallback), columns as clubs
        (countries as fallback).

        Raises:
            UpstreamQueryError: if Wikidata cannot be reached.
        """
        details = await self.get_athlete_details(athlete_id)
        row_entity = await self.resolve_best(row_label, "country", "club")
        col_entity = await self.resolve_best(col_label, "club", "country")

        row_details = self._criterion_details(row_entity, details)
        col_details = self._criterion_details(col_entity, details)

        return MatchResult(
            valid=row_details is not None or col_details is not None,
            row_match=row_details is not None,
            col_match=col_details is not None,
            row_match_details=row_details,
            col_match_details=col_details,
            player_details=details,
        )

    # ------------------------------------------------------------------
    # Athlete lookups
    # ------------------------------------------------------------------

    async def get_athlete_details(self, athlete_id: str) -> AthleteDetails:
        """Nationalities (unique) and club spells of an athlete."""
        query = queries.PLAYER_DETAILS_QUERY.format(qid=athlete_id, lang=self.client.language)
        bindings = await self.client.execute_sparql(query)

        countries: dict[str, AthleteRef] = {}
        clubs: list[ClubSpell] = []
        for binding in bindings:
            country_uri = queries.binding_value(binding, "country")
            if country_uri:
                qid = queries.qid_from_uri(country_uri)
                countries.setdefault(
                    qid, AthleteRef(id=qid, label=queries.binding_value(binding, "countryLabel") or qid)
                )
            club_uri = queries.binding_value(binding, "club")
            if club_uri:
                qid = queries.qid_from_uri(club_uri)
                spell = ClubSpell(
                    id=qid,
                    label=queries.binding_value(binding, "clubLabel") or qid,
                    start_year=queries.year_from_binding(binding, "startTime"),
                    end_year=queries.year_from_binding(binding, "endTime"),
                )
                # Country rows multiply club rows in the result set
                if spell not in clubs:
                    clubs.append(spell)

        return AthleteDetails(countries=list(countries.values()), clubs=clubs)

    async def find_athletes_by_name(self, name: str) -> list[PlayerCandidate]:
        """Footballers whose label/alias matches name, most similar first."""
        query = queries.FIND_PLAYER_BY_NAME_QUERY.format(
            name=queries.escape_literal(name.strip()),
            lang=self.client.language,
        )
        bindings = await self.client.execute_sparql(query)

        candidates: dict[str, PlayerCandidate] = {}
        for binding in bindings:
            uri = queries.binding_value(binding, "player")
            if not uri:
                continue
            qid = queries.qid_from_uri(uri)
            if qid in candidates:
                continue
            candidates[qid] = PlayerCandidate(
                id=qid,
                label=queries.binding_value(binding, "playerLabel") or qid,
                birth_year=queries.year_from_binding(binding, "dob"),
                place_of_birth=queries.binding_value(binding, "pobLabel"),
                description=queries.binding_value(binding, "description") or "",
            )

        return rank_by_similarity(name, list(candidates.values()))

    async def autocomplete(self, query: str, limit: int = 10) -> list[dict]:
        """
        Fast player suggestions from the search API.

        Fail-open: returns [] on upstream error.
        """
        try:
            hits = await self.client.search_entities(query, min(limit * 5, _SEARCH_API_MAX_LIMIT))
        except UpstreamQueryError as e:
            logger.warning(f"[AUTOCOMPLETE] Search failed for '{query}': {e.details}")
            return []

        results = [
            {"id": item.get("id"), "label": item.get("label"), "description": item.get("description") or ""}
            for item in hits
            if is_football_search_hit(item)
        ][:limit]
        logger.info(f"[AUTOCOMPLETE] '{query}' -> {len(results)} results")
        return results
