"""
Entity resolution: free-text label -> ranked list of Entity.

Cascade:
- achievement alias table (local sentinels, never queried)
- club override table (generic label match is unreliable for short club names)
- Wikidata SPARQL label/altLabel match, constrained by type, ranked by sitelinks
"""

import logging
from typing import Optional

from boxtobox.matching.normalization import normalize_label
from boxtobox.models import (
    BALLON_DOR,
    CHAMPIONS_LEAGUE,
    RESOLVE_TYPES,
    WORLD_CUP,
    Entity,
)
from boxtobox.wikidata import queries
from boxtobox.wikidata.client import WikidataClient

logger = logging.getLogger(__name__)

OVERRIDE_POPULARITY = 9999

# Key: normalize_label() of the input. Value: (Wikidata QID, display name).
# The display name is what the local index matches club memberships against,
# so it must match the club names of the player database.
CLUB_OVERRIDES: dict[str, tuple[str, str]] = {
    "barcelona": ("Q7156", "Barcelona"),
    "real madrid": ("Q8682", "Real Madrid"),
    "manchester united": ("Q18656", "Manchester United"),
    "man united": ("Q18656", "Manchester United"),
    "man utd": ("Q18656", "Manchester United"),
    "chelsea": ("Q9616", "Chelsea"),
    "arsenal": ("Q9617", "Arsenal"),
    "liverpool": ("Q1130849", "Liverpool"),
    "bayern munich": ("Q15789", "Bayern Munich"),
    "bayern": ("Q15789", "Bayern Munich"),
    "borussia dortmund": ("Q41420", "Borussia Dortmund"),
    "dortmund": ("Q41420", "Borussia Dortmund"),
    "juventus": ("Q1422", "Juventus"),
    "juve": ("Q1422", "Juventus"),
    "milan": ("Q1543", "AC Milan"),  # also "AC Milan" (org token stripped)
    "inter milan": ("Q631", "Inter Milan"),
    "inter": ("Q631", "Inter Milan"),
    "psg": ("Q483020", "PSG"),
    "paris saint germain": ("Q483020", "PSG"),
    "manchester city": ("Q50602", "Manchester City"),
    "man city": ("Q50602", "Manchester City"),
    "tottenham": ("Q18741", "Tottenham"),
    "tottenham hotspur": ("Q18741", "Tottenham"),
    "atletico madrid": ("Q8701", "Atletico Madrid"),
    "atletico": ("Q8701", "Atletico Madrid"),
    "napoli": ("Q2641", "Napoli"),
    "roma": ("Q2739", "Roma"),
}

# Display label, sentinel id and accepted spellings for each achievement
ACHIEVEMENTS: dict[str, tuple[str, tuple[str, ...]]] = {
    WORLD_CUP: ("World Cup Winner", ("World Cup Winner", "World Cup", "FIFA World Cup Winner")),
    CHAMPIONS_LEAGUE: (
        "Champions League Winner",
        ("Champions League Winner", "Champions League", "UEFA Champions League Winner", "UCL Winner"),
    ),
    BALLON_DOR: ("Ballon d'Or Winner", ("Ballon d'Or Winner", "Ballon d'Or", "Ballon dOr")),
}

_ACHIEVEMENT_INDEX: dict[str, str] = {
    normalize_label(alias): achievement_id
    for achievement_id, (_, aliases) in ACHIEVEMENTS.items()
    for alias in aliases
}


def achievement_entity(label: str) -> Optional[Entity]:
    """Return the sentinel Entity if label names an achievement, else None."""
    achievement_id = _ACHIEVEMENT_INDEX.get(normalize_label(label))
    if achievement_id is None:
        return None
    display, _ = ACHIEVEMENTS[achievement_id]
    return Entity(
        id=achievement_id,
        label=display,
        type="achievement",
        popularity=OVERRIDE_POPULARITY,
    )


def club_override_entity(label: str) -> Optional[Entity]:
    """Return the hardcoded club Entity for well-known clubs, else None."""
    override = CLUB_OVERRIDES.get(normalize_label(label))
    if override is None:
        return None
    qid, display = override
    return Entity(id=qid, label=display, type="club", popularity=OVERRIDE_POPULARITY)


class EntityResolver:
    """Resolves grid labels against the override tables and Wikidata."""

    def __init__(self, client: WikidataClient):
        self.client = client

    async def resolve(self, label: str, type: str = "auto") -> list[Entity]:
        """
        Resolve a label to entities ordered by descending popularity.

        Args:
            label: Free text ("Barcelona", "Argentina", "Ballon d'Or Winner").
            type: "auto", "country", "club" or "achievement".

        Returns:
            List of Entity, empty if nothing matches.

        Raises:
            ValueError: unknown type.
            UpstreamQueryError: Wikidata unreachable or timed out.
        """
        if type not in RESOLVE_TYPES:
            raise ValueError(f"Unknown entity type: {type}")

        label = (label or "").strip()
        if not label:
            return []

        if type in ("achievement", "auto"):
            achievement = achievement_entity(label)
            if achievement is not None:
                return [achievement]
            if type == "achievement":
                return []

        if type == "auto":
            # Country first, then club; the caller sees [] only if both miss
            entities = await self._query(label, "country")
            if entities:
                return entities
            return await self.resolve(label, "club")

        if type == "club":
            override = club_override_entity(label)
            if override is not None:
                logger.debug(f"[RESOLVER] Using hardcoded club: {label} -> {override.id}")
                return [override]

        return await self._query(label, type)

    async def _query(self, label: str, type: str) -> list[Entity]:
        type_filter = queries.COUNTRY_TYPE_FILTER if type == "country" else queries.CLUB_TYPE_FILTER
        query = queries.RESOLVE_ENTITY_QUERY.format(
            label=queries.escape_literal(label),
            lang=self.client.language,
            type_filter=type_filter.format(),
        )
        bindings = await self.client.execute_sparql(query)

        entities: dict[str, Entity] = {}
        for binding in bindings:
            uri = queries.binding_value(binding, "entity")
            if not uri:
                continue
            qid = queries.qid_from_uri(uri)
            if qid in entities:
                continue
            try:
                popularity = int(queries.binding_value(binding, "sitelinks") or 0)
            except ValueError:
                popularity = 0
            entities[qid] = Entity(
                id=qid,
                label=queries.binding_value(binding, "entityLabel") or label,
                type=type,
                popularity=popularity,
                source_country=queries.binding_value(binding, "countryLabel") or None,
            )

        ranked = sorted(entities.values(), key=lambda e: e.popularity, reverse=True)
        logger.info(f"[RESOLVER] Resolved {len(ranked)} {type} entities for '{label}'")
        return ranked
