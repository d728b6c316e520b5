"""
Offline construction of the local player database.

Curated achievement records are merged first (MANUAL_* ids), then squad
members of the top clubs are pulled from Wikidata, and the whole list is
deduplicated by case-folded name (a curated record always wins).

Run through scripts/build_player_database.py.
"""

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Union

from boxtobox.exceptions import UpstreamQueryError
from boxtobox.matching.local_index import deduplicate_athletes
from boxtobox.matching.normalization import fold
from boxtobox.models import MANUAL_ID_PREFIX, AthleteRecord
from boxtobox.wikidata import queries
from boxtobox.wikidata.client import WikidataClient

logger = logging.getLogger(__name__)

# Big five league clubs scraped for squad members (QID -> display name)
TOP_CLUBS = {
    "Q7156": "Barcelona",
    "Q8682": "Real Madrid",
    "Q8701": "Atletico Madrid",
    "Q18656": "Manchester United",
    "Q50602": "Manchester City",
    "Q9616": "Chelsea",
    "Q1130849": "Liverpool",
    "Q9617": "Arsenal",
    "Q18741": "Tottenham",
    "Q1422": "Juventus",
    "Q1543": "AC Milan",
    "Q631": "Inter Milan",
    "Q2641": "Napoli",
    "Q2739": "Roma",
    "Q15789": "Bayern Munich",
    "Q41420": "Borussia Dortmund",
    "Q483020": "PSG",
}

# Checked after the build; a missing or duplicated entry is logged
KEY_PLAYERS = ("Lionel Messi", "Ángel Di María", "Cristiano Ronaldo")


def manual_id(name: str) -> str:
    return MANUAL_ID_PREFIX + re.sub(r"\s", "_", fold(name))


def _add_unique(target: list[str], values) -> None:
    for value in values or []:
        if value and value not in target:
            target.append(value)


def merge_manual_achievements(data: dict) -> dict[str, AthleteRecord]:
    """
    Fold the curated achievement file into records keyed by case-folded name.

    Expected layout:
        {"ballon_dor_winners": [{name, country, clubs, years}],
         "world_cup_winners": {"2022": [{name, country, clubs}]},
         "champions_league_winners": {"2023": [{name, country, clubs}]}}
    """
    players: dict[str, AthleteRecord] = {}

    def record_for(entry: dict) -> AthleteRecord:
        key = fold(entry["name"])
        record = players.get(key)
        if record is None:
            record = AthleteRecord(
                name=entry["name"].strip(),
                id=manual_id(entry["name"]),
                country=entry.get("country"),
            )
            players[key] = record
        elif not record.country:
            record.country = entry.get("country")
        _add_unique(record.clubs, entry.get("clubs"))
        return record

    for entry in data.get("ballon_dor_winners", []):
        record = record_for(entry)
        record.ballon_dor = True
        _add_unique(record.ballon_dor_years, [str(y) for y in entry.get("years", [])])

    for year, entries in (data.get("world_cup_winners") or {}).items():
        for entry in entries:
            record = record_for(entry)
            record.world_cup_winner = True
            _add_unique(record.world_cup_years, [str(year)])

    for year, entries in (data.get("champions_league_winners") or {}).items():
        for entry in entries:
            record = record_for(entry)
            record.champions_league_winner = True
            _add_unique(record.champions_league_years, [str(year)])

    return players


def load_manual_achievements(path: Union[str, Path]) -> dict[str, AthleteRecord]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    players = merge_manual_achievements(data)
    logger.info(f"[BUILDER] Loaded {len(players)} curated players from {path}")
    return players


async def fetch_club_squad(client: WikidataClient, club_qid: str, club_name: str) -> list[AthleteRecord]:
    """All players who were ever members of a club, one record per QID."""
    query = queries.CLUB_SQUAD_QUERY.format(qid=club_qid, lang=client.language)
    bindings = await client.execute_sparql(query)

    records: dict[str, AthleteRecord] = {}
    for binding in bindings:
        uri = queries.binding_value(binding, "player")
        name = queries.binding_value(binding, "playerLabel")
        if not uri or not name:
            continue
        qid = queries.qid_from_uri(uri)
        # Unlabelled items come back with the QID as label
        if name == qid:
            continue
        records.setdefault(
            qid,
            AthleteRecord(
                name=name,
                id=qid,
                country=queries.binding_value(binding, "countryLabel"),
                clubs=[club_name],
            ),
        )

    logger.info(f"[BUILDER] {club_name} ({club_qid}): {len(records)} players")
    return list(records.values())


def merge_squad(players: dict[str, AthleteRecord], squad: list[AthleteRecord], club_name: str) -> None:
    """Add squad members keyed by QID; a player seen before only gains the club."""
    for record in squad:
        existing = players.get(record.id)
        if existing is None:
            players[record.id] = record
            continue
        _add_unique(existing.clubs, [club_name])
        existing.country = existing.country or record.country


async def build_database(
    client: WikidataClient,
    manual_path: Union[str, Path],
    clubs: dict[str, str] = TOP_CLUBS,
    delay_seconds: float = 2.0,
) -> list[AthleteRecord]:
    """Merge curated records with club squads and deduplicate."""
    players = load_manual_achievements(manual_path)

    for index, (club_qid, club_name) in enumerate(clubs.items()):
        if index and delay_seconds:
            await asyncio.sleep(delay_seconds)
        try:
            squad = await fetch_club_squad(client, club_qid, club_name)
        except UpstreamQueryError as e:
            logger.warning(f"[BUILDER] Skipping {club_name}: {e.details}")
            continue
        merge_squad(players, squad, club_name)

    merged = list(players.values())
    final = deduplicate_athletes(merged)
    logger.info(
        f"[BUILDER] {len(merged)} entries before dedup, {len(final)} after "
        f"({len(merged) - len(final)} duplicates removed)"
    )

    for name in KEY_PLAYERS:
        entries = [r for r in final if fold(r.name) == fold(name)]
        if len(entries) == 1:
            logger.info(f"[BUILDER] {name}: {entries[0].country} ({entries[0].id})")
        else:
            logger.warning(f"[BUILDER] {name}: {len(entries)} entries")

    return final


def write_database(records: list[AthleteRecord], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in records], f, ensure_ascii=False, indent=2)
    logger.info(f"[BUILDER] Saved {len(records)} players to {path}")
    return path
