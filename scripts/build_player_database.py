"""
One-off script: build data/players.json for the local achievement index.

Merges data/manual_achievements.json with squad members of the top clubs
(Wikidata SPARQL, one query per club) and deduplicates by name.

Usage:
  python scripts/build_player_database.py [--output data/players.json] [--delay 2]
"""
import argparse
import asyncio
import logging

from boxtobox.builder import TOP_CLUBS, build_database, write_database
from boxtobox.config import get_settings
from boxtobox.wikidata import WikidataClient

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
log = logging.getLogger(__name__)


async def main(manual_path: str, output: str, delay: float, clubs_only: list[str]):
    settings = get_settings()
    clubs = TOP_CLUBS
    if clubs_only:
        clubs = {qid: name for qid, name in TOP_CLUBS.items() if qid in clubs_only}

    client = WikidataClient(settings)
    try:
        players = await build_database(client, manual_path, clubs=clubs, delay_seconds=delay)
    finally:
        await client.close()

    write_database(players, output)
    log.info(
        "Done: total=%d ballon_dor=%d world_cup=%d champions_league=%d with_clubs=%d",
        len(players),
        sum(1 for p in players if p.ballon_dor),
        sum(1 for p in players if p.world_cup_winner),
        sum(1 for p in players if p.champions_league_winner),
        sum(1 for p in players if p.clubs),
    )


if __name__ == "__main__":
    settings = get_settings()
    parser = argparse.ArgumentParser()
    parser.add_argument("--manual", default=settings.MANUAL_ACHIEVEMENTS_PATH, help="Curated achievements JSON")
    parser.add_argument("--output", default=settings.PLAYERS_DB_PATH, help="Output players JSON")
    parser.add_argument("--delay", type=float, default=2.0, help="Seconds between club queries")
    parser.add_argument("--club", action="append", default=[], help="Only this club QID (repeatable)")
    args = parser.parse_args()
    asyncio.run(main(args.manual, args.output, args.delay, args.club))
